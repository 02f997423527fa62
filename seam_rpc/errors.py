"""
Error model shared by the dispatcher, the registry and the client proxy.

Only the message of a dispatch error reaches the wire; the class hierarchy
exists so that callers can branch on the kind of failure locally.
"""

from typing import Any


class RpcError(Exception):
    """Base class for every error raised by seam_rpc.

    Args:
        message: Human readable message, this is what ends up in ``error``
        payload: Optional raw structured value attached to the error
    """

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.payload = payload


class MalformedRequestError(RpcError):
    """The request text could not be read as an envelope."""


class MalformedResponseError(RpcError):
    """The response text could not be read as an envelope."""


class InvalidMethodNameError(RpcError):
    """The method string does not look like ``key.operation``."""


class UnknownMethodError(RpcError):
    """No handler key, or no operation with that name and arity."""


class InvocationError(RpcError):
    """The handler operation raised, or a parameter could not be coerced."""


class CoercionError(RpcError, ValueError):
    """A wire value cannot be converted to the declared Python type."""


class RegistrationError(RpcError):
    """Raised by the registry; never raised while dispatching."""


class DuplicateHandlerError(RegistrationError):
    """The registry key is already bound."""


class InvalidCapabilityError(RegistrationError):
    """A capability descriptor is not a pure operation contract."""


class RegistryFrozenError(RegistrationError):
    """Registration attempted after the registry was frozen."""


class TransportError(RpcError):
    """The transport failed to deliver a request or a response."""


class RemoteCallError(RpcError):
    """The remote side answered with an ``error`` field."""
