"""
seam_rpc: a bidirectional JSON-RPC runtime

Server side, a registry exposes operations of handler objects and a dispatcher
answers request envelopes against it.  Client side, a proxy turns a remote
capability into a locally callable object.  Both only exchange text through a
transport:

1. Envelope: ``{"id", "method": "key.operation", "params": [...]}`` answered by
   ``{"id", "result"}`` or ``{"id", "error"}``
2. Transports: in-process loopback, HTTP POST, ZeroMQ REQ/REP
3. Telemetry: OpenTelemetry spans and metrics around every call
"""

from seam_rpc.capability import CapabilityDescriptor, OperationDescriptor, rpc_method
from seam_rpc.client import RpcClient, RpcInvoker, create_proxy
from seam_rpc.errors import (
    RpcError,
    MalformedRequestError,
    MalformedResponseError,
    InvalidMethodNameError,
    UnknownMethodError,
    InvocationError,
    CoercionError,
    RegistrationError,
    DuplicateHandlerError,
    InvalidCapabilityError,
    RegistryFrozenError,
    TransportError,
    RemoteCallError,
)
from seam_rpc.server import HandlerRegistry, RequestDispatcher, SYSTEM_KEY

__version__ = "0.1.0"

__all__ = [
    "CapabilityDescriptor",
    "OperationDescriptor",
    "rpc_method",
    "RpcClient",
    "RpcInvoker",
    "create_proxy",
    "HandlerRegistry",
    "RequestDispatcher",
    "SYSTEM_KEY",
    "RpcError",
    "MalformedRequestError",
    "MalformedResponseError",
    "InvalidMethodNameError",
    "UnknownMethodError",
    "InvocationError",
    "CoercionError",
    "RegistrationError",
    "DuplicateHandlerError",
    "InvalidCapabilityError",
    "RegistryFrozenError",
    "TransportError",
    "RemoteCallError",
]
