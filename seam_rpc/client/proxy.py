"""
Client invocation proxy

``create_proxy`` returns an object implementing one or more capability
interfaces; each of its methods builds a request envelope, sends it through a
ClientTransport and decodes the answer into the declared return type.
"""

import functools
import json
import logging
import random
import time
import types
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from opentelemetry import trace

from seam_rpc.adapters.transport import ClientTransport
from seam_rpc.capability import CapabilityDescriptor, CapabilityLike, OperationDescriptor, as_descriptor
from seam_rpc.codec import RequestEnvelope, ResponseEnvelope, decode_response, encode_request, from_wire, to_wire
from seam_rpc.errors import InvalidCapabilityError, RemoteCallError
from seam_rpc.telemetry.metrics import increment_counter, record_latency
from seam_rpc.telemetry.tracer import create_span, inject_trace_context
from seam_rpc.wire_types import VOID

logger = logging.getLogger(__name__)

STRUCTURED_ERROR_MESSAGE = "error occurred, check payload"

_MAX_ID = 2 ** 31 - 1


def random_request_id() -> int:
    return random.randrange(_MAX_ID)


class RpcInvoker:
    """Shared routine behind every proxy method

    Response ids are not compared with request ids: one call is in flight per
    transport at a time.

    Args:
        id_source: Callable producing correlation ids
    """

    def __init__(self, id_source: Optional[Callable[[], Any]] = None):
        self.id_source = id_source or random_request_id

    def _exchange(self, transport: ClientTransport, method: str, params: Sequence[Any]) -> ResponseEnvelope:
        start_time = time.time()
        increment_counter("rpc.client.requests", 1, {"method": method})

        with create_span(f"rpc.client {method}", {"rpc.method": method}, kind=trace.SpanKind.CLIENT):
            request = RequestEnvelope(
                id=self.id_source(),
                method=method,
                params=[to_wire(param) for param in params],
                trace_context=inject_trace_context(),
            )
            request_text = encode_request(request)
            logger.debug(f"JSON-RPC >>  {request_text}")
            response_text = transport.call(request_text)
            logger.debug(f"JSON-RPC <<  {response_text}")

        record_latency("rpc.client.latency", (time.time() - start_time) * 1000, {"method": method})

        response = decode_response(response_text)
        if response.is_error:
            increment_counter("rpc.client.errors", 1, {"type": "rpc_error", "method": method})
            error = response.error
            if isinstance(error, (dict, list)):
                raise RemoteCallError(STRUCTURED_ERROR_MESSAGE, payload=error)
            raise RemoteCallError(error if isinstance(error, str) else json.dumps(error))

        increment_counter("rpc.client.success", 1, {"method": method})
        return response

    def call(self, transport: ClientTransport, method: str, params: Iterable[Any] = ()) -> Any:
        """Untyped call: returns the raw wire ``result``"""
        return self._exchange(transport, method, list(params)).result

    def invoke(self, transport: ClientTransport, key: str, operation: OperationDescriptor, args: Sequence[Any]) -> Any:
        """Typed call of ``operation`` on the handler bound to ``key``

        Raises:
            RemoteCallError: The response carried an ``error``
            MalformedResponseError: The response text is not an envelope
            CoercionError: An argument or the result does not fit its type
            TransportError: Raised by the transport, unchanged
        """
        response = self._exchange(transport, f"{key}.{operation.name}", args)
        if operation.return_category == VOID:
            return None
        return from_wire(response.result, operation.return_type)


def _make_method(attribute: str, operations: Tuple[OperationDescriptor, ...]):
    arities = sorted({operation.arity for operation in operations})
    expected = " or ".join(str(arity) for arity in arities)

    def method(self, *args):
        # Same rule as the server side: first declared operation with this arity
        for operation in operations:
            if operation.arity == len(args):
                return self._invoker.invoke(self._transport, self._key, operation, args)
        raise TypeError(f"{attribute}() takes {expected} positional arguments but {len(args)} were given")

    method.__name__ = attribute
    method.__doc__ = "\n".join(
        f"Remote call of '{operation.name}' ({operation.signature})" for operation in operations)
    return method


def _proxy_init(self, transport: ClientTransport, key: str, invoker: RpcInvoker):
    self._transport = transport
    self._key = key
    self._invoker = invoker


def _proxy_repr(self):
    return f"<{type(self).__name__} key={self._key!r}>"


@functools.lru_cache(maxsize=None)
def _proxy_class(capabilities: Tuple[Tuple[CapabilityDescriptor, Optional[type]], ...]) -> type:
    descriptors = [descriptor for descriptor, _ in capabilities]
    bases = tuple(interface for _, interface in capabilities if interface is not None) or (object,)

    overloads: Dict[str, List[OperationDescriptor]] = {}
    for descriptor in descriptors:
        for operation in descriptor.operations:
            overloads.setdefault(operation.attribute, []).append(operation)

    namespace = {"__init__": _proxy_init, "__repr__": _proxy_repr}
    for attribute, operations in overloads.items():
        namespace[attribute] = _make_method(attribute, tuple(operations))

    name = "".join(descriptor.name for descriptor in descriptors) + "Proxy"
    return types.new_class(name, bases, exec_body=lambda ns: ns.update(namespace))


def create_proxy(transport: ClientTransport,
                 key: str,
                 *capabilities: CapabilityLike,
                 invoker: Optional[RpcInvoker] = None) -> Any:
    """Build a local stand-in for the handler bound to ``key``

    Args:
        transport: Transport carrying the calls
        key: Registry key of the remote handler
        capabilities: Interface classes or CapabilityDescriptor objects
        invoker: Shared invoke routine, a fresh RpcInvoker by default

    Returns:
        An instance of every interface given, whose methods call the remote side
    """
    if not capabilities:
        raise InvalidCapabilityError("at least one capability has to be mentioned")

    descriptors = tuple(as_descriptor(capability) for capability in capabilities)
    for descriptor in descriptors:
        descriptor.verify()

    proxy_class = _proxy_class(tuple((d, d.interface) for d in descriptors))
    return proxy_class(transport, key, invoker or RpcInvoker())


class RpcClient:
    """Convenience wrapper holding a transport and an invoker"""

    def __init__(self, transport: ClientTransport, invoker: Optional[RpcInvoker] = None):
        self.transport = transport
        self.invoker = invoker or RpcInvoker()

    def proxy(self, key: str, *capabilities: CapabilityLike) -> Any:
        return create_proxy(self.transport, key, *capabilities, invoker=self.invoker)

    def call(self, method: str, *params: Any) -> Any:
        return self.invoker.call(self.transport, method, params)

    def close(self) -> None:
        self.transport.close()
