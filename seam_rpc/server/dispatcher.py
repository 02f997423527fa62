"""
Request dispatcher

Resolves an incoming request envelope against the handler registry, coerces
its parameters, invokes the handler and produces exactly one response
envelope.  No failure after the request has been read escapes ``handle`` or
``execute``; every one of them becomes ``{"id": ..., "error": "<message>"}``.
"""

import logging
import time
from typing import Any, List, Optional, Tuple

from opentelemetry import trace

from seam_rpc.adapters.transport import ServerTransport
from seam_rpc.capability import CapabilityLike, OperationDescriptor
from seam_rpc.codec import (
    RequestEnvelope,
    ResponseEnvelope,
    decode_request,
    encode_response,
    from_wire,
    to_wire,
)
from seam_rpc.errors import CoercionError, InvocationError, MalformedRequestError, RpcError, UnknownMethodError
from seam_rpc.server.introspection import Introspection, IntrospectionService
from seam_rpc.server.registry import SYSTEM_KEY, HandlerEntry, HandlerRegistry, split_method_name
from seam_rpc.telemetry.metrics import increment_counter, record_latency
from seam_rpc.telemetry.tracer import create_span, extract_trace_context, with_trace_context
from seam_rpc.wire_types import VOID

logger = logging.getLogger(__name__)

UNREADABLE_REQUEST = "unable to read request"
UNRESOLVED_METHOD = "unresolved"


def _message_of(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class RequestDispatcher:
    """JSON-RPC dispatcher with a built-in ``system`` introspection handler"""

    def __init__(self, registry: Optional[HandlerRegistry] = None):
        self.registry = registry if registry is not None else HandlerRegistry()
        self.introspection = IntrospectionService(self.registry)
        self.registry.register(SYSTEM_KEY, self.introspection, Introspection)

    def register(self, key: str, instance: Any, *capabilities: CapabilityLike) -> HandlerEntry:
        """Expose ``instance`` under ``key`` (see HandlerRegistry.register)"""
        return self.registry.register(key, instance, *capabilities)

    def execute(self, transport: ServerTransport) -> None:
        """Serve one exchange over a server transport"""
        try:
            request_text = transport.read_request()
        except Exception as e:
            logger.warning(f"{UNREADABLE_REQUEST}: {e}")
            increment_counter("rpc.server.errors", 1, {"type": "read_error"})
            response = ResponseEnvelope.failure(UNREADABLE_REQUEST)
        else:
            response = self.dispatch_text(request_text)

        response_text = encode_response(response)
        logger.debug(f"JSON-RPC <<  {response_text}")
        try:
            transport.write_response(response_text)
        except Exception as e:
            logger.warning(f"unable to write response : {response_text}: {e}")
            increment_counter("rpc.server.errors", 1, {"type": "write_error"})

    def handle(self, request_text: str) -> str:
        """Answer one request text with one response text"""
        response_text = encode_response(self.dispatch_text(request_text))
        logger.debug(f"JSON-RPC <<  {response_text}")
        return response_text

    def dispatch_text(self, request_text: str) -> ResponseEnvelope:
        logger.debug(f"JSON-RPC >>  {request_text}")
        try:
            request = decode_request(request_text)
        except MalformedRequestError as e:
            logger.warning(f"{UNREADABLE_REQUEST}: {e}")
            increment_counter("rpc.server.errors", 1, {"type": "parse_error"})
            return ResponseEnvelope.failure(UNREADABLE_REQUEST)
        return self.dispatch(request)

    def dispatch(self, request: RequestEnvelope) -> ResponseEnvelope:
        """Resolve, coerce, invoke and encode; always returns an envelope"""
        start_time = time.time()
        increment_counter("rpc.server.requests.received", 1)

        # Metric labels only ever carry registered method names
        method_label = UNRESOLVED_METHOD
        try:
            entry, operation = self._resolve(request.method, len(request.params))
            method_label = f"{entry.name}.{operation.name}"
            result = self._execute_method(request, entry, operation, method_label)
            response = ResponseEnvelope.success(request.id, result)
        except RpcError as e:
            logger.warning(f"exception occurred while executing : {request.method}: {e.message}")
            increment_counter("rpc.server.errors", 1, {"type": type(e).__name__})
            response = ResponseEnvelope.failure(e.message, request.id)
        except Exception as e:
            logger.exception(f"internal error while executing : {request.method}")
            increment_counter("rpc.server.errors", 1, {"type": "internal_error"})
            response = ResponseEnvelope.failure(_message_of(e), request.id)

        latency_ms = (time.time() - start_time) * 1000
        record_latency("rpc.server.request.latency", latency_ms, {"method": method_label})
        return response

    def _resolve(self, method: str, arity: int) -> Tuple[HandlerEntry, OperationDescriptor]:
        key, operation_name = split_method_name(method)

        entry = self.registry.lookup(key)
        if entry is None:
            raise UnknownMethodError("no such method exists")

        operation = entry.find(operation_name, arity)
        if operation is None:
            raise UnknownMethodError("no such method exists")
        return entry, operation

    @staticmethod
    def _coerce(operation: OperationDescriptor, params: List[Any]) -> List[Any]:
        try:
            return [from_wire(value, tp) for value, tp in zip(params, operation.param_types)]
        except CoercionError as e:
            raise InvocationError(e.message) from e

    def _execute_method(self,
                        request: RequestEnvelope,
                        entry: HandlerEntry,
                        operation: OperationDescriptor,
                        method_label: str) -> Any:
        args = self._coerce(operation, request.params)

        with with_trace_context(extract_trace_context(request.trace_context)):
            with create_span(f"rpc.server {method_label}",
                             {"rpc.method": method_label},
                             kind=trace.SpanKind.SERVER):
                increment_counter("rpc.server.method.calls", 1, {"method": method_label})
                try:
                    result = operation.invoke(entry.instance, args)
                except Exception as e:
                    increment_counter("rpc.server.method.errors", 1, {"method": method_label})
                    raise InvocationError(_message_of(e)) from e

        if operation.return_category == VOID:
            return None
        try:
            return to_wire(result)
        except CoercionError as e:
            raise InvocationError(e.message) from e
