"""
Tests for the client invocation proxy
"""
import json

import pytest
from google.protobuf import struct_pb2
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from seam_rpc.adapters.transport import ClientTransport
from seam_rpc.capability import CapabilityDescriptor, OperationDescriptor
from seam_rpc.client.proxy import STRUCTURED_ERROR_MESSAGE, RpcClient, RpcInvoker, create_proxy
from seam_rpc.errors import (
    InvalidCapabilityError,
    MalformedResponseError,
    RemoteCallError,
    TransportError,
)
from seam_rpc.server.introspection import Introspection

from sample_capabilities import Accumulator, Calculator, CalculatorHandler, Geometry, Point


class CannedTransport(ClientTransport):
    """Returns a fixed response and remembers the requests it saw"""

    def __init__(self, response):
        self.response = response if isinstance(response, str) else json.dumps(response)
        self.requests = []

    def call(self, request_text):
        self.requests.append(json.loads(request_text))
        return self.response


class FailingTransport(ClientTransport):

    def call(self, request_text):
        raise TransportError("connection refused")


class TestProxyOverLocalTransport:

    def test_introspection_proxy(self, transport):
        system = create_proxy(transport, "system", Introspection)
        assert isinstance(system, Introspection)
        assert system.method_signature("system.listMethods") == ["array"]
        assert "calc.total" in system.list_methods()
        assert system.method_help("calc.add") == ""

    def test_round_trip_matches_direct_call(self, transport):
        calc = create_proxy(transport, "calc", Calculator)
        direct = CalculatorHandler()
        assert calc.add(2, 3) == direct.add(2, 3)
        assert calc.divide(7, 2) == direct.divide(7.0, 2.0)
        assert calc.total([1, 2, 3]) == 6

    def test_void_operation(self, transport, calculator):
        calc = create_proxy(transport, "calc", Calculator)
        assert calc.reset() is None
        assert calculator.resets == 1

    def test_struct_values(self, transport):
        geo = create_proxy(transport, "geo", Geometry)
        assert geo.midpoint(Point(0, 0), Point(2, 4)) == Point(1.0, 2.0)
        assert geo.describe("tri") == {"name": "tri", "sides": [1, 2, 3]}

        document = struct_pb2.Struct()
        document.update({"b": 1, "a": "x"})
        assert geo.field_names(document) == ["a", "b"]

    def test_remote_error_message(self, transport):
        calc = create_proxy(transport, "calc", Calculator)
        with pytest.raises(RemoteCallError, match="cannot divide by zero") as info:
            calc.divide(1, 0)
        assert info.value.payload is None

    def test_several_interfaces(self, transport):
        calc = create_proxy(transport, "calc", Calculator, Accumulator)
        assert isinstance(calc, Calculator)
        assert isinstance(calc, Accumulator)
        # add(a, b) from Calculator and add(value) from Accumulator share one attribute
        assert calc.add(1, 2) == 3
        assert calc.add(5) == 5

    def test_several_interfaces_wrong_argument_count(self, transport):
        calc = create_proxy(transport, "calc", Calculator, Accumulator)
        with pytest.raises(TypeError, match="takes 1 or 2 positional arguments but 3 were given"):
            calc.add(1, 2, 3)

    def test_explicit_descriptor(self, transport):
        descriptor = CapabilityDescriptor("Adder", [
            OperationDescriptor("add", (int,), int, attribute="accumulate"),
        ])
        adder = create_proxy(transport, "calc", descriptor)
        assert adder.accumulate(5) == 5

    def test_wrong_argument_count(self, transport):
        calc = create_proxy(transport, "calc", Calculator)
        with pytest.raises(TypeError, match="takes 2 positional arguments"):
            calc.add(1)

    def test_requires_capability(self, transport):
        with pytest.raises(InvalidCapabilityError):
            create_proxy(transport, "calc")

    def test_rpc_client(self, transport):
        client = RpcClient(transport)
        assert client.call("calc.add", 4, 5) == 9
        assert client.proxy("calc", Calculator).total([2, 2]) == 4


class TestResponseHandling:

    def test_request_envelope(self):
        transport = CannedTransport({"id": 1, "result": 3})
        invoker = RpcInvoker(id_source=lambda: 42)
        create_proxy(transport, "calc", Calculator, invoker=invoker).add(1, 2)

        request = transport.requests[0]
        request.pop("trace_context", None)
        assert request == {"id": 42, "method": "calc.add", "params": [1, 2]}

    def test_random_ids(self):
        transport = CannedTransport({"id": 1, "result": 3})
        calc = create_proxy(transport, "calc", Calculator)
        calc.add(1, 2)
        calc.add(1, 2)
        ids = [request["id"] for request in transport.requests]
        assert all(isinstance(i, int) and 0 <= i < 2 ** 31 for i in ids)

    def test_response_id_is_not_checked(self):
        transport = CannedTransport({"id": "someone-else", "result": 10})
        assert create_proxy(transport, "calc", Calculator).add(1, 2) == 10

    def test_result_is_coerced_to_return_type(self):
        transport = CannedTransport({"id": 1, "result": "12"})
        assert create_proxy(transport, "calc", Calculator).add(1, 2) == 12

    def test_void_ignores_result(self):
        transport = CannedTransport({"id": 1, "result": 42})
        assert create_proxy(transport, "calc", Calculator).reset() is None

    def test_structured_error(self):
        payload = {"code": -32000, "message": "boom"}
        transport = CannedTransport({"id": 1, "error": payload})
        with pytest.raises(RemoteCallError) as info:
            create_proxy(transport, "calc", Calculator).add(1, 2)
        assert info.value.message == STRUCTURED_ERROR_MESSAGE
        assert info.value.payload == payload

    @pytest.mark.parametrize("error, message", [
        (500, "500"),
        (True, "true"),
        (2.5, "2.5"),
        ("boom", "boom"),
    ])
    def test_scalar_error(self, error, message):
        transport = CannedTransport({"id": 1, "error": error})
        with pytest.raises(RemoteCallError) as info:
            create_proxy(transport, "calc", Calculator).add(1, 2)
        assert info.value.message == message
        assert info.value.payload is None

    def test_malformed_response(self):
        transport = CannedTransport("<html>bad gateway</html>")
        with pytest.raises(MalformedResponseError):
            create_proxy(transport, "calc", Calculator).add(1, 2)

    def test_transport_error_propagates(self):
        with pytest.raises(TransportError, match="connection refused"):
            create_proxy(FailingTransport(), "calc", Calculator).add(1, 2)


@pytest.fixture(scope="module")
def span_exporter():
    """Install an in-memory span exporter on the global tracer provider"""
    exporter = InMemorySpanExporter()
    provider = trace.get_tracer_provider()
    if not isinstance(provider, TracerProvider):
        provider = TracerProvider()
        trace.set_tracer_provider(provider)
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


class TestTracePropagation:

    def test_request_carries_trace_context(self, span_exporter):
        transport = CannedTransport({"id": 1, "result": 3})
        with trace.get_tracer(__name__).start_as_current_span("outer"):
            create_proxy(transport, "calc", Calculator).add(1, 2)

        assert "traceparent" in transport.requests[0]["trace_context"]

    def test_client_span_is_propagated(self, span_exporter):
        """Without an outer span the client span is the parent"""
        transport = CannedTransport({"id": 1, "result": 3})
        create_proxy(transport, "calc", Calculator).add(1, 2)
        assert "traceparent" in transport.requests[0]["trace_context"]

    def test_server_span_joins_client_trace(self, span_exporter, transport):
        span_exporter.clear()
        calc = create_proxy(transport, "calc", Calculator)
        with trace.get_tracer(__name__).start_as_current_span("outer") as outer:
            calc.add(1, 2)
            trace_id = outer.get_span_context().trace_id

        spans = {span.name: span for span in span_exporter.get_finished_spans()}
        server_span = spans["rpc.server calc.add"]
        client_span = spans["rpc.client calc.add"]
        assert server_span.context.trace_id == trace_id
        assert server_span.parent.is_remote
        assert server_span.parent.span_id == client_span.context.span_id
