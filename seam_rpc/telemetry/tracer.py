"""
OpenTelemetry Trace Context Management

Carries the caller's trace context inside the request envelope
(``trace_context``, a W3C text-map carrier) so that handler spans on the
server join the client's trace.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Any, Iterator, Optional

from opentelemetry import context, propagate, trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

logger = logging.getLogger(__name__)


def setup_tracer(service_name: str, otlp_endpoint: str = "localhost:4317"):
    """Configure OpenTelemetry tracer

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address
    """
    provider = TracerProvider(sampler=ALWAYS_ON)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(provider)

    tracer = trace.get_tracer(service_name)

    logger.info(f"OpenTelemetry trace configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return tracer


def inject_trace_context() -> Optional[Dict[str, str]]:
    """Serialize the active trace context into a transportable carrier

    Returns:
        Dict[str, str]: ``traceparent``/``tracestate`` entries, None if no span is active
    """
    if not trace.get_current_span().get_span_context().is_valid:
        return None

    carrier: Dict[str, str] = {}
    propagate.inject(carrier)
    return carrier or None


def extract_trace_context(carrier: Optional[Dict[str, Any]]) -> Optional[context.Context]:
    """Build an OpenTelemetry context from a carrier received on the wire"""
    if not carrier:
        return None
    return propagate.extract({str(k): str(v) for k, v in carrier.items()})


@contextmanager
def with_trace_context(ctx: Optional[context.Context]) -> Iterator[None]:
    """Use ``ctx`` as the current context for the duration of the block"""
    if ctx is None:
        yield
        return

    token = context.attach(ctx)
    try:
        yield
    finally:
        context.detach(token)


def create_span(name: str, attributes: Dict[str, Any] = None, kind=trace.SpanKind.INTERNAL):
    """Create new span

    Args:
        name: Span name
        attributes: Span attributes
        kind: Span kind

    Returns:
        Context manager yielding the span
    """
    tracer = trace.get_tracer(__name__)
    return tracer.start_as_current_span(
        name,
        attributes=attributes or {},
        kind=kind,
    )
