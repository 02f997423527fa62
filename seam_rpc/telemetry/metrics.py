"""
OpenTelemetry Metrics Collection

Counters and latency histograms for the dispatcher, the client proxy and the
transports.  Until ``setup_metrics`` installs a MeterProvider the OpenTelemetry
API hands out no-op instruments, so recording is always safe.
"""

import logging
import threading
from typing import Dict, Any

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    PeriodicExportingMetricReader
)
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

logger = logging.getLogger(__name__)

_METER_NAME = "seam_rpc"

# Instruments are created lazily and shared by name
_counters = {}
_histograms = {}
_lock = threading.Lock()


def setup_metrics(service_name: str,
                  otlp_endpoint: str = "localhost:4317",
                  export_interval_ms: int = 5000,
                  console: bool = False):
    """Configure OpenTelemetry metrics collection

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address
        export_interval_ms: Metrics export interval in milliseconds
        console: Also print metrics to stdout (development)

    Returns:
        Meter: Meter for the service
    """
    readers = [
        PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=otlp_endpoint),
            export_interval_millis=export_interval_ms
        )
    ]
    if console:
        readers.append(PeriodicExportingMetricReader(
            ConsoleMetricExporter(),
            export_interval_millis=export_interval_ms
        ))

    metrics.set_meter_provider(MeterProvider(metric_readers=readers))
    meter = metrics.get_meter(service_name)

    logger.info(f"OpenTelemetry metrics configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return meter


def _instrument(registry: Dict[str, Any], name: str, factory: str, description: str, unit: str):
    # Dispatch may run on several server threads; create each instrument once
    instrument = registry.get(name)
    if instrument is None:
        with _lock:
            instrument = registry.get(name)
            if instrument is None:
                meter = metrics.get_meter(_METER_NAME)
                instrument = getattr(meter, factory)(name=name, description=description, unit=unit)
                registry[name] = instrument
    return instrument


def get_counter(name: str, description: str, unit: str = "1"):
    """Get or create counter"""
    return _instrument(_counters, name, "create_counter", description, unit)


def get_histogram(name: str, description: str, unit: str = "ms"):
    """Get or create histogram"""
    return _instrument(_histograms, name, "create_histogram", description, unit)


def increment_counter(name: str, amount: int = 1, attributes: Dict[str, Any] = None):
    """Increment counter value

    Args:
        name: Counter name, e.g. ``rpc.server.errors``
        amount: Amount to increment
        attributes: Attribute labels such as ``method`` or error ``type``
    """
    get_counter(name, f"seam_rpc counter {name}").add(amount, attributes or {})


def record_latency(name: str, value_ms: float, attributes: Dict[str, Any] = None):
    """Record one call duration in milliseconds"""
    get_histogram(name, f"seam_rpc latency of {name}").record(value_ms, attributes or {})
