#!/usr/bin/env python
"""
Calculator Server Example

Exposes a Calculator handler under the ``calc`` key.  Transport and telemetry
come from the SEAM_RPC_* environment variables (ZeroMQ on tcp://*:5555 by default).
"""

import logging
import signal
import sys

from seam_rpc.adapters.adapter_factory import AdapterFactory
from seam_rpc.config import RpcConfig
from seam_rpc.server.dispatcher import RequestDispatcher
from seam_rpc.telemetry.metrics import setup_metrics
from seam_rpc.telemetry.tracer import setup_tracer

from calculator_api import Calculator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class CalculatorHandler(Calculator):

    def add(self, a, b):
        return a + b

    def divide(self, a, b):
        if b == 0:
            raise ValueError("cannot divide by zero")
        return a / b

    def total(self, values):
        return sum(values)


def main():
    """Start calculator server example"""
    config = RpcConfig.from_env()
    if config.enable_tracing:
        setup_tracer(config.service_name, config.otlp_endpoint)
        setup_metrics(config.service_name, config.otlp_endpoint)

    dispatcher = RequestDispatcher()
    dispatcher.register("calc", CalculatorHandler(), Calculator)
    dispatcher.registry.freeze()

    server = AdapterFactory.create_server(dispatcher, config)

    def handle_sigint(sig, frame):
        logger.info("Received exit signal, stopping server...")
        server.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_sigint)

    logger.info(f"Serving {dispatcher.introspection.list_methods()} on {server.bind_address}")
    try:
        server.start(threaded=False)
    finally:
        server.close()

    logger.info("Server stopped")


if __name__ == "__main__":
    main()
