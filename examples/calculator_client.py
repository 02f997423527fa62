#!/usr/bin/env python
"""
Calculator Client Example

Calls the example server through a typed proxy.
"""

import logging

from seam_rpc.adapters.adapter_factory import AdapterFactory
from seam_rpc.client.proxy import RpcClient
from seam_rpc.config import RpcConfig
from seam_rpc.errors import RemoteCallError, TransportError
from seam_rpc.server.introspection import Introspection

from calculator_api import Calculator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    config = RpcConfig.from_env()
    client = RpcClient(AdapterFactory.create_client_transport(config))

    try:
        system = client.proxy("system", Introspection)
        for method in system.list_methods():
            logger.info(f"{method}: {system.method_signature(method)}")

        calc = client.proxy("calc", Calculator)
        logger.info(f"2 + 3 = {calc.add(2, 3)}")
        logger.info(f"total = {calc.total([1, 2, 3, 4])}")

        try:
            calc.divide(1, 0)
        except RemoteCallError as e:
            logger.info(f"Remote error: {e.message}")

    except TransportError as e:
        logger.error(f"Server unreachable: {e}")
    finally:
        client.close()


if __name__ == "__main__":
    main()
