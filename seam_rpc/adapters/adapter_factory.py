"""
Transport factory

Creates client transports and servers from an RpcConfig, so application code
does not depend on the concrete transport.
"""

import logging
from typing import Optional

from seam_rpc.adapters.http import HttpClientTransport
from seam_rpc.adapters.local import LocalTransport
from seam_rpc.adapters.transport import ClientTransport
from seam_rpc.adapters.zeromq.client import ZeroMQClientTransport
from seam_rpc.adapters.zeromq.server import ZeroMQServer
from seam_rpc.config import AdapterType, RpcConfig

logger = logging.getLogger(__name__)


class AdapterFactory:
    """Factory for transports"""

    @staticmethod
    def create_client_transport(config: Optional[RpcConfig] = None, dispatcher=None) -> ClientTransport:
        """Create a client transport

        Args:
            config: Transport settings, read from the environment when omitted
            dispatcher: In-process dispatcher, required for the local adapter

        Returns:
            ClientTransport: Transport instance

        Raises:
            ValueError: Unsupported adapter, or local adapter without dispatcher
        """
        if config is None:
            config = RpcConfig.from_env()

        logger.debug(f"Creating {config.adapter.value} client transport for {config.endpoint}")

        if config.adapter == AdapterType.ZEROMQ:
            return ZeroMQClientTransport(server_address=config.endpoint, timeout_ms=config.timeout_ms)
        elif config.adapter == AdapterType.HTTP:
            return HttpClientTransport(config.endpoint, headers=config.headers,
                                       timeout_s=config.timeout_ms / 1000.0)
        elif config.adapter == AdapterType.LOCAL:
            if dispatcher is None:
                raise ValueError("local adapter requires a dispatcher")
            return LocalTransport(dispatcher)
        else:
            raise ValueError(f"Unsupported adapter: {config.adapter}")

    @staticmethod
    def create_server(dispatcher, config: Optional[RpcConfig] = None) -> ZeroMQServer:
        """Create a server exposing ``dispatcher``

        Raises:
            ValueError: The adapter has no server side in this package
        """
        if config is None:
            config = RpcConfig.from_env()

        if config.adapter == AdapterType.ZEROMQ:
            return ZeroMQServer(dispatcher, bind_address=config.bind_address)
        raise ValueError(f"No server available for adapter: {config.adapter.value}")
