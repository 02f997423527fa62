"""
ZeroMQ client transport

Sends each request over a REQ socket and waits for the matching reply.
"""

import logging
import time

import zmq

from seam_rpc.adapters.transport import ClientTransport
from seam_rpc.errors import TransportError
from seam_rpc.telemetry.metrics import increment_counter, record_latency

logger = logging.getLogger(__name__)


class ZeroMQClientTransport(ClientTransport):
    """REQ socket transport

    A REQ socket that timed out cannot send again, so it is replaced before
    the error is raised.
    """

    def __init__(self,
                 server_address: str = "tcp://localhost:5555",
                 timeout_ms: int = 5000):
        """Initialize ZeroMQ client transport

        Args:
            server_address: ZeroMQ server address
            timeout_ms: Receive timeout in milliseconds
        """
        self.server_address = server_address
        self.timeout_ms = timeout_ms
        self.context = zmq.Context()
        self.socket = None
        self._connect()
        logger.info(f"ZeroMQ client connected to {server_address}")

    def _connect(self):
        self.socket = self.context.socket(zmq.REQ)
        self.socket.setsockopt(zmq.RCVTIMEO, self.timeout_ms)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(self.server_address)

    def close(self):
        if self.socket is not None:
            self.socket.close()
            self.socket = None
        if not self.context.closed:
            self.context.term()

    def call(self, request_text: str) -> str:
        if self.socket is None:
            raise TransportError("transport is closed")

        start_time = time.time()
        try:
            self.socket.send(request_text.encode("utf-8"))
            response_bytes = self.socket.recv()
        except zmq.error.Again:
            latency_ms = (time.time() - start_time) * 1000
            logger.error(f"Request timed out after {latency_ms:.2f}ms")
            increment_counter("rpc.client.errors", 1, {"type": "timeout"})
            self.socket.close()
            self._connect()
            raise TransportError(f"ZeroMQ request timed out ({self.timeout_ms}ms)")
        except zmq.error.ZMQError as e:
            logger.error(f"ZeroMQ error: {e}")
            increment_counter("rpc.client.errors", 1, {"type": "zmq_error"})
            raise TransportError(f"ZeroMQ connection error: {e}") from e

        record_latency("rpc.client.transport.latency", (time.time() - start_time) * 1000, {"transport": "zeromq"})
        return response_bytes.decode("utf-8")
