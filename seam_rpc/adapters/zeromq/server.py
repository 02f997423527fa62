"""
ZeroMQ server

Receives request texts on a REP socket and answers each one through a
RequestDispatcher, optionally in a background thread.
"""

import logging
import threading
import time

import zmq

from seam_rpc.adapters.transport import ServerTransport
from seam_rpc.telemetry.metrics import increment_counter

logger = logging.getLogger(__name__)


class _ReplyExchange(ServerTransport):
    """One request received on the REP socket and its reply slot"""

    def __init__(self, socket, request_bytes: bytes):
        self.socket = socket
        self.request_bytes = request_bytes

    def read_request(self) -> str:
        return self.request_bytes.decode("utf-8")

    def write_response(self, response_text: str) -> None:
        self.socket.send(response_text.encode("utf-8"))


class ZeroMQServer:
    """REP socket server driving a dispatcher

    Args:
        dispatcher: Object with an ``execute(server_transport)`` method
        bind_address: Address the REP socket binds to; ``tcp://host:*`` picks a free port
    """

    def __init__(self, dispatcher, bind_address: str = "tcp://*:5555"):
        self.dispatcher = dispatcher
        self.running = False
        self.server_thread = None
        self.context = zmq.Context()

        self.socket = self.context.socket(zmq.REP)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.bind(bind_address)
        self.bind_address = self.socket.getsockopt_string(zmq.LAST_ENDPOINT)

        increment_counter("rpc.server.started", 1)
        logger.info(f"ZeroMQ server bound to {self.bind_address}")

    def start(self, threaded: bool = True):
        """Start serving

        Args:
            threaded: Run the receive loop in a daemon thread
        """
        self.running = True

        if threaded:
            self.server_thread = threading.Thread(target=self._run_server, daemon=True)
            self.server_thread.start()
            logger.info("ZeroMQ server started in background thread")
        else:
            logger.info("ZeroMQ server started in main thread")
            self._run_server()

    def stop(self):
        self.running = False
        if self.server_thread is not None:
            self.server_thread.join(timeout=1.0)
            self.server_thread = None
            logger.info("ZeroMQ server stopped")

    def close(self):
        self.stop()
        self.socket.close()
        if not self.context.closed:
            self.context.term()

    def _run_server(self):
        while self.running:
            try:
                request_bytes = self.socket.recv(flags=zmq.NOBLOCK)
            except zmq.error.Again:
                time.sleep(0.001)
                continue
            except zmq.error.ZMQError as e:
                if not self.running:
                    break
                logger.error(f"Error in server loop: {e}")
                increment_counter("rpc.server.errors", 1, {"type": "loop_error"})
                time.sleep(0.1)
                continue

            self.dispatcher.execute(_ReplyExchange(self.socket, request_bytes))
