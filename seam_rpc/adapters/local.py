"""
In-process transports

``LocalTransport`` hands each request straight to a dispatcher in the same
process, which is how the client proxy is exercised without a network.
"""

from typing import Optional

from seam_rpc.adapters.transport import ClientTransport, ServerTransport
from seam_rpc.errors import TransportError


class StringServerTransport(ServerTransport):
    """Server transport over a request string already in memory"""

    def __init__(self, request_text: str):
        self.request_text = request_text
        self.response_text: Optional[str] = None

    def read_request(self) -> str:
        return self.request_text

    def write_response(self, response_text: str) -> None:
        self.response_text = response_text


class LocalTransport(ClientTransport):
    """Client transport bound to a RequestDispatcher in this process"""

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    def call(self, request_text: str) -> str:
        exchange = StringServerTransport(request_text)
        self.dispatcher.execute(exchange)
        if exchange.response_text is None:
            raise TransportError("dispatcher produced no response")
        return exchange.response_text
