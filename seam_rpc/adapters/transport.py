"""
Transport contracts

The dispatcher and the client proxy only exchange request/response text; how
that text travels is up to these two minimal interfaces.
"""

import abc


class ClientTransport(abc.ABC):
    """Client side: send a request text, get the response text back"""

    @abc.abstractmethod
    def call(self, request_text: str) -> str:
        """Send one request and block until its response arrives

        Args:
            request_text: Encoded request envelope

        Returns:
            str: Encoded response envelope

        Raises:
            TransportError: The exchange failed
        """
        pass

    def close(self) -> None:
        """Release connections held by the transport"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class ServerTransport(abc.ABC):
    """Server side: one inbound request and the slot for its response"""

    @abc.abstractmethod
    def read_request(self) -> str:
        """Return the request text of this exchange"""
        pass

    @abc.abstractmethod
    def write_response(self, response_text: str) -> None:
        """Deliver the response text of this exchange"""
        pass
