"""
HTTP client transport

POSTs the request text to a fixed URL and returns the body of a 200 response.
"""

import logging
import time
from typing import Dict, Optional

import httpx

from seam_rpc.adapters.transport import ClientTransport
from seam_rpc.errors import TransportError
from seam_rpc.telemetry.metrics import increment_counter, record_latency

logger = logging.getLogger(__name__)


class HttpClientTransport(ClientTransport):
    """JSON-RPC over HTTP POST

    Args:
        url: Endpoint receiving the requests
        headers: Extra headers sent with every request
        timeout_s: Request timeout in seconds
        client: Pre-built httpx.Client (owned by the caller)
    """

    def __init__(self,
                 url: str,
                 headers: Optional[Dict[str, str]] = None,
                 timeout_s: float = 30.0,
                 client: Optional[httpx.Client] = None):
        self.url = url
        self.headers: Dict[str, str] = dict(headers or {})
        self._client = client or httpx.Client(timeout=timeout_s)
        self._owns_client = client is None

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def call(self, request_text: str) -> str:
        headers = {"Content-Type": "application/json"}
        headers.update(self.headers)
        start_time = time.time()

        try:
            response = self._client.post(self.url, content=request_text.encode("utf-8"), headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"HTTP request to {self.url} failed: {e}")
            increment_counter("rpc.client.errors", 1, {"type": "http_error"})
            raise TransportError(f"HTTP request failed: {e}") from e

        record_latency("rpc.client.transport.latency", (time.time() - start_time) * 1000, {"transport": "http"})

        if response.status_code != httpx.codes.OK:
            increment_counter("rpc.client.errors", 1, {"type": "http_status", "code": str(response.status_code)})
            raise TransportError(f"unexpected status code returned : {response.status_code}")

        return response.text
