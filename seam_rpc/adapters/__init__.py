"""
Transport adapters

- transport: client/server transport contracts
- local: in-process loopback
- http: HTTP POST client transport
- zeromq: REQ/REP client transport and server
"""

from .transport import ClientTransport, ServerTransport
from .local import LocalTransport, StringServerTransport
from .http import HttpClientTransport
from .zeromq import ZeroMQClientTransport, ZeroMQServer
from .adapter_factory import AdapterFactory

__all__ = [
    "AdapterFactory",
    "ClientTransport",
    "ServerTransport",
    "LocalTransport",
    "StringServerTransport",
    "HttpClientTransport",
    "ZeroMQClientTransport",
    "ZeroMQServer",
]
