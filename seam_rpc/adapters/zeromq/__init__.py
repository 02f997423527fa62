"""
ZeroMQ Adapter Package

REQ/REP transports carrying the JSON-RPC envelopes.
"""

from seam_rpc.adapters.zeromq.client import ZeroMQClientTransport
from seam_rpc.adapters.zeromq.server import ZeroMQServer

__all__ = ["ZeroMQClientTransport", "ZeroMQServer"]
