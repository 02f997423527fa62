"""
Client side: typed proxies over a ClientTransport.
"""

from .proxy import RpcClient, RpcInvoker, create_proxy, random_request_id

__all__ = ["RpcClient", "RpcInvoker", "create_proxy", "random_request_id"]
