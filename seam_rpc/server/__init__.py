"""
Server side: handler registry, request dispatcher and the built-in
``system`` introspection handler.
"""

from .registry import SYSTEM_KEY, HandlerEntry, HandlerRegistry, split_method_name
from .introspection import Introspection, IntrospectionService
from .dispatcher import RequestDispatcher, UNREADABLE_REQUEST

__all__ = [
    "SYSTEM_KEY",
    "HandlerEntry",
    "HandlerRegistry",
    "split_method_name",
    "Introspection",
    "IntrospectionService",
    "RequestDispatcher",
    "UNREADABLE_REQUEST",
]
