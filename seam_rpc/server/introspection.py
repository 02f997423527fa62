"""
Introspection service

Built-in handler bound under the ``system`` key.  It answers meta-queries
about the registry through the same dispatch path as ordinary calls.
"""

import abc
from typing import List

from seam_rpc.capability import rpc_method
from seam_rpc.errors import UnknownMethodError
from seam_rpc.server.registry import HandlerRegistry, split_method_name


class Introspection(abc.ABC):
    """Contract of the ``system`` handler"""

    @rpc_method("listMethods")
    @abc.abstractmethod
    def list_methods(self) -> List[str]:
        """Every ``key.operation`` in the registry, sorted and de-duplicated"""

    @rpc_method("methodSignature")
    @abc.abstractmethod
    def method_signature(self, method: str) -> List[str]:
        """Sorted ``"return,param,..."`` strings of every overload of ``method``"""

    @rpc_method("methodHelp")
    @abc.abstractmethod
    def method_help(self, method: str) -> str:
        """Free-text documentation of ``method``"""


class IntrospectionService(Introspection):

    def __init__(self, registry: HandlerRegistry):
        self.registry = registry

    def list_methods(self) -> List[str]:
        methods = set()
        for entry in self.registry.entries():
            for operation_name in entry.operation_names():
                methods.add(f"{entry.name}.{operation_name}")
        return sorted(methods)

    def method_signature(self, method: str) -> List[str]:
        key, operation_name = split_method_name(method)

        entry = self.registry.lookup(key)
        if entry is None:
            raise UnknownMethodError("no such method exists")

        signatures = sorted(set(entry.signatures.get(operation_name, ())))
        if not signatures:
            raise UnknownMethodError("no such method exists")
        return signatures

    def method_help(self, method: str) -> str:
        # No help text is modelled yet
        return ""
