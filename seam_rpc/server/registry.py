"""
Handler registry

Binds a registry key to a handler instance and the operations it exposes.
Registration swaps in a new mapping under a lock, so a dispatch always reads
a consistent snapshot without taking the lock itself.
"""

import logging
import re
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from seam_rpc.capability import CapabilityDescriptor, CapabilityLike, OperationDescriptor, as_descriptor
from seam_rpc.errors import (
    DuplicateHandlerError,
    InvalidCapabilityError,
    InvalidMethodNameError,
    RegistryFrozenError,
)

logger = logging.getLogger(__name__)

SYSTEM_KEY = "system"


@dataclass(frozen=True)
class HandlerEntry:
    """A bound handler

    Attributes:
        name: Registry key
        instance: Handler object the operations are invoked on
        operations: Pooled operations, descriptor order then declaration order
        signatures: Operation name -> signature strings, in declaration order
    """

    name: str
    instance: Any
    operations: Tuple[OperationDescriptor, ...]
    signatures: Mapping[str, Tuple[str, ...]]

    @classmethod
    def build(cls, name: str, instance: Any, capabilities: Tuple[CapabilityDescriptor, ...]) -> "HandlerEntry":
        if instance is None:
            raise InvalidCapabilityError("handler instance is required")
        if not capabilities:
            raise InvalidCapabilityError("at least one capability has to be mentioned")

        operations: List[OperationDescriptor] = []
        signatures: Dict[str, List[str]] = {}
        for capability in capabilities:
            capability.verify()
            for operation in capability.operations:
                if operation.bind(instance) is None:
                    raise InvalidCapabilityError(
                        f"handler {type(instance).__name__} does not implement "
                        f"'{operation.attribute}' of {capability.name}")
                if operation not in operations:
                    operations.append(operation)
                signatures.setdefault(operation.name, []).append(operation.signature)

        return cls(
            name=name,
            instance=instance,
            operations=tuple(operations),
            signatures={op: tuple(signs) for op, signs in signatures.items()},
        )

    def find(self, operation_name: str, arity: int) -> Optional[OperationDescriptor]:
        """First operation with this name and parameter count"""
        for operation in self.operations:
            if operation.name == operation_name and operation.arity == arity:
                return operation
        return None

    def operation_names(self) -> List[str]:
        return list(self.signatures)


class HandlerRegistry:
    """Registry key -> HandlerEntry"""

    def __init__(self):
        self._entries: Mapping[str, HandlerEntry] = {}
        self._lock = threading.Lock()
        self._frozen = False

    def register(self, key: str, instance: Any, *capabilities: CapabilityLike) -> HandlerEntry:
        """Bind ``key`` to ``instance`` exposing the given capabilities

        Args:
            key: Registry key, the first half of ``key.operation``
            instance: Handler object
            capabilities: Interface classes or CapabilityDescriptor objects

        Raises:
            DuplicateHandlerError: ``key`` is already bound
            InvalidCapabilityError: A capability is not a usable contract
            RegistryFrozenError: The registry no longer accepts handlers
        """
        entry = HandlerEntry.build(key, instance, tuple(as_descriptor(c) for c in capabilities))

        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(f"registry is frozen, cannot register '{key}'")
            if key in self._entries:
                raise DuplicateHandlerError("handler already exists")
            entries = dict(self._entries)
            entries[key] = entry
            self._entries = entries

        logger.debug(f"Registered handler '{key}' with operations {entry.operation_names()}")
        return entry

    def freeze(self) -> None:
        """End the setup phase; later registrations fail"""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, key: str) -> Optional[HandlerEntry]:
        return self._entries.get(key)

    def keys(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> List[HandlerEntry]:
        return list(self._entries.values())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))


METHOD_PATTERN = re.compile(r"([_a-zA-Z][_a-zA-Z0-9]*)\.([_a-zA-Z][_a-zA-Z0-9]*)")


def split_method_name(method: Any) -> Tuple[str, str]:
    """Split ``"key.operation"``

    Raises:
        InvalidMethodNameError: ``method`` is not two dot-separated identifiers
    """
    match = METHOD_PATTERN.fullmatch(method) if isinstance(method, str) else None
    if match is None:
        raise InvalidMethodNameError("invalid method name")
    return match.group(1), match.group(2)
