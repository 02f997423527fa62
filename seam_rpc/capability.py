"""
Capability descriptors

A capability is a named set of operations, each with an ordered list of
parameter annotations and a return annotation.  Descriptors are built once,
either by reading an interface class or by listing operations by hand, and are
then used both to validate handlers at registration and to type client calls.
"""

import functools
import inspect
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Tuple, Union

from seam_rpc.errors import InvalidCapabilityError
from seam_rpc.wire_types import classify, is_allowed

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def rpc_method(name: str) -> Callable:
    """Expose an interface method under a different wire name

    Example::

        class Introspection(abc.ABC):
            @rpc_method("listMethods")
            @abc.abstractmethod
            def list_methods(self) -> List[str]: ...
    """
    def decorator(func):
        func.__rpc_name__ = name
        return func
    return decorator


@dataclass(frozen=True)
class OperationDescriptor:
    """One operation of a capability

    Attributes:
        name: Wire name of the operation (second half of ``key.operation``)
        param_types: Full parameter annotations, in call order
        return_type: Full return annotation (``NoneType`` for void)
        attribute: Python attribute implementing the operation on a handler
    """

    name: str
    param_types: Tuple[Any, ...] = ()
    return_type: Any = type(None)
    attribute: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "param_types", tuple(self.param_types))
        if self.attribute is None:
            object.__setattr__(self, "attribute", self.name)

    @property
    def arity(self) -> int:
        return len(self.param_types)

    @property
    def param_categories(self) -> Tuple[str, ...]:
        return tuple(classify(tp) for tp in self.param_types)

    @property
    def return_category(self) -> str:
        return classify(self.return_type)

    @property
    def signature(self) -> str:
        """``"returnType,paramType1,paramType2,..."`` in wire-type names"""
        return ",".join((self.return_category,) + self.param_categories)

    def check_admissible(self, owner: str = "") -> None:
        """Raise InvalidCapabilityError unless every annotation is allowed"""
        where = f"{owner}.{self.name}" if owner else self.name
        if not is_allowed(self.return_type):
            raise InvalidCapabilityError(
                f"unsupported return type '{self.return_type}' for method : {where}")
        for param_type in self.param_types:
            if not is_allowed(param_type):
                raise InvalidCapabilityError(
                    f"unsupported parameter type '{param_type}' for method : {where}")

    def bind(self, instance: Any) -> Optional[Callable]:
        """Return the callable implementing this operation on ``instance``, if any"""
        target = getattr(instance, self.attribute, None)
        return target if callable(target) else None

    def invoke(self, instance: Any, args: Iterable[Any]) -> Any:
        return getattr(instance, self.attribute)(*args)


@dataclass(frozen=True)
class CapabilityDescriptor:
    """A named, ordered table of operations"""

    name: str
    operations: Tuple[OperationDescriptor, ...]
    interface: Optional[type] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "operations", tuple(self.operations))

    @classmethod
    def from_interface(cls, interface: type) -> "CapabilityDescriptor":
        """Build the descriptor of an interface class (cached per class)"""
        if not isinstance(interface, type):
            raise InvalidCapabilityError(f"capability should be a class : {interface!r}")
        return _describe_interface(interface)

    def verify(self) -> None:
        if not self.operations:
            raise InvalidCapabilityError(f"capability declares no operations : {self.name}")
        for operation in self.operations:
            operation.check_admissible(self.name)

    def operation_names(self) -> Tuple[str, ...]:
        return tuple(op.name for op in self.operations)


CapabilityLike = Union[CapabilityDescriptor, type]


def as_descriptor(capability: CapabilityLike) -> CapabilityDescriptor:
    if isinstance(capability, CapabilityDescriptor):
        return capability
    return CapabilityDescriptor.from_interface(capability)


def _public_functions(interface: type):
    """Public functions of a class hierarchy, base-first in declaration order"""
    found = {}
    for klass in reversed(interface.__mro__):
        if klass is object:
            continue
        for attribute, value in vars(klass).items():
            if attribute.startswith("_") or not inspect.isfunction(value):
                continue
            found[attribute] = getattr(interface, attribute)
    return found.items()


def _describe_operation(interface: type, attribute: str, func: Callable) -> OperationDescriptor:
    where = f"{interface.__name__}.{attribute}"
    try:
        hints = typing.get_type_hints(func)
    except Exception as e:
        raise InvalidCapabilityError(f"unable to resolve annotations of {where}: {e}") from e

    parameters = list(inspect.signature(func).parameters.values())[1:]
    param_types = []
    for parameter in parameters:
        if parameter.kind not in _POSITIONAL:
            raise InvalidCapabilityError(
                f"only positional parameters are supported, got '{parameter}' in {where}")
        if parameter.name not in hints:
            raise InvalidCapabilityError(f"missing annotation for parameter '{parameter.name}' of {where}")
        param_types.append(hints[parameter.name])

    if "return" not in hints:
        raise InvalidCapabilityError(f"missing return annotation of {where}")

    return OperationDescriptor(
        name=getattr(func, "__rpc_name__", attribute),
        param_types=tuple(param_types),
        return_type=hints["return"],
        attribute=attribute,
    )


@functools.lru_cache(maxsize=None)
def _describe_interface(interface: type) -> CapabilityDescriptor:
    operations = tuple(
        _describe_operation(interface, attribute, func)
        for attribute, func in _public_functions(interface)
    )
    return CapabilityDescriptor(name=interface.__name__, operations=operations, interface=interface)
