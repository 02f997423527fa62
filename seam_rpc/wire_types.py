"""
Wire type classification

Reduces Python annotations to the small vocabulary of wire-type names used by
signature introspection, and decides which annotations an operation contract
may use at all.  Coercion never relies on these names; it works on the full
annotation (see ``seam_rpc.codec``).
"""

import collections.abc
import decimal
import numbers
import typing
from typing import Any, Tuple

try:
    from types import UnionType  # Python 3.10+
except ImportError:  # pragma: no cover - Python 3.9
    UnionType = None

VOID = "void"
BOOL = "bool"
INT = "int"
DOUBLE = "double"
STRING = "string"
ARRAY = "array"
STRUCT = "struct"

WIRE_TYPES = (VOID, BOOL, INT, DOUBLE, STRING, ARRAY, STRUCT)

_NONE_TYPE = type(None)
_FLOAT_TYPES = (float, decimal.Decimal)
_ARRAY_TYPES = (list, tuple, set, frozenset, bytes, bytearray)
_ARRAY_ORIGINS = _ARRAY_TYPES + (
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
)

# Annotations too vague to describe a wire value
_REJECTED = (
    object,
    Any,
    collections.abc.Collection,
    collections.abc.Iterable,
    collections.abc.Container,
    collections.abc.Sized,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def is_void(tp: Any) -> bool:
    return tp is None or tp is _NONE_TYPE


def is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    return origin is typing.Union or (UnionType is not None and origin is UnionType)


def optional_members(tp: Any) -> Tuple[Any, ...]:
    """Members of a Union annotation with ``None`` removed"""
    return tuple(arg for arg in typing.get_args(tp) if arg is not _NONE_TYPE)


def classify(tp: Any) -> str:
    """Map a Python annotation to its wire-type name

    Args:
        tp: Any annotation, class or typing construct

    Returns:
        str: One of WIRE_TYPES; never raises
    """
    if is_void(tp):
        return VOID

    if is_union(tp):
        members = optional_members(tp)
        if len(members) == 1:
            return classify(members[0])
        return STRUCT

    origin = typing.get_origin(tp)
    if origin is typing.Annotated:
        return classify(typing.get_args(tp)[0])
    if origin is not None:
        return ARRAY if origin in _ARRAY_ORIGINS else STRUCT

    if not isinstance(tp, type):
        return STRUCT

    if issubclass(tp, bool):
        return BOOL
    if issubclass(tp, _FLOAT_TYPES):
        return DOUBLE
    if issubclass(tp, numbers.Number):
        return INT
    if issubclass(tp, str):
        return STRING
    if issubclass(tp, _ARRAY_TYPES):
        return ARRAY
    return STRUCT


def _is_rejected(tp: Any) -> bool:
    return any(tp is rejected for rejected in _REJECTED)


def is_allowed(tp: Any) -> bool:
    """Check whether an annotation may appear in an operation contract

    Scalars, arrays of allowed element types and structured types are allowed.
    ``Any``, ``object`` and the abstract collection/mapping capabilities are
    not, since nothing concrete can be decoded into them.
    """
    if is_void(tp):
        return True

    if is_union(tp):
        return all(is_allowed(arg) for arg in typing.get_args(tp))

    origin = typing.get_origin(tp)
    if origin is typing.Annotated:
        return is_allowed(typing.get_args(tp)[0])
    if origin is not None:
        if _is_rejected(origin):
            return False
        if origin in _ARRAY_ORIGINS:
            return all(is_allowed(arg) for arg in typing.get_args(tp) if arg is not Ellipsis)
        return True

    return not _is_rejected(tp)
