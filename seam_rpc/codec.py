"""
Envelope codec and value conversion

Converts between wire text and request/response envelopes, and between wire
values (plain JSON structures) and the Python types declared by operation
contracts.  Structured values may be dataclasses, protobuf messages, plain
dicts or simple classes built from keyword arguments.
"""

import collections.abc
import dataclasses
import decimal
import enum
import json
import typing
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from google.protobuf.json_format import MessageToDict, ParseDict, ParseError
from google.protobuf.message import Message

from seam_rpc.errors import CoercionError, MalformedRequestError, MalformedResponseError
from seam_rpc.wire_types import is_union, is_void, optional_members

_NONE_TYPE = type(None)
_SET_ORIGINS = (set, collections.abc.Set, collections.abc.MutableSet)
_SEQUENCE_ORIGINS = _SET_ORIGINS + (list, frozenset, collections.abc.Sequence,
                                     collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


class _Absent:
    """Marker for a field missing from an envelope (``None`` is a valid id)"""

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False


ABSENT = _Absent()


@dataclass
class RequestEnvelope:
    id: Any
    method: str
    params: List[Any] = field(default_factory=list)
    trace_context: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "method": self.method, "params": list(self.params)}
        if self.trace_context:
            data["trace_context"] = dict(self.trace_context)
        return data


@dataclass
class ResponseEnvelope:
    """Exactly one of ``result``/``error`` is meaningful; ``error`` wins when set"""

    id: Any = ABSENT
    result: Any = None
    error: Any = None

    @classmethod
    def success(cls, request_id: Any, result: Any) -> "ResponseEnvelope":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, error: Any, request_id: Any = ABSENT) -> "ResponseEnvelope":
        return cls(id=request_id, error=error)

    @property
    def has_id(self) -> bool:
        return self.id is not ABSENT

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        if self.has_id:
            data["id"] = self.id
        if self.is_error:
            data["error"] = self.error
        else:
            data["result"] = self.result
        return data


# ---------------------------------------------------------------------------
# Envelope text
# ---------------------------------------------------------------------------

def encode_request(envelope: RequestEnvelope) -> str:
    return json.dumps(envelope.to_dict())


def decode_request(text: str) -> RequestEnvelope:
    """Read a request envelope

    Raises:
        MalformedRequestError: Not JSON, not an object, no string method or
            params that are not an array
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedRequestError(f"request is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedRequestError("request is not a JSON object")

    method = payload.get("method")
    if not isinstance(method, str):
        raise MalformedRequestError("request method is missing or not a string")

    params = payload.get("params")
    if params is None:
        params = []
    if not isinstance(params, list):
        raise MalformedRequestError("request params is not an array")

    trace_context = payload.get("trace_context")
    if not isinstance(trace_context, dict):
        trace_context = None

    return RequestEnvelope(id=payload.get("id"), method=method, params=params,
                           trace_context=trace_context)


def encode_response(envelope: ResponseEnvelope) -> str:
    return json.dumps(envelope.to_dict())


def decode_response(text: str) -> ResponseEnvelope:
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedResponseError("response is not a JSON object")

    return ResponseEnvelope(
        id=payload.get("id", ABSENT),
        result=payload.get("result"),
        error=payload.get("error"),
    )


# ---------------------------------------------------------------------------
# Python value -> wire value
# ---------------------------------------------------------------------------

def to_wire(value: Any) -> Any:
    """Convert a Python value into a JSON-compatible structure"""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, enum.Enum):
        return to_wire(value.value)
    if isinstance(value, decimal.Decimal):
        return float(value)
    if isinstance(value, Message):
        return MessageToDict(value, preserving_proto_field_name=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_wire(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, collections.abc.Mapping):
        return {str(key): to_wire(item) for key, item in value.items()}
    if isinstance(value, (bytes, bytearray)):
        return list(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_wire(item) for item in value]
    if hasattr(value, "__dict__"):
        return {key: to_wire(item) for key, item in vars(value).items() if not key.startswith("_")}
    raise CoercionError(f"cannot convert {type(value).__name__} to a wire value")


# ---------------------------------------------------------------------------
# wire value -> Python value
# ---------------------------------------------------------------------------

def _mismatch(value: Any, expected: str) -> CoercionError:
    return CoercionError(f"expected {expected}, got {type(value).__name__}: {value!r}")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise _mismatch(value, "bool")


def _to_int(value: Any, tp: type) -> int:
    if isinstance(value, bool):
        raise _mismatch(value, "int")
    if isinstance(value, int):
        return tp(value)
    if isinstance(value, float) and value.is_integer():
        return tp(int(value))
    if isinstance(value, str):
        try:
            return tp(value.strip())
        except ValueError:
            pass
    raise _mismatch(value, "int")


def _to_float(value: Any, tp: type) -> Any:
    if isinstance(value, bool):
        raise _mismatch(value, "double")
    try:
        if isinstance(value, (int, float)):
            return tp(str(value)) if tp is decimal.Decimal else tp(value)
        if isinstance(value, str):
            return tp(value.strip())
    except (ValueError, decimal.InvalidOperation):
        pass
    raise _mismatch(value, "double")


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise _mismatch(value, "string")


def _to_message(value: Any, tp: type) -> Message:
    if not isinstance(value, dict):
        raise _mismatch(value, tp.__name__)
    try:
        return ParseDict(value, tp(), ignore_unknown_fields=True)
    except ParseError as e:
        raise CoercionError(f"invalid {tp.__name__}: {e}") from e


def _to_dataclass(value: Any, tp: type) -> Any:
    if not isinstance(value, dict):
        raise _mismatch(value, tp.__name__)
    hints = typing.get_type_hints(tp)
    kwargs = {
        f.name: from_wire(value[f.name], hints.get(f.name, Any))
        for f in dataclasses.fields(tp)
        if f.init and f.name in value
    }
    try:
        return tp(**kwargs)
    except TypeError as e:
        raise CoercionError(f"invalid {tp.__name__}: {e}") from e


def _from_wire_generic(value: Any, origin: Any, args: tuple) -> Any:
    if origin is tuple:
        if not isinstance(value, list):
            raise _mismatch(value, "array")
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(from_wire(item, args[0]) for item in value)
        if args:
            if len(args) != len(value):
                raise CoercionError(f"expected array of {len(args)} items, got {len(value)}")
            return tuple(from_wire(item, item_type) for item, item_type in zip(value, args))
        return tuple(value)

    if origin in _SEQUENCE_ORIGINS:
        if not isinstance(value, list):
            raise _mismatch(value, "array")
        item_type = args[0] if args else Any
        items = [from_wire(item, item_type) for item in value]
        if origin is frozenset:
            return frozenset(items)
        return set(items) if origin in _SET_ORIGINS else items

    if origin in _MAPPING_ORIGINS:
        if not isinstance(value, dict):
            raise _mismatch(value, "struct")
        key_type, item_type = args if len(args) == 2 else (Any, Any)
        return {from_wire(key, key_type): from_wire(item, item_type) for key, item in value.items()}

    return value


def from_wire(value: Any, tp: Any) -> Any:
    """Convert a wire value into the declared Python type

    Conversion is best effort: numeric strings become numbers, integral floats
    become ints, dicts become dataclasses or protobuf messages.  ``None``
    converts to ``None`` for every type.

    Raises:
        CoercionError: The value cannot represent the declared type
    """
    if tp is Any or tp is object:
        return value
    if is_void(tp):
        return None

    if is_union(tp):
        if value is None:
            return None
        members = optional_members(tp)
        failures = []
        for member in members:
            try:
                return from_wire(value, member)
            except CoercionError as e:
                failures.append(str(e))
        raise CoercionError("; ".join(failures) or f"cannot convert {value!r}")

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is typing.Annotated:
        return from_wire(value, args[0])
    if value is None:
        return None
    if origin is not None:
        return _from_wire_generic(value, origin, args)
    if not isinstance(tp, type):
        return value

    if tp is bool:
        return _to_bool(value)
    if issubclass(tp, enum.Enum):
        try:
            return tp(value)
        except ValueError as e:
            raise CoercionError(str(e)) from e
    if issubclass(tp, int):
        return _to_int(value, tp)
    if issubclass(tp, (float, decimal.Decimal)):
        return _to_float(value, tp)
    if issubclass(tp, str):
        return _to_str(value)
    if issubclass(tp, Message):
        return _to_message(value, tp)
    if dataclasses.is_dataclass(tp):
        return _to_dataclass(value, tp)
    if issubclass(tp, (bytes, bytearray)):
        if not isinstance(value, list):
            raise _mismatch(value, "array")
        try:
            return tp(value)
        except (TypeError, ValueError) as e:
            raise CoercionError(str(e)) from e
    if issubclass(tp, (list, tuple, set, frozenset)):
        if not isinstance(value, list):
            raise _mismatch(value, "array")
        return tp(value)
    if issubclass(tp, dict):
        if not isinstance(value, dict):
            raise _mismatch(value, "struct")
        return tp(value)
    if isinstance(value, tp):
        return value
    if isinstance(value, dict):
        try:
            return tp(**value)
        except TypeError as e:
            raise CoercionError(f"invalid {tp.__name__}: {e}") from e
    raise _mismatch(value, tp.__name__)
