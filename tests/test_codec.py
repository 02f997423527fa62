"""
Tests for envelope text and value conversion
"""
import decimal
import enum
import json
from typing import AbstractSet, Dict, FrozenSet, List, Optional, Sequence, Tuple

import pytest
from google.protobuf import struct_pb2

from seam_rpc.codec import (
    ABSENT,
    RequestEnvelope,
    ResponseEnvelope,
    decode_request,
    decode_response,
    encode_request,
    encode_response,
    from_wire,
    to_wire,
)
from seam_rpc.errors import CoercionError, MalformedRequestError, MalformedResponseError

from sample_capabilities import Point


class Color(enum.Enum):
    RED = "red"
    BLUE = "blue"


class TestEnvelopes:
    """Request/response envelope text"""

    def test_decode_request(self):
        request = decode_request('{"id": 9, "method": "calc.add", "params": [1, 2]}')
        assert request.id == 9
        assert request.method == "calc.add"
        assert request.params == [1, 2]
        assert request.trace_context is None

    def test_params_default_to_empty(self):
        request = decode_request('{"id": "a", "method": "system.listMethods"}')
        assert request.params == []

    def test_missing_id_reads_as_null(self):
        assert decode_request('{"method": "system.listMethods"}').id is None

    @pytest.mark.parametrize("text", [
        "not json",
        "[1, 2]",
        '{"id": 1}',
        '{"id": 1, "method": 5}',
        '{"id": 1, "method": "calc.add", "params": {"a": 1}}',
    ])
    def test_malformed_request(self, text):
        with pytest.raises(MalformedRequestError):
            decode_request(text)

    def test_encode_request_with_trace_context(self):
        text = encode_request(RequestEnvelope(1, "calc.add", [1, 2], {"traceparent": "00-abc"}))
        assert json.loads(text) == {
            "id": 1, "method": "calc.add", "params": [1, 2], "trace_context": {"traceparent": "00-abc"}
        }

    def test_success_response(self):
        assert json.loads(encode_response(ResponseEnvelope.success(3, [1]))) == {"id": 3, "result": [1]}

    def test_failure_response_without_id(self):
        data = json.loads(encode_response(ResponseEnvelope.failure("unable to read request")))
        assert data == {"error": "unable to read request"}

    def test_null_id_is_echoed(self):
        assert json.loads(encode_response(ResponseEnvelope.failure("x", None))) == {"id": None, "error": "x"}

    def test_decode_response(self):
        response = decode_response('{"error": {"code": 1}}')
        assert response.id is ABSENT
        assert response.is_error
        assert response.error == {"code": 1}

    def test_malformed_response(self):
        with pytest.raises(MalformedResponseError):
            decode_response("<html>")


class TestToWire:
    """Python values to wire values"""

    def test_scalars(self):
        assert to_wire(None) is None
        assert to_wire(True) is True
        assert to_wire(1.5) == 1.5

    def test_structures(self):
        assert to_wire(Point(1.0, 2.0)) == {"x": 1.0, "y": 2.0}
        assert to_wire((1, 2)) == [1, 2]
        assert to_wire({1: Color.RED}) == {"1": "red"}
        assert to_wire(decimal.Decimal("1.25")) == 1.25
        assert to_wire(b"\x01\x02") == [1, 2]

    def test_protobuf_message(self):
        document = struct_pb2.Struct()
        document.update({"name": "x"})
        assert to_wire(document) == {"name": "x"}

    def test_plain_object(self):
        class Box:
            def __init__(self):
                self.size = 3
                self._hidden = True

        assert to_wire(Box()) == {"size": 3}

    def test_unconvertible(self):
        with pytest.raises(CoercionError):
            to_wire(object())


class TestFromWire:
    """Wire values to declared Python types"""

    @pytest.mark.parametrize("value, tp, expected", [
        ("5", int, 5),
        (2.0, int, 2),
        (1, float, 1.0),
        ("2.5", float, 2.5),
        ("true", bool, True),
        (3, str, "3"),
        (None, int, None),
        (None, Optional[int], None),
        ("7", Optional[int], 7),
        ([1, "2"], List[int], [1, 2]),
        ([1, "2"], Sequence[int], [1, 2]),
        ([1, 1, 2], AbstractSet[int], {1, 2}),
        ([1, 2], FrozenSet[int], frozenset({1, 2})),
        ([1, "a"], Tuple[int, str], (1, "a")),
        ({"1": "a"}, Dict[int, str], {1: "a"}),
        ("red", Color, Color.RED),
        (1.5, decimal.Decimal, decimal.Decimal("1.5")),
    ])
    def test_conversions(self, value, tp, expected):
        assert from_wire(value, tp) == expected

    @pytest.mark.parametrize("value, tp", [
        (2.5, int),
        (True, int),
        ("x", int),
        ("x", float),
        (1, bool),
        ([1], str),
        ({"a": 1}, List[int]),
        ([1, 2, 3], Tuple[int, str]),
        ("green", Color),
    ])
    def test_mismatches(self, value, tp):
        with pytest.raises(CoercionError):
            from_wire(value, tp)

    def test_dataclass(self):
        point = from_wire({"x": 1, "y": "2.5", "z": 0}, Point)
        assert point == Point(1.0, 2.5)
        assert isinstance(point.x, float)

    def test_dataclass_missing_field(self):
        with pytest.raises(CoercionError):
            from_wire({"x": 1}, Point)

    def test_protobuf_message(self):
        document = from_wire({"a": 1, "b": "two"}, struct_pb2.Struct)
        assert isinstance(document, struct_pb2.Struct)
        assert sorted(document.fields.keys()) == ["a", "b"]

    def test_void_ignores_value(self):
        assert from_wire(42, type(None)) is None
