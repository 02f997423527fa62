"""
Tests for wire type classification and contract admissibility
"""
import collections.abc
import decimal
import fractions
import typing
from typing import Any, Dict, Iterable, List, Mapping, MutableSequence, Optional, Sequence, Set, Tuple, Union

import pytest

from seam_rpc.wire_types import classify, is_allowed

from sample_capabilities import Point


@pytest.mark.parametrize("tp, expected", [
    (None, "void"),
    (type(None), "void"),
    (bool, "bool"),
    (float, "double"),
    (decimal.Decimal, "double"),
    (int, "int"),
    (fractions.Fraction, "int"),
    (str, "string"),
    (list, "array"),
    (List[int], "array"),
    (Tuple[str, ...], "array"),
    (bytes, "array"),
    (Sequence[int], "array"),
    (MutableSequence[str], "array"),
    (Set[int], "array"),
    (typing.AbstractSet[int], "array"),
    (Dict[str, int], "struct"),
    (dict, "struct"),
    (Point, "struct"),
    (Optional[int], "int"),
    (Union[int, str], "struct"),
    (Any, "struct"),
])
def test_classify(tp, expected):
    """Annotations collapse to the seven wire-type names"""
    assert classify(tp) == expected


def test_classify_never_raises():
    """Odd annotations still classify as struct"""
    assert classify("forward.Ref") == "struct"
    assert classify(typing.TypeVar("T")) == "struct"


@pytest.mark.parametrize("tp", [
    int, str, bool, float, None, List[int], List[List[str]], Sequence[int], Dict[str, int], Point, Optional[str],
])
def test_allowed_types(tp):
    assert is_allowed(tp) is True


@pytest.mark.parametrize("tp", [
    Any,
    object,
    Iterable[int],
    typing.Collection,
    Mapping[str, int],
    collections.abc.Mapping,
    List[Any],
    Optional[Iterable[str]],
])
def test_rejected_types(tp):
    """Abstract collection/mapping capabilities and Any cannot describe a wire value"""
    assert is_allowed(tp) is False
