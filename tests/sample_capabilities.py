"""
Capabilities and handlers used across the test suite.
"""

import abc
from dataclasses import dataclass
from typing import Any, Dict, List

from google.protobuf import struct_pb2


@dataclass
class Point:
    x: float
    y: float


class Calculator(abc.ABC):

    @abc.abstractmethod
    def add(self, a: int, b: int) -> int:
        pass

    @abc.abstractmethod
    def divide(self, a: float, b: float) -> float:
        pass

    @abc.abstractmethod
    def total(self, values: List[int]) -> int:
        pass

    @abc.abstractmethod
    def reset(self) -> None:
        pass


class Accumulator(abc.ABC):

    @abc.abstractmethod
    def add(self, value: int) -> int:
        pass


class Geometry(abc.ABC):

    @abc.abstractmethod
    def midpoint(self, a: Point, b: Point) -> Point:
        pass

    @abc.abstractmethod
    def field_names(self, document: struct_pb2.Struct) -> List[str]:
        pass

    @abc.abstractmethod
    def describe(self, name: str) -> Dict[str, Any]:
        pass


class CalculatorHandler(Calculator, Accumulator):

    def __init__(self):
        self.resets = 0

    def add(self, *values):
        return sum(values)

    def divide(self, a, b):
        if b == 0:
            raise ValueError("cannot divide by zero")
        return a / b

    def total(self, values):
        return sum(values)

    def reset(self):
        self.resets += 1
        return "ignored"


class GeometryHandler(Geometry):

    def midpoint(self, a, b):
        return Point((a.x + b.x) / 2, (a.y + b.y) / 2)

    def field_names(self, document):
        return sorted(document.fields.keys())

    def describe(self, name):
        return {"name": name, "sides": [1, 2, 3]}
