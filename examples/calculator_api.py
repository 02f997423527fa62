"""
Calculator capability shared by the example server and client.
"""

import abc
from typing import List


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
