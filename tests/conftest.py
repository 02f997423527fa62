"""
Shared fixtures: a small calculator capability served by a dispatcher and
reached through the in-process transport.
"""

import pytest

from seam_rpc.adapters.local import LocalTransport
from seam_rpc.server.dispatcher import RequestDispatcher

from sample_capabilities import Accumulator, Calculator, CalculatorHandler, Geometry, GeometryHandler


@pytest.fixture
def calculator():
    return CalculatorHandler()


@pytest.fixture
def dispatcher(calculator):
    """Dispatcher exposing the calculator under ``calc`` and geometry under ``geo``"""
    dispatcher = RequestDispatcher()
    dispatcher.register("calc", calculator, Calculator, Accumulator)
    dispatcher.register("geo", GeometryHandler(), Geometry)
    return dispatcher


@pytest.fixture
def transport(dispatcher):
    return LocalTransport(dispatcher)
