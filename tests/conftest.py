"""Root pytest configuration for all tests.

Shared fixtures only; port fakes live in tests/fakes.py.
"""

from __future__ import annotations

import numpy as np
import pytest

from domain.exploration.value_objects import Coordinate


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible sampling."""
    return np.random.default_rng(42)


@pytest.fixture
def shanghai() -> Coordinate:
    return Coordinate(latitude=31.23, longitude=121.47)
