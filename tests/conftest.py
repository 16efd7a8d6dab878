"""
Pytest configuration and shared fixtures for the density clustering tests.

This module provides:
- Shared test fixtures
- A deterministic pseudo-random integer data set
- Settings isolation between tests
"""

from typing import List

import pytest

from density_clustering.config.settings_loader import ConfigManager
from density_clustering.core.distance import AbsoluteDifferenceMetric


# =============================================================================
# Test Data Generators
# =============================================================================


class Lcg48:
    """
    48-bit linear congruential generator (drand48 constants).

    Produces a platform-independent integer sequence so the reference data
    set, and therefore its cluster count, never changes.
    """

    MULTIPLIER = 0x5DEECE66D
    INCREMENT = 0xB
    MASK = (1 << 48) - 1

    def __init__(self, seed: int):
        self._seed = (seed ^ self.MULTIPLIER) & self.MASK

    def _next(self, bits: int) -> int:
        self._seed = (self._seed * self.MULTIPLIER + self.INCREMENT) & self.MASK
        return self._seed >> (48 - bits)

    def next_int(self, bound: int) -> int:
        """Uniform integer in [0, bound)."""
        if bound & -bound == bound:
            return (bound * self._next(31)) >> 31
        while True:
            bits = self._next(31)
            value = bits % bound
            # Reject the incomplete last block of the 31-bit range
            if bits - value + (bound - 1) < (1 << 31):
                return value


@pytest.fixture
def numeric_metric():
    """Absolute difference metric for plain numbers."""
    return AbsoluteDifferenceMetric()


@pytest.fixture
def reference_integers() -> List[int]:
    """1000 pseudo-random integers in [0, 1000) drawn with seed 4522."""
    rng = Lcg48(4522)
    return [rng.next_int(1000) for _ in range(1000)]


@pytest.fixture
def two_groups() -> List[int]:
    """Two tight groups and one isolated value."""
    return [1, 2, 3, 10, 11, 12, 50]


@pytest.fixture
def bridged_groups() -> List[float]:
    """
    Two dense groups sharing the border value 2.0.

    With epsilon=1 and min_points=4, 2.0 is reachable from both groups
    but is not dense itself.
    """
    return [0.2, 0.5, 0.7, 1.0, 2.0, 3.0, 3.3, 3.5, 3.8]


@pytest.fixture
def settings_file(tmp_path):
    """Write a settings YAML and return its path."""
    def _write(content: str) -> str:
        path = tmp_path / "settings.yaml"
        path.write_text(content)
        return str(path)
    return _write


@pytest.fixture(autouse=True)
def reset_settings():
    """Drop cached settings between tests."""
    ConfigManager.reset()
    yield
    ConfigManager.reset()


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for component interactions"
    )
