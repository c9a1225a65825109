from __future__ import annotations

import pytest

from qdaim.quantum_dot import QuantumDot


@pytest.fixture
def corner_dots():
    """Two dots on opposite corners of a 5x5x5 unit grid."""
    return [QuantumDot(pos=(0.0, 0.0, 0.0)), QuantumDot(pos=(4.0, 4.0, 4.0))]


@pytest.fixture
def lattice_dots():
    """Four dots on distinct integer lattice sites with assorted dipoles."""
    positions = [(0, 0, 0), (3, 1, 2), (1, 4, 0), (2, 2, 3)]
    dipoles = [(0, 0, 1), (0.3, -0.2, 0.9), (1, 0, 0), (0.5, 0.5, -0.7)]
    return [QuantumDot(pos=p, dipole=d) for p, d in zip(positions, dipoles)]
