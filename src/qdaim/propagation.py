"""Reference frames for the dot coherences."""

from __future__ import annotations

import numpy as np

__all__ = ["RotatingFramePropagator"]


class RotatingFramePropagator:
    """
    Frame rotating at ``laser_frequency`` (rad/ps).

    A coherence stored in this frame is converted to the lab frame by
    multiplying with ``conj(frame_phase(t))`` and back with ``frame_phase(t)``.
    """

    def __init__(self, laser_frequency: float):
        self.laser_frequency = float(laser_frequency)

    def frame_phase(self, time: float) -> complex:
        return complex(np.exp(1j * self.laser_frequency * time))
