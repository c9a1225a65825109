from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from ..errors import InvalidConfiguration
from ..units import HBAR
from .interaction import Interaction


class PulseInteraction(Interaction):
    """
    Rabi frequency produced at every dot by an incident pulse.

    Parameters
    ----------
    dots : list of QuantumDot
        Dots in the order used by the history.
    pulse : callable
        ``pulse(positions, t)`` returning the field amplitude at each position,
        e.g. from :mod:`qdaim.tools.pulses`.
    dt : float
        Time step (ps).
    polarization : array-like of float, default: (0, 0, 1)
        Field polarization; normalized internally.
    hbar : float, default: HBAR
        Reduced Planck constant in the caller's units.
    """

    def __init__(
        self,
        dots: Sequence,
        pulse: Callable,
        dt: float,
        polarization: Sequence[float] = (0.0, 0.0, 1.0),
        hbar: float = HBAR,
    ):
        super().__init__(dots, dt)
        pol = np.asarray(polarization, dtype=float).reshape(3)
        if np.linalg.norm(pol) == 0.0:
            raise InvalidConfiguration("Pulse polarization must be non-zero.")
        self.polarization = pol / np.linalg.norm(pol)
        self.pulse = pulse
        self.hbar = float(hbar)
        self.coupling = self.dipoles @ self.polarization / self.hbar

    def evaluate(self, step: int) -> np.ndarray:
        if not self.num_dots:
            return self.results.copy()
        self.results[:] = self.coupling * self.pulse(self.positions, step * self.dt)
        return self.results.copy()
