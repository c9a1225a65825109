from __future__ import annotations

from typing import Sequence

import numpy as np

from ..quantum_dot import dipoles_of, positions_of


class Interaction:
    """
    Something that produces a complex field term (a Rabi frequency) for every
    dot at a given time step.

    Subclasses implement :meth:`evaluate`; it must not modify the history and
    must return the same values when called twice for the same step.
    """

    def __init__(self, dots: Sequence, dt: float):
        self.dots = dots
        self.dt = float(dt)
        self.positions = positions_of(dots)
        self.dipoles = dipoles_of(dots)
        self.results = np.zeros(len(dots), dtype=np.complex128)

    @property
    def num_dots(self) -> int:
        return len(self.dots)

    def evaluate(self, step: int) -> np.ndarray:
        """
        Parameters
        ----------
        step : int
            Time step index.

        Returns
        -------
        numpy.ndarray of complex, shape (num_dots,)
        """
        raise NotImplementedError("This method should be overridden by subclasses.")
