"""
Time history of every dot's state.

The history is a dense complex array indexed by ``(dot, time, slot, component)``
where ``time`` runs from ``-window`` (oldest pre-seeded entry) to
``num_steps - 1``. Negative times are stored through an explicit base offset
rather than Python's negative indexing. Slot 0 holds the state, slot 1 its
time derivative.
"""

from __future__ import annotations

import numpy as np

from .errors import InvalidConfiguration, UninitializedHistory

__all__ = ["History", "VALUE", "DERIVATIVE"]

VALUE = 0
DERIVATIVE = 1


class History:
    """
    Parameters
    ----------
    num_dots : int
        Number of dots.
    window : int
        Number of pre-seeded past steps (times ``-window .. -1``).
    num_steps : int
        Number of present/future steps (times ``0 .. num_steps - 1``).
    num_slots : int, default: 2
        Entries stored per time (value and derivative).
    num_components : int, default: 2
        Length of each state vector.
    """

    def __init__(
        self,
        num_dots: int,
        window: int,
        num_steps: int,
        num_slots: int = 2,
        num_components: int = 2,
    ):
        if num_dots < 0 or window < 0 or num_steps < 1:
            raise InvalidConfiguration(
                f"Invalid history extents (num_dots={num_dots}, window={window}, num_steps={num_steps})."
            )
        self.num_dots = int(num_dots)
        self.window = int(window)
        self.num_steps = int(num_steps)
        self.array = np.zeros(
            (self.num_dots, self.window + self.num_steps, int(num_slots), int(num_components)),
            dtype=np.complex128,
        )

    @property
    def min_time(self) -> int:
        return -self.window

    @property
    def max_time(self) -> int:
        """Exclusive upper time bound."""
        return self.num_steps

    @property
    def num_time(self) -> int:
        return self.window + self.num_steps

    def _row(self, time: int) -> int:
        if not self.min_time <= time < self.max_time:
            raise UninitializedHistory(
                f"Time index {time} outside history range [{self.min_time}, {self.max_time})."
            )
        return time + self.window

    def check_range(self, first: int, last: int):
        """Raise :class:`UninitializedHistory` unless times ``first..last`` are all stored."""
        self._row(first)
        self._row(last)

    def fill(self, value=0.0):
        self.array[...] = value

    def seed(self, state, derivative=None):
        """
        Write ``state`` (and ``derivative``, default zero) into every past step
        and step 0.

        ``state`` may be one vector for all dots or an array ``(num_dots, num_components)``.
        """
        rows = slice(0, self.window + 1)
        self.array[:, rows, VALUE] = self._per_dot(state)
        if self.array.shape[2] > DERIVATIVE:
            self.array[:, rows, DERIVATIVE] = (
                0.0 if derivative is None else self._per_dot(derivative)
            )

    @staticmethod
    def _per_dot(values) -> np.ndarray:
        values = np.asarray(values, dtype=np.complex128)
        # (num_dots, num_components) -> (num_dots, 1, num_components) to span the time axis
        return values[:, np.newaxis, :] if values.ndim == 2 else values

    def get(self, dot: int, time: int, slot: int = VALUE) -> np.ndarray:
        return self.array[dot, self._row(time), slot]

    def set(self, dot: int, time: int, value, slot: int = VALUE):
        self.array[dot, self._row(time), slot] = value

    def at(self, time: int, slot: int = VALUE) -> np.ndarray:
        """View of all dots' entries at one time, shape ``(num_dots, num_components)``."""
        return self.array[:, self._row(time), slot]

    def window_slice(self, first: int, last: int, slot: int = VALUE) -> np.ndarray:
        """View of times ``first..last`` inclusive, shape ``(num_dots, n, num_components)``."""
        self.check_range(first, last)
        return self.array[:, first + self.window : last + self.window + 1, slot]
