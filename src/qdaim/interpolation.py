"""
Lagrange interpolation on uniformly spaced nodes.

The nodes of a :class:`UniformLagrangeSet` of order ``n`` sit at ``0, 1, ..., n``
(in units of the time step). Both the retarded Green's function table and the
predictor-corrector weights are built from these basis polynomials.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from numpy.polynomial import polynomial as P

__all__ = ["UniformLagrangeSet", "split_double"]

NUM_DERIVATIVES = 2


def split_double(x: float) -> Tuple[int, float]:
    """Split ``x`` into its floor and the fractional remainder in ``[0, 1)``."""
    whole = math.floor(x)
    return int(whole), float(x - whole)


class UniformLagrangeSet:
    """
    Lagrange basis polynomials (and their first two derivatives) of a given order.

    Attributes
    ----------
    order : int
        Polynomial order; there are ``order + 1`` nodes.
    evaluations : numpy.ndarray of float, shape (3, order + 1)
        Result of the last :meth:`evaluate_derivative_table_at_x` call. Row ``d``
        holds the ``d``-th derivative of every basis polynomial.
    """

    def __init__(self, order: int):
        self.order = int(order)
        if self.order < 0:
            raise ValueError("Interpolation order must be non-negative.")
        self._table = self._derivative_table(self.order)
        self.evaluations = np.zeros((NUM_DERIVATIVES + 1, self.order + 1))

    @staticmethod
    def _derivative_table(order: int) -> np.ndarray:
        # table[d, k, p]: coefficient of x**k in the d-th derivative of basis p
        table = np.zeros((NUM_DERIVATIVES + 1, order + 1, order + 1))
        nodes = np.arange(order + 1, dtype=float)
        for p in range(order + 1):
            others = np.delete(nodes, p)
            coefs = P.polyfromroots(others) / np.prod(p - others)
            for d in range(NUM_DERIVATIVES + 1):
                deriv = P.polyder(coefs, d) if d else coefs
                table[d, : deriv.size, p] = deriv
        return table

    def evaluate_table(self, x) -> np.ndarray:
        """
        Vectorized evaluation at an array of offsets.

        Returns
        -------
        numpy.ndarray of float, shape (3, order + 1, *x.shape)
        """
        x = np.asarray(x, dtype=float)
        return np.stack([P.polyval(x, self._table[d]) for d in range(NUM_DERIVATIVES + 1)])

    def evaluate_derivative_table_at_x(self, x: float, dt: float = 1.0) -> np.ndarray:
        """
        Evaluate every basis polynomial and its derivatives at offset ``x``.

        Parameters
        ----------
        x : float
            Offset measured in steps from node 0; normally in ``[0, 1)``, but
            any real value extrapolates the same polynomials.
        dt : float, default: 1.0
            Step size used to convert derivatives to physical time.

        Returns
        -------
        numpy.ndarray of float, shape (3, order + 1)
            Also stored in :attr:`evaluations`.
        """
        table = self.evaluate_table(x)
        for d in range(NUM_DERIVATIVES + 1):
            self.evaluations[d] = table[d] / dt**d
        return self.evaluations
