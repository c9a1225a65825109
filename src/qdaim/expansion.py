"""
Expansion tables tying exact dot positions to the surrounding grid boxes.

An :class:`ExpansionTable` stores, for every dot, the boxes of its stencil and
the weights that spread a point source onto them (and, by reciprocity, gather a
grid field back to the dot). :class:`LeastSquaresExpansionSolver` builds such
weights from polynomial moment equations; the AIM engine only reads the table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Union

import numpy as np

from .errors import InvalidConfiguration

__all__ = [
    "ExpansionTable",
    "LeastSquaresExpansionSolver",
    "ExpansionFunction",
    "Derivative",
    "Identity",
    "Derivative0",
    "Derivative1",
    "Derivative2",
    "normalizations",
    "get_normalization",
]


@dataclass(frozen=True)
class ExpansionTable:
    """
    Attributes
    ----------
    order : int
        Expansion order; each stencil has ``(order + 1)**3`` boxes.
    indices : numpy.ndarray of int, shape (num_dots, stencil)
        Flat grid index of every stencil box.
    d0 : numpy.ndarray of float, shape (num_dots, stencil)
        Interpolation weights.
    gradient : numpy.ndarray of float, shape (num_dots, stencil, 3)
        Weights reproducing the spatial gradient at the dot position.
    """

    order: int
    indices: np.ndarray
    d0: np.ndarray
    gradient: np.ndarray

    @property
    def num_dots(self) -> int:
        return self.indices.shape[0]

    @property
    def stencil_size(self) -> int:
        return self.indices.shape[1]


class LeastSquaresExpansionSolver:
    """
    Weights that make the stencil reproduce every tensor-product monomial
    ``x**a y**b z**c`` (``a, b, c <= order``) and its gradient at the dot.
    """

    @staticmethod
    def monomial_exponents(order: int) -> np.ndarray:
        return np.indices((order + 1,) * 3).reshape(3, -1).T

    @classmethod
    def solve_expansion_system(cls, order: int, offsets: np.ndarray, spacing: np.ndarray):
        """
        Solve the moment equations for one dot.

        Parameters
        ----------
        order : int
            Expansion order.
        offsets : numpy.ndarray, shape (stencil, 3)
            Stencil box positions relative to the dot.
        spacing : numpy.ndarray, shape (3,)
            Grid spacing; offsets are scaled by it to keep the system well conditioned.

        Returns
        -------
        tuple of numpy.ndarray
            ``(d0, gradient)`` with shapes ``(stencil,)`` and ``(stencil, 3)``.
        """
        exps = cls.monomial_exponents(order)
        u = offsets / spacing
        w_matrix = np.prod(u[np.newaxis, :, :] ** exps[:, np.newaxis, :], axis=2)

        # right-hand sides: monomial values and gradients at the dot (u = 0)
        rhs = np.zeros((exps.shape[0], 4))
        rhs[np.all(exps == 0, axis=1), 0] = 1.0
        for axis in range(3):
            unit = np.zeros(3, dtype=int)
            unit[axis] = 1
            rhs[np.all(exps == unit, axis=1), axis + 1] = 1.0 / spacing[axis]

        weights, *_ = np.linalg.lstsq(w_matrix, rhs, rcond=None)
        return weights[:, 0], weights[:, 1:]

    @classmethod
    def get_expansions(cls, order: int, grid, dots: Sequence) -> ExpansionTable:
        """
        Build the expansion table of ``dots`` (in their current, grid-sorted order).

        Raises
        ------
        StencilOutOfBounds
            If a stencil leaves the grid (raised by the grid).
        """
        order = int(order)
        if order < 0:
            raise InvalidConfiguration("Expansion order must be non-negative.")
        stencil = (order + 1) ** 3

        indices = np.zeros((len(dots), stencil), dtype=int)
        d0 = np.zeros((len(dots), stencil))
        gradient = np.zeros((len(dots), stencil, 3))
        for i, dot in enumerate(dots):
            pos = dot.position()
            indices[i] = grid.expansion_box_indices(pos, order)
            boxes = np.array([grid.spatial_coord_of_box(idx) for idx in indices[i]])
            d0[i], gradient[i] = cls.solve_expansion_system(order, boxes - pos, grid.spacing)

        return ExpansionTable(order=order, indices=indices, d0=d0, gradient=gradient)


class ExpansionFunction:
    """
    Chooses which expansion weights spread sources onto the grid and which
    gather the field back onto the dots. The base class uses the plain
    interpolation weights on both sides.
    """

    name = "identity"

    def source_weights(self, table: ExpansionTable) -> np.ndarray:
        return table.d0

    def observer_weights(self, table: ExpansionTable) -> np.ndarray:
        return table.d0

    def __repr__(self):
        return f"<ExpansionFunction {self.name}>"


class Derivative(ExpansionFunction):
    """Spatial derivative of the retarded field along ``axis`` at each observer."""

    def __init__(self, axis: int):
        if axis not in (0, 1, 2):
            raise InvalidConfiguration("Derivative axis must be 0 (x), 1 (y), or 2 (z).")
        self.axis = axis
        self.name = f"derivative{axis}"

    def observer_weights(self, table: ExpansionTable) -> np.ndarray:
        return table.gradient[:, :, self.axis]


Identity = ExpansionFunction()
Derivative0 = Derivative(0)
Derivative1 = Derivative(1)
Derivative2 = Derivative(2)


# --------------------------------------------------------------------------
# Spatial normalizations: separation vector(s) (..., 3) -> scalar weight(s)
# --------------------------------------------------------------------------
def unit(v: np.ndarray) -> np.ndarray:
    return np.ones(np.shape(v)[:-1])


def distance(v: np.ndarray) -> np.ndarray:
    return np.linalg.norm(v, axis=-1)


def poisson(v: np.ndarray) -> np.ndarray:
    return 4.0 * np.pi * np.linalg.norm(v, axis=-1)


normalizations: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "unit": unit,
    "distance": distance,
    "poisson": poisson,
}


def get_normalization(norm: Union[str, Callable]) -> Callable[[np.ndarray], np.ndarray]:
    """Look up a normalization by name; callables are returned unchanged."""
    if callable(norm):
        return norm
    try:
        return normalizations[str(norm).lower()]
    except KeyError:
        raise InvalidConfiguration(
            f"Unsupported normalization: {norm}, only supports {list(normalizations.keys())}"
        ) from None
