"""
Regular 3D lattice of boxes enclosing every emitter.

Boxes are addressed either by an integer coordinate relative to the lower grid
bound or by a flat index in row-major (C) order, ``idx = z + nz * (y + ny * x)``,
the same convention ``numpy.ravel_multi_index`` uses.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidConfiguration, StencilOutOfBounds

__all__ = ["Grid"]


class Grid:
    """
    Padded grid of boxes covering a collection of quantum dots.

    Constructing a grid **sorts the supplied dot list in place** by box index
    so that the dots of each box occupy a contiguous range (see
    :meth:`box_contents`). Any array indexed by dot must be built afterwards.
    """

    def __init__(
        self,
        spacing: Sequence[float],
        dots: Optional[List] = None,
        padding: int = 0,
        verbose: bool = False,
    ):
        """
        Parameters
        ----------
        spacing : array-like of float, shape (3,)
            Box size along each axis.
        dots : list of QuantumDot
            Emitters to enclose. Must be a ``list``: it is reordered in place
            and callers index results by the new order.
        padding : int, default: 0
            Number of extra boxes added below (and ``padding + 1`` above) the
            emitter extent. Must be at least the half-width of any expansion
            stencil used on this grid.
        verbose : bool, default: False
            Print the grid geometry after construction.
        """
        self.spacing = np.asarray(spacing, dtype=float).reshape(3)
        if np.any(self.spacing <= 0.0):
            raise InvalidConfiguration(f"Grid spacing must be positive, got {self.spacing}.")
        if dots is not None and not isinstance(dots, list):
            raise InvalidConfiguration(
                f"Grid reorders the dot list in place and needs a list, got {type(dots).__name__}."
            )
        if not dots:
            raise InvalidConfiguration(
                "A grid needs at least one dot; use Grid.from_dimensions for an empty grid."
            )
        self.padding = int(padding)
        if self.padding < 0:
            raise InvalidConfiguration("Grid padding must be non-negative.")

        self.dots = dots
        self.bounds = self.calculate_bounds()
        self._finalize()
        self.sort_points_on_boxidx()

        if verbose:
            print(
                f"[Grid] {len(self.dots)} dots in {tuple(self.dimensions)} boxes "
                f"(spacing {tuple(self.spacing)}, padding {self.padding})"
            )

    @classmethod
    def from_dimensions(
        cls,
        spacing: Sequence[float],
        dimensions: Sequence[int],
        origin: Sequence[int] = (0, 0, 0),
    ) -> "Grid":
        """
        Build an emitter-free grid with ``dimensions`` boxes whose lower bound is
        the integer box coordinate ``origin``.
        """
        grid = cls.__new__(cls)
        grid.spacing = np.asarray(spacing, dtype=float).reshape(3)
        if np.any(grid.spacing <= 0.0):
            raise InvalidConfiguration(f"Grid spacing must be positive, got {grid.spacing}.")
        grid.padding = 0
        grid.dots = []
        lower = np.asarray(origin, dtype=int).reshape(3)
        grid.bounds = np.vstack([lower, lower + np.asarray(dimensions, dtype=int).reshape(3)])
        grid._finalize()
        grid._box_ids = np.zeros(0, dtype=int)
        return grid

    def _finalize(self):
        self.dimensions = self.bounds[1] - self.bounds[0]
        if np.any(self.dimensions <= 0):
            raise InvalidConfiguration(
                f"Grid dimensions must be positive, got {tuple(self.dimensions)}."
            )
        self.num_gridpoints = int(np.prod(self.dimensions))
        self.max_diagonal = float(np.linalg.norm(self.dimensions * self.spacing))

    def calculate_bounds(self) -> np.ndarray:
        """
        Return the ``(2, 3)`` integer bounds: row 0 the inclusive lower box
        coordinate, row 1 the exclusive upper one.
        """
        coords = np.array([self.grid_coordinate(d.position()) for d in self.dots])
        bounds = np.vstack([coords.min(axis=0), coords.max(axis=0)])
        bounds[0] -= self.padding
        # + 1 so a dot sitting on the uppermost box still has a containing box
        bounds[1] += self.padding + 1
        return bounds

    # ------------------------------------------------------------------
    # Geometry (grid <---> space)
    # ------------------------------------------------------------------
    def grid_coordinate(self, pos) -> np.ndarray:
        """Integer (absolute) box coordinate of a position, using floor division."""
        return np.floor(np.asarray(pos, dtype=float) / self.spacing).astype(int)

    def coord_to_idx(self, coord) -> int:
        """Flat index of a box coordinate given relative to the lower bound."""
        x, y, z = (int(c) for c in coord)
        nx, ny, nz = (int(n) for n in self.dimensions)
        return z + nz * (y + ny * x)

    def idx_to_coord(self, idx: int) -> np.ndarray:
        """Inverse of :meth:`coord_to_idx`."""
        ny, nz = int(self.dimensions[1]), int(self.dimensions[2])
        x, rem = divmod(int(idx), ny * nz)
        y, z = divmod(rem, nz)
        return np.array([x, y, z], dtype=int)

    def associated_grid_index(self, pos) -> int:
        """Flat index of the box containing ``pos``."""
        return self.coord_to_idx(self.grid_coordinate(pos) - self.bounds[0])

    def spatial_coord_of_box(self, box_id: int) -> np.ndarray:
        """Position of the lower corner of a box."""
        return (self.idx_to_coord(box_id) + self.bounds[0]) * self.spacing

    def contains(self, coord) -> bool:
        """Whether a relative box coordinate lies inside the grid."""
        coord = np.asarray(coord)
        return bool(np.all(coord >= 0) and np.all(coord < self.dimensions))

    def max_transit_steps(self, c: float, dt: float) -> int:
        """Number of time steps a signal at speed ``c`` needs to cross the grid diagonal."""
        return max(1, int(math.ceil(self.max_diagonal / (c * dt))))

    def circulant_shape(self, c: float, dt: float, pad: int = 0) -> Tuple[int, int, int, int]:
        """
        Shape of the circulant Green's function tensor: time shifts ``0`` to
        ``max_transit_steps + pad`` followed by the doubled spatial extents.
        """
        nx, ny, nz = (int(n) for n in self.dimensions)
        return (self.max_transit_steps(c, dt) + pad + 1, 2 * nx, 2 * ny, 2 * nz)

    def expansion_box_indices(self, pos, order: int) -> np.ndarray:
        """
        Indices of the ``(order + 1)**3`` boxes of the expansion stencil around
        ``pos``, in lexicographic order of the per-axis offsets
        ``n - order // 2`` for ``n = 0..order``.

        Raises
        ------
        StencilOutOfBounds
            If part of the stencil falls outside the padded grid.
        """
        order = int(order)
        origin = self.grid_coordinate(pos) - self.bounds[0]
        offsets = np.arange(order + 1) - order // 2

        indices = np.empty((order + 1) ** 3, dtype=int)
        idx = 0
        for dx in offsets:
            for dy in offsets:
                for dz in offsets:
                    coord = origin + (dx, dy, dz)
                    if not self.contains(coord):
                        raise StencilOutOfBounds(
                            f"Expansion stencil of order {order} around {tuple(pos)} reaches box "
                            f"{tuple(coord)} outside grid of dimensions {tuple(self.dimensions)}; "
                            "increase the grid padding."
                        )
                    indices[idx] = self.coord_to_idx(coord)
                    idx += 1
        return indices

    # ------------------------------------------------------------------
    # Box <---> dot bookkeeping
    # ------------------------------------------------------------------
    def sort_points_on_boxidx(self):
        """Stable in-place sort of the dot list by the index of the containing box."""
        self.dots.sort(key=lambda d: self.associated_grid_index(d.position()))
        self._box_ids = np.array(
            [self.associated_grid_index(d.position()) for d in self.dots], dtype=int
        )

    def box_contents(self, box_idx: int) -> range:
        """Range of (sorted) dot indices that lie inside box ``box_idx``."""
        begin = int(np.searchsorted(self._box_ids, box_idx, side="left"))
        end = int(np.searchsorted(self._box_ids, box_idx, side="right"))
        return range(begin, end)

    def occupied_boxes(self) -> np.ndarray:
        """Sorted indices of every box holding at least one dot."""
        return np.unique(self._box_ids)
