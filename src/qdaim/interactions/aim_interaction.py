r"""
Adaptive Integral Method (AIM) evaluation of retarded dot-dot interactions.

Sources are spread from the dots onto a regular grid, convolved in space and
time with the retarded Green's function

.. math::

    G(\mathbf{r}, t) = \frac{\delta(t - |\mathbf{r}|/c)}{\mathcal{N}(\mathbf{r})},

and gathered back onto the dots. The spatial convolution is a Toeplitz
product; embedding it in a circulant of twice the grid size per axis turns it
into an elementwise product in Fourier space. The delta function in time is
replaced by Lagrange interpolation over ``interpolation_order + 1`` past steps.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Union

import numpy as np

from ..errors import InvalidConfiguration
from ..expansion import ExpansionFunction, ExpansionTable, Identity, get_normalization
from ..fourier import SpatialTransform
from ..grid import Grid
from ..history import History, VALUE
from ..interpolation import UniformLagrangeSet
from ..quantum_dot import RHO_01
from .interaction import Interaction

__all__ = ["AimInteraction"]

# real and imaginary parts of the three vector components are transformed as
# six independent real channels
NUM_CHANNELS = 6


class AimInteraction(Interaction):
    """
    Retarded interaction between all dots evaluated on a grid with FFTs.

    The circulant Green's function table is built and transformed once at
    construction. Each :meth:`evaluate` call transforms at most the source
    layers it has not seen yet (a ring of ``max_shift + 1`` cached spectra),
    multiplies them with the table, and transforms the sum back. A cached
    spectrum is rebuilt whenever the coherences it was built from no longer
    match the history, so results always follow the current history.
    """

    def __init__(
        self,
        dots: Sequence,
        history: Optional[History],
        grid: Grid,
        expansions: Optional[ExpansionTable],
        interpolation_order: int,
        c: float,
        dt: float,
        expansion_function: ExpansionFunction = Identity,
        normalization: Union[str, Callable] = "unit",
        propagator=None,
        prefactor: complex = 1.0,
        workers: Optional[int] = None,
        verbose: bool = False,
    ):
        """
        Parameters
        ----------
        dots : list of QuantumDot
            Dots in grid-sorted order (build the grid first).
        history : History or None
            Dot history; only read. ``None`` is accepted for engines that are
            never evaluated (e.g. to inspect the transforms).
        grid : Grid
            Grid covering the dots.
        expansions : ExpansionTable or None
            Expansion table of ``dots``; ``None`` only when there are no dots.
        interpolation_order : int
            Order of the Lagrange interpolation in time.
        c : float
            Propagation speed.
        dt : float
            Time step.
        expansion_function : ExpansionFunction, default: Identity
            Selects source and observer expansion weights.
        normalization : str or callable, default: "unit"
            ``"unit"``, ``"distance"``, ``"poisson"``, or a function of the
            separation vector(s); the Green's function is divided by it.
        propagator : object, optional
            Frame of the stored coherences, providing ``frame_phase(time)``.
        prefactor : complex, default: 1.0
            Constant multiplying every result (coupling strength, unit conversion).
        workers : int, optional
            FFT thread count.
        verbose : bool, default: False
            Print the table geometry after setup.
        """
        super().__init__(dots, dt)
        if expansions is None:
            if len(dots):
                raise InvalidConfiguration("An expansion table is required when dots are present.")
            expansions = ExpansionTable(
                order=0,
                indices=np.zeros((0, 1), dtype=int),
                d0=np.zeros((0, 1)),
                gradient=np.zeros((0, 1, 3)),
            )
        if expansions.num_dots != len(dots):
            raise InvalidConfiguration(
                f"Expansion table covers {expansions.num_dots} dots, but {len(dots)} were given."
            )
        if c <= 0.0 or dt <= 0.0:
            raise InvalidConfiguration("Propagation speed and time step must be positive.")
        if interpolation_order < 0:
            raise InvalidConfiguration("Interpolation order must be non-negative.")

        self.history = history
        self.grid = grid
        self.expansions = expansions
        self.interp_order = int(interpolation_order)
        self.c = float(c)
        self.expansion_function = expansion_function
        self.normalization = get_normalization(normalization)
        self.propagator = propagator
        self.prefactor = prefactor

        self.max_transit_steps = grid.max_transit_steps(self.c, self.dt)
        self.max_shift = self.max_transit_steps + self.interp_order
        self.circulant_dimensions = grid.circulant_shape(self.c, self.dt, self.interp_order)

        nx, ny, nz = (int(n) for n in grid.dimensions)
        self.gmatrix_transform = SpatialTransform(
            self.circulant_dimensions, axes=(1, 2, 3), workers=workers
        )
        self.spatial_transform = SpatialTransform(
            (2 * nx, 2 * ny, 2 * nz, NUM_CHANNELS), axes=(0, 1, 2), workers=workers
        )

        self.fourier_table = self.circulant_fourier_table()

        ring = self.max_shift + 1
        self._spectra = np.zeros(
            (ring,) + self.spatial_transform.spectral_shape, dtype=np.complex128
        )
        self._spectra_steps = np.full(ring, np.iinfo(np.int64).min, dtype=np.int64)
        # coherences each cached spectrum was built from
        self._spectra_sources = np.zeros((ring, self.num_dots), dtype=np.complex128)

        self.source_weights = expansion_function.source_weights(expansions)
        self.observer_weights = expansion_function.observer_weights(expansions)
        self.obs_table = np.zeros((nx, ny, nz, 3), dtype=np.complex128)

        if verbose:
            print(
                f"[AIM] grid {tuple(grid.dimensions)}, circulant {self.circulant_dimensions}, "
                f"max transit steps {self.max_transit_steps}, "
                f"expansion {expansion_function.name} (order {expansions.order})"
            )

    # ------------------------------------------------------------------
    # Green's function table (setup only)
    # ------------------------------------------------------------------
    def circulant_fourier_table(self) -> np.ndarray:
        """
        Build the circulant Green's function tensor and return its spatial
        ``rfftn``, shape ``(max_shift + 1, 2nx, 2ny, nz + 1)``.
        """
        gmatrix = np.zeros(self.circulant_dimensions)
        self.fill_gmatrix_table(gmatrix)
        return self.gmatrix_transform.forward(gmatrix)

    def fill_gmatrix_table(self, gmatrix_table: np.ndarray) -> np.ndarray:
        """
        Fill the real circulant tensor in place.

        Since each G "matrix" is symmetric Toeplitz along every axis, it is
        determined by its first row: the offsets ``[0, n)`` are computed, then
        mirrored into ``(n, 2n)`` so every axis holds a palindromic circulant
        vector. Index ``n`` of a doubled axis and the zero offset stay zero.
        """
        if gmatrix_table.shape != tuple(self.circulant_dimensions):
            raise ValueError(
                f"Expected table of shape {self.circulant_dimensions}, got {gmatrix_table.shape}."
            )
        dims = [int(n) for n in self.grid.dimensions]

        # relative box coordinates in flat-index (row-major) order; box 0 is
        # the collocated pair and is skipped
        coords = np.indices(dims).reshape(3, -1).T[1:]
        # spatial_coord_of_box(idx) - spatial_coord_of_box(0)
        dr = coords * self.grid.spacing
        arg = np.linalg.norm(dr, axis=1) / (self.c * self.dt)
        whole = np.floor(arg).astype(int)
        frac = arg - whole

        interp = UniformLagrangeSet(self.interp_order)
        weights = interp.evaluate_table(frac)[0]
        norm = self.normalization(dr)

        num_shifts = gmatrix_table.shape[0]
        for p in range(self.interp_order + 1):
            # polynomial index p = ceil(t - arg)  <=>  t = floor(arg) + p
            t = whole + p
            ok = (t >= 1) & (t < num_shifts)
            cx, cy, cz = coords[ok].T
            gmatrix_table[t[ok], cx, cy, cz] = weights[p, ok] / norm[ok]

        for axis, n in zip((1, 2, 3), dims):
            if n < 2:
                continue
            src = [slice(None)] * 4
            dst = [slice(None)] * 4
            src[axis] = slice(n - 1, 0, -1)
            dst[axis] = slice(n + 1, 2 * n)
            gmatrix_table[tuple(dst)] = gmatrix_table[tuple(src)]

        return gmatrix_table

    # ------------------------------------------------------------------
    # Per-step evaluation
    # ------------------------------------------------------------------
    def fill_source_table(self, step: int) -> np.ndarray:
        """
        Spread the dots' currents at ``step`` onto the grid.

        Returns
        -------
        numpy.ndarray of complex, shape (nx, ny, nz, 3)
        """
        nx, ny, nz = (int(n) for n in self.grid.dimensions)
        table = np.zeros((self.grid.num_gridpoints, 3), dtype=np.complex128)
        if not self.num_dots:
            return table.reshape(nx, ny, nz, 3)

        coherence = self.history.at(step, VALUE)[:, RHO_01]
        if self.propagator is not None:
            coherence = coherence * np.conj(self.propagator.frame_phase(step * self.dt))

        currents = coherence[:, np.newaxis] * self.dipoles
        contrib = self.source_weights[:, :, np.newaxis] * currents[:, np.newaxis, :]
        np.add.at(table, self.expansions.indices.ravel(), contrib.reshape(-1, 3))
        return table.reshape(nx, ny, nz, 3)

    def _source_spectrum_slot(self, step: int) -> int:
        slot = step % self._spectra_steps.size
        sources = self.history.at(step, VALUE)[:, RHO_01]
        if self._spectra_steps[slot] != step or not np.array_equal(
            self._spectra_sources[slot], sources
        ):
            nx, ny, nz = (int(n) for n in self.grid.dimensions)
            padded = np.zeros((2 * nx, 2 * ny, 2 * nz, 3), dtype=np.complex128)
            padded[:nx, :ny, :nz] = self.fill_source_table(step)
            self._spectra[slot] = self.spatial_transform.forward(padded.view(np.float64))
            self._spectra_steps[slot] = step
            self._spectra_sources[slot] = sources
        return slot

    def propagate(self, step: int) -> np.ndarray:
        """
        Retarded field on every grid box at ``step``.

        Returns
        -------
        numpy.ndarray of complex, shape (nx, ny, nz, 3)
        """
        self.history.check_range(step - self.max_shift, step - 1)
        slots = [self._source_spectrum_slot(step - t) for t in range(1, self.max_shift + 1)]

        field_hat = np.einsum(
            "txyz,txyzc->xyzc", self.fourier_table[1:], self._spectra[slots]
        )
        field = np.ascontiguousarray(self.spatial_transform.backward(field_hat))

        nx, ny, nz = (int(n) for n in self.grid.dimensions)
        self.obs_table = field.view(np.complex128)[:nx, :ny, :nz]
        return self.obs_table

    def fill_results_table(self, field: np.ndarray, step: int) -> np.ndarray:
        """Gather a grid field onto the dots and project it on their dipoles."""
        gathered = field.reshape(-1, 3)[self.expansions.indices]
        projected = np.einsum("njc,nc->nj", gathered, self.dipoles)
        results = self.prefactor * np.sum(self.observer_weights * projected, axis=1)
        if self.propagator is not None:
            results = results * self.propagator.frame_phase(step * self.dt)
        self.results[:] = results
        return self.results.copy()

    def evaluate(self, step: int) -> np.ndarray:
        """
        Field term seen by every dot at ``step`` due to all other dots.

        Raises
        ------
        UninitializedHistory
            If the history does not cover steps ``step - max_shift`` to ``step - 1``.
        """
        return self.fill_results_table(self.propagate(step), step)
