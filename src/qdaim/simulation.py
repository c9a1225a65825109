"""
Quantum dots coupled through a retarded field evaluated with AIM.

:class:`AIMSimulation` wires the pieces together: it builds the grid (which
re-sorts the dots), a history seeded with every dot in its ground state, the
expansion table, the AIM and pulse interactions, and the predictor-corrector
integrator, then drives the time loop.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from .errors import InvalidConfiguration
from .expansion import LeastSquaresExpansionSolver
from .grid import Grid
from .history import History, VALUE
from .integrator import Integrator
from .interactions import AimInteraction, PulseInteraction
from .propagation import RotatingFramePropagator
from .quantum_dot import RHO_00, RHO_01, BlochRHS, QuantumDot, ground_state
from .units import C0, HBAR

__all__ = ["AIMSimulation"]


class AIMSimulation:
    r"""
    Optical Bloch dynamics of many quantum dots with retarded coupling.

    Every dot obeys the Bloch equations of
    :meth:`~qdaim.quantum_dot.QuantumDot.liouville_rhs` with the Rabi frequency

    .. math::

        \Omega_i(t) = \frac{\mathbf{d}_i \cdot \hat{\mathbf{e}}}{\hbar} E_{\rm pulse}(\mathbf{r}_i, t)
        + \frac{g}{\hbar} \sum_{j \ne i} \frac{\mathbf{d}_i \cdot \mathbf{d}_j\,
        \rho_{01}^{(j)}(t - r_{ij}/c)}{\mathcal{N}(\mathbf{r}_{ij})},

    where the retarded sum is evaluated on a grid with AIM and :math:`g` is
    ``coupling_strength``.
    """

    def __init__(
        self,
        dots: Sequence[QuantumDot],
        dt: float,
        num_steps: int,
        spacing: Union[float, Sequence[float]],
        c: float = C0,
        hbar: float = HBAR,
        padding: Optional[int] = None,
        interpolation_order: int = 3,
        expansion_order: int = 0,
        integrator_order: int = 4,
        pulse: Optional[Callable] = None,
        polarization: Sequence[float] = (0.0, 0.0, 1.0),
        laser_frequency: float = 0.0,
        normalization: Union[str, Callable] = "poisson",
        coupling_strength: float = 1.0,
        workers: Optional[int] = None,
        record_history: bool = True,
        verbose: bool = False,
    ):
        """
        Parameters
        ----------
        dots : sequence of QuantumDot
            Dots to simulate. A list is re-sorted in place by grid box; use
            :attr:`dots` for the order of every per-dot output.
        dt : float
            Time step (ps).
        num_steps : int
            Number of steps the history can hold.
        spacing : float or array-like of float
            Grid box size (um), scalar or per axis.
        c : float, default: C0
            Propagation speed (um/ps).
        hbar : float, default: HBAR
            Reduced Planck constant (meV ps).
        padding : int, optional
            Grid padding; defaults to the half-width of the expansion stencil.
        interpolation_order : int, default: 3
            Lagrange order of the retarded-time interpolation.
        expansion_order : int, default: 0
            Order of the dot-to-grid expansion.
        integrator_order : int, default: 4
            Order of the predictor-corrector formulas.
        pulse : callable, optional
            ``pulse(positions, t)`` incident field, e.g. from :mod:`qdaim.tools.pulses`.
        polarization : array-like of float, default: (0, 0, 1)
            Pulse polarization.
        laser_frequency : float, default: 0.0
            Angular frequency of the rotating frame (rad/ps); 0 keeps the lab frame.
        normalization : str or callable, default: "poisson"
            Spatial normalization of the Green's function.
        coupling_strength : float, default: 1.0
            Prefactor :math:`g` of the retarded field.
        workers : int, optional
            FFT thread count.
        record_history : bool, default: True
            Record the simulation time after every step.
        verbose : bool, default: False
            Print setup information and progress.
        """
        if num_steps < 1:
            raise InvalidConfiguration("num_steps must be positive.")
        self.dt = float(dt)
        if self.dt <= 0.0:
            raise InvalidConfiguration("dt must be positive.")

        self.dots: List[QuantumDot] = dots if isinstance(dots, list) else list(dots)
        if not self.dots:
            raise InvalidConfiguration("At least one quantum dot is required.")
        self.c = float(c)
        self.hbar = float(hbar)
        self.verbose = verbose
        self.record_history = record_history

        spacing = np.broadcast_to(np.asarray(spacing, dtype=float), (3,))
        if padding is None:
            padding = (int(expansion_order) + 1) // 2

        # sorts self.dots; everything indexed by dot comes after this
        self.grid = Grid(spacing, self.dots, padding=padding, verbose=verbose)

        self.window = self.grid.max_transit_steps(self.c, self.dt) + int(interpolation_order)
        self.history = History(len(self.dots), self.window, int(num_steps) + 1)
        self.history.seed(ground_state())

        self.propagator = RotatingFramePropagator(laser_frequency) if laser_frequency else None
        self.expansions = LeastSquaresExpansionSolver.get_expansions(
            expansion_order, self.grid, self.dots
        )

        self.aim = AimInteraction(
            self.dots,
            self.history,
            self.grid,
            self.expansions,
            interpolation_order,
            self.c,
            self.dt,
            normalization=normalization,
            propagator=self.propagator,
            prefactor=float(coupling_strength) / self.hbar,
            workers=workers,
            verbose=verbose,
        )
        self.interactions = [self.aim]
        if pulse is not None:
            self.interactions.append(
                PulseInteraction(self.dots, pulse, self.dt, polarization=polarization, hbar=self.hbar)
            )

        self.rhs = BlochRHS(self.dots, laser_frequency=laser_frequency)
        self.integrator = Integrator(
            self.dt, self.history, self.rhs, self.interactions, order=integrator_order
        )

        self.time = 0.0
        self.time_history: List[float] = [0.0] if record_history else []

    @property
    def now(self) -> int:
        return self.integrator.now

    def step(self):
        """Advance the simulation by one time step."""
        self.integrator.step()
        self.time = self.integrator.now * self.dt
        if self.record_history:
            self.time_history.append(self.time)

    def run(self, until: Optional[float] = None, steps: Optional[int] = None):
        """
        Run for a duration or a number of steps (default: until the history is full).

        Parameters
        ----------
        until : float, optional
            Final simulation time (ps). ``steps`` must be ``None``.
        steps : int, optional
            Number of steps. ``until`` must be ``None``.
        """
        if until is not None and steps is not None:
            raise ValueError("Specify at most one of 'until' or 'steps'.")
        if until is not None:
            if until < self.time:
                return
            steps = int(round((until - self.time) / self.dt))
        if steps is None:
            steps = self.history.max_time - 1 - self.now
        if self.now + steps >= self.history.max_time:
            raise InvalidConfiguration(
                f"Requested {steps} steps from step {self.now}, but the history ends at "
                f"step {self.history.max_time - 1}."
            )

        start_time = time.perf_counter()
        previous_time = start_time
        for idx in range(int(steps)):
            self.step()

            if self.verbose and (idx + 1) % 1000 == 0:
                current_time = time.perf_counter()
                avg_time_per_step = (current_time - previous_time) / 1000.0
                previous_time = current_time

                elapsed = current_time - start_time
                remaining = (elapsed / (idx + 1)) * (steps - (idx + 1))
                print(
                    f"[AIMSimulation] Completed {idx + 1}/{steps} [{(idx + 1) / steps * 100:.1f}%] steps, time/step: {avg_time_per_step:.2e} seconds, remaining time: {remaining:.2f} seconds."
                )

    def _component_history(self, component: int) -> np.ndarray:
        return self.history.window_slice(0, self.now, VALUE)[:, :, component]

    def population_history(self) -> np.ndarray:
        """Excited-state population of every dot, shape ``(num_dots, now + 1)``."""
        return self._component_history(RHO_00).real

    def coherence_history(self) -> np.ndarray:
        """Coherence of every dot, shape ``(num_dots, now + 1)``."""
        return self._component_history(RHO_01)
