"""
Fixed-order predictor-corrector time stepping.

The predictor is an Adams-Bashforth formula and the corrector an
Adams-Moulton formula, both derived by integrating
:class:`~qdaim.interpolation.UniformLagrangeSet` polynomials over one step.
Each :meth:`Integrator.step` runs predict, evaluate, correct once (no
iteration to convergence) and commits the corrected value and its
derivative to the history.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Sequence

import numpy as np

from .errors import InvalidConfiguration
from .history import DERIVATIVE, VALUE, History
from .interpolation import UniformLagrangeSet

__all__ = ["Weights", "Integrator"]


def _integrate_basis(order: int, lower: float, upper: float) -> np.ndarray:
    """Integrals of the order-``order`` Lagrange basis polynomials over ``[lower, upper]``."""
    xi, wi = np.polynomial.legendre.leggauss(order + 1)
    half = 0.5 * (upper - lower)
    x = half * xi + 0.5 * (upper + lower)
    basis = UniformLagrangeSet(order).evaluate_table(x)[0]
    return basis @ (half * wi)


class Weights:
    """
    Predictor and corrector coefficient tables.

    Row ``r`` of each table is the formula that uses ``r + 1`` nodes; lower rows
    serve as start-up formulas while the history is still short. Column ``p``
    weighs the derivative ``p`` steps before the newest past step.

    Attributes
    ----------
    ps : numpy.ndarray, shape (order, order)
        Adams-Bashforth weights.
    cs : numpy.ndarray, shape (order, order)
        Adams-Moulton weights of the past derivatives.
    future_coefs : numpy.ndarray, shape (order,)
        Adams-Moulton weight of the derivative at the new step.
    """

    def __init__(self, order: int):
        self.order = int(order)
        if self.order < 1:
            raise InvalidConfiguration("Integrator order must be at least 1.")

        self.ps = np.zeros((self.order, self.order))
        self.cs = np.zeros((self.order, self.order))
        self.future_coefs = np.zeros(self.order)
        for r in range(self.order):
            # backward offsets from the newest past step: x = 0 is now - 1
            self.ps[r, : r + 1] = _integrate_basis(r, -1.0, 0.0)
            # backward offsets from the new step: x = 0 is now
            am = _integrate_basis(r, 0.0, 1.0)
            self.future_coefs[r] = am[0]
            self.cs[r, :r] = am[1:]

    @property
    def width(self) -> int:
        """Number of past steps the full-order formulas read."""
        return self.order

    @property
    def future_coef(self) -> float:
        return float(self.future_coefs[-1])


class Integrator:
    """
    Advance every dot's state through the history.

    ``now`` is the last committed step; it starts at 0 (the last pre-seeded
    entry) and each :meth:`step` computes and commits ``now + 1``.

    Parameters
    ----------
    dt : float
        Time step.
    history : History
        Seeded history; owned and written by this integrator.
    rhs : callable
        ``rhs(states, field, step)`` returning the time derivative of
        ``states`` (shape ``(num_dots, num_components)``).
    interactions : sequence of Interaction, optional
        Field terms summed at every step.
    weights : Weights, optional
        Coefficient tables; built from ``order`` when omitted.
    order : int, default: 4
        Order of the full formulas.
    verbose : bool, default: False
        Print progress every 1000 steps.
    """

    def __init__(
        self,
        dt: float,
        history: History,
        rhs: Callable,
        interactions: Optional[Sequence] = None,
        weights: Optional[Weights] = None,
        order: int = 4,
        verbose: bool = False,
    ):
        self.dt = float(dt)
        if self.dt <= 0.0:
            raise InvalidConfiguration("Time step must be positive.")
        self.history = history
        self.rhs = rhs
        self.interactions = list(interactions or [])
        self.weights = weights if weights is not None else Weights(order)
        self.verbose = verbose

        if history.num_time < self.weights.width:
            raise InvalidConfiguration(
                f"History holds {history.num_time} steps, fewer than the {self.weights.width} "
                f"required by an order-{self.weights.order} integrator."
            )

        self.now = 0
        self.field = np.zeros(history.num_dots, dtype=np.complex128)

    def _row(self) -> int:
        # committed entries run from min_time to now - 1
        available = self.now - self.history.min_time
        return min(available, self.weights.order) - 1

    def predictor(self):
        r = self._row()
        past = self.history.window_slice(self.now - r - 1, self.now - 1, DERIVATIVE)
        # past is oldest-first, weights are newest-first
        coefs = self.weights.ps[r, : r + 1][::-1]
        prev = self.history.at(self.now - 1, VALUE)
        self.history.at(self.now, VALUE)[:] = prev + self.dt * np.einsum("m,nmc->nc", coefs, past)

    def evaluator(self):
        field = np.zeros(self.history.num_dots, dtype=np.complex128)
        for interaction in self.interactions:
            field += interaction.evaluate(self.now)
        self.field = field
        self.history.at(self.now, DERIVATIVE)[:] = self.rhs(
            self.history.at(self.now, VALUE), self.field, self.now
        )

    def corrector(self):
        r = self._row()
        increment = self.weights.future_coefs[r] * self.history.at(self.now, DERIVATIVE)
        if r > 0:
            past = self.history.window_slice(self.now - r, self.now - 1, DERIVATIVE)
            increment = increment + np.einsum("m,nmc->nc", self.weights.cs[r, :r][::-1], past)

        corrected = self.history.at(self.now - 1, VALUE) + self.dt * increment
        self.history.at(self.now, VALUE)[:] = corrected
        # interactions only read steps before now, so the field is unchanged
        self.history.at(self.now, DERIVATIVE)[:] = self.rhs(corrected, self.field, self.now)

    def step(self):
        """Compute, correct, and commit step ``now + 1``."""
        self.now += 1
        self.predictor()
        self.evaluator()
        self.corrector()

    def run(self, num_steps: Optional[int] = None):
        """
        Take ``num_steps`` steps (default: until the history is full).
        """
        if num_steps is None:
            num_steps = self.history.max_time - 1 - self.now

        start_time = time.perf_counter()
        previous_time = start_time
        for idx in range(int(num_steps)):
            self.step()

            if self.verbose and (idx + 1) % 1000 == 0:
                current_time = time.perf_counter()
                avg_time_per_step = (current_time - previous_time) / 1000.0
                previous_time = current_time

                elapsed = current_time - start_time
                remaining = (elapsed / (idx + 1)) * (num_steps - (idx + 1))
                print(
                    f"[Integrator] Completed {idx + 1}/{num_steps} [{(idx + 1) / num_steps * 100:.1f}%] steps, time/step: {avg_time_per_step:.2e} seconds, remaining time: {remaining:.2f} seconds."
                )
