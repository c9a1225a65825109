"""
Point-like two-level emitters ("quantum dots").

A :class:`QuantumDot` only carries what the interaction machinery needs: a
position, a transition dipole, a transition frequency, and the two relaxation
times of the optical Bloch equations. The state of each dot is the pair
``(rho_00, rho_01)`` (excited-state population and coherence) stored in the
simulation history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .errors import InvalidConfiguration

__all__ = [
    "RHO_00",
    "RHO_01",
    "QuantumDot",
    "BlochRHS",
    "ground_state",
    "positions_of",
    "dipoles_of",
    "make_dots",
]

# component indices of the two-level state vector
RHO_00 = 0
RHO_01 = 1


def ground_state() -> np.ndarray:
    """Return the two-component state of a dot in its ground state."""
    return np.zeros(2, dtype=np.complex128)


@dataclass
class QuantumDot:
    """
    A two-level emitter at a fixed position.

    Parameters
    ----------
    pos : array-like of float, shape (3,)
        Position (um).
    dipole : array-like of float, shape (3,)
        Transition dipole moment (e um).
    frequency : float, default: 0.0
        Transition angular frequency (rad/ps).
    damping : tuple of float, default: (inf, inf)
        Population and coherence relaxation times ``(T1, T2)`` (ps).
    """

    pos: np.ndarray = field(default_factory=lambda: np.zeros(3))
    dipole: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    frequency: float = 0.0
    damping: Tuple[float, float] = (np.inf, np.inf)

    def __post_init__(self):
        self.pos = np.asarray(self.pos, dtype=float).reshape(3)
        self.dipole = np.asarray(self.dipole, dtype=float).reshape(3)
        self.frequency = float(self.frequency)
        t1, t2 = (float(x) for x in self.damping)
        if t1 <= 0.0 or t2 <= 0.0:
            raise InvalidConfiguration("Relaxation times T1 and T2 must be positive.")
        self.damping = (t1, t2)

    def position(self) -> np.ndarray:
        return self.pos

    def liouville_rhs(
        self, state: np.ndarray, rabi: complex, laser_frequency: float = 0.0
    ) -> np.ndarray:
        r"""
        Optical Bloch equations in the frame rotating at ``laser_frequency``.

        .. math::

            \dot\rho_{00} = -\mathrm{Im}(\Omega \rho_{01}^*) - \rho_{00} / T_1

            \dot\rho_{01} = -(i\Delta + 1/T_2)\rho_{01} + \frac{i\Omega}{2}(1 - 2\rho_{00})

        with :math:`\Delta = \omega_0 - \omega_L`.

        Parameters
        ----------
        state : numpy.ndarray of complex, shape (2,)
            ``(rho_00, rho_01)``.
        rabi : complex
            Rabi frequency (rad/ps) seen by this dot.
        laser_frequency : float, default: 0.0
            Angular frequency of the rotating frame.

        Returns
        -------
        numpy.ndarray of complex, shape (2,)
        """
        t1, t2 = self.damping
        detuning = self.frequency - laser_frequency
        rho00, rho01 = state[RHO_00], state[RHO_01]

        deriv = np.empty(2, dtype=np.complex128)
        deriv[RHO_00] = -np.imag(rabi * np.conj(rho01)) - rho00 / t1
        deriv[RHO_01] = -(1j * detuning + 1.0 / t2) * rho01 + 0.5j * rabi * (
            1.0 - 2.0 * rho00
        )
        return deriv


class BlochRHS:
    """
    Right-hand side of the coupled system, vectorized over all dots.

    Called by :class:`~qdaim.integrator.Integrator` as
    ``rhs(states, field, step)``, where ``field`` is the summed interaction
    (already a Rabi frequency) seen by each dot.
    """

    def __init__(self, dots: Sequence[QuantumDot], laser_frequency: float = 0.0):
        self.dots = dots
        self.laser_frequency = float(laser_frequency)
        # dots must already be in grid-sorted order
        self.frequencies = np.array([d.frequency for d in self.dots], dtype=float)
        self.inv_t1 = np.array([1.0 / d.damping[0] for d in self.dots], dtype=float)
        self.inv_t2 = np.array([1.0 / d.damping[1] for d in self.dots], dtype=float)

    def __call__(self, states: np.ndarray, field: np.ndarray, step: int) -> np.ndarray:
        rho00 = states[:, RHO_00]
        rho01 = states[:, RHO_01]
        detuning = self.frequencies - self.laser_frequency

        deriv = np.empty_like(states)
        deriv[:, RHO_00] = -np.imag(field * np.conj(rho01)) - rho00 * self.inv_t1
        deriv[:, RHO_01] = -(1j * detuning + self.inv_t2) * rho01 + 0.5j * field * (
            1.0 - 2.0 * rho00
        )
        return deriv


def positions_of(dots: Iterable[QuantumDot]) -> np.ndarray:
    """Stack dot positions into an ``(n, 3)`` array."""
    return np.array([d.position() for d in dots], dtype=float).reshape(-1, 3)


def dipoles_of(dots: Iterable[QuantumDot]) -> np.ndarray:
    """Stack dot dipoles into an ``(n, 3)`` array."""
    return np.array([d.dipole for d in dots], dtype=float).reshape(-1, 3)


def make_dots(positions: Sequence, **kwargs) -> List[QuantumDot]:
    """Build identical dots at the given positions (kwargs go to :class:`QuantumDot`)."""
    return [QuantumDot(pos=p, **kwargs) for p in positions]
