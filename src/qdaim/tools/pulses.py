"""
Plane-wave pulse profiles for driving quantum dots.

Every helper returns a callable ``f(pos, t)`` giving the field amplitude of a
plane wave travelling along ``direction`` at speed ``c``, i.e. the profile is
evaluated at the local time ``t - direction . pos / c``. ``pos`` may be a
single position ``(3,)`` or an array of positions ``(n, 3)``. Pass the result
to :class:`~qdaim.interactions.PulseInteraction`.
"""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from ..units import C0

__all__ = [
    "gaussian_pulse",
    "gaussian_enveloped_cosine",
    "cosine_drive",
]


def _local_time(direction: Sequence[float], c: float) -> Callable:
    k_hat = np.asarray(direction, dtype=float).reshape(3)
    norm = np.linalg.norm(k_hat)
    if norm == 0.0:
        raise ValueError("Propagation direction must be non-zero.")
    k_hat = k_hat / norm
    speed = float(c)

    def _tau(pos, t):
        return float(t) - np.asarray(pos, dtype=float) @ k_hat / speed

    return _tau


def gaussian_pulse(
    amplitude: float = 1.0,
    t0: float = 0.0,
    sigma: float = 1.0,
    direction: Sequence[float] = (1.0, 0.0, 0.0),
    c: float = C0,
) -> Callable:
    r"""
    Return a Gaussian pulse.

    .. math::

        E(\mathbf{r}, t) = A \exp\left(-\frac{(\tau - t_0)^2}{2 \sigma^2}\right),
        \qquad \tau = t - \hat{k}\cdot\mathbf{r}/c

    Parameters
    ----------
    amplitude : float, default: 1.0
        Peak amplitude.
    t0 : float, default: 0.0
        Arrival time of the peak at the origin (ps).
    sigma : float, default: 1.0
        Temporal sigma (ps).
    direction : array-like of float, default: (1, 0, 0)
        Propagation direction; normalized internally.
    c : float, default: C0
        Propagation speed (um/ps).

    Returns
    -------
    callable
        ``f(pos, t)``.
    """
    amplitude = float(amplitude)
    sigma = float(sigma)
    t0 = float(t0)
    tau = _local_time(direction, c)

    def _drive(pos, t):
        x = (tau(pos, t) - t0) / sigma
        return amplitude * np.exp(-0.5 * x * x)

    return _drive


def gaussian_enveloped_cosine(
    amplitude: float = 1.0,
    t0: float = 0.0,
    sigma: float = 1.0,
    omega: float = 1.0,
    phase: float = 0.0,
    direction: Sequence[float] = (1.0, 0.0, 0.0),
    c: float = C0,
) -> Callable:
    r"""
    Return a Gaussian-enveloped cosine.

    .. math::

        E(\mathbf{r}, t) = A \exp\left(-\frac{(\tau - t_0)^2}{2 \sigma^2}\right)
        \cos\bigl(\omega (\tau - t_0) + \phi\bigr)

    Parameters
    ----------
    amplitude, t0, sigma, direction, c
        As in :func:`gaussian_pulse`.
    omega : float, default: 1.0
        Carrier angular frequency (rad/ps).
    phase : float, default: 0.0
        Carrier phase (radians).
    """
    amplitude = float(amplitude)
    sigma = float(sigma)
    t0 = float(t0)
    omega = float(omega)
    phase = float(phase)
    tau = _local_time(direction, c)

    def _drive(pos, t):
        s = tau(pos, t) - t0
        return amplitude * np.exp(-0.5 * (s / sigma) ** 2) * np.cos(omega * s + phase)

    return _drive


def cosine_drive(
    amplitude: float = 1.0,
    omega: float = 1.0,
    phase: float = 0.0,
    direction: Sequence[float] = (1.0, 0.0, 0.0),
    c: float = C0,
) -> Callable:
    r"""
    Return a continuous plane wave, :math:`E = A \cos(\omega \tau + \phi)`.
    """
    amplitude = float(amplitude)
    omega = float(omega)
    phase = float(phase)
    tau = _local_time(direction, c)

    def _drive(pos, t):
        return amplitude * np.cos(omega * tau(pos, t) + phase)

    return _drive
