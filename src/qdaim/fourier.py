"""
Real-to-complex spatial Fourier transforms used by the AIM engine.

A :class:`SpatialTransform` is bound to a real-space shape and the axes to
transform, but holds no buffers; the engine only ever sees
``transform(direction, buffer)``. ``scipy.fft`` may split the work over
``workers`` threads; every 1D transform is still computed by a single thread,
so results do not depend on the thread count.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
import scipy.fft

__all__ = ["SpatialTransform", "spectral_shape"]


def spectral_shape(shape: Sequence[int], axes: Sequence[int]) -> Tuple[int, ...]:
    """Shape of ``rfftn(x, axes=axes)`` for a real array ``x`` of ``shape``."""
    out = list(shape)
    last = axes[-1] % len(shape)
    out[last] = shape[last] // 2 + 1
    return tuple(out)


class SpatialTransform:
    """
    Forward (``rfftn``) and backward (``irfftn``) transforms over fixed axes.

    Parameters
    ----------
    shape : sequence of int
        Shape of the real-space arrays this transform accepts.
    axes : sequence of int
        Axes to transform; the last one is halved in spectral space.
    workers : int or None, optional
        Thread count forwarded to :mod:`scipy.fft`.
    """

    def __init__(self, shape: Sequence[int], axes: Sequence[int], workers: Optional[int] = None):
        self.shape = tuple(int(s) for s in shape)
        self.axes = tuple(int(a) for a in axes)
        self.workers = workers
        self.spectral_shape = spectral_shape(self.shape, self.axes)
        self._sizes = [self.shape[a] for a in self.axes]

    def forward(self, buffer: np.ndarray) -> np.ndarray:
        if buffer.shape != self.shape:
            raise ValueError(f"Expected real array of shape {self.shape}, got {buffer.shape}.")
        return scipy.fft.rfftn(buffer, axes=self.axes, workers=self.workers)

    def backward(self, buffer: np.ndarray) -> np.ndarray:
        if buffer.shape != self.spectral_shape:
            raise ValueError(
                f"Expected spectral array of shape {self.spectral_shape}, got {buffer.shape}."
            )
        return scipy.fft.irfftn(buffer, s=self._sizes, axes=self.axes, workers=self.workers)

    def __call__(self, direction: str, buffer: np.ndarray) -> np.ndarray:
        if direction == "forward":
            return self.forward(buffer)
        if direction == "backward":
            return self.backward(buffer)
        raise ValueError(f"Unknown transform direction {direction!r}.")
