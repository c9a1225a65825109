from .pulses import (
    gaussian_pulse,
    gaussian_enveloped_cosine,
    cosine_drive,
)

__all__ = [
    "gaussian_pulse",
    "gaussian_enveloped_cosine",
    "cosine_drive",
]
