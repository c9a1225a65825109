"""
Exceptions raised by qdaim.

All of them signal caller or configuration bugs detected at construction or on
first use; none is retried or recovered inside the package.
"""


class QDAIMError(Exception):
    """Base class for every qdaim-specific error."""


class InvalidConfiguration(QDAIMError, ValueError):
    """
    Non-positive grid dimensions, an emitter outside the padded grid, or a
    history too short for the requested integrator order.
    """


# Name used by the integrator documentation; same exception.
ConfigurationError = InvalidConfiguration


class StencilOutOfBounds(QDAIMError, IndexError):
    """An expansion stencil references a box outside the padded grid."""


class UninitializedHistory(QDAIMError, RuntimeError):
    """A time index was requested outside the seeded/allocated history."""
