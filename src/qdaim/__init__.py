from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("qdaim")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "QuantumDot",
    "Grid",
    "History",
    "UniformLagrangeSet",
    "SpatialTransform",
    "ExpansionTable",
    "LeastSquaresExpansionSolver",
    "AimInteraction",
    "PulseInteraction",
    "RotatingFramePropagator",
    "Weights",
    "Integrator",
    "AIMSimulation",
    "InvalidConfiguration",
    "ConfigurationError",
    "StencilOutOfBounds",
    "UninitializedHistory",
]

_locations = {
    "QuantumDot": ".quantum_dot",
    "Grid": ".grid",
    "History": ".history",
    "UniformLagrangeSet": ".interpolation",
    "SpatialTransform": ".fourier",
    "ExpansionTable": ".expansion",
    "LeastSquaresExpansionSolver": ".expansion",
    "AimInteraction": ".interactions",
    "PulseInteraction": ".interactions",
    "RotatingFramePropagator": ".propagation",
    "Weights": ".integrator",
    "Integrator": ".integrator",
    "AIMSimulation": ".simulation",
    "InvalidConfiguration": ".errors",
    "ConfigurationError": ".errors",
    "StencilOutOfBounds": ".errors",
    "UninitializedHistory": ".errors",
}


# Lazy attribute loader: import submodules *only when accessed*.
def __getattr__(name):
    """
    Lazy attribute loader that imports and returns public classes on demand.

    Parameters
    ----------
    name : str
        The attribute name requested (e.g., ``"Grid"``, ``"AIMSimulation"``).

    Returns
    -------
    type
        The requested class object.

    Raises
    ------
    AttributeError
        If the requested attribute is not a known public name.
    """
    if name in _locations:
        from importlib import import_module

        module = import_module(_locations[name], package=__name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
