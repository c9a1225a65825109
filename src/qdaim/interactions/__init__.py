from .interaction import Interaction
from .aim_interaction import AimInteraction
from .pulse_interaction import PulseInteraction

__all__ = ["Interaction", "AimInteraction", "PulseInteraction"]
