"""Core Compass tracker components: session state, tick scheduling and the facade."""

from .clock import Clock
from .conversions import ConversionBuffer
from .payload import TickPayload, build_payload
from .scheduler import TickOperation, TickScheduler, deadline_for
from .scroll import ScrollSampler, ScrollSurface
from .state import CLEARED_USER_TYPE, SessionState, UserType
from .tracker import CompassTracker

__all__ = [
    # Session model
    "SessionState",
    "UserType",
    "CLEARED_USER_TYPE",
    "ConversionBuffer",
    # Payload
    "TickPayload",
    "build_payload",
    # Scheduling
    "Clock",
    "TickOperation",
    "TickScheduler",
    "deadline_for",
    # Scroll sampling
    "ScrollSampler",
    "ScrollSurface",
    # Facade
    "CompassTracker",
]
