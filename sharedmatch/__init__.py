"""SharedMatch - find and stream the interactions between two players across shared matches."""

from .interactions import decode_event, extract_interactions
from .ratelimit import RateGate
from .service import CorrelationService

__all__ = [
    "CorrelationService",
    "RateGate",
    "decode_event",
    "extract_interactions",
]

__version__ = "0.1.0"
