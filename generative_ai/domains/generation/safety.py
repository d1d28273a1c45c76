"""
Safety - Harm categories, block thresholds and probability levels.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from ..wire import FrozenWireModel, WireModel


class HarmCategory(str, Enum):
    """Safety category a threshold or rating applies to."""

    UNSPECIFIED = "HARM_CATEGORY_UNSPECIFIED"
    HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"
    CIVIC_INTEGRITY = "HARM_CATEGORY_CIVIC_INTEGRITY"


class HarmBlockThreshold(str, Enum):
    """Probability at and above which content is blocked."""

    UNSPECIFIED = "HARM_BLOCK_THRESHOLD_UNSPECIFIED"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_NONE = "BLOCK_NONE"
    OFF = "OFF"


class HarmProbability(str, Enum):
    """Harm likelihood reported for a piece of content."""

    UNSPECIFIED = "HARM_PROBABILITY_UNSPECIFIED"
    NEGLIGIBLE = "NEGLIGIBLE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @classmethod
    def _missing_(cls, value: object) -> HarmProbability:
        return cls.UNSPECIFIED


class SafetySetting(FrozenWireModel):
    """Per-category blocking threshold sent with a request."""

    category: HarmCategory
    threshold: HarmBlockThreshold


class SafetyRating(WireModel):
    """Per-category rating returned for a prompt or candidate."""

    # Categories the service adds later stay readable as raw strings
    category: HarmCategory | str = Field(union_mode="left_to_right")
    probability: HarmProbability = HarmProbability.UNSPECIFIED
    blocked: bool = False

    # Vertex only
    probability_score: float | None = None
    severity: str | None = None
    severity_score: float | None = None
