"""
Generation Domain - Content generation request/response types.

This domain handles:
- Contents, parts and inline/file media
- Generation config, safety settings and tools
- Candidates, safety ratings and usage metadata
"""

from .models import (
    Blob,
    Candidate,
    CitationMetadata,
    CitationSource,
    Content,
    FileData,
    FinishReason,
    FunctionCall,
    FunctionDeclaration,
    FunctionResponse,
    GenerationConfig,
    GenerationRequest,
    GenerationResponse,
    Part,
    PromptFeedback,
    Role,
    Tool,
    UsageMetadata,
    VideoMetadata,
)
from .safety import (
    HarmBlockThreshold,
    HarmCategory,
    HarmProbability,
    SafetyRating,
    SafetySetting,
)

__all__ = [
    # Request
    "GenerationRequest",
    "GenerationConfig",
    "Content",
    "Part",
    "Blob",
    "FileData",
    "VideoMetadata",
    "FunctionCall",
    "FunctionResponse",
    "FunctionDeclaration",
    "Tool",
    "Role",
    # Response
    "GenerationResponse",
    "Candidate",
    "CitationMetadata",
    "CitationSource",
    "FinishReason",
    "PromptFeedback",
    "UsageMetadata",
    # Safety
    "HarmCategory",
    "HarmBlockThreshold",
    "HarmProbability",
    "SafetySetting",
    "SafetyRating",
]
