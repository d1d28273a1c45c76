"""
Catalog Models - Model identifiers, model metadata and token counts.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import AliasChoices, BaseModel, Field

from generative_ai.config.errors import InvalidArgumentError

from ..wire import WireModel

_NAME_PREFIXES = ("publishers/google/models/", "models/")


class KnownModel(str, Enum):
    """Gemini models this client knows by name."""

    GEMINI_PRO = "gemini-pro"
    GEMINI_PRO_VISION = "gemini-pro-vision"
    GEMINI_1_0_PRO = "gemini-1.0-pro"
    GEMINI_1_5_PRO = "gemini-1.5-pro"
    GEMINI_1_5_PRO_LATEST = "gemini-1.5-pro-latest"
    GEMINI_1_5_FLASH = "gemini-1.5-flash"
    GEMINI_2_0_FLASH = "gemini-2.0-flash"
    GEMINI_2_5_PRO = "gemini-2.5-pro"
    GEMINI_2_5_FLASH = "gemini-2.5-flash"

    def __str__(self) -> str:
        return self.value


class CustomModel(BaseModel):
    """Any model id outside KnownModel (tuned models, new releases)."""

    name: str = Field(min_length=1)

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return self.name


ModelRef = Union[KnownModel, CustomModel]


def resolve_model(value: str | KnownModel | CustomModel) -> ModelRef:
    """
    Turn a model name into a KnownModel or CustomModel.

    Resource prefixes ("models/", "publishers/google/models/") are stripped.

    Raises:
        InvalidArgumentError: Empty model name
    """
    if isinstance(value, (KnownModel, CustomModel)):
        return value

    name = str(value).strip()
    for prefix in _NAME_PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix) :]
            break

    if not name:
        raise InvalidArgumentError("Model name must not be empty")

    try:
        return KnownModel(name)
    except ValueError:
        return CustomModel(name=name)


class ModelInfo(WireModel):
    """Model metadata from getModel / listModels."""

    name: str
    base_model_id: str | None = None
    version: str | None = Field(
        default=None, validation_alias=AliasChoices("version", "versionId")
    )
    display_name: str | None = None
    description: str | None = None
    input_token_limit: int | None = None
    output_token_limit: int | None = None
    supported_generation_methods: list[str] = Field(default_factory=list)
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    # Vertex publisher models
    launch_stage: str | None = None

    @property
    def model_id(self) -> str:
        """Bare model id, e.g. "gemini-pro" for "models/gemini-pro"."""
        return self.name.rsplit("/", 1)[-1]

    def supports(self, method: str) -> bool:
        """Check if the model lists a generation method (e.g. "countTokens")."""
        return method in self.supported_generation_methods


class ModelList(WireModel):
    """One page of listModels."""

    models: list[ModelInfo] = Field(
        default_factory=list,
        validation_alias=AliasChoices("models", "publisherModels"),
    )
    next_page_token: str | None = None


class TokenCount(WireModel):
    """countTokens result."""

    total_tokens: int
    # Vertex only
    total_billable_characters: int | None = None
    cached_content_token_count: int | None = None
