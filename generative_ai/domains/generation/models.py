"""
Generation Models - Request/Response types for generateContent.

Shared by the public Gemini API and Vertex AI. Field names are snake_case in
Python and camelCase on the wire.
"""

from __future__ import annotations

import base64
import mimetypes
import re
from datetime import timedelta
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from generative_ai.config.errors import InvalidArgumentError

from ..catalog.models import CustomModel, KnownModel, resolve_model
from ..wire import FrozenWireModel, WireModel
from .safety import SafetyRating, SafetySetting

_DURATION = re.compile(r"^(-?\d+(?:\.\d+)?)s$")


class Role(str, Enum):
    """Author of a content turn."""

    USER = "user"
    MODEL = "model"
    FUNCTION = "function"


class FinishReason(str, Enum):
    """Why the model stopped generating tokens."""

    UNSPECIFIED = "FINISH_REASON_UNSPECIFIED"
    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    SAFETY = "SAFETY"
    RECITATION = "RECITATION"
    OTHER = "OTHER"

    @classmethod
    def _missing_(cls, value: object) -> FinishReason:
        # BLOCKLIST, SPII, MALFORMED_FUNCTION_CALL, ... and future values
        return cls.OTHER


# --- Parts ---


class Blob(FrozenWireModel):
    """Inline media, base64 encoded."""

    mime_type: str
    data: str


class FileData(FrozenWireModel):
    """Media referenced by URI (File API or gs:// bucket)."""

    mime_type: str
    file_uri: str


class VideoMetadata(FrozenWireModel):
    """Clip of a video part. Offsets travel as {seconds, nanos} durations."""

    start_offset: timedelta | None = None
    end_offset: timedelta | None = None

    @field_validator("start_offset", "end_offset", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        if isinstance(value, str):
            match = _DURATION.match(value.strip())
            if match:
                micros = Decimal(match.group(1)) * 1_000_000
                return timedelta(microseconds=int(micros))
        if isinstance(value, dict):
            return timedelta(
                seconds=int(value.get("seconds", 0)),
                microseconds=int(value.get("nanos", 0)) // 1000,
            )
        return value

    @field_serializer("start_offset", "end_offset")
    def _dump_duration(self, value: timedelta | None) -> dict[str, int] | None:
        if value is None:
            return None
        micros = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
        # seconds and nanos share the sign of the duration
        sign = -1 if micros < 0 else 1
        seconds, remainder = divmod(abs(micros), 1_000_000)
        return {"seconds": sign * seconds, "nanos": sign * remainder * 1000}


class FunctionCall(FrozenWireModel):
    """Function invocation predicted by the model."""

    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(FrozenWireModel):
    """Result of a function call, sent back to the model."""

    name: str
    response: dict[str, Any] = Field(default_factory=dict)


class Part(FrozenWireModel):
    """One piece of a content turn: text, media or a function exchange."""

    text: str | None = None
    inline_data: Blob | None = None
    file_data: FileData | None = None
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None
    video_metadata: VideoMetadata | None = None

    @classmethod
    def from_text(cls, text: str) -> Part:
        return cls(text=text)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> Part:
        """Inline media part from raw bytes."""
        encoded = base64.b64encode(data).decode("ascii")
        return cls(inline_data=Blob(mime_type=mime_type, data=encoded))

    @classmethod
    def from_uri(cls, file_uri: str, mime_type: str) -> Part:
        return cls(file_data=FileData(mime_type=mime_type, file_uri=file_uri))

    @classmethod
    def from_file(cls, path: str | Path, mime_type: str | None = None) -> Part:
        """
        Inline media part from a local file.

        Args:
            path: File to read
            mime_type: Overrides the type guessed from the extension

        Raises:
            FileNotFoundError: File does not exist
            InvalidArgumentError: MIME type cannot be determined
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        mime_type = mime_type or mimetypes.guess_type(path.name)[0]
        if not mime_type:
            raise InvalidArgumentError(
                f"Cannot determine MIME type for {path.name}", details={"path": str(path)}
            )
        return cls.from_bytes(path.read_bytes(), mime_type)


class Content(FrozenWireModel):
    """A conversation turn. A bare string is read as a single-part user turn."""

    role: Role | None = None
    parts: list[Part] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"role": Role.USER, "parts": [{"text": data}]}
        return data

    @classmethod
    def user(cls, *parts: Part | str) -> Content:
        return cls(role=Role.USER, parts=[_as_part(p) for p in parts])

    @classmethod
    def model(cls, *parts: Part | str) -> Content:
        return cls(role=Role.MODEL, parts=[_as_part(p) for p in parts])

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(p.text for p in self.parts if p.text)


def _as_part(value: Part | str) -> Part:
    return Part(text=value) if isinstance(value, str) else value


# --- Request ---


class GenerationConfig(FrozenWireModel):
    """Sampling and output controls."""

    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    top_k: int | None = Field(default=None, ge=1)
    candidate_count: int | None = Field(default=None, ge=1)
    max_output_tokens: int | None = Field(default=None, ge=1)
    stop_sequences: list[str] | None = None
    # JSON mode: "application/json"
    response_mime_type: str | None = None
    response_schema: dict[str, Any] | None = None


class FunctionDeclaration(FrozenWireModel):
    """Function the model may call. Parameters are an OpenAPI object schema."""

    name: str
    description: str
    parameters: dict[str, Any] | None = None


class Tool(FrozenWireModel):
    function_declarations: list[FunctionDeclaration]


class GenerationRequest(FrozenWireModel):
    """
    A generateContent / countTokens request.

    The model travels in the URL; to_payload() produces the JSON body. A
    request without a model is sent to the client's default model.

    Example:
        >>> request = GenerationRequest(model="gemini-1.0-pro", contents=["Hello"])
        >>> request.to_payload()
        {'contents': [{'role': 'user', 'parts': [{'text': 'Hello'}]}]}
    """

    model: KnownModel | CustomModel | None = None
    contents: list[Content]
    generation_config: GenerationConfig | None = None
    system_instruction: Content | None = None
    safety_settings: list[SafetySetting] | None = None
    tools: list[Tool] | None = None

    @field_validator("model", mode="before")
    @classmethod
    def _resolve_model(cls, value: Any) -> Any:
        if isinstance(value, str):
            return resolve_model(value)
        return value

    @field_validator("contents", mode="before")
    @classmethod
    def _wrap_single(cls, value: Any) -> Any:
        if isinstance(value, (str, Content)):
            return [value]
        return value

    @field_validator("contents")
    @classmethod
    def _require_contents(cls, value: list[Content]) -> list[Content]:
        if not value:
            raise InvalidArgumentError("contents must contain at least one entry")
        return value

    @field_validator("system_instruction", mode="before")
    @classmethod
    def _system_text(cls, value: Any) -> Any:
        # System instructions carry no role
        if isinstance(value, str):
            return {"parts": [{"text": value}]}
        return value

    @classmethod
    def from_text(
        cls,
        prompt: str,
        model: str | KnownModel | CustomModel | None = None,
        **options: Any,
    ) -> GenerationRequest:
        """Single user turn request."""
        return cls(model=model, contents=[Content.user(prompt)], **options)

    @property
    def model_name(self) -> str:
        return str(self.model) if self.model is not None else ""

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the request (model excluded, unset fields omitted)."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"model"}
        )


# --- Response ---


class CitationSource(WireModel):
    start_index: int | None = None
    end_index: int | None = None
    uri: str | None = None
    title: str | None = None
    license: str | None = None


class CitationMetadata(WireModel):
    # Public API: citationSources, Vertex: citations
    citation_sources: list[CitationSource] = Field(
        default_factory=list,
        validation_alias=AliasChoices("citationSources", "citations", "citation_sources"),
    )


class Candidate(WireModel):
    """One generated alternative."""

    # Absent when safety filters blocked the output
    content: Content | None = None
    finish_reason: FinishReason | None = None
    index: int | None = None
    safety_ratings: list[SafetyRating] = Field(default_factory=list)
    citation_metadata: CitationMetadata | None = None

    @property
    def text(self) -> str:
        return self.content.text if self.content else ""

    @property
    def function_calls(self) -> list[FunctionCall]:
        if not self.content:
            return []
        return [p.function_call for p in self.content.parts if p.function_call]


class PromptFeedback(WireModel):
    block_reason: str | None = None
    safety_ratings: list[SafetyRating] = Field(default_factory=list)


class UsageMetadata(WireModel):
    prompt_token_count: int = 0
    candidates_token_count: int = 0
    total_token_count: int = 0


class GenerationResponse(WireModel):
    """generateContent result, or one chunk of streamGenerateContent."""

    candidates: list[Candidate] = Field(default_factory=list)
    prompt_feedback: PromptFeedback | None = None
    usage_metadata: UsageMetadata | None = None
    model_version: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _require_candidates_or_feedback(cls, data: Any) -> Any:
        # A blocked prompt comes back with promptFeedback and no candidates
        if isinstance(data, dict) and not any(
            key in data
            for key in ("candidates", "promptFeedback", "prompt_feedback")
        ):
            raise ValueError("response has neither candidates nor promptFeedback")
        return data

    @property
    def text(self) -> str:
        """Text of the first candidate ("" when there is none)."""
        return self.candidates[0].text if self.candidates else ""

    @property
    def finish_reason(self) -> FinishReason | None:
        return self.candidates[0].finish_reason if self.candidates else None

    @property
    def blocked(self) -> bool:
        """True when the prompt itself was blocked."""
        return bool(self.prompt_feedback and self.prompt_feedback.block_reason)
