"""
generative-ai - Typed async client for Google's Gemini REST API (public and Vertex AI).

Example:
    >>> from generative_ai import GeminiClient, GenerationRequest, PublicEndpoint
    >>> client = GeminiClient(PublicEndpoint(api_key="..."))
    >>> response = await client.generate_content(
    ...     GenerationRequest(model="gemini-1.0-pro", contents=["Hello"])
    ... )
"""

__version__ = "0.4.0"

from .adapters.endpoints import PublicEndpoint, VertexEndpoint  # noqa: E402
from .adapters.gemini import GeminiClient  # noqa: E402
from .config.errors import (  # noqa: E402
    AuthenticationError,
    ConfigurationError,
    DeserializationError,
    GenerativeAIError,
    InvalidArgumentError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TransportError,
)
from .domains.catalog import CustomModel, KnownModel, ModelInfo, TokenCount  # noqa: E402
from .domains.generation import (  # noqa: E402
    Content,
    FinishReason,
    GenerationConfig,
    GenerationRequest,
    GenerationResponse,
    Part,
)

__all__ = [
    "__version__",
    "GeminiClient",
    "PublicEndpoint",
    "VertexEndpoint",
    "GenerationRequest",
    "GenerationResponse",
    "GenerationConfig",
    "Content",
    "Part",
    "FinishReason",
    "KnownModel",
    "CustomModel",
    "ModelInfo",
    "TokenCount",
    "GenerativeAIError",
    "ConfigurationError",
    "AuthenticationError",
    "InvalidArgumentError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "TransportError",
    "DeserializationError",
]
