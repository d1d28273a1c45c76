"""
Endpoint Strategy - URLs, auth headers and payload shape per endpoint.

The public Gemini API and Vertex AI share request/response types but differ in:
- Base URL (fixed host vs. region/project scoped path)
- Authentication (API key header vs. OAuth bearer token)
- countTokens body shape and which contents fields are mandatory

EndpointStrategy wraps one EndpointConfig variant and answers those questions,
so the transport sees one interface regardless of variant.
"""

from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import Any

from generative_ai.config.errors import (
    AuthenticationError,
    ConfigurationError,
    GenerativeAIError,
    InvalidArgumentError,
)
from generative_ai.config.settings import Settings
from generative_ai.domains.catalog import ModelRef, ModelRegistry, get_registry
from generative_ai.domains.generation import GenerationRequest

from .models import EndpointConfig, PublicEndpoint, VertexEndpoint

logger = logging.getLogger(__name__)

__all__ = ["EndpointStrategy", "Operation", "endpoint_from_settings"]

# Listing publisher models is only exposed on v1beta1
VERTEX_LIST_MODELS_VERSION = "v1beta1"

# countTokens on Vertex rejects every other GenerateContentRequest field
_VERTEX_COUNT_FIELDS = ("contents", "systemInstruction", "tools", "generationConfig")


class Operation(str, Enum):
    """Supported REST operations."""

    GENERATE_CONTENT = "generateContent"
    STREAM_GENERATE_CONTENT = "streamGenerateContent"
    COUNT_TOKENS = "countTokens"
    GET_MODEL = "getModel"
    LIST_MODELS = "listModels"

    @property
    def is_model_method(self) -> bool:
        """Custom method invoked as models/<model>:<operation>."""
        return self in (
            Operation.GENERATE_CONTENT,
            Operation.STREAM_GENERATE_CONTENT,
            Operation.COUNT_TOKENS,
        )


class EndpointStrategy:
    """
    Endpoint-specific behaviour behind a single interface.

    Example:
        >>> strategy = EndpointStrategy(PublicEndpoint(api_key="..."))
        >>> strategy.url(Operation.GENERATE_CONTENT, "gemini-pro")
        'https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent'
    """

    def __init__(
        self,
        config: EndpointConfig,
        registry: ModelRegistry | None = None,
    ) -> None:
        if not isinstance(config, (PublicEndpoint, VertexEndpoint)):
            raise ConfigurationError(
                f"Unsupported endpoint config: {type(config).__name__}"
            )
        self.config = config
        self.registry = registry or get_registry()

    @property
    def kind(self) -> str:
        return self.config.kind

    # --- URLs ---

    def url(self, operation: Operation, model: str | ModelRef | None = None) -> str:
        """
        Fully qualified URL for an operation.

        Raises:
            InvalidArgumentError: Model missing for a model-scoped operation
        """
        if operation is not Operation.LIST_MODELS and not model:
            raise InvalidArgumentError(f"{operation.value} requires a model")

        if isinstance(self.config, PublicEndpoint):
            return self._public_url(self.config, operation, str(model or ""))
        return self._vertex_url(self.config, operation, str(model or ""))

    @staticmethod
    def _public_url(config: PublicEndpoint, operation: Operation, model: str) -> str:
        base = f"{config.base_url.rstrip('/')}/{config.api_version}"
        if operation is Operation.LIST_MODELS:
            return f"{base}/models"
        if operation is Operation.GET_MODEL:
            return f"{base}/models/{model}"
        return f"{base}/models/{model}:{operation.value}"

    @staticmethod
    def _vertex_url(config: VertexEndpoint, operation: Operation, model: str) -> str:
        if operation is Operation.LIST_MODELS:
            return f"{config.host}/{VERTEX_LIST_MODELS_VERSION}/publishers/google/models"
        if operation is Operation.GET_MODEL:
            return f"{config.host}/{config.api_version}/publishers/google/models/{model}"
        return (
            f"{config.host}/{config.api_version}/projects/{config.project_id}"
            f"/locations/{config.region}/publishers/google/models/{model}:{operation.value}"
        )

    def params(self, operation: Operation) -> dict[str, str]:
        """Query parameters. Never carries credentials."""
        if operation is Operation.STREAM_GENERATE_CONTENT:
            return {"alt": "sse"}
        return {}

    # --- Auth ---

    async def auth_headers(self) -> dict[str, str]:
        """
        Authentication headers for the next request.

        Raises:
            AuthenticationError: Token provider failed or returned nothing
        """
        if isinstance(self.config, PublicEndpoint):
            return {"x-goog-api-key": self.config.api_key.get_secret_value()}

        token = await self._vertex_token(self.config)
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    async def _vertex_token(config: VertexEndpoint) -> str:
        if config.token_provider is None:
            if config.access_token is None:
                raise ConfigurationError("Vertex endpoint has no credentials")
            return config.access_token.get_secret_value()

        try:
            token = config.token_provider()
            if inspect.isawaitable(token):
                token = await token
        except GenerativeAIError:
            raise
        except Exception as e:
            raise AuthenticationError(f"Failed to obtain access token: {e}") from e

        if not token:
            raise AuthenticationError("Token provider returned an empty access token")
        return str(token)

    # --- Payloads ---

    def check_request(self, request: GenerationRequest) -> None:
        """
        Reject requests the configured API version cannot serve.

        Only the public v1 API is affected: beta-only models, system
        instructions and JSON mode need v1beta.

        Raises:
            ConfigurationError: Request needs v1beta
        """
        if request.model is not None:
            self.check_model(request.model)

        if not isinstance(self.config, PublicEndpoint) or self.config.is_beta:
            return

        config = request.generation_config
        if request.system_instruction is not None:
            feature = "system_instruction"
        elif config and (config.response_mime_type or config.response_schema):
            feature = "JSON mode (response_mime_type/response_schema)"
        else:
            return
        raise ConfigurationError(
            f"{feature} requires api_version v1beta, endpoint uses {self.config.api_version}",
            {"api_version": self.config.api_version},
        )

    def check_model(self, model: str | ModelRef) -> None:
        """
        Raises:
            ConfigurationError: Model is beta-only and endpoint is public v1
        """
        if (
            isinstance(self.config, PublicEndpoint)
            and not self.config.is_beta
            and self.registry.requires_beta(model)
        ):
            raise ConfigurationError(
                f"Model {model} is only available on api_version v1beta",
                {"model": str(model), "api_version": self.config.api_version},
            )

    def adapt_payload(
        self,
        operation: Operation,
        model: str | ModelRef,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Reshape a GenerationRequest payload for this endpoint and operation."""
        body = dict(payload)
        body["contents"] = [
            content if "role" in content else {"role": "user", **content}
            for content in payload.get("contents", [])
        ]

        if operation is not Operation.COUNT_TOKENS:
            return body

        if isinstance(self.config, VertexEndpoint):
            return {k: v for k, v in body.items() if k in _VERTEX_COUNT_FIELDS}

        # Public: bare contents, or a full request when anything else is set
        if set(body) == {"contents"}:
            return body
        return {"generateContentRequest": {"model": f"models/{model}", **body}}

    # --- Display ---

    def describe(self) -> str:
        """Redacted description, safe for logs and reprs."""
        if isinstance(self.config, PublicEndpoint):
            return (
                f"public endpoint {self.config.base_url}/{self.config.api_version}"
                " (api key ****)"
            )
        return (
            f"vertex endpoint project={self.config.project_id} "
            f"region={self.config.region} version={self.config.api_version}"
        )


def endpoint_from_settings(settings: Settings) -> EndpointConfig:
    """
    Build the endpoint named by settings.endpoint.

    Raises:
        ConfigurationError: Required settings are missing
    """
    if settings.endpoint == "public":
        if settings.api_key is None:
            raise ConfigurationError(
                "Public endpoint requires GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY)"
            )
        return PublicEndpoint(
            api_key=settings.api_key,
            api_version=settings.api_version,
            base_url=settings.public_base_url,
        )

    token_provider = None
    if settings.gcp_access_token is None and settings.gcp_service_account_file is not None:
        from generative_ai.adapters.auth import ServiceAccountCredentials

        token_provider = ServiceAccountCredentials(
            settings.gcp_service_account_file, timeout=settings.timeout_seconds
        )

    return VertexEndpoint(
        project_id=settings.gcp_project_id or "",
        region=settings.gcp_region_name or "",
        access_token=settings.gcp_access_token,
        token_provider=token_provider,
        api_version=settings.vertex_api_version,
    )
