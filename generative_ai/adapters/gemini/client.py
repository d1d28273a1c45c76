"""
Gemini Client - Typed operations against the public Gemini API or Vertex AI.

This is the stable surface of the library. Each call returns exactly one
result or raises exactly one typed GenerativeAIError.

Authentication:
- Public endpoint: API key (sent as the x-goog-api-key header)
- Vertex AI: bearer token, or a token provider such as
  ServiceAccountCredentials

Features:
- generateContent, streamGenerateContent, countTokens
- getModel, listModels (pagination followed internally)
- JSON mode helper
- No hidden retries: failures surface to the caller as they happen
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from generative_ai.adapters.endpoints import (
    EndpointConfig,
    EndpointStrategy,
    Operation,
    endpoint_from_settings,
)
from generative_ai.adapters.transport import HttpTransport
from generative_ai.config import (
    ConfigurationError,
    DeserializationError,
    InvalidArgumentError,
    Settings,
    get_settings,
)
from generative_ai.domains.catalog import (
    ModelInfo,
    ModelList,
    ModelRef,
    ModelRegistry,
    TokenCount,
    get_registry,
    resolve_model,
)
from generative_ai.domains.generation import (
    Content,
    GenerationConfig,
    GenerationRequest,
    GenerationResponse,
    SafetySetting,
)

logger = logging.getLogger(__name__)

__all__ = ["GeminiClient"]

JSON_MIME_TYPE = "application/json"


class GeminiClient:
    """
    Gemini API client for either endpoint.

    Example:
        >>> client = GeminiClient(PublicEndpoint(api_key="..."))
        >>> response = await client.generate_content(
        ...     GenerationRequest(model="gemini-1.0-pro", contents=["Hello"])
        ... )
        >>> print(response.text)

        >>> # Vertex AI
        >>> client = GeminiClient(
        ...     VertexEndpoint(project_id="my-project", region="us-central1",
        ...                    access_token="ya29...")
        ... )
        >>> count = await client.count_tokens(request)
        >>> print(count.total_tokens)
    """

    def __init__(
        self,
        endpoint: EndpointConfig | None = None,
        *,
        default_model: str | ModelRef | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        registry: ModelRegistry | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize Gemini client.

        Args:
            endpoint: Public or Vertex endpoint. Built from settings if None.
            default_model: Model for calls that do not name one
            timeout: Request timeout in seconds (settings default: 30)
            http_client: Pre-built httpx client, e.g. with a mock transport
            registry: Model catalogue. Loaded from data files if None.
            settings: Settings override. Uses cached environment settings if None.

        Raises:
            ConfigurationError: Endpoint cannot be built or is malformed, or
                timeout is not positive
        """
        self.settings = settings or get_settings()
        self.endpoint = endpoint or endpoint_from_settings(self.settings)
        self.registry = registry or get_registry(self.settings.known_models_file)
        self.strategy = EndpointStrategy(self.endpoint, self.registry)
        self.default_model = self._resolve(default_model or self.settings.default_model)
        self.timeout = timeout if timeout is not None else self.settings.timeout_seconds
        if self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be positive, got {self.timeout}", {"timeout": self.timeout}
            )

        self._transport = HttpTransport(self.strategy, self.timeout, http_client)

        logger.info(
            "GeminiClient initialized: %s, model=%s",
            self.strategy.describe(),
            self.default_model,
        )

    def __repr__(self) -> str:
        return f"GeminiClient({self.strategy.describe()}, model={self.default_model})"

    def _resolve(self, model: str | ModelRef | None) -> ModelRef:
        """Model to use: explicit, else default; aliases mapped to canonical ids."""
        if model is None:
            return self.default_model
        return self.registry.lookup(str(resolve_model(model)))

    def _with_model(self, request: GenerationRequest) -> GenerationRequest:
        """Request bound to a concrete model (client default when unset)."""
        model = self._resolve(request.model)
        if model == request.model:
            return request
        return request.model_copy(update={"model": model})

    # --- Generation ---

    async def generate_content(self, request: GenerationRequest) -> GenerationResponse:
        """
        Single-shot, non-streaming generation.

        Args:
            request: Model, contents and options

        Returns:
            GenerationResponse with candidates and usage metadata

        Raises:
            ConfigurationError: Request needs a newer API version than configured
            GenerativeAIError: Any API, transport or deserialization failure
        """
        request = self._with_model(request)
        self.strategy.check_request(request)

        response = await self._transport.post(
            Operation.GENERATE_CONTENT,
            request.model,
            request.to_payload(),
            GenerationResponse,
        )

        if response.usage_metadata:
            logger.debug(
                "generateContent %s: prompt=%d candidates=%d total=%d tokens",
                request.model,
                response.usage_metadata.prompt_token_count,
                response.usage_metadata.candidates_token_count,
                response.usage_metadata.total_token_count,
            )
        return response

    async def stream_generate_content(
        self, request: GenerationRequest
    ) -> AsyncIterator[GenerationResponse]:
        """
        Stream generated chunks as the service sends them.

        Args:
            request: Model, contents and options

        Yields:
            GenerationResponse per chunk (usage metadata on the last one)
        """
        request = self._with_model(request)
        self.strategy.check_request(request)

        async for chunk in self._transport.stream(
            Operation.STREAM_GENERATE_CONTENT,
            request.model,
            request.to_payload(),
        ):
            yield chunk

    async def generate_text(
        self,
        prompt: str,
        *,
        model: str | ModelRef | None = None,
        system_instruction: str | Content | None = None,
        generation_config: GenerationConfig | None = None,
        safety_settings: list[SafetySetting] | None = None,
    ) -> GenerationResponse:
        """
        Generate from a single user prompt.

        Args:
            prompt: User prompt
            model: Model override (client default if None)
            system_instruction: Optional system instruction
            generation_config: Sampling/output options
            safety_settings: Per-category thresholds

        Returns:
            GenerationResponse
        """
        request = GenerationRequest(
            model=self._resolve(model),
            contents=[Content.user(prompt)],
            system_instruction=system_instruction,
            generation_config=generation_config,
            safety_settings=safety_settings,
        )
        return await self.generate_content(request)

    async def generate_json(
        self,
        prompt: str,
        *,
        model: str | ModelRef | None = None,
        system_instruction: str | Content | None = None,
        response_schema: dict[str, Any] | None = None,
        generation_config: GenerationConfig | None = None,
    ) -> Any:
        """
        Generate in JSON mode and parse the first candidate.

        Args:
            prompt: User prompt
            model: Model override
            system_instruction: Optional system instruction
            response_schema: Optional OpenAPI schema the output must follow
            generation_config: Other sampling options

        Returns:
            Parsed JSON value

        Raises:
            DeserializationError: Candidate text is not JSON
        """
        update: dict[str, Any] = {"response_mime_type": JSON_MIME_TYPE}
        if response_schema is not None:
            update["response_schema"] = response_schema
        config = (generation_config or GenerationConfig()).model_copy(update=update)

        response = await self.generate_text(
            prompt,
            model=model,
            system_instruction=system_instruction,
            generation_config=config,
        )

        text = response.text
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Some models wrap JSON in prose or code fences
            start = min((i for i in (text.find("{"), text.find("[")) if i >= 0), default=-1)
            end = max(text.rfind("}"), text.rfind("]")) + 1
            if start >= 0 and end > start:
                try:
                    return json.loads(text[start:end])
                except json.JSONDecodeError:
                    pass
            raise DeserializationError(
                "Model output is not valid JSON", details={"text": text[:200]}
            ) from None

    # --- Tokens ---

    async def count_tokens(self, request: GenerationRequest) -> TokenCount:
        """
        Count tokens a request would consume.

        Args:
            request: Model and contents (system instruction/tools also counted)

        Returns:
            TokenCount

        Raises:
            InvalidArgumentError: Request has no contents
        """
        if not request.contents:
            raise InvalidArgumentError("countTokens requires at least one content entry")
        request = self._with_model(request)
        self.strategy.check_request(request)

        count = await self._transport.post(
            Operation.COUNT_TOKENS,
            request.model,
            request.to_payload(),
            TokenCount,
        )
        logger.debug("countTokens %s: %d tokens", request.model, count.total_tokens)
        return count

    # --- Models ---

    async def get_model(self, model: str | ModelRef | None = None) -> ModelInfo:
        """
        Get model metadata.

        Args:
            model: Model id (client default if None)

        Raises:
            NotFoundError: Model does not exist
        """
        return await self._transport.get(
            Operation.GET_MODEL, self._resolve(model), ModelInfo
        )

    async def iter_models(self, page_size: int | None = None) -> AsyncIterator[ModelInfo]:
        """
        Lazily iterate all models, fetching pages on demand.

        Args:
            page_size: Models per page (service default if None)

        Yields:
            ModelInfo
        """
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {}
            if page_size:
                params["pageSize"] = page_size
            if page_token:
                params["pageToken"] = page_token

            page = await self._transport.get(
                Operation.LIST_MODELS, None, ModelList, params=params
            )
            for info in page.models:
                yield info

            page_token = page.next_page_token
            if not page_token:
                break

    async def list_models(self, page_size: int | None = None) -> list[ModelInfo]:
        """List all models (every page)."""
        return [info async for info in self.iter_models(page_size)]

    # --- Lifecycle ---

    async def close(self) -> None:
        """Close HTTP client."""
        await self._transport.close()

    async def __aenter__(self) -> GeminiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
