"""
HTTP Transport - One round trip per operation, typed in and out.

Features:
- Async HTTP client (httpx), created lazily or injected
- Bounded timeout per request, no automatic retries
- Google error envelopes mapped to typed errors
- Server-sent event streaming for streamGenerateContent
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from generative_ai import __version__
from generative_ai.adapters.endpoints import EndpointStrategy, Operation
from generative_ai.config.errors import (
    AuthenticationError,
    DeserializationError,
    GenerativeAIError,
    InvalidArgumentError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TransportError,
)
from generative_ai.domains.catalog import ModelRef
from generative_ai.domains.generation import GenerationResponse

logger = logging.getLogger(__name__)

__all__ = ["HttpTransport", "error_for_status", "error_from_response"]

USER_AGENT = f"generative-ai/{__version__}"

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def _error_envelope(body: Any) -> dict[str, Any] | None:
    """Extract {"error": {...}} from a body (streaming errors arrive as a list)."""
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return None


def _has_reason(error_details: list[Any], reason: str) -> bool:
    return any(
        isinstance(item, dict) and item.get("reason") == reason for item in error_details
    )


# HTTP status for envelopes that carry only a gRPC status name
_GRPC_STATUS_CODES = {
    "INVALID_ARGUMENT": 400,
    "FAILED_PRECONDITION": 400,
    "UNAUTHENTICATED": 401,
    "PERMISSION_DENIED": 403,
    "NOT_FOUND": 404,
    "RESOURCE_EXHAUSTED": 429,
    "INTERNAL": 500,
    "UNAVAILABLE": 503,
    "DEADLINE_EXCEEDED": 504,
}


def error_for_status(
    status: int, message: str, details: dict[str, Any] | None = None
) -> GenerativeAIError:
    """
    Map an HTTP status to the matching GenerativeAIError subclass.

    Only 5xx statuses are server errors; anything else that is not a success
    (unfollowed redirects included) is treated as a rejected request.
    """
    details = details or {}
    text = f"HTTP Error: {status}: {message}"

    if status == 429:
        return RateLimitedError(text, status, details)
    # An invalid API key comes back as 400 with reason API_KEY_INVALID
    if status in (401, 403) or _has_reason(details.get("details", []), "API_KEY_INVALID"):
        return AuthenticationError(text, status, details)
    if status == 404:
        return NotFoundError(text, status, details)
    if status >= 500:
        return ServerError(text, status, details)
    return InvalidArgumentError(text, status, details)


def _error_from_envelope(
    envelope: dict[str, Any], status: int | None, message: str
) -> GenerativeAIError:
    details: dict[str, Any] = {}
    if envelope.get("status"):
        details["status"] = envelope["status"]
    if envelope.get("details"):
        details["details"] = envelope["details"]

    if status is None:
        code = envelope.get("code")
        if isinstance(code, int) and code > 0:
            status = code
        else:
            status = _GRPC_STATUS_CODES.get(str(envelope.get("status")), 500)
    return error_for_status(status, envelope.get("message") or message, details)


def error_from_response(response: httpx.Response) -> GenerativeAIError:
    """
    Map a non-2xx response to a typed error.

    The body is parsed as a Google error envelope when possible; otherwise the
    HTTP reason phrase is used as the message.
    """
    status = response.status_code
    message = response.reason_phrase or "Unknown Status"

    try:
        envelope = _error_envelope(response.json())
    except ValueError:
        envelope = None

    if envelope:
        return _error_from_envelope(envelope, status, message)
    return error_for_status(status, message)


class HttpTransport:
    """
    Sends requests built by an EndpointStrategy and parses typed responses.

    Example:
        >>> transport = HttpTransport(strategy, timeout=30.0)
        >>> info = await transport.get(Operation.GET_MODEL, "gemini-pro", ModelInfo)
    """

    def __init__(
        self,
        strategy: EndpointStrategy,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize transport.

        Args:
            strategy: Endpoint strategy (URLs, auth, payload shape)
            timeout: Request timeout in seconds
            http_client: Pre-built client (tests, custom pooling). Not closed by close().
        """
        self.strategy = strategy
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
        }
        headers.update(await self.strategy.auth_headers())
        return headers

    async def post(
        self,
        operation: Operation,
        model: str | ModelRef,
        payload: dict[str, Any],
        response_type: type[ResponseT],
    ) -> ResponseT:
        """
        POST a model method (generateContent, countTokens).

        Raises:
            GenerativeAIError: Typed error for any failure
        """
        body = self.strategy.adapt_payload(operation, model, payload)
        response = await self._send("POST", operation, model, json_body=body)
        return self._parse(response, response_type)

    async def get(
        self,
        operation: Operation,
        model: str | ModelRef | None,
        response_type: type[ResponseT],
        params: dict[str, Any] | None = None,
    ) -> ResponseT:
        """
        GET a resource (getModel, listModels).

        Raises:
            GenerativeAIError: Typed error for any failure
        """
        response = await self._send("GET", operation, model, params=params)
        return self._parse(response, response_type)

    async def _send(
        self,
        method: str,
        operation: Operation,
        model: str | ModelRef | None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        client = await self._get_client()
        url = self.strategy.url(operation, model)
        query = {**self.strategy.params(operation), **(params or {})}
        headers = await self._headers()

        logger.debug("%s %s (%s)", method, url, operation.value)

        try:
            response = await client.request(
                method,
                url,
                json=json_body,
                params=query or None,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out after %.1fs", method, url, self.timeout)
            raise TransportError(
                f"Request timed out after {self.timeout}s: {e}", {"url": url}
            ) from e
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"Request failed: {e}", {"url": url}) from e

        if response.is_success:
            return response

        error = error_from_response(response)
        logger.warning("%s %s -> %s", method, url, error)
        raise error

    @staticmethod
    def _parse(response: httpx.Response, response_type: type[ResponseT]) -> ResponseT:
        """Deserialize a 2xx body; shape mismatches become DeserializationError."""
        try:
            data = response.json()
        except ValueError as e:
            raise DeserializationError(
                f"Response is not valid JSON: {e}", response.status_code
            ) from e

        try:
            return response_type.model_validate(data)
        except ValidationError as e:
            raise DeserializationError(
                f"Failed to deserialize API response into {response_type.__name__}: {e}",
                response.status_code,
            ) from e

    async def stream(
        self,
        operation: Operation,
        model: str | ModelRef,
        payload: dict[str, Any],
    ) -> AsyncIterator[GenerationResponse]:
        """
        POST a streaming model method and yield each server-sent chunk.

        Yields:
            GenerationResponse per `data:` event

        Raises:
            GenerativeAIError: Typed error for any failure (status errors
                before the first chunk, error events after it)
        """
        client = await self._get_client()
        url = self.strategy.url(operation, model)
        body = self.strategy.adapt_payload(operation, model, payload)
        headers = await self._headers()

        logger.debug("POST %s (%s, streamed)", url, operation.value)

        try:
            async with client.stream(
                "POST",
                url,
                json=body,
                params=self.strategy.params(operation),
                headers=headers,
                timeout=self.timeout,
            ) as response:
                if not response.is_success:
                    await response.aread()
                    error = error_from_response(response)
                    logger.warning("POST %s -> %s", url, error)
                    raise error

                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:") :].strip()
                    if not data:
                        continue
                    try:
                        chunk = self._parse_chunk(data)
                    except GenerativeAIError as error:
                        logger.warning("POST %s stream -> %s", url, error)
                        raise
                    yield chunk
        except httpx.TimeoutException as e:
            logger.warning("POST %s timed out after %.1fs", url, self.timeout)
            raise TransportError(
                f"Request timed out after {self.timeout}s: {e}", {"url": url}
            ) from e
        except httpx.RequestError as e:
            logger.warning("POST %s failed: %s", url, e)
            raise TransportError(f"Request failed: {e}", {"url": url}) from e

    @staticmethod
    def _parse_chunk(data: str) -> GenerationResponse:
        """
        Deserialize one `data:` event.

        Raises:
            GenerativeAIError: Event is an error envelope (typed by its code)
            DeserializationError: Event is neither a chunk nor an error
        """
        try:
            body = json.loads(data)
        except ValueError as e:
            raise DeserializationError(f"Malformed stream chunk: {e}") from e

        envelope = _error_envelope(body)
        if envelope:
            raise _error_from_envelope(envelope, None, "Stream aborted by server")

        try:
            return GenerationResponse.model_validate(body)
        except ValidationError as e:
            raise DeserializationError(f"Malformed stream chunk: {e}") from e

    async def close(self) -> None:
        """Close HTTP client (only if this transport created it)."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
