"""
Endpoint Models - Tagged variant over the public and Vertex AI endpoints.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, SecretStr, TypeAdapter, ValidationError, model_validator

from generative_ai.config.errors import ConfigurationError

PUBLIC_BASE_URL = "https://generativelanguage.googleapis.com"

# Zero-argument callable returning a bearer token, sync or async
TokenProvider = Callable[[], Union[str, Awaitable[str]]]


def _secret_value(value: Any) -> Any:
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    return value


class PublicEndpoint(BaseModel):
    """Public Gemini API, authenticated with an API key."""

    kind: Literal["public"] = "public"
    api_key: SecretStr
    api_version: str = "v1beta"
    base_url: str = PUBLIC_BASE_URL

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _require_api_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and not _secret_value(data.get("api_key")):
            raise ConfigurationError("Public endpoint requires an API key")
        return data

    @property
    def is_beta(self) -> bool:
        return "beta" in self.api_version


class VertexEndpoint(BaseModel):
    """Vertex AI endpoint, scoped to a GCP project and region, bearer auth."""

    kind: Literal["vertex"] = "vertex"
    project_id: str
    region: str
    access_token: SecretStr | None = None
    token_provider: TokenProvider | None = Field(default=None, repr=False)
    api_version: str = "v1"

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _require_scope_and_credentials(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        missing = [
            name for name in ("project_id", "region") if not str(data.get(name) or "").strip()
        ]
        if missing:
            raise ConfigurationError(
                f"Vertex endpoint requires {' and '.join(missing)}",
                {"missing": missing},
            )
        if not _secret_value(data.get("access_token")) and data.get("token_provider") is None:
            raise ConfigurationError(
                "Vertex endpoint requires an access_token or a token_provider"
            )
        return data

    @property
    def host(self) -> str:
        if self.region == "global":
            return "https://aiplatform.googleapis.com"
        return f"https://{self.region}-aiplatform.googleapis.com"


EndpointConfig = Annotated[
    Union[PublicEndpoint, VertexEndpoint], Field(discriminator="kind")
]

_endpoint_adapter: TypeAdapter[PublicEndpoint | VertexEndpoint] = TypeAdapter(EndpointConfig)


def parse_endpoint(data: dict[str, Any]) -> PublicEndpoint | VertexEndpoint:
    """
    Build an endpoint config from a plain mapping, e.g. {"kind": "vertex", ...}.

    Raises:
        ConfigurationError: Unknown kind or invalid fields
    """
    try:
        return _endpoint_adapter.validate_python(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid endpoint config: {e}") from e
