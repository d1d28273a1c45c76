"""
Tests for endpoint configs and the endpoint strategy.
"""

from __future__ import annotations

import pytest
from pydantic import SecretStr

from generative_ai.config.errors import (
    AuthenticationError,
    ConfigurationError,
    InvalidArgumentError,
)
from generative_ai.config.settings import Settings
from generative_ai.domains.catalog import KnownModel
from generative_ai.domains.generation import GenerationConfig, GenerationRequest

from .models import PublicEndpoint, VertexEndpoint, parse_endpoint
from .strategy import EndpointStrategy, Operation, endpoint_from_settings

PUBLIC = "https://generativelanguage.googleapis.com"
VERTEX = "https://us-central1-aiplatform.googleapis.com"


@pytest.fixture
def public() -> EndpointStrategy:
    return EndpointStrategy(PublicEndpoint(api_key="test-key"))


@pytest.fixture
def vertex() -> EndpointStrategy:
    return EndpointStrategy(
        VertexEndpoint(project_id="my-project", region="us-central1", access_token="ya29.tok")
    )


# --- Config Tests ---


def test_public_requires_api_key() -> None:
    """Test public endpoint without a key fails fast."""
    with pytest.raises(ConfigurationError):
        PublicEndpoint(api_key="")
    with pytest.raises(ConfigurationError):
        PublicEndpoint()  # type: ignore[call-arg]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"region": "us-central1"},
        {"project_id": "my-project"},
        {"project_id": "", "region": "us-central1"},
        {"project_id": "my-project", "region": "  "},
    ],
)
def test_vertex_requires_project_and_region(kwargs: dict[str, str]) -> None:
    """Test Vertex config missing project or region is a ConfigurationError."""
    with pytest.raises(ConfigurationError):
        VertexEndpoint(access_token="tok", **kwargs)


def test_vertex_requires_credentials() -> None:
    """Test Vertex config without token or provider fails fast."""
    with pytest.raises(ConfigurationError):
        VertexEndpoint(project_id="p", region="us-central1")


def test_configs_are_immutable() -> None:
    """Test endpoint configs are frozen."""
    config = PublicEndpoint(api_key="k")
    with pytest.raises(Exception):
        config.api_version = "v1"  # type: ignore


def test_config_repr_hides_secrets() -> None:
    """Test secrets never appear in reprs."""
    public = PublicEndpoint(api_key="super-secret-key")
    vertex = VertexEndpoint(project_id="p", region="r", access_token="ya29.secret")
    assert "super-secret-key" not in repr(public)
    assert "ya29.secret" not in repr(vertex)


def test_parse_endpoint_discriminates_on_kind() -> None:
    """Test tagged variant parsing."""
    public = parse_endpoint({"kind": "public", "api_key": "k"})
    vertex = parse_endpoint(
        {"kind": "vertex", "project_id": "p", "region": "europe-west4", "access_token": "t"}
    )
    assert isinstance(public, PublicEndpoint)
    assert isinstance(vertex, VertexEndpoint)

    with pytest.raises(ConfigurationError):
        parse_endpoint({"kind": "azure"})


def test_strategy_rejects_foreign_config() -> None:
    """Test strategy only accepts the two variants."""
    with pytest.raises(ConfigurationError):
        EndpointStrategy({"kind": "public"})  # type: ignore[arg-type]


# --- URL Tests ---


def test_public_urls(public: EndpointStrategy) -> None:
    """Test public endpoint URL templates."""
    assert public.url(Operation.GENERATE_CONTENT, "gemini-pro") == (
        f"{PUBLIC}/v1beta/models/gemini-pro:generateContent"
    )
    assert public.url(Operation.COUNT_TOKENS, KnownModel.GEMINI_1_0_PRO) == (
        f"{PUBLIC}/v1beta/models/gemini-1.0-pro:countTokens"
    )
    assert public.url(Operation.GET_MODEL, "gemini-pro") == f"{PUBLIC}/v1beta/models/gemini-pro"
    assert public.url(Operation.LIST_MODELS) == f"{PUBLIC}/v1beta/models"


def test_public_url_carries_no_key(public: EndpointStrategy) -> None:
    """Test the API key is never placed in the URL."""
    for operation in Operation:
        url = public.url(operation, "gemini-pro")
        assert "test-key" not in url
        assert "key=" not in url


def test_vertex_urls(vertex: EndpointStrategy) -> None:
    """Test Vertex endpoint URL templates."""
    assert vertex.url(Operation.STREAM_GENERATE_CONTENT, "gemini-pro") == (
        f"{VERTEX}/v1/projects/my-project/locations/us-central1"
        "/publishers/google/models/gemini-pro:streamGenerateContent"
    )
    assert vertex.url(Operation.GET_MODEL, "gemini-pro") == (
        f"{VERTEX}/v1/publishers/google/models/gemini-pro"
    )
    assert vertex.url(Operation.LIST_MODELS) == f"{VERTEX}/v1beta1/publishers/google/models"


def test_vertex_global_region() -> None:
    """Test the global region uses the regionless host."""
    strategy = EndpointStrategy(VertexEndpoint(project_id="p", region="global", access_token="t"))
    assert strategy.url(Operation.GENERATE_CONTENT, "gemini-2.5-pro").startswith(
        "https://aiplatform.googleapis.com/v1/projects/p/locations/global/"
    )


def test_url_requires_model(public: EndpointStrategy) -> None:
    """Test model-scoped operations need a model."""
    with pytest.raises(InvalidArgumentError):
        public.url(Operation.GENERATE_CONTENT)


def test_stream_params(public: EndpointStrategy) -> None:
    """Test streaming asks for server-sent events."""
    assert public.params(Operation.STREAM_GENERATE_CONTENT) == {"alt": "sse"}
    assert public.params(Operation.GENERATE_CONTENT) == {}


# --- Auth Tests ---


async def test_public_auth_header(public: EndpointStrategy) -> None:
    """Test API key header."""
    assert await public.auth_headers() == {"x-goog-api-key": "test-key"}


async def test_vertex_static_token(vertex: EndpointStrategy) -> None:
    """Test bearer header from a static token."""
    assert await vertex.auth_headers() == {"Authorization": "Bearer ya29.tok"}


async def test_vertex_sync_and_async_providers() -> None:
    """Test bearer header from sync and async token providers."""

    async def async_provider() -> str:
        return "async-token"

    sync = EndpointStrategy(
        VertexEndpoint(project_id="p", region="r", token_provider=lambda: "sync-token")
    )
    asynchronous = EndpointStrategy(
        VertexEndpoint(project_id="p", region="r", token_provider=async_provider)
    )
    assert await sync.auth_headers() == {"Authorization": "Bearer sync-token"}
    assert await asynchronous.auth_headers() == {"Authorization": "Bearer async-token"}


async def test_vertex_provider_failures() -> None:
    """Test provider errors and empty tokens surface as AuthenticationError."""

    def broken() -> str:
        raise RuntimeError("metadata server unreachable")

    failing = EndpointStrategy(VertexEndpoint(project_id="p", region="r", token_provider=broken))
    empty = EndpointStrategy(VertexEndpoint(project_id="p", region="r", token_provider=lambda: ""))

    with pytest.raises(AuthenticationError):
        await failing.auth_headers()
    with pytest.raises(AuthenticationError):
        await empty.auth_headers()


# --- Payload Tests ---


def test_adapt_payload_fills_role(vertex: EndpointStrategy) -> None:
    """Test role-less contents get the user role."""
    payload = {"contents": [{"parts": [{"text": "Hi"}]}]}
    body = vertex.adapt_payload(Operation.GENERATE_CONTENT, "gemini-pro", payload)
    assert body == {"contents": [{"role": "user", "parts": [{"text": "Hi"}]}]}
    # Input left untouched
    assert "role" not in payload["contents"][0]


def test_public_count_tokens_bare_contents(public: EndpointStrategy) -> None:
    """Test countTokens with contents only sends contents."""
    request = GenerationRequest(contents=["Hi"])
    body = public.adapt_payload(Operation.COUNT_TOKENS, "gemini-pro", request.to_payload())
    assert body == {"contents": [{"role": "user", "parts": [{"text": "Hi"}]}]}


def test_public_count_tokens_wraps_full_request(public: EndpointStrategy) -> None:
    """Test countTokens with a system instruction wraps a full request."""
    request = GenerationRequest(contents=["Hi"], system_instruction="Be terse.")
    body = public.adapt_payload(Operation.COUNT_TOKENS, "gemini-1.5-pro", request.to_payload())
    assert body == {
        "generateContentRequest": {
            "model": "models/gemini-1.5-pro",
            "contents": [{"role": "user", "parts": [{"text": "Hi"}]}],
            "systemInstruction": {"parts": [{"text": "Be terse."}]},
        }
    }


def test_vertex_count_tokens_drops_unsupported(vertex: EndpointStrategy) -> None:
    """Test Vertex countTokens keeps only accepted fields."""
    payload = {
        "contents": [{"role": "user", "parts": [{"text": "Hi"}]}],
        "safetySettings": [{"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"}],
        "systemInstruction": {"parts": [{"text": "x"}]},
    }
    body = vertex.adapt_payload(Operation.COUNT_TOKENS, "gemini-pro", payload)
    assert set(body) == {"contents", "systemInstruction"}


# --- API Version Gating Tests ---


def test_public_v1_rejects_beta_model() -> None:
    """Test beta-only models fail fast on public v1."""
    strategy = EndpointStrategy(PublicEndpoint(api_key="k", api_version="v1"))
    with pytest.raises(ConfigurationError):
        strategy.check_request(GenerationRequest(model="gemini-1.5-pro", contents=["Hi"]))
    strategy.check_request(GenerationRequest(model="gemini-1.0-pro", contents=["Hi"]))


def test_public_v1_rejects_beta_features() -> None:
    """Test system instructions and JSON mode need v1beta."""
    strategy = EndpointStrategy(PublicEndpoint(api_key="k", api_version="v1"))
    with pytest.raises(ConfigurationError):
        strategy.check_request(
            GenerationRequest(contents=["Hi"], system_instruction="Be terse.")
        )
    with pytest.raises(ConfigurationError):
        strategy.check_request(
            GenerationRequest(
                contents=["Hi"],
                generation_config=GenerationConfig(response_mime_type="application/json"),
            )
        )


def test_beta_and_vertex_accept_everything(
    public: EndpointStrategy, vertex: EndpointStrategy
) -> None:
    """Test no gating on v1beta or Vertex."""
    request = GenerationRequest(
        model="gemini-1.5-pro", contents=["Hi"], system_instruction="Be terse."
    )
    public.check_request(request)
    vertex.check_request(request)


# --- Describe / Settings Tests ---


def test_describe_is_redacted(public: EndpointStrategy, vertex: EndpointStrategy) -> None:
    """Test describe() omits credentials."""
    assert "test-key" not in public.describe()
    assert "ya29.tok" not in vertex.describe()
    assert "my-project" in vertex.describe()


def test_endpoint_from_settings_public() -> None:
    """Test public endpoint from settings."""
    settings = Settings(_env_file=None, api_key=SecretStr("k"), api_version="v1")
    endpoint = endpoint_from_settings(settings)
    assert isinstance(endpoint, PublicEndpoint)
    assert endpoint.api_version == "v1"


def test_endpoint_from_settings_missing_values() -> None:
    """Test missing settings raise ConfigurationError."""
    with pytest.raises(ConfigurationError):
        endpoint_from_settings(Settings(_env_file=None, endpoint="public", api_key=None))
    with pytest.raises(ConfigurationError):
        endpoint_from_settings(
            Settings(
                _env_file=None,
                endpoint="vertex",
                gcp_region_name="us-central1",
                gcp_project_id=None,
                gcp_access_token=SecretStr("t"),
            )
        )


def test_endpoint_from_settings_vertex() -> None:
    """Test Vertex endpoint from settings."""
    settings = Settings(
        _env_file=None,
        endpoint="vertex",
        gcp_project_id="p",
        gcp_region_name="asia-northeast1",
        gcp_access_token=SecretStr("t"),
    )
    endpoint = endpoint_from_settings(settings)
    assert isinstance(endpoint, VertexEndpoint)
    assert endpoint.region == "asia-northeast1"
