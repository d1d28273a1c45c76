"""
Endpoints Adapter - Public Gemini API vs. Vertex AI.

Usage:
    from generative_ai.adapters.endpoints import EndpointStrategy, VertexEndpoint

    strategy = EndpointStrategy(
        VertexEndpoint(project_id="my-project", region="us-central1", access_token="ya29...")
    )
"""

from .models import (
    EndpointConfig,
    PublicEndpoint,
    TokenProvider,
    VertexEndpoint,
    parse_endpoint,
)
from .strategy import EndpointStrategy, Operation, endpoint_from_settings

__all__ = [
    "EndpointConfig",
    "PublicEndpoint",
    "VertexEndpoint",
    "TokenProvider",
    "parse_endpoint",
    "EndpointStrategy",
    "Operation",
    "endpoint_from_settings",
]
