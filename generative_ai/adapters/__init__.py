"""
Adapters - HTTP, auth and endpoint integrations.

All network access is wrapped here; domains stay plain data.
"""

from .endpoints import EndpointStrategy, Operation, PublicEndpoint, VertexEndpoint
from .gemini import GeminiClient
from .transport import HttpTransport

__all__ = [
    "GeminiClient",
    "EndpointStrategy",
    "Operation",
    "PublicEndpoint",
    "VertexEndpoint",
    "HttpTransport",
]
