"""
Auth Adapter - Optional Vertex AI token acquisition from a service account key.
"""

from .service_account import GCP_AUTH_SCOPE, GOOGLE_TOKEN_URI, ServiceAccountCredentials

__all__ = ["ServiceAccountCredentials", "GCP_AUTH_SCOPE", "GOOGLE_TOKEN_URI"]
