"""
Transport Adapter - httpx round trips with typed error mapping.
"""

from .client import HttpTransport, error_for_status, error_from_response

__all__ = ["HttpTransport", "error_for_status", "error_from_response"]
