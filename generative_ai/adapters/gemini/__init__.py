"""
Gemini Adapter - Unified client for the public Gemini API and Vertex AI.

This is the ONLY place callers need: every operation goes through GeminiClient.
"""

from .client import GeminiClient

__all__ = ["GeminiClient"]
