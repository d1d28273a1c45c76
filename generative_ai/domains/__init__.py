"""
Domains - Typed data shared by both endpoints.

Each domain is self-contained with:
- models.py: Pydantic data models
- Supporting modules
- test_*.py beside the code
"""

__all__ = [
    "generation",
    "catalog",
]
