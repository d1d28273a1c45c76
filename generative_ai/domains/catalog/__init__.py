"""
Catalog Domain - Model identifiers, catalogue data and model metadata.

This domain handles:
- Known model enumeration with a custom-name escape hatch
- Catalogue metadata (beta gating, aliases) loaded from data files
- ModelInfo / ModelList / TokenCount response types
"""

from .models import (
    CustomModel,
    KnownModel,
    ModelInfo,
    ModelList,
    ModelRef,
    TokenCount,
    resolve_model,
)
from .registry import ModelRegistry, RegistryEntry, get_registry

__all__ = [
    "KnownModel",
    "CustomModel",
    "ModelRef",
    "resolve_model",
    "ModelInfo",
    "ModelList",
    "TokenCount",
    "ModelRegistry",
    "RegistryEntry",
    "get_registry",
]
