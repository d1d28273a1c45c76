"""
Model Registry - Catalogue of known models, loaded from data files.

Which models exist, and which are only served on the public v1beta API,
changes between releases. That knowledge lives in known_models.json (and an
optional user file) instead of in code.

Usage:
    from generative_ai.domains.catalog import get_registry

    registry = get_registry()
    registry.requires_beta("gemini-1.5-pro")  # True
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from generative_ai.config.errors import ConfigurationError

from .models import CustomModel, KnownModel, ModelRef

logger = logging.getLogger(__name__)

__all__ = ["ModelRegistry", "RegistryEntry", "get_registry"]

_PACKAGED_FILE = "known_models.json"


class RegistryEntry(BaseModel):
    """One catalogue entry."""

    id: str = Field(min_length=1)
    display_name: str | None = None
    beta: bool = False
    aliases: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ModelRegistry:
    """
    Lookup table over catalogue entries, keyed by id and alias.

    Example:
        >>> registry = ModelRegistry.load()
        >>> registry.resolve("gemini-1.5-flash-latest")
        'gemini-1.5-flash'
    """

    def __init__(self, entries: list[RegistryEntry]) -> None:
        self._entries: dict[str, RegistryEntry] = {}
        self._aliases: dict[str, str] = {}
        for entry in entries:
            self._entries[entry.id] = entry
            for alias in entry.aliases:
                self._aliases[alias] = entry.id

    @classmethod
    def load(cls, extra_file: str | Path | None = None) -> ModelRegistry:
        """
        Load the packaged catalogue, then merge an optional user file over it.

        Entries in the user file replace packaged entries with the same id.

        Raises:
            ConfigurationError: A file is missing or malformed
        """
        packaged = resources.files(__package__).joinpath(_PACKAGED_FILE)
        entries = {e.id: e for e in cls._parse(packaged.read_text("utf-8"), _PACKAGED_FILE)}

        if extra_file is not None:
            path = Path(extra_file)
            if not path.exists():
                raise ConfigurationError(
                    f"Known models file not found: {path}", {"path": str(path)}
                )
            for entry in cls._parse(path.read_text("utf-8"), str(path)):
                entries[entry.id] = entry
            logger.debug("Merged model catalogue from %s", path)

        return cls(list(entries.values()))

    @staticmethod
    def _parse(text: str, source: str) -> list[RegistryEntry]:
        """Parse catalogue JSON into entries."""
        try:
            data: Any = json.loads(text)
            return [RegistryEntry.model_validate(item) for item in data["models"]]
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            raise ConfigurationError(
                f"Malformed known models file {source}: {e}", {"path": source}
            ) from e

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def ids(self) -> list[str]:
        """Canonical ids of all entries."""
        return list(self._entries)

    def resolve(self, name: str | ModelRef) -> str:
        """Canonical id for a name or alias. Unknown names pass through."""
        key = str(name)
        return self._aliases.get(key, key)

    def get(self, name: str | ModelRef) -> RegistryEntry | None:
        """Entry for a name or alias, if catalogued."""
        return self._entries.get(self.resolve(name))

    def is_known(self, name: str | ModelRef) -> bool:
        """Check if a model is catalogued."""
        return self.get(name) is not None

    def requires_beta(self, name: str | ModelRef) -> bool:
        """Check if a model is only served on the public v1beta API."""
        entry = self.get(name)
        return entry.beta if entry else False

    def lookup(self, name: str) -> ModelRef:
        """Resolve aliases, then map to KnownModel where possible."""
        canonical = self.resolve(name)
        try:
            return KnownModel(canonical)
        except ValueError:
            return CustomModel(name=canonical)


@lru_cache
def get_registry(extra_file: Path | None = None) -> ModelRegistry:
    """Get cached registry instance."""
    return ModelRegistry.load(extra_file)
