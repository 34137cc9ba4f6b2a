"""
Model registry keyed by version.

The registry maps each version selector to exactly one ModelDef. Version
None holds the default rules used when callers pass no version.

The registry can be frozen once all models are registered; freezing
computes a fingerprint of the registered models.

Example:
    >>> registry = ModelRegistry()
    >>> registry.register(ModelDef(name="User", version=1, fields=(...)))
    >>> registry.get(1).name
    'User'
"""

from __future__ import annotations

import hashlib
import json
import threading
from collections.abc import Iterator

from ..errors import UnknownVersionError
from .types import ModelDef, Version


class RegistryFrozenError(Exception):
    """Registry is frozen and cannot be modified."""

    pass


class DuplicateRegistrationError(Exception):
    """A model is already registered for this version."""

    pass


class ModelRegistry:
    """Registry of model versions.

    Example:
        >>> registry = ModelRegistry()
        >>> registry.register(UserV1)
        >>> registry.register(UserV2)
        >>> registry.freeze()
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._models: dict[Version, ModelDef] = {}
        self._frozen = False
        self._fingerprint: str | None = None
        self._lock = threading.Lock()

    @property
    def frozen(self) -> bool:
        """Whether registry is frozen."""
        return self._frozen

    @property
    def fingerprint(self) -> str | None:
        """Registry fingerprint (available after freeze)."""
        return self._fingerprint

    def register(self, model: ModelDef) -> None:
        """Register a model under its version.

        Args:
            model: ModelDef to register

        Raises:
            RegistryFrozenError: If registry is frozen
            DuplicateRegistrationError: If the version is already registered
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Cannot register: registry is frozen")

            if model.version in self._models:
                existing = self._models[model.version]
                raise DuplicateRegistrationError(
                    f"version {model.version!r} already registered as '{existing.name}'"
                )

            self._models[model.version] = model

    def get(self, version: Version = None) -> ModelDef | None:
        """Get the model for a version."""
        return self._models.get(version)

    def require(self, version: Version = None) -> ModelDef:
        """Get the model for a version or raise UnknownVersionError."""
        model = self._models.get(version)
        if model is None:
            raise UnknownVersionError(version)
        return model

    def __contains__(self, version: object) -> bool:
        return version in self._models

    def __len__(self) -> int:
        return len(self._models)

    def models(self) -> Iterator[ModelDef]:
        """Iterate over all registered models."""
        yield from self._models.values()

    def freeze(self) -> str:
        """Freeze registry and compute fingerprint.

        Returns:
            Registry fingerprint

        Raises:
            RegistryFrozenError: If already frozen
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Registry is already frozen")

            self._fingerprint = self._compute_fingerprint()
            self._frozen = True
            return self._fingerprint

    def _compute_fingerprint(self) -> str:
        """Compute SHA-256 fingerprint."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        hash_bytes = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        return f"sha256:{hash_bytes}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        # Versions mix str, int and None, so sort on their repr
        return {
            "models": [
                self._models[version].to_dict()
                for version in sorted(self._models, key=repr)
            ],
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)
