"""Error taxonomy raised while configuring and applying patches."""

from __future__ import annotations

from typing import Any, Mapping


class PatchTransformError(RuntimeError):
    """Base error for patch configuration, classification, and application."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class ConfigurationError(PatchTransformError):
    """Raised when the patch configuration is invalid or contradictory."""


class MissingTargetError(ConfigurationError):
    """Raised when a JSON patch is configured without a target selector."""


class LoadError(PatchTransformError):
    """Raised when patch content cannot be loaded from its path."""


class AmbiguousPatchError(PatchTransformError):
    """Raised when patch text parses as both strategic-merge and JSON patch."""


class UnparseablePatchError(PatchTransformError):
    """Raised when patch text parses as neither supported format."""


class EmptyPatchError(PatchTransformError):
    """Raised when a patch carries no operations or documents to apply."""


class NoMatchError(PatchTransformError):
    """Raised when a selector or identity lookup finds no target."""


class MultiplePatchesWithTargetError(PatchTransformError):
    """Raised when a target selector is combined with several merge patches."""


class MergeError(PatchTransformError):
    """Raised when a strategic-merge patch fails against its target."""


class OperationApplyError(PatchTransformError):
    """Raised when a JSON patch operation fails against a target."""


class SelectorError(PatchTransformError):
    """Raised when a selector or label expression is malformed."""


class ResourceError(PatchTransformError):
    """Raised when a document cannot be interpreted as a resource."""


class StrategicMergeError(PatchTransformError):
    """Raised by the strategic-merge contract for malformed patch bodies."""


__all__ = [
    "AmbiguousPatchError",
    "ConfigurationError",
    "EmptyPatchError",
    "LoadError",
    "MergeError",
    "MissingTargetError",
    "MultiplePatchesWithTargetError",
    "NoMatchError",
    "OperationApplyError",
    "PatchTransformError",
    "ResourceError",
    "SelectorError",
    "StrategicMergeError",
    "UnparseablePatchError",
]
