"""Apply strategic-merge and JSON patches to collections of manifests."""

from .errors import (
    AmbiguousPatchError,
    ConfigurationError,
    EmptyPatchError,
    LoadError,
    MergeError,
    MissingTargetError,
    MultiplePatchesWithTargetError,
    NoMatchError,
    OperationApplyError,
    PatchTransformError,
    UnparseablePatchError,
)
from .loader import FileLoader, Loader
from .patch import PatchSpec, PatchTransformer, PluginHelpers
from .resource import Resource, ResourceCollection, ResourceFactory, Selector

__all__ = [
    "AmbiguousPatchError",
    "ConfigurationError",
    "EmptyPatchError",
    "FileLoader",
    "LoadError",
    "Loader",
    "MergeError",
    "MissingTargetError",
    "MultiplePatchesWithTargetError",
    "NoMatchError",
    "OperationApplyError",
    "PatchSpec",
    "PatchTransformError",
    "PatchTransformer",
    "PluginHelpers",
    "Resource",
    "ResourceCollection",
    "ResourceFactory",
    "Selector",
    "UnparseablePatchError",
]
