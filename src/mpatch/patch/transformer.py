"""Patch transformer exposed to the host pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ConfigurationError
from ..loader import Loader
from ..resource.collection import ResourceCollection
from ..resource.factory import ResourceFactory
from ..telemetry import emit_event
from .classifier import JsonOperationList, ResolvedPatch, StrategicMergeSet, classify_patch
from .config import PatchSpec, decode_config, load_patch_spec
from .json6902 import apply_json_patch
from .source import PatchSource, resolve_patch_source
from .strategic import apply_strategic_merge

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PluginHelpers:
    """Collaborators supplied by the host: a loader and a resource factory."""

    loader: Loader
    factory: ResourceFactory = field(default_factory=ResourceFactory)


class PatchTransformer:
    """Apply one configured patch to a resource collection.

    ``configure`` must run before ``transform``; it loads the patch text and
    classifies it so that every configuration problem surfaces up front.
    """

    def __init__(self) -> None:
        self.spec: Optional[PatchSpec] = None
        self.source: Optional[PatchSource] = None
        self.resolved: Optional[ResolvedPatch] = None

    def configure(self, helpers: PluginHelpers, raw_config: bytes | str) -> None:
        text = decode_config(raw_config)
        spec = load_patch_spec(text)
        source = resolve_patch_source(spec, helpers.loader, text)
        resolved = classify_patch(source, spec, helpers.factory)
        self.spec, self.source, self.resolved = spec, source, resolved
        kind = "strategic-merge" if isinstance(resolved, StrategicMergeSet) else "json6902"
        LOGGER.debug("Configured %s patch with %d entries from %s", kind, len(resolved), source.label)
        emit_event("patch.configured", source=source.label, format=kind, entries=len(resolved))

    def transform(self, collection: ResourceCollection) -> None:
        if self.spec is None or self.source is None or self.resolved is None:
            raise ConfigurationError("patch transformer must be configured before transform")
        resolved = self.resolved
        if isinstance(resolved, StrategicMergeSet):
            apply_strategic_merge(collection, resolved, self.spec.target, self.source.label)
        elif isinstance(resolved, JsonOperationList):
            apply_json_patch(collection, resolved, self.spec.target, self.source.label)
        else:  # pragma: no cover - ResolvedPatch has exactly two variants
            raise TypeError(f"unsupported patch variant {type(resolved).__name__}")


__all__ = ["PatchTransformer", "PluginHelpers"]
