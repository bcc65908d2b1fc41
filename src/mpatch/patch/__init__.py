"""Patch configuration, classification, and application."""

from .classifier import (
    JsonOperationList,
    ParseOutcome,
    ResolvedPatch,
    StrategicMergeSet,
    classify_patch,
    decide,
    parse_json_patch,
    parse_strategic_merge,
)
from .config import PatchSpec, load_patch_spec
from .json6902 import apply_json_patch
from .source import PatchSource, resolve_patch_source
from .strategic import apply_strategic_merge
from .targets import resolve_by_identity, select_targets
from .transformer import PatchTransformer, PluginHelpers

__all__ = [
    "JsonOperationList",
    "ParseOutcome",
    "PatchSource",
    "PatchSpec",
    "PatchTransformer",
    "PluginHelpers",
    "ResolvedPatch",
    "StrategicMergeSet",
    "apply_json_patch",
    "apply_strategic_merge",
    "classify_patch",
    "decide",
    "load_patch_spec",
    "parse_json_patch",
    "parse_strategic_merge",
    "resolve_by_identity",
    "resolve_patch_source",
    "select_targets",
]
