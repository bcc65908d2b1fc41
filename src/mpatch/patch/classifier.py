"""Decide whether patch text is a strategic-merge patch or a JSON patch.

The text is parsed independently under both grammars. Each parse returns a
:class:`ParseOutcome` instead of raising, and :func:`decide` combines the two
outcomes into exactly one :data:`ResolvedPatch` variant or a classification
error.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, TypeVar, Union

import jsonpatch
import jsonpointer
import yaml

from ..errors import AmbiguousPatchError, EmptyPatchError, ResourceError, UnparseablePatchError
from ..resource.factory import ResourceFactory
from ..resource.resource import Resource
from .config import PatchSpec
from .source import PatchSource

T = TypeVar("T")

OPERATIONS = frozenset({"add", "remove", "replace", "move", "copy", "test"})


class _OperationLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamp-like scalars as strings."""


_OperationLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """Result of one parse attempt: a value or the error that stopped it."""

    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ParseOutcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "ParseOutcome[T]":
        return cls(error=error)


@dataclass(frozen=True, slots=True)
class StrategicMergeSet:
    """Partial documents merged into targets, in configured order."""

    patches: Tuple[Resource, ...]

    def __len__(self) -> int:
        return len(self.patches)


@dataclass(frozen=True, slots=True)
class JsonOperationList:
    """Ordered RFC 6902 operations applied to every selected target."""

    operations: Tuple[Dict[str, Any], ...]

    def __len__(self) -> int:
        return len(self.operations)

    def to_json_patch(self) -> jsonpatch.JsonPatch:
        return jsonpatch.JsonPatch([dict(operation) for operation in self.operations])


ResolvedPatch = Union[StrategicMergeSet, JsonOperationList]


def parse_strategic_merge(text: str, factory: ResourceFactory) -> ParseOutcome[List[Resource]]:
    """Parse ``text`` as a stream of partial documents."""
    try:
        return ParseOutcome.success(factory.slice_from_bytes(text))
    except ResourceError as error:
        return ParseOutcome.failure(error)


def parse_json_patch(text: str) -> ParseOutcome[List[Dict[str, Any]]]:
    """Parse ``text`` as a JSON patch operation list.

    Text that does not start with ``[`` is read as YAML first, so operation
    lists may be written in either encoding. Only the first YAML document is
    considered.
    """
    stripped = text.strip()
    if not stripped:
        return ParseOutcome.failure(EmptyPatchError("empty json patch operations"))

    try:
        if stripped.startswith("["):
            operations: Any = json.loads(stripped)
        else:
            operations = next(iter(yaml.load_all(text, Loader=_OperationLoader)), None)
    except (ValueError, yaml.YAMLError) as error:
        return ParseOutcome.failure(error)

    if not isinstance(operations, list):
        return ParseOutcome.failure(
            ValueError(f"json patch must be a list of operations, got {type(operations).__name__}")
        )
    for index, operation in enumerate(operations):
        if not isinstance(operation, Mapping):
            return ParseOutcome.failure(ValueError(f"json patch operation {index} must be a mapping"))
        if operation.get("op") not in OPERATIONS:
            op = operation.get("op")
            return ParseOutcome.failure(ValueError(f"json patch operation {index} has unknown op {op!r}"))
        if not isinstance(operation.get("path"), str):
            return ParseOutcome.failure(ValueError(f"json patch operation {index} is missing a path"))

    decoded = [dict(operation) for operation in operations]
    try:
        jsonpatch.JsonPatch(decoded)
    except (jsonpatch.InvalidJsonPatch, jsonpointer.JsonPointerException, KeyError, TypeError) as error:
        return ParseOutcome.failure(error)
    return ParseOutcome.success(decoded)


def decide(
    strategic: ParseOutcome[List[Resource]],
    operations: ParseOutcome[List[Dict[str, Any]]],
    label: str,
) -> ResolvedPatch:
    """Combine both parse outcomes into a single patch variant.

    Raises:
        AmbiguousPatchError: when both parses succeed with at least one element.
        UnparseablePatchError: when both parses fail.
    """
    if strategic.ok and operations.ok and strategic.value and operations.value:
        raise AmbiguousPatchError(
            f"illegally qualifies as both a strategic-merge and JSON patch: {label}",
            details={"source": label},
        )
    if not strategic.ok and not operations.ok:
        raise UnparseablePatchError(
            f"unable to parse SM or JSON patch from {label}",
            details={
                "source": label,
                "strategic_merge_error": str(strategic.error),
                "json_patch_error": str(operations.error),
            },
        ) from strategic.error
    if strategic.ok and (not operations.ok or strategic.value or not operations.value):
        return StrategicMergeSet(tuple(strategic.value or ()))
    return JsonOperationList(tuple(operations.value or ()))


def classify_patch(source: PatchSource, spec: PatchSpec, factory: ResourceFactory) -> ResolvedPatch:
    """Classify ``source`` and apply per-entry options to merge patches."""
    resolved = decide(
        parse_strategic_merge(source.text, factory),
        parse_json_patch(source.text),
        source.label,
    )
    if isinstance(resolved, StrategicMergeSet):
        for patch in resolved.patches:
            if spec.allow_name_change:
                patch.allow_name_change()
            if spec.allow_kind_change:
                patch.allow_kind_change()
    return resolved


__all__ = [
    "JsonOperationList",
    "ParseOutcome",
    "ResolvedPatch",
    "StrategicMergeSet",
    "classify_patch",
    "decide",
    "parse_json_patch",
    "parse_strategic_merge",
]
