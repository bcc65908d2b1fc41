"""A single configuration document plus its internal bookkeeping."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping

from ..errors import ResourceError
from ..merge.strategic import strategic_merge
from .ids import DEFAULT_NAMESPACE, Gvk, ResId

INTERNAL_PREFIX = "internal.config.kubernetes.io/"
PATH_ANNOTATION = INTERNAL_PREFIX + "path"
INDEX_ANNOTATION = INTERNAL_PREFIX + "index"
LEGACY_PATH_ANNOTATION = "config.kubernetes.io/path"
LEGACY_INDEX_ANNOTATION = "config.kubernetes.io/index"
LEGACY_ID_ANNOTATION = "config.k8s.io/id"
PREVIOUS_NAMES_ANNOTATION = INTERNAL_PREFIX + "previousNames"
PREVIOUS_NAMESPACES_ANNOTATION = INTERNAL_PREFIX + "previousNamespaces"
PREVIOUS_KINDS_ANNOTATION = INTERNAL_PREFIX + "previousKinds"

LEGACY_INTERNAL_ANNOTATIONS = (
    LEGACY_PATH_ANNOTATION,
    LEGACY_INDEX_ANNOTATION,
    LEGACY_ID_ANNOTATION,
)


def is_internal_annotation(key: str) -> bool:
    """Return True for provenance annotations that patch authors never see."""
    return key.startswith(INTERNAL_PREFIX) or key in LEGACY_INTERNAL_ANNOTATIONS


class Resource:
    """Mutable document wrapper exposing identity and annotation helpers."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise ResourceError(f"resource must be a mapping, got {type(data).__name__}")
        self.data: Dict[str, Any] = dict(data)
        self._name_change_allowed = False
        self._kind_change_allowed = False

    # Identity -----------------------------------------------------------------

    def _metadata(self, *, create: bool = False) -> Dict[str, Any]:
        metadata = self.data.get("metadata")
        if isinstance(metadata, dict):
            return metadata
        if metadata is not None and not create:
            raise ResourceError("metadata must be a mapping", details={"metadata": metadata})
        if not create:
            return {}
        metadata = {}
        self.data["metadata"] = metadata
        return metadata

    @property
    def api_version(self) -> str:
        return str(self.data.get("apiVersion") or "")

    @property
    def kind(self) -> str:
        return str(self.data.get("kind") or "")

    @property
    def name(self) -> str:
        return str(self._metadata().get("name") or "")

    @property
    def namespace(self) -> str:
        return str(self._metadata().get("namespace") or "")

    @property
    def gvk(self) -> Gvk:
        return Gvk.from_api_version(self.api_version, self.kind)

    def set_kind(self, kind: str) -> None:
        self.data["kind"] = kind

    def set_gvk(self, gvk: Gvk) -> None:
        self.data["apiVersion"] = gvk.api_version
        self.data["kind"] = gvk.kind

    def set_name(self, name: str) -> None:
        self._metadata(create=True)["name"] = name

    def set_namespace(self, namespace: str) -> None:
        metadata = self._metadata(create=True)
        if namespace:
            metadata["namespace"] = namespace
        else:
            metadata.pop("namespace", None)

    def cur_id(self) -> ResId:
        return ResId(gvk=self.gvk, name=self.name, namespace=self.namespace)

    def previous_ids(self) -> List[ResId]:
        """Return the ids this resource carried before renames, oldest first."""
        annotations = self.get_annotations()
        names = _split_csv(annotations.get(PREVIOUS_NAMES_ANNOTATION))
        namespaces = _split_csv(annotations.get(PREVIOUS_NAMESPACES_ANNOTATION))
        kinds = _split_csv(annotations.get(PREVIOUS_KINDS_ANNOTATION))
        if not (len(names) == len(namespaces) == len(kinds)):
            raise ResourceError(
                "number of previous names, namespaces and kinds must be equal",
                details={"names": names, "namespaces": namespaces, "kinds": kinds},
            )
        gvk = self.gvk
        return [
            ResId(gvk=Gvk(group=gvk.group, version=gvk.version, kind=kind), name=name, namespace=namespace)
            for name, namespace, kind in zip(names, namespaces, kinds)
        ]

    def org_id(self) -> ResId:
        """Return the original id: the oldest previous id, else the current one."""
        previous = self.previous_ids()
        if previous:
            return previous[0]
        return self.cur_id()

    def store_previous_id(self) -> None:
        """Record the current name, namespace, and kind before a mutation."""
        annotations = self.get_annotations()
        current = (
            (PREVIOUS_NAMES_ANNOTATION, self.name),
            (PREVIOUS_NAMESPACES_ANNOTATION, self.namespace or DEFAULT_NAMESPACE),
            (PREVIOUS_KINDS_ANNOTATION, self.kind),
        )
        for key, value in current:
            existing = annotations.get(key)
            annotations[key] = f"{existing},{value}" if existing else value
        self.set_annotations(annotations)

    # Labels and annotations -----------------------------------------------------

    def get_annotations(self) -> Dict[str, str]:
        value = self._metadata().get("annotations")
        if not isinstance(value, Mapping):
            return {}
        return {str(key): str(item) for key, item in value.items()}

    def set_annotations(self, annotations: Mapping[str, str]) -> None:
        if not annotations:
            self._metadata().pop("annotations", None)
            return
        self._metadata(create=True)["annotations"] = dict(annotations)

    def get_labels(self) -> Dict[str, str]:
        value = self._metadata().get("labels")
        if not isinstance(value, Mapping):
            return {}
        return {str(key): str(item) for key, item in value.items()}

    def internal_annotations(self) -> Dict[str, str]:
        """Snapshot the provenance annotations carried by this resource."""
        return {key: value for key, value in self.get_annotations().items() if is_internal_annotation(key)}

    def strip_internal_annotations(self) -> None:
        annotations = {
            key: value for key, value in self.get_annotations().items() if not is_internal_annotation(key)
        }
        self.set_annotations(annotations)

    # Patch options --------------------------------------------------------------

    def allow_name_change(self) -> None:
        self._name_change_allowed = True

    def allow_kind_change(self) -> None:
        self._kind_change_allowed = True

    @property
    def name_change_allowed(self) -> bool:
        return self._name_change_allowed

    @property
    def kind_change_allowed(self) -> bool:
        return self._kind_change_allowed

    # Mutation -------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.data

    def copy(self) -> "Resource":
        """Deep copy the document, keeping the name/kind change flags."""
        clone = Resource(copy.deepcopy(self.data))
        clone._name_change_allowed = self._name_change_allowed
        clone._kind_change_allowed = self._kind_change_allowed
        return clone

    def replace_data(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise ResourceError(f"resource must be a mapping, got {type(data).__name__}")
        self.data = dict(data)

    def apply_sm_patch(self, patch: "Resource") -> None:
        """Merge ``patch`` into this resource in place.

        Name and kind survive the merge unless the patch allows changing them;
        the namespace always survives. A ``$patch: delete`` body empties the
        resource, which callers treat as a removal.
        """
        name, namespace, kind = self.name, self.namespace, self.kind
        if patch.name_change_allowed or patch.kind_change_allowed:
            self.store_previous_id()
        merged = strategic_merge(self.data, patch.data)
        if merged is None:
            self.data = {}
            return
        self.data = merged
        if not patch.kind_change_allowed:
            self.set_kind(kind)
        if not patch.name_change_allowed:
            self.set_name(name)
        self.set_namespace(namespace)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def __repr__(self) -> str:
        return f"Resource({self.cur_id()})"


def _split_csv(value: str | None) -> List[str]:
    if not value:
        return []
    return value.split(",")


__all__ = [
    "INDEX_ANNOTATION",
    "INTERNAL_PREFIX",
    "LEGACY_ID_ANNOTATION",
    "LEGACY_INDEX_ANNOTATION",
    "LEGACY_PATH_ANNOTATION",
    "PATH_ANNOTATION",
    "PREVIOUS_KINDS_ANNOTATION",
    "PREVIOUS_NAMESPACES_ANNOTATION",
    "PREVIOUS_NAMES_ANNOTATION",
    "Resource",
    "is_internal_annotation",
]
