"""Build resources from YAML or JSON document streams and write them back."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping

import yaml

from ..errors import ResourceError
from .resource import (
    INDEX_ANNOTATION,
    LEGACY_INDEX_ANNOTATION,
    LEGACY_PATH_ANNOTATION,
    PATH_ANNOTATION,
    Resource,
)


class ResourceFactory:
    """Create :class:`Resource` objects from raw document text."""

    def from_mapping(self, data: Mapping[str, Any]) -> Resource:
        return Resource(data)

    def slice_from_bytes(self, payload: bytes | str) -> List[Resource]:
        """Parse every document of a stream into resources.

        Null and empty-mapping documents are skipped and ``kind: List`` documents are expanded
        into their items.

        Raises:
            ResourceError: when the stream is not valid YAML or a document is
                not a mapping.
        """
        try:
            text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        except UnicodeDecodeError as error:
            raise ResourceError(f"document stream is not valid UTF-8: {error}") from error
        try:
            documents = list(yaml.safe_load_all(text))
        except yaml.YAMLError as error:
            raise ResourceError(f"unable to parse document stream: {error}") from error

        resources: List[Resource] = []
        for index, document in enumerate(documents):
            if document is None or (isinstance(document, Mapping) and not document):
                continue
            if not isinstance(document, Mapping):
                raise ResourceError(
                    f"document {index} is a {type(document).__name__}, expected a mapping",
                    details={"index": index},
                )
            resources.extend(self._expand(document))
        return resources

    def _expand(self, document: Mapping[str, Any]) -> List[Resource]:
        kind = document.get("kind")
        items = document.get("items")
        if isinstance(kind, str) and kind.endswith("List") and isinstance(items, list):
            expanded: List[Resource] = []
            for item in items:
                if not isinstance(item, Mapping):
                    raise ResourceError(f"items of {kind} must be mappings")
                expanded.append(self.from_mapping(item))
            return expanded
        return [self.from_mapping(document)]


def stamp_provenance(resources: Iterable[Resource], path: str) -> None:
    """Record the source path and index of each resource read from ``path``."""
    for index, resource in enumerate(resources):
        annotations = resource.get_annotations()
        annotations[PATH_ANNOTATION] = path
        annotations[INDEX_ANNOTATION] = str(index)
        annotations[LEGACY_PATH_ANNOTATION] = path
        annotations[LEGACY_INDEX_ANNOTATION] = str(index)
        resource.set_annotations(annotations)


def dump_resources(resources: Iterable[Resource], *, strip_internal: bool = True) -> str:
    """Serialise resources as a YAML stream, optionally hiding provenance."""
    documents = []
    for resource in resources:
        clone = resource.copy()
        if strip_internal:
            clone.strip_internal_annotations()
        documents.append(clone.data)
    return yaml.safe_dump_all(documents, sort_keys=False, default_flow_style=False)


__all__ = ["ResourceFactory", "dump_resources", "stamp_provenance"]
