"""Ordered collection of resources with identity lookup and selection."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Sequence

from ..errors import NoMatchError, ResourceError, StrategicMergeError
from .ids import ResId
from .resource import Resource
from .selector import Selector, compile_anchored, matches_selector, parse_selector

LOGGER = logging.getLogger(__name__)


class ResourceCollection:
    """Documents being transformed, kept in insertion order."""

    def __init__(self, resources: Iterable[Resource] = ()) -> None:
        self._resources: List[Resource] = []
        for resource in resources:
            self.append(resource)

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._resources))

    def append(self, resource: Resource) -> None:
        """Add ``resource``; its current id must not already be present."""
        resource_id = resource.cur_id()
        for existing in self._resources:
            if existing.cur_id().equals(resource_id):
                raise ResourceError(
                    f"may not add resource with an already registered id: {resource_id}",
                    details={"id": str(resource_id)},
                )
        self._resources.append(resource)

    def remove(self, resource: Resource) -> None:
        self._resources = [item for item in self._resources if item is not resource]

    def get_matching_by_any_id(self, resource_id: ResId) -> List[Resource]:
        """Return resources whose current or any previous id equals ``resource_id``."""
        matches: List[Resource] = []
        for resource in self._resources:
            candidates = [resource.cur_id(), *resource.previous_ids()]
            if any(candidate.equals(resource_id) for candidate in candidates):
                matches.append(resource)
        return matches

    def get_by_id(self, resource_id: ResId) -> Resource:
        """Return the single resource identified by ``resource_id``."""
        matches = self.get_matching_by_any_id(resource_id)
        if not matches:
            raise NoMatchError(
                f"no matches for id {resource_id}",
                details={"id": str(resource_id)},
            )
        if len(matches) > 1:
            raise NoMatchError(
                f"multiple matches for id {resource_id}: {[str(item.cur_id()) for item in matches]}",
                details={"id": str(resource_id), "matches": [str(item.cur_id()) for item in matches]},
            )
        return matches[0]

    def select(self, selector: Selector) -> List[Resource]:
        """Return resources matching ``selector`` in collection order.

        Name and namespace patterns match either the original or the current
        value so renamed resources stay selectable.

        Raises:
            SelectorError: when a pattern or label expression is malformed.
        """
        name_re = compile_anchored(selector.name)
        namespace_re = compile_anchored(selector.namespace)
        for expression in (selector.label_selector, selector.annotation_selector):
            if expression:
                parse_selector(expression)
        gvk = selector.gvk
        selected: List[Resource] = []
        for resource in self._resources:
            cur_id = resource.cur_id()
            org_id = resource.org_id()
            if namespace_re is not None and not any(
                namespace_re.match(item.effective_namespace) for item in (org_id, cur_id)
            ):
                continue
            if name_re is not None and not any(name_re.match(item.name) for item in (org_id, cur_id)):
                continue
            if not resource.gvk.is_selected(gvk):
                continue
            if selector.label_selector and not matches_selector(selector.label_selector, resource.get_labels()):
                continue
            if selector.annotation_selector and not matches_selector(
                selector.annotation_selector, resource.get_annotations()
            ):
                continue
            selected.append(resource)
        LOGGER.debug("Selector %s matched %d resource(s)", selector.describe(), len(selected))
        return selected

    def apply_sm_patch(self, ids: Sequence[ResId], patch: Resource) -> None:
        """Merge one patch into every resource whose current id is in ``ids``.

        Each target receives its own copy of the patch carrying the target's
        group and version with the patch's kind. Targets emptied by a
        ``$patch: delete`` body are dropped from the collection.
        """
        for resource in list(self._resources):
            resource_id = resource.cur_id()
            if not any(resource_id.equals(item) for item in ids):
                continue
            patch_copy = patch.copy()
            patch_copy.set_gvk(resource.gvk)
            patch_copy.set_kind(patch.kind or resource.kind)
            try:
                resource.apply_sm_patch(patch_copy)
            except StrategicMergeError as error:
                error.details.setdefault("target_id", str(resource_id))
                raise
            if resource.is_empty():
                LOGGER.debug("Removing %s deleted by strategic merge patch", resource_id)
                self.remove(resource)

    def to_dicts(self) -> List[dict]:
        return [resource.to_dict() for resource in self._resources]


__all__ = ["ResourceCollection"]
