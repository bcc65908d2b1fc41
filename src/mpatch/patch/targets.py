"""Resolve which documents of a collection a patch operates on."""

from __future__ import annotations

from typing import List

from ..errors import NoMatchError, SelectorError
from ..resource.collection import ResourceCollection
from ..resource.resource import Resource
from ..resource.selector import Selector


def select_targets(collection: ResourceCollection, selector: Selector, label: str) -> List[Resource]:
    """Return every resource matching ``selector``, possibly none."""
    try:
        return collection.select(selector)
    except SelectorError as error:
        raise NoMatchError(
            f"unable to find patch target {selector.describe()!r} in `resources`: {error}",
            details={"source": label, "target": selector.describe()},
        ) from error


def resolve_by_identity(collection: ResourceCollection, patch: Resource, label: str) -> Resource:
    """Return the single resource carrying the patch's own identity."""
    patch_id = patch.org_id()
    try:
        return collection.get_by_id(patch_id)
    except NoMatchError as error:
        raise NoMatchError(
            f"no resource matches strategic merge patch {patch_id.short()!r} ({patch_id}): {error}",
            details={"source": label, "patch_id": str(patch_id)},
        ) from error


__all__ = ["resolve_by_identity", "select_targets"]
