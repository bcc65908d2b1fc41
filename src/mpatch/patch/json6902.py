"""Apply RFC 6902 operation lists to every selected target.

Operation lists know nothing about the provenance annotations a resource
carries, and may replace or drop the annotation map wholesale. Each target's
internal annotations are snapshotted before the operations run and written
back over whatever the operations left behind.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import jsonpatch
import jsonpointer

from ..errors import MissingTargetError, OperationApplyError, ResourceError
from ..resource.collection import ResourceCollection
from ..resource.resource import Resource
from ..resource.selector import Selector
from ..telemetry import emit_event
from .classifier import JsonOperationList
from .targets import select_targets

LOGGER = logging.getLogger(__name__)


def restore_internal_annotations(resource: Resource, snapshot: Mapping[str, str]) -> None:
    """Overlay ``snapshot`` onto the resource's current annotations."""
    annotations = resource.get_annotations()
    annotations.update(snapshot)
    resource.set_annotations(annotations)


def apply_json_patch(
    collection: ResourceCollection,
    operations: JsonOperationList,
    target: Optional[Selector],
    label: str,
) -> None:
    """Apply ``operations`` to each resource selected by ``target``, in order."""
    if target is None:
        raise MissingTargetError(f"must specify a target for JSON patch {label}", details={"source": label})

    selected = select_targets(collection, target, label)
    if not selected:
        LOGGER.warning("JSON patch %s matched no resources for target %s", label, target.describe())
        return

    json_patch = operations.to_json_patch()
    for resource in selected:
        target_id = resource.cur_id()
        working = resource.copy()
        working.store_previous_id()
        snapshot = working.internal_annotations()
        details = {"source": label, "target_id": str(target_id)}
        try:
            patched = json_patch.apply(working.data, in_place=True)
        except (jsonpatch.JsonPatchException, jsonpointer.JsonPointerException) as error:
            raise OperationApplyError(
                f"failed to apply JSON patch {label} to {target_id}: {error}", details=details
            ) from error
        if not isinstance(patched, dict):
            raise OperationApplyError(
                f"JSON patch {label} turned {target_id} into a {type(patched).__name__}", details=details
            )
        # The target is only replaced once provenance has been restored onto the result.
        working.replace_data(patched)
        try:
            restore_internal_annotations(working, snapshot)
        except ResourceError as error:
            raise OperationApplyError(
                f"JSON patch {label} left {target_id} without usable metadata: {error}", details=details
            ) from error
        resource.replace_data(working.data)
        emit_event("patch.json6902.applied", source=label, target=str(target_id), operations=len(operations))


__all__ = ["apply_json_patch", "restore_internal_annotations"]
