"""Apply strategic-merge patches to their resolved targets."""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import EmptyPatchError, MergeError, MultiplePatchesWithTargetError, NoMatchError, StrategicMergeError
from ..resource.collection import ResourceCollection
from ..resource.selector import Selector
from ..telemetry import emit_event
from .classifier import StrategicMergeSet
from .targets import resolve_by_identity, select_targets

LOGGER = logging.getLogger(__name__)


def apply_strategic_merge(
    collection: ResourceCollection,
    patches: StrategicMergeSet,
    target: Optional[Selector],
    label: str,
) -> None:
    """Merge each patch into its target, stopping at the first failure.

    With a ``target`` selector exactly one patch may be configured and every
    selected resource receives it. Without one, each patch is merged into the
    resource carrying the patch's own identity.
    """
    if target is not None:
        _apply_with_target(collection, patches, target, label)
        return

    for index, patch in enumerate(patches.patches):
        resource = resolve_by_identity(collection, patch, label)
        target_id = resource.cur_id()
        try:
            resource.apply_sm_patch(patch)
        except StrategicMergeError as error:
            raise MergeError(
                f"failed to apply strategic merge patch {index} to {target_id}: {error}",
                details={
                    "source": label,
                    "patch_index": index,
                    "patch_id": str(patch.org_id()),
                    "target_id": str(target_id),
                },
            ) from error
        if resource.is_empty():
            LOGGER.debug("Removing %s deleted by strategic merge patch %d", target_id, index)
            collection.remove(resource)
        emit_event("patch.strategic_merge.applied", source=label, patch_index=index, target=str(target_id))


def _apply_with_target(
    collection: ResourceCollection,
    patches: StrategicMergeSet,
    target: Selector,
    label: str,
) -> None:
    if len(patches) > 1:
        raise MultiplePatchesWithTargetError(
            "Multiple Strategic-Merge Patches in one `patches` entry is not allowed "
            f"to set `patches.target` field: {label}",
            details={"source": label, "patch_count": len(patches)},
        )
    if not patches.patches:
        raise EmptyPatchError(f"no strategic merge patch to apply to target in {label}", details={"source": label})

    patch = patches.patches[0]
    selected = select_targets(collection, target, label)
    if not selected:
        raise NoMatchError(
            f"unable to find patch target {target.describe()!r} in `resources`: {label}",
            details={"source": label, "target": target.describe()},
        )
    ids = [resource.cur_id() for resource in selected]
    try:
        collection.apply_sm_patch(ids, patch)
    except StrategicMergeError as error:
        raise MergeError(
            f"failed to apply strategic merge patch to target {target.describe()!r}: {error}",
            details={
                "source": label,
                "patch_index": 0,
                "patch_id": str(patch.org_id()),
                "target_id": error.details.get("target_id"),
                "target_ids": [str(item) for item in ids],
            },
        ) from error
    emit_event(
        "patch.strategic_merge.applied",
        source=label,
        patch_index=0,
        targets=[str(item) for item in ids],
    )


__all__ = ["apply_strategic_merge"]
