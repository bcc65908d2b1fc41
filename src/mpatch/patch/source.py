"""Resolve raw patch text from inline configuration or a loaded path."""

from __future__ import annotations

import json
from dataclasses import dataclass

from ..errors import ConfigurationError, LoadError
from ..loader import Loader
from .config import PatchSpec


@dataclass(frozen=True, slots=True)
class PatchSource:
    """Raw patch text and the label used to report where it came from."""

    text: str
    label: str


def resolve_patch_source(spec: PatchSpec, loader: Loader, raw_config: str = "") -> PatchSource:
    """Return the patch text selected by ``spec``.

    Exactly one of ``patch`` and ``path`` must be set.
    """
    if not spec.patch and not spec.path:
        raise ConfigurationError(f"must specify one of patch and path in\n{raw_config}")
    if spec.patch and spec.path:
        raise ConfigurationError(f"patch and path can't be set at the same time\n{raw_config}")
    if spec.patch:
        return PatchSource(text=spec.patch, label=f"[patch: {json.dumps(spec.patch, ensure_ascii=False)}]")

    try:
        loaded = loader.load(spec.path)
        text = loaded.decode("utf-8") if isinstance(loaded, bytes) else str(loaded)
    except Exception as error:
        raise LoadError(
            f"failed to get the patch file from path({spec.path}): {error}",
            details={"path": spec.path},
        ) from error
    return PatchSource(text=text, label=f"[path: {json.dumps(spec.path, ensure_ascii=False)}]")


__all__ = ["PatchSource", "resolve_patch_source"]
