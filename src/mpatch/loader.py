"""Loaders that fetch patch content by path."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class LoadRestrictionError(PermissionError):
    """Raised when a path resolves outside of the loader root."""


class Loader(Protocol):
    """Capability to read external content by path."""

    def load(self, path: str) -> bytes:
        ...


class FileLoader:
    """Read files relative to ``root`` without leaving it."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = candidate.resolve()
        try:
            resolved.relative_to(self.root)
        except ValueError as error:
            raise LoadRestrictionError(
                f"security; file '{resolved}' is not in or below '{self.root}'"
            ) from error
        return resolved

    def load(self, path: str) -> bytes:
        resolved = self._resolve(path)
        if not resolved.is_file():
            raise FileNotFoundError(f"file '{resolved}' does not exist")
        return resolved.read_bytes()


__all__ = ["FileLoader", "LoadRestrictionError", "Loader"]
