"""Configuration model for a single patch operation."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError
from ..resource.selector import Selector

LOGGER = logging.getLogger(__name__)

OPTION_ALLOW_NAME_CHANGE = "allowNameChange"
OPTION_ALLOW_KIND_CHANGE = "allowKindChange"
KNOWN_OPTIONS = frozenset({OPTION_ALLOW_NAME_CHANGE, OPTION_ALLOW_KIND_CHANGE})


class PatchSpec(BaseModel):
    """Patch configuration: inline text or a path, plus target and options.

    Host metadata such as ``apiVersion``, ``kind`` and ``metadata`` is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    path: str = ""
    patch: str = ""
    target: Optional[Selector] = None
    options: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("path", "patch", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("patch")
    @classmethod
    def _strip_patch(cls, value: str) -> str:
        return value.strip()

    @field_validator("options", mode="before")
    @classmethod
    def _none_as_no_options(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def allow_name_change(self) -> bool:
        return bool(self.options.get(OPTION_ALLOW_NAME_CHANGE, False))

    @property
    def allow_kind_change(self) -> bool:
        return bool(self.options.get(OPTION_ALLOW_KIND_CHANGE, False))


def decode_config(raw_config: bytes | str) -> str:
    if not isinstance(raw_config, bytes):
        return raw_config
    try:
        return raw_config.decode("utf-8")
    except UnicodeDecodeError as error:
        raise ConfigurationError(f"patch configuration is not valid UTF-8: {error}") from error


def load_patch_spec(raw_config: bytes | str) -> PatchSpec:
    """Decode YAML configuration into a :class:`PatchSpec`."""
    text = decode_config(raw_config)
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as error:
        raise ConfigurationError(f"unable to parse patch configuration: {error}") from error
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"patch configuration must be a mapping, got {type(data).__name__}\n{text}"
        )
    try:
        spec = PatchSpec.model_validate(data)
    except ValidationError as error:
        raise ConfigurationError(
            f"invalid patch configuration: {error}",
            details={"errors": error.errors(include_url=False)},
        ) from error
    unknown = sorted(set(spec.options) - KNOWN_OPTIONS)
    if unknown:
        LOGGER.warning("Ignoring unrecognised patch options: %s", ", ".join(unknown))
    return spec


__all__ = [
    "KNOWN_OPTIONS",
    "OPTION_ALLOW_KIND_CHANGE",
    "OPTION_ALLOW_NAME_CHANGE",
    "PatchSpec",
    "decode_config",
    "load_patch_spec",
]
