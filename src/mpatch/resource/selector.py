"""Target selectors: identity fields plus label and annotation expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Mapping, Optional, Pattern, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..errors import SelectorError
from .ids import Gvk

Operator = Literal["=", "!=", "in", "notin", "exists", "!"]

_KEY = r"[A-Za-z0-9](?:[-A-Za-z0-9_./]*[A-Za-z0-9])?"
_VALUE = r"(?:[A-Za-z0-9](?:[-A-Za-z0-9_.]*[A-Za-z0-9])?)?"
_NOT_EXISTS_RE = re.compile(rf"^!\s*(?P<key>{_KEY})$")
_EQUALITY_RE = re.compile(rf"^(?P<key>{_KEY})\s*(?P<op>==|=|!=)\s*(?P<value>{_VALUE})$")
_SET_RE = re.compile(rf"^(?P<key>{_KEY})\s+(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$")
_EXISTS_RE = re.compile(rf"^(?P<key>{_KEY})$")
_VALUE_RE = re.compile(rf"^{_VALUE}$")


class Selector(BaseModel):
    """Query describing which documents of a collection a patch targets."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    group: str = ""
    version: str = ""
    kind: str = ""
    name: str = ""
    namespace: str = ""
    label_selector: str = Field(default="", alias="labelSelector")
    annotation_selector: str = Field(default="", alias="annotationSelector")

    @property
    def gvk(self) -> Gvk:
        return Gvk(group=self.group, version=self.version, kind=self.kind)

    def describe(self) -> str:
        """Render the non-empty fields for error messages."""
        fields = self.model_dump(by_alias=True, exclude_defaults=True)
        if not fields:
            return "{}"
        return ", ".join(f"{key}={value}" for key, value in fields.items())


@dataclass(frozen=True, slots=True)
class Requirement:
    """Single clause of a label or annotation selector."""

    key: str
    operator: Operator
    values: Tuple[str, ...] = ()

    def matches(self, mapping: Mapping[str, str]) -> bool:
        present = self.key in mapping
        value = mapping.get(self.key)
        if self.operator == "exists":
            return present
        if self.operator == "!":
            return not present
        if self.operator in ("=", "in"):
            return present and value in self.values
        # "!=" and "notin" also match documents lacking the key.
        return not present or value not in self.values


def _split_clauses(expression: str) -> list[str]:
    clauses: list[str] = []
    depth = 0
    current: list[str] = []
    for char in expression:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise SelectorError(f"unbalanced parentheses in selector {expression!r}")
        if char == "," and depth == 0:
            clauses.append("".join(current))
            current = []
            continue
        current.append(char)
    if depth != 0:
        raise SelectorError(f"unbalanced parentheses in selector {expression!r}")
    clauses.append("".join(current))
    return clauses


@lru_cache(maxsize=256)
def parse_selector(expression: str) -> Tuple[Requirement, ...]:
    """Parse a Kubernetes set-based selector such as ``app=web,tier in (a,b)``."""
    if not expression.strip():
        return ()
    requirements: list[Requirement] = []
    for raw_clause in _split_clauses(expression):
        clause = raw_clause.strip()
        if not clause:
            raise SelectorError(f"empty clause in selector {expression!r}")
        match = _NOT_EXISTS_RE.match(clause)
        if match:
            requirements.append(Requirement(match.group("key"), "!"))
            continue
        match = _EQUALITY_RE.match(clause)
        if match:
            operator: Operator = "!=" if match.group("op") == "!=" else "="
            requirements.append(Requirement(match.group("key"), operator, (match.group("value"),)))
            continue
        match = _SET_RE.match(clause)
        if match:
            values = tuple(item.strip() for item in match.group("values").split(","))
            if any(not item or not _VALUE_RE.match(item) for item in values):
                raise SelectorError(f"invalid value list in selector clause {clause!r}")
            requirements.append(Requirement(match.group("key"), match.group("op"), values))  # type: ignore[arg-type]
            continue
        match = _EXISTS_RE.match(clause)
        if match:
            requirements.append(Requirement(match.group("key"), "exists"))
            continue
        raise SelectorError(f"unable to parse selector clause {clause!r}", details={"selector": expression})
    return tuple(requirements)


def matches_selector(expression: str, mapping: Mapping[str, str]) -> bool:
    """Return True when every clause of ``expression`` holds for ``mapping``."""
    return all(requirement.matches(mapping) for requirement in parse_selector(expression))


@lru_cache(maxsize=256)
def compile_anchored(pattern: str) -> Optional[Pattern[str]]:
    """Compile ``pattern`` anchored at both ends; empty patterns match anything."""
    if not pattern:
        return None
    try:
        return re.compile(rf"^(?:{pattern})$")
    except re.error as error:
        raise SelectorError(f"invalid selector pattern {pattern!r}: {error}") from error


__all__ = ["Requirement", "Selector", "compile_anchored", "matches_selector", "parse_selector"]
