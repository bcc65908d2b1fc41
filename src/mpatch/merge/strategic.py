"""Strategic-merge of a partial document into a target document.

Mappings merge key by key and a ``null`` patch value deletes the target
field. Lists whose field name has a known merge key merge element by element
on that key; every other list is replaced by the patch list. The ``$patch``
directive accepts ``merge`` (the default), ``replace`` and ``delete``, and
``$deleteFromPrimitiveList/<field>`` removes scalar values from a list.
Other ``$``-prefixed keys such as ``$setElementOrder/<field>`` are dropped.

The functions here never mutate their inputs.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..errors import StrategicMergeError

PATCH_DIRECTIVE = "$patch"
DELETE_FROM_PRIMITIVE_LIST = "$deleteFromPrimitiveList/"
DIRECTIVE_MERGE = "merge"
DIRECTIVE_REPLACE = "replace"
DIRECTIVE_DELETE = "delete"

MERGE_KEYS: Dict[str, str] = {
    "containers": "name",
    "initContainers": "name",
    "ephemeralContainers": "name",
    "env": "name",
    "volumes": "name",
    "imagePullSecrets": "name",
    "volumeMounts": "mountPath",
    "hostAliases": "ip",
    "ports": "containerPort",
}

_Path = Tuple[str, ...]


def merge_key_for(field: str, items: Sequence[Any]) -> str | None:
    """Return the merge key used for list ``field``, or None to replace it."""
    key = MERGE_KEYS.get(field)
    if key is None:
        return None
    if field == "ports":
        mappings = [item for item in items if isinstance(item, Mapping)]
        if mappings and not any("containerPort" in item for item in mappings):
            return "port"
    return key


def strategic_merge(target: Mapping[str, Any], patch: Mapping[str, Any]) -> Dict[str, Any] | None:
    """Return ``patch`` merged into a copy of ``target``.

    ``None`` is returned when the patch deletes the whole document.
    """
    if not isinstance(patch, Mapping):
        raise StrategicMergeError(f"patch must be a mapping, got {type(patch).__name__}")
    base = copy.deepcopy(dict(target)) if isinstance(target, Mapping) else {}
    return _merge_mapping(base, patch, ())


def _directive(value: Mapping[str, Any], path: _Path) -> str:
    directive = value.get(PATCH_DIRECTIVE, DIRECTIVE_MERGE)
    if directive not in (DIRECTIVE_MERGE, DIRECTIVE_REPLACE, DIRECTIVE_DELETE):
        raise StrategicMergeError(
            f"unknown patch directive {directive!r} at {_format_path(path)}",
            details={"path": list(path), "directive": directive},
        )
    return directive


def _merge_mapping(target: Dict[str, Any], patch: Mapping[str, Any], path: _Path) -> Dict[str, Any] | None:
    directive = _directive(patch, path)
    if directive == DIRECTIVE_DELETE:
        return None
    if directive == DIRECTIVE_REPLACE:
        return strip_directives(patch)

    for key, value in patch.items():
        if not isinstance(key, str):
            target[key] = copy.deepcopy(value)
            continue
        if key.startswith(DELETE_FROM_PRIMITIVE_LIST):
            field = key[len(DELETE_FROM_PRIMITIVE_LIST) :]
            _delete_from_primitive_list(target, field, value, path)
            continue
        if key.startswith("$"):
            continue
        if value is None:
            target.pop(key, None)
            continue
        current = target.get(key)
        if isinstance(value, Mapping):
            base = current if isinstance(current, dict) else {}
            merged = _merge_mapping(base, value, path + (key,))
            if merged is None:
                target.pop(key, None)
            else:
                target[key] = merged
        elif isinstance(value, list):
            target[key] = _merge_list(key, current if isinstance(current, list) else [], value, path + (key,))
        else:
            target[key] = copy.deepcopy(value)
    return target


def _merge_list(field: str, current: List[Any], patch: List[Any], path: _Path) -> List[Any]:
    replace = any(
        isinstance(item, Mapping) and item.get(PATCH_DIRECTIVE) == DIRECTIVE_REPLACE and len(item) == 1
        for item in patch
    )
    merge_key = merge_key_for(field, list(current) + list(patch))
    keyed = (
        not replace
        and merge_key is not None
        and all(isinstance(item, Mapping) for item in current)
        and all(isinstance(item, Mapping) for item in patch)
    )
    if not keyed:
        return [strip_directives(item) for item in patch if not _is_bare_directive(item)]

    result: List[Any] = list(current)
    for index, element in enumerate(patch):
        if merge_key not in element:
            raise StrategicMergeError(
                f"list element {index} at {_format_path(path)} is missing merge key {merge_key!r}",
                details={"path": list(path), "merge_key": merge_key, "element": dict(element)},
            )
        position = _find_keyed(result, merge_key, element[merge_key])
        directive = _directive(element, path + (str(index),))
        if directive == DIRECTIVE_DELETE:
            if position is not None:
                del result[position]
            continue
        if position is None:
            result.append(strip_directives(element))
            continue
        merged = _merge_mapping(result[position], element, path + (str(index),))
        if merged is None:
            del result[position]
        else:
            result[position] = merged
    return result


def _find_keyed(items: Sequence[Mapping[str, Any]], key: str, value: Any) -> int | None:
    for position, item in enumerate(items):
        if item.get(key) == value:
            return position
    return None


def _delete_from_primitive_list(target: Dict[str, Any], field: str, values: Any, path: _Path) -> None:
    if not isinstance(values, list):
        raise StrategicMergeError(
            f"{DELETE_FROM_PRIMITIVE_LIST}{field} at {_format_path(path)} must be a list",
            details={"path": list(path), "field": field},
        )
    current = target.get(field)
    if isinstance(current, list):
        target[field] = [item for item in current if item not in values]


def _is_bare_directive(item: Any) -> bool:
    return isinstance(item, Mapping) and set(item) == {PATCH_DIRECTIVE}


def strip_directives(value: Any) -> Any:
    """Deep copy ``value`` without any ``$``-prefixed directive keys."""
    if isinstance(value, Mapping):
        return {
            key: strip_directives(item)
            for key, item in value.items()
            if not (isinstance(key, str) and key.startswith("$"))
        }
    if isinstance(value, list):
        return [strip_directives(item) for item in value if not _is_bare_directive(item)]
    return copy.deepcopy(value)


def _format_path(path: _Path) -> str:
    return "/" + "/".join(path) if path else "/"


__all__ = [
    "DIRECTIVE_DELETE",
    "DIRECTIVE_MERGE",
    "DIRECTIVE_REPLACE",
    "MERGE_KEYS",
    "PATCH_DIRECTIVE",
    "merge_key_for",
    "strategic_merge",
    "strip_directives",
]
