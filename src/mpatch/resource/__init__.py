"""Documents, identities, selectors, and the collection they live in."""

from .collection import ResourceCollection
from .factory import ResourceFactory, dump_resources, stamp_provenance
from .ids import Gvk, ResId
from .resource import Resource, is_internal_annotation
from .selector import Selector, matches_selector, parse_selector

__all__ = [
    "Gvk",
    "ResId",
    "Resource",
    "ResourceCollection",
    "ResourceFactory",
    "Selector",
    "dump_resources",
    "is_internal_annotation",
    "matches_selector",
    "parse_selector",
    "stamp_provenance",
]
