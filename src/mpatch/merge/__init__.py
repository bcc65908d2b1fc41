"""Merge contracts used by the strategic-merge applicator."""

from .strategic import MERGE_KEYS, merge_key_for, strategic_merge, strip_directives

__all__ = ["MERGE_KEYS", "merge_key_for", "strategic_merge", "strip_directives"]
