"""
This facade exposes the public API for the projector module.
"""
from .config import PLACEHOLDER, SINK_TAG, MAX_PASSES
from .matcher import matches, matches_any
from .filters import NodeFilter, filter_candidates
from .placeholders import PlaceholderExpander, expand_placeholders, parse_filter_rules
from .tag_index import build_tag_index
from .pruner import PruneResult, prune, sanitize_references, remove_dead_blocks
from .facade import Projector, ProjectionReport, project

__all__ = [
    "PLACEHOLDER",
    "SINK_TAG",
    "MAX_PASSES",
    "matches",
    "matches_any",
    "NodeFilter",
    "filter_candidates",
    "PlaceholderExpander",
    "expand_placeholders",
    "parse_filter_rules",
    "build_tag_index",
    "PruneResult",
    "prune",
    "sanitize_references",
    "remove_dead_blocks",
    "Projector",
    "ProjectionReport",
    "project",
]
