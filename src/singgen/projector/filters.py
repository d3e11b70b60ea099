"""
Ordered include/exclude filtering of candidate nodes.
"""

from typing import Any, List, Optional, Sequence

from singgen.schemas import FilterRule
from .config import SINK_TAG
from .matcher import matches_any


def candidate_tag(candidate: Any) -> str:
    """Tag of a candidate node given as a mapping or an object with `.tag`."""
    if isinstance(candidate, dict):
        return candidate.get("tag", "")
    return getattr(candidate, "tag", "")


class NodeFilter:
    """
    Applies an ordered list of FilterRule objects to a fixed candidate list.

    - include: recomputed from the full candidate list, discarding any
      earlier narrowing.
    - exclude: narrows the current working set (the full list if no rule
      has produced one yet).

    An empty result collapses to the sink tag so that the referencing
    block stays syntactically complete until it is pruned.
    """

    def __init__(self, sink_tag: str = SINK_TAG):
        self.sink_tag = sink_tag

    def filter(self, candidates: Sequence[Any], rules: Sequence[FilterRule]) -> List[str]:
        if not rules:
            return [candidate_tag(c) for c in candidates]

        working: Optional[List[Any]] = None

        for rule in rules:
            if rule.action == "include":
                working = [c for c in candidates if matches_any(candidate_tag(c), rule.keywords)]
            elif rule.action == "exclude":
                if working is None:
                    working = list(candidates)
                working = [c for c in working if not matches_any(candidate_tag(c), rule.keywords)]

        if not working:
            return [self.sink_tag]

        return [candidate_tag(c) for c in working]


def filter_candidates(candidates: Sequence[Any], rules: Sequence[FilterRule]) -> List[str]:
    """Module-level shortcut for NodeFilter().filter()."""
    return NodeFilter().filter(candidates, rules)
