"""
Expansion of the `{all}` placeholder.

Every list that holds the placeholder as an element is rewritten in place:
the placeholder is replaced by the filtered candidate tags and any other
literal entries keep their position. The filter declaration on the owning
block is parsed, applied and deleted.

Accepted filter declarations (a single mapping or a list of mappings):

    {"action": "include", "keywords": ["HK", "SG"]}
    {"include": "HK|SG"}
    {"exclude": [".*expire.*"]}
"""

from typing import Any, Dict, List, Optional, Sequence

from singgen.logging_config import logger
from singgen.schemas import FilterRule
from .config import FILTER_KEY, OUTBOUNDS_KEY, PLACEHOLDER
from .filters import NodeFilter


def contains_placeholder(items: List[Any]) -> bool:
    return any(isinstance(item, str) and item == PLACEHOLDER for item in items)


def parse_keywords(data: Any) -> List[str]:
    if isinstance(data, str):
        return [data]
    if isinstance(data, (list, tuple)):
        return [item for item in data if isinstance(item, str)]
    return []


def parse_filter_rule(rule_map: Dict[str, Any]) -> Optional[FilterRule]:
    """
    Parse one declaration. Returns None (after logging a warning) for a
    missing or unknown action or an empty keyword list.
    """
    if "exclude" in rule_map:
        action = "exclude"
        keywords = parse_keywords(rule_map["exclude"])
    elif "include" in rule_map:
        action = "include"
        keywords = parse_keywords(rule_map["include"])
    else:
        action_value = rule_map.get("action")
        if not isinstance(action_value, str):
            logger.warning("Invalid filter rule: missing action or include/exclude field")
            return None

        action = action_value.lower()
        if action not in ("include", "exclude"):
            logger.warning(f"Unknown filter action: {action_value}")
            return None

        keywords = parse_keywords(rule_map.get("keywords"))

    if not keywords:
        logger.warning(f"Filter rule has no keywords: {rule_map}")
        return None

    return FilterRule(action=action, keywords=keywords)


def parse_filter_rules(filter_data: Any) -> List[FilterRule]:
    """Parse a declaration that may be one mapping or a list of them."""
    if isinstance(filter_data, dict):
        declarations = [filter_data]
    elif isinstance(filter_data, list):
        declarations = filter_data
    else:
        logger.warning(f"Ignoring filter declaration of type {type(filter_data).__name__}")
        return []

    rules = []
    for declaration in declarations:
        if not isinstance(declaration, dict):
            logger.warning(f"Ignoring non-mapping filter rule: {declaration!r}")
            continue
        rule = parse_filter_rule(declaration)
        if rule is not None:
            rules.append(rule)
    return rules


class PlaceholderExpander:
    """
    Walks a document and expands every placeholder occurrence.
    """

    def __init__(self, node_filter: Optional[NodeFilter] = None):
        self.node_filter = node_filter or NodeFilter()
        self.expanded = 0

    def expand(self, document: Any, candidates: Sequence[Any]) -> int:
        """Expand all placeholders in `document`; returns the number of lists rewritten."""
        self.expanded = 0
        self._walk(document, candidates)
        return self.expanded

    def _walk(self, obj: Any, candidates: Sequence[Any]) -> None:
        if isinstance(obj, dict):
            self._walk_map(obj, candidates)
        elif isinstance(obj, list):
            if contains_placeholder(obj):
                self._substitute(obj, self.node_filter.filter(candidates, []))
            for item in obj:
                if isinstance(item, (dict, list)):
                    self._walk(item, candidates)

    def _walk_map(self, obj: Dict[str, Any], candidates: Sequence[Any]) -> None:
        targets = [
            value for value in obj.values()
            if isinstance(value, list) and contains_placeholder(value)
        ]

        if targets:
            rules = parse_filter_rules(obj.pop(FILTER_KEY)) if FILTER_KEY in obj else []
            tags = self.node_filter.filter(candidates, rules)
            if rules:
                logger.debug(
                    f"Filter applied to '{obj.get('tag', 'unknown')}': "
                    f"{len(candidates)} candidates -> {len(tags)} tags"
                )
            for target in targets:
                self._substitute(target, tags)
        elif FILTER_KEY in obj and isinstance(obj.get(OUTBOUNDS_KEY), list):
            logger.warning(
                f"Dropping filter on '{obj.get('tag', 'unknown')}': no {PLACEHOLDER} placeholder to expand"
            )
            del obj[FILTER_KEY]

        expanded_ids = {id(target) for target in targets}
        for value in list(obj.values()):
            if id(value) in expanded_ids:
                continue
            if isinstance(value, (dict, list)):
                self._walk(value, candidates)

    def _substitute(self, items: List[Any], tags: List[str]) -> None:
        result: List[Any] = []
        for item in items:
            if isinstance(item, str) and item == PLACEHOLDER:
                result.extend(tags)
            else:
                result.append(item)
        items[:] = result
        self.expanded += 1


def expand_placeholders(document: Any, candidates: Sequence[Any]) -> int:
    """Module-level shortcut for PlaceholderExpander().expand()."""
    return PlaceholderExpander().expand(document, candidates)
