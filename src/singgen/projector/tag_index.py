"""
Tag index: the set of tags a reference may currently resolve to.

    index = {candidate tags} | {tag of every block that has both `tag` and `type`}

Blocks are the mapping elements of any list bound to the `outbounds` key.
A list bound to `outbounds` whose elements are plain strings is a reference
list and never contributes tags.
"""

from typing import Any, Iterable, List, Set

from .config import OUTBOUNDS_KEY


def is_definition_list(items: List[Any]) -> bool:
    """A list of blocks, as opposed to a list of tag references."""
    return any(isinstance(item, dict) for item in items)


def is_reference_list(items: List[Any]) -> bool:
    return bool(items) and not is_definition_list(items)


def build_tag_index(document: Any, candidate_tags: Iterable[str]) -> Set[str]:
    index = set(candidate_tags)
    _collect(document, index)
    return index


def _collect(obj: Any, index: Set[str]) -> None:
    if isinstance(obj, dict):
        definitions = obj.get(OUTBOUNDS_KEY)
        if isinstance(definitions, list) and is_definition_list(definitions):
            for block in definitions:
                if not isinstance(block, dict):
                    continue
                tag = block.get("tag")
                if isinstance(tag, str) and block.get("type") is not None:
                    index.add(tag)
                # Nested sections of a block (never its own reference list)
                _collect(block, index)

        for key, value in obj.items():
            if key != OUTBOUNDS_KEY:
                _collect(value, index)

    elif isinstance(obj, list):
        for item in obj:
            _collect(item, index)
