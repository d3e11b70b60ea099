"""
Dead-block elimination and reference sanitizing.

Each pass:
1. rebuild the tag index
2. drop every reference that does not resolve in the index
3. remove every block whose reference list is empty, is exactly the sink,
   or no longer names any indexed tag

Passes repeat until one removes nothing or the pass bound is hit. A final
sanitize against a freshly built index follows either way, so the returned
document never holds a dangling reference.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from singgen.logging_config import logger
from .config import MAX_PASSES, OUTBOUNDS_KEY, SINK_TAG
from .tag_index import build_tag_index, is_definition_list, is_reference_list


@dataclass
class PruneResult:
    passes: int = 0
    removed_blocks: int = 0
    removed_references: int = 0
    converged: bool = False


def sanitize_references(obj: Any, index: Set[str]) -> int:
    """
    Remove string references that are not in `index` from every reference
    list in the document. Non-string elements are kept. Returns the number
    of references removed.
    """
    removed = 0

    if isinstance(obj, dict):
        for key, value in obj.items():
            if key == OUTBOUNDS_KEY and isinstance(value, list) and is_reference_list(value):
                kept = [item for item in value if not isinstance(item, str) or item in index]
                if len(kept) != len(value):
                    for item in value:
                        if isinstance(item, str) and item not in index:
                            logger.debug(f"Removing invalid reference '{item}' from '{obj.get('tag', 'unknown')}'")
                    removed += len(value) - len(kept)
                    value[:] = kept
            elif isinstance(value, (dict, list)):
                removed += sanitize_references(value, index)

    elif isinstance(obj, list):
        for item in obj:
            removed += sanitize_references(item, index)

    return removed


def should_remove(block: Dict[str, Any], index: Set[str], sink_tag: str = SINK_TAG) -> bool:
    """Decide whether a block is dead given the current index."""
    references = block.get(OUTBOUNDS_KEY)
    if not isinstance(references, list):
        return False
    if not references:
        return True
    if is_definition_list(references):
        return False
    if len(references) == 1 and references[0] == sink_tag:
        return True
    return not any(isinstance(ref, str) and ref in index for ref in references)


def remove_dead_blocks(obj: Any, index: Set[str], sink_tag: str = SINK_TAG) -> int:
    """
    Remove dead blocks from every definition list, one batch per list.
    Returns the number of blocks removed.
    """
    removed = 0

    if isinstance(obj, dict):
        for key, value in obj.items():
            if key == OUTBOUNDS_KEY and isinstance(value, list) and is_definition_list(value):
                doomed = [
                    i for i, block in enumerate(value)
                    if isinstance(block, dict) and should_remove(block, index, sink_tag)
                ]
                for i in reversed(doomed):
                    logger.debug(f"Removing dead block '{value[i].get('tag', 'unknown')}'")
                    del value[i]
                removed += len(doomed)
                for block in value:
                    removed += remove_dead_blocks(block, index, sink_tag)
            elif isinstance(value, (dict, list)):
                removed += remove_dead_blocks(value, index, sink_tag)

    elif isinstance(obj, list):
        for item in obj:
            removed += remove_dead_blocks(item, index, sink_tag)

    return removed


def prune(
    document: Any,
    candidate_tags: Iterable[str],
    max_passes: Optional[int] = MAX_PASSES,
    sink_tag: str = SINK_TAG,
) -> PruneResult:
    """
    Run the prune/sanitize loop on `document` in place.

    Args:
        document: Decoded document (maps, lists, scalars).
        candidate_tags: Tags of candidate nodes; always resolvable.
        max_passes: Iteration bound. None runs until a pass removes nothing,
            which always terminates because blocks are only ever removed.
        sink_tag: Tag whose sole presence in a reference list marks a block dead.
    """
    candidate_tags: List[str] = list(candidate_tags)
    result = PruneResult()

    while max_passes is None or result.passes < max_passes:
        result.passes += 1
        index = build_tag_index(document, candidate_tags)
        result.removed_references += sanitize_references(document, index)
        removed = remove_dead_blocks(document, index, sink_tag)
        if removed == 0:
            result.converged = True
            break
        result.removed_blocks += removed
        logger.debug(f"Removed {removed} dead blocks in pass {result.passes}")

    if not result.converged:
        logger.warning(
            f"Stopped pruning after {result.passes} passes; the document may still hold dead blocks"
        )

    final_index = build_tag_index(document, candidate_tags)
    result.removed_references += sanitize_references(document, final_index)

    return result
