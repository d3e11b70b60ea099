from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Sequence

from singgen.logging_config import logger
from singgen.tracing import trace
from .config import MAX_PASSES
from .filters import NodeFilter, candidate_tag
from .placeholders import PlaceholderExpander
from .pruner import prune


@dataclass
class ProjectionReport:
    """What a projection run did to the document."""
    expanded: int = 0
    passes: int = 0
    removed_blocks: int = 0
    removed_references: int = 0
    converged: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Projector:
    """
    Projects candidate nodes into a document.

    Expands every `{all}` placeholder (consuming filter declarations), then
    prunes dead blocks and dangling references until the document is stable.
    The document is mutated in place and is not safe to share between
    threads while a projection runs.
    """

    def __init__(self, node_filter: Optional[NodeFilter] = None, max_passes: Optional[int] = MAX_PASSES):
        self.node_filter = node_filter or NodeFilter()
        self.max_passes = max_passes

    @trace
    def project(self, document: Any, candidates: Sequence[Any]) -> ProjectionReport:
        candidates = list(candidates)
        candidate_tags = [candidate_tag(c) for c in candidates]

        expander = PlaceholderExpander(self.node_filter)
        expanded = expander.expand(document, candidates)

        result = prune(document, candidate_tags, self.max_passes, self.node_filter.sink_tag)

        report = ProjectionReport(
            expanded=expanded,
            passes=result.passes,
            removed_blocks=result.removed_blocks,
            removed_references=result.removed_references,
            converged=result.converged,
        )
        logger.debug(f"Projection finished: {report.to_dict()}")
        return report


def project(document: Any, candidates: Sequence[Any], max_passes: Optional[int] = MAX_PASSES) -> ProjectionReport:
    """
    Expand placeholders and prune `document` in place.

    Args:
        document: Decoded document (maps, lists, scalars).
        candidates: Ordered candidate nodes, as mappings or objects with `.tag`.
        max_passes: Prune iteration bound; None for no bound.

    Returns:
        ProjectionReport describing the changes.
    """
    return Projector(max_passes=max_passes).project(document, candidates)
