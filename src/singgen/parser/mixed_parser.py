from typing import Dict, List, Sequence

from singgen.exceptions import ParseError
from singgen.logging_config import logger
from singgen.schemas import Node
from .base import LineParser
from .utils import split_lines


class MixedParser(LineParser):
    """
    Dispatches each line to the parser owning its scheme, for subscriptions
    that mix several protocols.
    """

    protocol = "mixed"

    def __init__(self, parsers: Sequence[LineParser]):
        self._by_prefix: Dict[str, LineParser] = {}
        for parser in parsers:
            for prefix in parser.prefixes:
                self._by_prefix[prefix] = parser
        self.prefixes = tuple(self._by_prefix)

    def parse(self, data: str) -> List[Node]:
        nodes: List[Node] = []
        for line in split_lines(data):
            parser = self._parser_for(line)
            if parser is None:
                continue
            try:
                nodes.append(parser.parse_line(line))
            except ValueError as e:
                logger.warning(f"Failed to parse {parser.protocol} line '{line[:80]}': {e}")

        if not nodes:
            raise ParseError("No valid nodes found in mixed subscription")

        return nodes

    def _parser_for(self, line: str):
        for prefix, parser in self._by_prefix.items():
            if line.startswith(prefix):
                return parser
        return None
