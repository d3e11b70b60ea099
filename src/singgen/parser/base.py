from typing import List, Tuple
from urllib.parse import SplitResult, parse_qs, unquote, urlsplit

from singgen.exceptions import ParseError
from singgen.logging_config import logger
from singgen.schemas import Node
from .utils import split_lines


class LineParser:
    """
    Base class for the per-protocol parsers.

    Subscription data holds one share URL per line. Lines with another
    scheme are ignored, lines that fail to parse are logged and skipped.
    """

    protocol: str = ""
    prefixes: Tuple[str, ...] = ()

    def accept(self, data: str) -> bool:
        return any(line.startswith(self.prefixes) for line in split_lines(data))

    def parse(self, data: str) -> List[Node]:
        """
        Parse every matching line of `data`.

        Raises:
            ParseError: If no line produced a node.
        """
        nodes: List[Node] = []
        for line in split_lines(data):
            if not line.startswith(self.prefixes):
                continue
            try:
                nodes.append(self.parse_line(line))
            except ValueError as e:
                logger.warning(f"Failed to parse {self.protocol} URL '{line[:80]}': {e}")

        if not nodes:
            raise ParseError(f"No valid {self.protocol} nodes found")

        return nodes

    def parse_line(self, line: str) -> Node:
        raise NotImplementedError


def split_url(line: str) -> Tuple[SplitResult, int]:
    """
    Split a share URL and validate its host and port.

    Raises:
        ValueError: If the host or port is missing or the port is out of range.
    """
    parts = urlsplit(line)
    if not parts.hostname:
        raise ValueError("missing host")
    port = parts.port
    if port is None:
        raise ValueError("missing port")
    return parts, port


def query_params(parts: SplitResult) -> dict:
    """First value of each query parameter."""
    return {key: values[0] for key, values in parse_qs(parts.query).items()}


def userinfo(parts: SplitResult) -> str:
    return unquote(parts.username or "")


def fallback_tag(protocol: str, host: str, port: int) -> str:
    return f"{protocol}-{host}:{port}"
