from typing import Dict, List, Optional

from singgen.exceptions import UnsupportedProtocolError
from .base import LineParser
from .config import FORMAT_MIXED
from .hysteria2_parser import Hysteria2Parser
from .mixed_parser import MixedParser
from .shadowsocks_parser import ShadowsocksParser
from .trojan_parser import TrojanParser
from .vless_parser import VlessParser
from .vmess_parser import VmessParser


class ParserRegistry:
    """
    Maps a format name (as returned by detect_format) to its parser.

    Built explicitly and handed to whatever needs it; there is no
    process-wide registry.
    """

    def __init__(self, parsers: Optional[Dict[str, LineParser]] = None):
        self._parsers: Dict[str, LineParser] = dict(parsers or {})

    def register(self, name: str, parser: LineParser) -> None:
        self._parsers[name] = parser

    def get(self, name: str) -> LineParser:
        parser = self._parsers.get(name)
        if parser is None:
            raise UnsupportedProtocolError(name)
        return parser

    def names(self) -> List[str]:
        return sorted(self._parsers)

    def __contains__(self, name: str) -> bool:
        return name in self._parsers


def build_default_registry() -> ParserRegistry:
    """Registry holding the five protocol parsers plus the mixed dispatcher."""
    parsers = [VmessParser(), VlessParser(), TrojanParser(), Hysteria2Parser(), ShadowsocksParser()]
    registry = ParserRegistry({parser.protocol: parser for parser in parsers})
    registry.register(FORMAT_MIXED, MixedParser(parsers))
    return registry
