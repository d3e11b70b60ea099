from typing import List, Optional, Union

from singgen.exceptions import ParseError, UnsupportedProtocolError
from singgen.logging_config import logger
from singgen.schemas import Node
from .config import FORMAT_MIXED, FORMAT_UNKNOWN
from .registry import ParserRegistry, build_default_registry
from .utils import decode_base64_text, looks_like_base64, scheme_of, split_lines
from .validator import InputValidator


def decode_subscription(raw: Union[bytes, str], validator: Optional[InputValidator] = None) -> str:
    """
    Validate raw subscription data and return its share-URL text, decoding
    a whole-body base64 payload when the data looks like one.

    Raises:
        ParseError: If the data fails validation.
    """
    validator = validator or InputValidator()
    data = validator.sanitize(validator.validate(raw))

    if looks_like_base64(data):
        decoded = decode_base64_text(data.replace("\n", ""))
        if decoded is not None:
            data = validator.sanitize(decoded)
        else:
            logger.debug("Data looked like base64 but did not decode; using it as-is")

    return data


def detect_text_format(data: str) -> str:
    """Format of already-decoded text: a protocol name, `mixed` or `unknown`."""
    protocols = []
    for line in split_lines(data):
        protocol = scheme_of(line)
        if protocol and protocol not in protocols:
            protocols.append(protocol)

    if not protocols:
        return FORMAT_UNKNOWN
    if len(protocols) > 1:
        return FORMAT_MIXED
    return protocols[0]


def detect_format(raw: Union[bytes, str]) -> str:
    """
    Detect the format of raw subscription data. Invalid data is reported as
    `unknown` rather than raising.
    """
    try:
        data = decode_subscription(raw)
    except ParseError as e:
        logger.warning(f"Input validation failed: {e}")
        return FORMAT_UNKNOWN
    return detect_text_format(data)


def parse_subscription(raw: Union[bytes, str], registry: Optional[ParserRegistry] = None) -> List[Node]:
    """
    Parse subscription data into nodes.

    Raises:
        ParseError: If the data is invalid or yields no nodes.
        UnsupportedProtocolError: If no registered parser handles the format.
    """
    registry = registry or build_default_registry()

    data = decode_subscription(raw)
    fmt = detect_text_format(data)
    logger.debug(f"Detected subscription format: {fmt}")

    if fmt == FORMAT_UNKNOWN:
        raise UnsupportedProtocolError(FORMAT_UNKNOWN)

    nodes = registry.get(fmt).parse(data)
    logger.info(f"Parsed {len(nodes)} {fmt} nodes")
    return nodes
