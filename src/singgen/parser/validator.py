"""
Sanity checks applied to raw subscription data before it is parsed.
"""

from typing import Union

from singgen.exceptions import ParseError
from .config import (
    ASCII_CHECK_MIN_LENGTH,
    MAX_INPUT_SIZE,
    MAX_LINE_LENGTH,
    MAX_LINES,
    MIN_ASCII_RATIO,
    SUSPICIOUS_PATTERNS,
)


class InputValidator:
    """
    Rejects oversized, binary or script-like input and normalizes the rest.
    """

    def validate(self, raw: Union[bytes, str]) -> str:
        """
        Check `raw` and return it as text.

        Raises:
            ParseError: Describing the first check that failed.
        """
        size = len(raw.encode("utf-8")) if isinstance(raw, str) else len(raw)
        if size == 0:
            raise ParseError("Empty input")
        if size > MAX_INPUT_SIZE:
            raise ParseError(f"Input size too large: {size} bytes, max allowed: {MAX_INPUT_SIZE} bytes")

        if isinstance(raw, bytes):
            try:
                data = raw.decode("utf-8")
            except UnicodeDecodeError:
                raise ParseError("Invalid UTF-8 encoding")
        else:
            data = raw

        lines = data.split("\n")
        if len(lines) > MAX_LINES:
            raise ParseError(f"Too many lines: {len(lines)}, max allowed: {MAX_LINES}")
        for number, line in enumerate(lines, start=1):
            if len(line) > MAX_LINE_LENGTH:
                raise ParseError(
                    f"Line {number} too long: {len(line)} characters, max allowed: {MAX_LINE_LENGTH}"
                )

        self._check_suspicious(data)
        return data

    def _check_suspicious(self, data: str) -> None:
        lowered = data.lower()
        for pattern in SUSPICIOUS_PATTERNS:
            if pattern in lowered:
                raise ParseError(f"Suspicious content detected: contains {pattern}")

        if len(data) > ASCII_CHECK_MIN_LENGTH:
            ratio = sum(1 for ch in data if ord(ch) < 128) / len(data)
            if ratio < MIN_ASCII_RATIO:
                raise ParseError(f"Input contains too many non-ASCII characters ({ratio * 100:.1f}% ASCII)")

    def sanitize(self, data: str) -> str:
        """Drop control characters (except line breaks and tabs) and blank lines."""
        cleaned = "".join(
            ch for ch in data
            if ch in "\n\r\t" or not (ord(ch) < 32 or 127 <= ord(ch) < 160)
        )
        lines = [line.strip() for line in cleaned.strip().split("\n")]
        return "\n".join(line for line in lines if line)

