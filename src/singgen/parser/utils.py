"""
Small helpers shared by the protocol parsers.
"""

import base64
import binascii
import hashlib
import string
from typing import List, Optional
from urllib.parse import unquote

from .config import BASE64_RATIO, SCHEMES

_BASE64_ALPHABET = set(string.ascii_letters + string.digits + "+/=")


def _pad(data: str) -> str:
    data = data.strip()
    return data + "=" * (-len(data) % 4)


def decode_base64(data: str) -> bytes:
    """
    Decode standard or URL-safe base64, tolerating missing padding.

    Raises:
        ValueError: If the input is not valid base64 in either alphabet.
    """
    padded = _pad(data)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        pass
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 data: {e}") from e


def decode_base64_text(data: str) -> Optional[str]:
    """Decode base64 into UTF-8 text, or None if either step fails."""
    try:
        return decode_base64(data).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return None


def looks_like_base64(data: str) -> bool:
    """
    Heuristic for whole-body base64: no URL scheme, no spaces, and more than
    90% of the characters from the base64 alphabet.
    """
    if "://" in data:
        return False
    trimmed = data.strip()
    if not trimmed or " " in trimmed:
        return False
    hits = sum(1 for ch in trimmed if ch in _BASE64_ALPHABET)
    return hits / len(trimmed) > BASE64_RATIO


def md5_string(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def scheme_of(line: str) -> Optional[str]:
    """Protocol for a share URL line, or None when the scheme is unknown."""
    for prefix, protocol in SCHEMES.items():
        if line.startswith(prefix):
            return protocol
    return None


def split_lines(data: str) -> List[str]:
    return [line.strip() for line in data.splitlines() if line.strip()]


def split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def fragment_tag(fragment: str) -> str:
    return unquote(fragment).strip()
