"""
This facade exposes the public API for the parser module.
"""
from .facade import decode_subscription, detect_format, parse_subscription
from .registry import ParserRegistry, build_default_registry
from .validator import InputValidator

__all__ = [
    "decode_subscription",
    "detect_format",
    "parse_subscription",
    "ParserRegistry",
    "build_default_registry",
    "InputValidator",
]
