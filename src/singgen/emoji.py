"""
Emoji stripping for node tags.
"""

import re

# Pictographs, flags (regional indicators), dingbats, arrows and a few
# CJK symbols that render as emoji
_EMOJI_PATTERN = re.compile(
    "["
    "\U0001F000-\U0001FAFF"
    "\U00002600-\U000027BF"
    "\U00002194-\U00002199"
    "\U000021A9-\U000021AA"
    "\U00002B05-\U00002B07"
    "\U00002B1B-\U00002B1C"
    "\U00002B50\U00002B55"
    "\U0000238C"
    "\U00003030\U0000303D\U00003297\U00003299"
    "\U0000FE0E\U0000FE0F"
    "\U0000200D"
    "]"
)
_WHITESPACE = re.compile(r"\s+")


def remove_emoji(text: str) -> str:
    """Remove emoji and collapse the whitespace left behind."""
    stripped = _EMOJI_PATTERN.sub("", text)
    return _WHITESPACE.sub(" ", stripped).strip()


def clean_tag(tag: str, strip_emoji: bool) -> str:
    return remove_emoji(tag) if strip_emoji else tag.strip()
