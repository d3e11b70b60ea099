"""
Keyword matching for candidate tags.

A pattern is a `|`-separated list of alternatives. An alternative matches a
name when it is a regular expression found anywhere in the name, or when it
is a plain substring of the name. Both tests run for every alternative, so
patterns that are not valid regexes (or that only match literally, such as
`a+b`) still match by substring.
"""

import re
from functools import lru_cache
from typing import Iterable, Optional, Pattern


@lru_cache(maxsize=1024)
def _compile(alternative: str) -> Optional[Pattern]:
    try:
        return re.compile(alternative)
    except re.error:
        return None


def matches(name: str, pattern: str) -> bool:
    """Return True if any alternative in `pattern` matches `name`."""
    for alternative in pattern.split("|"):
        alternative = alternative.strip()
        if not alternative:
            continue

        regex = _compile(alternative)
        if regex is not None and regex.search(name):
            return True

        if alternative in name:
            return True

    return False


def matches_any(name: str, keywords: Iterable[str]) -> bool:
    """Return True if any single pattern in `keywords` matches `name`."""
    return any(matches(name, keyword) for keyword in keywords)
