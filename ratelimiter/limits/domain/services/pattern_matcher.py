"""
Glob-style matching for API rules.

``*`` matches any run of characters (including none). Everything else in the
pattern is literal. Matching is anchored at both ends and case-insensitive.
"""

from __future__ import annotations

import functools
import re

WILDCARD = "*"


@functools.lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    body = ".*".join(re.escape(part) for part in pattern.split(WILDCARD))
    return re.compile(body, re.IGNORECASE | re.DOTALL)


def matches_pattern(target: str, pattern: str) -> bool:
    return compile_pattern(pattern).fullmatch(target) is not None
