"""
Version tag domain object for tfbump.

Tags on module repositories are usually, but not strictly, semantic
versions:
- Full versions: "v2.13.3", "1.0.0"
- Partial versions: "v1.0", "3"
- Release candidates: "v12.1.33-rc14"
- Free-form labels: "stable", "latest"

Parsing is tolerant: every string yields a ParsedTag, absent segments
stay None. Only numeric overflow is rejected.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import ParseOverflow

# Largest value a numeric segment may take (32-bit signed int)
MAX_SEGMENT = 2 ** 31 - 1

TAG_PATTERN = re.compile(
    r'(?P<prefix>[^\d]*)'
    r'(?P<major>\d+)?\.?'
    r'(?P<minor>\d+)?\.?'
    r'(?P<patch>\d+)?'
    r'(?:-rc(?P<rc>\d+))?'
)


@dataclass(frozen=True)
class ParsedTag:
    """
    Structured decomposition of a tag string.

    Examples:
        parse_tag("v2.13.3")       -> ParsedTag(raw="v2.13.3", prefix="v", major=2, minor=13, patch=3)
        parse_tag("v1.0")          -> ParsedTag(raw="v1.0", prefix="v", major=1, minor=0)
        parse_tag("v1.2.0-rc2")    -> ParsedTag(..., major=1, minor=2, patch=0, release_candidate=2)
        parse_tag("stable")        -> ParsedTag(raw="stable", prefix="stable")

    Attributes:
        raw: Exact original tag string, used for rewriting
        prefix: Leading non-digit characters (e.g., "v"), may be empty
        major, minor, patch: Version segments, None when absent
        release_candidate: Number after "-rc", None for final releases
    """

    raw: str
    prefix: str = ""
    major: Optional[int] = None
    minor: Optional[int] = None
    patch: Optional[int] = None
    release_candidate: Optional[int] = None

    @property
    def is_release_candidate(self) -> bool:
        return self.release_candidate is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'raw': self.raw,
            'prefix': self.prefix,
            'major': self.major,
            'minor': self.minor,
            'patch': self.patch,
            'release_candidate': self.release_candidate,
        }

    def __str__(self) -> str:
        return self.raw


def _segment(raw: str, digits: Optional[str]) -> Optional[int]:
    if digits is None:
        return None
    value = int(digits)
    if value > MAX_SEGMENT:
        raise ParseOverflow(raw, digits)
    return value


def parse_tag(raw: str) -> ParsedTag:
    """
    Parse a tag string into a ParsedTag.

    The grammar is matched at the start of the string; anything after the
    recognised part is ignored for ordering but kept in ``raw``.

    Args:
        raw: Tag string (e.g., "v1.2.0-rc1")

    Returns:
        ParsedTag with ``raw == raw``

    Raises:
        ParseOverflow: if a numeric segment exceeds MAX_SEGMENT
    """
    match = TAG_PATTERN.match(raw)
    # The pattern can match the empty string, so a match always exists
    return ParsedTag(
        raw=raw,
        prefix=match.group('prefix'),
        major=_segment(raw, match.group('major')),
        minor=_segment(raw, match.group('minor')),
        patch=_segment(raw, match.group('patch')),
        release_candidate=_segment(raw, match.group('rc')),
    )

