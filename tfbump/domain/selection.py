"""
Tag ordering and selection strategies for tfbump.

Tags are ordered by (major, minor, patch, rc_order). Absent segments sort
as zero. A release candidate sorts below the final release of the same
version, and lower rc numbers sort below higher ones.
"""

from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .tag import ParsedTag
from ..errors import NoMatchingTag

# Offset that pushes every release candidate below any final release
RC_FLOOR = -(2 ** 63)


class Strategy(Enum):
    """How a replacement tag is chosen among a repository's tags."""
    HIGHEST_SEMVER = "highest-semver"
    HIGHEST_SEMVER_CURRENT_MAJOR = "highest-semver-current-major"

    @classmethod
    def parse(cls, name: str) -> 'Strategy':
        """
        Look up a strategy by its command-line name.

        "highest-semver-for-major" is accepted as an alias of
        "highest-semver-current-major".
        """
        name = name.strip().lower()
        if name in STRATEGY_ALIASES:
            return cls(STRATEGY_ALIASES[name])
        try:
            return cls(name)
        except ValueError:
            choices = ', '.join(s.value for s in cls)
            raise ValueError(f"Unknown strategy {name!r} (choose from: {choices})") from None

    @classmethod
    def names(cls, include_aliases: bool = False) -> List[str]:
        names = [s.value for s in cls]
        if include_aliases:
            names.extend(STRATEGY_ALIASES)
        return names


# Names used by earlier releases
STRATEGY_ALIASES = {
    "highest-semver-for-major": Strategy.HIGHEST_SEMVER_CURRENT_MAJOR.value,
}


def sort_key(tag: ParsedTag) -> Tuple[int, int, int, int]:
    """Sortable representation of a tag."""
    if tag.release_candidate is not None:
        rc_order = RC_FLOOR + tag.release_candidate
    else:
        rc_order = 0
    return (tag.major or 0, tag.minor or 0, tag.patch or 0, rc_order)


def sort_tags(tags: Iterable[ParsedTag], reverse: bool = False) -> List[ParsedTag]:
    """Return tags in ascending (or descending) version order, stable for ties."""
    return sorted(tags, key=sort_key, reverse=reverse)


def max_tag(tags: Iterable[ParsedTag]) -> ParsedTag:
    """
    Return the tag with the highest version.

    When several tags compare equal, the first one in input order wins.

    Raises:
        NoMatchingTag: if ``tags`` is empty
    """
    tags = list(tags)
    if not tags:
        raise NoMatchingTag()
    # max() keeps the first maximal element
    return max(tags, key=sort_key)


def max_tag_for_major(major: Optional[int], tags: Iterable[ParsedTag]) -> ParsedTag:
    """
    Return the highest tag whose major version equals ``major``.

    A ``major`` of None only matches tags without a major segment.

    Raises:
        NoMatchingTag: if no tag has that major version
    """
    candidates = [tag for tag in tags if tag.major == major]
    if not candidates:
        raise NoMatchingTag(major, filtered=True)
    return max_tag(candidates)


def is_known_tag(current: ParsedTag, available: Iterable[ParsedTag]) -> bool:
    """Check whether the repository itself lists ``current``."""
    return any(tag.raw == current.raw for tag in available)


def select_tag(
    current: ParsedTag,
    available: List[ParsedTag],
    strategy: Strategy = Strategy.HIGHEST_SEMVER
) -> Optional[ParsedTag]:
    """
    Pick the replacement for ``current`` among ``available``.

    Tags the repository does not list are never replaced, since their
    version format cannot be trusted.

    Args:
        current: Tag currently referenced by a module
        available: Tags published by the module's repository
        strategy: Selection policy

    Returns:
        The selected tag (possibly ``current`` itself), or None when
        ``current`` is not among ``available``
    """
    if not is_known_tag(current, available):
        return None

    if strategy is Strategy.HIGHEST_SEMVER_CURRENT_MAJOR:
        return max_tag_for_major(current.major, available)
    return max_tag(available)
