"""
Domain layer for tfbump.

Contains pure domain objects and functions with no I/O or side effects:
- ParsedTag: Version tag decomposed into prefix/major/minor/patch/rc
- Strategy, max_tag, select_tag: Tag ordering and selection
- ModuleReference, RepositoryId, FileRecord: References found in files
- rewrite: Surgical replacement of reference tags in file text

Everything here is safe to call from concurrent callers.
"""

from .tag import ParsedTag, parse_tag
from .selection import (
    Strategy,
    sort_key,
    sort_tags,
    max_tag,
    max_tag_for_major,
    is_known_tag,
    select_tag,
)
from .reference import (
    RepositoryId,
    ModuleReference,
    FileRecord,
    extract_references,
)
from .rewrite import RewriteResult, rewrite

__all__ = [
    'ParsedTag',
    'parse_tag',
    'Strategy',
    'sort_key',
    'sort_tags',
    'max_tag',
    'max_tag_for_major',
    'is_known_tag',
    'select_tag',
    'RepositoryId',
    'ModuleReference',
    'FileRecord',
    'extract_references',
    'RewriteResult',
    'rewrite',
]
