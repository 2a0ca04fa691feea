"""
tfbump - Keep Terraform module references on their latest tags.

tfbump scans a directory of .tf files for module sources that point at
tagged GitHub repositories, looks up each repository's tags once, and
rewrites the ?ref= values in place. Only the tag changes; the rest of
every file stays byte-for-byte identical.

Quick Start:
    from tfbump import UpdateService, Settings, Strategy, load_config

    settings = Settings.from_config(load_config(),
                                    strategy=Strategy.HIGHEST_SEMVER_CURRENT_MAJOR)
    service = UpdateService(settings)

    records = service.scan("infra/")
    catalog = service.fetch_catalog(service.repository_ids(records))
    for update in service.apply(service.plan(records, catalog)):
        print(update.path)

Domain functions (pure, no I/O):
    parse_tag("v1.2.0-rc1")                 -> ParsedTag
    max_tag(tags), max_tag_for_major(1, tags)
    select_tag(current, available, strategy)
    extract_references(text)                -> frozenset of ModuleReference
    rewrite(text, references, resolve)      -> RewriteResult
"""

__version__ = "0.3.0"

# Domain objects and functions
from .domain import (
    ParsedTag,
    parse_tag,
    Strategy,
    max_tag,
    max_tag_for_major,
    select_tag,
    RepositoryId,
    ModuleReference,
    FileRecord,
    extract_references,
    RewriteResult,
    rewrite,
)

# Errors
from .errors import (
    TfbumpError,
    ParseError,
    ParseOverflow,
    TagSelectionError,
    NoMatchingTag,
    RemoteFetchError,
    RemoteAccessDenied,
    RepositoryNotFound,
)

# Services
from .services import UpdateService

# Configuration
from .config import Settings, load_config

__all__ = [
    "__version__",
    "ParsedTag",
    "parse_tag",
    "Strategy",
    "max_tag",
    "max_tag_for_major",
    "select_tag",
    "RepositoryId",
    "ModuleReference",
    "FileRecord",
    "extract_references",
    "RewriteResult",
    "rewrite",
    "TfbumpError",
    "ParseError",
    "ParseOverflow",
    "TagSelectionError",
    "NoMatchingTag",
    "RemoteFetchError",
    "RemoteAccessDenied",
    "RepositoryNotFound",
    "UpdateService",
    "Settings",
    "load_config",
]
