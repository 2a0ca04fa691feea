"""
Module reference domain objects for tfbump.

A module reference is a quoted source string in a Terraform file that
points at a tagged GitHub repository:

    source = "git::https://github.com:acme/widget.git?ref=v1.2.0"
    source = "git::https://github.com/acme/network.git//modules/vpc?ref=2.0"

References are immutable value objects; the same string found twice in
a file is one reference.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterator, Tuple

from .tag import ParsedTag, parse_tag
from ..errors import ParseError

logger = logging.getLogger(__name__)

# Host marker a quoted string must contain to be considered at all
HOST_MARKER = "github"

# Whitespace-free quoted strings containing the host marker
CANDIDATE_PATTERN = re.compile(r'"([^\s"]*' + HOST_MARKER + r'[^\s"]*)"')

# owner/repository and the ref query value
REFERENCE_PATTERN = re.compile(
    r'github\.com[:/]'
    r'(?P<owner>[^/]+)/'
    r'(?P<repo>[^./?]+)'
    r'[^?]*\?'
    r'(?:[^#]*&)?'
    r'ref=(?P<ref>[^&#]+)'
)


@dataclass(frozen=True, order=True)
class RepositoryId:
    """Identifies a remote repository; used to deduplicate tag lookups."""
    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class ModuleReference:
    """
    One module source string found in a file.

    Attributes:
        original_text: Full quoted string, without the quotes
        owner: Repository owner (user or organization)
        repository_name: Repository name, without ".git"
        tag: Tag decoded from the ``ref=`` query value
        tag_span: (start, end) of ``tag.raw`` within ``original_text``
    """

    original_text: str
    owner: str
    repository_name: str
    tag: ParsedTag
    tag_span: Tuple[int, int]

    @property
    def repository_id(self) -> RepositoryId:
        return RepositoryId(self.owner, self.repository_name)

    def with_tag(self, new_tag: ParsedTag) -> str:
        """Return ``original_text`` with the ref value swapped for ``new_tag``."""
        start, end = self.tag_span
        return self.original_text[:start] + new_tag.raw + self.original_text[end:]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'source': self.original_text,
            'repository': str(self.repository_id),
            'tag': self.tag.raw,
        }


@dataclass(frozen=True)
class FileRecord:
    """
    Snapshot of one scanned file and the references found in it.

    Never mutated; rewriting produces new text.
    """
    path: Path
    raw_content: str
    references: FrozenSet[ModuleReference] = field(default_factory=frozenset)


def candidate_strings(file_text: str) -> Iterator[re.Match]:
    """
    Iterate over quoted strings that may be module references.

    The rewrite engine uses the same tokenization so that it finds exactly
    the occurrences the extractor saw.
    """
    return CANDIDATE_PATTERN.finditer(file_text)


def decode_reference(candidate: str) -> ModuleReference:
    """
    Decompose a candidate string into a ModuleReference.

    Raises:
        ValueError: if the string does not follow the owner/repo/ref grammar
        ParseError: if the ref value cannot be parsed as a tag
    """
    match = REFERENCE_PATTERN.search(candidate)
    if not match:
        raise ValueError(f"Not a tagged module reference: {candidate}")

    return ModuleReference(
        original_text=candidate,
        owner=match.group('owner'),
        repository_name=match.group('repo'),
        tag=parse_tag(match.group('ref')),
        tag_span=match.span('ref'),
    )


def extract_references(file_text: str) -> FrozenSet[ModuleReference]:
    """
    Find every tagged module reference in a file's text.

    Candidates that mention the host but do not decode are skipped, so one
    odd string never aborts the scan of a file.

    Args:
        file_text: Full content of a Terraform file

    Returns:
        Set of distinct references
    """
    references = set()
    for candidate in candidate_strings(file_text):
        text = candidate.group(1)
        try:
            references.add(decode_reference(text))
        except ParseError as e:
            logger.warning(f"Skipping {text}: {e}")
        except ValueError:
            logger.debug(f"Skipping {text}: no owner/repository/ref found")
    return frozenset(references)
