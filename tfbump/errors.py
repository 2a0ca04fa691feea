"""
Error taxonomy for tfbump.

Domain and infrastructure code raise these; the CLI layer maps them to
exit codes (see exit_codes.EXCEPTION_EXIT_CODES).
"""
from typing import Optional


class TfbumpError(Exception):
    """Base class for all tfbump errors."""


class ParseError(TfbumpError, ValueError):
    """Raised when a tag string cannot be decomposed."""

    def __init__(self, raw: str, message: str):
        super().__init__(message)
        self.raw = raw


class ParseOverflow(ParseError):
    """Raised when a numeric tag segment does not fit a 32-bit signed int."""

    def __init__(self, raw: str, segment: str):
        super().__init__(raw, f"Tag {raw!r}: numeric segment {segment} is out of range")
        self.segment = segment


class TagSelectionError(TfbumpError):
    """Raised when no tag can be selected from a collection."""


class NoMatchingTag(TagSelectionError):
    """Raised when a tag collection is empty after filtering."""

    def __init__(self, major: Optional[int] = None, filtered: bool = False):
        if filtered:
            message = f"No tag with major version {major}"
        else:
            message = "Cannot select a tag from an empty collection"
        super().__init__(message)
        self.major = major


class RemoteFetchError(TfbumpError):
    """
    Raised when the tags of a repository could not be retrieved.

    Always names the repository so the user knows which module failed.
    """

    def __init__(self, owner: str, repository: str, reason: str,
                 status_code: Optional[int] = None):
        self.owner = owner
        self.repository = repository
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Could not fetch tags for {owner}/{repository}: {reason}")


class RemoteAccessDenied(RemoteFetchError):
    """The remote rejected the credentials or the rate limit is exhausted."""


class RepositoryNotFound(RemoteFetchError):
    """The repository does not exist or is invisible to the current token."""
