"""
Infrastructure layer for tfbump.

Contains abstractions for external systems:
- GitHubClient: GitHub API access (tag listing)
- find_files, read_text, write_text: Terraform file discovery and persistence

These provide clean interfaces that can be mocked for testing.
"""

from .github_client import GitHubClient, RateLimitStatus, token_from_gh_cli
from .file_store import find_files, read_text, write_text

__all__ = [
    'GitHubClient',
    'RateLimitStatus',
    'token_from_gh_cli',
    'find_files',
    'read_text',
    'write_text',
]
