"""
GitHub API client infrastructure for tfbump.

Provides the remote tag source for module repositories:
- Lists tags through GET /repos/{owner}/{repo}/git/refs/tags
- Sends a bearer token when one is configured
- Can borrow the token of an authenticated `gh` CLI
- Follows Link header pagination
- Tracks rate limit headers and warns when they run low
"""

import subprocess
import time
import logging
from dataclasses import dataclass
from typing import Optional, List, Dict, Any

import requests

from ..errors import RemoteFetchError, RemoteAccessDenied, RepositoryNotFound

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

TAG_REF_PREFIX = "refs/tags/"

PAGE_SIZE = 100


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 10 remaining)."""
        return self.remaining < 10

    @property
    def is_exhausted(self) -> bool:
        return self.remaining == 0


def token_from_gh_cli() -> Optional[str]:
    """
    Ask an authenticated `gh` CLI for its token.

    Returns:
        Token string, or None if gh is missing or not logged in
    """
    try:
        result = subprocess.run(
            ['gh', 'auth', 'token'],
            capture_output=True,
            text=True,
            timeout=10
        )
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return None
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return None


class GitHubClient:
    """
    Client for listing the tags of GitHub repositories.

    Example:
        client = GitHubClient(token="ghp_...")
        for name in client.get_tag_names("acme", "widget"):
            print(name)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token, sent as a bearer token when set
            api_url: API base URL (GitHub Enterprise uses https://HOST/api/v3)
            timeout: HTTP request timeout in seconds
        """
        self.token = token
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'tfbump',
        })
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'
        self._rate_limit_status: Optional[RateLimitStatus] = None

    def _update_rate_limit_from_headers(self, headers: Dict[str, str]) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )

            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    @property
    def rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status seen on the last response, if any."""
        return self._rate_limit_status

    def _get_page(self, url: str, owner: str, repo: str,
                  params: Optional[Dict[str, Any]] = None) -> requests.Response:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteFetchError(owner, repo, f"request failed ({e})") from e

        self._update_rate_limit_from_headers(response.headers)

        if response.status_code == 200:
            return response

        if response.status_code in (401, 403):
            status = self._rate_limit_status
            if status is not None and status.is_exhausted:
                reason = (f"GitHub API rate limit exhausted, resets in "
                          f"{status.minutes_until_reset} minutes")
            else:
                reason = ("access denied. Check that GITHUB_TOKEN is set "
                          "and can read this repository")
            raise RemoteAccessDenied(owner, repo, reason, response.status_code)

        if response.status_code == 404:
            raise RepositoryNotFound(
                owner, repo,
                "repository not found, or it is private and the token cannot see it",
                response.status_code
            )

        raise RemoteFetchError(owner, repo, f"GitHub API error {response.status_code}",
                               response.status_code)

    def get_tag_refs(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """
        Get the raw tag ref objects of a repository, across all pages.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            List of ref objects ({"ref": "refs/tags/v1.0.0", ...})

        Raises:
            RemoteFetchError: if any page cannot be retrieved
        """
        url: Optional[str] = f"{self.api_url}/repos/{owner}/{repo}/git/refs/tags"
        params: Optional[Dict[str, Any]] = {'per_page': PAGE_SIZE}
        refs: List[Dict[str, Any]] = []

        while url:
            response = self._get_page(url, owner, repo, params)
            try:
                data = response.json()
            except ValueError as e:
                raise RemoteFetchError(owner, repo, f"invalid JSON in response ({e})") from e

            # A single matching ref comes back as an object
            if isinstance(data, dict):
                data = [data]
            refs.extend(data)

            url = response.links.get('next', {}).get('url')
            # The next link already carries the query string
            params = None

        logger.debug(f"Fetched {len(refs)} tag refs for {owner}/{repo}")
        return refs

    def get_tag_names(self, owner: str, repo: str) -> List[str]:
        """
        Get the tag names of a repository in API order.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Tag names with the "refs/tags/" prefix removed

        Raises:
            RemoteFetchError: if the tags cannot be retrieved
        """
        names = []
        for ref in self.get_tag_refs(owner, repo):
            name = ref.get('ref', '')
            if name.startswith(TAG_REF_PREFIX):
                names.append(name[len(TAG_REF_PREFIX):])
        return names
