"""
Tests for the GitHub tag source.

Tests cover:
- Tag listing with mocked HTTP
- refs/tags/ prefix stripping and API order
- Link header pagination
- Status code to error mapping (401/403/404/5xx)
- Network failures and malformed responses
- Authorization header and gh CLI token lookup
- Rate limit tracking
"""

import subprocess
import time
from unittest.mock import patch, MagicMock

import pytest
import requests

from tfbump.errors import RemoteFetchError, RemoteAccessDenied, RepositoryNotFound
from tfbump.infra.github_client import GitHubClient, RateLimitStatus, token_from_gh_cli


# ──────────────────────────────────────────────
# Fixtures: sample API responses
# ──────────────────────────────────────────────

SAMPLE_REFS = [
    {"ref": "refs/tags/v1.0.0", "object": {"sha": "aaa", "type": "commit"}},
    {"ref": "refs/tags/v2.0.0", "object": {"sha": "bbb", "type": "commit"}},
    {"ref": "refs/tags/v1.3.0", "object": {"sha": "ccc", "type": "tag"}},
]


def make_response(status_code=200, data=None, headers=None, links=None):
    """Build a mock requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data if data is not None else []
    response.headers = headers or {}
    response.links = links or {}
    return response


class TestGetTagNames:
    """Tests for GitHubClient.get_tag_names()."""

    def test_strips_prefix_and_keeps_api_order(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(data=SAMPLE_REFS)):
            names = client.get_tag_names("acme", "widget")
        assert names == ["v1.0.0", "v2.0.0", "v1.3.0"]

    def test_requests_refs_tags_endpoint(self):
        client = GitHubClient(api_url="https://ghe.example.com/api/v3/", timeout=5)
        with patch.object(client.session, 'get', return_value=make_response(data=[])) as mock_get:
            client.get_tag_names("acme", "widget")
        args, kwargs = mock_get.call_args
        assert args[0] == "https://ghe.example.com/api/v3/repos/acme/widget/git/refs/tags"
        assert kwargs['params'] == {'per_page': 100}
        assert kwargs['timeout'] == 5

    def test_single_ref_object_is_wrapped(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(data=SAMPLE_REFS[0])):
            assert client.get_tag_names("acme", "widget") == ["v1.0.0"]

    def test_non_tag_refs_are_ignored(self):
        client = GitHubClient()
        data = [{"ref": "refs/heads/main"}, {"ref": "refs/tags/v1"}, {}]
        with patch.object(client.session, 'get', return_value=make_response(data=data)):
            assert client.get_tag_names("acme", "widget") == ["v1"]

    def test_no_tags(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(data=[])):
            assert client.get_tag_names("acme", "widget") == []

    def test_follows_pagination(self):
        client = GitHubClient()
        next_url = "https://api.github.com/repositories/1/git/refs/tags?per_page=100&page=2"
        first = make_response(data=SAMPLE_REFS[:2], links={'next': {'url': next_url}})
        second = make_response(data=SAMPLE_REFS[2:])
        with patch.object(client.session, 'get', side_effect=[first, second]) as mock_get:
            names = client.get_tag_names("acme", "widget")

        assert names == ["v1.0.0", "v2.0.0", "v1.3.0"]
        assert mock_get.call_count == 2
        args, kwargs = mock_get.call_args
        assert args[0] == next_url
        assert kwargs['params'] is None


class TestErrors:
    """Tests for error mapping."""

    @pytest.mark.parametrize("status", [401, 403])
    def test_access_denied(self, status):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(status_code=status)):
            with pytest.raises(RemoteAccessDenied) as exc_info:
                client.get_tag_names("acme", "private")
        assert exc_info.value.status_code == status
        assert "acme/private" in str(exc_info.value)
        assert "GITHUB_TOKEN" in str(exc_info.value)

    def test_exhausted_rate_limit_is_reported(self):
        client = GitHubClient()
        headers = {
            'X-RateLimit-Remaining': '0',
            'X-RateLimit-Limit': '60',
            'X-RateLimit-Reset': str(int(time.time()) + 600),
            'X-RateLimit-Used': '60',
        }
        with patch.object(client.session, 'get', return_value=make_response(403, headers=headers)):
            with pytest.raises(RemoteAccessDenied, match="rate limit exhausted"):
                client.get_tag_names("acme", "widget")

    def test_not_found(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(status_code=404)):
            with pytest.raises(RepositoryNotFound) as exc_info:
                client.get_tag_names("acme", "missing")
        assert exc_info.value.owner == "acme"
        assert exc_info.value.repository == "missing"

    def test_server_error(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(status_code=502)):
            with pytest.raises(RemoteFetchError) as exc_info:
                client.get_tag_names("acme", "widget")
        assert not isinstance(exc_info.value, (RemoteAccessDenied, RepositoryNotFound))
        assert exc_info.value.status_code == 502

    def test_network_failure(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', side_effect=requests.ConnectionError("refused")):
            with pytest.raises(RemoteFetchError, match="acme/widget"):
                client.get_tag_names("acme", "widget")

    def test_malformed_json(self):
        client = GitHubClient()
        response = make_response()
        response.json.side_effect = ValueError("Expecting value")
        with patch.object(client.session, 'get', return_value=response):
            with pytest.raises(RemoteFetchError, match="invalid JSON"):
                client.get_tag_names("acme", "widget")

    def test_failure_on_second_page_propagates(self):
        client = GitHubClient()
        first = make_response(data=SAMPLE_REFS[:1], links={'next': {'url': "https://api.github.com/next"}})
        second = make_response(status_code=500)
        with patch.object(client.session, 'get', side_effect=[first, second]):
            with pytest.raises(RemoteFetchError):
                client.get_tag_names("acme", "widget")


class TestAuthentication:
    """Tests for token handling."""

    def test_bearer_header_with_token(self):
        client = GitHubClient(token="ghp_secret")
        assert client.session.headers['Authorization'] == "Bearer ghp_secret"

    def test_anonymous_without_token(self):
        client = GitHubClient()
        assert 'Authorization' not in client.session.headers

    @patch('tfbump.infra.github_client.subprocess.run')
    def test_token_from_gh_cli(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="gho_abc\n")
        assert token_from_gh_cli() == "gho_abc"

    @patch('tfbump.infra.github_client.subprocess.run')
    def test_gh_cli_not_logged_in(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="")
        assert token_from_gh_cli() is None

    @patch('tfbump.infra.github_client.subprocess.run', side_effect=FileNotFoundError)
    def test_gh_cli_missing(self, mock_run):
        assert token_from_gh_cli() is None

    @patch('tfbump.infra.github_client.subprocess.run',
           side_effect=subprocess.TimeoutExpired(cmd="gh", timeout=10))
    def test_gh_cli_timeout(self, mock_run):
        assert token_from_gh_cli() is None


class TestRateLimit:
    """Tests for rate limit tracking."""

    def test_status_from_headers(self):
        client = GitHubClient()
        headers = {
            'X-RateLimit-Remaining': '4999',
            'X-RateLimit-Limit': '5000',
            'X-RateLimit-Reset': '0',
            'X-RateLimit-Used': '1',
        }
        with patch.object(client.session, 'get', return_value=make_response(data=[], headers=headers)):
            client.get_tag_names("acme", "widget")
        status = client.rate_limit_status
        assert status.remaining == 4999
        assert not status.is_low

    def test_no_headers_no_status(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(data=[])):
            client.get_tag_names("acme", "widget")
        assert client.rate_limit_status is None

    def test_low_and_exhausted(self):
        status = RateLimitStatus(remaining=0, limit=60, reset_time=0, used=60)
        assert status.is_low
        assert status.is_exhausted
        assert status.minutes_until_reset == 0
