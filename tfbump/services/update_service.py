"""
Update service for tfbump.

Orchestrates the pipeline behind the `list` and `update` commands:

1. Scan: read every Terraform file once and extract its module references
2. Deduplicate: collect the distinct repositories across all files
3. Fetch: load each repository's tags once (the catalog)
4. Plan: rewrite each file's text in memory
5. Apply: write the files whose text changed

Every tag is fetched before anything is planned, so a fetch failure
stops the run with no file written.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..config import Settings
from ..domain import (
    FileRecord,
    ModuleReference,
    ParsedTag,
    RepositoryId,
    RewriteResult,
    extract_references,
    is_known_tag,
    parse_tag,
    rewrite,
    select_tag,
    sort_key,
)
from ..domain.rewrite import Resolver
from ..errors import ParseError
from ..infra import GitHubClient, find_files, read_text, write_text, token_from_gh_cli

logger = logging.getLogger(__name__)

TagCatalog = Dict[RepositoryId, List[ParsedTag]]

# Reference statuses reported by `tfbump list --check-remote`
STATUS_UP_TO_DATE = "up-to-date"
STATUS_UPGRADE = "upgrade"
STATUS_UNKNOWN_TAG = "unknown-tag"


@dataclass(frozen=True)
class FileUpdate:
    """A file whose text is to be (or was) rewritten."""
    path: Path
    result: RewriteResult

    def to_dict(self, dry_run: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        changes = []
        for reference, new_tag in self.result.replacements:
            change = reference.to_dict()
            change['from'] = change.pop('tag')
            change['to'] = new_tag.raw
            changes.append(change)
        return {
            'path': str(self.path),
            'written': not dry_run,
            'changes': changes,
        }


@dataclass
class ReferenceSummary:
    """All occurrences of one (repository, tag) pair, for listing."""
    repository_id: RepositoryId
    tag: ParsedTag
    sources: List[str] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)
    proposed: Optional[ParsedTag] = None
    status: Optional[str] = None

    def to_dict(self, locations: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            'repository': str(self.repository_id),
            'tag': self.tag.raw,
            'file_count': len(self.files),
        }
        if locations:
            data['files'] = [str(p) for p in self.files]
        if self.status is not None:
            data['proposed'] = self.proposed.raw if self.proposed else None
            data['status'] = self.status
        return data


def create_github_client(settings: Settings) -> GitHubClient:
    """
    Create a GitHubClient from settings.

    Without a configured token, an authenticated `gh` CLI is asked for one
    (unless disabled); anonymous access is used as a last resort.
    """
    token = settings.github_token
    if not token and settings.use_gh_cli:
        token = token_from_gh_cli()
        if token:
            logger.debug("Using GitHub token from gh CLI")
    if not token:
        logger.info("No GitHub token configured; private repositories will not be visible")
    return GitHubClient(
        token=token,
        api_url=settings.github_api_url,
        timeout=settings.github_timeout,
    )


class UpdateService:
    """
    Service for finding and updating module references.

    Example:
        service = UpdateService(Settings.from_config(load_config()))
        records = service.scan("infra/")
        catalog = service.fetch_catalog(service.repository_ids(records))
        for update in service.apply(service.plan(records, catalog)):
            print(update.path)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        github_client: Optional[GitHubClient] = None
    ):
        """
        Initialize UpdateService.

        Args:
            settings: Run configuration (defaults if None)
            github_client: GitHub client instance (created from settings on first use if None)
        """
        self.settings = settings or Settings()
        self._github = github_client

    @property
    def github(self) -> GitHubClient:
        if self._github is None:
            self._github = create_github_client(self.settings)
        return self._github

    def scan(self, root: Path) -> List[FileRecord]:
        """
        Read the Terraform files under ``root`` and extract their references.

        Files without references are dropped. Files that are not valid UTF-8
        are skipped with a warning.

        Args:
            root: Directory to scan

        Returns:
            FileRecords in path order
        """
        records = []
        for path in find_files(
            root,
            extension=self.settings.extension,
            exclude_directories=self.settings.exclude_directories,
            skip_hidden=self.settings.skip_hidden_directories,
        ):
            try:
                content = read_text(path)
            except UnicodeDecodeError as e:
                logger.warning(f"Skipping {path}: not valid UTF-8 ({e})")
                continue

            references = extract_references(content)
            if references:
                records.append(FileRecord(path=path, raw_content=content, references=references))

        logger.debug(f"Found module references in {len(records)} files under {root}")
        return records

    @staticmethod
    def repository_ids(records: Iterable[FileRecord]) -> List[RepositoryId]:
        """Distinct repositories referenced by ``records``, sorted."""
        return sorted({
            reference.repository_id
            for record in records
            for reference in record.references
        })

    def fetch_tags(self, repository_id: RepositoryId) -> List[ParsedTag]:
        """
        Fetch and parse the tags of one repository.

        Tags that cannot be parsed are left out of the catalog.

        Raises:
            RemoteFetchError: if the tags cannot be retrieved
        """
        tags = []
        for name in self.github.get_tag_names(repository_id.owner, repository_id.name):
            try:
                tags.append(parse_tag(name))
            except ParseError as e:
                logger.warning(f"Ignoring tag of {repository_id}: {e}")
        return tags

    def fetch_catalog(
        self,
        repository_ids: List[RepositoryId],
        on_fetch: Optional[Callable[[int, RepositoryId], None]] = None
    ) -> TagCatalog:
        """
        Fetch the tags of every repository, one request sequence per repository.

        Args:
            repository_ids: Distinct repositories
            on_fetch: Called with (position, repository_id) before each fetch

        Returns:
            Mapping from repository to its tags in API order

        Raises:
            RemoteFetchError: on the first repository that fails
        """
        catalog: TagCatalog = {}
        for position, repository_id in enumerate(repository_ids, 1):
            if on_fetch is not None:
                on_fetch(position, repository_id)
            catalog[repository_id] = self.fetch_tags(repository_id)
        return catalog

    def resolver(self, catalog: TagCatalog) -> Resolver:
        """Build the rewrite resolver for ``catalog`` and the configured strategy."""
        strategy = self.settings.strategy

        def resolve(reference: ModuleReference) -> Optional[ParsedTag]:
            available = catalog.get(reference.repository_id, [])
            selected = select_tag(reference.tag, available, strategy)
            if selected is None:
                logger.info(
                    f"Leaving {reference.original_text} unchanged: "
                    f"{reference.tag.raw} is not a tag of {reference.repository_id}"
                )
            return selected

        return resolve

    def plan(self, records: Iterable[FileRecord], catalog: TagCatalog) -> List[FileUpdate]:
        """
        Rewrite every record in memory.

        Returns:
            Updates for the files whose text changed, in record order
        """
        resolve = self.resolver(catalog)
        updates = []
        for record in records:
            result = rewrite(record.raw_content, record.references, resolve)
            if result.changed:
                updates.append(FileUpdate(path=record.path, result=result))
        return updates

    def apply(self, updates: List[FileUpdate]) -> List[FileUpdate]:
        """
        Write planned updates to disk, unless running dry.

        Each file is written once, whole, to its own path, so the writes
        run in parallel.

        Returns:
            The updates, in the order given
        """
        if self.settings.dry_run or not updates:
            return updates

        workers = min(self.settings.max_workers, len(updates))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # list() surfaces the first write error
            list(executor.map(lambda u: write_text(u.path, u.result.text), updates))

        for update in updates:
            logger.info(f"Updated {update.path}")
        return updates

    def summarize(
        self,
        records: Iterable[FileRecord],
        catalog: Optional[TagCatalog] = None
    ) -> List[ReferenceSummary]:
        """
        Group references by (repository, tag) for listing.

        With a catalog, each summary also carries the tag the configured
        strategy would pick and a status; a tag the repository does not
        list is reported as unknown rather than treated as an error.

        Returns:
            Summaries sorted by repository, then version
        """
        summaries: Dict[Tuple[RepositoryId, str], ReferenceSummary] = {}
        for record in records:
            for reference in sorted(record.references, key=lambda r: r.original_text):
                key = (reference.repository_id, reference.tag.raw)
                summary = summaries.get(key)
                if summary is None:
                    summary = summaries[key] = ReferenceSummary(reference.repository_id, reference.tag)
                if reference.original_text not in summary.sources:
                    summary.sources.append(reference.original_text)
                if record.path not in summary.files:
                    summary.files.append(record.path)

        if catalog is not None:
            for summary in summaries.values():
                available = catalog.get(summary.repository_id, [])
                if not is_known_tag(summary.tag, available):
                    summary.status = STATUS_UNKNOWN_TAG
                    continue
                summary.proposed = select_tag(summary.tag, available, self.settings.strategy)
                if summary.proposed.raw == summary.tag.raw:
                    summary.status = STATUS_UP_TO_DATE
                else:
                    summary.status = STATUS_UPGRADE

        return sorted(
            summaries.values(),
            key=lambda s: (s.repository_id, sort_key(s.tag), s.tag.raw)
        )
