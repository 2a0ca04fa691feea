"""
Handles the 'update' command for bumping module reference tags.

This command follows our design principles:
- Default output is JSONL streaming or table based on TTY
- --verbose/-v for progress output
- --quiet/-q to suppress data output
- Every tag is fetched before the first file is written
"""

import sys
from typing import List

import click

from ..config import Settings
from ..domain import RepositoryId, Strategy
from ..errors import RemoteFetchError
from ..exit_codes import ConfigError, NoReferencesFoundError
from ..progress import LogLevel
from ..cli_utils import standard_command, add_common_options
from ..render import render_update_table
from ..services import UpdateService
from ..services.update_service import TagCatalog


strategy_option = click.option(
    "-s", "--strategy",
    type=click.Choice(Strategy.names(include_aliases=True)),
    default=None,
    help="Tag selection strategy (default: highest-semver, or update.strategy from config)"
)


def build_settings(config, **overrides) -> Settings:
    """Settings for one command run; an invalid config value is a ConfigError."""
    try:
        return Settings.from_config(config, **overrides)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_catalog(service: UpdateService, repository_ids: List[RepositoryId], progress) -> TagCatalog:
    """
    Fetch the tags of every repository, reporting progress per repository.

    When progress output is off (piped, CI) one line per repository is
    still printed, followed by the remaining GitHub API quota.
    """
    total = len(repository_ids)
    with progress.task("Loading module tags from GitHub", total=total) as update_progress:

        def on_fetch(position: int, repository_id: RepositoryId) -> None:
            if progress.enabled:
                update_progress(position, str(repository_id))
            else:
                progress(f"Fetching tags [{position}/{total}] {repository_id}", force=True)

        catalog = service.fetch_catalog(repository_ids, on_fetch=on_fetch)

    status = service.github.rate_limit_status
    if status is not None:
        progress(f"GitHub API rate limit: {status.remaining}/{status.limit} requests remaining")
    return catalog


@click.command("update")
@add_common_options('dir')
@strategy_option
@click.option("--table/--no-table", default=None, help="Display as formatted table (auto-detected by default)")
@add_common_options('dry_run', 'verbose', 'quiet', 'format', 'fields')
@standard_command(streaming=True)
def update_handler(directory, strategy, table, dry_run, progress, config, quiet, **kwargs):
    """
    Update module references to the latest tags of their repositories.

    Scans DIR for .tf files, looks up the tags of every referenced GitHub
    repository and rewrites each reference's ?ref= value in place. Only
    references whose current tag is a tag of the repository are touched.

    \b
    Strategies:
    - highest-semver: the highest version of the repository
    - highest-semver-current-major: the highest version with the same major

    Examples:

    \b
        tfbump update                                    # Update references under current dir
        tfbump update -d infra/                          # Update references under infra/
        tfbump update -s highest-semver-current-major    # Never cross a major version
        tfbump update --dry-run                          # Preview changes without writing
    """
    if table is None:
        table = sys.stdout.isatty()

    settings = build_settings(config, strategy=strategy, dry_run=dry_run)
    service = UpdateService(settings)

    progress(f"Scanning {directory} for module references...")
    records = service.scan(directory)
    if not records:
        raise NoReferencesFoundError(f"No module references found under {directory}")

    repository_ids = service.repository_ids(records)
    progress(
        f"Found {len(repository_ids)} referenced module repositories "
        f"across {len(records)} files with module references",
        force=True
    )

    try:
        catalog = load_catalog(service, repository_ids, progress)
    except RemoteFetchError:
        progress.error("No files were modified")
        raise

    if dry_run:
        progress.warning("DRY RUN - no files will be written")

    updates = service.apply(service.plan(records, catalog))

    for update in updates:
        if dry_run:
            progress(f"Would update {update.path}")
        else:
            progress(f"Updated {update.path}", force=True, level=LogLevel.SUCCESS)

    if table:
        render_update_table(updates, dry_run=dry_run)
    elif not quiet:
        for update in updates:
            yield update.to_dict(dry_run=dry_run)

    # Summary
    if updates:
        verb = "Would update" if dry_run else "Updated"
        progress(f"{verb} {len(updates)} of {len(records)} files using the {settings.strategy.value} strategy", force=True)
    else:
        progress("All module references are up to date", force=True)
