"""
Handles the 'list' command for showing module references.

Read-only: files are never written. With --check-remote the tag each
reference would be updated to is shown; references whose tag is unknown
to their repository are reported, not treated as failures.
"""

import sys

import click

from ..exit_codes import NoReferencesFoundError
from ..cli_utils import standard_command, add_common_options
from ..render import render_reference_table
from ..services import UpdateService
from ..services.update_service import STATUS_UNKNOWN_TAG, STATUS_UPGRADE
from .update import build_settings, load_catalog, strategy_option


@click.command("list")
@add_common_options('dir')
@click.option("--locations", is_flag=True, help="Also show the files using each reference")
@click.option("--check-remote", is_flag=True, help="Query GitHub for the tag each reference would be updated to")
@strategy_option
@click.option("--table/--no-table", default=None, help="Display as formatted table (auto-detected by default)")
@add_common_options('verbose', 'quiet', 'format', 'fields')
@standard_command(streaming=True)
def list_handler(directory, locations, check_remote, strategy, table, progress, config, quiet, **kwargs):
    """
    List the module references found under DIR.

    One row per repository and tag, with the number of files using it.

    Examples:

    \b
        tfbump list                          # References under current dir
        tfbump list --locations              # Include file paths
        tfbump list --check-remote           # Show proposed upgrades
        tfbump list -f csv > modules.csv     # Export as CSV
    """
    if table is None:
        table = sys.stdout.isatty()

    settings = build_settings(config, strategy=strategy)
    service = UpdateService(settings)

    progress(f"Scanning {directory} for module references...")
    records = service.scan(directory)
    if not records:
        raise NoReferencesFoundError(f"No module references found under {directory}")

    catalog = None
    if check_remote:
        repository_ids = service.repository_ids(records)
        progress(f"Found {len(repository_ids)} referenced module repositories across {len(records)} files")
        catalog = load_catalog(service, repository_ids, progress)

    summaries = service.summarize(records, catalog)

    for summary in summaries:
        if summary.status == STATUS_UNKNOWN_TAG:
            progress(f"{summary.repository_id}: {summary.tag.raw} is not a tag of the repository and will be left as is")

    if table:
        render_reference_table(summaries, locations=locations, check_remote=check_remote)
    elif not quiet:
        for summary in summaries:
            yield summary.to_dict(locations=locations)

    if check_remote:
        upgrades = sum(1 for s in summaries if s.status == STATUS_UPGRADE)
        progress(f"{upgrades} of {len(summaries)} references can be updated")
