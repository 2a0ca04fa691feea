#!/usr/bin/env python3

import click

from tfbump.commands.list import list_handler
from tfbump.commands.update import update_handler
from tfbump.commands.config import config_cmd


@click.group()
@click.version_option(package_name="tfbump")
def cli():
    """tfbump - Keep Terraform module references on their latest tags.

    Finds module sources that point at tagged GitHub repositories
    ("git::https://github.com/owner/repo.git?ref=v1.2.0") and rewrites
    their ?ref= values to the latest tag of each repository.

    Set GITHUB_TOKEN (or log in with `gh auth login`) to reach private
    repositories and avoid anonymous rate limits.
    """
    pass


cli.add_command(list_handler, name='list')
cli.add_command(update_handler, name='update')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
