"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Generator
from .config import load_config, configure_logging
from .progress import get_progress
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import FORMATS, format_output, get_format_from_env


def standard_command(streaming: bool = False):
    """
    Decorator that provides standard CLI behavior:
    - Progress reporting on stderr
    - Clean data output on stdout
    - Automatic --verbose/-v flag
    - Automatic --quiet/-q flag to suppress data output
    - Loaded configuration injected as ``config``
    - Consistent error handling

    Args:
        streaming: If True, output JSONL as items are produced.
                  If False, collect results and output at end.
    """
    def decorator(func):

        @wraps(func)
        def wrapper(*args, **kwargs):
            # Extract flags
            verbose = kwargs.get('verbose', False)
            quiet = kwargs.get('quiet', False)
            output_format = kwargs.get('format', None)
            fields_str = kwargs.get('fields', None)
            fields = fields_str.split(',') if fields_str else None

            # Get format from env if not specified
            if output_format is None:
                output_format = get_format_from_env('jsonl')

            # Initialize progress reporter
            progress = get_progress(enabled=verbose or None)
            kwargs['progress'] = progress

            try:
                config = load_config()
                configure_logging(config, verbose=verbose)
                kwargs['config'] = config

                # Call the actual command
                result = func(*args, **kwargs)

                if quiet:
                    # In quiet mode, consume the generator but don't output
                    if isinstance(result, Generator):
                        for _ in result:
                            pass
                elif result is None:
                    # Command handles its own output
                    pass
                elif isinstance(result, Generator) and streaming and output_format == 'jsonl':
                    for item in result:
                        print(json.dumps(item, ensure_ascii=False), flush=True)
                elif isinstance(result, (Generator, list, tuple)):
                    for line in format_output(iter(result), output_format, fields):
                        print(line, flush=True)
                elif isinstance(result, dict):
                    for line in format_output(iter([result]), output_format, fields):
                        print(line, flush=True)
                else:
                    print(result, flush=True)

                sys.exit(SUCCESS)

            except KeyboardInterrupt:
                progress.error("Interrupted by user")
                sys.exit(INTERRUPTED)
            except click.ClickException:
                # Click exceptions already have their exit code
                raise
            except CommandError as e:
                progress.error(str(e))
                if not quiet:
                    error_obj = {
                        "error": str(e),
                        "type": type(e).__name__,
                        "exit_code": e.exit_code
                    }
                    print(json.dumps(error_obj, ensure_ascii=False), flush=True)
                sys.exit(e.exit_code)
            except Exception as e:
                progress.error(f"Command failed: {e}")
                exit_code = get_exit_code_for_exception(e)
                if not quiet:
                    error_obj = {
                        "error": str(e),
                        "type": type(e).__name__,
                        "exit_code": exit_code
                    }
                    print(json.dumps(error_obj, ensure_ascii=False), flush=True)
                sys.exit(exit_code)

        return wrapper
    return decorator


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                           help='Force progress output even when piped'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                         help='Suppress data output, show only progress'),
    'dry_run': click.option('--dry-run', is_flag=True,
                           help='Preview changes without writing files'),
    'format': click.option('-f', '--format',
                         type=click.Choice(list(FORMATS)),
                         help='Output format (default: jsonl, or from TFBUMP_FORMAT env)'),
    'fields': click.option('--fields',
                         help='Comma-separated list of fields to include (for CSV/TSV)'),
    'dir': click.option('-d', '--dir', 'directory', default='.',
                        type=click.Path(exists=True, file_okay=False),
                        help='Directory to scan for Terraform files (default: current)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'dry_run')
        def my_command(verbose, dry_run):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
