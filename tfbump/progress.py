"""
Progress reporting utilities for tfbump.

Provides consistent progress reporting that respects piping and redirection:
stdout carries data, everything human-oriented goes to stderr.
"""

import sys
import os
from typing import Optional
from contextlib import contextmanager
import time
from enum import Enum


class LogLevel(Enum):
    """Log levels for progress messages."""
    INFO = 1
    WARNING = 2
    ERROR = 3
    SUCCESS = 4


class ProgressReporter:
    """Handles progress reporting to stderr while keeping stdout clean for data."""

    def __init__(self, enabled: Optional[bool] = None, force_tty: bool = False,
                 use_colors: Optional[bool] = None):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            force_tty: Treat stderr as TTY even if it's not (for testing)
            use_colors: Use ANSI colors in output
        """
        if enabled is None:
            # Auto-detect: show progress if stderr is a terminal
            self.enabled = sys.stderr.isatty() or force_tty
        else:
            self.enabled = enabled

        # Auto-detect color support
        if use_colors is None:
            self.use_colors = sys.stderr.isatty() and os.environ.get('NO_COLOR') is None
        else:
            self.use_colors = use_colors

        self.start_time: Optional[float] = None

        # Color codes
        self.colors = {
            'reset': '\033[0m',
            'red': '\033[31m',
            'green': '\033[32m',
            'yellow': '\033[33m',
        }

    def _colorize(self, text: str, color: str) -> str:
        """Add color to text if colors are enabled."""
        if self.use_colors and color in self.colors:
            return f"{self.colors[color]}{text}{self.colors['reset']}"
        return text

    def __call__(self, message: str, force: bool = False, level: LogLevel = LogLevel.INFO):
        """
        Output progress message to stderr if enabled.

        Args:
            message: Progress message to display
            force: Force output even if disabled
            level: Log level for the message
        """
        if force or self.enabled:
            # Format message based on level
            if level == LogLevel.ERROR:
                message = self._colorize(f"✗ {message}", 'red')
            elif level == LogLevel.WARNING:
                message = self._colorize(f"⚠ {message}", 'yellow')
            elif level == LogLevel.SUCCESS:
                message = self._colorize(f"✓ {message}", 'green')

            print(message, file=sys.stderr, flush=True)

    def error(self, message: str):
        """Always output errors to stderr."""
        error_msg = self._colorize(f"ERROR: {message}", 'red')
        print(error_msg, file=sys.stderr, flush=True)

    def warning(self, message: str):
        """Output warnings to stderr if enabled."""
        if self.enabled:
            warning_msg = self._colorize(f"WARNING: {message}", 'yellow')
            print(warning_msg, file=sys.stderr, flush=True)

    @contextmanager
    def task(self, description: str, total: Optional[int] = None):
        """
        Context manager for tracking a task with optional item count.

        Args:
            description: Task description
            total: Total number of items to process

        Example:
            with progress.task("Loading module tags", total=12) as update:
                for i, repo_id in enumerate(repo_ids, 1):
                    update(i, str(repo_id))
                    fetch(repo_id)
        """
        self.start_time = time.time()

        if self.enabled:
            if total:
                print(f"{description} ({total} items)...", file=sys.stderr, flush=True)
            else:
                print(f"{description}...", file=sys.stderr, flush=True)

        def update(current: int, item: str = ""):
            """Update progress for current item."""
            if self.enabled and total:
                msg = f"  [{current}/{total}]"
                if item:
                    msg += f" {item}"

                # Use carriage return to update in place on TTY
                if sys.stderr.isatty():
                    terminal_width = os.get_terminal_size(sys.stderr.fileno()).columns
                    print(f"\r{msg[:terminal_width]:<{terminal_width}}", end="", file=sys.stderr, flush=True)
                else:
                    self(msg)

        try:
            yield update
        finally:
            if self.enabled and sys.stderr.isatty():
                print(file=sys.stderr)  # New line after progress

            if self.enabled:
                elapsed = time.time() - self.start_time
                print(f"Completed in {elapsed:.1f}s", file=sys.stderr, flush=True)


# Global progress reporter instance
_progress = None


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Get the global progress reporter.

    Args:
        enabled: Override auto-detection of progress display

    Returns:
        ProgressReporter instance
    """
    global _progress
    if _progress is None or enabled is not None:
        _progress = ProgressReporter(enabled)
    return _progress


# Environment variable override
if os.environ.get('TFBUMP_PROGRESS') == '0':
    _progress = ProgressReporter(enabled=False)
elif os.environ.get('TFBUMP_PROGRESS') == '1':
    _progress = ProgressReporter(enabled=True)
