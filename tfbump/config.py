#!/usr/bin/env python3

import os
import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import logging
import sys

import yaml

from .domain.selection import Strategy

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("tfbump")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. TFBUMP_CONFIG environment variable
    2. ~/.tfbump/ directory
    """
    # Check for environment variable override
    if 'TFBUMP_CONFIG' in os.environ:
        path = Path(os.environ['TFBUMP_CONFIG'])
        if path.exists():
            return path

    tfbump_dir = Path.home() / '.tfbump'
    for filename in CONFIG_FILENAMES:
        path = tfbump_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return tfbump_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                # Default to JSON format
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            # Merge file config with defaults
            config = merge_configs(config, file_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config, config_path: Optional[Path] = None):
    """Save configuration to file."""
    config_path = config_path or get_config_path()

    # Create directory if it doesn't exist
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.suffix.lower() in ['.yaml', '.yml']:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False)
    else:
        if config_path.suffix.lower() in ['.toml']:
            # tomllib is read-only
            logger.warning("Cannot write TOML config. Saving as JSON instead.")
            config_path = config_path.with_suffix('.json')
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "max_concurrent_operations": 5,
        },
        "scan": {
            "extension": ".tf",
            "exclude_directories": [".git", ".terraform"],
            "skip_hidden_directories": True,
        },
        "github": {
            "token": "",
            "api_url": "https://api.github.com",
            "timeout_seconds": 30,
            "use_gh_cli": True,
        },
        "update": {
            "strategy": Strategy.HIGHEST_SEMVER.value,
        },
        "logging": {
            "level": "WARNING",
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: TFBUMP_SECTION_KEY
    For example: TFBUMP_GITHUB_TIMEOUT_SECONDS=60
    List values are comma-separated: TFBUMP_SCAN_EXCLUDE_DIRECTORIES=.git,.terraform
    """
    env_prefix = "TFBUMP_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    # Tokens are opaque strings even when they look numeric
                    if isinstance(current_level[matched_key], str):
                        typed_value = value
                    # Lists are given comma-separated, e.g. ".git,.terraform,vendor"
                    elif isinstance(current_level[matched_key], list):
                        typed_value = [item.strip() for item in value.split(',') if item.strip()]
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config


def configure_logging(config, verbose: bool = False) -> None:
    """Apply the configured log level to the tfbump logger."""
    level_name = str(config.get("logging", {}).get("level", "WARNING")).upper()
    level = getattr(logging, level_name, logging.WARNING)
    if verbose:
        level = min(level, logging.INFO)
    logger.setLevel(level)


@dataclass(frozen=True)
class Settings:
    """
    Explicit run configuration handed to services and clients.

    Built once per command from the loaded config plus command-line
    overrides; nothing downstream reads configuration globally.
    """
    github_token: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    github_timeout: float = 30.0
    use_gh_cli: bool = True
    strategy: Strategy = Strategy.HIGHEST_SEMVER
    extension: str = ".tf"
    exclude_directories: Tuple[str, ...] = (".git", ".terraform")
    skip_hidden_directories: bool = True
    max_workers: int = 5
    dry_run: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides: Any) -> 'Settings':
        """
        Create Settings from a config dict.

        The GitHub token falls back to the GITHUB_TOKEN environment
        variable. Overrides with a value of None are ignored.

        Raises:
            ValueError: if the configured strategy is unknown
        """
        github = config.get("github", {})
        scan = config.get("scan", {})
        general = config.get("general", {})
        update = config.get("update", {})

        strategy = overrides.pop("strategy", None) or update.get("strategy") or Strategy.HIGHEST_SEMVER
        if not isinstance(strategy, Strategy):
            strategy = Strategy.parse(strategy)

        excluded = scan.get("exclude_directories", (".git", ".terraform"))
        if isinstance(excluded, str):
            excluded = [name.strip() for name in excluded.split(',') if name.strip()]

        values = {
            "github_token": github.get("token") or os.environ.get("GITHUB_TOKEN") or None,
            "github_api_url": github.get("api_url") or "https://api.github.com",
            "github_timeout": float(github.get("timeout_seconds", 30)),
            "use_gh_cli": bool(github.get("use_gh_cli", True)),
            "strategy": strategy,
            "extension": scan.get("extension", ".tf"),
            "exclude_directories": tuple(excluded),
            "skip_hidden_directories": bool(scan.get("skip_hidden_directories", True)),
            "max_workers": max(1, int(general.get("max_concurrent_operations", 5))),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
