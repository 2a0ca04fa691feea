"""
Unit tests for tfbump.config module
"""
import unittest
import tempfile
import os
import shutil
import json
import logging
from pathlib import Path
from unittest.mock import patch

import yaml

from tfbump.config import (
    Settings,
    apply_env_overrides,
    configure_logging,
    get_config_path,
    get_default_config,
    load_config,
    merge_configs,
    save_config,
)
from tfbump.domain import Strategy


class TestConfigManagement(unittest.TestCase):
    """Test configuration management functionality"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {'HOME': self.temp_dir}, clear=False)
        self.env.start()
        for name in [k for k in os.environ if k.startswith('TFBUMP_')] + ['GITHUB_TOKEN']:
            os.environ.pop(name, None)
        self.config_dir = Path(self.temp_dir) / '.tfbump'

    def tearDown(self):
        """Clean up test environment"""
        self.env.stop()
        shutil.rmtree(self.temp_dir)

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()

        for section in ('general', 'scan', 'github', 'update', 'logging'):
            self.assertIn(section, config)

        self.assertEqual(config['scan']['extension'], '.tf')
        self.assertEqual(config['scan']['exclude_directories'], ['.git', '.terraform'])
        self.assertEqual(config['update']['strategy'], 'highest-semver')
        self.assertEqual(config['github']['token'], '')

    def test_default_path_when_no_file(self):
        self.assertEqual(get_config_path(), self.config_dir / 'config.json')

    def test_config_env_var_path(self):
        custom = Path(self.temp_dir) / 'custom.yaml'
        custom.write_text('update:\n  strategy: highest-semver-current-major\n')
        with patch.dict(os.environ, {'TFBUMP_CONFIG': str(custom)}):
            self.assertEqual(get_config_path(), custom)
            self.assertEqual(load_config()['update']['strategy'], 'highest-semver-current-major')

    def test_load_json_merges_with_defaults(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.json').write_text(json.dumps({'github': {'timeout_seconds': 5}}))

        config = load_config()
        self.assertEqual(config['github']['timeout_seconds'], 5)
        self.assertEqual(config['github']['api_url'], 'https://api.github.com')
        self.assertEqual(config['scan']['extension'], '.tf')

    def test_load_yaml(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.yaml').write_text(
            yaml.safe_dump({'scan': {'exclude_directories': ['.git', '.terraform', 'vendor']}})
        )
        config = load_config()
        self.assertIn('vendor', config['scan']['exclude_directories'])

    def test_load_toml(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.toml').write_text('[general]\nmax_concurrent_operations = 2\n')
        self.assertEqual(load_config()['general']['max_concurrent_operations'], 2)

    def test_invalid_file_falls_back_to_defaults(self):
        self.config_dir.mkdir()
        (self.config_dir / 'config.json').write_text('{not json')
        with self.assertLogs('tfbump', level='ERROR'):
            config = load_config()
        self.assertEqual(config, get_default_config())

    def test_save_and_reload_yaml(self):
        path = self.config_dir / 'config.yaml'
        config = get_default_config()
        config['update']['strategy'] = 'highest-semver-current-major'
        self.assertEqual(save_config(config, path), path)
        self.assertEqual(load_config()['update']['strategy'], 'highest-semver-current-major')

    def test_save_toml_writes_json(self):
        written = save_config(get_default_config(), self.config_dir / 'config.toml')
        self.assertEqual(written.suffix, '.json')
        self.assertEqual(json.loads(written.read_text()), get_default_config())

    def test_merge_configs(self):
        merged = merge_configs({'a': {'b': 1, 'c': 2}, 'd': 3}, {'a': {'b': 10}, 'e': 4})
        self.assertEqual(merged, {'a': {'b': 10, 'c': 2}, 'd': 3, 'e': 4})


class TestEnvOverrides(unittest.TestCase):
    """Test TFBUMP_* environment overrides"""

    def test_nested_keys_with_underscores(self):
        with patch.dict(os.environ, {'TFBUMP_GITHUB_TIMEOUT_SECONDS': '60'}):
            config = apply_env_overrides(get_default_config())
        self.assertEqual(config['github']['timeout_seconds'], 60)

    def test_boolean_values(self):
        with patch.dict(os.environ, {'TFBUMP_SCAN_SKIP_HIDDEN_DIRECTORIES': 'false'}):
            config = apply_env_overrides(get_default_config())
        self.assertIs(config['scan']['skip_hidden_directories'], False)

    def test_numeric_token_stays_string(self):
        with patch.dict(os.environ, {'TFBUMP_GITHUB_TOKEN': '12345'}):
            config = apply_env_overrides(get_default_config())
        self.assertEqual(config['github']['token'], '12345')

    def test_list_values_are_comma_separated(self):
        with patch.dict(os.environ, {'TFBUMP_SCAN_EXCLUDE_DIRECTORIES': '.git, .terraform,vendor'}):
            config = apply_env_overrides(get_default_config())
        self.assertEqual(config['scan']['exclude_directories'], ['.git', '.terraform', 'vendor'])

    def test_single_list_value_reaches_settings(self):
        with patch.dict(os.environ, {'TFBUMP_SCAN_EXCLUDE_DIRECTORIES': '.terraform'}):
            settings = Settings.from_config(apply_env_overrides(get_default_config()))
        self.assertEqual(settings.exclude_directories, ('.terraform',))

    def test_unknown_keys_are_ignored(self):
        with patch.dict(os.environ, {'TFBUMP_NOPE_VALUE': '1'}):
            config = apply_env_overrides(get_default_config())
        self.assertNotIn('nope', config)


class TestSettings(unittest.TestCase):
    """Test Settings.from_config"""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_config(get_default_config())
        self.assertIsNone(settings.github_token)
        self.assertIs(settings.strategy, Strategy.HIGHEST_SEMVER)
        self.assertEqual(settings.exclude_directories, ('.git', '.terraform'))
        self.assertEqual(settings.max_workers, 5)
        self.assertFalse(settings.dry_run)

    def test_token_from_environment(self):
        with patch.dict(os.environ, {'GITHUB_TOKEN': 'ghp_env'}):
            settings = Settings.from_config(get_default_config())
        self.assertEqual(settings.github_token, 'ghp_env')

    def test_configured_token_wins(self):
        config = get_default_config()
        config['github']['token'] = 'ghp_config'
        with patch.dict(os.environ, {'GITHUB_TOKEN': 'ghp_env'}):
            self.assertEqual(Settings.from_config(config).github_token, 'ghp_config')

    def test_strategy_from_config_and_override(self):
        config = get_default_config()
        config['update']['strategy'] = 'highest-semver-for-major'
        self.assertIs(Settings.from_config(config).strategy, Strategy.HIGHEST_SEMVER_CURRENT_MAJOR)
        self.assertIs(
            Settings.from_config(config, strategy='highest-semver').strategy,
            Strategy.HIGHEST_SEMVER
        )

    def test_none_overrides_are_ignored(self):
        settings = Settings.from_config(get_default_config(), strategy=None, dry_run=None)
        self.assertFalse(settings.dry_run)

    def test_string_exclusions_from_config_file(self):
        config = get_default_config()
        config['scan']['exclude_directories'] = '.git,vendor'
        self.assertEqual(Settings.from_config(config).exclude_directories, ('.git', 'vendor'))

    def test_unknown_strategy(self):
        config = get_default_config()
        config['update']['strategy'] = 'newest'
        with self.assertRaises(ValueError):
            Settings.from_config(config)


class TestConfigureLogging(unittest.TestCase):
    """Test configure_logging"""

    def tearDown(self):
        logging.getLogger('tfbump').setLevel(logging.WARNING)

    def test_level_from_config(self):
        configure_logging({'logging': {'level': 'debug'}})
        self.assertEqual(logging.getLogger('tfbump').level, logging.DEBUG)

    def test_verbose_lowers_to_info(self):
        configure_logging(get_default_config(), verbose=True)
        self.assertEqual(logging.getLogger('tfbump').level, logging.INFO)


if __name__ == '__main__':
    unittest.main()
