"""
Unit tests for configuration loading and validation
"""

import unittest
import tempfile
import os
import shutil
import yaml
from gifserver.config_manager import ConfigManager


class TestConfigValidation(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test fixtures"""
        shutil.rmtree(self.temp_dir)

    def _write_config(self, config):
        with open(os.path.join(self.temp_dir, 'gifserver.yaml'), 'w') as f:
            yaml.dump(config, f)

    def test_packaged_defaults_are_valid(self):
        """Packaged configuration loads and validates"""
        config_manager = ConfigManager()
        self.assertTrue(config_manager.validate_config())
        self.assertEqual(config_manager.get('gifserver.tools.ffmpeg'), 'ffmpeg')
        self.assertEqual(config_manager.get('gifserver.limits.max_width'), 0)
        self.assertIn('version', config_manager.get('logging'))

    def test_packaged_strategy_args_keep_even_dimension_filter(self):
        config_manager = ConfigManager()
        for name in ('direct-mp4', 'frames-mp4'):
            args = config_manager.get_strategy_args(name)
            self.assertIn('scale=trunc(in_w/2)*2:trunc(in_h/2)*2', args)
        self.assertIsNone(config_manager.get_strategy_args('first-frame'))

    def test_external_dir_overrides_packaged_file(self):
        """Config dir file wins, missing files fall back to packaged defaults"""
        self._write_config({
            'gifserver': {
                'limits': {'max_width': 800, 'max_height': 600},
                'tools': {'convert': 'magick', 'ffmpeg': 'ffmpeg', 'timeout_seconds': 30},
            }
        })
        config_manager = ConfigManager(self.temp_dir)
        self.assertEqual(config_manager.get('gifserver.limits.max_width'), 800)
        self.assertEqual(config_manager.get('gifserver.tools.convert'), 'magick')
        # logging.yaml came from the package
        self.assertIsNotNone(config_manager.get('logging'))
        self.assertTrue(config_manager.validate_config())

    def test_missing_key_returns_default(self):
        config_manager = ConfigManager()
        self.assertEqual(config_manager.get('gifserver.nope.nothing', 42), 42)

    def test_negative_limit_is_invalid(self):
        self._write_config({
            'gifserver': {
                'limits': {'max_width': -1, 'max_height': 0},
                'tools': {'convert': 'convert', 'ffmpeg': 'ffmpeg'},
            }
        })
        self.assertFalse(ConfigManager(self.temp_dir).validate_config())

    def test_empty_binary_is_invalid(self):
        config_manager = ConfigManager()
        config_manager.update_from_args({'gifserver.tools.ffmpeg': ''})
        self.assertFalse(config_manager.validate_config())

    def test_negative_timeout_is_invalid(self):
        config_manager = ConfigManager()
        config_manager.update_from_args({'gifserver.tools.timeout_seconds': -5})
        self.assertFalse(config_manager.validate_config())

    def test_unknown_strategy_is_invalid(self):
        config_manager = ConfigManager()
        config_manager.update_from_args({'gifserver.strategies.gif-to-avi.ffmpeg_args': ['{output}']})
        self.assertFalse(config_manager.validate_config())

    def test_non_list_args_are_invalid(self):
        config_manager = ConfigManager()
        config_manager.update_from_args({'gifserver.strategies.frames-ogv.ffmpeg_args': '-q 5'})
        self.assertFalse(config_manager.validate_config())

    def test_update_from_args_skips_none(self):
        config_manager = ConfigManager()
        config_manager.update_from_args({
            'gifserver.tools.ffmpeg': None,
            'gifserver.staging.prefix': 'upload',
        })
        self.assertEqual(config_manager.get('gifserver.tools.ffmpeg'), 'ffmpeg')
        self.assertEqual(config_manager.get('gifserver.staging.prefix'), 'upload')

    def test_invalid_yaml_raises(self):
        with open(os.path.join(self.temp_dir, 'gifserver.yaml'), 'w') as f:
            f.write("gifserver: [unclosed\n")
        with self.assertRaises(yaml.YAMLError):
            ConfigManager(self.temp_dir)


if __name__ == '__main__':
    unittest.main()
