"""
Configuration Manager for GIF Server
Handles loading and managing configuration from YAML files and CLI arguments
"""

import os
import yaml
import logging
from typing import Dict, Any, List, Optional

from .contracts import STRATEGY_NAMES

logger = logging.getLogger(__name__)

PACKAGED_CONFIG_DIR = os.path.join(os.path.abspath(os.path.dirname(__file__)), 'config')


class ConfigManager:
    config_files = [
        'gifserver.yaml',
        'logging.yaml'
    ]

    def __init__(self, config_dir: Optional[str] = None):
        self.config_dir = config_dir or PACKAGED_CONFIG_DIR
        self.config: Dict[str, Any] = {}
        self.loaded_files: List[str] = []
        self._load_all_configs()

    def _load_all_configs(self):
        """Load all configuration files, preferring config_dir over packaged defaults"""
        for config_file in self.config_files:
            # 1) Prefer explicit external config dir
            config_path = os.path.join(self.config_dir, config_file)
            if not os.path.exists(config_path):
                # 2) Fall back to packaged defaults
                config_path = os.path.join(PACKAGED_CONFIG_DIR, config_file)
                if not os.path.exists(config_path):
                    logger.warning(f"Config file not found in '{self.config_dir}' or packaged defaults: {config_file}")
                    continue

            try:
                with open(config_path, 'r', encoding='utf-8') as file:
                    config_data = yaml.safe_load(file)
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Error loading configuration from {config_path}: {e}")
                raise

            if config_data:
                self.config.update(config_data)
            self.loaded_files.append(config_path)
            logger.debug(f"Loaded config from {config_path}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation
        Example: get('gifserver.limits.max_width')
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            logger.debug(f"Configuration key '{key_path}' not found, using default: {default}")
            return default

    def get_strategy_args(self, name: str) -> Optional[List[str]]:
        """ffmpeg argument template configured for a strategy, None to use the built-in one"""
        args = self.get(f'gifserver.strategies.{name}.ffmpeg_args')
        return [str(a) for a in args] if args else None

    def update_from_args(self, args_dict: Dict[str, Any]):
        """Update configuration with command line arguments"""
        applied = 0
        for key, value in args_dict.items():
            if value is not None:
                old_value = self.get(key)
                self._set_nested_value(key, value)
                applied += 1
                logger.info(f"Configuration override applied: {key} = {value} (was: {old_value})")

        if applied:
            logger.info(f"Applied {applied} CLI configuration overrides")
        else:
            logger.debug("No CLI configuration overrides to apply")

    def _set_nested_value(self, key_path: str, value: Any):
        """Set nested configuration value using dot notation"""
        keys = key_path.split('.')
        config_section = self.config

        for key in keys[:-1]:
            if not isinstance(config_section.get(key), dict):
                config_section[key] = {}
            config_section = config_section[key]

        config_section[keys[-1]] = value

    def validate_config(self) -> bool:
        """Validate that configuration values are usable"""
        for key in ('gifserver.limits.max_width', 'gifserver.limits.max_height'):
            value = self.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                logger.error(f"Invalid {key}: {value} (must be a non-negative integer)")
                return False

        for key in ('gifserver.tools.convert', 'gifserver.tools.ffmpeg'):
            binary = self.get(key)
            if not isinstance(binary, str) or not binary.strip():
                logger.error(f"Required configuration key missing or empty: {key}")
                return False

        timeout = self.get('gifserver.tools.timeout_seconds', 0)
        if timeout is None:
            timeout = 0
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
            logger.error(f"Invalid timeout_seconds: {timeout} (must be >= 0)")
            return False

        convert_args = self.get('gifserver.frames.convert_args')
        if convert_args is not None and not self._is_arg_list(convert_args):
            logger.error("frames.convert_args must be a list of strings")
            return False

        strategies = self.get('gifserver.strategies', {}) or {}
        if not isinstance(strategies, dict):
            logger.error("gifserver.strategies must be a dictionary")
            return False

        for name, settings in strategies.items():
            if name not in STRATEGY_NAMES:
                logger.error(f"Unknown strategy in configuration: {name}")
                return False
            args = (settings or {}).get('ffmpeg_args')
            if args is not None and not self._is_arg_list(args):
                logger.error(f"strategies.{name}.ffmpeg_args must be a list of strings")
                return False

        logger.info("Configuration validation passed")
        return True

    @staticmethod
    def _is_arg_list(value: Any) -> bool:
        return isinstance(value, list) and all(isinstance(a, (str, int, float)) for a in value)
