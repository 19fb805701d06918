#!/usr/bin/env python3
"""
Application settings for Package Backup Tool
Handles YAML settings with dot notation access and default merging
"""

import os
from typing import Dict, Any, Optional, Tuple, List
from pathlib import Path
import logging

import yaml

class Settings:
    """Application settings manager backed by a YAML file"""

    def __init__(self, config_dir: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.config_dir = Path(config_dir or os.path.expanduser("~/.package_backup"))
        self.settings_file = self.config_dir / "settings.yaml"

        self._settings: Dict[str, Any] = {}

        self.load_settings()

    def get_default_settings(self) -> Dict[str, Any]:
        """Get default setting values"""
        return {
            'core': {
                'log_level': 'INFO',
                'log_file': str(self.config_dir / 'package_backup.log'),
            },
            'packages': {
                'cache_dir': os.path.join('Library', 'PackageCache'),
            },
            'credentials': {
                'file': '.packagebackup.config',
                'update_gitignore': True
            },
            'local': {
                'default_location': '',
                'min_free_space_mb': 50
            },
            'github': {
                'api_base': 'https://api.github.com',
                'host': 'github.com',
                'user_agent': 'Package-Backup-Tool/1.0',
                'repo_description': 'Package Backup',
                'request_timeout': 30,
                'settle_delay': 2.0
            },
            'git': {
                'executable': '',
                'command_timeout': 300
            }
        }

    def load_settings(self):
        """Load settings from file and merge them over the defaults"""
        loaded: Dict[str, Any] = {}
        if self.settings_file.exists():
            try:
                with open(self.settings_file, 'r') as f:
                    loaded = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                self.logger.error(f"Failed to load settings from {self.settings_file}: {e}")
                loaded = {}

        if not isinstance(loaded, dict):
            self.logger.warning(f"Ignoring malformed settings file {self.settings_file}")
            loaded = {}

        self._settings = self._merge_settings(self.get_default_settings(), loaded)

    def save_settings(self) -> bool:
        """Save current settings to file"""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w') as f:
                yaml.dump(self._settings, f, default_flow_style=False, indent=2)
        except OSError as e:
            self.logger.error(f"Failed to save settings: {e}")
            return False
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """Get setting value with dot notation support"""
        value = self._get_nested_value(self._settings, key.split('.'))
        return value if value is not None else default

    def set(self, key: str, value: Any, save_immediately: bool = True) -> bool:
        """Set setting value with dot notation support"""
        self._set_nested_value(self._settings, key.split('.'), value)

        if save_immediately:
            return self.save_settings()
        return True

    def _get_nested_value(self, settings: Dict[str, Any], keys: list) -> Any:
        current = settings
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return None
        return current

    def _set_nested_value(self, settings: Dict[str, Any], keys: list, value: Any):
        current = settings
        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]
        current[keys[-1]] = value

    def _merge_settings(self, default: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge settings dictionaries"""
        merged = default.copy()

        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_settings(merged[key], value)
            else:
                merged[key] = value

        return merged

    def validate_settings(self) -> Tuple[bool, List[str]]:
        """Validate current settings"""
        errors = []

        log_level = self.get('core.log_level', 'INFO')
        if str(log_level).upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append(f"Invalid log level: {log_level}")

        for key in ('github.request_timeout', 'git.command_timeout'):
            value = self.get(key)
            if not isinstance(value, (int, float)) or value <= 0:
                errors.append(f"{key} must be a positive number")

        settle_delay = self.get('github.settle_delay')
        if not isinstance(settle_delay, (int, float)) or settle_delay < 0:
            errors.append("github.settle_delay must be zero or a positive number")

        if not str(self.get('github.api_base', '')).startswith(('http://', 'https://')):
            errors.append("github.api_base must be an http(s) URL")

        return len(errors) == 0, errors

    def get_settings_summary(self) -> Dict[str, Any]:
        """Get a summary of current settings"""
        return {
            'config_dir': str(self.config_dir),
            'log_level': self.get('core.log_level'),
            'package_cache': self.get('packages.cache_dir'),
            'credentials_file': self.get('credentials.file'),
            'default_location': self.get('local.default_location') or '(not set)',
            'api_base': self.get('github.api_base'),
            'settle_delay': self.get('github.settle_delay'),
            'git_executable': self.get('git.executable') or '(auto)'
        }

# Global settings instance
settings = Settings()
