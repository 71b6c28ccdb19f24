"""
Configuration management for codex-editor.

Handles loading and managing configuration from the config file and
environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_PLUGINS = ["checklists", "images", "links", "math_blocks"]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EditorConfig:
    """Main configuration for codex-editor."""

    # Plugins in composition order, first = innermost
    plugins: List[str] = field(default_factory=lambda: list(DEFAULT_PLUGINS))

    log_level: str = "WARNING"

    # Normalize documents as soon as they are loaded
    normalize_on_load: bool = True

    # Block type used when a loaded document is empty
    default_block: str = "paragraph"

    # HTML rendering options
    render: Dict[str, Any] = field(default_factory=lambda: {
        'wrap_document': False,
        'math_renderer': 'plain',
    })


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes', 'on')


class ConfigManager:
    """Manages codex-editor configuration from multiple sources."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / '.codex-editor'
        self.config_file = self.config_dir / 'config.yaml'
        self._config: Optional[EditorConfig] = None

    def load_config(self, reload: bool = False) -> EditorConfig:
        """Load configuration from all sources."""
        if self._config and not reload:
            return self._config

        config = EditorConfig()

        if self.config_file.exists():
            file_config = self._load_from_file()
            config = self._merge_configs(config, file_config)

        env_config = self._load_from_env()
        config = self._merge_configs(config, env_config)

        self._config = config
        return config

    def _load_from_file(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file {self.config_file}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {self.config_file}: expected a mapping")
            return {}
        return data

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        plugins = os.getenv('CODEX_EDITOR_PLUGINS')
        if plugins is not None:
            env_config['plugins'] = [p.strip() for p in plugins.split(',') if p.strip()]

        log_level = os.getenv('CODEX_EDITOR_LOG_LEVEL')
        if log_level:
            env_config['log_level'] = log_level

        normalize_on_load = os.getenv('CODEX_EDITOR_NORMALIZE_ON_LOAD')
        if normalize_on_load:
            env_config['normalize_on_load'] = _parse_bool(normalize_on_load)

        default_block = os.getenv('CODEX_EDITOR_DEFAULT_BLOCK')
        if default_block:
            env_config['default_block'] = default_block

        return env_config

    def _merge_configs(self, base: EditorConfig, override: Dict[str, Any]) -> EditorConfig:
        """Merge a configuration dictionary onto ``base``."""
        if 'plugins' in override:
            plugins = override['plugins']
            if isinstance(plugins, str):
                plugins = [p.strip() for p in plugins.split(',') if p.strip()]
            base.plugins = list(plugins or [])

        if 'log_level' in override:
            level = str(override['log_level']).upper()
            if level in LOG_LEVELS:
                base.log_level = level
            else:
                logger.warning(f"Ignoring unknown log level {override['log_level']!r}")

        if 'normalize_on_load' in override:
            value = override['normalize_on_load']
            base.normalize_on_load = _parse_bool(value) if isinstance(value, str) else bool(value)

        if 'default_block' in override:
            base.default_block = str(override['default_block'])

        if 'render' in override and isinstance(override['render'], dict):
            base.render.update(override['render'])

        return base

    def save_config(self, config: EditorConfig) -> None:
        """Save configuration to file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        config_dict = {
            'plugins': list(config.plugins),
            'log_level': config.log_level,
            'normalize_on_load': config.normalize_on_load,
            'default_block': config.default_block,
            'render': dict(config.render),
        }

        try:
            with open(self.config_file, 'w') as f:
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config file {self.config_file}: {e}")

    def create_default_config(self) -> Path:
        """Create a default configuration file."""
        self.save_config(EditorConfig())
        logger.info(f"Created default configuration at {self.config_file}")
        return self.config_file

    def get_config_info(self) -> Dict[str, Any]:
        """Get information about current configuration."""
        config = self.load_config()

        return {
            'config_file': str(self.config_file),
            'config_exists': self.config_file.exists(),
            'plugins': list(config.plugins),
            'log_level': config.log_level,
            'normalize_on_load': config.normalize_on_load,
            'default_block': config.default_block,
        }


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global config manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config() -> EditorConfig:
    """Load the current configuration."""
    return get_config_manager().load_config()
