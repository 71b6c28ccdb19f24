"""Tests for configuration loading."""

import pytest
import yaml

from codex_editor.config import DEFAULT_PLUGINS, ConfigManager, EditorConfig

ENV_VARS = (
    "CODEX_EDITOR_PLUGINS",
    "CODEX_EDITOR_LOG_LEVEL",
    "CODEX_EDITOR_NORMALIZE_ON_LOAD",
    "CODEX_EDITOR_DEFAULT_BLOCK",
)


@pytest.fixture
def manager(tmp_path, monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return ConfigManager(tmp_path)


def write_config(manager, data):
    manager.config_dir.mkdir(parents=True, exist_ok=True)
    manager.config_file.write_text(yaml.safe_dump(data), encoding="utf-8")


def test_defaults_without_file(manager):
    config = manager.load_config()
    assert config.plugins == DEFAULT_PLUGINS
    assert config.log_level == "WARNING"
    assert config.normalize_on_load is True
    assert config.render == {"wrap_document": False, "math_renderer": "plain"}


def test_defaults_do_not_share_lists():
    first, second = EditorConfig(), EditorConfig()
    first.plugins.append("tables")
    assert second.plugins == DEFAULT_PLUGINS


def test_file_values_are_merged(manager):
    write_config(
        manager,
        {"plugins": ["links"], "log_level": "debug", "render": {"wrap_document": True}},
    )
    config = manager.load_config()
    assert config.plugins == ["links"]
    assert config.log_level == "DEBUG"
    assert config.render == {"wrap_document": True, "math_renderer": "plain"}


def test_env_overrides_file(manager, monkeypatch):
    write_config(manager, {"plugins": ["links"], "default_block": "heading-one"})
    monkeypatch.setenv("CODEX_EDITOR_PLUGINS", "images, math_blocks")
    monkeypatch.setenv("CODEX_EDITOR_NORMALIZE_ON_LOAD", "no")

    config = manager.load_config()
    assert config.plugins == ["images", "math_blocks"]
    assert config.normalize_on_load is False
    assert config.default_block == "heading-one"


def test_empty_plugin_env_disables_plugins(manager, monkeypatch):
    monkeypatch.setenv("CODEX_EDITOR_PLUGINS", "")
    assert manager.load_config().plugins == []


def test_unknown_log_level_is_ignored(manager, monkeypatch):
    monkeypatch.setenv("CODEX_EDITOR_LOG_LEVEL", "chatty")
    assert manager.load_config().log_level == "WARNING"


def test_unreadable_file_falls_back_to_defaults(manager):
    manager.config_dir.mkdir(parents=True, exist_ok=True)
    manager.config_file.write_text("plugins: [unclosed", encoding="utf-8")
    assert manager.load_config().plugins == DEFAULT_PLUGINS

    manager.config_file.write_text("- a list", encoding="utf-8")
    assert manager.load_config(reload=True).plugins == DEFAULT_PLUGINS


def test_config_is_cached_until_reload(manager):
    first = manager.load_config()
    write_config(manager, {"default_block": "block-quote"})
    assert manager.load_config() is first
    assert manager.load_config(reload=True).default_block == "block-quote"


def test_save_and_create_default(manager):
    config = EditorConfig(plugins=["checklists"], log_level="INFO")
    manager.save_config(config)
    saved = yaml.safe_load(manager.config_file.read_text(encoding="utf-8"))
    assert saved["plugins"] == ["checklists"]
    assert saved["log_level"] == "INFO"

    path = manager.create_default_config()
    assert path == manager.config_file
    assert manager.load_config(reload=True).plugins == DEFAULT_PLUGINS


def test_config_info(manager):
    info = manager.get_config_info()
    assert info["config_exists"] is False
    assert info["config_file"].endswith("config.yaml")
    assert info["plugins"] == DEFAULT_PLUGINS
