"""Unit tests for config.py"""

import pytest

from mdtree.config import load_config


def test_load_config_defaults(tmp_path, monkeypatch):
    """Settings defaults apply when no config.yaml, env var, or CLI override exists."""
    monkeypatch.chdir(tmp_path)
    settings = load_config()
    assert settings.parser_config == "gfm-like"
    assert settings.output_dir == "dist"
    assert settings.image_base_url is None
    assert settings.sort_keys is False
    assert settings.log_level == "WARNING"


def test_load_config_reads_config_yaml(tmp_path, monkeypatch):
    """Values from config.yaml are applied."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("output_dir: out\nsort_keys: true\n")
    settings = load_config()
    assert settings.output_dir == "out"
    assert settings.sort_keys is True


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDTREE_OUTPUT_DIR takes precedence over config.yaml output_dir."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("output_dir: from-yaml\n")
    monkeypatch.setenv("MDTREE_OUTPUT_DIR", "from-env")
    assert load_config().output_dir == "from-env"


def test_load_config_cli_overrides_env(tmp_path, monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MDTREE_OUTPUT_DIR", "from-env")
    settings = load_config(overrides={"output_dir": "from-cli", "parser_config": None})
    assert settings.output_dir == "from-cli"
    assert settings.parser_config == "gfm-like"


def test_load_config_env_bool_coerced(tmp_path, monkeypatch):
    """MDTREE_SORT_KEYS is coerced to bool."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MDTREE_SORT_KEYS", "true")
    assert load_config().sort_keys is True


def test_load_config_log_level_case_insensitive(tmp_path, monkeypatch):
    """Log levels are upper-cased before validation."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MDTREE_LOG_LEVEL", "debug")
    assert load_config().log_level == "DEBUG"


def test_load_config_invalid_log_level(tmp_path, monkeypatch):
    """An unknown log level is rejected."""
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValueError):
        load_config(overrides={"log_level": "chatty"})


def test_load_config_invalid_yaml(tmp_path, monkeypatch):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path, monkeypatch):
    """A config.yaml that is not a mapping is rejected."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()
