#!/usr/bin/env python3
"""
Tests for config module.
"""

import os
import tempfile

from zk_env.config import load_config, get_config_value, resolve_path, get_notes_dir
from zk_env.constants import DEFAULT_INDEX_FILENAME, DEFAULT_STATS_LIMIT


def write_config(content: str) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as tmp:
        tmp.write(content)
        return tmp.name


def test_load_config_with_existing_file():
    """Test loading config from an existing file."""
    tmp_path = write_config("""
notes_dir: ~/notes
index:
  index_file: notes.json
filter:
  default_mode: ALL
logging:
  level: debug
""")
    try:
        config = load_config(tmp_path)

        assert config["notes_dir"] == os.path.join(os.path.expanduser("~"), "notes")
        assert config["index"]["index_file"] == "notes.json"
        assert config["filter"]["default_mode"] == "all"
        assert config["logging"]["level"] == "DEBUG"
        # Sections not in the file get defaults
        assert config["stats"]["limit"] == DEFAULT_STATS_LIMIT
    finally:
        os.unlink(tmp_path)


def test_invalid_values_fall_back_to_defaults():
    """Test that invalid values are replaced by their defaults."""
    tmp_path = write_config("""
filter:
  default_mode: sometimes
stats:
  limit: -3
logging:
  level: LOUD
""")
    try:
        config = load_config(tmp_path)
        assert config["filter"]["default_mode"] == "any"
        assert config["stats"]["limit"] == DEFAULT_STATS_LIMIT
        assert config["logging"]["level"] == "INFO"
    finally:
        os.unlink(tmp_path)


def test_malformed_config_uses_defaults():
    """Test that a config with wrongly typed sections falls back to defaults."""
    tmp_path = write_config("index: just a string\n")
    try:
        config = load_config(tmp_path)
        assert config["index"]["index_file"] == DEFAULT_INDEX_FILENAME
    finally:
        os.unlink(tmp_path)


def test_missing_config_uses_defaults():
    """Test loading a config file that does not exist."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(os.path.join(tmpdir, "config.yaml"))
    assert config["index"]["index_file"] == DEFAULT_INDEX_FILENAME
    assert config["filter"]["default_mode"] == "any"


def test_get_config_value():
    """Test retrieval of config values with defaults."""
    config = {
        "section": {
            "key": "value"
        },
        "top_level": "top value"
    }

    assert get_config_value(config, "section.key") == "value"
    assert get_config_value(config, "top_level") == "top value"
    assert get_config_value(config, "missing", "default") == "default"
    assert get_config_value(config, "section.missing", "default") == "default"
    assert get_config_value(config, "missing.key", "default") == "default"


def test_resolve_path():
    """Test path resolution functionality."""
    home = os.path.expanduser("~")
    assert resolve_path("~/test") == os.path.join(home, "test")
    assert resolve_path("/absolute/path") == "/absolute/path"
    assert resolve_path("relative/path") == "relative/path"
    assert resolve_path("") == ""
    assert resolve_path(None) is None


def test_get_notes_dir():
    """Test reading the notes directory from a config dict."""
    assert get_notes_dir({"notes_dir": "/srv/notes"}) == "/srv/notes"
    assert get_notes_dir({}) == os.path.join(os.path.expanduser("~"), "notes")
