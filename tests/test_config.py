"""
Tests for sync configuration defaults, validation and user overrides.
"""

import json

import pytest

from propsync.config import SYNC_CONFIG, get_sync_config, validate_sync_config
from propsync.exceptions import ConfigError
from propsync.logging_config import logger, reset_logging, setup_logging
from propsync.paths import get_paths, reset_paths
from propsync.user_config import UserConfig, get_user_config, reset_user_config

pytestmark = pytest.mark.fast


@pytest.fixture(autouse=True)
def fresh_user_config():
    reset_user_config()
    reset_paths()
    yield
    reset_user_config()
    reset_paths()


def write_local_config(project_root, data):
    config_dir = project_root / ".propsync"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.json").write_text(json.dumps(data), encoding="utf-8")


class TestValidation:
    """Checks on a merged sync configuration."""

    def test_defaults_are_valid(self):
        validate_sync_config(dict(SYNC_CONFIG))

    @pytest.mark.parametrize("key,value", [
        ("indent_unit", ""),
        ("indent_unit", "ab"),
        ("shared_module", ""),
        ("render_open_marker", None),
        ("debounce_seconds", -1),
        ("load_timeout_seconds", "soon"),
    ])
    def test_invalid_values(self, key, value):
        with pytest.raises(ConfigError):
            validate_sync_config({**SYNC_CONFIG, key: value})


class TestUserOverrides:
    """Hierarchical config merged into the sync section."""

    def test_local_override(self, temp_dir):
        write_local_config(temp_dir, {"sync": {"indent_unit": "    ", "debounce_seconds": 0.2}})

        config = get_sync_config(temp_dir)

        assert config["indent_unit"] == "    "
        assert config["debounce_seconds"] == 0.2
        assert config["shared_module"] == SYNC_CONFIG["shared_module"]

    def test_explicit_overrides_win(self, temp_dir):
        write_local_config(temp_dir, {"sync": {"indent_unit": "    "}})

        config = get_sync_config(temp_dir, overrides={"indent_unit": "\t"})

        assert config["indent_unit"] == "\t"

    def test_invalid_user_value_rejected(self, temp_dir):
        write_local_config(temp_dir, {"sync": {"indent_unit": "x"}})

        with pytest.raises(ConfigError):
            get_sync_config(temp_dir)

    def test_malformed_file_falls_back_to_defaults(self, temp_dir):
        (temp_dir / ".propsync").mkdir()
        (temp_dir / ".propsync" / "config.json").write_text("{not json", encoding="utf-8")

        config = UserConfig(temp_dir)

        assert config.get("registry.directories") == []

    def test_set_local_persists(self, temp_dir):
        config = UserConfig(temp_dir)

        assert config.set_local("registry.directories", ["src/components"]) is True
        assert UserConfig(temp_dir).get("registry.directories") == ["src/components"]

    def test_dotted_get_default(self, temp_dir):
        assert UserConfig(temp_dir).get("sync.missing.key", "fallback") == "fallback"

    def test_singleton(self):
        assert get_user_config() is get_user_config()

    def test_paths_layout(self, temp_dir):
        paths = get_paths(temp_dir)

        assert paths.local_config == temp_dir / ".propsync" / "config.json"
        assert paths.logs_dir == temp_dir / ".propsync" / "logs"
        assert get_paths() is get_paths()


class TestSyncTraceLogging:
    """Opt-in journal of sync pass records."""

    def test_journal_keeps_only_sync_pass_records(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        reset_logging()
        setup_logging(level="DEBUG", suppress_console=True, enable_sync_trace=True)

        with logger.contextualize(sync_pass=7):
            logger.trace("inside pass")
        logger.info("outside pass")
        logger.remove()

        journal = temp_dir / ".propsync" / "logs" / "sync-trace.jsonl"
        records = [json.loads(line)["record"] for line in journal.read_text().splitlines()]
        assert [record["message"] for record in records] == ["inside pass"]
        assert records[0]["extra"]["sync_pass"] == 7
