"""Tests for configuration loading and validation."""

from __future__ import annotations

import json

import pytest

from prodline_collector.agent.config import CollectorConfig, ConfigError, LineConfig

SETTINGS = {
    "database": "data/prod.duckdb",
    "base_folder": "Data Server",
    "poll_interval": 5,
    "lines": [
        {"name": "Line 1", "ip": "192.168.10.21", "table_name": "line_audio_1"},
        {"name": "Line 2", "ip": "192.168.10.22", "table_name": "line_audio_2"},
    ],
}


@pytest.fixture
def settings_file(tmp_path):
    p = tmp_path / "appsettings.json"
    p.write_text(json.dumps(SETTINGS), encoding="utf-8")
    return p


class TestLoading:
    def test_from_file(self, settings_file):
        config = CollectorConfig.from_file(str(settings_file))
        assert config.database == "data/prod.duckdb"
        assert config.poll_interval == 5.0
        assert config.archive_folder == "Processed"
        assert config.lines == (
            LineConfig("Line 1", "192.168.10.21", "line_audio_1"),
            LineConfig("Line 2", "192.168.10.22", "line_audio_2"),
        )
        assert config.validate() == []

    def test_defaults(self):
        config = CollectorConfig.from_dict({"lines": []})
        assert config.base_folder == "Data Server"
        assert config.poll_interval == 5.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            CollectorConfig.from_file(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        p = tmp_path / "bad.json"
        p.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            CollectorConfig.from_file(str(p))

    def test_not_an_object(self, tmp_path):
        p = tmp_path / "list.json"
        p.write_text("[]", encoding="utf-8")
        with pytest.raises(ConfigError):
            CollectorConfig.from_file(str(p))

    def test_malformed_values(self):
        with pytest.raises(ConfigError):
            CollectorConfig.from_dict({"poll_interval": "soon"})

    def test_env_overrides(self, settings_file, monkeypatch):
        monkeypatch.setenv("PRODLINE_CONFIG", str(settings_file))
        monkeypatch.setenv("PRODLINE_DB", "/srv/prodline/production.duckdb")
        monkeypatch.setenv("PRODLINE_POLL_INTERVAL", "2.5")
        config = CollectorConfig.load()
        assert config.database == "/srv/prodline/production.duckdb"
        assert config.poll_interval == 2.5
        assert len(config.lines) == 2

    def test_load_requires_a_path(self, monkeypatch):
        monkeypatch.delenv("PRODLINE_CONFIG", raising=False)
        with pytest.raises(ConfigError):
            CollectorConfig.load()

    def test_config_is_immutable(self, settings_file):
        config = CollectorConfig.from_file(str(settings_file))
        with pytest.raises(AttributeError):
            config.poll_interval = 1


class TestSourceRoot:
    def test_unc_default(self):
        config = CollectorConfig()
        line = LineConfig("Line 1", "192.168.10.21", "line_audio_1")
        assert config.source_root(line) == "\\\\192.168.10.21\\Data Server"

    def test_custom_template(self):
        config = CollectorConfig(source_template="/mnt/{ip}/{base_folder}", base_folder="out")
        assert config.source_root(LineConfig("L", "host1", "t")) == "/mnt/host1/out"


class TestValidate:
    def test_no_lines(self):
        assert "at least one line is required" in CollectorConfig().validate()

    def test_bad_table_names(self):
        config = CollectorConfig(lines=(
            LineConfig("L1", "a", "line-1"),
            LineConfig("L2", "b", "loss_time"),
            LineConfig("L3", "c", "ok_table"),
            LineConfig("L4", "d", "ok_table"),
            LineConfig("", "e", "other"),
        ))
        errors = config.validate()
        assert any("L1: invalid table_name" in e for e in errors)
        assert any("L2: table_name 'loss_time' is reserved" in e for e in errors)
        assert any("L4: table_name 'ok_table' used by another line" in e for e in errors)
        assert any("lines[4]: name is required" in e for e in errors)
        assert not any(e.startswith("L3") for e in errors)

    def test_poll_interval_positive(self):
        config = CollectorConfig(poll_interval=0, lines=(LineConfig("L", "a", "t"),))
        assert config.validate() == ["poll_interval must be positive, got 0"]
