import json

import pytest

from pixelcompare import config
from pixelcompare.errors import InvalidSettingsError
from pixelcompare.presets import Region, SizingPolicy


def test_missing_settings_file_returns_defaults(tmp_path):
    settings = config.load_settings_file(tmp_path / "missing.json")
    assert settings == config.DEFAULT_SETTINGS


def test_settings_file_merges_over_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"threshold": 40, "averageOutSize": True}), encoding="utf-8")

    loaded = config.load_settings_file(path)

    assert loaded["threshold"] == 40
    assert loaded["averageOutSize"] is True
    assert loaded["diffColor"] == config.DEFAULT_SETTINGS["diffColor"]


def test_malformed_settings_file_logs_and_returns_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level("WARNING"):
        loaded = config.load_settings_file(path)

    assert loaded == config.DEFAULT_SETTINGS
    assert "Failed to load settings" in caplog.text


def test_defaults_are_not_mutated(tmp_path):
    loaded = config.load_settings_file(None)
    loaded["region"]["x1"] = 50
    assert config.DEFAULT_SETTINGS["region"]["x1"] == 0


def test_settings_from_mapping():
    settings = config.settings_from_mapping(
        {
            "threshold": 5,
            "averageOutSize": True,
            "diffColor": "#ff0000",
            "region": {"x1": 90, "y1": 10, "x2": 10, "y2": 90},
        }
    )
    assert settings.threshold == 5
    assert settings.sizing is SizingPolicy.FIT_SCALE
    assert settings.diff_color == (255, 0, 0)
    assert settings.match_color == (31, 31, 61)
    assert settings.region == Region(90.0, 10.0, 10.0, 90.0)


def test_settings_from_mapping_rejects_bad_values():
    with pytest.raises(InvalidSettingsError):
        config.settings_from_mapping({"matchColor": "#12"})
    with pytest.raises(InvalidSettingsError):
        config.settings_from_mapping({"region": {"x1": "left"}})
    with pytest.raises(InvalidSettingsError):
        config.settings_from_mapping({"region": [0, 0, 100, 100]})


def test_settings_from_mapping_accepts_integral_float_threshold():
    assert config.settings_from_mapping({"threshold": 15.0}).threshold == 15
    with pytest.raises(InvalidSettingsError):
        config.settings_from_mapping({"threshold": 15.5})


@pytest.mark.parametrize(
    "flag, sizing",
    [
        (True, SizingPolicy.FIT_SCALE),
        (False, SizingPolicy.NO_SCALE),
        ("true", SizingPolicy.FIT_SCALE),
        ("false", SizingPolicy.NO_SCALE),
        (" No ", SizingPolicy.NO_SCALE),
    ],
)
def test_average_out_size_flag(flag, sizing):
    assert config.settings_from_mapping({"averageOutSize": flag}).sizing is sizing


@pytest.mark.parametrize("flag", ["maybe", 1, None, [True]])
def test_average_out_size_rejects_non_boolean(flag):
    with pytest.raises(InvalidSettingsError):
        config.settings_from_mapping({"averageOutSize": flag})


def test_load_settings_uses_environment(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"threshold": 22}), encoding="utf-8")
    monkeypatch.setenv(config.ENV_SETTINGS_FILE, str(path))

    assert config.load_settings().threshold == 22


def test_batch_size_from_env(monkeypatch):
    monkeypatch.delenv(config.ENV_BATCH_SIZE, raising=False)
    assert config.batch_size_from_env() == 2000
    monkeypatch.setenv(config.ENV_BATCH_SIZE, "512")
    assert config.batch_size_from_env() == 512
    monkeypatch.setenv(config.ENV_BATCH_SIZE, "0")
    with pytest.raises(InvalidSettingsError):
        config.batch_size_from_env()
    monkeypatch.setenv(config.ENV_BATCH_SIZE, "lots")
    with pytest.raises(InvalidSettingsError):
        config.batch_size_from_env()


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv(config.ENV_LOG_LEVEL, "debug")
    assert config.log_level_from_env() == "DEBUG"
