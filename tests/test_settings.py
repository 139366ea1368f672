import logging
import os
from unittest.mock import patch

import pytest

from sms_categorizer.core import settings
from sms_categorizer.logger import ColourizedFormatter, get_logging_config


def test_read_config_file(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "# comment\n"
        "LOG_LEVEL: debug\n"
        "DATA_DIR: '/var/lib/sms'\n"
        "KEYWORD_CONFIDENCE: 0.75  # lower\n"
        "LOG_FILE: \"/tmp/sms.log\"  # rotated daily\n"
        "BANK_NAME: 'A # B Bank'\n"
        "EMPTY:\n"
        "nested:\n"
        "  child: 1\n",
        encoding="utf-8",
    )

    values = settings.read_config_file(str(path))

    assert values["LOG_LEVEL"] == "debug"
    assert values["DATA_DIR"] == "/var/lib/sms"
    assert values["KEYWORD_CONFIDENCE"] == "0.75"
    assert values["LOG_FILE"] == "/tmp/sms.log"
    assert values["BANK_NAME"] == "A # B Bank"
    assert "EMPTY" not in values
    assert settings.read_config_file(str(tmp_path / "missing.yaml")) == {}


def test_get_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_ACCOUNT_ID", "3")
    assert settings.get_env_int("DEFAULT_ACCOUNT_ID", 1, min_value=1) == 3
    monkeypatch.setenv("DEFAULT_ACCOUNT_ID", "zero")
    assert settings.get_env_int("DEFAULT_ACCOUNT_ID", 1) == 1
    monkeypatch.setenv("DEFAULT_ACCOUNT_ID", "0")
    assert settings.get_env_int("DEFAULT_ACCOUNT_ID", 1, min_value=1) == 1


def test_get_env_float_bounds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KEYWORD_CONFIDENCE", "0.7")
    assert settings.get_env_float("KEYWORD_CONFIDENCE", 0.8, min_value=0.0, max_value=1.0) == 0.7
    monkeypatch.setenv("KEYWORD_CONFIDENCE", "1.5")
    assert settings.get_env_float("KEYWORD_CONFIDENCE", 0.8, min_value=0.0, max_value=1.0) == 0.8
    monkeypatch.delenv("KEYWORD_CONFIDENCE")
    assert settings.get_env_float("KEYWORD_CONFIDENCE", 0.8) == 0.8


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("Off", False), ("1", True), ("maybe", True), ("", True)],
)
def test_get_env_bool(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("INFER_DIRECTION", raw)
    assert settings.get_env_bool("INFER_DIRECTION", True) is expected


def test_get_store_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STORE_BACKEND", raising=False)
    assert settings.get_store_backend() == "json"
    monkeypatch.setenv("STORE_BACKEND", "Memory")
    assert settings.get_store_backend() == "memory"
    monkeypatch.setenv("STORE_BACKEND", "redis")
    assert settings.get_store_backend() == "json"


def test_load_environment_fills_unset_keys(tmp_path) -> None:
    (tmp_path / "config.yaml").write_text("STORE_BACKEND: memory\nLOG_LEVEL: warning\n", encoding="utf-8")

    with patch.dict(os.environ, {"CONFIG_DIR": str(tmp_path), "LOG_LEVEL": "ERROR"}):
        os.environ.pop("STORE_BACKEND", None)

        settings.load_environment()

        assert settings.get_config_path() == str(tmp_path / "config.yaml")
        assert settings.get_store_backend() == "memory"
        # Real environment wins over the file
        assert os.environ["LOG_LEVEL"] == "ERROR"


def test_logging_config_file_handler(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = get_logging_config()

    assert set(config["handlers"]) == {"console", "file"}
    assert config["handlers"]["file"]["filename"].endswith("sms_categorizer.log")
    assert config["loggers"][""]["level"] == "DEBUG"
    assert (tmp_path / "logs").is_dir()


def test_colourized_formatter_restores_levelname() -> None:
    formatter = ColourizedFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("test", logging.WARNING, __file__, 1, "careful", None, None)

    output = formatter.format(record)

    assert "\x1b[33m" in output
    assert record.levelname == "WARNING"
