# SPDX-License-Identifier: Apache-2.0
import logging

from globeviz.config import Settings
from globeviz.utils.cli_helpers import VERBOSITY_ENV, configure_logging_from_env


def test_settings_from_env_reads_prefixed_values():
    settings = Settings.from_env(
        {
            "GLOBEVIZ_HTTP_TIMEOUT": "5",
            "GLOBEVIZ_RETRY_BACKOFF": "0.1",
            "GLOBEVIZ_ROTATION_STEP": "0.4",
            "GLOBEVIZ_GITHUB_API": "https://ghe.example/api/v3",
        }
    )
    assert settings.http_timeout == 5
    assert settings.retry_backoff == 0.1
    assert settings.rotation_step == 0.4
    assert settings.github_api == "https://ghe.example/api/v3"
    assert settings.max_retries == Settings().max_retries


def test_settings_ignore_invalid_values(caplog):
    with caplog.at_level(logging.WARNING):
        settings = Settings.from_env({"GLOBEVIZ_MAX_RETRIES": "many"})
    assert settings.max_retries == 3
    assert "GLOBEVIZ_MAX_RETRIES" in caplog.text


def test_with_overrides_skips_none():
    settings = Settings().with_overrides(http_timeout=None, max_retries=0)
    assert settings.http_timeout == 60
    assert settings.max_retries == 0


def test_configure_logging_from_env(monkeypatch):
    monkeypatch.setenv(VERBOSITY_ENV, "debug")
    assert configure_logging_from_env() == logging.DEBUG
    monkeypatch.setenv(VERBOSITY_ENV, "quiet")
    assert configure_logging_from_env() == logging.ERROR
    monkeypatch.setenv(VERBOSITY_ENV, "loud")
    assert configure_logging_from_env() == logging.INFO


def test_settings_ignore_out_of_range_values(caplog):
    with caplog.at_level(logging.WARNING):
        settings = Settings.from_env(
            {
                "GLOBEVIZ_ROTATION_PERIOD": "0",
                "GLOBEVIZ_HTTP_TIMEOUT": "-5",
                "GLOBEVIZ_MAX_RETRIES": "-1",
                "GLOBEVIZ_ROTATION_STEP": "nan",
            }
        )
    assert settings == Settings()
    assert "GLOBEVIZ_ROTATION_PERIOD" in caplog.text
    assert "GLOBEVIZ_HTTP_TIMEOUT" in caplog.text
