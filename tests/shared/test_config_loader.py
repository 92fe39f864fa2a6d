"""Tests for pydantic-settings-backed Mirage configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.mirage_core.config import get_settings, load_config, load_settings
from packages.mirage_core.config.loader import _reset_settings
from packages.mirage_core.http import ClientConfiguration, LogOptions


def test_load_settings_uses_mirage_precedence_cascade(tmp_path: Path) -> None:
    """CLI params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "mirage.yml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "  service: yaml-service",
                "http:",
                "  timeout_seconds: 12",
                "  headers:",
                "    User-Agent: mirage-yaml",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(
        cli_params={"logging": {"level": "DEBUG"}},
        environ={
            "MIRAGE_LOGGING__LEVEL": "ERROR",
            "MIRAGE_HTTP__TIMEOUT_SECONDS": "5",
            "MIRAGE_HTTP__FOLLOW_REDIRECTS": "true",
            "MIRAGE_HTTP__LOG_OPTIONS": '["request", "response"]',
            "OTHER_HTTP__TIMEOUT_SECONDS": "99",
        },
        config_path=config_file,
    )

    assert settings.logging.level == "DEBUG"
    assert settings.logging.service == "yaml-service"
    assert settings.http.timeout_seconds == 5
    assert settings.http.follow_redirects is True
    assert settings.http.log_options == ["request", "response"]
    assert settings.http.headers == {"User-Agent": "mirage-yaml"}


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to built-in defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "mirage.yml", environ={})

    assert settings.logging.level == "INFO"
    assert settings.logging.service == "mirage"
    assert settings.http.timeout_seconds == 30.0
    assert settings.http.follow_redirects is False
    assert settings.http.log_options == []


def test_load_config_coerces_env_scalars(tmp_path: Path) -> None:
    """Environment strings should become bools, numbers, JSON or None."""
    merged = load_config(
        config_path=tmp_path / "absent.yml",
        environ={
            "MIRAGE_A__FLAG": "false",
            "MIRAGE_A__COUNT": "3",
            "MIRAGE_A__RATIO": "0.25",
            "MIRAGE_A__NOTHING": "none",
            "MIRAGE_A__TEXT": "plain",
        },
    )

    assert merged["a"] == {
        "flag": False,
        "count": 3,
        "ratio": 0.25,
        "nothing": None,
        "text": "plain",
    }


def test_load_config_rejects_non_mapping_yaml(tmp_path: Path) -> None:
    """A YAML file whose top level is not a mapping should be rejected."""
    config_file = tmp_path / "mirage.yml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(config_path=config_file, environ={})


def test_invalid_timeout_is_rejected(tmp_path: Path) -> None:
    """Non-positive timeouts should fail validation."""
    with pytest.raises(ValidationError):
        load_settings(
            config_path=tmp_path / "mirage.yml",
            environ={"MIRAGE_HTTP__TIMEOUT_SECONDS": "0"},
        )


def test_client_configuration_from_settings(tmp_path: Path) -> None:
    """HTTP settings should map onto a client configuration."""
    settings = load_settings(
        config_path=tmp_path / "mirage.yml",
        environ={
            "MIRAGE_HTTP__LOG_OPTIONS": '["request_body", "response"]',
            "MIRAGE_HTTP__HEADERS": '{"X-App": "demo"}',
            "MIRAGE_HTTP__TIMEOUT_SECONDS": "7.5",
        },
    )

    configuration = ClientConfiguration.from_settings(settings.http)

    assert configuration.log_options == LogOptions.REQUEST_BODY | LogOptions.RESPONSE
    assert configuration.headers == {"X-App": "demo"}
    assert configuration.timeout_seconds == 7.5
    assert configuration.oauth_token is None


def test_config_file_env_names_alternative_yaml(tmp_path: Path) -> None:
    """MIRAGE_CONFIG_FILE should point the cascade at another YAML file."""
    config_file = tmp_path / "custom.yml"
    config_file.write_text("http:\n  follow_redirects: true\n", encoding="utf-8")

    settings = load_settings(environ={"MIRAGE_CONFIG_FILE": str(config_file)})

    assert settings.http.follow_redirects is True
    assert "config_file" not in load_config(environ={"MIRAGE_CONFIG_FILE": str(config_file)})


def test_yaml_only_words_stay_strings(tmp_path: Path) -> None:
    """Words YAML 1.1 treats as booleans or dates should not be coerced."""
    merged = load_config(
        config_path=tmp_path / "absent.yml",
        environ={"MIRAGE_LOGGING__ENVIRONMENT": "on", "MIRAGE_LOGGING__SERVICE": "2025-01-01"},
    )

    assert merged["logging"]["environment"] == "on"
    assert merged["logging"]["service"] == "2025-01-01"


def test_logging_level_is_case_insensitive(tmp_path: Path) -> None:
    """Level names should validate regardless of case."""
    settings = load_settings(
        config_path=tmp_path / "mirage.yml",
        environ={"MIRAGE_LOGGING__LEVEL": "notice"},
    )

    assert settings.logging.level == "NOTICE"


def test_header_env_values_stay_text(tmp_path: Path) -> None:
    """Header values look numeric sometimes but are always sent as text."""
    settings = load_settings(
        config_path=tmp_path / "mirage.yml",
        environ={
            "MIRAGE_HTTP__HEADERS__X_API_VERSION": "2",
            "MIRAGE_HTTP__HEADERS__X_DEBUG": "true",
        },
    )

    assert settings.http.headers == {"x_api_version": "2", "x_debug": "true"}


def test_yaml_header_scalars_become_text(tmp_path: Path) -> None:
    config_file = tmp_path / "mirage.yml"
    config_file.write_text(
        "http:\n  headers:\n    X-Api-Version: 2\n    X-Ratio: 0.5\n    X-Flag: true\n",
        encoding="utf-8",
    )

    settings = load_settings(config_path=config_file, environ={})

    assert settings.http.headers == {"X-Api-Version": "2", "X-Ratio": "0.5", "X-Flag": "true"}


def test_get_settings_reads_process_environment_once(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("MIRAGE_CONFIG_FILE", str(tmp_path / "absent.yml"))
    monkeypatch.setenv("MIRAGE_HTTP__TIMEOUT_SECONDS", "9")
    _reset_settings()
    try:
        settings = get_settings()
        monkeypatch.setenv("MIRAGE_HTTP__TIMEOUT_SECONDS", "3")

        assert settings.http.timeout_seconds == 9
        assert get_settings() is settings
    finally:
        _reset_settings()
