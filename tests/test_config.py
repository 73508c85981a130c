"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from intake_ocr.utils.config import (
    AppConfig,
    AzureConfig,
    FormatterConfig,
    ServerConfig,
    load_config,
)


class TestAzureConfig:
    """Tests for AzureConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = AzureConfig()
        assert cfg.api_version == "2023-07-31"
        assert cfg.default_model_id == "prebuilt-layout"
        assert cfg.expected_domain == "cognitiveservices.azure.com"
        assert cfg.max_poll_attempts == 10
        assert cfg.poll_interval_s == 1.0
        assert cfg.request_timeout_s == 30.0

    def test_override(self) -> None:
        cfg = AzureConfig(max_poll_attempts=20, poll_interval_s=0.5)
        assert cfg.max_poll_attempts == 20
        assert cfg.poll_interval_s == 0.5

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValidationError):
            AzureConfig(max_poll_attempts=0)

    def test_rejects_negative_interval(self) -> None:
        with pytest.raises(ValidationError):
            AzureConfig(poll_interval_s=-1.0)


class TestFormatterConfig:
    """Tests for FormatterConfig defaults."""

    def test_defaults(self) -> None:
        cfg = FormatterConfig()
        assert cfg.kind == "summary"
        assert cfg.temperature == 0.7
        assert cfg.max_tokens == 1024


class TestServerConfig:
    """Tests for ServerConfig defaults."""

    def test_defaults(self) -> None:
        cfg = ServerConfig()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 8000
        assert cfg.cors_origins == ["*"]


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.azure, AzureConfig)
        assert isinstance(cfg.formatter, FormatterConfig)
        assert isinstance(cfg.server, ServerConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(
            formatter=FormatterConfig(kind="clinical"),
            log_level="DEBUG",
        )
        assert cfg.formatter.kind == "clinical"
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_shipped_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.azure.default_model_id == "prebuilt-layout"
        assert cfg.azure.max_poll_attempts == 10

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "azure": {"max_poll_attempts": 30, "api_version": "2024-11-30"},
            "formatter": {"kind": "clinical"},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.azure.max_poll_attempts == 30
        assert cfg.azure.api_version == "2024-11-30"
        assert cfg.azure.poll_interval_s == 1.0
        assert cfg.formatter.kind == "clinical"
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file)
        assert isinstance(cfg, AppConfig)

    def test_load_none_defaults_to_standard_path(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, AppConfig)
