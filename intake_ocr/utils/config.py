"""Configuration management for the intake-form OCR assistant.

Loads and validates YAML configuration with sensible defaults
for the document analysis service, text formatting, and the API server.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AzureConfig(BaseModel):
    """Configuration for the Azure Document Intelligence service."""

    api_version: str = "2023-07-31"
    default_model_id: str = "prebuilt-layout"
    expected_domain: str = "cognitiveservices.azure.com"
    max_poll_attempts: int = Field(default=10, ge=1)
    poll_interval_s: float = Field(default=1.0, ge=0.0)
    request_timeout_s: float = Field(default=30.0, gt=0.0)


class FormatterConfig(BaseModel):
    """Configuration for post-processing of extracted text."""

    kind: str = "summary"
    temperature: float = 0.7
    max_tokens: int = 1024


class ServerConfig(BaseModel):
    """Configuration for the HTTP API server."""

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class AppConfig(BaseModel):
    """Top-level application configuration."""

    azure: AzureConfig = Field(default_factory=AzureConfig)
    formatter: FormatterConfig = Field(default_factory=FormatterConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
