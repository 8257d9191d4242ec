"""
Configuration loading.

Reads the generator settings from YAML ($ADR_CONFIG_FILE or
config/config.yaml), applies ADR_* environment overrides, and reads the
GitHub credentials from the environment. `.env` files are honoured through
python-dotenv by the CLI before anything here runs.
"""
from __future__ import annotations

import os
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from adr_registry.schemas import GeneratorConfig, GitHubAppConfig

DEFAULT_CONFIG_FILE = "config/config.yaml"

_ENV_OVERRIDES = {
    "ADR_ORGANIZATION": "organization",
    "ADR_OUTPUT_PATH": "output_path",
    "ADR_BASE_URL": "base_url",
}


class ConfigurationError(ValueError):
    """Raised when settings or credentials are missing or invalid."""


def _read_yaml(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_generator_config(path: str | None = None) -> GeneratorConfig:
    """
    Build the GeneratorConfig for this run.

    An explicit path must exist; the default location is optional and a
    missing file simply means "all defaults".
    """
    explicit = path or os.environ.get("ADR_CONFIG_FILE")
    config_path = Path(explicit or DEFAULT_CONFIG_FILE)

    if config_path.exists():
        raw = _read_yaml(config_path)
        logger.debug(f"[Config] Loaded {config_path}")
    elif explicit:
        raise ConfigurationError(f"Config file not found: {config_path}")
    else:
        logger.debug(f"[Config] {config_path} not found, using defaults")
        raw = {}

    for env_name, field in _ENV_OVERRIDES.items():
        if value := os.environ.get(env_name):
            raw[field] = value

    if local_path := os.environ.get("ADR_LOCAL_PATH"):
        raw["local_mode"] = True
        raw["local_path"] = local_path

    if log_level := os.environ.get("ADR_LOG_LEVEL"):
        logging_cfg = raw.get("logging") if isinstance(raw.get("logging"), dict) else {}
        raw["logging"] = {**logging_cfg, "level": log_level}

    try:
        return GeneratorConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {exc}") from exc


def load_github_app_config() -> GitHubAppConfig:
    """Read GitHub App credentials from GITHUB_APP_* environment variables."""
    app_id = os.environ.get("GITHUB_APP_ID")
    installation_id = os.environ.get("GITHUB_APP_INSTALLATION_ID")
    key_path = os.environ.get("GITHUB_APP_PRIVATE_KEY_PATH")

    if not app_id:
        raise ConfigurationError("GITHUB_APP_ID environment variable is required")
    if not installation_id:
        raise ConfigurationError("GITHUB_APP_INSTALLATION_ID environment variable is required")
    if not key_path:
        raise ConfigurationError("GITHUB_APP_PRIVATE_KEY_PATH environment variable is required")

    if not app_id.strip().isdigit():
        raise ConfigurationError("GITHUB_APP_ID must be a valid integer")
    if not installation_id.strip().isdigit():
        raise ConfigurationError("GITHUB_APP_INSTALLATION_ID must be a valid integer")

    return GitHubAppConfig(
        app_id=int(app_id),
        installation_id=int(installation_id),
        private_key_path=key_path,
    )
