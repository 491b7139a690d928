"""Configuration management for aitest_devops.

Loads settings from a YAML configuration file with environment variable
overrides. Supports .env files. Every default reproduces the literal the
tool was originally hard-wired with (API on localhost:3001, sibling
``backend``/``frontend`` directories, npm, pkill patterns).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/aitest-devops.yaml")


class ApiConfig(BaseModel):
    base_url: str = Field(default="http://localhost:3001", description="Backend API base URL")
    timeout: float | None = Field(default=None, gt=0, description="Request timeout, None waits forever")


class BuildConfig(BaseModel):
    package_manager: str = Field(default="npm")
    backend_dir: str = Field(default="../backend")
    frontend_dir: str = Field(default="../frontend")
    install_args: list[str] = Field(default_factory=lambda: ["install"])
    build_args: list[str] = Field(default_factory=lambda: ["run", "build"])
    start_args: list[str] = Field(default_factory=lambda: ["start"])
    dev_args: list[str] = Field(default_factory=lambda: ["run", "dev"])


class StopConfig(BaseModel):
    kill_command: str = Field(default="pkill")
    kill_args: list[str] = Field(default_factory=lambda: ["-f"])
    patterns: list[str] = Field(default_factory=lambda: ["node.*3001", "next-server"])


class SmokeTestConfig(BaseModel):
    num1: float = Field(default=15.5)
    num2: float = Field(default=24.3)
    expected_sum: float = Field(default=39.8)
    tolerance: float = Field(default=0.0, ge=0, description="0.0 means exact equality")
    invalid_payload: dict[str, Any] = Field(
        default_factory=lambda: {"num1": "invalid", "num2": 5},
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="WARNING")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for aitest_devops.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "AITEST_DEVOPS_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Exit non-zero when a handler reports failure
    exit_on_failure: bool = Field(default=False)

    # Configuration sections
    api: ApiConfig = Field(default_factory=ApiConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    stop: StopConfig = Field(default_factory=StopConfig)
    smoke: SmokeTestConfig = Field(default_factory=SmokeTestConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML data arrives as init kwargs and must lose to the environment
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    # Load .env file manually for non-prefixed vars
    _load_dotenv()

    yaml_data: dict[str, Any] = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        # Runs before setup_logging
        logger.info("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict[str, Any]) -> None:
    """Apply environment variable overrides for non-prefixed vars.

    ``PORT`` is the variable the backend server itself listens on; when
    set, the API base URL follows it unless the YAML file pins one.
    """
    port = os.environ.get("PORT", "").strip()
    if not port:
        return

    api = yaml_data.get("api") or {}
    if not api.get("base_url"):
        api["base_url"] = f"http://localhost:{port}"
        logger.debug("Using API base URL from PORT=%s", port)
    yaml_data["api"] = api
