"""
================================================================================
Settings Resolver
================================================================================

Centralized configuration for the framework.

Configuration loading order (lowest to highest priority):
    1. Built-in defaults
    2. config/config.yaml
    3. config/{TEST_ENV}.yaml (per-environment overrides, deep-merged)
    4. Environment variables (see ENV_MAPPING)

The result is a `Settings` snapshot. `get_settings()` caches one snapshot per
process; `load_settings()` always builds a fresh one.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from loguru import logger


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"

SUPPORTED_DATA_FORMATS = ("json", "yaml")


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


_DEFAULTS: Dict[str, Any] = {
    "test_env": "qa",
    "data_format": "json",
    "report_to_squash": False,
    "is_ci": False,
    "workers": 4,
    "build_url": "#",
    "browser": {
        "name": "chromium",
        "headless": True,
        "viewport_width": 1280,
        "viewport_height": 720,
        "action_timeout": 15000,
        "navigation_timeout": 30000,
        "expect_timeout": 10000,
    },
    "logging": {
        "level": "INFO",
        "file": "reports/test-execution.log",
        "rotation": "10 MB",
        "retention": "7 days",
    },
    "squash_tm": {
        "url": "https://demo.squashtest.org",
        "api_token": "",
        "campaign_id": "4",
    },
    "email": {
        "host": "smtp.gmail.com",
        "port": 587,
        "secure": False,
        "user": "",
        "password": "",
        "recipients": "qa-team@example.com",
        "from": "test-reports@example.com",
    },
    "environments": {
        "dev": {
            "base_url": "https://www.saucedemo.com",
            "api_url": "https://api.dev.example.com",
            "timeout": 30000,
        },
        "qa": {
            "base_url": "https://www.saucedemo.com",
            "api_url": "https://api.qa.example.com",
            "timeout": 30000,
        },
        "uat": {
            "base_url": "https://www.saucedemo.com",
            "api_url": "https://api.uat.example.com",
            "timeout": 60000,
        },
    },
}

# Environment variable -> dot-notation config key
ENV_MAPPING: Dict[str, str] = {
    "TEST_ENV": "test_env",
    "DATA_FORMAT": "data_format",
    "REPORT_TO_SQUASH": "report_to_squash",
    "SQUASH_TM_URL": "squash_tm.url",
    "SQUASH_TM_API_TOKEN": "squash_tm.api_token",
    "SQUASH_TM_CAMPAIGN_ID": "squash_tm.campaign_id",
    "SMTP_HOST": "email.host",
    "SMTP_PORT": "email.port",
    "SMTP_SECURE": "email.secure",
    "SMTP_USER": "email.user",
    "SMTP_PASSWORD": "email.password",
    "EMAIL_RECIPIENTS": "email.recipients",
    "EMAIL_FROM": "email.from",
    "CI": "is_ci",
    "WORKERS": "workers",
    "LOG_LEVEL": "logging.level",
    "LOG_FILE": "logging.file",
    "BROWSER": "browser.name",
    "HEADLESS": "browser.headless",
    "BUILD_URL": "build_url",
    # GitLab's job URL wins over a generic BUILD_URL
    "CI_JOB_URL": "build_url",
}


# ============================================================
# Settings Snapshot
# ============================================================

@dataclass
class EnvironmentConfig:
    """URLs and timeouts for one target environment."""
    name: str
    base_url: str
    api_url: str
    timeout: int = 30000


@dataclass
class SquashTMSettings:
    url: str
    api_token: str
    campaign_id: str


@dataclass
class EmailSettings:
    host: str
    port: int
    secure: bool
    user: str
    password: str
    recipients: List[str]
    from_address: str


@dataclass
class LoggingSettings:
    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "7 days"


@dataclass
class BrowserSettings:
    """Browser launch and Playwright timeout options for UI tests."""
    name: str = "chromium"
    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720
    action_timeout: int = 15000
    navigation_timeout: int = 30000
    expect_timeout: int = 10000


@dataclass
class Settings:
    """
    Resolved configuration snapshot.

    Usage:
        >>> settings = get_settings()
        >>> settings.current_environment().base_url
        'https://www.saucedemo.com'
    """
    test_env: str
    data_format: str
    report_to_squash: bool
    squash_tm: SquashTMSettings
    email: EmailSettings
    is_ci: bool
    workers: int
    build_url: str
    logging: LoggingSettings
    browser: BrowserSettings
    environments: Dict[str, EnvironmentConfig] = field(default_factory=dict)

    def environment(self, name: str) -> EnvironmentConfig:
        """
        Get an environment by name.

        Raises:
            ConfigurationError: If the environment is not configured
        """
        env = self.environments.get(name)
        if env is None:
            available = ", ".join(self.environments)
            raise ConfigurationError(
                f"Unknown environment: {name}. Available: {available}"
            )
        return env

    def current_environment(self) -> EnvironmentConfig:
        """Get the environment selected by `test_env`."""
        return self.environment(self.test_env)


# ============================================================
# Loading
# ============================================================

def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _get_nested(d: Dict, keys: List[str], default: Any = None) -> Any:
    value: Any = d
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def _set_nested(d: Dict, keys: List[str], value: Any) -> None:
    """
    Sets a nested dictionary value using a list of keys.
    """
    for key in keys[:-1]:
        d = d.setdefault(key, {})
    d[keys[-1]] = value


def _convert_type(value: str, reference: Any) -> Any:
    """
    Convert string value to match reference type.

    Used for environment variables which are always strings.
    """
    if reference is None:
        return value

    if isinstance(reference, bool):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(reference, int):
        try:
            return int(value)
        except ValueError:
            return reference

    return value


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}") from e

    if not isinstance(content, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    logger.debug(f"Loaded configuration from {path}")
    return content


def _apply_env_overrides(config: Dict[str, Any], environ: Mapping[str, str]) -> None:
    for env_key, config_key in ENV_MAPPING.items():
        raw = environ.get(env_key)
        if raw is None or raw == "":
            continue
        keys = config_key.split(".")
        reference = _get_nested(_DEFAULTS, keys)
        _set_nested(config, keys, _convert_type(raw, reference))

    # BASE_URL / API_BASE_URL apply to every environment
    for env_key, field_name in (("BASE_URL", "base_url"), ("API_BASE_URL", "api_url")):
        raw = environ.get(env_key)
        if raw:
            for env_config in config.get("environments", {}).values():
                env_config[field_name] = raw


def _split_recipients(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = str(value or "").split(",")
    return [item.strip() for item in items if item.strip()]


def _build_settings(raw: Dict[str, Any]) -> Settings:
    data_format = str(raw.get("data_format", "json")).lower()
    if data_format not in SUPPORTED_DATA_FORMATS:
        raise ConfigurationError(
            f"Unsupported data format: {data_format}. "
            f"Supported: {', '.join(SUPPORTED_DATA_FORMATS)}"
        )

    squash = raw.get("squash_tm", {})
    email = raw.get("email", {})
    log_cfg = raw.get("logging", {})
    browser = raw.get("browser", {})

    environments = {
        name: EnvironmentConfig(
            name=name,
            base_url=str(env.get("base_url", "")),
            api_url=str(env.get("api_url", "")),
            timeout=int(env.get("timeout", 30000)),
        )
        for name, env in raw.get("environments", {}).items()
    }

    return Settings(
        test_env=str(raw.get("test_env", "qa")),
        data_format=data_format,
        report_to_squash=bool(raw.get("report_to_squash", False)),
        squash_tm=SquashTMSettings(
            url=str(squash.get("url", "")).rstrip("/"),
            api_token=str(squash.get("api_token", "")),
            campaign_id=str(squash.get("campaign_id", "")),
        ),
        email=EmailSettings(
            host=str(email.get("host", "")),
            port=int(email.get("port", 587)),
            secure=bool(email.get("secure", False)),
            user=str(email.get("user", "")),
            password=str(email.get("password", "")),
            recipients=_split_recipients(email.get("recipients")),
            from_address=str(email.get("from", "")),
        ),
        is_ci=bool(raw.get("is_ci", False)),
        workers=int(raw.get("workers", 4)),
        build_url=str(raw.get("build_url", "#")),
        logging=LoggingSettings(
            level=str(log_cfg.get("level", "INFO")).upper(),
            file=log_cfg.get("file") or None,
            rotation=str(log_cfg.get("rotation", "10 MB")),
            retention=str(log_cfg.get("retention", "7 days")),
        ),
        browser=BrowserSettings(
            name=str(browser.get("name", "chromium")).lower(),
            headless=bool(browser.get("headless", True)),
            viewport_width=int(browser.get("viewport_width", 1280)),
            viewport_height=int(browser.get("viewport_height", 720)),
            action_timeout=int(browser.get("action_timeout", 15000)),
            navigation_timeout=int(browser.get("navigation_timeout", 30000)),
            expect_timeout=int(browser.get("expect_timeout", 10000)),
        ),
        environments=environments,
    )


def load_settings(
    config_dir: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build a settings snapshot from defaults, YAML files and the environment.

    Args:
        config_dir: Directory holding config.yaml and {env}.yaml files.
                    Defaults to <project root>/config.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Settings snapshot

    Raises:
        ConfigurationError: On malformed YAML or invalid values
    """
    environ = os.environ if environ is None else environ
    config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

    config = copy.deepcopy(_DEFAULTS)

    base_path = config_dir / "config.yaml"
    if base_path.exists():
        config = _deep_merge(config, _read_yaml(base_path))
    else:
        logger.debug(f"No base configuration at {base_path}, using defaults")

    # TEST_ENV decides which override file applies, so resolve it first
    env_name = environ.get("TEST_ENV") or str(config.get("test_env", "qa"))
    env_path = config_dir / f"{env_name}.yaml"
    if env_path.exists():
        config = _deep_merge(config, _read_yaml(env_path))
        logger.debug(f"Merged environment config: {env_path}")

    _apply_env_overrides(config, environ)
    return _build_settings(config)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings snapshot, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reload_settings() -> Settings:
    """Discard the cached snapshot and load a new one."""
    global _settings
    _settings = None
    return get_settings()


def get_data_format() -> str:
    """Data format preference for test data files."""
    return get_settings().data_format


def is_ci() -> bool:
    """Check if running in a CI environment."""
    return get_settings().is_ci


__all__ = [
    "BrowserSettings",
    "ConfigurationError",
    "EmailSettings",
    "EnvironmentConfig",
    "LoggingSettings",
    "Settings",
    "SquashTMSettings",
    "get_data_format",
    "get_settings",
    "is_ci",
    "load_settings",
    "reload_settings",
]
