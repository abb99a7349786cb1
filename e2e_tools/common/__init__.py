"""
================================================================================
E2E Tools Common Utilities
================================================================================

Shared configuration and logging for the framework.

Exports:
    - Settings / get_settings: Resolved configuration snapshot
    - init_logger: Initialize loguru sinks (console + execution log file)
    - create_logger: Context-bound test logger

Usage:
    from e2e_tools.common import create_logger, get_settings

    settings = get_settings()
    log = create_logger("Smoke")
    log.info(f"Running against {settings.current_environment().base_url}")

================================================================================
"""

from .logger import TestLogger, create_logger, init_logger, reset_logger
from .settings import (
    BrowserSettings,
    ConfigurationError,
    EmailSettings,
    EnvironmentConfig,
    Settings,
    SquashTMSettings,
    get_data_format,
    get_settings,
    is_ci,
    load_settings,
    reload_settings,
)

__all__ = [
    "BrowserSettings",
    "ConfigurationError",
    "EmailSettings",
    "EnvironmentConfig",
    "Settings",
    "SquashTMSettings",
    "TestLogger",
    "create_logger",
    "get_data_format",
    "get_settings",
    "init_logger",
    "is_ci",
    "load_settings",
    "reload_settings",
    "reset_logger",
]
