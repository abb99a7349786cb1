"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle for UI tests.

One browser per test session, one isolated context per test. Launch options,
viewport and Playwright timeouts come from the `browser` settings section
(BROWSER / HEADLESS environment variables).

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from e2e_tools.common.settings import BrowserSettings


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class BrowserManager:
    """
    Manages the browser instance and its contexts.

    Usage:
        async with BrowserManager(get_settings().browser) as manager:
            context = await manager.new_context(base_url="https://www.saucedemo.com")
            page = await context.new_page()
    """

    def __init__(self, browser_settings: Optional[BrowserSettings] = None):
        self.settings = browser_settings or BrowserSettings()
        if self.settings.name not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser: {self.settings.name}. "
                f"Supported: {', '.join(SUPPORTED_BROWSERS)}"
            )

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> Browser:
        """Start Playwright and launch the configured browser."""
        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, self.settings.name)

        self._browser = await launcher.launch(headless=self.settings.headless)
        logger.debug(
            f"Browser started: {self.settings.name} "
            f"(headless={self.settings.headless})"
        )
        return self._browser

    async def close(self) -> None:
        """Close all contexts, the browser and Playwright."""
        for context in self._contexts:
            await context.close()
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def context_options(self, **overrides: Any) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "viewport": {
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
            "ignore_https_errors": True,
        }
        options.update(overrides)
        return options

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create an isolated browser context (own cookies and storage).

        Raises:
            RuntimeError: If the browser has not been started
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = await self._browser.new_context(**self.context_options(**options))
        context.set_default_timeout(self.settings.action_timeout)
        context.set_default_navigation_timeout(self.settings.navigation_timeout)
        self._contexts.append(context)
        return context

    async def release(self, context: BrowserContext) -> None:
        """Close a context created by `new_context`."""
        if context in self._contexts:
            self._contexts.remove(context)
        await context.close()

    async def new_page(self, **context_options: Any) -> Page:
        context = await self.new_context(**context_options)
        return await context.new_page()

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


__all__ = [
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
