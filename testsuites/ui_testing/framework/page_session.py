"""
================================================================================
Page Session
================================================================================

Shared page interactions for page objects.

A page object holds a `PageSession` instead of inheriting from a base page:

    class CartPage:
        def __init__(self, page: Page, base_url: str = ""):
            self.session = PageSession.create(page, "CartPage", base_url)

Every action is logged through the page's TestLogger and recorded as an
Allure step.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import allure
from playwright.async_api import Locator, Page

from e2e_tools.common import TestLogger, create_logger, get_settings
from e2e_tools.common.settings import PROJECT_ROOT


SCREENSHOT_DIR = PROJECT_ROOT / "reports" / "screenshots"


@dataclass
class PageSession:
    """A Playwright page, the application base URL and a context-bound logger."""
    page: Page
    name: str
    base_url: str
    log: TestLogger

    @classmethod
    def create(cls, page: Page, name: str, base_url: Optional[str] = None) -> "PageSession":
        """
        Args:
            page: Playwright Page
            name: Page name, used as logger context
            base_url: Application URL. Defaults to the current environment's base_url.
        """
        if not base_url:
            base_url = get_settings().current_environment().base_url
        return cls(page=page, name=name, base_url=base_url.rstrip("/"), log=create_logger(name))

    def url_for(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(self, path: str = "/", wait_until: str = "domcontentloaded") -> None:
        url = self.url_for(path)
        self.log.action(f"Navigating to {self.name}")
        with allure.step(f"Navigate to {url}"):
            await self.page.goto(url, wait_until=wait_until)
            await self.page.wait_for_load_state("domcontentloaded")

    async def title(self) -> str:
        return await self.page.title()

    def current_url(self) -> str:
        return self.page.url

    # =========================================================================
    # Element Interactions
    # =========================================================================

    async def click(self, locator: Locator, element_name: str) -> None:
        self.log.action(f'Clicking "{element_name}"')
        with allure.step(f"Click: {element_name}"):
            await locator.click()

    async def fill(self, locator: Locator, value: str, field_name: str) -> None:
        # The value is never logged, fields may hold passwords
        self.log.action(f'Filling "{field_name}" with value')
        with allure.step(f"Fill: {field_name}"):
            await locator.fill(value)

    async def clear(self, locator: Locator, field_name: str) -> None:
        self.log.action(f'Clearing "{field_name}"')
        with allure.step(f"Clear: {field_name}"):
            await locator.clear()

    async def hover(self, locator: Locator, element_name: str) -> None:
        self.log.action(f'Hovering over "{element_name}"')
        with allure.step(f"Hover: {element_name}"):
            await locator.hover()

    async def select_option(self, locator: Locator, value: str, dropdown_name: str) -> None:
        self.log.action(f'Selecting "{value}" from "{dropdown_name}"')
        with allure.step(f"Select {value}: {dropdown_name}"):
            await locator.select_option(value)

    async def scroll_to(self, locator: Locator) -> None:
        await locator.scroll_into_view_if_needed()

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_text(self, locator: Locator) -> str:
        return await locator.text_content() or ""

    async def get_value(self, locator: Locator) -> str:
        return await locator.input_value()

    async def is_visible(self, locator: Locator) -> bool:
        return await locator.is_visible()

    async def wait_for_element(self, locator: Locator, timeout: Optional[int] = None) -> None:
        await locator.wait_for(state="visible", timeout=timeout)

    # =========================================================================
    # Screenshots
    # =========================================================================

    async def take_screenshot(self, name: str, full_page: bool = True) -> Path:
        """Save reports/screenshots/<name>.png and attach it to Allure."""
        self.log.action(f"Taking screenshot: {name}")
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)
        path = SCREENSHOT_DIR / f"{name}.png"

        content = await self.page.screenshot(path=str(path), full_page=full_page)
        allure.attach(content, name=name, attachment_type=allure.attachment_type.PNG)
        return path


__all__ = [
    "PageSession",
    "SCREENSHOT_DIR",
]
