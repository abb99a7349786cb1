"""
================================================================================
Page Assertions
================================================================================

Playwright `expect` wrapped with assertion log lines.

Simple checks can use `expect` directly in tests; checks repeated across
tests belong in a domain helper such as LoginAssertions.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from typing import Pattern, Union

from playwright.async_api import Locator, Page, expect

from e2e_tools.common import create_logger


ERROR_SELECTOR = '[data-test="error"]'

LOCKED_OUT_MESSAGE = "Sorry, this user has been locked out"
INVALID_CREDENTIALS_MESSAGE = "Username and password do not match"


class PageAssertions:
    """Generic assertions bound to one page."""

    def __init__(self, page: Page):
        self.page = page
        self.log = create_logger("Assertions")

    async def expect_visible(self, locator: Locator, description: str) -> None:
        self.log.assertion(f'Expecting "{description}" to be visible')
        await expect(locator, f"{description} should be visible").to_be_visible()

    async def expect_hidden(self, locator: Locator, description: str) -> None:
        self.log.assertion(f'Expecting "{description}" to be hidden')
        await expect(locator, f"{description} should be hidden").to_be_hidden()

    async def expect_text(self, locator: Locator, expected_text: str, description: str) -> None:
        self.log.assertion(f'Expecting "{description}" to contain: "{expected_text}"')
        await expect(locator, f'{description} should contain "{expected_text}"').to_contain_text(expected_text)

    async def expect_exact_text(self, locator: Locator, expected_text: str, description: str) -> None:
        self.log.assertion(f'Expecting "{description}" to have exact text: "{expected_text}"')
        await expect(locator, f'{description} should have text "{expected_text}"').to_have_text(expected_text)

    async def expect_url_contains(self, path: str) -> None:
        self.log.assertion(f'Expecting URL to contain: "{path}"')
        await expect(self.page, f'URL should contain "{path}"').to_have_url(re.compile(re.escape(path)))

    async def expect_title(self, title: Union[str, Pattern[str]]) -> None:
        self.log.assertion(f'Expecting page title: "{title}"')
        await expect(self.page, "Page title should match").to_have_title(title)

    async def expect_count(self, locator: Locator, count: int, description: str) -> None:
        self.log.assertion(f'Expecting {count} "{description}" elements')
        await expect(locator, f"Should have {count} {description} elements").to_have_count(count)

    async def expect_enabled(self, locator: Locator, description: str) -> None:
        self.log.assertion(f'Expecting "{description}" to be enabled')
        await expect(locator, f"{description} should be enabled").to_be_enabled()

    async def expect_disabled(self, locator: Locator, description: str) -> None:
        self.log.assertion(f'Expecting "{description}" to be disabled')
        await expect(locator, f"{description} should be disabled").to_be_disabled()


class LoginAssertions:
    """SauceDemo login outcomes."""

    def __init__(self, page: Page):
        self.page = page
        self.checks = PageAssertions(page)
        self.log = self.checks.log

    @property
    def error_container(self) -> Locator:
        return self.page.locator(ERROR_SELECTOR)

    async def expect_login_success(self) -> None:
        self.log.assertion("Expecting successful login - inventory page visible")
        await self.checks.expect_url_contains("/inventory.html")
        await self.checks.expect_visible(self.page.locator(".inventory_list"), "Product inventory")

    async def expect_locked_out_error(self) -> None:
        self.log.assertion("Expecting locked out error message")
        await self.expect_error_message(LOCKED_OUT_MESSAGE)

    async def expect_invalid_credentials_error(self) -> None:
        self.log.assertion("Expecting invalid credentials error message")
        await self.expect_error_message(INVALID_CREDENTIALS_MESSAGE)

    async def expect_login_page_displayed(self) -> None:
        self.log.assertion("Expecting login page to be displayed")
        await self.checks.expect_visible(self.page.locator('[data-test="login-button"]'), "Login button")
        await self.checks.expect_visible(self.page.locator('[data-test="username"]'), "Username field")
        await self.checks.expect_visible(self.page.locator('[data-test="password"]'), "Password field")

    async def expect_error_message(self, expected_message: str) -> None:
        self.log.assertion(f'Expecting error message: "{expected_message}"')
        await self.checks.expect_visible(self.error_container, "Error message")
        await self.checks.expect_text(self.error_container, expected_message, "Error message")


__all__ = [
    "INVALID_CREDENTIALS_MESSAGE",
    "LOCKED_OUT_MESSAGE",
    "LoginAssertions",
    "PageAssertions",
]
