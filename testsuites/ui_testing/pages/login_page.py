"""
================================================================================
Login Page Object (Async / Playwright)
================================================================================

Page object for the SauceDemo login page.

Locators use the site's `data-test` attributes.

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import allure
from playwright.async_api import Page

from testsuites.ui_testing.framework.page_session import PageSession


@dataclass
class LoginCredentials:
    username: str
    password: str


class LoginPage:
    """SauceDemo login page (async)."""

    URL_PATH = "/"

    def __init__(self, page: Page, base_url: Optional[str] = None):
        self.session = PageSession.create(page, "LoginPage", base_url)
        self.page = page

        self.username_input = page.locator('[data-test="username"]')
        self.password_input = page.locator('[data-test="password"]')
        self.login_button = page.locator('[data-test="login-button"]')
        self.error_message = page.locator('[data-test="error"]')
        self.error_button = page.locator(".error-button")
        self.logo = page.locator(".login_logo")
        self.accepted_usernames_panel = page.locator("#login_credentials")

    # =========================================================================
    # Actions
    # =========================================================================

    @allure.step("Open login page")
    async def open(self) -> "LoginPage":
        await self.session.navigate(self.URL_PATH)
        await self.session.wait_for_element(self.login_button)
        return self

    async def enter_username(self, username: str) -> None:
        await self.session.fill(self.username_input, username, "Username")

    async def enter_password(self, password: str) -> None:
        await self.session.fill(self.password_input, password, "Password")

    async def click_login(self) -> None:
        await self.session.click(self.login_button, "Login Button")

    @allure.step("Login")
    async def login(self, credentials: LoginCredentials) -> None:
        self.session.log.info(f"Logging in as: {credentials.username}")
        await self.enter_username(credentials.username)
        await self.enter_password(credentials.password)
        await self.click_login()

    async def login_with(self, username: str, password: str) -> None:
        await self.login(LoginCredentials(username=username, password=password))

    async def clear_form(self) -> None:
        await self.session.clear(self.username_input, "Username")
        await self.session.clear(self.password_input, "Password")

    async def close_error(self) -> None:
        if await self.error_button.is_visible():
            await self.session.click(self.error_button, "Error Close Button")

    # =========================================================================
    # Queries
    # =========================================================================

    async def error_message_text(self) -> str:
        """Error banner text, empty when no error is shown."""
        if await self.error_message.is_visible():
            return await self.session.get_text(self.error_message)
        return ""

    async def is_error_displayed(self) -> bool:
        return await self.error_message.is_visible()

    async def is_displayed(self) -> bool:
        return await self.login_button.is_visible()

    async def accepted_usernames(self) -> List[str]:
        """Usernames listed in the page's "Accepted usernames are:" panel."""
        text = await self.accepted_usernames_panel.inner_text()
        return [
            line.strip()
            for line in text.splitlines()
            if line.strip() and "Accepted" not in line
        ]


__all__ = [
    "LoginCredentials",
    "LoginPage",
]
