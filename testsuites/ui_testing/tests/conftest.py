"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, page objects, and test setup/teardown.

Key Features:
- Browser and page lifecycle management (one browser per session)
- Page Object and assertion fixtures
- Pre-authenticated page and login helper fixtures
- Screenshot capture on failure

UI tests drive a real browser against the configured base_url, so they are
collected with the `live` marker and only run with --live.

================================================================================
"""

from typing import AsyncGenerator, Awaitable, Callable

import allure
import pytest
import pytest_asyncio
from loguru import logger
from playwright.async_api import Browser, BrowserContext, Page, expect

from e2e_tools.common import get_settings
from testsuites.ui_testing.framework.assertions import LoginAssertions
from testsuites.ui_testing.framework.browser_manager import BrowserManager
from testsuites.ui_testing.framework.page_session import SCREENSHOT_DIR
from testsuites.ui_testing.pages.login_page import LoginCredentials, LoginPage


DEFAULT_USER = LoginCredentials(username="standard_user", password="secret_sauce")


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    """
    Session-scoped browser manager fixture.

    Provides a single browser for all tests in the session, reducing browser
    launch overhead.
    """
    settings = get_settings().browser
    expect.set_options(timeout=settings.expect_timeout)

    manager = BrowserManager(settings)
    await manager.start()
    yield manager
    await manager.close()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser(browser_manager: BrowserManager) -> Browser:
    return browser_manager.browser


@pytest_asyncio.fixture(loop_scope="session")
async def context(browser_manager: BrowserManager) -> AsyncGenerator[BrowserContext, None]:
    """
    Function-scoped browser context fixture.

    Creates a new browser context for each test, providing isolation.
    """
    context = await browser_manager.new_context(
        base_url=get_settings().current_environment().base_url,
    )
    yield context
    await browser_manager.release(context)


@pytest_asyncio.fixture(loop_scope="session")
async def page(request, context: BrowserContext) -> AsyncGenerator[Page, None]:
    """
    Function-scoped page fixture.

    Saves a full-page screenshot to reports/screenshots and attaches it to
    Allure when the test body fails.
    """
    page = await context.new_page()
    yield page

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)
        path = SCREENSHOT_DIR / f"failure-{request.node.name}.png"
        screenshot = await page.screenshot(path=str(path), full_page=True)
        allure.attach(
            screenshot,
            name="failure_screenshot",
            attachment_type=allure.attachment_type.PNG,
        )
        logger.info(f"Failure screenshot saved: {path}")

    await page.close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest_asyncio.fixture(loop_scope="session")
async def login_page(page: Page) -> LoginPage:
    """Provides an opened LoginPage."""
    login_page = LoginPage(page)
    await login_page.open()
    return login_page


@pytest.fixture
def login_assertions(page: Page) -> LoginAssertions:
    return LoginAssertions(page)


# ================================================================================
# Authentication Fixtures
# ================================================================================

@pytest_asyncio.fixture(loop_scope="session")
async def authenticated_page(page: Page) -> Page:
    """
    Provides a page with the standard user logged in.
    """
    logger.info("Setting up authenticated page")
    login_page = LoginPage(page)
    await login_page.open()
    await login_page.login(DEFAULT_USER)

    await page.wait_for_url("**/inventory.html")
    logger.info("Authentication successful")
    return page


@pytest.fixture
def login_as(page: Page) -> Callable[[LoginCredentials], Awaitable[None]]:
    """
    Provides a helper logging in with specific credentials.

    Usage:
        await login_as(LoginCredentials("problem_user", "secret_sauce"))
    """
    async def _login_as(credentials: LoginCredentials) -> None:
        logger.info(f"Logging in as: {credentials.username}")
        login_page = LoginPage(page)
        await login_page.open()
        await login_page.login(credentials)

    return _login_as


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Keep each phase's report on the item.

    The `page` fixture reads `rep_call` during teardown to decide whether to
    capture a failure screenshot.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)
