"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation building blocks.

Components:
    - browser_manager: Browser and context lifecycle
    - page_session: Shared page interactions used by page objects
    - assertions: Logged wrappers around Playwright expect

Author: Automation Team
License: MIT
================================================================================
"""

from .assertions import LoginAssertions, PageAssertions
from .browser_manager import BrowserManager
from .page_session import PageSession

__all__ = [
    "BrowserManager",
    "LoginAssertions",
    "PageAssertions",
    "PageSession",
]
