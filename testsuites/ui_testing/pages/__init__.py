"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for application pages.

Each page class encapsulates:
    - Element locators
    - Page-specific actions
    - State queries for assertions

Author: Automation Team
License: MIT
================================================================================
"""

from .login_page import LoginCredentials, LoginPage

__all__ = [
    "LoginCredentials",
    "LoginPage",
]
