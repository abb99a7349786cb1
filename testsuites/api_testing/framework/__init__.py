"""
================================================================================
API Testing Framework
================================================================================

REST API automation components.

Modules:
    - http_client: ApiClient with Allure logging and secret masking

Author: Automation Team
License: MIT
================================================================================
"""

from .http_client import ApiClient, ApiClientError, ApiResponse

__all__ = [
    "ApiClient",
    "ApiClientError",
    "ApiResponse",
]
