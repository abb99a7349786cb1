"""
================================================================================
Squash TM Integration Module
================================================================================

Exports:
    - SquashTMClient: Async REST client for recording executions
    - SquashExecutionResult / SquashTestStatus: Execution models
    - parse_squash_id / squash_tm: Test title linking convention

================================================================================
"""

from .squash_client import (
    SquashExecutionResult,
    SquashTMClient,
    SquashTestStatus,
    build_comment,
    extract_test_case_id,
    parse_squash_id,
    results_from_report,
    squash_tm,
    to_squash_status,
)

__all__ = [
    "SquashExecutionResult",
    "SquashTMClient",
    "SquashTestStatus",
    "build_comment",
    "extract_test_case_id",
    "parse_squash_id",
    "results_from_report",
    "squash_tm",
    "to_squash_status",
]
