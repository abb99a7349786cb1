"""
================================================================================
Test Data Loader
================================================================================

JSON/YAML test data for data-driven tests.

Exports:
    - load_test_data / load_test_data_array: Read a named data file
    - get_test_data_by_id: Pick a single record
    - to_parameterized_tests: Records as named cases for pytest parametrization

================================================================================
"""

from .test_data_loader import (
    MissingKeyError,
    NotAnArrayError,
    ParameterizedTestData,
    TestCaseNotFoundError,
    TestDataError,
    TestDataNotFoundError,
    TestDataParseError,
    get_test_data_by_id,
    load_test_data,
    load_test_data_array,
    resolve_data_path,
    to_parameterized_tests,
)

__all__ = [
    "MissingKeyError",
    "NotAnArrayError",
    "ParameterizedTestData",
    "TestCaseNotFoundError",
    "TestDataError",
    "TestDataNotFoundError",
    "TestDataParseError",
    "get_test_data_by_id",
    "load_test_data",
    "load_test_data_array",
    "resolve_data_path",
    "to_parameterized_tests",
]
