"""
Test suites package.

Kept importable so tests can share framework code by absolute import
(`testsuites.ui_testing.framework`, `testsuites.api_testing.framework`)
and `run_tests.py` can drive them.

Test data is demo-only and holds no real credentials.
"""
