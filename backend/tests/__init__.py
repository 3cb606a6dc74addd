"""
Test Suite

Unit, database and API tests for the PMHNP Hiring backend. Shared
fixtures live in ``tests/conftest.py``.
"""
