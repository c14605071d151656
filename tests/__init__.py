"""
Tests Package - Unit and Integration Tests

Test structure:
- tests/unit/ - Fast, isolated unit tests with in-memory queue and gateway fakes
- tests/integration/ - Tests against a real PostgreSQL (set TEST_POSTGRES_DSN)
- tests/conftest.py - Shared pytest fixtures
"""
