"""
Test Suite for the Relative Range Cache.

Test organization:
    - unit/: Unit tests for individual components
    - integration/: Cached query runner tests against the mock backend
    - fixtures/: Shared test fixtures and sample data

Running Tests:
    pytest tests/                              # All tests
    pytest tests/unit/                         # Unit tests only
    pytest tests/integration/                  # Integration tests only
    pytest --cov=src/relative_range_cache      # With coverage
"""
