"""
Test Fixtures - Shared Test Data and Configurations.

This package contains reusable test fixtures:
    - sample_config.yaml: Sample cache configuration for testing

Frame and request factories live in ``tests/conftest.py``.
"""
