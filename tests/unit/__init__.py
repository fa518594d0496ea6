"""
Unit Tests - Testing Individual Components in Isolation.

Test Files:
    - test_fingerprint.py: Query and request cache ids
    - test_time_range_utils.py: Cacheability, overlap, paginating range
    - test_frame_trimming.py: Start/end frame trimming
    - test_relative_range_cache.py: Cache set/get
    - test_config_loader.py: Configuration loading/validation
"""
