"""
Test suite for tablesync.

- Unit tests for individual components, run against mocked connection pools
"""
