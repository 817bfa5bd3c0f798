"""
Test configuration package.

Holds pytest marker registration shared across the test suite.
"""
