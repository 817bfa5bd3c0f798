"""
Unit tests package.

Contains tests for the service, domain objects, repositories, logging and
management commands. Service tests run on mocked repositories; storage tests
use an in-memory SQLite database.
"""
