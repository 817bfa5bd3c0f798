"""
Integration tests package.

Contains end-to-end appointment flows that run the service against the
SQLAlchemy repositories and check the stored rows.
"""
