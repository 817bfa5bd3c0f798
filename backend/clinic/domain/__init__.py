"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities and the slot/status/role enums
- interfaces.py: Repository and predicate contracts

Following Clean Architecture, this layer has no dependencies on
external frameworks or infrastructure.
"""
