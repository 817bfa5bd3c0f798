# Services package initialization
# This file makes the services directory a Python package
# and allows importing service modules

from . import appointment_service

__all__ = [
    "appointment_service",
]
