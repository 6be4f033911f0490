# emergicare/modules/consultations/__init__.py
"""Consultation requests and their lifecycle."""

from .consultations_controller import router

__all__ = ["router"]
