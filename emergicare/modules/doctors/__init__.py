# emergicare/modules/doctors/__init__.py
"""Doctor directory and doctor profile management."""

from .doctors_controller import router

__all__ = ["router"]
