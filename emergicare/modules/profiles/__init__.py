# emergicare/modules/profiles/__init__.py
"""Account profiles and signup completion."""

from .profiles_controller import router

__all__ = ["router"]
