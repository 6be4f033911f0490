# emergicare/common/realtime/__init__.py
"""Table change notices for re-fetch-on-notify clients."""

from .change_feed import ChangeFeed, ChangeNotice, change_feed

__all__ = ["ChangeFeed", "ChangeNotice", "change_feed"]
