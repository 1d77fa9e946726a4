"""
HTTP service exposing validator sessions, backed by an expiring session cache.
"""

from .cache import SessionCache

__all__ = ["SessionCache"]
