"""
Data models for the TinyLink application.

This module imports and exports all SQLModel models used in the application.
"""

from tinylink.models.link import Link, LinkBase, LinkCreate, UTCTimestamp, utcnow

__all__ = [
    "Link",
    "LinkBase",
    "LinkCreate",
    "UTCTimestamp",
    "utcnow",
]
