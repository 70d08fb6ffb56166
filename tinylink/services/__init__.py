"""Service layer for the TinyLink application.

This package contains the link registry service and its validation helpers.
Services orchestrate interactions between repositories and provide domain-specific operations.
"""

from tinylink.services.links import LinkService

__all__ = ["LinkService"]
