"""Core module for the TinyLink application."""

from tinylink.core.config import settings

__all__ = ["settings"]
