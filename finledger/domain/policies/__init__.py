"""Domain policies package."""

from .categories import would_create_cycle

__all__ = ["would_create_cycle"]
