"""HTTP clients used as loader backends."""

from .placeholder import PlaceholderClient

__all__ = ["PlaceholderClient"]
