"""Content package — scoring rules and scenarios from disk or the scenario server."""

from .client import ContentClient, ContentError, ContentNotFound
from .loader import ContentLoader

__all__ = [
    "ContentClient",
    "ContentError",
    "ContentNotFound",
    "ContentLoader",
]
