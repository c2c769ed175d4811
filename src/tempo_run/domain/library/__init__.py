"""Library domain - playlist tracks and the session's track catalog."""

from .catalog import TrackCatalog
from .models import Track
from .provider import ProviderConfig, ProviderState

__all__ = [
    "ProviderConfig",
    "ProviderState",
    "Track",
    "TrackCatalog",
]
