"""
Provider state for streaming-service integrations.

Providers are implemented as modules with pure functions, not classes.
Every function takes a ProviderState and returns (new_state, result).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ProviderConfig:
    """Base configuration for a provider."""

    name: str  # Provider name: "spotify"
    api_base: str = ""
    request_timeout: float = 10.0


@dataclass
class ProviderState:
    """Runtime state for a provider.

    Immutable state container passed to all provider functions.
    Functions return new ProviderState instead of mutating.
    """

    config: ProviderConfig
    authenticated: bool = False
    cache: Dict[str, Any] = field(default_factory=dict)  # In-memory cache

    def with_authenticated(self, authenticated: bool) -> "ProviderState":
        """Return new state with updated authentication status."""
        return ProviderState(
            config=self.config,
            authenticated=authenticated,
            cache=self.cache,
        )

    def with_cache(self, **updates: Any) -> "ProviderState":
        """Return new state with updated cache entries."""
        return ProviderState(
            config=self.config,
            authenticated=self.authenticated,
            cache={**self.cache, **updates},
        )

    def with_token(self, access_token: str) -> "ProviderState":
        """Return new state holding a bearer token, authenticated when non-empty."""
        return self.with_cache(access_token=access_token).with_authenticated(bool(access_token))

    @property
    def access_token(self) -> Optional[str]:
        return self.cache.get("access_token")
