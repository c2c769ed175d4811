"""
Spotify API operations.

Pure functions for now-playing state, playlist tracks and queue control.
All functions take ProviderState and return (ProviderState, result).
"""

from typing import Any, Dict, List, Optional, Tuple

import requests
from loguru import logger

from tempo_run.core.config import SpotifyConfig

from ...models import Track
from ...provider import ProviderConfig, ProviderState

# Spotify API base URL
API_BASE = "https://api.spotify.com/v1"

# Page size for playlist track requests
PLAYLIST_PAGE_LIMIT = 100


def init_provider(config: SpotifyConfig) -> ProviderState:
    """Initialize Spotify provider state from configuration.

    Args:
        config: Spotify configuration with a ready access token

    Returns:
        Provider state (authenticated when a token is present)
    """
    provider_config = ProviderConfig(
        name="spotify",
        api_base=(config.api_base or API_BASE).rstrip("/"),
        request_timeout=config.request_timeout,
    )
    state = ProviderState(config=provider_config)
    if config.access_token:
        state = state.with_token(config.access_token)
    return state


def _headers(state: ProviderState) -> Optional[Dict[str, str]]:
    token = state.access_token
    if not token or not state.authenticated:
        return None
    return {"Authorization": f"Bearer {token}"}


def _api_url(state: ProviderState, path: str) -> str:
    return f"{state.config.api_base or API_BASE}{path}"


def _normalize_playlist_item(item: Dict[str, Any]) -> Optional[Track]:
    """Convert a playlist item to a Track, or None for local/unavailable items."""
    track = item.get("track") or {}
    track_id = track.get("id")
    title = track.get("name")
    artists = [a.get("name") for a in track.get("artists") or [] if a.get("name")]
    if not track_id or not title or not artists:
        return None
    return Track(id=track_id, title=title.strip(), artist=artists[0].strip())


def playlist_id_from_context(payload: Optional[Dict[str, Any]]) -> Optional[str]:
    """Extract the playlist ID from a now-playing payload's context.

    Args:
        payload: currently-playing response body

    Returns:
        Playlist ID if playback is from a playlist, else None
    """
    if not payload:
        return None
    context = payload.get("context") or {}
    uri = context.get("uri") or ""
    if ":playlist:" not in uri:
        return None
    return uri.split(":")[-1] or None


def get_currently_playing(
    state: ProviderState,
) -> Tuple[ProviderState, Optional[Dict[str, Any]]]:
    """Get the currently playing item.

    Returns:
        (updated_state, payload or None). None covers "nothing playing"
        (204 or no item) as well as transport and HTTP errors.
    """
    headers = _headers(state)
    if headers is None:
        logger.debug("Cannot read playback - not authenticated")
        return state, None

    try:
        response = requests.get(
            _api_url(state, "/me/player/currently-playing"),
            headers=headers,
            timeout=state.config.request_timeout,
        )
        if response.status_code == 204:  # No content = nothing playing
            return state, None
        response.raise_for_status()
        payload = response.json()
        if not payload or not payload.get("item"):
            return state, None
        return state, payload

    except requests.HTTPError as e:
        if e.response is not None and e.response.status_code == 401:
            logger.warning("Spotify token rejected while reading playback")
            return state.with_authenticated(False), None
        logger.debug(f"HTTP error reading playback: {e}")
        return state, None
    except (requests.RequestException, ValueError) as e:
        logger.debug(f"Error getting playback state: {e}")
        return state, None


def get_playlist_tracks(
    state: ProviderState, playlist_id: str
) -> Tuple[ProviderState, List[Track]]:
    """Get all tracks in a playlist, following pagination.

    Args:
        state: Provider state
        playlist_id: Spotify playlist ID or URI

    Returns:
        (updated_state, tracks in playlist order). Empty on failure.
    """
    headers = _headers(state)
    if headers is None:
        logger.warning("Cannot load playlist - not authenticated")
        return state, []

    if ":" in playlist_id:
        playlist_id = playlist_id.split(":")[-1]

    tracks: List[Track] = []
    url: Optional[str] = _api_url(state, f"/playlists/{playlist_id}/tracks")
    params: Optional[Dict[str, Any]] = {"limit": PLAYLIST_PAGE_LIMIT}

    try:
        while url:
            response = requests.get(
                url, params=params, headers=headers, timeout=state.config.request_timeout
            )
            response.raise_for_status()
            data = response.json()

            for item in data.get("items", []):
                track = _normalize_playlist_item(item)
                if track:
                    tracks.append(track)

            # "next" already carries offset and limit
            url = data.get("next")
            params = None

        logger.info(f"Fetched {len(tracks)} tracks for playlist {playlist_id}")
        return state, tracks

    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        if status == 401:
            logger.error("Authentication failed while loading playlist")
            return state.with_authenticated(False), []
        logger.exception(f"HTTP error loading playlist {playlist_id}: {status}")
        return state, []
    except Exception:
        logger.exception(f"Error fetching playlist tracks: {playlist_id}")
        return state, []


def queue_track(state: ProviderState, track_id: str) -> Tuple[ProviderState, bool]:
    """Add a track to the user's playback queue.

    Args:
        state: Provider state
        track_id: Spotify track ID or URI

    Returns:
        (updated_state, success)
    """
    headers = _headers(state)
    if headers is None:
        logger.warning("Cannot queue track - not authenticated")
        return state, False

    if ":" in track_id:
        track_id = track_id.split(":")[-1]

    try:
        response = requests.post(
            _api_url(state, "/me/player/queue"),
            params={"uri": f"spotify:track:{track_id}"},
            headers=headers,
            timeout=state.config.request_timeout,
        )
        response.raise_for_status()
        logger.info(f"Queued Spotify track: {track_id}")
        return state, True

    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        if status == 404:
            logger.error("No active Spotify device to queue on")
        elif status == 401:
            logger.error("Authentication failed while queueing")
            return state.with_authenticated(False), False
        else:
            logger.exception(f"HTTP error queueing track {track_id}: {status}")
        return state, False
    except Exception:
        logger.exception(f"Error queueing track: {track_id}")
        return state, False
