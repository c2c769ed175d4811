"""
Primary BPM source: a public tempo lookup site.

Pages are addressed by artist and title slugs and scraped for the first
BPM-shaped token.
"""

import re
from typing import Optional

import requests
from loguru import logger

from tempo_run.core.config import EnrichmentConfig
from tempo_run.utils.text import slugify

from .exceptions import TempoLookupError

BPM_UNIT = "BPM"

# A 2-3 digit integer, one space, then the literal unit marker: "128 BPM".
# The number must start on a word boundary, so "1128 BPM" does not match.
BPM_PATTERN = re.compile(r"\b(\d{2,3}) " + BPM_UNIT + r"\b")


def build_lookup_url(base_url: str, title: str, artist: str) -> str:
    """Build the lookup page URL: {base}/@{artist-slug}/{title-slug}."""
    return f"{base_url.rstrip('/')}/@{slugify(artist)}/{slugify(title)}"


def extract_bpm(text: str) -> Optional[float]:
    """Return the first BPM value found in a page body, or None."""
    match = BPM_PATTERN.search(text or "")
    if not match:
        return None
    return float(match.group(1))


def fetch_lookup_bpm(
    title: str,
    artist: str,
    config: EnrichmentConfig,
    session: Optional[requests.Session] = None,
) -> float:
    """Single attempt against the lookup site.

    Args:
        title: Track title
        artist: Track artist
        config: Enrichment configuration (base URL, timeout, user agent)
        session: Optional requests session to reuse connections

    Returns:
        BPM value

    Raises:
        TempoLookupError: On transport failure, HTTP error or no BPM in the page
    """
    url = build_lookup_url(config.lookup_base_url, title, artist)
    http = session or requests
    logger.debug(f"🔎 Fetching BPM from: {url}")

    try:
        response = http.get(
            url,
            headers={"User-Agent": config.user_agent},
            timeout=config.request_timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise TempoLookupError(f"Lookup request failed for {url}: {e}") from e

    bpm = extract_bpm(response.text)
    if bpm is None or bpm <= 0:
        raise TempoLookupError(f"No BPM found at {url}")

    logger.debug(f"🎯 Scraped BPM for {title}: {bpm}")
    return bpm
