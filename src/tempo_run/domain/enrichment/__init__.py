"""Enrichment domain - attaches BPM values to tracks.

This domain handles:
- Lookup-key normalization
- Scraping the tempo lookup site (primary source)
- Generative fallback with bounded retries
- Concurrent enrichment of a whole playlist
"""

from tempo_run.utils.text import slugify as normalize

from .exceptions import EnrichmentError, TempoLookupError
from .lookup import BPM_PATTERN, BPM_UNIT, build_lookup_url, extract_bpm, fetch_lookup_bpm
from .pipeline import (
    CompletionBarrier,
    EnrichmentJob,
    EnrichmentRequest,
    EnrichmentResult,
    TempoEnrichmentPipeline,
)

__all__ = [
    "BPM_PATTERN",
    "BPM_UNIT",
    "CompletionBarrier",
    "EnrichmentError",
    "EnrichmentJob",
    "EnrichmentRequest",
    "EnrichmentResult",
    "TempoEnrichmentPipeline",
    "TempoLookupError",
    "build_lookup_url",
    "extract_bpm",
    "fetch_lookup_bpm",
    "normalize",
]
