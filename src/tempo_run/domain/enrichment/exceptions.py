"""Exceptions raised by single enrichment attempts.

Retry loops in the pipeline absorb these; callers of resolve_bpm() only
ever see a BPM or None.
"""


class EnrichmentError(Exception):
    """Base exception for a failed BPM lookup attempt."""

    pass


class TempoLookupError(EnrichmentError):
    """The tempo lookup site was unreachable or had no BPM for the track."""

    pass
