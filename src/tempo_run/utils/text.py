"""
Text normalization for lookup keys and track identity.

Pure functions, safe to call from any thread.
"""

import re

# Typographic characters folded to their ASCII equivalents before slugging
_CHAR_FOLDS = {
    "‘": "'",  # left single quote
    "’": "'",  # right single quote / apostrophe
    "“": '"',
    "”": '"',
    "–": "-",  # en dash
    "—": "-",  # em dash
    "−": "-",  # minus sign
}

_FEATURING_RE = re.compile(r"\((?:feat|ft|featuring|with)\b[^)]*\)", re.IGNORECASE)
_PARENS_RE = re.compile(r"[()\[\]]")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^a-z0-9\-]")
_REPEATED_DASH_RE = re.compile(r"-{2,}")

SLUG_SEPARATOR = "-"


def fold_typography(text: str) -> str:
    """Replace curly quotes and long dashes with plain ASCII."""
    return "".join(_CHAR_FOLDS.get(ch, ch) for ch in text)


def slugify(text: str) -> str:
    """Normalize a title or artist into a lookup key.

    Lowercases, folds typographic quotes and dashes, drops "(feat. ...)" and
    "(with ...)" annotations, turns whitespace into single dashes and strips
    every other non-alphanumeric character. slugify(slugify(x)) == slugify(x).

    Examples:
        >>> slugify("Don’t Stop Me Now")
        'dont-stop-me-now'
        >>> slugify("Foo (feat. Bar)")
        'foo'
    """
    cleaned = fold_typography(text).lower()
    cleaned = cleaned.replace("&", " and ").replace("'", "")
    cleaned = _FEATURING_RE.sub(" ", cleaned)
    cleaned = _PARENS_RE.sub(" ", cleaned)
    cleaned = _WHITESPACE_RE.sub(SLUG_SEPARATOR, cleaned.strip())
    cleaned = _NON_SLUG_RE.sub("", cleaned)
    cleaned = _REPEATED_DASH_RE.sub(SLUG_SEPARATOR, cleaned)
    return cleaned.strip(SLUG_SEPARATOR)


def track_identity(title: str, artist: str) -> str:
    """Identity string used to compare now-playing items.

    Case-insensitive and whitespace-trimmed "title - artist", so formatting
    noise from the playback source does not register as a track change.
    """
    title = _WHITESPACE_RE.sub(" ", (title or "").strip())
    artist = _WHITESPACE_RE.sub(" ", (artist or "").strip())
    return f"{title} - {artist}".strip().lower()
