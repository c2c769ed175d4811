"""Tests for the tempo lookup-site source."""

from unittest.mock import MagicMock

import pytest
import requests

from tempo_run.core.config import EnrichmentConfig
from tempo_run.domain.enrichment.exceptions import EnrichmentError, TempoLookupError
from tempo_run.domain.enrichment.lookup import build_lookup_url, extract_bpm, fetch_lookup_bpm


@pytest.fixture
def config() -> EnrichmentConfig:
    return EnrichmentConfig(lookup_base_url="https://bpm.example")


def make_session(text: str = "", status_error: Exception | None = None) -> MagicMock:
    response = MagicMock()
    response.text = text
    if status_error:
        response.raise_for_status.side_effect = status_error
    session = MagicMock()
    session.get.return_value = response
    return session


class TestBuildLookupUrl:
    """Tests for build_lookup_url function."""

    def test_artist_then_title(self) -> None:
        """Artist slug is prefixed with @, title slug follows."""
        url = build_lookup_url("https://bpm.example/", "Don’t Stop Me Now", "Queen")
        assert url == "https://bpm.example/@queen/dont-stop-me-now"

    def test_featuring_removed_from_title(self) -> None:
        """Featured artists do not end up in the path."""
        url = build_lookup_url("https://bpm.example", "Uptown Funk (feat. Bruno Mars)", "Mark Ronson")
        assert url.endswith("/@mark-ronson/uptown-funk")


class TestExtractBpm:
    """Tests for extract_bpm function."""

    def test_first_match_wins(self) -> None:
        """The first BPM token in the page is returned."""
        assert extract_bpm("<p>Tempo: 128 BPM</p><p>Also 90 BPM</p>") == 128.0

    def test_two_digit_value(self) -> None:
        """Two-digit tempos are accepted."""
        assert extract_bpm("It runs at 95 BPM") == 95.0

    def test_four_digit_run_rejected(self) -> None:
        """A longer digit run is not read as its last three digits."""
        assert extract_bpm("views: 1128 BPM") is None

    def test_requires_unit(self) -> None:
        """Numbers without the unit marker are ignored."""
        assert extract_bpm("128 beats per minute") is None

    def test_empty_text(self) -> None:
        """Empty or missing bodies give None."""
        assert extract_bpm("") is None
        assert extract_bpm(None) is None


class TestFetchLookupBpm:
    """Tests for fetch_lookup_bpm function."""

    def test_returns_scraped_value(self, config: EnrichmentConfig) -> None:
        """A page with a BPM token yields that value."""
        session = make_session("Song Key E minor, 120 BPM")
        assert fetch_lookup_bpm("Song", "Artist", config, session=session) == 120.0

        args, kwargs = session.get.call_args
        assert args[0] == "https://bpm.example/@artist/song"
        assert kwargs["timeout"] == config.request_timeout
        assert kwargs["headers"]["User-Agent"] == config.user_agent

    def test_no_bpm_raises(self, config: EnrichmentConfig) -> None:
        """Pages without a tempo raise TempoLookupError."""
        session = make_session("<html>nothing here</html>")
        with pytest.raises(TempoLookupError):
            fetch_lookup_bpm("Song", "Artist", config, session=session)

    def test_http_error_raises(self, config: EnrichmentConfig) -> None:
        """HTTP errors are wrapped as TempoLookupError."""
        session = make_session(status_error=requests.HTTPError("404"))
        with pytest.raises(TempoLookupError):
            fetch_lookup_bpm("Song", "Artist", config, session=session)

    def test_transport_error_raises(self, config: EnrichmentConfig) -> None:
        """Connection failures are wrapped as TempoLookupError."""
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(EnrichmentError):
            fetch_lookup_bpm("Song", "Artist", config, session=session)
