"""Tests for lookup-key normalization and track identity."""

import pytest

from tempo_run.utils.text import fold_typography, slugify, track_identity


class TestSlugify:
    """Tests for slugify function."""

    def test_basic_title(self) -> None:
        """Lowercases and joins words with dashes."""
        assert slugify("Eye of the Tiger") == "eye-of-the-tiger"

    def test_curly_apostrophe_removed(self) -> None:
        """Typographic apostrophes are folded and dropped."""
        assert slugify("Don’t Stop Me Now") == "dont-stop-me-now"

    def test_featuring_annotation_removed(self) -> None:
        """'(feat. ...)' annotations do not reach the lookup key."""
        assert slugify("Uptown Funk (feat. Bruno Mars)") == "uptown-funk"

    def test_featuring_matches_bare_title(self) -> None:
        """A featured credit does not change the key."""
        assert slugify("Foo (feat. Bar)") == slugify("foo")

    def test_ft_annotation_removed(self) -> None:
        """Abbreviated "(ft. ...)" credits are stripped too."""
        assert slugify("Song (ft. Someone)") == "song"
        assert slugify("Song (Feat Someone)") == "song"

    def test_with_annotation_removed(self) -> None:
        """'(with ...)' annotations are treated like featuring credits."""
        assert slugify("Stay (with Justin Bieber)") == "stay"

    def test_other_parentheses_kept_as_words(self) -> None:
        """Non-credit parentheses keep their contents."""
        assert slugify("Song (Remix)") == "song-remix"

    def test_ampersand_becomes_and(self) -> None:
        """Ampersands are spelled out."""
        assert slugify("Simon & Garfunkel") == "simon-and-garfunkel"

    def test_punctuation_and_whitespace_collapsed(self) -> None:
        """Runs of punctuation and whitespace collapse to single dashes."""
        assert slugify("  Hey,   Ya!  ") == "hey-ya"

    def test_en_dash_folded(self) -> None:
        """Long dashes do not produce repeated separators."""
        assert slugify("Part 1 – Intro") == "part-1-intro"

    @pytest.mark.parametrize(
        "text",
        ["Don’t Stop Me Now", "Uptown Funk (feat. Bruno Mars)", "AC/DC", "--a--b--", ""],
    )
    def test_idempotent(self, text: str) -> None:
        """Slugifying a slug changes nothing."""
        once = slugify(text)
        assert slugify(once) == once

    def test_empty_string(self) -> None:
        """Empty input gives an empty slug."""
        assert slugify("") == ""


class TestFoldTypography:
    """Tests for fold_typography function."""

    def test_folds_quotes_and_dashes(self) -> None:
        """Curly quotes and long dashes become ASCII."""
        assert fold_typography("“It’s” — now") == "\"It's\" - now"


class TestTrackIdentity:
    """Tests for track_identity function."""

    def test_case_insensitive(self) -> None:
        """Identity ignores letter case."""
        assert track_identity("Song A", "Artist") == track_identity("SONG a", "artist")

    def test_trims_whitespace(self) -> None:
        """Surrounding and repeated whitespace is ignored."""
        assert track_identity("  Song   A ", " Artist ") == "song a - artist"

    def test_handles_none(self) -> None:
        """Missing fields do not raise."""
        assert track_identity(None, None) == "-"
