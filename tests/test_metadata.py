"""Tests for the catalog payload parsing helpers."""

import pytest

from disc_catalog.domain.metadata import (
    available,
    extract_movie_title,
    first_genre,
    join_artist_credits,
    map_rating,
    parse_runtime,
    release_year,
    total_duration_minutes,
)


class TestArtistCredits:
    """Test joining MusicBrainz artist credits."""

    def test_single_artist(self):
        assert join_artist_credits([{"name": "Radiohead"}]) == "Radiohead"

    def test_multiple_artists_joined_with_comma(self):
        credits = [{"name": "Simon"}, {"name": "Garfunkel"}]
        assert join_artist_credits(credits) == "Simon, Garfunkel"

    def test_missing_credits(self):
        assert join_artist_credits(None) is None
        assert join_artist_credits([]) is None


class TestReleaseYear:
    """Test year extraction from date strings."""

    @pytest.mark.parametrize("date,expected", [
        ("1997-05-21", 1997),
        ("1997", 1997),
        ("2010–2012", 2010),
        ("", None),
        (None, None),
        ("unknown", None),
    ])
    def test_release_year(self, date, expected):
        assert release_year(date) == expected


class TestTotalDuration:
    """Test track length summation."""

    def test_sums_tracks_and_rounds(self):
        media = [
            {"tracks": [{"length": 180000}, {"length": 200000}]},
            {"tracks": [{"length": 210000}]},
        ]
        assert total_duration_minutes(media) == 10

    def test_tracks_without_length_count_as_zero(self):
        media = [{"tracks": [{"length": 120000}, {"length": None}, {}]}]
        assert total_duration_minutes(media) == 2

    def test_half_minute_rounds_up(self):
        assert total_duration_minutes([{"tracks": [{"length": 90000}]}]) == 2

    def test_no_media(self):
        assert total_duration_minutes(None) is None
        assert total_duration_minutes([]) is None


class TestExtractMovieTitle:
    """Test cleaning retail product titles."""

    def test_title_with_year_and_format_tag(self):
        assert extract_movie_title("Inception (2010) [Blu-ray]") == ("Inception", "2010")

    def test_title_with_year_in_square_brackets(self):
        assert extract_movie_title("Alien [1979] DVD") == ("Alien", "1979")

    def test_format_suffix_is_removed(self):
        assert extract_movie_title("The Matrix - Blu-ray") == ("The Matrix", None)

    def test_format_suffix_is_case_insensitive(self):
        assert extract_movie_title("Heat – dvd Special Edition") == ("Heat", None)

    def test_bracketed_tags_are_removed(self):
        assert extract_movie_title("Jaws [Widescreen] [Region 2]") == ("Jaws", None)

    def test_plain_title(self):
        assert extract_movie_title("  Up  ") == ("Up", None)


class TestRatings:
    """Test US to UK classification mapping."""

    @pytest.mark.parametrize("source,expected", [
        ("G", "U"),
        ("PG", "PG"),
        ("PG-13", "12A"),
        ("R", "15"),
        ("NC-17", "18"),
        ("TV-MA", "Unrated"),
        ("Not Rated", "Unrated"),
        (None, "Unrated"),
        ("", "Unrated"),
    ])
    def test_map_rating(self, source, expected):
        assert map_rating(source) == expected


class TestMovieFields:
    """Test runtime, genre and N/A handling."""

    def test_parse_runtime(self):
        assert parse_runtime("148 min") == 148
        assert parse_runtime("N/A") is None
        assert parse_runtime(None) is None
        assert parse_runtime("unknown") is None

    def test_first_genre(self):
        assert first_genre("Action, Adventure, Sci-Fi") == "Action"
        assert first_genre("Drama") == "Drama"
        assert first_genre("N/A") is None

    def test_available(self):
        assert available("Christopher Nolan") == "Christopher Nolan"
        assert available("N/A") is None
        assert available("  ") is None
        assert available(None) is None
