"""Tests for media record entities and their document mapping."""

from datetime import datetime, timezone

import pytest

from disc_catalog.domain.records import (
    DVD_RATINGS,
    CDRecord,
    DVDRecord,
    MediaKind,
    new_record,
    parse_year,
    record_type_for,
)
from disc_catalog.exceptions import ValidationError


class TestMediaKind:
    """Test the media kind enum."""

    def test_collections(self):
        assert MediaKind.CD.collection == "cds"
        assert MediaKind.DVD.collection == "dvds"

    def test_labels(self):
        assert MediaKind.CD.label == "CD"
        assert MediaKind.DVD.credit_label == "director"

    def test_record_types(self):
        assert record_type_for(MediaKind.CD) is CDRecord
        assert record_type_for(MediaKind.DVD) is DVDRecord

    def test_genre_suggestions(self):
        assert "Folk" in MediaKind.CD.genres
        assert "Sci-Fi" in MediaKind.DVD.genres
        assert "Sci-Fi" not in MediaKind.CD.genres


class TestParseYear:
    """Test year validation."""

    def test_blank_defaults_to_current_year(self):
        assert parse_year("", current_year=2024) == 2024
        assert parse_year(None, current_year=2024) == 2024

    def test_valid_year(self):
        assert parse_year("1997", current_year=2024) == 1997
        assert parse_year(1900, current_year=2024) == 1900

    @pytest.mark.parametrize("value", ["1899", "2025", "abcd", "19.5"])
    def test_invalid_year(self, value):
        with pytest.raises(ValidationError):
            parse_year(value, current_year=2024)


class TestPrimaryCredit:
    """Test the kind-independent accessors."""

    def test_cd_credit_is_artist(self):
        record = CDRecord(title="OK Computer", artist="Radiohead", duration_minutes=53)
        assert record.primary_credit == "Radiohead"
        assert record.length_minutes == 53

    def test_dvd_credit_is_director(self):
        record = DVDRecord(title="Inception")
        record.primary_credit = "Christopher Nolan"
        record.length_minutes = 148
        assert record.director == "Christopher Nolan"
        assert record.runtime_minutes == 148

    def test_display_name(self):
        assert CDRecord(title="Blue", artist="Joni Mitchell").get_display_name() == '"Blue" by Joni Mitchell'
        assert DVDRecord(title="Heat", director="Michael Mann").get_display_name() == \
            '"Heat" directed by Michael Mann'


class TestPrepared:
    """Test normalisation before saving."""

    def test_requires_title_and_credit(self):
        with pytest.raises(ValidationError, match="title and artist"):
            CDRecord(title="Blue").prepared(2024)
        with pytest.raises(ValidationError, match="title and director"):
            DVDRecord(title="  ", director="Someone").prepared(2024)

    def test_defaults(self):
        prepared = CDRecord(title=" Blue ", artist="Joni Mitchell", genre=" ").prepared(2024)
        assert prepared.title == "Blue"
        assert prepared.year == 2024
        assert prepared.genre == "Unknown"

    def test_empty_optional_values_are_dropped(self):
        prepared = DVDRecord(
            title="Heat", director="Michael Mann", barcode=" ", notes="", rating=" ", runtime_minutes=0
        ).prepared(2024)
        assert prepared.barcode is None
        assert prepared.notes is None
        assert prepared.rating is None
        assert prepared.runtime_minutes is None

    def test_year_out_of_range(self):
        with pytest.raises(ValidationError):
            CDRecord(title="Blue", artist="Joni Mitchell", year=1850).prepared(2024)

    def test_source_record_is_untouched(self):
        record = CDRecord(title=" Blue ", artist="Joni Mitchell")
        record.prepared(2024)
        assert record.title == " Blue "


class TestDocuments:
    """Test the record <-> document mapping."""

    def test_cd_document_keys(self):
        record = CDRecord(
            title="Blue", artist="Joni Mitchell", year=1971, genre="Folk",
            barcode="075992719927", cover_url="http://img", duration_minutes=36,
        )
        assert record.to_document() == {
            "title": "Blue",
            "artist": "Joni Mitchell",
            "year": 1971,
            "genre": "Folk",
            "barcode": "075992719927",
            "coverUrl": "http://img",
            "duration": 36,
        }

    def test_dvd_document_omits_empty_values(self):
        record = DVDRecord(title="Heat", director="Michael Mann", year=1995, genre="Crime", rating="15")
        document = record.to_document()
        assert document["rating"] == "15"
        assert "runtime" not in document
        assert "barcode" not in document
        assert "notes" not in document

    def test_date_added_in_document_but_not_in_update(self):
        added = datetime(2024, 3, 1, tzinfo=timezone.utc)
        record = CDRecord(title="Blue", artist="Joni Mitchell", date_added=added)
        assert record.to_document()["dateAdded"] == added
        assert "dateAdded" not in record.update_fields()

    def test_from_document(self):
        record = DVDRecord.from_document("abc", {
            "title": "Heat",
            "director": "Michael Mann",
            "year": "1995",
            "runtime": 170,
            "dateAdded": "2024-03-01T10:00:00+00:00",
        })
        assert record.id == "abc"
        assert record.year == 1995
        assert record.runtime_minutes == 170
        assert record.date_added == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)

    def test_from_document_without_date_added(self):
        record = CDRecord.from_document("abc", {"title": "Blue", "artist": "Joni Mitchell"})
        assert record.date_added is not None

    def test_from_document_date_without_offset_is_utc(self):
        record = CDRecord.from_document("abc", {
            "title": "Blue", "artist": "Joni Mitchell", "dateAdded": "2024-01-01T10:00:00",
        })
        assert record.date_added == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)

    def test_from_document_naive_datetime_is_utc(self):
        record = CDRecord.from_document("abc", {
            "title": "Blue", "artist": "Joni Mitchell", "dateAdded": datetime(2024, 1, 1, 10),
        })
        assert record.date_added.tzinfo is timezone.utc


class TestNewRecord:
    """Test the record factory."""

    def test_aliases(self):
        record = new_record(MediaKind.DVD, title="Heat", primary_credit="Michael Mann", length_minutes=170)
        assert isinstance(record, DVDRecord)
        assert record.director == "Michael Mann"
        assert record.runtime_minutes == 170
        assert record.is_new

    def test_unknown_field(self):
        with pytest.raises(ValidationError, match="rating"):
            new_record(MediaKind.CD, title="Blue", rating="PG")

    def test_rating_vocabulary(self):
        assert DVD_RATINGS == ["U", "PG", "12", "12A", "15", "18", "R18", "TBC", "Unrated"]
