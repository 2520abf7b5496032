"""Tests for the catalog service: saving, duplicates, browsing and statistics."""

from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock

from disc_catalog.domain.records import CDRecord, DVDRecord, MediaKind
from disc_catalog.domain.services import CatalogService, matches_query
from disc_catalog.exceptions import StoreError, ValidationError
from disc_catalog.infrastructure.repositories import InMemoryRecordRepository


@pytest.fixture
def service():
    return CatalogService({kind: InMemoryRecordRepository(kind) for kind in MediaKind})


async def add(service, record):
    outcome = await service.save(record)
    assert outcome.saved, outcome.error
    return outcome.record


class TestSave:
    """Test creating and updating records."""

    @pytest.mark.asyncio
    async def test_create(self, service):
        outcome = await service.save(CDRecord(title=" Blue ", artist="Joni Mitchell", year="1971"))

        assert outcome.saved is True
        assert outcome.created is True
        assert outcome.record.id is not None
        assert outcome.record.title == "Blue"
        assert outcome.record.genre == "Unknown"

        stored = await service.get(MediaKind.CD, outcome.record.id)
        assert stored.year == 1971

    @pytest.mark.asyncio
    async def test_validation_errors_propagate(self, service):
        with pytest.raises(ValidationError):
            await service.save(CDRecord(title="Blue"))
        assert await service.repository(MediaKind.CD).count() == 0

    @pytest.mark.asyncio
    async def test_update_keeps_id_and_date_added(self, service):
        saved = await add(service, DVDRecord(title="Heat", director="Michael Mann", year=1995))
        original_date = saved.date_added

        saved.title = "Heat (Director's Definitive Edition)"
        outcome = await service.save(saved)

        assert outcome.saved is True
        assert outcome.created is False
        stored = await service.get(MediaKind.DVD, saved.id)
        assert stored.title == "Heat (Director's Definitive Edition)"
        assert stored.date_added == original_date
        assert await service.repository(MediaKind.DVD).count() == 1

    @pytest.mark.asyncio
    async def test_store_failure_becomes_error(self):
        repository = MagicMock()
        repository.create = AsyncMock(side_effect=StoreError("write failed"))
        service = CatalogService({MediaKind.CD: repository})

        outcome = await service.save(CDRecord(title="Blue", artist="Joni Mitchell"))

        assert outcome.saved is False
        assert outcome.error == "Failed to save CD. Please try again."


class TestDuplicateBarcodes:
    """Test the duplicate barcode confirmation."""

    @pytest.mark.asyncio
    async def test_declined_duplicate_is_not_saved(self, service):
        await add(service, CDRecord(title="First", artist="A", barcode="012345678905"))
        confirm = MagicMock(return_value=False)

        outcome = await service.save(
            CDRecord(title="Second", artist="B", barcode="012345678905"), confirm_duplicate=confirm
        )

        assert outcome.saved is False
        assert outcome.cancelled is True
        assert outcome.duplicate.title == "First"
        confirm.assert_called_once()
        assert await service.repository(MediaKind.CD).count() == 1

    @pytest.mark.asyncio
    async def test_no_callback_declines(self, service):
        await add(service, CDRecord(title="First", artist="A", barcode="012345678905"))

        outcome = await service.save(CDRecord(title="Second", artist="B", barcode="012345678905"))

        assert outcome.cancelled is True
        assert await service.repository(MediaKind.CD).count() == 1

    @pytest.mark.asyncio
    async def test_confirmed_duplicate_is_saved(self, service):
        await add(service, CDRecord(title="First", artist="A", barcode="012345678905"))

        outcome = await service.save(
            CDRecord(title="Second", artist="B", barcode="012345678905"),
            confirm_duplicate=lambda existing: True,
        )

        assert outcome.saved is True
        assert await service.repository(MediaKind.CD).count() == 2

    @pytest.mark.asyncio
    async def test_async_confirmation(self, service):
        await add(service, CDRecord(title="First", artist="A", barcode="012345678905"))

        outcome = await service.save(
            CDRecord(title="Second", artist="B", barcode="012345678905"),
            confirm_duplicate=AsyncMock(return_value=True),
        )

        assert outcome.saved is True

    @pytest.mark.asyncio
    async def test_editing_does_not_match_itself(self, service):
        saved = await add(service, CDRecord(title="First", artist="A", barcode="012345678905"))
        confirm = MagicMock(return_value=False)

        saved.notes = "Signed copy"
        outcome = await service.save(saved, confirm_duplicate=confirm)

        assert outcome.saved is True
        confirm.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicates_are_per_kind(self, service):
        await add(service, CDRecord(title="Soundtrack", artist="A", barcode="012345678905"))

        outcome = await service.save(DVDRecord(title="Film", director="B", barcode="012345678905"))

        assert outcome.saved is True

    @pytest.mark.asyncio
    async def test_find_duplicate_exact_match_only(self, service):
        await add(service, CDRecord(title="First", artist="A", barcode="012345678905"))

        assert await service.find_duplicate_barcode(MediaKind.CD, "12345678905") is None
        assert await service.find_duplicate_barcode(MediaKind.CD, "") is None
        found = await service.find_duplicate_barcode(MediaKind.CD, " 012345678905 ")
        assert found.title == "First"

    @pytest.mark.asyncio
    async def test_failed_check_does_not_block_save(self):
        repository = MagicMock()
        repository.list_all = AsyncMock(side_effect=StoreError("offline"))
        repository.create = AsyncMock(return_value="new-id")
        service = CatalogService({MediaKind.CD: repository})

        outcome = await service.save(CDRecord(title="Blue", artist="Joni Mitchell", barcode="012345678905"))

        assert outcome.saved is True
        repository.create.assert_awaited_once()


class TestBrowsing:
    """Test listing, search and the dashboard queries."""

    @pytest.fixture
    def dated_repositories(self):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        cds = InMemoryRecordRepository(MediaKind.CD)
        dvds = InMemoryRecordRepository(MediaKind.DVD)
        cds._documents = {
            f"cd{i}": {
                "title": f"Album {i}", "artist": "Band", "genre": "Rock", "year": 1990 + i,
                "duration": 45, "dateAdded": base + timedelta(days=i),
            }
            for i in range(4)
        }
        dvds._documents = {
            f"dvd{i}": {
                "title": f"Film {i}", "director": "Auteur", "genre": "Drama", "year": 2000 + i,
                "runtime": 120, "dateAdded": base + timedelta(days=i, hours=12),
            }
            for i in range(3)
        }
        return {MediaKind.CD: cds, MediaKind.DVD: dvds}

    @pytest.mark.asyncio
    async def test_list_newest_first(self, dated_repositories):
        service = CatalogService(dated_repositories)

        records = await service.list_records(MediaKind.CD)

        assert [r.id for r in records] == ["cd3", "cd2", "cd1", "cd0"]

    @pytest.mark.asyncio
    async def test_list_with_search(self, dated_repositories):
        service = CatalogService(dated_repositories)

        assert [r.id for r in await service.list_records(MediaKind.CD, "album 2")] == ["cd2"]
        assert [r.id for r in await service.list_records(MediaKind.CD, "1991")] == ["cd1"]
        assert await service.list_records(MediaKind.CD, "jazz") == []

    @pytest.mark.asyncio
    async def test_recent_items_across_kinds(self, dated_repositories):
        service = CatalogService(dated_repositories)

        recent = await service.recent_items()

        assert [r.id for r in recent] == ["cd3", "dvd2", "cd2", "dvd1", "cd1"]

    @pytest.mark.asyncio
    async def test_statistics(self, dated_repositories):
        service = CatalogService(dated_repositories)

        stats = await service.statistics()

        assert stats.cd_count == 4
        assert stats.dvd_count == 3
        assert stats.total_count == 7
        assert stats.total_minutes == 4 * 45 + 3 * 120
        assert stats.total_hours == 9

    @pytest.mark.asyncio
    async def test_mixed_date_styles_sort(self, service):
        repository = service.repository(MediaKind.CD)
        repository._documents["legacy"] = {
            "title": "Blue", "artist": "Joni Mitchell", "dateAdded": "2024-01-01T10:00:00",
        }
        await add(service, CDRecord(title="Court and Spark", artist="Joni Mitchell"))

        records = await service.list_records(MediaKind.CD)
        recent = await service.recent_items()

        assert [r.title for r in records] == ["Court and Spark", "Blue"]
        assert [r.title for r in recent] == ["Court and Spark", "Blue"]

    @pytest.mark.asyncio
    async def test_statistics_empty(self, service):
        stats = await service.statistics()
        assert (stats.cd_count, stats.dvd_count, stats.total_hours) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_delete(self, service):
        saved = await add(service, CDRecord(title="Blue", artist="Joni Mitchell"))

        await service.delete(MediaKind.CD, saved.id)

        assert await service.list_records(MediaKind.CD) == []

    def test_missing_repository(self):
        with pytest.raises(StoreError):
            CatalogService({}).repository(MediaKind.DVD)

    def test_matches_query(self):
        record = CDRecord(title="Blue", artist="Joni Mitchell", genre="Folk", barcode="075992719927", year=1971)
        assert matches_query(record, "joni")
        assert matches_query(record, "FOLK")
        assert matches_query(record, "0759")
        assert matches_query(record, "   ")
        assert not matches_query(record, "rock")
