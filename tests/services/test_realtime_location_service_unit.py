# tests/services/test_realtime_location_service_unit.py
"""
Unit тесты для LocationIngestService.
"""

import logging
import threading
from unittest.mock import MagicMock, patch

import pytest

from src.core.directory.service import LocationDirectory
from src.core.errors import OutOfBoundsError
from src.core.geo.models import Point
from src.services.realtime_location.service import LocationIngestService
from src.shared.models.location_dto import CoordinatesReport


@pytest.mark.asyncio
async def test_update_location(location_service: LocationIngestService):
    record = await location_service.update_location("42", 40.0, -73.0)

    assert record.id == "42"
    assert record.position == Point(40.0, -73.0)
    assert location_service.directory.get("42") == record


@pytest.mark.asyncio
async def test_update_location_rejects_invalid_point(location_service: LocationIngestService):
    with patch.object(logging.Logger, "warning") as mock_warning:
        with pytest.raises(OutOfBoundsError):
            await location_service.update_location("42", 95.0, 0.0)

        mock_warning.assert_called_once()

    assert "42" not in location_service.directory
    assert (await location_service.get_stats())["total_updates"] == 0


@pytest.mark.asyncio
async def test_update_location_delegates_to_directory():
    # Mock Directory
    directory = MagicMock(spec=LocationDirectory)
    service = LocationIngestService(directory, default_range_km=0.025)

    await service.update_location("7", 10.0, 20.0)

    directory.report.assert_called_once_with("7", Point(10.0, 20.0))


@pytest.mark.asyncio
async def test_find_nearby(location_service: LocationIngestService):
    await location_service.update_location("A", 40.0, -73.0)
    await location_service.update_location("B", 40.0001, -73.0001)
    await location_service.update_location("C", 41.0, -74.0)

    result = await location_service.find_nearby("A", 1.0)

    assert result == [{"id": "B", "lat": 40.0001, "lon": -73.0001}]
    assert await location_service.find_nearby("A", 0.001) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("range_km", [None, 0, 0.0])
async def test_find_nearby_falls_back_to_default_range(range_km):
    directory = MagicMock(spec=LocationDirectory)
    directory.find_nearby.return_value = []
    service = LocationIngestService(directory, default_range_km=0.025)

    await service.find_nearby("A", range_km)

    directory.find_nearby.assert_called_once_with("A", 0.025)


@pytest.mark.asyncio
async def test_default_range_matches_explicit(location_service: LocationIngestService):
    await location_service.update_location("A", 40.0, -73.0)
    await location_service.update_location("B", 40.0001, -73.0001)
    await location_service.update_location("C", 41.0, -74.0)

    assert await location_service.find_nearby("A") == await location_service.find_nearby("A", 0.025)


@pytest.mark.asyncio
async def test_find_nearby_unknown_user(location_service: LocationIngestService):
    assert await location_service.find_nearby("ghost", 100.0) == []


@pytest.mark.asyncio
async def test_update_locations_batch(location_service: LocationIngestService):
    # model_construct пропускает валидацию: точка вне мира доходит до сервиса
    updates = [
        CoordinatesReport(userID="1", latitude=10.0, longitude=10.0),
        CoordinatesReport.model_construct(user_id="2", latitude=100.0, longitude=10.0),
        CoordinatesReport.model_construct(user_id="3", latitude=11.0, longitude=-200.0),
        CoordinatesReport(userID=4, latitude=-10.0, longitude=-10.0),
    ]

    with patch.object(logging.Logger, "error") as mock_error:
        result = await location_service.update_locations_batch(updates)
        mock_error.assert_called_once()

    assert result["success_count"] == 2
    assert result["error_count"] == 2
    assert [e["user_id"] for e in result["errors"]] == ["2", "3"]
    assert len(location_service.directory) == 2


@pytest.mark.asyncio
async def test_update_locations_batch_without_errors(location_service: LocationIngestService):
    result = await location_service.update_locations_batch([
        CoordinatesReport(userID="1", latitude=10.0, longitude=10.0),
    ])

    assert result == {"success_count": 1, "error_count": 0, "errors": None}


@pytest.mark.asyncio
async def test_get_and_remove_user(location_service: LocationIngestService):
    await location_service.update_location("A", 40.0, -73.0)

    record = await location_service.get_user_location("A")
    assert record is not None and record.lat == 40.0

    assert await location_service.remove_user("A") is True
    assert await location_service.get_user_location("A") is None
    assert await location_service.remove_user("A") is False


@pytest.mark.asyncio
async def test_get_stats(location_service: LocationIngestService):
    await location_service.update_location("A", 40.0, -73.0)
    await location_service.update_location("A", 40.1, -73.0)
    await location_service.update_location("B", 41.0, -74.0)

    stats = await location_service.get_stats()

    assert stats["total_updates"] == 3
    assert stats["unique_users"] == 2
    assert stats["tracked_users"] == 2
    assert stats["index_nodes"] == 1
    assert stats["index_depth"] == 0


@pytest.mark.asyncio
async def test_remove_user_drops_update_counter(location_service: LocationIngestService):
    await location_service.update_location("A", 40.0, -73.0)
    await location_service.update_location("B", 41.0, -74.0)

    await location_service.remove_user("A")
    stats = await location_service.get_stats()

    assert stats["unique_users"] == 1
    assert stats["tracked_users"] == 1
    assert stats["total_updates"] == 2


@pytest.mark.asyncio
async def test_directory_calls_leave_event_loop_thread():
    # Блокирующие вызовы справочника не должны выполняться в потоке цикла событий
    loop_thread = threading.get_ident()
    directory = LocationDirectory()
    calling_threads = []

    def spy(method):
        def wrapper(*args, **kwargs):
            calling_threads.append(threading.get_ident())
            return method(*args, **kwargs)
        return wrapper

    for name in ("report", "find_nearby", "get", "remove", "stats"):
        setattr(directory, name, spy(getattr(directory, name)))

    service = LocationIngestService(directory, default_range_km=0.025)
    await service.update_location("A", 40.0, -73.0)
    await service.find_nearby("A", 1.0)
    await service.get_user_location("A")
    await service.get_stats()
    await service.remove_user("A")

    assert len(calling_threads) == 5
    assert loop_thread not in calling_threads
