"""Tests for the cinema API client and the remote schedule store."""

import asyncio
import pytest
from datetime import date, time
from unittest.mock import MagicMock, patch

import requests

from cinesched.engine.errors import UnknownEntryError
from cinesched.integrations.cinema_api import CinemaApiClient, CinemaApiError, RemoteScheduleStore
from cinesched.models.batch import BatchSpec
from cinesched.models.identity import PersistedId
from cinesched.models.schedule_entry import ScheduleEntryPayload, ScheduleFilter

SHOWTIME = {
    "id": 5,
    "movie_id": 1,
    "room_id": 2,
    "theater_id": 1,
    "show_date": "2024-06-01",
    "start_time": "09:00:00",
    "base_price": 60000,
    "status": "AVAILABLE",
    "movie_duration_min": 128,
    "pre_show_min": 20,
    "post_show_min": 15,
    "movie_title": "Dune",
    "room_name": "Room B",
}

PAYLOAD = ScheduleEntryPayload(
    movie_id=1, room_id=2, theater_id=1, show_date=date(2024, 6, 1), start_time=time(9, 0), base_price=60000
)


def _response(status_code=200, json_data=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = b"" if json_data is None else b"{}"
    response.json.return_value = json_data
    response.text = ""
    return response


class TestCinemaApiClient:
    """Test request building and error mapping."""

    def test_auth_header_from_env(self, monkeypatch):
        monkeypatch.setenv("CINEMA_API_TOKEN", "test_token_value")
        client = CinemaApiClient(base_url="http://cinema.test/")
        assert client.headers["Authorization"] == "Bearer test_token_value"
        assert client.base_url == "http://cinema.test"

    def test_no_token(self, monkeypatch):
        monkeypatch.delenv("CINEMA_API_TOKEN", raising=False)
        client = CinemaApiClient(base_url="http://cinema.test")
        assert "Authorization" not in client.headers

    def test_list_showtimes(self):
        client = CinemaApiClient(base_url="http://cinema.test", timeout=3)
        with patch("cinesched.integrations.cinema_api.requests.request", return_value=_response(200, [SHOWTIME])) as req:
            entries = client.list_showtimes(
                ScheduleFilter(start_date=date(2024, 6, 1), end_date=date(2024, 6, 2), room_ids=[2])
            )

        args, kwargs = req.call_args
        assert args == ("GET", "http://cinema.test/showtimes")
        assert kwargs["params"] == {"start_date": "2024-06-01", "end_date": "2024-06-02", "room_ids": [2]}
        assert kwargs["timeout"] == 3
        assert entries[0].id == PersistedId(value=5)
        assert entries[0].start_time == time(9, 0)
        assert entries[0].movie_duration_min == 128

    def test_create_sends_json_payload(self):
        client = CinemaApiClient(base_url="http://cinema.test")
        with patch("cinesched.integrations.cinema_api.requests.request", return_value=_response(201, SHOWTIME)) as req:
            entry = client.create_showtime(PAYLOAD)

        _, kwargs = req.call_args
        assert kwargs["json"]["show_date"] == "2024-06-01"
        assert kwargs["json"]["start_time"] == "09:00:00"
        assert entry.id == PersistedId(value=5)

    def test_http_error_carries_status(self):
        client = CinemaApiClient(base_url="http://cinema.test")
        error = _response(409, {"detail": "Room is occupied by movie 'Dune' from 09:00 to 11:43"})
        with patch("cinesched.integrations.cinema_api.requests.request", return_value=error):
            with pytest.raises(CinemaApiError) as exc:
                client.create_showtime(PAYLOAD)
        assert exc.value.status_code == 409
        assert "occupied" in str(exc.value)

    def test_error_body_that_is_not_an_object(self):
        client = CinemaApiClient(base_url="http://cinema.test")
        with patch("cinesched.integrations.cinema_api.requests.request", return_value=_response(400, ["bad date"])):
            with pytest.raises(CinemaApiError) as exc:
                client.create_showtime(PAYLOAD)
        assert exc.value.status_code == 400
        assert exc.value.detail == ["bad date"]

        with patch("cinesched.integrations.cinema_api.requests.request", return_value=_response(500, "boom")):
            with pytest.raises(CinemaApiError) as exc:
                client.list_movies()
        assert exc.value.detail == "boom"

    def test_network_error_is_wrapped(self):
        client = CinemaApiClient(base_url="http://cinema.test")
        with patch(
            "cinesched.integrations.cinema_api.requests.request",
            side_effect=requests.ConnectionError("refused"),
        ):
            with pytest.raises(CinemaApiError) as exc:
                client.list_movies()
        assert exc.value.status_code is None

    def test_delete_returns_nothing(self):
        client = CinemaApiClient(base_url="http://cinema.test")
        with patch("cinesched.integrations.cinema_api.requests.request", return_value=_response(204)) as req:
            assert client.delete_showtime(5) is None
        assert req.call_args[0] == ("DELETE", "http://cinema.test/showtimes/5")


class TestRemoteScheduleStore:
    """Test the async adapter."""

    def test_delegates_to_client(self):
        client = MagicMock()
        client.batch_create.return_value = {"total_created": 0}
        store = RemoteScheduleStore(client)
        spec = BatchSpec(movie_id=1, room_ids=[2], start_date=date(2024, 6, 1), end_date=date(2024, 6, 1), time_slots=[time(9, 0)])

        asyncio.run(store.batch_create(spec))
        asyncio.run(store.delete_entry(PersistedId(value=5)))

        client.batch_create.assert_called_once_with(spec)
        client.delete_showtime.assert_called_once_with(5)

    def test_not_found_becomes_unknown_entry(self):
        client = MagicMock()
        client.update_showtime.side_effect = CinemaApiError("missing", status_code=404)
        client.delete_showtime.side_effect = CinemaApiError("missing", status_code=404)
        store = RemoteScheduleStore(client)

        with pytest.raises(UnknownEntryError):
            asyncio.run(store.update_entry(PersistedId(value=5), PAYLOAD))
        with pytest.raises(UnknownEntryError):
            asyncio.run(store.delete_entry(PersistedId(value=5)))

    def test_other_errors_propagate(self):
        client = MagicMock()
        client.create_showtime.side_effect = CinemaApiError("occupied", status_code=409)
        store = RemoteScheduleStore(client)
        with pytest.raises(CinemaApiError):
            asyncio.run(store.create_entry(PAYLOAD))
