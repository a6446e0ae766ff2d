"""Cinema management API client for cinesched.

`CinemaApiClient` speaks to the showtime service over HTTP with `requests`;
`RemoteScheduleStore` wraps it as an async ScheduleStore for the engine.
"""

import asyncio
import logging
import os
from typing import List, Optional
import requests
from dotenv import load_dotenv

from cinesched.api.schemas import ShowtimeResponse
from cinesched.engine.errors import UnknownEntryError
from cinesched.models.batch import BatchCreateResult, BatchSpec
from cinesched.models.catalog import Movie, Room, Theater
from cinesched.models.identity import PersistedId
from cinesched.models.schedule_entry import ScheduleEntry, ScheduleEntryPayload, ScheduleFilter

load_dotenv()

logger = logging.getLogger(__name__)

CINEMA_API_BASE_URL = os.getenv("CINEMA_API_BASE_URL", "http://localhost:8000")
CINEMA_API_TIMEOUT_SEC = float(os.getenv("CINEMA_API_TIMEOUT_SEC", "10"))


class CinemaApiError(Exception):
    """A request to the cinema API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail=None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class CinemaApiClient:
    """Client for the cinema management API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root. If None, reads CINEMA_API_BASE_URL.
            api_token: Bearer token. If None, reads CINEMA_API_TOKEN (optional).
            timeout: Per-request timeout in seconds. If None, reads CINEMA_API_TIMEOUT_SEC.
        """
        self.base_url = (base_url or CINEMA_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else CINEMA_API_TIMEOUT_SEC
        token = api_token or os.getenv("CINEMA_API_TOKEN")
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, *, params=None, json=None):
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method, url, headers=self.headers, params=params, json=json, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise CinemaApiError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            detail = body.get("detail", body) if isinstance(body, dict) else body
            raise CinemaApiError(
                f"{method} {path} returned {response.status_code}: {detail}",
                status_code=response.status_code,
                detail=detail,
            )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def list_theaters(self) -> List[Theater]:
        return [Theater(**t) for t in self._request("GET", "/theaters")]

    def list_rooms(self, theater_id: Optional[int] = None) -> List[Room]:
        params = {"theater_id": theater_id} if theater_id is not None else None
        return [Room(**r) for r in self._request("GET", "/rooms", params=params)]

    def list_movies(self) -> List[Movie]:
        return [Movie(**m) for m in self._request("GET", "/movies")]

    def list_showtimes(self, schedule_filter: ScheduleFilter) -> List[ScheduleEntry]:
        """Fetch showtimes for a date range (and optionally some rooms)."""
        params = {
            "start_date": schedule_filter.start_date.isoformat(),
            "end_date": schedule_filter.end_date.isoformat(),
        }
        if schedule_filter.room_ids:
            params["room_ids"] = schedule_filter.room_ids
        data = self._request("GET", "/showtimes", params=params)
        return [ShowtimeResponse(**item).to_entry() for item in data]

    def create_showtime(self, payload: ScheduleEntryPayload) -> ScheduleEntry:
        data = self._request("POST", "/showtimes", json=payload.model_dump(mode="json"))
        return ShowtimeResponse(**data).to_entry()

    def update_showtime(self, showtime_id: int, payload: ScheduleEntryPayload) -> ScheduleEntry:
        data = self._request("PUT", f"/showtimes/{showtime_id}", json=payload.model_dump(mode="json"))
        return ShowtimeResponse(**data).to_entry()

    def delete_showtime(self, showtime_id: int) -> None:
        self._request("DELETE", f"/showtimes/{showtime_id}")

    def batch_create(self, spec: BatchSpec) -> BatchCreateResult:
        data = self._request("POST", "/showtimes/batch", json=spec.model_dump(mode="json"))
        return BatchCreateResult(**data)


class RemoteScheduleStore:
    """Async ScheduleStore over CinemaApiClient; blocking calls run in worker threads."""

    def __init__(self, client: Optional[CinemaApiClient] = None):
        self.client = client or CinemaApiClient()

    async def list_schedule(self, schedule_filter: ScheduleFilter) -> List[ScheduleEntry]:
        return await asyncio.to_thread(self.client.list_showtimes, schedule_filter)

    async def create_entry(self, payload: ScheduleEntryPayload) -> ScheduleEntry:
        return await asyncio.to_thread(self.client.create_showtime, payload)

    async def update_entry(self, entry_id: PersistedId, payload: ScheduleEntryPayload) -> ScheduleEntry:
        try:
            return await asyncio.to_thread(self.client.update_showtime, entry_id.value, payload)
        except CinemaApiError as e:
            if e.status_code == 404:
                raise UnknownEntryError(entry_id) from e
            raise

    async def delete_entry(self, entry_id: PersistedId) -> None:
        try:
            await asyncio.to_thread(self.client.delete_showtime, entry_id.value)
        except CinemaApiError as e:
            if e.status_code == 404:
                raise UnknownEntryError(entry_id) from e
            raise
        logger.debug(f"Deleted remote showtime {entry_id}")

    async def batch_create(self, spec: BatchSpec) -> BatchCreateResult:
        return await asyncio.to_thread(self.client.batch_create, spec)
