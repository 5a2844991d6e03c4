"""
Booking store backed by the hosted database's REST interface (PostgREST).
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..domain.exceptions import BulkInsertError, ConflictQueryError, StorageError
from ..domain.models import Booking, Room, format_time

logger = logging.getLogger(__name__)


class SupabaseBookingStore:
    """
    Client for the ``bookings`` and ``rooms`` tables of the hosted project.

    Requests are sent with the service role key, so row level security does
    not apply. Blocking HTTP calls are moved to a worker thread.
    """

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        url: str,
        service_role_key: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the store client.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            service_role_key: Service role API key
            timeout: Per-request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.base_url = url.rstrip("/") + self.REST_PATH
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
            "Content-Type": "application/json",
        }

    async def get_room(self, room_id: str) -> Optional[Room]:
        rows = await asyncio.to_thread(
            self._get,
            "rooms",
            {"id": f"eq.{room_id}", "select": "id,name,status,available_time"},
            StorageError,
        )
        return Room.from_row(rows[0]) if rows else None

    async def find_overlapping(self, booking: Booking) -> List[Booking]:
        """
        Fetch bookings of the same room and date whose times overlap.

        Raises:
            ConflictQueryError: If the query fails or returns unreadable rows
        """
        params = {
            "select": "*",
            "room_id": f"eq.{booking.room_id}",
            "date": f"eq.{booking.date.format('YYYY-MM-DD')}",
            "start_time": f"lt.{format_time(booking.end_time)}",
            "end_time": f"gt.{format_time(booking.start_time)}",
        }
        rows = await asyncio.to_thread(self._get, "bookings", params, ConflictQueryError)

        try:
            return [Booking.from_row(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise ConflictQueryError(f"Could not parse booking row: {exc}") from exc

    async def insert_many(self, bookings: Sequence[Booking]) -> int:
        """
        Insert all bookings with a single request.

        PostgREST runs a multi-row insert as one statement, so either every
        row is stored or none is.

        Raises:
            BulkInsertError: If the insert is rejected
        """
        if not bookings:
            return 0

        payload = [booking.to_row() for booking in bookings]
        inserted = await asyncio.to_thread(self._post, "bookings", payload)
        return len(inserted)

    def _get(
        self,
        table: str,
        params: Dict[str, str],
        error_type: type,
    ) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{table}"

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()

        except requests.exceptions.RequestException as e:
            raise error_type(self._describe_failure(e)) from e
        except ValueError as e:
            raise error_type(f"Invalid JSON from {table} query: {e}") from e

        if not isinstance(rows, list):
            raise error_type(f"Unexpected response from {table} query: {rows!r}")
        return rows

    def _post(self, table: str, payload: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{table}"
        headers = {**self.headers, "Prefer": "return=representation"}

        try:
            response = self.session.post(
                url,
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            rows = response.json()

        except requests.exceptions.RequestException as e:
            raise BulkInsertError(self._describe_failure(e)) from e
        except ValueError as e:
            raise BulkInsertError(f"Invalid JSON from {table} insert: {e}") from e

        if not isinstance(rows, list):
            raise BulkInsertError(f"Unexpected response from {table} insert: {rows!r}")
        return rows

    @staticmethod
    def _describe_failure(exc: requests.exceptions.RequestException) -> str:
        """Prefer the database's own error message over the HTTP status line."""
        response = getattr(exc, "response", None)
        if response is not None:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                return body["message"]
        return str(exc)
