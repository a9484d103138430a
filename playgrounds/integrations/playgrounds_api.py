"""
Playgrounds API client: REST adapter for the booking backend.

Routes (relative to {api_base_url}/api/v1/playgrounds):
    POST /public/slots               {venue_id, date, duration_minutes}
    POST /public/bookings/create     JSON body, or multipart with the CliQ receipt
    POST /public/bookings/list       {user_id}
    GET  /venues/{venue_id}

Every call resolves to {"success": True, "data": ...} or
{"success": False, "error": ...}; transport and HTTP errors are logged, not raised.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from playgrounds.config import Settings, get_settings
from playgrounds.core.submission import ENCODING_MULTIPART, Submission
from playgrounds.integrations.base import BookingBackend
from playgrounds.integrations.normalize import (
    normalize_booking_details,
    normalize_bookings,
    normalize_slots,
    normalize_venue_details,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/playgrounds"


class PlaygroundsApiClient(BookingBackend):
    def __init__(self, base_url: str, timeout: float = 30.0, language: str = "en"):
        self.base_url = f"{base_url.rstrip('/')}{API_PREFIX}"
        self.timeout = timeout
        self.language = language

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PlaygroundsApiClient":
        s = settings or get_settings()
        return cls(s.api_base_url, timeout=s.request_timeout, language=s.language)

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Language": self.language,
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        label: str,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers=self._headers(headers),
                    **kwargs,
                )

            if not resp.is_success:
                logger.error("%s: %s %s", label, resp.status_code, resp.text)
                return {"success": False, "error": f"http_{resp.status_code}", "status": resp.status_code}

            body = resp.json() if resp.content else {}
            if isinstance(body, dict) and body.get("success") is False:
                error = body.get("error") or body.get("message") or label
                logger.warning("%s: backend reported failure: %s", label, error)
                return {"success": False, "error": str(error)}

            return {"success": True, "data": body}

        except Exception as e:
            logger.error("%s: %s", label, e)
            return {"success": False, "error": str(e)}

    async def fetch_slots(self, venue_id: str, date: str, duration_minutes: int) -> dict:
        result = await self._request(
            "POST",
            "/public/slots",
            "Failed to fetch playground slots",
            json={"venue_id": venue_id, "date": date, "duration_minutes": duration_minutes},
        )
        if result["success"]:
            result["data"] = normalize_slots(result["data"])
        return result

    async def create_booking(self, submission: Submission, idempotency_key: str | None = None) -> dict:
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None

        try:
            if submission.encoding == ENCODING_MULTIPART:
                body = submission.to_multipart()
                kwargs: dict[str, Any] = {"data": body.fields, "files": body.files}
            else:
                kwargs = {"json": submission.to_json()}
        except Exception as e:
            logger.error("Failed to encode booking for venue %s: %s", submission.venue_id, e)
            return {"success": False, "error": str(e)}

        result = await self._request(
            "POST",
            "/public/bookings/create",
            "Failed to create booking",
            headers=headers,
            **kwargs,
        )
        if result["success"]:
            result["data"] = normalize_booking_details(result["data"])
        return result

    async def get_venue(self, venue_id: str) -> dict:
        result = await self._request("GET", f"/venues/{quote(str(venue_id), safe='')}", "Failed to fetch playground venue")
        if result["success"]:
            venue = normalize_venue_details(result["data"])
            if venue is None:
                return {"success": False, "error": "venue_not_found"}
            result["data"] = venue
        return result

    async def list_bookings(self, user_id: str) -> dict:
        result = await self._request(
            "POST",
            "/public/bookings/list",
            "Failed to fetch bookings",
            json={"user_id": user_id},
        )
        if result["success"]:
            result["data"] = normalize_bookings(result["data"])
        return result
