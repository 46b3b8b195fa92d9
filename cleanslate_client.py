"""Clean Slate API client.

A thin wrapper around the Clean Slate REST API built on ``requests``.
It is meant for scripts and integrations (a booking front-end, an ops
notebook) that talk to a running server.

Every public method returns a tuple ``(data, error)``.  On success
``data`` holds the decoded JSON response and ``error`` is ``None``; on
failure ``data`` is ``None`` (or an empty list for listings) and
``error`` is a dictionary with ``status_code`` and ``message``.  The
client never raises for HTTP or connection errors.

Typical use::

    api = CleanSlateAPI(base_url="http://localhost:8000")
    token, err = api.issue_token("customer", user_id=customer_id)
    api.api_key = token["access_token"]
    booking, err = api.create_booking({...})
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class CleanSlateAPI:
    """Client for the Clean Slate marketplace API (v1)."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        prefix: str = "/api/v1",
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Server root, e.g. ``http://localhost:8000``.
            api_key: Optional bearer token sent in the ``Authorization``
                header.  May be set later via :attr:`api_key`.
            session: Optional requests session; one is created otherwise.
            prefix: Path prefix of the API version.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/") + prefix
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request and return ``(data, error)``."""
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": str(message)}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def issue_token(
        self, role: str, user_id: Optional[str] = None, admin_secret: Optional[str] = None
    ) -> Result:
        """Request a development token for ``role`` acting as ``user_id``.

        Admin tokens need ``admin_secret`` unless the server runs in debug mode.
        """
        body: Dict[str, Any] = {"role": role, "user_id": user_id}
        if admin_secret:
            body["admin_secret"] = admin_secret
        return self._request("POST", "/auth/token", json_body=body)

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------
    def create_booking(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/bookings", json_body=payload)

    def list_my_bookings(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/bookings/me")
        return (data or []), error

    def list_bookings(
        self, status: Optional[str] = None, limit: Optional[int] = None, offset: int = 0
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """All bookings (admin token required)."""
        params: Dict[str, Any] = {"offset": offset}
        if status:
            params["status"] = status
        if limit is not None:
            params["limit"] = limit
        data, error = self._request("GET", "/bookings", params=params)
        return (data or []), error

    def get_booking(self, booking_id: str) -> Result:
        return self._request("GET", f"/bookings/{booking_id}")

    def update_booking_status(self, booking_id: str, status: str, version: Optional[int] = None) -> Result:
        body: Dict[str, Any] = {"status": status}
        if version is not None:
            body["version"] = version
        return self._request("POST", f"/bookings/{booking_id}/status", json_body=body)

    def review_booking(self, booking_id: str, rating: int, review: str = "") -> Result:
        return self._request(
            "POST", f"/bookings/{booking_id}/review", json_body={"rating": rating, "review": review}
        )

    # ------------------------------------------------------------------
    # Workers, catalog and matching
    # ------------------------------------------------------------------
    def check_availability(self, worker_id: str, start: datetime, duration_minutes: int) -> Result:
        return self._request(
            "GET",
            f"/workers/{worker_id}/availability",
            params={"start": start.isoformat(), "duration_minutes": duration_minutes},
        )

    def quote(self, worker_id: str, service_item_ids: List[str]) -> Result:
        return self._request(
            "POST", "/catalog/quote", json_body={"worker_id": worker_id, "service_item_ids": service_item_ids}
        )

    def match_worker(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/matching", json_body=payload)
