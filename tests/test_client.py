from datetime import datetime, timezone
from unittest.mock import MagicMock

import requests

from cleanslate_client import CleanSlateAPI


def _response(status_code=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}" if body is not None else b""
    response.json.return_value = body
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


def _client(response=None, side_effect=None):
    session = MagicMock()
    session.request.return_value = response
    session.request.side_effect = side_effect
    return CleanSlateAPI(base_url="http://api.test/", api_key="tok", session=session), session


def test_successful_call_returns_data_and_sends_token():
    api, session = _client(_response(body={"id": "b1", "status": "AwaitingWorkerConfirmation"}))

    data, error = api.create_booking({"worker_id": "w1"})

    assert error is None
    assert data["id"] == "b1"
    kwargs = session.request.call_args.kwargs
    assert kwargs["method"] == "POST"
    assert kwargs["url"] == "http://api.test/api/v1/bookings"
    assert kwargs["headers"]["Authorization"] == "Bearer tok"


def test_http_error_returns_status_and_detail():
    api, _ = _client(_response(409, body={"detail": "Worker w1 is not available"}))

    data, error = api.update_booking_status("b1", "ConfirmedByWorker", version=2)

    assert data is None
    assert error == {"status_code": 409, "message": "Worker w1 is not available"}


def test_connection_error_is_reported_without_raising():
    api, _ = _client(side_effect=requests.ConnectionError("refused"))

    bookings, error = api.list_my_bookings()

    assert bookings == []
    assert error["status_code"] is None
    assert "refused" in error["message"]


def test_availability_passes_query_parameters():
    api, session = _client(_response(body={"available": True}))
    start = datetime(2030, 3, 4, 9, tzinfo=timezone.utc)

    data, _ = api.check_availability("w1", start, 90)

    assert data == {"available": True}
    kwargs = session.request.call_args.kwargs
    assert kwargs["url"] == "http://api.test/api/v1/workers/w1/availability"
    assert kwargs["params"] == {"start": start.isoformat(), "duration_minutes": 90}


def test_admin_listing_builds_filters():
    api, session = _client(_response(body=[]))

    api.list_bookings(status="InProgress", limit=10)

    assert session.request.call_args.kwargs["params"] == {"offset": 0, "status": "InProgress", "limit": 10}


def test_issue_token_without_api_key_sends_no_authorization():
    session = MagicMock()
    session.request.return_value = _response(body={"access_token": "abc", "token_type": "bearer"})
    api = CleanSlateAPI(base_url="http://api.test", session=session)

    data, error = api.issue_token("admin")

    assert data["access_token"] == "abc"
    assert session.request.call_args.kwargs["headers"] == {}


def test_admin_token_request_carries_the_secret():
    session = MagicMock()
    session.request.return_value = _response(body={"access_token": "abc", "token_type": "bearer"})
    api = CleanSlateAPI(base_url="http://api.test", session=session)

    api.issue_token("admin", admin_secret="let-me-in")

    assert session.request.call_args.kwargs["json"] == {"role": "admin", "user_id": None, "admin_secret": "let-me-in"}
