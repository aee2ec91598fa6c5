import json
import logging
from types import SimpleNamespace

from starlette.requests import Request
from starlette.responses import Response

from app.craftops.middleware.observability import build_request_log_payload


def test_build_request_log_payload_uses_route_template():
    scope = {
        "type": "http",
        "method": "PUT",
        "path": "/api/raw-material-transfers/7",
        "headers": [],
        "route": SimpleNamespace(path="/api/raw-material-transfers/{transfer_id}"),
    }
    request = Request(scope)
    request.state.trace_id = "trace-1"
    request.state.error_code = "RETURN_QUANTITY_EXCEEDED"
    request.state.error_class = "AppError"
    response = Response(status_code=400)

    payload = build_request_log_payload(
        request=request,
        response=response,
        latency_ms=12.3456,
        db_time_ms=4.5678,
    )

    assert payload["event"] == "http_request"
    assert payload["trace_id"] == "trace-1"
    assert payload["route"] == "/api/raw-material-transfers/{transfer_id}"
    assert payload["method"] == "PUT"
    assert payload["status_code"] == 400
    assert payload["latency_ms"] == 12.35
    assert payload["db_time_ms"] == 4.57
    assert payload["error_code"] == "RETURN_QUANTITY_EXCEEDED"
    assert payload["error_class"] == "AppError"


def test_build_request_log_payload_without_response():
    request = Request({"type": "http", "method": "GET", "path": "/api/vendors", "headers": []})

    payload = build_request_log_payload(request=request, response=None, latency_ms=1.0, db_time_ms=None)

    assert payload["route"] == "/api/vendors"
    assert payload["status_code"] == 500
    assert payload["db_time_ms"] is None
    assert payload["error_code"] is None


def test_requests_are_logged_as_json(client, caplog):
    with caplog.at_level(logging.INFO, logger="craftops.request"):
        response = client.get("/api/transfers-that-do-not-exist")

    assert response.status_code == 404
    records = [json.loads(record.getMessage()) for record in caplog.records if record.name == "craftops.request"]
    assert records
    assert records[-1]["status_code"] == 404
    assert records[-1]["error_code"] == "NOT_FOUND"
    assert records[-1]["trace_id"] == response.headers["X-Trace-ID"]
