import json

from tourbook.main import OTP_SWEEP_JOB_ID, build_scheduler


def test_readyz_reports_missing_database(client):
    res = client.get("/readyz")
    assert res.status_code == 503
    assert res.json() == {"status": "unavailable", "database": "down"}


def test_unknown_route_uses_error_envelope(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Not Found", "code": "NOT_FOUND"}


def test_sweep_disabled_with_zero_interval():
    assert build_scheduler(0) is None


def test_sweep_job_is_registered():
    scheduler = build_scheduler(30)
    job = scheduler.get_job(OTP_SWEEP_JOB_ID)
    assert job is not None
    assert job.trigger.interval.total_seconds() == 30


def test_validation_error_uses_error_envelope(client):
    body = client.post("/api/auth/send-otp", json={}).json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["error"] == "Missing required fields: phone"
    assert body["detail"][0]["loc"] == ["body", "phone"]


async def test_unexpected_error_uses_error_envelope():
    from starlette.requests import Request

    from tourbook.handlers import handle_unexpected_error

    request = Request({"type": "http", "method": "GET", "path": "/boom", "headers": [], "query_string": b""})
    res = await handle_unexpected_error(request, KeyError("missing"))

    assert res.status_code == 500
    body = json.loads(res.body)
    assert body["success"] is False
    assert body["code"] == "INTERNAL_ERROR"
    assert body["error"] == "Internal server error"
    assert body["details"] == "KeyError: 'missing'"
