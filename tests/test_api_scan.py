from __future__ import annotations

from typing import Any

import httpx
import pytest

from apps.api.main import app


async def _post(path: str, payload: Any) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        return await client.post(path, json=payload)


@pytest.mark.anyio
async def test_healthz() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Unprintf-Request-Id"]


@pytest.mark.anyio
async def test_meta_lists_verbs_and_targets() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/v1/meta")

    assert response.status_code == 200
    payload = response.json()
    assert payload["supported_verbs"] == ["d", "s", "t"]
    assert "int32" in payload["supported_target_types"]


@pytest.mark.anyio
async def test_scan_success() -> None:
    response = await _post(
        "/v1/scan",
        {"format": "%d%% of %d is %d", "input": "50% of 100 is 50", "targets": ["int"] * 3},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["values"] == [50, 100, 50]
    assert payload["request_id"] == response.headers["X-Unprintf-Request-Id"]


@pytest.mark.anyio
async def test_scan_bad_format_returns_400() -> None:
    response = await _post(
        "/v1/scan",
        {"format": "%d%d", "input": "12", "targets": ["int", "int"]},
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["error_code"] == "BAD_ARGUMENT"
    assert payload["message"].startswith("parsing format: ")


@pytest.mark.anyio
async def test_scan_ambiguous_match_returns_422() -> None:
    response = await _post(
        "/v1/scan",
        {
            "format": "and a %d and a %d and a %d!",
            "input": "and a 1 and a 2 and a 3! and a 2 and a 3 and a 4!",
            "targets": ["int"] * 3,
        },
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "MULTIPLE_MATCHES"


@pytest.mark.anyio
async def test_scan_conversion_error_reports_target_index() -> None:
    response = await _post(
        "/v1/scan",
        {"format": "%s=%d", "input": "x=y", "targets": ["str", "int"]},
    )

    assert response.status_code == 422
    payload = response.json()
    assert payload["error_code"] == "CONVERSION_ERROR"
    assert payload["detail"]["target_index"] == 1


@pytest.mark.anyio
async def test_scan_unknown_target_type_returns_400() -> None:
    response = await _post("/v1/scan", {"format": "%d", "input": "1", "targets": ["float"]})

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_TARGET_TYPE"


@pytest.mark.anyio
async def test_scan_rejects_unknown_fields() -> None:
    response = await _post("/v1/scan", {"format": "%d", "input": "1", "extra": True})

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_REQUEST"


@pytest.mark.anyio
async def test_scan_rejects_non_utf8_body() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post(
            "/v1/scan",
            content=b'{"format": "\xff", "input": "1"}',
            headers={"content-type": "application/json"},
        )

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_JSON"


@pytest.mark.anyio
async def test_scan_rejects_oversized_input(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UNPRINTF_MAX_INPUT_CHARS", "8")

    response = await _post(
        "/v1/scan",
        {"format": "%s", "input": "way too long input", "targets": ["str"]},
    )

    assert response.status_code == 413
    assert response.json()["detail"]["field"] == "input"


@pytest.mark.anyio
async def test_explain_returns_trace() -> None:
    response = await _post("/v1/explain", {"format": "%d + %d", "input": "1 + 2"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["alignment"] == [1]
    assert [capture["text"] for capture in payload["captures"]] == ["1", "2"]
    assert payload["error"] is None
