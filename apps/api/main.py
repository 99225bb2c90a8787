"""FastAPI wrapper for the reverse-format scanner."""

from __future__ import annotations

import importlib.metadata
import json
import logging
import os
import time
import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.scan.models import CompiledPattern
from core.scan.scanner import Scanner, compile_cached
from core.scan.targets import list_target_types, make_targets
from core.scan.verbs import list_supported_verbs
from core.utils.errors import BadArgumentError, InternalInconsistencyError, ScanError

app = FastAPI(title="unprintf API", version="0.1.0")
logger = logging.getLogger("unprintf.api")

_DEFAULT_MAX_INPUT_CHARS = 64 * 1024
_REQUEST_ID_HEADER = "X-Unprintf-Request-Id"


class ScanRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    format: str
    input: str
    targets: list[str] = Field(default_factory=list)


class ExplainRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    format: str
    input: str


class ApiRequestError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail or {}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage="middleware",
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault(_REQUEST_ID_HEADER, request_id)
    return response


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/meta")
async def meta_v1(request: Request) -> JSONResponse:
    """Supported verbs and target types."""

    request_id = _request_id_from_request(request)
    payload = {
        "supported_verbs": list_supported_verbs(),
        "supported_target_types": list_target_types(),
        "version": app.version,
        "package_version": _package_version(),
    }
    return JSONResponse(status_code=200, headers={_REQUEST_ID_HEADER: request_id}, content=payload)


@app.post("/v1/scan")
async def scan_v1(request: Request) -> JSONResponse:
    """Scan one input and return the captured values in verb order."""

    request_started = time.perf_counter()
    request_id = _request_id_from_request(request)
    failure_stage = "validate_inputs"

    try:
        body = await _parse_body(request, ScanRequest)
        _check_input_limits(body.format, body.input)
        try:
            targets = make_targets(body.targets)
        except ValueError as exc:
            raise ApiRequestError(
                status_code=400,
                error_code="INVALID_TARGET_TYPE",
                message=str(exc),
                detail={"supported_target_types": list_target_types()},
            ) from exc

        _log_event(
            logging.INFO,
            "start",
            request_id,
            endpoint="scan",
            format_chars=len(body.format),
            input_chars=len(body.input),
            target_count=len(targets),
        )

        failure_stage = "compile"
        pattern = _compile_with_api_error(body.format)
        failure_stage = "scan"
        try:
            Scanner.from_pattern(pattern).scan(body.input, targets)
        except ScanError as exc:
            raise _scan_error_to_api_error(exc) from exc

    except ApiRequestError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code=exc.error_code,
            status_code=exc.status_code,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
            detail=exc.detail,
        )

    values = [target.value for target in targets]
    _log_event(
        logging.INFO,
        "done",
        request_id,
        endpoint="scan",
        value_count=len(values),
        total_ms=_elapsed_ms(request_started),
    )
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content={"values": values, "request_id": request_id},
    )


@app.post("/v1/explain")
async def explain_v1(request: Request) -> JSONResponse:
    """Return the match trace for one input without assigning values."""

    request_id = _request_id_from_request(request)
    failure_stage = "validate_inputs"

    try:
        body = await _parse_body(request, ExplainRequest)
        _check_input_limits(body.format, body.input)
        failure_stage = "compile"
        pattern = _compile_with_api_error(body.format)
    except ApiRequestError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code=exc.error_code,
            status_code=exc.status_code,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
            detail=exc.detail,
        )

    trace = Scanner.from_pattern(pattern).explain(body.input)
    _log_event(logging.INFO, "done", request_id, endpoint="explain", matched=trace.error is None)
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=trace.model_dump(mode="json"),
    )


async def _parse_body(request: Request, model: type[BaseModel]) -> Any:
    try:
        raw = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_JSON",
            message="request body must be valid JSON",
        ) from exc

    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_REQUEST",
            message="request body does not match schema",
            detail={"errors": json.loads(exc.json(include_url=False))},
        ) from exc


def _compile_with_api_error(format: str) -> CompiledPattern:
    try:
        return compile_cached(format)
    except ScanError as exc:
        raise _scan_error_to_api_error(exc.with_context("parsing format")) from exc


def _scan_error_to_api_error(exc: ScanError) -> ApiRequestError:
    if isinstance(exc, BadArgumentError):
        status_code = 400
    elif isinstance(exc, InternalInconsistencyError):
        status_code = 500
    else:
        status_code = 422

    detail: dict[str, Any] = {}
    if exc.target_index is not None:
        detail["target_index"] = exc.target_index
    return ApiRequestError(
        status_code=status_code,
        error_code=exc.code,
        message=str(exc),
        detail=detail,
    )


def _check_input_limits(format: str, text: str) -> None:
    max_chars = _max_input_chars()
    for field_name, value in (("format", format), ("input", text)):
        if len(value) > max_chars:
            raise ApiRequestError(
                status_code=413,
                error_code="PAYLOAD_TOO_LARGE",
                message=f"{field_name} exceeds max length",
                detail={"field": field_name, "max_chars": max_chars},
            )


def _max_input_chars() -> int:
    raw = os.getenv("UNPRINTF_MAX_INPUT_CHARS")
    if raw is None:
        return _DEFAULT_MAX_INPUT_CHARS
    try:
        parsed = int(raw)
    except ValueError:
        return _DEFAULT_MAX_INPUT_CHARS
    return parsed if parsed > 0 else _DEFAULT_MAX_INPUT_CHARS


def _package_version() -> str | None:
    try:
        return importlib.metadata.version("unprintf")
    except importlib.metadata.PackageNotFoundError:
        return None


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    generated = uuid.uuid4().hex
    request.state.request_id = generated
    return generated


def _error_response(
    *,
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload_detail = dict(detail or {})
    payload_detail["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        headers={_REQUEST_ID_HEADER: request_id},
        content={
            "error_code": error_code,
            "message": message,
            "detail": payload_detail,
        },
    )


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _log_event(level: int, event: str, request_id: str, **fields: Any) -> None:
    payload = {
        "event": event,
        "request_id": request_id,
        **fields,
    }
    logger.log(level, _dump_json(payload))
