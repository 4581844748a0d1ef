# main.py - HTTP surface for the service request agent

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from config import MAX_BODY_BYTES, PORT, STATIC_DIR
from service_request.errors import SchemaValidationError, ServiceRequestError, Violation
from service_request.orchestrator import close_runner, get_runner
from service_request.schema import validate_overrides

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_runner()


app = FastAPI(
    title="Service Request Agent",
    description="Generates synthetic auto-repair service requests and submits them through the intake form",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    logger.info(f"{request.method} {request.url.path} - {response.status_code} - {duration_ms:.0f}ms")
    return response


# -----------------------------
# Request parsing
# -----------------------------

class PayloadTooLarge(Exception):
    pass


def _error(status_code: int, message: str, details: list | None = None) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def _read_json_body(request: Request) -> Any:
    """Size-checked JSON body. Empty body means {}."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > MAX_BODY_BYTES:
        raise PayloadTooLarge()

    # chunked uploads carry no length: count while streaming
    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > MAX_BODY_BYTES:
            raise PayloadTooLarge()
        chunks.append(chunk)

    raw = b"".join(chunks)
    if not raw.strip():
        return {}
    return json.loads(raw)


def split_control_flags(payload: dict) -> tuple[bool, dict]:
    """
    Separate transport flags from record fields.

    Returns (confidential, record_fields). confidential defaults to True.
    """
    body = dict(payload)
    confidential = body.pop("confidential", True)
    if not isinstance(confidential, bool):
        raise SchemaValidationError([Violation("confidential", "Expected a boolean")])
    return confidential, body


# -----------------------------
# Routes
# -----------------------------

@app.get("/")
def index():
    """Serves the intake form"""
    return FileResponse(STATIC_DIR / "index.html")


@app.post("/run")
async def run_endpoint(request: Request):
    """
    Generate a service request, apply overrides, submit it through the form.

    Body: any subset of ServiceRequest fields (camelCase) plus
      confidential: bool (default true) - true returns only the customer name.
    Empty body is allowed - everything is generated.

    200 {success: true, serviceRequest: str | ServiceRequest}
    400 {success: false, error, details?}  bad JSON, unknown fields, field rules
    413 {success: false, error}            body over MAX_BODY_BYTES
    500 {success: false, error}            generation / validation / form failure
    """
    try:
        payload = await _read_json_body(request)
    except PayloadTooLarge:
        return _error(413, f"Request body exceeds {MAX_BODY_BYTES} bytes")
    except ValueError:
        return _error(400, "Invalid JSON in request body")

    if not isinstance(payload, dict):
        return _error(400, "Request body must be a JSON object")

    try:
        confidential, fields = split_control_flags(payload)
        overrides = validate_overrides(fields)
    except SchemaValidationError as e:
        return _error(400, str(e), e.details())

    try:
        service_request = await get_runner().run(overrides)
    except ServiceRequestError as e:
        return _error(500, str(e))
    except Exception:  # noqa: BLE001
        logger.exception("Unhandled error during run")
        return _error(500, "Internal server error")

    if confidential:
        return {"success": True, "serviceRequest": service_request.customer_name}
    return {"success": True, "serviceRequest": service_request.to_wire()}


if __name__ == "__main__":
    import uvicorn

    print(f"Agent API listening on http://localhost:{PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
