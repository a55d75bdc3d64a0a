"""
FastAPI application for the code execution service.

This module configures logging, loads the configuration, builds the
language registry and the executor, sweeps leftovers from a previous run
and registers the HTTP routes.  ``execute`` blocks on a child process, so
it is dispatched to Starlette's threadpool to keep the event loop free.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from ..config import Config
from ..executor import CodeExecutor, ExecutorError, default_registry, sweep_orphans
from ..models import ErrorResponse, ExecuteRequest, ExecuteResponse, HealthResponse, LanguagesResponse


logger = logging.getLogger("codelab")

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("[codelab] %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


config = Config.from_env()

logger.setLevel(config.log_level)

logger.info(
    "Loaded config: temp_dir=%s, allowed_langs=%s, max_output_bytes=%s",
    config.temp_dir,
    config.allowed_langs or "all",
    config.max_output_bytes,
)

TEMP_DIR_BASE = Path(config.temp_dir)
TEMP_DIR_BASE.mkdir(parents=True, exist_ok=True)

if config.sweep_on_startup:
    sweep_orphans(TEMP_DIR_BASE, config.orphan_max_age_seconds)

registry = default_registry()
if config.allowed_langs:
    registry = registry.restrict(config.allowed_langs)

executor = CodeExecutor(registry, TEMP_DIR_BASE, max_output_bytes=config.max_output_bytes)


app = FastAPI(title="CodeLab Execution Service", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed bodies with the service's own error shape."""
    if any(err.get("type") == "json_invalid" for err in exc.errors()):
        message = "Invalid JSON"
    else:
        message = "Language and code are required"
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Return a simple health check response."""
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc))


@app.get("/languages", response_model=LanguagesResponse)
async def languages() -> LanguagesResponse:
    return LanguagesResponse(languages=registry.languages())


@app.post("/execute", response_model=ExecuteResponse)
async def execute(req: ExecuteRequest):
    """Run the submitted snippet and return its captured output."""
    logger.info("[/execute] Received %s snippet (%d chars)", req.language, len(req.code))
    try:
        result = await run_in_threadpool(executor.execute, req.language, req.code)
    except ExecutorError as exc:
        logger.exception("[/execute] Unhandled error during execution: %s", exc)
        return JSONResponse(status_code=500, content=ErrorResponse(error="Execution error").model_dump())

    logger.info("[/execute] Execution finished: success=%s, error=%s", result.success, result.error)
    return ExecuteResponse(**result.to_dict())


# Mounted last so that the API routes take precedence over static files.
if config.static_dir:
    static_path = Path(config.static_dir)
    if static_path.is_dir():
        app.mount("/", StaticFiles(directory=str(static_path), html=True), name="static")
    else:
        logger.warning("Static directory %s does not exist; not serving assets", static_path)
