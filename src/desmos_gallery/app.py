from __future__ import annotations

import logging
import os

import anyio
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .graph_contract import (
    DeleteResponse,
    ErrorResponse,
    GraphCreateRequest,
    GraphRecord,
    GraphUpdateRequest,
    validation_error_details,
)
from .graph_defaults import sample_graph_records
from .graph_store import GraphStore, GraphStoreError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = float(os.getenv("DESMOS_GALLERY_REQUEST_TIMEOUT_SECONDS", "15"))
MAX_REQUEST_BYTES = int(os.getenv("DESMOS_GALLERY_MAX_REQUEST_BYTES", "1048576"))

TIMED_METHODS = {"GET", "HEAD", "OPTIONS"}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def _env_bool(name: str, *, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _cors_config() -> tuple[list[str], bool]:
    raw = os.getenv("DESMOS_GALLERY_CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]
    allow_credentials = _env_bool("DESMOS_GALLERY_CORS_ALLOW_CREDENTIALS", default=False)
    if allow_credentials and "*" in origins:
        raise RuntimeError(
            "DESMOS_GALLERY_CORS_ALLOW_CREDENTIALS requires explicit non-wildcard origins."
        )
    return origins, allow_credentials


app = FastAPI(
    title="Desmos Gallery",
    description="Save, browse, edit and delete Desmos graph definitions.",
    version="1.0.0",
)

cors_origins, cors_allow_credentials = _cors_config()
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=cors_allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


graph_store = GraphStore.from_env()
if _env_bool("DESMOS_GALLERY_SEED_SAMPLES", default=False):
    graph_store.ensure_sample_graphs(sample_graph_records())


def get_graph_store() -> GraphStore:
    return graph_store


def _error_response(status_code: int, code: str, message: str, details: dict | None = None) -> JSONResponse:
    body = ErrorResponse(error=code, message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=SECURITY_HEADERS,
    )


@app.exception_handler(GraphStoreError)
async def graph_store_error_handler(request: Request, exc: GraphStoreError) -> JSONResponse:
    return _error_response(exc.status_code, exc.code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        message = "Request body is not valid JSON."
    else:
        message = "Request validation failed."
    return _error_response(400, "VALIDATION_ERROR", message, validation_error_details(errors))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "INTERNAL_ERROR", "Something went wrong!")


@app.middleware("http")
async def request_limits_and_timeout(request, call_next):
    content_length = request.headers.get("content-length")
    if content_length is not None:
        try:
            if int(content_length) > MAX_REQUEST_BYTES:
                return _error_response(413, "REQUEST_TOO_LARGE", "Request body too large.")
        except ValueError:
            return _error_response(400, "INVALID_CONTENT_LENGTH", "Invalid Content-Length header.")

    if request.method not in TIMED_METHODS:
        return await call_next(request)

    try:
        with anyio.fail_after(REQUEST_TIMEOUT_SECONDS):
            return await call_next(request)
    except TimeoutError:
        return _error_response(504, "REQUEST_TIMEOUT", "Request timed out.")


@app.middleware("http")
async def security_headers(request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get(
    "/api/graphs",
    response_model=list[GraphRecord],
    response_model_exclude_none=True,
    tags=["graphs"],
    responses={500: {"model": ErrorResponse}},
)
def list_graphs(store: GraphStore = Depends(get_graph_store)) -> list[GraphRecord]:
    return store.list_graphs()


@app.post(
    "/api/graphs",
    response_model=GraphRecord,
    response_model_exclude_none=True,
    status_code=201,
    tags=["graphs"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_graph(
    request: GraphCreateRequest,
    store: GraphStore = Depends(get_graph_store),
) -> GraphRecord:
    return store.create_graph(request)


@app.get(
    "/api/graphs/{id}",
    response_model=GraphRecord,
    response_model_exclude_none=True,
    tags=["graphs"],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_graph(id: str, store: GraphStore = Depends(get_graph_store)) -> GraphRecord:
    return store.get_graph(id)


@app.put(
    "/api/graphs/{id}",
    response_model=GraphRecord,
    response_model_exclude_none=True,
    tags=["graphs"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def update_graph(
    id: str,
    request: GraphUpdateRequest,
    store: GraphStore = Depends(get_graph_store),
) -> GraphRecord:
    return store.update_graph(id, request)


@app.delete(
    "/api/graphs/{id}",
    response_model=GraphRecord | DeleteResponse,
    response_model_exclude_none=True,
    tags=["graphs"],
    responses={500: {"model": ErrorResponse}},
)
def delete_graph(id: str, store: GraphStore = Depends(get_graph_store)) -> GraphRecord | DeleteResponse:
    removed = store.delete_graph(id)
    if removed is None:
        return DeleteResponse(id=id, deleted=False, message="Graph already deleted or never existed.")
    return removed


@app.get(
    "/api/tags",
    response_model=list[str],
    tags=["tags"],
    responses={500: {"model": ErrorResponse}},
)
def list_tags(store: GraphStore = Depends(get_graph_store)) -> list[str]:
    return store.list_tags()
