"""
Docker Engine API proxy server.

Forwards every request to the upstream engine. Container list / inspect responses are filtered,
guarded and decorated according to the caller's resource controls before they are returned.

The caller's identity is read from a header set by the trusted authentication frontend
(DOCKGATE_USER_HEADER); this server does not authenticate users itself.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from dockgate.core.errors import AccessFileError, ContainerIdentifierNotFoundError, ResponseDecodingError, UpstreamError
from dockgate.proxy.config import load_proxy_config
from dockgate.proxy.dispatch import resolve_operation
from dockgate.proxy.response import UpstreamResponse
from dockgate.proxy.upstream import DefaultDockerProvider, DockerProvider, strip_hop_by_hop
from dockgate.store.access_file import build_operation_context, load_access_file

logger = logging.getLogger(__name__)

_provider: Optional[DockerProvider] = None
_provider_lock = threading.Lock()

_PROXY_METHODS = ["GET", "POST", "PUT", "DELETE", "HEAD", "PATCH"]


def get_docker_provider() -> DockerProvider:
    """Return the process-wide upstream provider (one requests.Session for all requests)."""
    global _provider
    if _provider is not None:
        return _provider
    with _provider_lock:
        if _provider is None:
            _provider = DefaultDockerProvider()
        return _provider


def _is_public_path(method: str, path: str) -> bool:
    return method == "GET" and path == "/healthz"


def _to_client_response(upstream: UpstreamResponse) -> Response:
    return Response(
        content=upstream.body,
        status_code=upstream.status_code,
        headers={k: v for k, v in upstream.headers.items() if k.lower() != "content-length"},
    )


app = FastAPI(title="Dockgate Docker API proxy")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming HTTP requests and require a caller identity on proxied paths."""
    start_time = time.time()
    path = request.url.path or ""
    try:
        if not _is_public_path(request.method, path):
            cfg = load_proxy_config()
            user_id = (request.headers.get(cfg.user_header) or "").strip()
            if not user_id:
                return JSONResponse(status_code=401, content={"detail": "Unauthorized"})
            request.state.user_id = user_id

        response = await call_next(request)
        process_time = time.time() - start_time
        logger.debug("%s %s - %d (%.3fs)", request.method, path, response.status_code, process_time)
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.exception("%s %s - ERROR after %.3fs: %s", request.method, path, process_time, str(e))
        raise


@app.get("/healthz")
def healthz() -> Dict[str, Any]:
    return {"ok": True}


@app.api_route("/{path:path}", methods=_PROXY_METHODS)
async def proxy(path: str, request: Request) -> Response:
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        return JSONResponse(status_code=401, content={"detail": "Unauthorized"})
    body = await request.body()
    # Upstream I/O and filtering are blocking; keep them off the event loop.
    return await run_in_threadpool(
        handle_proxy_request,
        method=request.method,
        path=request.url.path,
        query=request.url.query,
        headers=dict(request.headers),
        body=body,
        user_id=user_id,
    )


def handle_proxy_request(
    *,
    method: str,
    path: str,
    query: str,
    headers: Dict[str, str],
    body: bytes,
    user_id: str,
) -> Response:
    cfg = load_proxy_config()
    operation = resolve_operation(method, path)

    # Identity header is for us only.
    forward_headers = strip_hop_by_hop(headers, extra={cfg.user_header})

    try:
        upstream = get_docker_provider().forward(method, path, query=query, headers=forward_headers, body=body)
    except UpstreamError as e:
        logger.warning("Upstream request failed: %s %s: %s", method, path, str(e))
        return JSONResponse(status_code=502, content={"err": str(e)})

    if operation is None or upstream.status_code != 200:
        return _to_client_response(upstream)

    try:
        snapshot = load_access_file(cfg.access_file)
    except AccessFileError as e:
        # Fail closed: no filtering data means no filtered responses.
        logger.warning("Access file unavailable: %s", str(e))
        return JSONResponse(status_code=503, content={"err": "Access control data unavailable"})

    ctx = build_operation_context(snapshot, user_id)
    try:
        operation(upstream, ctx)
    except (ContainerIdentifierNotFoundError, ResponseDecodingError) as e:
        logger.exception("Unable to apply resource controls to %s %s: %s", method, path, str(e))
        return JSONResponse(status_code=500, content={"err": str(e)})

    return _to_client_response(upstream)


def run(host: str = "0.0.0.0", port: int = 9000) -> None:
    import uvicorn

    log_level = os.getenv("LOG_LEVEL", "info").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    uvicorn_log_level = (
        log_level.lower() if log_level.lower() in ["critical", "error", "warning", "info", "debug", "trace"] else "info"
    )

    cfg = load_proxy_config()
    logger.info(
        "Starting Dockgate on %s:%d (upstream=%s access_file=%s log_level=%s)",
        host,
        port,
        cfg.docker_api_url,
        cfg.access_file,
        log_level,
    )
    uvicorn.run(app, host=host, port=port, log_level=uvicorn_log_level)
