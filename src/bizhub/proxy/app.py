"""
Completion proxy for BizHub.

Holds the Gemini API key server-side and forwards ``{"contents": [...]}`` bodies to the
``generateContent`` endpoint, so the key never reaches the browser.  Routes (all on ``/``):

- **OPTIONS /** - CORS preflight, empty 200.
- **GET /**     - health check.
- **POST /**    - forward to the upstream model; upstream status and body are returned verbatim.
"""

import logging
from typing import AsyncIterator

import httpx
from fastapi import (
    Depends,
    FastAPI,
    Request,
    Response,
)
from fastapi.responses import JSONResponse

from bizhub.common import (
    AnsiColors,
    colored_print,
)
from bizhub.config import (
    Settings,
    settings,
)

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

app = FastAPI(title="BizHub Completion Proxy", version="0.1.0")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_proxy_settings() -> Settings:
    """Settings used by the proxy (overridden in tests)."""
    return settings


async def get_upstream_client() -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client for the upstream completion provider."""
    async with httpx.AsyncClient(timeout=settings.COMPLETION_TIMEOUT) as client:
        yield client


def upstream_url(cfg: Settings) -> str:
    """``generateContent`` URL for the configured model, key included."""
    base = cfg.GEMINI_API_BASE.rstrip("/")
    return f"{base}/models/{cfg.GEMINI_MODEL}:generateContent?key={cfg.GEMINI_API_KEY}"


@app.middleware("http")
async def log_and_add_cors_headers(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Log every request and stamp the CORS headers on every response."""
    logger.info("%s request to completion proxy", request.method)
    response = await call_next(request)
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.options("/", summary="CORS preflight")
async def preflight() -> Response:
    """Answer the browser's preflight request."""
    return Response(status_code=200)


@app.get("/", summary="Health check")
async def health() -> dict[str, str]:
    """Return a simple liveness payload."""
    return {"status": "ok", "message": "Gemini proxy is active"}


@app.post("/", summary="Forward a completion request")
async def forward(
    request: Request,
    cfg: Settings = Depends(get_proxy_settings),
    client: httpx.AsyncClient = Depends(get_upstream_client),
) -> Response:
    """Forward ``contents`` upstream and relay the answer unchanged."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    contents = body.get("contents") if isinstance(body, dict) else None
    # Empty arrays and objects count as present; other falsy values do not.
    if not contents and not isinstance(contents, (list, dict)):
        return JSONResponse({"error": "Missing contents in request body"}, status_code=400)

    if not cfg.GEMINI_API_KEY:
        logger.error("GEMINI_API_KEY is not configured")
        return JSONResponse(
            {"error": "GEMINI_API_KEY not set in proxy configuration"}, status_code=500
        )

    try:
        upstream = await client.post(
            upstream_url(cfg),
            json={"contents": contents},
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as exc:
        logger.error("Upstream completion request failed: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)

    logger.debug("Upstream answered %d", upstream.status_code)
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type="application/json",
    )


# ---------------------------------------------------------------------------
# Public helper to launch the proxy (imported by main.py)
# ---------------------------------------------------------------------------
def run_proxy(
    host: str = "0.0.0.0", port: int = 8001, reload: bool = False, log_level: str | None = None
) -> None:
    """Start a uvicorn server hosting the proxy *app*.

    Parameters
    ----------
    host, port:
        Bind address for the HTTP server.
    reload:
        If *True*, enable auto-reload.
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # Lazy import - keeps uvicorn an optional dependency at pkg‑import time
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:
        log_level = settings.LOG_LEVEL

    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; POST requests will fail with 500.")

    colored_print(
        f"🔐 BizHub completion proxy is running at http://localhost:{port}.", AnsiColors.GREEN
    )
    uvicorn.run("bizhub.proxy.app:app", host=host, port=port, reload=reload, log_level=log_level)


# ---------------------------------------------------------------------------
# `python -m bizhub.proxy.app` helper
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run_proxy(reload=True)
