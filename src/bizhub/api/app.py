"""
Directory API backend for BizHub.

This module runs the assistant and the listing gate on behalf of the browser.
It exposes the following endpoints:
- **GET /health**    - liveness probe for health checks.
- **POST /sessions** - create a new chat session, returns a session ID.
- **GET /sessions**  - list all active sessions.
- **POST /chat**     - one chat turn: {"message": "...", "session_id": "...", "page": {...}}
- **POST /listings** - screen a business listing and publish it if approved.
- **POST /uploads/{bucket}** - store a listing image or brochure, returns its public URL.
"""

import logging
import uuid
from typing import (
    Dict,
    List,
    Optional,
)

from fastapi import (
    Depends,
    FastAPI,
    HTTPException,
    Request,
    status,
)
from fastapi.middleware.cors import CORSMiddleware

from bizhub.agent.agent_loop import AgentLoop
from bizhub.agent.chat_session import (
    ChatSession,
    SessionBusy,
)
from bizhub.agent.completion_client import CompletionClient
from bizhub.agent.moderation import ModerationEvaluator
from bizhub.api.models import (
    ListingRequest,
    ListingResponse,
    MessageRequest,
    MessageResponse,
    SessionResponse,
    UploadBucket,
    UploadResponse,
)
from bizhub.common import (
    AnsiColors,
    colored_print,
)
from bizhub.config import settings
from bizhub.core.schema import BusinessListingDraft
from bizhub.store.content_store import (
    ContentStore,
    ContentStoreError,
    SupabaseContentStore,
    blob_path,
)
from bizhub.tools.directory import BUSINESS_TABLE
from bizhub.tools.page_commands import PageCommandRecorder

logger = logging.getLogger(__name__)

# Session storage (in-memory; a page reload on the client starts a new one)
sessions: Dict[str, ChatSession] = {}

app = FastAPI(title="BizHub API", version="0.1.0", description="BizHub directory assistant API")

# Add CORS middleware to allow requests from the web front end
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.WEBUI_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_completion_client() -> CompletionClient:
    """Completion client pointed at the configured proxy."""
    return CompletionClient()


def get_content_store() -> Optional[ContentStore]:
    """Supabase store when configured, otherwise ``None``."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        return None
    return SupabaseContentStore()


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------
def get_or_create_session(session_id: Optional[str] = None) -> str:
    """Get existing session or create a new one."""
    if session_id and session_id in sessions:
        return session_id

    new_session_id = str(uuid.uuid4())
    sessions[new_session_id] = ChatSession()
    return new_session_id


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health", summary="Health check")
async def health() -> dict[str, str]:
    """Return a simple liveness payload."""
    return {"status": "ok"}


@app.post("/sessions", response_model=SessionResponse, summary="Create a new session")
async def create_session() -> SessionResponse:
    """Create a new conversation session."""
    session_id = get_or_create_session()
    return SessionResponse(session_id=session_id)


@app.get("/sessions", response_model=List[str], summary="List active sessions")
async def list_sessions() -> List[str]:
    """List all active session IDs."""
    return list(sessions.keys())


@app.post("/chat", response_model=MessageResponse, summary="Send a chat message")
async def chat_endpoint(
    req: MessageRequest,
    client: CompletionClient = Depends(get_completion_client),
    store: Optional[ContentStore] = Depends(get_content_store),
) -> MessageResponse:
    """Answer a user message; page changes come back as ``actions`` for the browser to apply."""
    session_id = get_or_create_session(req.session_id)
    session = sessions[session_id]

    recorder = PageCommandRecorder(
        has_search_field=req.page.has_search_field, element_ids=req.page.element_ids
    )
    agent = AgentLoop(client, recorder.host(content_store=store))

    try:
        reply = await session.send(req.message, agent)
    except SessionBusy as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    logger.debug("Chat reply for session %s: %s", session_id, reply.text)
    return MessageResponse(
        reply=reply.text, actions=recorder.commands, session_id=session_id, ok=reply.ok
    )


@app.post(
    "/listings",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a business listing",
)
async def create_listing(
    req: ListingRequest,
    client: CompletionClient = Depends(get_completion_client),
    store: Optional[ContentStore] = Depends(get_content_store),
) -> ListingResponse:
    """Run the moderation gate, then store the listing as approved."""
    draft = BusinessListingDraft(
        category=req.category_name, **req.model_dump(exclude={"category_name"})
    )

    verdict = await ModerationEvaluator(client).evaluate(
        draft.name, draft.description, draft.category
    )
    if not verdict.approved:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Submission rejected by AI: {verdict.reason} (Score: {verdict.score})",
        )

    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content store is not configured.",
        )

    record = draft.model_dump(exclude={"category"})
    record.update(status="approved", ai_score=verdict.score)
    try:
        stored = await store.insert(BUSINESS_TABLE, record)
    except ContentStoreError as exc:
        logger.error("Failed to store listing %r: %s", draft.name, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    logger.info("Listing %r published (score %d)", draft.name, verdict.score)
    return ListingResponse(verdict=verdict, record=stored)


@app.post(
    "/uploads/{bucket}",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a listing image or brochure",
)
async def upload_file(
    bucket: UploadBucket,
    owner_id: str,
    filename: str,
    request: Request,
    store: Optional[ContentStore] = Depends(get_content_store),
) -> UploadResponse:
    """Store the request body as a listing file and return where it landed."""
    data = await request.body()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty upload.")
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content store is not configured.",
        )

    path = blob_path(owner_id, filename)
    content_type = request.headers.get("content-type", "application/octet-stream")
    try:
        url = await store.upload_blob(bucket.value, path, data, content_type)
    except ContentStoreError as exc:
        logger.error("Upload of %s to %s failed: %s", path, bucket.value, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    logger.info("Uploaded %s to %s", path, bucket.value)
    return UploadResponse(path=path, url=url)


@app.get("/", summary="API root")
async def root() -> dict[str, str]:
    """Return a simple welcome message."""
    return {"message": "Welcome to the BizHub API! Use /docs for API documentation."}


# ---------------------------------------------------------------------------
# Public helper to launch the API (imported by main.py)
# ---------------------------------------------------------------------------
def run_api(
    host: str = "0.0.0.0", port: int = 8000, reload: bool = False, log_level: str | None = None
) -> None:
    """Start a uvicorn server hosting *app*.

    Parameters
    ----------
    host, port:
        Bind address for the HTTP server.
    reload:
        If *True*, enable auto-reload (useful in development).
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # Lazy import - keeps uvicorn an optional dependency at pkg‑import time
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:  # Use the default from settings if not provided
        log_level = settings.LOG_LEVEL

    logger.info(
        "Starting BizHub API at %s:%d (reload=%s, log_level=%s)", host, port, reload, log_level
    )
    if get_content_store() is None:
        logger.warning("Supabase is not configured; findBusiness and /listings will be degraded.")

    colored_print(f"🏪 BizHub API is running at http://localhost:{port}.", AnsiColors.GREEN)
    colored_print(f"Visit http://localhost:{port}/docs for API documentation.", AnsiColors.BLUE)
    uvicorn.run(
        "bizhub.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# ---------------------------------------------------------------------------
# `python -m bizhub.api.app` helper
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run_api(reload=True)
