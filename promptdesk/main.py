"""
PROMPTDESK MAIN API
===================

This module defines the FastAPI application and all HTTP endpoints. It is
designed for single-user use: one person runs one server (python run.py) and
uses it as their personal prompt-authoring backend.

ENDPOINTS:
  GET    /                           - API name and list of endpoints.
  GET    /health                     - Whether each service is initialized.
  GET    /models, /models/{id}       - Static model catalog.
  GET    /templates                  - Saved templates, in insertion order.
  POST   /templates                  - Save a template (201; 400 if name/content missing).
  GET    /templates/{id}             - One template (its content is what gets loaded into the editor).
  DELETE /templates/{id}             - Delete a template (no-op if absent).
  POST   /chat                       - One-shot synthesized reply, no session involved.
  GET    /parameters                 - Current generation parameters.
  PUT    /parameters                 - Change any subset of parameters (values are clamped).
  GET    /sessions                   - Sessions, newest first, plus the active session id.
  POST   /sessions                   - Start a new session (becomes active).
  GET    /sessions/{id}              - A session with all its messages.
  PATCH  /sessions/{id}              - Rename a session.
  DELETE /sessions/{id}              - Delete a session.
  POST   /sessions/{id}/select       - Make a session the active one.
  POST   /sessions/{id}/messages     - Send a prompt and get the reply appended.
  DELETE /sessions/{id}/pending      - Abandon the reply currently being generated.
  GET    /sessions/{id}/export       - Download a session as JSON.
  GET    /sessions/{id}/messages/{message_id} - Download one message as JSON.

STARTUP:
  The lifespan function loads the snapshot from DATA_DIR, builds the parameter
  store, session store, template library, synthesizer and chat service, and
  subscribes the persistence adapter to every store so each change is saved.
  On shutdown it writes one final full snapshot.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging

from config import DATA_DIR, HOST, PORT
from promptdesk.errors import ErrorKind, PromptDeskError, SynthesisFailureError
from promptdesk.models import (
    ChatRequest,
    ChatResponse,
    ChatTurn,
    ModelInfo,
    ParameterSet,
    ParametersUpdateRequest,
    RenameSessionRequest,
    SendMessageRequest,
    Session,
    SessionList,
    SessionSummary,
    Snapshot,
    Template,
    TemplateCreateRequest,
)
from promptdesk.services import model_catalog
from promptdesk.services.chat_service import ChatService
from promptdesk.services.parameters import ParameterStore
from promptdesk.services.persistence import PersistenceAdapter
from promptdesk.services.session_store import SessionStore
from promptdesk.services.synthesizer import ResponseSynthesizer
from promptdesk.services.template_library import TemplateLibrary


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("PromptDesk")


# -----------------------------------------------------------------------------
# GLOBAL SERVICE REFERENCES
# -----------------------------------------------------------------------------
# Set during startup (lifespan) and used by all route handlers.
persistence: PersistenceAdapter = None
parameter_store: ParameterStore = None
session_store: SessionStore = None
template_library: TemplateLibrary = None
chat_service: ChatService = None

# ErrorKind -> HTTP status. PERSISTENCE_CORRUPT never leaves the persistence adapter.
STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.BUSY: 409,
    ErrorKind.CANCELLED: 409,
    ErrorKind.SYNTHESIS_FAILURE: 500,
    ErrorKind.PERSISTENCE_CORRUPT: 500,
}


def _http_error(exc: PromptDeskError) -> HTTPException:
    """Translate a service error into the HTTPException FastAPI sends back."""
    detail = exc.message
    if isinstance(exc, SynthesisFailureError) and exc.prompt is not None:
        # Hand the prompt back so the client can offer to resend it.
        detail = {"message": exc.message, "prompt": exc.prompt}
    return HTTPException(status_code=STATUS_BY_KIND[exc.kind], detail=detail)


def print_title():
    """Print the PromptDesk banner to the console when the server starts."""
    CYAN = "\033[96m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RESET = "\033[0m"
    print(f"\n{BOLD}{CYAN}  PromptDesk{RESET}\n  {DIM}Prompt authoring console backend{RESET}\n")


# -------------------------------------------------------------------------
# SERVICE WIRING
# -------------------------------------------------------------------------

def init_services(
    data_dir: Path = DATA_DIR,
    synthesizer: Optional[ResponseSynthesizer] = None,
) -> None:
    """
    Build every service from the snapshot stored in data_dir and subscribe the
    persistence adapter to each store. Records that are missing or corrupt
    fall back to defaults (the adapter logs which ones).
    """
    global persistence, parameter_store, session_store, template_library, chat_service

    persistence = PersistenceAdapter(data_dir)
    snapshot = persistence.load()

    parameter_store = ParameterStore(snapshot.parameters)
    session_store = SessionStore(snapshot.sessions)
    template_library = TemplateLibrary(snapshot.templates)
    chat_service = ChatService(session_store, parameter_store, synthesizer or ResponseSynthesizer())

    parameter_store.subscribe(persistence.save_parameters)
    session_store.subscribe(persistence.save_sessions)
    template_library.subscribe(persistence.save_templates)

    # Write defaults for any record that wasn't there so the files always exist.
    persistence.save(current_snapshot())
    logger.info(
        "Loaded %s session(s), %s template(s) from %s",
        len(session_store.list_sessions()),
        len(template_library.list()),
        data_dir,
    )


def current_snapshot() -> Snapshot:
    return Snapshot(
        parameters=parameter_store.get(),
        sessions=session_store.list_sessions(),
        templates=template_library.list(),
    )


def shutdown_services() -> None:
    """Flush the full snapshot to disk."""
    if persistence and session_store and parameter_store and template_library:
        persistence.save(current_snapshot())


# -------------------------------------------------------------------------
# LIFESPAN (STARTUP / SHUTDOWN)
# -------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - STARTUP: load the snapshot and build the services (init_services).
    - SHUTDOWN: write one final snapshot of parameters, sessions and templates.
    """
    print_title()
    logger.info("=" * 60)
    logger.info("PromptDesk - Starting Up...")
    logger.info("=" * 60)

    try:
        init_services(DATA_DIR)
        logger.info("PromptDesk is online and ready!")
        logger.info("API: http://localhost:%s", PORT)
        logger.info("Docs: http://localhost:%s/docs", PORT)
        logger.info("=" * 60)

        yield

        logger.info("Shutting down PromptDesk...")
        shutdown_services()
        logger.info("State saved. Goodbye!")

    except Exception as e:
        logger.error(f"Fatal error during startup: {e}", exc_info=True)
        raise


# -------------------------------------------------------------------------
# FASTAPI APP AND CORS
# -------------------------------------------------------------------------
app = FastAPI(
    title="PromptDesk API",
    description="Prompt authoring console with simulated model replies",
    lifespan=lifespan
)

# Allow any origin so a frontend on another port can call this API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_services():
    if not chat_service:
        raise HTTPException(status_code=503, detail="Services not initialized")


# =========================================================================
# API ENDPOINTS
# =========================================================================

@app.get("/")
async def root():
    """Return the API name and a short description of each endpoint (for discovery)."""
    return {
        "message": "PromptDesk API",
        "endpoints": {
            "/models": "Available models",
            "/templates": "Prompt templates",
            "/chat": "One-shot synthesized reply",
            "/parameters": "Generation parameters",
            "/sessions": "Chat sessions",
            "/health": "System health check"
        }
    }


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "persistence": persistence is not None,
        "parameters": parameter_store is not None,
        "sessions": session_store is not None,
        "templates": template_library is not None,
        "chat_service": chat_service is not None
    }


# -------------------------------------------------------------------------
# MODELS
# -------------------------------------------------------------------------

@app.get("/models", response_model=List[ModelInfo], response_model_exclude_none=True)
async def get_models():
    return model_catalog.list_models()


@app.get("/models/{model_id}", response_model=ModelInfo, response_model_exclude_none=True)
async def get_model(model_id: str):
    try:
        return model_catalog.get_model(model_id)
    except PromptDeskError as e:
        raise _http_error(e)


# -------------------------------------------------------------------------
# TEMPLATES
# -------------------------------------------------------------------------

@app.get("/templates", response_model=List[Template])
async def get_templates():
    _require_services()
    return template_library.list()


@app.post("/templates", response_model=Template, status_code=201)
async def create_template(request: TemplateCreateRequest):
    _require_services()
    try:
        return template_library.save(
            request.name, request.description, request.content, request.category
        )
    except PromptDeskError as e:
        logger.warning(f"Rejected template: {e.message}")
        raise _http_error(e)


@app.get("/templates/{template_id}", response_model=Template)
async def get_template(template_id: str):
    _require_services()
    try:
        return template_library.get(template_id)
    except PromptDeskError as e:
        raise _http_error(e)


@app.delete("/templates/{template_id}", status_code=204)
async def delete_template(template_id: str):
    _require_services()
    template_library.delete(template_id)
    return Response(status_code=204)


# -------------------------------------------------------------------------
# ONE-SHOT CHAT
# -------------------------------------------------------------------------

@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest):
    """
    One-shot reply, independent of any session.

    REQUEST BODY:
    {
        "prompt": "Explain recursion",
        "modelId": "gpt-4",
        "parameters": {"temperature": 0.9, "maxLength": 1000}
    }

    Returns the reply with the (clamped) parameters echoed back and the usage
    counters. A missing or empty modelId means the default model
    (PROMPTDESK_DEFAULT_MODEL, gpt-4), and that id is what gets echoed.
    400 when the prompt is missing, 500 if generation fails.
    """
    _require_services()

    try:
        return await chat_service.quick_chat(request.prompt, request.model_id, request.parameters)
    except PromptDeskError as e:
        if e.kind is ErrorKind.INVALID_INPUT:
            raise _http_error(e)
        logger.error(f"Error processing chat: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process chat request")
    except Exception as e:
        logger.error(f"Error processing chat: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process chat request")


# -------------------------------------------------------------------------
# PARAMETERS
# -------------------------------------------------------------------------

@app.get("/parameters", response_model=ParameterSet)
async def get_parameters():
    _require_services()
    return parameter_store.get()


@app.put("/parameters", response_model=ParameterSet)
async def update_parameters(request: ParametersUpdateRequest):
    """Fields left out (or null) are unchanged; everything else is coerced and clamped."""
    _require_services()
    return parameter_store.update(**request.model_dump(exclude_none=True))


# -------------------------------------------------------------------------
# SESSIONS
# -------------------------------------------------------------------------

@app.get("/sessions", response_model=SessionList)
async def list_sessions():
    _require_services()
    return SessionList(
        active_session_id=session_store.active_session_id,
        sessions=[
            SessionSummary(
                id=s.id,
                title=s.title,
                created_at=s.created_at,
                updated_at=s.updated_at,
                message_count=len(s.messages),
            )
            for s in session_store.list_sessions()
        ],
    )


@app.post("/sessions", response_model=Session, status_code=201)
async def create_session():
    _require_services()
    return session_store.create_session()


@app.get("/sessions/{session_id}", response_model=Session, response_model_exclude_none=True)
async def get_session(session_id: str):
    _require_services()
    try:
        return session_store.get_session(session_id)
    except PromptDeskError as e:
        raise _http_error(e)


@app.patch("/sessions/{session_id}", response_model=Session, response_model_exclude_none=True)
async def rename_session(session_id: str, request: RenameSessionRequest):
    _require_services()
    try:
        return session_store.rename_session(session_id, request.title)
    except PromptDeskError as e:
        raise _http_error(e)


@app.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str):
    _require_services()
    try:
        chat_service.delete_session(session_id)
    except PromptDeskError as e:
        raise _http_error(e)
    return Response(status_code=204)


@app.post("/sessions/{session_id}/select", response_model=Session, response_model_exclude_none=True)
async def select_session(session_id: str):
    _require_services()
    try:
        return session_store.select_session(session_id)
    except PromptDeskError as e:
        raise _http_error(e)


@app.post("/sessions/{session_id}/messages", response_model=ChatTurn, response_model_exclude_none=True)
async def send_message(session_id: str, request: SendMessageRequest):
    """
    Send a prompt to a session and wait for the reply.

    HOW IT WORKS:
    1. The prompt is appended as a user message (the first one names the session)
    2. A reply is synthesized with the current parameters
    3. The reply is appended as an assistant message
    4. Both messages are returned; the session is already saved to disk

    409 while another reply for this session is still pending, or if the
    pending reply was cancelled. 500 (with the prompt echoed) if generation fails.
    """
    _require_services()

    try:
        return await chat_service.send_message(session_id, request.prompt, request.model_id)
    except PromptDeskError as e:
        if e.kind is ErrorKind.SYNTHESIS_FAILURE:
            logger.error(f"Error processing message for session {session_id}: {e}")
        else:
            logger.warning(f"Message rejected for session {session_id}: {e.message}")
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Error processing message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process message")


@app.delete("/sessions/{session_id}/pending")
async def cancel_pending(session_id: str):
    _require_services()
    return {"sessionId": session_id, "cancelled": chat_service.cancel(session_id)}


@app.get("/sessions/{session_id}/export")
async def export_session(session_id: str):
    _require_services()
    try:
        return session_store.export_session(session_id)
    except PromptDeskError as e:
        raise _http_error(e)


@app.get("/sessions/{session_id}/messages/{message_id}")
async def export_message(session_id: str, message_id: str):
    _require_services()
    try:
        return session_store.export_message(session_id, message_id)
    except PromptDeskError as e:
        raise _http_error(e)


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m promptdesk.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py); used if someone does python -m promptdesk.main"""
    uvicorn.run(
        "promptdesk.main:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level="info"
    )

if __name__ == "__main__":
    run()
