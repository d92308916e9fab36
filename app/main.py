"""
SUPPORT ASSISTANT MAIN API
==========================

This module defines the FastAPI application and all HTTP endpoints. Every
request is handled on its own: conversation state lives in the key-value store
(if one is bound), never in this process, so any number of workers can run
side by side.

ENDPOINTS:
  POST /api/chat       - Reply to a message (canned or Groq-backed) and record the turn.
  POST /api/settings   - Save the caller's settings object (X-User-Id header, optional).
  POST /api/tickets    - Open a support ticket.
  GET  /api/export     - Download every recorded conversation turn, oldest first.
  GET  /api/status     - Service status with live counters.
  GET  / , /index.html - Embedded browser chat client.
  OPTIONS *            - CORS preflight (204, no body).
  anything else        - 404 {"error": "Not Found"}.

CORS:
  Every response carries Access-Control-Allow-Origin: *, including errors.

STARTUP:
  The lifespan function builds the key-value store named by KV_BACKEND and picks
  the responder (Groq when GROQ_API_KEY is set, canned replies otherwise). On
  shutdown it closes the store connection.
"""

from contextlib import asynccontextmanager
import logging
from typing import Any, Dict, Union

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from app.models import ChatMessage, ChatRequest, ChatResponse, Ticket, TicketRequest
from app.services.canned_responder import CannedResponder
from app.services.conversation_store import ConversationStore, StoreOutcome
from app.services.groq_service import GroqService, build_responder
from app.services.kv_store import create_kv_store
from app.services.metrics import Metrics
from app.ui import INDEX_HTML
from app.utils.ids import new_message_id, new_ticket_id
from app.utils.time_info import utc_now_iso
from config import (
    DEFAULT_SESSION_ID,
    DEFAULT_USER_ID,
    FAILURE_VISIBILITY,
    HOST,
    KV_BACKEND,
    LOG_LEVEL,
    PORT,
    REDIS_URL,
)


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("assistant")


# -----------------------------------------------------------------------------
# CONSTANTS
# -----------------------------------------------------------------------------
# Shown to the user when a chat request fails; the real error only goes to the log.
CHAT_FALLBACK_MESSAGE = "I'm having trouble processing your request right now. Please try again."

CORS_ORIGIN_HEADER = {"Access-Control-Allow-Origin": "*"}
CORS_PREFLIGHT_HEADERS = {
    **CORS_ORIGIN_HEADER,
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-User-Id",
}
EXPORT_FILENAME = "ai-assistant-export.json"


# -----------------------------------------------------------------------------
# GLOBAL SERVICE REFERENCES
# -----------------------------------------------------------------------------
# Replaced during startup (lifespan). The defaults (no store, canned replies)
# keep the app usable when it is served without running the lifespan.
metrics = Metrics()
conversation_store = ConversationStore(None)
responder: Union[GroqService, CannedResponder] = CannedResponder()


# -------------------------------------------------------------------------
# LIFESPAN (STARTUP / SHUTDOWN)
# -------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the key-value store and the responder, log what is available, and
    close the store on shutdown. A bad KV_BACKEND value stops startup.
    """
    global conversation_store, responder

    logger.info("=" * 60)
    logger.info("Support Assistant - Starting Up...")
    logger.info("=" * 60)

    try:
        kv = create_kv_store(KV_BACKEND, REDIS_URL)
        conversation_store = ConversationStore(kv)
        responder = build_responder(metrics)

        logger.info("Service Status:")
        logger.info("    - Key-value store: %s", kv.name if kv else "not bound (nothing is persisted)")
        logger.info("    - Responder: %s", "Groq" if isinstance(responder, GroqService) else "canned replies")
        logger.info("    - Failure visibility: %s", FAILURE_VISIBILITY)
        logger.info("=" * 60)
    except Exception as e:
        logger.error(f"Fatal error during startup: {e}", exc_info=True)
        raise

    yield

    logger.info("Shutting down Support Assistant...")
    if conversation_store.kv is not None:
        await conversation_store.kv.close()


# -------------------------------------------------------------------------
# FASTAPI APP, CORS AND ERROR HANDLERS
# -------------------------------------------------------------------------
app = FastAPI(
    title="Support Assistant API",
    description="Chat proxy with canned or Groq-backed replies",
    lifespan=lifespan
)


@app.middleware("http")
async def cors_and_metrics(request: Request, call_next):
    """Answer preflights directly; count requests and add the CORS origin header to the rest."""
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=CORS_PREFLIGHT_HEADERS)

    metrics.request_started()
    try:
        response = await call_next(request)
    finally:
        metrics.request_finished()
    response.headers.update(CORS_ORIGIN_HEADER)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown path and wrong method look the same to the caller.
    if exc.status_code in (404, 405):
        return JSONResponse({"error": "Not Found"}, status_code=404)
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Runs outside the middleware stack, so the CORS header is added here.
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse({"error": "Internal Server Error"}, status_code=500, headers=CORS_ORIGIN_HEADER)


def _user_id(request: Request) -> str:
    return request.headers.get("X-User-Id", "").strip() or DEFAULT_USER_ID


def _write_result(outcome: StoreOutcome, saved_message: str, masked_message: str) -> Dict[str, Any]:
    """
    Turn a store outcome into the success/message/status part of a response.
    FAILURE_VISIBILITY=masked reports a failed write as success (status "degraded").
    """
    if outcome is StoreOutcome.OK:
        return {"success": True, "message": saved_message, "status": "ok"}
    if outcome is StoreOutcome.SKIPPED:
        return {"success": True, "message": saved_message, "status": "degraded"}
    if FAILURE_VISIBILITY == "reported":
        return {"success": False, "message": "Could not be saved", "status": "failed"}
    return {"success": True, "message": masked_message, "status": "degraded"}


# =========================================================================
# API ENDPOINTS
# =========================================================================

@app.post("/api/chat", response_model=ChatResponse)
async def chat(request: Request):
    """
    Reply to one chat message.

    REQUEST BODY:
    {
        "message": "What about SSL setup?",
        "sessionId": "optional-session-id",
        "history": [{"role": "user", "content": "..."}],   (optional)
        "settings": {"responseStyle": "technical"}          (optional)
    }

    HOW IT WORKS:
    1. Load the session's stored history; fall back to the client's history if none.
    2. Merge the caller's stored settings with the request's settings.
    3. Generate the reply (Groq or canned).
    4. Record the turn. Store errors are logged, never returned.

    Any other failure returns 500 with a generic reply text.
    """
    try:
        body = ChatRequest.model_validate(await request.json())
        session_id = body.sessionId or DEFAULT_SESSION_ID

        history = await conversation_store.get(session_id)
        if not history and body.history:
            history = [
                ChatMessage(role=h.role, content=h.content, timestamp=h.timestamp or 0)
                for h in body.history
            ]

        stored_settings = await conversation_store.get_settings(_user_id(request))
        settings = {**stored_settings, **(body.settings or {})}

        response_text = await responder.generate(body.message, history, settings)
        await _record_turn(session_id, body.message, response_text)

        return ChatResponse(
            response=response_text,
            timestamp=utc_now_iso(),
            messageId=new_message_id(),
            sessionId=session_id,
        )
    except Exception as e:
        logger.error(f"Chat request error: {e}", exc_info=True)
        return JSONResponse(
            {"error": "Failed to process message", "response": CHAT_FALLBACK_MESSAGE},
            status_code=500,
        )


async def _record_turn(session_id: str, user_message: str, ai_response: str) -> None:
    """Append both messages to session history and save a conversation record."""
    if not conversation_store.bound:
        return
    try:
        await conversation_store.append(session_id, "user", user_message)
        await conversation_store.append(session_id, "assistant", ai_response)
        await conversation_store.save_record(session_id, user_message, ai_response)
    except Exception as e:
        logger.warning(f"Could not persist turn for session {session_id}: {e}")


@app.post("/api/settings")
async def save_settings(request: Request):
    """Store the JSON object body as the caller's settings (last write wins)."""
    try:
        settings = await request.json()
        if not isinstance(settings, dict):
            raise ValueError("settings must be a JSON object")
    except Exception as e:
        logger.warning(f"Rejected settings body: {e}")
        return JSONResponse({"error": "Failed to save settings"}, status_code=500)

    outcome = await conversation_store.save_settings(_user_id(request), settings)
    return _write_result(outcome, "Settings saved successfully", "Settings saved successfully")


@app.post("/api/tickets")
async def create_ticket(request: Request):
    """
    Open a support ticket with status "new". Always answers 200; with masked
    failure visibility a ticket that could not be stored is reported as logged locally.
    """
    ticket_id = new_ticket_id()
    try:
        body = TicketRequest.model_validate(await request.json())
        ticket = Ticket(
            id=ticket_id,
            subject=body.subject,
            description=body.description,
            sessionId=body.sessionId,
            createdAt=utc_now_iso(),
        )
        outcome = await conversation_store.save_ticket(ticket)
        if outcome is StoreOutcome.OK:
            logger.info(f"Ticket {ticket_id} created")
    except Exception as e:
        logger.error(f"Ticket creation error: {e}", exc_info=True)
        outcome = StoreOutcome.FAILED

    result = _write_result(outcome, "Ticket created successfully", "Ticket logged locally")
    return {**result, "ticketId": ticket_id}


@app.get("/api/export")
async def export_conversations():
    """Every stored conversation record, oldest first, as a downloadable JSON file."""
    try:
        conversations = await conversation_store.export()
        return JSONResponse(
            {"exportDate": utc_now_iso(), "conversations": conversations},
            headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
        )
    except Exception as e:
        logger.error(f"Export error: {e}", exc_info=True)
        return JSONResponse({"error": "Failed to export data"}, status_code=500)


@app.get("/api/status")
async def status():
    """
    Per-service status. Numbers are this process's own counters:
      llm.latency            - mean Groq call time in ms (0 before the first call)
      workers.requests       - requests served since startup
      kv.usage               - number of keys in the store
      durableObjects.instances - requests currently in flight
    """
    if not conversation_store.bound:
        kv = {"status": "unbound", "usage": 0}
    else:
        try:
            kv = {"status": "online", "usage": await conversation_store.key_count()}
        except Exception as e:
            logger.warning(f"Key-value store status check failed: {e}")
            kv = {"status": "error", "usage": None}

    return {
        "timestamp": utc_now_iso(),
        "services": {
            "llm": {
                "status": "online" if isinstance(responder, GroqService) else "unconfigured",
                "latency": metrics.mean_inference_ms or 0.0,
            },
            "workers": {"status": "online", "requests": metrics.requests_total},
            "kv": kv,
            "durableObjects": {"status": "online", "instances": metrics.in_flight},
        },
    }


@app.get("/", response_class=HTMLResponse)
@app.get("/index.html", response_class=HTMLResponse)
async def index():
    return HTMLResponse(INDEX_HTML)


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m app.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py)."""
    uvicorn.run(
        "app.main:app",
        host=HOST,
        port=PORT,
        log_level="info"
    )

if __name__ == "__main__":
    run()
