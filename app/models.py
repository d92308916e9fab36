"""
DATA MODELS MODULE
==================

Pydantic models for request bodies, response bodies and the records kept in the
key-value store. Handlers validate incoming JSON with these; the conversation
store serializes them to JSON before writing.

MODELS:
  ChatMessage        - One history entry (role + content + timestamp).
  ChatRequest        - Body of POST /api/chat.
  ChatResponse       - Body returned by POST /api/chat.
  ConversationRecord - One user/assistant turn, stored under its own key for export.
  TicketRequest      - Body of POST /api/tickets.
  Ticket             - Stored support ticket.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from config import MAX_MESSAGE_LENGTH


# ==============================================================================
# STORED RECORDS
# ==============================================================================

class ChatMessage(BaseModel):
    """
    A single history entry. Entries are never modified after they are written.
    timestamp is an ISO-8601 string when written by this service; integer epoch
    milliseconds are accepted when reading older data.
    """
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: Union[int, str]


class ConversationRecord(BaseModel):
    """One chat turn, stored under conv:<id> and returned by the export endpoint."""
    id: str
    userMessage: str
    aiResponse: str
    timestamp: Union[int, str]
    sessionId: Optional[str] = None


class Ticket(BaseModel):
    id: str
    subject: str
    description: str
    sessionId: Optional[str] = None
    status: Literal["new"] = "new"
    createdAt: str


# ==============================================================================
# REQUEST / RESPONSE BODIES
# ==============================================================================

class HistoryEntry(BaseModel):
    """History turn sent by the browser client; timestamp is optional there."""
    role: Literal["user", "assistant"]
    content: str
    timestamp: Optional[Union[int, str]] = None


class ChatRequest(BaseModel):
    """
    Body of POST /api/chat.

    - message: Required, 1-32,000 characters.
    - sessionId: Optional; the server uses DEFAULT_SESSION_ID when omitted.
    - history: Optional client-side history, used only when the store has none.
    - settings: Optional; settings["responseStyle"] picks the canned response pool.
    """
    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    sessionId: Optional[str] = None
    history: Optional[List[HistoryEntry]] = None
    settings: Optional[Dict[str, Any]] = None


class ChatResponse(BaseModel):
    response: str
    timestamp: str
    messageId: str
    sessionId: str


class TicketRequest(BaseModel):
    subject: str = ""
    description: str = ""
    sessionId: Optional[str] = None
