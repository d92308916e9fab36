"""
CONVERSATION STORE MODULE
=========================

Adapter between the HTTP handlers and the key-value store. Knows the key layout
and the JSON shape of everything persisted; knows nothing about HTTP.

KEY LAYOUT:
  history:<sessionId>  - list of ChatMessage JSON, capped at MAX_HISTORY_ENTRIES
  conv:<id>            - one ConversationRecord per chat turn (read by export)
  settings:<userId>    - opaque settings object for one user
  ticket:<id>          - one Ticket

FAILURE RULES:
  - Reads (history, export) never raise: an unbound store, a missing key or a
    store error all come back as empty data. Errors are logged as warnings.
  - Writes of history and records raise; the chat handler catches and logs them.
  - Settings and ticket writes return a StoreOutcome so the handler can decide
    how much of a failure to show the caller.
"""

from enum import Enum
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.models import ChatMessage, ConversationRecord, Ticket
from app.services.kv_store import KeyValueStore
from app.utils.ids import new_record_id
from app.utils.time_info import timestamp_sort_key, utc_now_iso
from config import MAX_HISTORY_ENTRIES

logger = logging.getLogger("assistant")

HISTORY_PREFIX = "history:"
RECORD_PREFIX = "conv:"
SETTINGS_PREFIX = "settings:"
TICKET_PREFIX = "ticket:"


class StoreOutcome(str, Enum):
    """Result of a write whose failure the caller may choose to hide."""
    OK = "ok"
    SKIPPED = "skipped"   # no store bound
    FAILED = "failed"


class ConversationStore:
    """
    Session history, conversation records, settings and tickets on top of an
    optional KeyValueStore. kv=None means no store is bound.
    """

    def __init__(self, kv: Optional[KeyValueStore], max_entries: int = MAX_HISTORY_ENTRIES):
        self.kv = kv
        self.max_entries = max_entries

    @property
    def bound(self) -> bool:
        return self.kv is not None

    # -------------------------------------------------------------------------
    # SESSION HISTORY
    # -------------------------------------------------------------------------

    async def get(self, session_id: str) -> List[ChatMessage]:
        """Return the session's history, oldest first. [] if unbound, absent or unreadable."""
        if self.kv is None:
            return []
        try:
            raw_items = await self.kv.get_list(HISTORY_PREFIX + session_id)
        except Exception as e:
            logger.warning("Could not read history for session %s: %s", session_id, e)
            return []

        messages = []
        for raw in raw_items:
            try:
                messages.append(ChatMessage.model_validate_json(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed history entry in session %s: %s", session_id, e)
        return messages

    async def append(self, session_id: str, role: str, content: str) -> Optional[ChatMessage]:
        """
        Append one message to the session and keep only the most recent
        max_entries. Returns the stored message, or None when no store is bound.
        """
        if self.kv is None:
            return None
        message = ChatMessage(role=role, content=content, timestamp=utc_now_iso())
        await self.kv.append_to_list(
            HISTORY_PREFIX + session_id,
            message.model_dump_json(),
            self.max_entries,
        )
        return message

    # -------------------------------------------------------------------------
    # CONVERSATION RECORDS / EXPORT
    # -------------------------------------------------------------------------

    async def save_record(self, session_id: str, user_message: str, ai_response: str) -> Optional[ConversationRecord]:
        if self.kv is None:
            return None
        record = ConversationRecord(
            id=new_record_id(),
            userMessage=user_message,
            aiResponse=ai_response,
            timestamp=utc_now_iso(),
            sessionId=session_id,
        )
        await self.kv.put(RECORD_PREFIX + record.id, record.model_dump_json())
        return record

    async def export(self) -> List[Dict[str, Any]]:
        """
        Read every conversation record and return them sorted by timestamp,
        oldest first. Records that are missing or not JSON objects are skipped;
        an enumeration error returns [].
        """
        if self.kv is None:
            return []
        try:
            keys = await self.kv.list_keys(RECORD_PREFIX)
            records = []
            for key in keys:
                raw = await self.kv.get(key)
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning("Skipping unparseable conversation record %s", key)
                    continue
                if isinstance(record, dict):
                    records.append(record)
        except Exception as e:
            logger.error("Error fetching conversation history: %s", e)
            return []

        return sorted(records, key=lambda r: timestamp_sort_key(r.get("timestamp")))

    # -------------------------------------------------------------------------
    # SETTINGS / TICKETS
    # -------------------------------------------------------------------------

    async def save_settings(self, user_id: str, settings: Dict[str, Any]) -> StoreOutcome:
        if self.kv is None:
            return StoreOutcome.SKIPPED
        try:
            await self.kv.put(SETTINGS_PREFIX + user_id, json.dumps(settings))
        except Exception as e:
            logger.warning("Could not save settings for user %s: %s", user_id, e)
            return StoreOutcome.FAILED
        return StoreOutcome.OK

    async def get_settings(self, user_id: str) -> Dict[str, Any]:
        """Stored settings for user_id, or {} if unbound, absent or unreadable."""
        if self.kv is None:
            return {}
        try:
            raw = await self.kv.get(SETTINGS_PREFIX + user_id)
            settings = json.loads(raw) if raw else {}
        except Exception as e:
            logger.warning("Could not read settings for user %s: %s", user_id, e)
            return {}
        return settings if isinstance(settings, dict) else {}

    async def save_ticket(self, ticket: Ticket) -> StoreOutcome:
        if self.kv is None:
            return StoreOutcome.SKIPPED
        try:
            await self.kv.put(TICKET_PREFIX + ticket.id, ticket.model_dump_json())
        except Exception as e:
            logger.warning("Could not store ticket %s: %s", ticket.id, e)
            return StoreOutcome.FAILED
        return StoreOutcome.OK

    async def key_count(self) -> Optional[int]:
        """Number of keys in the store, or None when unbound. Raises on store errors."""
        if self.kv is None:
            return None
        return await self.kv.count()
