"""Opaque identifiers for messages, conversation records and tickets."""

import time
from uuid import uuid4


def new_message_id() -> str:
    return uuid4().hex


def new_record_id() -> str:
    # Millisecond prefix keeps ids roughly time-ordered when listed by key.
    return f"{int(time.time() * 1000)}-{uuid4().hex[:8]}"


def new_ticket_id() -> str:
    return f"TKT-{uuid4().hex[:12].upper()}"
