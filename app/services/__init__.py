"""
SERVICES PACKAGE
=================

Business logic lives here. The API layer (app.main) calls these services;
they don't handle HTTP.

MODULES:
    kv_store           - KeyValueStore interface, memory and Redis backends
    conversation_store - session history, conversation records, settings, tickets
    canned_responder   - keyword and style tables, no model call
    groq_service       - Groq-backed replies with canned fallback; build_responder()
    metrics            - counters behind GET /api/status
"""
