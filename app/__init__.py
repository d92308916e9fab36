"""
SUPPORT ASSISTANT APPLICATION PACKAGE
=====================================

  from app.main import app
  from app.services.conversation_store import ConversationStore

FILE STRUCTURE:
  app/
    __init__.py   - This file; marks 'app' as a package.
    main.py       - FastAPI app and all HTTP endpoints (/api/chat, /api/export, ...).
    models.py     - Pydantic models for request bodies and stored records.
    ui.py         - The embedded browser chat page.
    services/     - Key-value stores, conversation store, responders, metrics.
    utils/        - Timestamps and id generation.
"""
