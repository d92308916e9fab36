"""
RUN SCRIPT - Start the Support Assistant server
===============================================

PURPOSE:
  Single entry point to start the backend.

WHAT IT DOES:
  - Runs app.main:app with uvicorn on HOST:PORT from config (default 0.0.0.0:8000).
  - reload=True restarts the server when Python files change (development).

USAGE:
  python run.py

  Then open http://localhost:8000 for the chat page, or call /api/* directly.

NOTE:
  Optional settings live in .env: GROQ_API_KEY for model replies, KV_BACKEND and
  REDIS_URL for persistence. Without them the server runs with canned replies
  and stores nothing.
"""

import uvicorn

from config import HOST, PORT

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=HOST,
        port=PORT,
        reload=True
    )
