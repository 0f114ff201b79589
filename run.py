"""
RUN SCRIPT - Start the PromptDesk server
========================================

PURPOSE:
  Single entry point to start the backend. Run this once per user/machine;
  the server then handles every request for that instance.

WHAT IT DOES:
  - Imports the FastAPI app from promptdesk.main.
  - Runs it with uvicorn on PROMPTDESK_HOST:PROMPTDESK_PORT (default 0.0.0.0:8000).
  - reload=True means any change to Python files will restart the server (handy for development).

USAGE:
  python run.py

  Then use the API from a frontend or any HTTP client.
  API docs: http://localhost:8000/docs

NOTE:
  State is kept in database/state/ (override with PROMPTDESK_DATA_DIR in .env).
"""

import uvicorn

from config import HOST, PORT

# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
# Only run uvicorn when this file is executed directly (python run.py),
# not when it is imported by another module.
if __name__ == "__main__":
    uvicorn.run(
        "promptdesk.main:app",   # String path to the FastAPI app instance (module:variable).
        host=HOST,               # Listen on all network interfaces by default.
        port=PORT,               # HTTP port; change PROMPTDESK_PORT if 8000 is in use.
        reload=True              # Auto-restart when .py files change (useful during development).
    )
