"""
PROMPTDESK APPLICATION PACKAGE
==============================

The main Python package for the PromptDesk backend:

  from promptdesk.main import app
  from promptdesk.models import ParameterSet
  from promptdesk.services.chat_service import ChatService

FILE STRUCTURE:
  promptdesk/
    __init__.py   - This file; marks 'promptdesk' as a package.
    main.py       - FastAPI app, service wiring and all HTTP endpoints.
    models.py     - Pydantic models for parameters, sessions, templates and API bodies.
    errors.py     - Typed errors (ErrorKind) raised by the services.
    services/     - Parameters, synthesizer, sessions, templates, persistence, chat flow.
    utils/        - Helpers: UTC clock, retry with backoff.
"""
