"""
ERRORS MODULE
=============

Typed errors raised by the services and translated to HTTP status codes by
promptdesk.main. Every error carries an ErrorKind so callers can branch on
the category instead of the concrete class.

  INVALID_INPUT       - empty or missing required field (400)
  NOT_FOUND           - unknown session/template/model id (404)
  SYNTHESIS_FAILURE   - unexpected error while generating a reply (500)
  PERSISTENCE_CORRUPT - malformed durable record; handled inside persistence
  BUSY                - a reply is already pending for the session (409)
  CANCELLED           - the pending reply was abandoned and discarded (409)
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    SYNTHESIS_FAILURE = "synthesis_failure"
    PERSISTENCE_CORRUPT = "persistence_corrupt"
    BUSY = "busy"
    CANCELLED = "cancelled"


class PromptDeskError(Exception):
    """Base class for every error the services raise on purpose."""

    kind: ErrorKind = ErrorKind.SYNTHESIS_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(PromptDeskError):
    kind = ErrorKind.INVALID_INPUT


class NotFoundError(PromptDeskError):
    kind = ErrorKind.NOT_FOUND


class SynthesisFailureError(PromptDeskError):
    """
    The synthesizer failed unexpectedly. The original prompt is kept on the
    error so the client can offer to resend it.
    """

    kind = ErrorKind.SYNTHESIS_FAILURE

    def __init__(self, message: str, prompt: Optional[str] = None):
        super().__init__(message)
        self.prompt = prompt


class PersistenceCorruptError(PromptDeskError):
    kind = ErrorKind.PERSISTENCE_CORRUPT

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored record '{key}' is corrupt: {reason}")
        self.key = key


class SessionBusyError(PromptDeskError):
    kind = ErrorKind.BUSY


class SynthesisCancelledError(PromptDeskError):
    kind = ErrorKind.CANCELLED
