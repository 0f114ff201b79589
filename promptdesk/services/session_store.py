"""
SESSION STORE MODULE
====================

Owns every chat session and its messages. Sessions are kept newest-created
first: a new session is prepended and becomes the active one. Nothing is
evicted implicitly; a session goes away only through delete_session().

TITLES:
  A new session is called "New Chat". The first time a user message is
  appended, the title becomes the first TITLE_MAX_CHARS characters of that
  message followed by "...". It is never derived again, and a title the user
  chose with rename_session() before the first message is kept.

FAILURES:
  Unknown ids raise NotFoundError and empty text raises InvalidInputError.
  Both are raised before anything is changed, so a failed call leaves the
  store exactly as it was.

Listeners subscribed with subscribe() are called after every change; the
application uses one to write sessions.json.
"""

import logging
import uuid
from typing import Callable, Dict, List, Optional

from config import (
    DEFAULT_MODEL_ID,
    DEFAULT_SESSION_TITLE,
    ELLIPSIS,
    GREETING_TEXT,
    GREETING_USAGE,
    TITLE_MAX_CHARS,
)
from promptdesk.errors import InvalidInputError, NotFoundError
from promptdesk.models import Message, Session, UsageCounters
from promptdesk.utils.clock import utc_now

logger = logging.getLogger("PromptDesk")

SessionListener = Callable[[List[Session]], None]


def derive_title(text: str) -> str:
    return text.strip()[:TITLE_MAX_CHARS] + ELLIPSIS


def _new_id() -> str:
    return str(uuid.uuid4())


class SessionStore:
    """In-memory collection of sessions with an active-session pointer."""

    def __init__(self, sessions: Optional[List[Session]] = None):
        self._sessions: List[Session] = list(sessions or [])
        self._listeners: List[SessionListener] = []
        self.active_session_id: Optional[str] = None
        if self._sessions:
            self.active_session_id = self._sessions[0].id
        else:
            # There is always at least one session to type into.
            self._sessions.insert(0, self._new_session())
            self.active_session_id = self._sessions[0].id

    # --------------------------------------------------------------------------
    # QUERIES
    # --------------------------------------------------------------------------

    def list_sessions(self) -> List[Session]:
        """Most recently created first."""
        return list(self._sessions)

    def get_session(self, session_id: str) -> Session:
        session = self._find(session_id)
        if session is None:
            raise NotFoundError(f"Session '{session_id}' not found")
        return session

    def has_session(self, session_id: str) -> bool:
        return self._find(session_id) is not None

    @property
    def active_session(self) -> Optional[Session]:
        if self.active_session_id is None:
            return None
        return self._find(self.active_session_id)

    def message_counts(self) -> Dict[str, int]:
        return {session.id: len(session.messages) for session in self._sessions}

    # --------------------------------------------------------------------------
    # SESSION LIFECYCLE
    # --------------------------------------------------------------------------

    def create_session(self) -> Session:
        """Create a session seeded with the greeting, prepend it, and make it active."""
        session = self._new_session()
        self._sessions.insert(0, session)
        self.active_session_id = session.id
        logger.info("Created session %s", session.id)
        self._publish()
        return session

    def select_session(self, session_id: str) -> Session:
        session = self.get_session(session_id)
        self.active_session_id = session.id
        return session

    def rename_session(self, session_id: str, title: str) -> Session:
        session = self.get_session(session_id)
        if not title or not title.strip():
            raise InvalidInputError("Title is required")
        session.title = title.strip()
        session.updated_at = utc_now()
        self._publish()
        return session

    def delete_session(self, session_id: str) -> None:
        """
        Remove a session. If it was the active one, the newest remaining session
        becomes active; if none remain, a fresh session is created.
        """
        session = self.get_session(session_id)
        self._sessions.remove(session)
        logger.info("Deleted session %s", session_id)
        if self.active_session_id == session_id:
            if not self._sessions:
                self._sessions.insert(0, self._new_session())
            self.active_session_id = self._sessions[0].id
        self._publish()

    # --------------------------------------------------------------------------
    # MESSAGES
    # --------------------------------------------------------------------------

    def append_user_message(self, session_id: str, text: str) -> Message:
        session = self.get_session(session_id)
        if not text or not text.strip():
            raise InvalidInputError("Message text is required")

        is_first_user_message = not any(m.role == "user" for m in session.messages)
        message = Message(id=_new_id(), role="user", content=text.strip())
        session.messages.append(message)
        session.updated_at = message.created_at
        if is_first_user_message and session.title == DEFAULT_SESSION_TITLE:
            session.title = derive_title(text)
        self._publish()
        return message

    def append_assistant_message(
        self,
        session_id: str,
        text: str,
        model_id: str,
        usage: UsageCounters,
    ) -> Message:
        session = self.get_session(session_id)
        message = Message(
            id=_new_id(),
            role="assistant",
            content=text,
            model_id=model_id,
            usage=usage,
        )
        session.messages.append(message)
        session.updated_at = message.created_at
        self._publish()
        return message

    def export_session(self, session_id: str) -> dict:
        """JSON-ready export of a session's messages (the console's download)."""
        session = self.get_session(session_id)
        return {
            "messages": [m.model_dump(mode="json", by_alias=True, exclude_none=True) for m in session.messages],
            "exportedAt": utc_now().isoformat(),
        }

    def get_message(self, session_id: str, message_id: str) -> Message:
        session = self.get_session(session_id)
        for message in session.messages:
            if message.id == message_id:
                return message
        raise NotFoundError(f"Message '{message_id}' not found in session '{session_id}'")

    def export_message(self, session_id: str, message_id: str) -> dict:
        """A single message as JSON (the per-message download)."""
        message = self.get_message(session_id, message_id)
        return message.model_dump(mode="json", by_alias=True, exclude_none=True)

    # --------------------------------------------------------------------------
    # LISTENERS
    # --------------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self.list_sessions())

    # --------------------------------------------------------------------------
    # HELPERS
    # --------------------------------------------------------------------------

    def _find(self, session_id: str) -> Optional[Session]:
        for session in self._sessions:
            if session.id == session_id:
                return session
        return None

    @staticmethod
    def _new_session() -> Session:
        now = utc_now()
        prompt_units, completion_units, _ = GREETING_USAGE
        greeting = Message(
            id=_new_id(),
            role="assistant",
            content=GREETING_TEXT,
            created_at=now,
            model_id=DEFAULT_MODEL_ID,
            usage=UsageCounters.of(prompt_units, completion_units),
        )
        return Session(
            id=_new_id(),
            title=DEFAULT_SESSION_TITLE,
            messages=[greeting],
            created_at=now,
            updated_at=now,
        )
