"""
CHAT SERVICE MODULE
===================

Runs one conversational turn end to end:

  1. append the user message to the session (title is derived here on the first one),
  2. ask the ResponseSynthesizer for a reply using the current ParameterSet,
  3. append the reply as an assistant message.

Persistence happens through the store listeners wired in promptdesk.main, so
each append is snapshotted as it lands.

ONE TURN AT A TIME PER SESSION:
  While a reply is pending for a session, another send to that session is
  rejected with SessionBusyError. Other sessions, parameter edits and template
  operations are unaffected; the synthesizer only awaits an asyncio.sleep.

CANCELLATION:
  cancel() (or deleting the session) abandons the pending turn. When the
  synthesizer later returns, its reply is thrown away instead of being
  appended, and the caller gets SynthesisCancelledError.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from pydantic.alias_generators import to_camel

from config import DEFAULT_MODEL_ID
from promptdesk.errors import (
    InvalidInputError,
    PromptDeskError,
    SessionBusyError,
    SynthesisCancelledError,
    SynthesisFailureError,
)
from promptdesk.models import PARAMETER_RANGES, ChatResponse, ChatTurn, ParameterSet
from promptdesk.services.parameters import ParameterStore
from promptdesk.services.session_store import SessionStore
from promptdesk.services.synthesizer import ResponseSynthesizer
from promptdesk.utils.clock import utc_now

logger = logging.getLogger("PromptDesk")


class ChatService:
    """Connects the session store, the parameter store and the synthesizer."""

    def __init__(
        self,
        session_store: SessionStore,
        parameter_store: ParameterStore,
        synthesizer: ResponseSynthesizer,
    ):
        self.session_store = session_store
        self.parameter_store = parameter_store
        self.synthesizer = synthesizer
        # session_id -> token of the turn currently waiting on the synthesizer.
        self._pending: Dict[str, object] = {}

    def is_pending(self, session_id: str) -> bool:
        return session_id in self._pending

    async def send_message(
        self,
        session_id: str,
        prompt: Optional[str],
        model_id: Optional[str] = None,
    ) -> ChatTurn:
        """
        Append the user's prompt, synthesize a reply, append it, and return both
        messages. An empty or missing model_id means DEFAULT_MODEL_ID. Raises
        InvalidInputError, NotFoundError, SessionBusyError,
        SynthesisFailureError or SynthesisCancelledError.
        """
        if self.is_pending(session_id):
            raise SessionBusyError("A reply is already being generated for this session")

        model_id = model_id or DEFAULT_MODEL_ID
        user_message = self.session_store.append_user_message(session_id, prompt or "")
        params = self.parameter_store.get()

        token = object()
        self._pending[session_id] = token
        try:
            result = await self.synthesizer.synthesize(user_message.content, model_id, params)
            # Cancelled, superseded by a newer turn, or the session was deleted meanwhile.
            stale = (
                self._pending.get(session_id) is not token
                or not self.session_store.has_session(session_id)
            )
        except PromptDeskError:
            raise
        except Exception as e:
            logger.error("Synthesis failed for session %s: %s", session_id, e, exc_info=True)
            raise SynthesisFailureError(
                "Failed to generate a response. Please try again.",
                prompt=user_message.content,
            ) from e
        finally:
            if self._pending.get(session_id) is token:
                del self._pending[session_id]

        if stale:
            logger.info("Discarding stale reply for session %s", session_id)
            raise SynthesisCancelledError("The request was cancelled before the reply arrived")

        assistant_message = self.session_store.append_assistant_message(
            session_id, result.text, model_id, result.usage
        )
        return ChatTurn(
            session_id=session_id,
            user_message=user_message,
            assistant_message=assistant_message,
        )

    def cancel(self, session_id: str) -> bool:
        """Abandon the pending turn of a session. Returns False if none was pending."""
        if self._pending.pop(session_id, None) is None:
            return False
        logger.info("Cancelled pending reply for session %s", session_id)
        return True

    def delete_session(self, session_id: str) -> None:
        self.cancel(session_id)
        self.session_store.delete_session(session_id)

    async def quick_chat(
        self,
        prompt: Optional[str],
        model_id: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> ChatResponse:
        """
        Stateless one-shot reply (POST /chat). Given parameters override the
        current ones for this call only and are echoed back after clamping.
        """
        if not prompt or not prompt.strip():
            raise InvalidInputError("Prompt is required")

        model_id = model_id or DEFAULT_MODEL_ID
        params = self.parameter_store.get()
        if parameters:
            merged = params.model_dump(by_alias=True)
            for key, value in parameters.items():
                merged[to_camel(key) if key in PARAMETER_RANGES else key] = value
            params = ParameterSet.model_validate(merged)

        try:
            result = await self.synthesizer.synthesize(prompt, model_id, params)
        except PromptDeskError:
            raise
        except Exception as e:
            logger.error("Synthesis failed for quick chat: %s", e, exc_info=True)
            raise SynthesisFailureError("Failed to process chat request", prompt=prompt) from e

        return ChatResponse(
            id=str(uuid.uuid4()),
            prompt=prompt,
            response=result.text,
            model_id=model_id,
            parameters=params,
            timestamp=utc_now(),
            usage=result.usage,
        )
