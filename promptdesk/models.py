"""
DATA MODELS MODULE
==================

This file defines the Pydantic models used for API requests, responses, and
the durable snapshot. FastAPI uses these to validate incoming JSON and to
serialize responses; the persistence adapter uses them when saving/loading.

Field names are snake_case in Python and camelCase on the wire and on disk
(maxLength, modelId, createdAt, promptUnits). Timestamps are timezone-aware
UTC datetimes, serialized as ISO-8601 strings.

MODELS:
  ParameterSet     - The generation controls. Every field is clamped on construction.
  UsageCounters    - Approximate prompt/completion/total units of one reply.
  Message          - One turn in a session (user or assistant). Immutable.
  Session          - An ordered list of messages plus title and timestamps.
  Template         - A saved, reusable prompt body. Immutable.
  ModelInfo        - One entry of the static model catalog.
  SynthesisResult  - What the response synthesizer returns.
  Snapshot         - Everything that is persisted; None marks an absent/corrupt record.
  *Request/*Response - Bodies of the HTTP endpoints.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from promptdesk.utils.clock import utc_now


class CamelModel(BaseModel):
    """Base for every model: camelCase aliases, snake_case attributes accepted too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==============================================================================
# GENERATION PARAMETERS
# ==============================================================================

# (min, max) per field. Values outside are clamped, never rejected.
PARAMETER_RANGES = {
    "temperature": (0.0, 1.0),
    "max_length": (100, 4000),
    "top_p": (0.0, 1.0),
    "frequency_penalty": (-2.0, 2.0),
    "presence_penalty": (-2.0, 2.0),
}


def coerce_number(value: Any) -> float:
    """
    Turn any input into a float; non-numeric input (and NaN) becomes 0.
    Integers too large for a float become +/-inf, which the clamp maps to a bound.
    """
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ParameterSet(CamelModel):
    """
    Tunable generation controls applied to every synthesis call.

    Construction never fails on bad values: each field is coerced to a number
    and clamped into its range, so anything holding a ParameterSet can trust it.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    temperature: float = 0.7
    max_length: int = 1000
    top_p: float = 0.9
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def _clamp_into_range(cls, value: Any, info) -> Any:
        low, high = PARAMETER_RANGES[info.field_name]
        clamped = clamp(coerce_number(value), low, high)
        if info.field_name == "max_length":
            return int(clamped)
        return clamped


# ==============================================================================
# MESSAGES AND SESSIONS
# ==============================================================================

class UsageCounters(CamelModel):
    """Approximate text quantity of one exchange; total is always prompt + completion."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    prompt_units: int
    completion_units: int
    total_units: int

    @classmethod
    def of(cls, prompt_units: int, completion_units: int) -> "UsageCounters":
        return cls(
            prompt_units=prompt_units,
            completion_units=completion_units,
            total_units=prompt_units + completion_units,
        )


class Message(CamelModel):
    """
    A single message in a conversation (user or assistant).
    model_id and usage are only set on assistant messages.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    role: Literal["user", "assistant"]
    content: str
    created_at: datetime = Field(default_factory=utc_now)
    model_id: Optional[str] = None
    usage: Optional[UsageCounters] = None


class Session(CamelModel):
    """
    One ongoing conversation. Owned by the SessionStore, which is the only
    thing allowed to append messages or change the title.
    """
    id: str
    title: str
    # Never empty: every session starts with the greeting.
    messages: List[Message] = Field(min_length=1)
    created_at: datetime
    updated_at: datetime


class SessionSummary(CamelModel):
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    message_count: int


class SessionList(CamelModel):
    active_session_id: Optional[str]
    sessions: List[SessionSummary]


# ==============================================================================
# TEMPLATES AND MODEL CATALOG
# ==============================================================================

class Template(CamelModel):
    """A saved prompt body. Never edited after creation, only deleted."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    description: str = ""
    content: str
    category: str
    created_at: datetime


class ModelInfo(CamelModel):
    id: str
    name: str
    description: str
    max_length: int
    is_custom: Optional[bool] = None


# ==============================================================================
# SYNTHESIS AND SNAPSHOT
# ==============================================================================

class SynthesisResult(CamelModel):
    text: str
    usage: UsageCounters


class Snapshot(CamelModel):
    """
    Everything the persistence adapter saves. On load, a None field means the
    record was absent or could not be parsed; the owner falls back to defaults.
    """
    parameters: Optional[ParameterSet] = None
    sessions: Optional[List[Session]] = None
    templates: Optional[List[Template]] = None


# ==============================================================================
# API REQUEST/RESPONSE MODELS
# ==============================================================================
# Required text fields are Optional here so a missing value reaches the handler
# and is answered with 400 (not FastAPI's default 422).

class ChatRequest(CamelModel):
    """
    Request body for POST /chat.

    - prompt: Required. Missing or blank returns 400.
    - model_id: Optional. Defaults to the configured default model.
    - parameters: Optional partial ParameterSet (camelCase keys). Omitted
      fields use the current parameters.
    """
    prompt: Optional[str] = None
    model_id: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


class ChatResponse(CamelModel):
    """Response body for POST /chat. Parameters are echoed after clamping."""
    id: str
    prompt: str
    response: str
    model_id: str
    parameters: ParameterSet
    timestamp: datetime
    usage: UsageCounters


class SendMessageRequest(CamelModel):
    """Request body for POST /sessions/{id}/messages."""
    prompt: Optional[str] = None
    model_id: Optional[str] = None


class ChatTurn(CamelModel):
    """The user message and the assistant reply appended for it."""
    session_id: str
    user_message: Message
    assistant_message: Message


class TemplateCreateRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None


class ParametersUpdateRequest(CamelModel):
    """Partial update; values of any type are coerced and clamped by the store."""
    temperature: Optional[Any] = None
    max_length: Optional[Any] = None
    top_p: Optional[Any] = None
    frequency_penalty: Optional[Any] = None
    presence_penalty: Optional[Any] = None


class RenameSessionRequest(CamelModel):
    title: Optional[str] = None
