"""
MODEL CATALOG
=============

The static list of models a user can pick from. Nothing here talks to a real
provider: the id is only used by the response synthesizer to choose a
model-family remark. The catalog is never mutated at runtime.
"""

from typing import List

from promptdesk.errors import NotFoundError
from promptdesk.models import ModelInfo


MODELS: List[ModelInfo] = [
    ModelInfo(
        id="gpt-4o",
        name="GPT-4o",
        description="Latest GPT-4 model with improved reasoning and speed",
        max_length=128000,
    ),
    ModelInfo(
        id="gpt-4-turbo",
        name="GPT-4 Turbo",
        description="Fast and efficient GPT-4 variant",
        max_length=128000,
    ),
    ModelInfo(
        id="gpt-4",
        name="GPT-4",
        description="Most capable model for complex reasoning",
        max_length=8192,
    ),
    ModelInfo(
        id="gpt-3.5-turbo",
        name="GPT-3.5 Turbo",
        description="Fast and efficient for most tasks",
        max_length=4096,
    ),
    ModelInfo(
        id="claude-3-opus",
        name="Claude 3 Opus",
        description="Anthropic's most powerful model",
        max_length=200000,
    ),
    ModelInfo(
        id="claude-3-sonnet",
        name="Claude 3 Sonnet",
        description="Balanced performance and speed",
        max_length=200000,
    ),
    ModelInfo(
        id="claude-3-haiku",
        name="Claude 3 Haiku",
        description="Fast and efficient Claude model",
        max_length=200000,
    ),
    ModelInfo(
        id="gemini-pro",
        name="Gemini Pro",
        description="Google's advanced reasoning model",
        max_length=32768,
    ),
    ModelInfo(
        id="custom",
        name="Custom Model",
        description="Use your own model configuration",
        max_length=4096,
        is_custom=True,
    ),
]


def list_models() -> List[ModelInfo]:
    return list(MODELS)


def get_model(model_id: str) -> ModelInfo:
    for model in MODELS:
        if model.id == model_id:
            return model
    raise NotFoundError(f"Model '{model_id}' not found")
