"""
RESPONSE SYNTHESIZER MODULE
===========================

Stands in for a real model. Given a prompt, a model id and a ParameterSet it
builds a reply by interpolation only; there is no understanding of the
prompt. The reply is:

  1. one of several base templates, picked at random, mentioning the prompt,
     the model and every parameter value;
  2. advisory annotations chosen by threshold rules, in a fixed order:
     temperature -> top P -> frequency penalty -> presence penalty;
  3. a model-family remark chosen by substring match on the model id;
  4. truncated to floor(maxLength * LENGTH_CHARS_PER_UNIT) characters, with
     an ellipsis when cut.

Usage is ceil(chars / USAGE_CHARS_PER_UNIT) for prompt and reply; this is an
approximation, not tokenization. Before returning, synthesize() awaits a
random delay so the backend feels like a real one. The delay is an
asyncio.sleep, so other requests keep being served meanwhile.

compose_reply() and count_units() are pure and used directly by tests; pass a
seeded random.Random and a zero latency range to make synthesize() repeatable.
"""

import asyncio
import logging
import math
import random
from typing import Awaitable, Callable, Iterator, Optional, Tuple

from config import (
    ELLIPSIS,
    LATENCY_MAX_SECONDS,
    LATENCY_MIN_SECONDS,
    LENGTH_CHARS_PER_UNIT,
    USAGE_CHARS_PER_UNIT,
)
from promptdesk.errors import InvalidInputError
from promptdesk.models import ParameterSet, SynthesisResult, UsageCounters

logger = logging.getLogger("PromptDesk")


# ==============================================================================
# TEXT TABLES
# ==============================================================================

BASE_TEMPLATES = (
    'Thank you for your prompt: "{prompt}". I understand you\'re using the {model} model '
    "with temperature {temperature}, top P {top_p}, frequency penalty {frequency_penalty}, "
    "presence penalty {presence_penalty}, and a max length of {max_length}. Here's my response based on your request...",

    'Based on your input "{prompt}", I can provide the following analysis using {model}. '
    "With temperature {temperature}, top P {top_p}, and penalties (freq: {frequency_penalty}, "
    "pres: {presence_penalty}) and a max length of {max_length}, I'll balance creativity and precision. Here's what I found...",

    'I\'ve processed your request: "{prompt}" using the {model} model. The settings '
    "(temp: {temperature}, top P: {top_p}, freq penalty: {frequency_penalty}, "
    "pres penalty: {presence_penalty}, max length: {max_length}) allow for {style} responses. Here's my detailed answer...",

    'Your prompt "{prompt}" has been analyzed with the {model} model at temperature '
    "{temperature}, top P {top_p}, and penalties {frequency_penalty}/{presence_penalty}, capped at {max_length} units. "
    "The current configuration will produce {variety} outputs with {sampling} sampling. "
    "Here's my response...",

    'Processing "{prompt}" with {model}. This configuration (temp: {temperature}, '
    "top P: {top_p}, penalties: {frequency_penalty}/{presence_penalty}, max length: {max_length}) will result in "
    "{creativity} responses. Here's what I can tell you...",
)

# Annotation thresholds.
CREATIVE_TEMPERATURE = 0.7
PRECISE_TEMPERATURE = 0.4
FOCUSED_TOP_P = 0.5
DIVERSE_TOP_P = 0.8
PENALTY_THRESHOLD = 0.5

# Checked in order; the first family whose key occurs in the model id wins.
MODEL_FAMILY_REMARKS = (
    ("gpt-4", "GPT-4 capabilities: This model provides advanced reasoning and detailed analysis."),
    ("claude", "Claude strengths: This model excels at nuanced understanding and helpful responses."),
    ("gpt-3.5", "GPT-3.5 Turbo: Fast and efficient responses with good quality."),
)


# ==============================================================================
# PURE COMPOSITION
# ==============================================================================

def _fmt(value: float) -> str:
    return f"{value:g}"


def _template_fields(prompt: str, model_id: str, params: ParameterSet) -> dict:
    temperature = params.temperature
    if temperature > 0.7:
        style = "creative"
    elif temperature > 0.4:
        style = "balanced"
    else:
        style = "precise"
    if temperature > 0.8:
        creativity = "highly creative"
    elif temperature > 0.5:
        creativity = "moderately creative"
    else:
        creativity = "factual"
    return {
        "prompt": prompt,
        "model": model_id,
        "temperature": _fmt(temperature),
        "top_p": _fmt(params.top_p),
        "frequency_penalty": _fmt(params.frequency_penalty),
        "presence_penalty": _fmt(params.presence_penalty),
        "max_length": params.max_length,
        "style": style,
        "variety": "more varied" if temperature > 0.6 else "more consistent",
        "sampling": "diverse" if params.top_p > 0.7 else "focused",
        "creativity": creativity,
    }


def _annotations(model_id: str, params: ParameterSet) -> Iterator[str]:
    """Yield every annotation whose rule fires, in the fixed order."""
    if params.temperature > CREATIVE_TEMPERATURE:
        yield (
            "Creative insight: This is an interesting perspective that opens up new "
            f"possibilities. The {model_id} model excels at creative tasks like this."
        )
    if params.temperature < PRECISE_TEMPERATURE:
        yield (
            "Technical analysis: Based on the parameters provided, this response is "
            "optimized for accuracy and consistency."
        )

    top_p = _fmt(params.top_p)
    if params.top_p < FOCUSED_TOP_P:
        yield f"Focused sampling: With top P {top_p}, the response is highly focused on the most likely tokens."
    elif params.top_p > DIVERSE_TOP_P:
        yield f"Diverse sampling: With top P {top_p}, the response explores a wider range of possibilities."

    frequency = _fmt(params.frequency_penalty)
    if params.frequency_penalty > PENALTY_THRESHOLD:
        yield f"Anti-repetition: Frequency penalty {frequency} helps avoid repetitive language."
    elif params.frequency_penalty < -PENALTY_THRESHOLD:
        yield f"Repetition-friendly: Frequency penalty {frequency} allows for more repetitive patterns."

    presence = _fmt(params.presence_penalty)
    if params.presence_penalty > PENALTY_THRESHOLD:
        yield f"Topic diversity: Presence penalty {presence} encourages exploring new topics."
    elif params.presence_penalty < -PENALTY_THRESHOLD:
        yield f"Topic focus: Presence penalty {presence} encourages staying on the current topic."

    remark = model_family_remark(model_id)
    if remark:
        yield remark


def model_family_remark(model_id: Optional[str]) -> Optional[str]:
    if not model_id:
        return None
    for family, remark in MODEL_FAMILY_REMARKS:
        if family in model_id:
            return remark
    return None


def truncate(text: str, max_length: int) -> str:
    """Cut text to floor(max_length * LENGTH_CHARS_PER_UNIT) characters, marking the cut."""
    limit = math.floor(max_length * LENGTH_CHARS_PER_UNIT)
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def count_units(text: str) -> int:
    """Approximate unit count: ceil(len / USAGE_CHARS_PER_UNIT)."""
    return math.ceil(len(text) / USAGE_CHARS_PER_UNIT)


def compose_reply(prompt: str, model_id: str, params: ParameterSet, variant: int) -> str:
    """
    Build the reply text for the given base-template variant (index into
    BASE_TEMPLATES, taken modulo its length). Deterministic.
    """
    model_id = model_id or ""
    template = BASE_TEMPLATES[variant % len(BASE_TEMPLATES)]
    parts = [template.format(**_template_fields(prompt, model_id, params))]
    parts.extend(_annotations(model_id, params))
    return truncate("\n\n".join(parts), params.max_length)


# ==============================================================================
# SYNTHESIZER
# ==============================================================================

class ResponseSynthesizer:
    """
    Async facade over compose_reply(): validates the prompt, picks a variant,
    computes usage, and waits a random latency before handing back the result.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        latency: Tuple[float, float] = (LATENCY_MIN_SECONDS, LATENCY_MAX_SECONDS),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        low, high = latency
        if low > high:
            low, high = high, low
        self.rng = rng or random.Random()
        self.latency = (max(0.0, low), max(0.0, high))
        self._sleep = sleep

    async def synthesize(self, prompt: str, model_id: str, params: ParameterSet) -> SynthesisResult:
        if not prompt or not prompt.strip():
            raise InvalidInputError("Prompt is required")

        variant = self.rng.randrange(len(BASE_TEMPLATES))
        text = compose_reply(prompt, model_id, params, variant)
        usage = UsageCounters.of(count_units(prompt), count_units(text))

        delay = self.rng.uniform(*self.latency)
        logger.info(
            "Synthesized reply for model=%s (variant %s, %s units), releasing in %.2fs",
            model_id or "-", variant, usage.total_units, delay,
        )
        await self._sleep(delay)
        return SynthesisResult(text=text, usage=usage)
