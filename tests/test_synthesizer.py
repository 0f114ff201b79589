import asyncio
import itertools
import math
import random

import pytest

from promptdesk.errors import InvalidInputError
from promptdesk.models import ParameterSet
from promptdesk.services.synthesizer import (
    BASE_TEMPLATES,
    ResponseSynthesizer,
    compose_reply,
    count_units,
    model_family_remark,
)


def test_explain_recursion_on_gpt4_is_creative(synthesizer):
    params = ParameterSet(temperature=0.9)
    result = asyncio.run(synthesizer.synthesize("Explain recursion", "gpt-4", params))

    assert "Creative insight" in result.text
    assert "GPT-4 capabilities" in result.text
    assert result.usage.prompt_units == 5
    assert result.usage.total_units == result.usage.prompt_units + result.usage.completion_units


@pytest.mark.parametrize("variant", range(len(BASE_TEMPLATES)))
def test_every_template_mentions_prompt_model_and_parameters(variant):
    params = ParameterSet(
        temperature=0.35, max_length=1234, top_p=0.65, frequency_penalty=-0.25, presence_penalty=1.75
    )
    text = compose_reply("Summarize the meeting", "gemini-pro", params, variant)

    assert "Summarize the meeting" in text
    assert "gemini-pro" in text
    for value in ("0.35", "1234", "0.65", "-0.25", "1.75"):
        assert value in text


def test_annotations_follow_fixed_order():
    params = ParameterSet(temperature=0.1, top_p=0.2, frequency_penalty=1.5, presence_penalty=-1.5)
    text = compose_reply("hi", "claude-3-opus", params, 0)

    markers = [
        "Technical analysis",
        "Focused sampling",
        "Anti-repetition",
        "Topic focus",
        "Claude strengths",
    ]
    positions = [text.index(m) for m in markers]
    assert positions == sorted(positions)


def test_opposite_annotations():
    params = ParameterSet(temperature=0.5, top_p=0.95, frequency_penalty=-1, presence_penalty=1)
    text = compose_reply("hi", "gpt-3.5-turbo", params, 1)

    assert "Diverse sampling" in text
    assert "Repetition-friendly" in text
    assert "Topic diversity" in text
    assert "GPT-3.5 Turbo" in text
    assert "Creative insight" not in text
    assert "Technical analysis" not in text


def test_neutral_parameters_add_no_annotations():
    params = ParameterSet(temperature=0.5, top_p=0.6, frequency_penalty=0.5, presence_penalty=-0.5)
    text = compose_reply("hi", "custom", params, 0)
    assert "\n\n" not in text


@pytest.mark.parametrize("model_id", ["", None, "gemini-pro", "custom"])
def test_unknown_or_empty_model_gets_no_family_remark(model_id):
    assert model_family_remark(model_id) is None
    text = compose_reply("hi", model_id, ParameterSet(), 2)
    assert "capabilities" not in text


def test_family_match_is_substring_and_first_wins():
    assert model_family_remark("gpt-4o").startswith("GPT-4")
    assert model_family_remark("my-claude-finetune").startswith("Claude")
    assert model_family_remark("gpt-3.5-turbo").startswith("GPT-3.5")


def test_truncation_bound_holds_across_parameter_grid():
    temperatures = [0.0, 0.3, 0.75, 1.0]
    top_ps = [0.0, 0.6, 1.0]
    penalties = [-2.0, 0.0, 2.0]
    for temperature, top_p, penalty, max_length in itertools.product(
        temperatures, top_ps, penalties, [100, 150, 4000]
    ):
        params = ParameterSet(
            temperature=temperature,
            top_p=top_p,
            frequency_penalty=penalty,
            presence_penalty=-penalty,
            max_length=max_length,
        )
        for variant in range(len(BASE_TEMPLATES)):
            text = compose_reply("Explain recursion", "gpt-4", params, variant)
            assert len(text) <= math.floor(max_length * 3) + len("...")


def test_truncated_reply_ends_with_ellipsis():
    text = compose_reply("x" * 500, "gpt-4", ParameterSet(max_length=100), 0)
    assert len(text) == 303
    assert text.endswith("...")


def test_clamped_values_are_what_the_text_reports():
    params = ParameterSet(temperature=9, top_p=-3, frequency_penalty=40, presence_penalty=-40)
    text = compose_reply("hi", "gpt-4", params, 0)
    assert "temperature 1," in text
    assert "top P 0," in text
    assert "frequency penalty 2," in text
    assert "presence penalty -2," in text


def test_count_units_rounds_up():
    assert count_units("") == 0
    assert count_units("abcd") == 1
    assert count_units("abcde") == 2


def test_very_long_prompt(synthesizer):
    prompt = "é" * 100_001
    result = asyncio.run(synthesizer.synthesize(prompt, "gpt-4", ParameterSet()))
    assert result.usage.prompt_units == 25_001
    assert len(result.text) <= 3003


@pytest.mark.parametrize("prompt", ["", "   ", None])
def test_empty_prompt_is_invalid(synthesizer, prompt):
    with pytest.raises(InvalidInputError):
        asyncio.run(synthesizer.synthesize(prompt, "gpt-4", ParameterSet()))


def test_seeded_synthesizers_agree():
    async def no_sleep(_):
        return None

    a = ResponseSynthesizer(rng=random.Random(7), latency=(0, 0), sleep=no_sleep)
    b = ResponseSynthesizer(rng=random.Random(7), latency=(0, 0), sleep=no_sleep)
    texts_a = [asyncio.run(a.synthesize("q", "gpt-4", ParameterSet())).text for _ in range(5)]
    texts_b = [asyncio.run(b.synthesize("q", "gpt-4", ParameterSet())).text for _ in range(5)]
    assert texts_a == texts_b


def test_latency_is_drawn_from_configured_range():
    delays = []

    async def record(delay):
        delays.append(delay)

    synth = ResponseSynthesizer(rng=random.Random(3), latency=(1.0, 3.0), sleep=record)
    for _ in range(20):
        asyncio.run(synth.synthesize("q", "gpt-4", ParameterSet()))

    assert len(delays) == 20
    assert all(1.0 <= d <= 3.0 for d in delays)
