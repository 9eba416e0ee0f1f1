"""Ideation Service — creative routes over a fake language model.

Invariants:
    - Unparsable replies raise ProviderResponseError
    - creative_ideas keeps only requested categories
    - creative_image survives concept failures
"""

import json

import pytest

from artiquity.core.errors import (
    ProviderAPIError, ProviderResponseError, ValidationFailedError,
)
from artiquity.core.provider_protocols import Attachment
from artiquity.services import ideation
from artiquity.services.response_schemas import ARTIST_CAPSULE_KEYS
from tests.services.fakes import FakeImages, FakeLanguageModel


async def test_identity_capsule_parses_fenced_json():
    llm = FakeLanguageModel('```json\n{"brandEssence": "bold"}\n```')
    logo = Attachment(b"\x89PNG", "image/png")
    result = await ideation.identity_capsule(llm, "Acme", (logo,))
    assert result == {"brandEssence": "bold"}
    assert "Acme" in llm.calls[0]["prompt"]
    assert llm.calls[0]["schema"] is not None
    assert llm.calls[0]["attachments"] == (logo,)


async def test_identity_capsule_rejects_prose():
    with pytest.raises(ProviderResponseError) as exc:
        await ideation.identity_capsule(FakeLanguageModel("sorry, cannot help"), "Acme")
    assert exc.value.http_status == 502


async def test_artist_capsule_requires_every_section():
    partial = {k: ["x"] for k in ARTIST_CAPSULE_KEYS[:-1]}
    with pytest.raises(ProviderResponseError):
        await ideation.artist_identity_capsule(FakeLanguageModel(json.dumps(partial)), "Ada")

    full = {k: ["x"] for k in ARTIST_CAPSULE_KEYS}
    assert await ideation.artist_identity_capsule(FakeLanguageModel(json.dumps(full)), "Ada") == full


async def test_creative_ideas_keeps_requested_categories():
    reply = json.dumps({
        "audience_expansion": ["a"],
        "category_exploration": ["b"],
        "partnership_and_collaboration": [],
    })
    result = await ideation.creative_ideas(
        FakeLanguageModel(reply), "Acme", ["bold"],
        ["audience_expansion", "partnership_and_collaboration"],
    )
    assert result == {"audience_expansion": ["a"]}


def test_normalize_ideas():
    assert ideation.normalize_ideas(" one ", ["two", "one", "", 3]) == ["one", "two"]
    assert ideation.normalize_ideas(None, "solo") == ["solo"]
    assert ideation.normalize_ideas(None, None) == []


async def test_analyze_trends_needs_an_idea():
    with pytest.raises(ValidationFailedError):
        await ideation.analyze_trends(FakeLanguageModel(), "Acme", "  ", [])


async def test_analyze_trends_empty_reply():
    with pytest.raises(ProviderResponseError):
        await ideation.analyze_trends(FakeLanguageModel(""), "Acme", "idea", None)


async def test_generate_text_passes_through():
    result = await ideation.generate_text(FakeLanguageModel("hello", provider="anthropic"), "hi")
    assert result == {"text": "hello", "provider": "anthropic"}


def test_vision_board_uses_preview_url():
    result = ideation.vision_board(FakeImages(), None, "neon koi")
    assert result["success"] is True
    assert "Brand" in result["prompt"]
    assert result["imageDataUrl"].startswith("https://image.pollinations.ai/")


async def test_creative_image_with_concept():
    images = FakeImages()
    result = await ideation.creative_image(
        FakeLanguageModel("A quiet storm of color"), images,
        "Ada", "audience_expansion", ["ink"], {"mood": "calm"},
    )
    assert result["imageUrl"] == images.url
    assert result["concept"] == "A quiet storm of color"
    assert images.prompts == [result["prompt"]]


async def test_creative_image_concept_failure_uses_default():
    llm = FakeLanguageModel(ProviderAPIError("gemini", "down", "server_error"))
    result = await ideation.creative_image(llm, FakeImages(), "Ada", "s", [], {})
    assert result["concept"] == "Visual concept for Ada"


async def test_creative_image_without_model():
    result = await ideation.creative_image(None, FakeImages(), "Ada", "s", [], {})
    assert result["concept"] == "Visual concept for Ada"
    assert result["success"] is True


def test_search_insights_shape():
    result = ideation.search_insights("neo-noir", "trend")
    assert result["searchQuery"].startswith("neo-noir")
    assert result["sources"]
    assert result["insights"]
