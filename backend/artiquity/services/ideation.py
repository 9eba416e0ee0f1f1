"""Ideation Service — brand and artist creative routes over the configured language model.

Invariants:
    - Every JSON route sends a response schema; the reply is parsed with
      core/json_extraction, never with a bare json.loads
    - Unparsable replies raise ProviderResponseError (502) unless the route has a
      literal fallback
    - creative_ideas returns only the categories that were requested
    - creative_image always returns an image URL: image and concept failures
      degrade to the Pollinations preview and a default concept

Design Decisions:
    - Providers are arguments (LanguageModel, ImageGenerator Protocols), so routes
      stay thin and tests pass flat fakes
    - search_insights uses curated source tables (core/search_insights) and needs
      no provider at all
"""

import logging

from artiquity.core.errors import ArtiquityError, ProviderResponseError, ValidationFailedError
from artiquity.core.json_extraction import parse_model_object
from artiquity.core.provider_protocols import Attachment, ImageGenerator, LanguageModel
from artiquity.core.search_insights import build_insights, expand_query, find_sources
from artiquity.core.timestamps import iso, utc_now
from artiquity.services import prompts, response_schemas

logger = logging.getLogger(__name__)


def _require_object(llm: LanguageModel, text: str) -> dict:
    parsed = parse_model_object(text)
    if parsed is None:
        logger.warning(f"Unparsable {llm.provider} response: {text[:200]}")
        raise ProviderResponseError(llm.provider, "response is not a JSON object")
    return parsed


async def identity_capsule(
    llm: LanguageModel, brand_name: str, attachments: tuple[Attachment, ...] = (),
) -> dict:
    text = await llm.generate(
        prompts.identity_capsule_prompt(brand_name),
        schema=response_schemas.IDENTITY_CAPSULE,
        attachments=attachments,
    )
    return _require_object(llm, text)


async def artist_identity_capsule(llm: LanguageModel, artist_name: str) -> dict:
    text = await llm.generate(
        prompts.artist_capsule_prompt(artist_name),
        schema=response_schemas.ARTIST_IDENTITY_CAPSULE,
    )
    capsule = _require_object(llm, text)
    missing = [k for k in response_schemas.ARTIST_CAPSULE_KEYS if not capsule.get(k)]
    if missing:
        raise ProviderResponseError(llm.provider, f"capsule is missing {', '.join(missing)}")
    return capsule


async def creative_ideas(
    llm: LanguageModel,
    brand_name: str,
    identity_selections: list[str],
    categories: list[str],
) -> dict:
    text = await llm.generate(
        prompts.creative_ideas_prompt(brand_name, identity_selections, categories),
        schema=response_schemas.CREATIVE_IDEAS,
    )
    result = _require_object(llm, text)
    return {c: result[c] for c in categories if result.get(c)}


def normalize_ideas(idea: str | None, creative_ideas: list[str] | str | None) -> list[str]:
    """Trimmed, de-duplicated ideas in first-seen order."""
    candidates: list = [idea]
    if isinstance(creative_ideas, list):
        candidates += creative_ideas
    else:
        candidates.append(creative_ideas)
    ideas = [c.strip() for c in candidates if isinstance(c, str) and c.strip()]
    return list(dict.fromkeys(ideas))


async def analyze_trends(
    llm: LanguageModel,
    brand_name: str,
    idea: str | None,
    creative_ideas: list[str] | str | None,
) -> dict:
    ideas = normalize_ideas(idea, creative_ideas)
    if not ideas:
        raise ValidationFailedError(
            "At least one creative idea is required", field="creativeIdeas",
        )
    text = await llm.generate(
        prompts.trend_analysis_prompt(brand_name, ideas),
        schema=response_schemas.TREND_ANALYSIS,
    )
    if not text:
        raise ProviderResponseError(llm.provider, "empty trend analysis")
    return _require_object(llm, text)


async def generate_samples(
    llm: LanguageModel, idea: str, brand_name: str, identity_elements: list[str],
) -> dict:
    text = await llm.generate(
        prompts.samples_prompt(idea, brand_name, identity_elements),
        schema=response_schemas.SAMPLES,
    )
    return _require_object(llm, text)


async def generate_text(llm: LanguageModel, prompt: str) -> dict:
    """Raw pass-through generation; the reply is returned as text."""
    text = await llm.generate(prompt)
    return {"text": text, "provider": llm.provider}


def vision_board(images: ImageGenerator, brand_name: str | None, idea: str) -> dict:
    prompt = prompts.vision_board_prompt(brand_name or "Brand", idea)
    return {
        "imageDataUrl": images.preview_url(prompt),
        "prompt": prompt,
        "success": True,
        "note": "Vision board generated successfully",
    }


async def creative_image(
    llm: LanguageModel | None,
    images: ImageGenerator,
    artist_name: str,
    strategy: str,
    identity_elements: list[str],
    inputs: dict,
) -> dict:
    prompt = prompts.creative_image_prompt(artist_name, strategy, identity_elements, inputs)
    image_url = await images.create_image(prompt)

    concept = f"Visual concept for {artist_name}"
    if llm is not None:
        try:
            generated = await llm.generate(
                prompts.creative_concept_prompt(artist_name, strategy, identity_elements),
            )
        except ArtiquityError as e:
            logger.warning(f"Concept generation failed, using default: {e.message}")
        else:
            concept = generated or concept

    return {
        "prompt": prompt,
        "concept": concept,
        "imageUrl": image_url,
        "note": "Real AI-generated image created successfully",
        "success": True,
    }


def search_insights(query: str, insight_type: str) -> dict:
    search_query, count = expand_query(query, insight_type)
    sources = find_sources(search_query, count)
    return {
        "insights": build_insights(query, insight_type, sources),
        "sources": sources,
        "searchQuery": search_query,
        "timestamp": iso(utc_now()),
    }

