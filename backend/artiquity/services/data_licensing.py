"""Data Licensing Service — AI helpers for data owners describing a licensable dataset.

Invariants:
    - Free-text helpers return the model's trimmed reply under a single key
    - data_identity_capsules overwrites every capsule's profile.description with
      the user's own description
    - licensing_estimate never calls the model when no compensation model is
      chosen or the budget is zero
"""

import logging

from artiquity.core.errors import ProviderResponseError
from artiquity.core.json_extraction import parse_model_json, parse_model_object
from artiquity.core.provider_protocols import Attachment, LanguageModel
from artiquity.services import prompts, response_schemas

logger = logging.getLogger(__name__)

ESTIMATE_PLACEHOLDER = "Select a model and set a budget to see estimates."


def needs_estimate(terms: dict) -> bool:
    return bool(terms.get("compensationModel")) and terms.get("maxBudget") != 0


async def data_estimate(
    llm: LanguageModel,
    description: str,
    purposes: list[str],
    attachments: tuple[Attachment, ...] = (),
) -> dict:
    text = await llm.generate(
        prompts.data_estimate_prompt(description, purposes), attachments=attachments,
    )
    return {"estimate": text}


async def data_identity_capsules(
    llm: LanguageModel,
    description: str,
    purposes: list[str],
    attachments: tuple[Attachment, ...] = (),
) -> dict:
    text = await llm.generate(
        prompts.data_capsules_prompt(description, purposes),
        schema=response_schemas.DATA_IDENTITY_CAPSULES,
        attachments=attachments,
    )
    capsules = parse_model_json(text)
    if not isinstance(capsules, list):
        raise ProviderResponseError(llm.provider, "capsules are not a JSON array")
    result = []
    for capsule in capsules:
        if not isinstance(capsule, dict):
            continue
        profile = {**(capsule.get("profile") or {}), "description": description}
        result.append({**capsule, "profile": profile})
    return {"capsules": result}


async def data_profile_keywords(llm: LanguageModel, description: str) -> dict:
    text = await llm.generate(
        prompts.data_profile_prompt(description), schema=response_schemas.DATA_PROFILE,
    )
    parsed = parse_model_object(text)
    if parsed is None:
        raise ProviderResponseError(llm.provider, "data profile is not a JSON object")
    return parsed


async def dataset_summary(llm: LanguageModel, profile: dict) -> dict:
    return {"summary": await llm.generate(prompts.dataset_summary_prompt(profile))}


async def dataset_preview(llm: LanguageModel, profile: dict, capsule: dict) -> dict:
    return {"preview": await llm.generate(prompts.dataset_preview_prompt(profile, capsule))}


async def licensing_estimate(llm: LanguageModel | None, profile: dict, terms: dict) -> dict:
    """llm may be None only when the terms need no estimate."""
    if not needs_estimate(terms):
        return {"estimate": ESTIMATE_PLACEHOLDER}
    return {"estimate": await llm.generate(prompts.licensing_estimate_prompt(profile, terms))}
