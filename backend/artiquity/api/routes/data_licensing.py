"""Data Licensing Routes — AI helpers for data owners pricing their datasets.

Invariants:
    - licensing-estimates answers with a placeholder, without touching a
      provider, when the terms carry no compensation model or a zero budget
"""

from fastapi import APIRouter, Depends

from artiquity.api.dependencies import (
    get_language_model, get_optional_language_model, ip_rate_limit,
)
from artiquity.config import get_settings
from artiquity.core.errors import ProviderNotConfiguredError
from artiquity.core.provider_protocols import LanguageModel
from artiquity.schemas.data_licensing import (
    DataDescriptionRequest, DatasetPreviewRequest, DatasetSummaryRequest,
    LicensingEstimateRequest, ProfileKeywordsRequest,
)
from artiquity.services import data_licensing

router = APIRouter(
    prefix="/api/v1/ai", tags=["data-licensing"], dependencies=[Depends(ip_rate_limit)],
)


@router.post("/data-estimates")
async def data_estimates(
    body: DataDescriptionRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await data_licensing.data_estimate(
        llm, body.description, body.purposes, body.attachments(),
    )


@router.post("/data-identity-capsules")
async def data_identity_capsules(
    body: DataDescriptionRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await data_licensing.data_identity_capsules(
        llm, body.description, body.purposes, body.attachments(),
    )


@router.post("/data-profile-keywords")
async def data_profile_keywords(
    body: ProfileKeywordsRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await data_licensing.data_profile_keywords(llm, body.description)


@router.post("/dataset-summary")
async def dataset_summary(
    body: DatasetSummaryRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await data_licensing.dataset_summary(llm, body.profile)


@router.post("/dataset-preview")
async def dataset_preview(
    body: DatasetPreviewRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await data_licensing.dataset_preview(llm, body.profile, body.capsule)


@router.post("/licensing-estimates")
async def licensing_estimates(
    body: LicensingEstimateRequest,
    llm: LanguageModel | None = Depends(get_optional_language_model),
):
    if llm is None and data_licensing.needs_estimate(body.terms):
        provider = get_settings().llm_provider
        raise ProviderNotConfiguredError(provider, f"{provider}_api_key")
    return await data_licensing.licensing_estimate(llm, body.profile, body.terms)
