"""Ideation Routes — brand and artist AI helpers behind the creative wizard.

Invariants:
    - Every route is rate limited per client IP
    - A missing provider key is a 503 PROVIDER_NOT_CONFIGURED raised by the
      provider dependency, before any prompt is built
    - search-insights needs no provider

Design Decisions:
    - Routes stay thin: validation in schemas, prompting and parsing in
      services.ideation
"""

from fastapi import APIRouter, Depends

from artiquity.api.dependencies import (
    get_image_generator, get_language_model, get_optional_language_model,
    ip_rate_limit,
)
from artiquity.core.provider_protocols import ImageGenerator, LanguageModel
from artiquity.schemas.ideation import (
    ArtistCapsuleRequest, CreativeIdeasRequest, CreativeImageRequest,
    GenerateRequest, IdentityCapsuleRequest, SamplesRequest,
    SearchInsightsRequest, TrendAnalysisRequest, VisionBoardRequest,
)
from artiquity.services import ideation

router = APIRouter(
    prefix="/api/v1/ai", tags=["ideation"], dependencies=[Depends(ip_rate_limit)],
)


@router.post("/identity-capsule")
async def identity_capsule(
    body: IdentityCapsuleRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await ideation.identity_capsule(llm, body.brand_name, body.attachments())


@router.post("/artist-identity-capsule")
async def artist_identity_capsule(
    body: ArtistCapsuleRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await ideation.artist_identity_capsule(llm, body.artist_name)


@router.post("/creative-ideas")
async def creative_ideas(
    body: CreativeIdeasRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await ideation.creative_ideas(
        llm, body.brand_name, body.identity_selections,
        [c.value for c in body.selected_creative_categories],
    )


@router.post("/analyze-trends")
async def analyze_trends(
    body: TrendAnalysisRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await ideation.analyze_trends(
        llm, body.brand_name, body.idea, body.creative_ideas,
    )


@router.post("/generate-samples")
async def generate_samples(
    body: SamplesRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await ideation.generate_samples(
        llm, body.idea, body.brand_name, body.identity_elements,
    )


@router.post("/generate")
async def generate(
    body: GenerateRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await ideation.generate_text(llm, body.prompt)


@router.post("/generate-vision-board")
async def generate_vision_board(
    body: VisionBoardRequest, images: ImageGenerator = Depends(get_image_generator),
):
    return ideation.vision_board(images, body.brand_name, body.resolved_idea())


@router.post("/creative-image")
async def creative_image(
    body: CreativeImageRequest,
    images: ImageGenerator = Depends(get_image_generator),
    llm: LanguageModel | None = Depends(get_optional_language_model),
):
    """Image from FAL (or Pollinations) plus a short LLM concept when one is configured."""
    return await ideation.creative_image(
        llm, images, body.artist_name, body.selected_strategy,
        body.identity_elements, body.inputs,
    )


@router.post("/search-insights")
async def search_insights(body: SearchInsightsRequest):
    return ideation.search_insights(body.query, body.type.value)
