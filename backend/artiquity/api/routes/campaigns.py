"""Campaign Routes — synchronicity research, campaign generation and deployment.

Invariants:
    - Rate limited per client IP like every AI route
    - deploy-campaign calls no provider; it only packages and estimates
"""

import logging

from fastapi import APIRouter, Depends

from artiquity.api.dependencies import get_language_model, get_research_client, ip_rate_limit
from artiquity.config import get_settings
from artiquity.core.provider_protocols import LanguageModel, ResearchClient
from artiquity.schemas.campaign import (
    CampaignRequest, ContextualCampaignRequest, DeployRequest, SynchronicityRequest,
)
from artiquity.services import campaigns

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/ai", tags=["campaigns"], dependencies=[Depends(ip_rate_limit)],
)


@router.post("/synchronicity-dashboard")
async def synchronicity_dashboard(
    body: SynchronicityRequest, research: ResearchClient = Depends(get_research_client),
):
    return await campaigns.synchronicity_dashboard(research, body.creative_output)


@router.post("/generate-campaign")
async def generate_campaign(
    body: CampaignRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await campaigns.generate_campaign(
        llm, body.brand_name, body.synchronicity_result, body.identity_elements,
    )


@router.post("/generate-contextual-campaign")
async def generate_contextual_campaign(
    body: ContextualCampaignRequest, llm: LanguageModel = Depends(get_language_model),
):
    return await campaigns.generate_contextual_campaign(
        llm, body.brand_name, body.synchronicity_dashboard, body.identity_elements,
    )


@router.post("/deploy-campaign")
async def deploy_campaign(body: DeployRequest):
    settings = get_settings()
    if body.action != "deploy":
        logger.info(f"Unknown deploy action '{body.action}', packaging anyway")
    return campaigns.deploy_campaign(
        body.campaign, body.brand_name,
        promote_base_url=settings.promote_base_url,
        environment=settings.environment,
    )
