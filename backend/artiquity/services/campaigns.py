"""Campaign Service — synchronicity research, campaign generation and deployment packages.

Invariants:
    - synchronicity_dashboard: research failures propagate (503); unparsable
      research content degrades to the canned dashboard, never to an error
    - Sources are merged from citations then search results, de-duplicated by
      URI, at most six, with fallback sources when the provider gave none
    - generate_campaign returns the model's object only when it has a
      "campaign" key; otherwise the literal fallback campaign
    - generate_contextual_campaign: the four components run concurrently and
      each failure is replaced by that component's own fallback

Design Decisions:
    - asyncio.gather over the components: they are independent prompts and the
      slowest one bounds the response time
    - Per-item failures inside ad copy / outreach are isolated per subculture
      and per influencer, matching how the wizard renders them
"""

import asyncio
import logging
from datetime import datetime

from artiquity.core.campaign_estimates import build_deployment
from artiquity.core.campaign_fallbacks import (
    DEFAULT_PLATFORMS,
    NO_INFLUENCERS,
    NO_SUBCULTURES,
    fallback_ad_copy,
    fallback_campaign,
    fallback_outreach,
    fallback_platform_content,
    fallback_social_plan,
)
from artiquity.core.errors import ArtiquityError, ErrorContext, ProviderAPIError
from artiquity.core.json_extraction import parse_model_json, parse_model_object
from artiquity.core.provider_protocols import LanguageModel, ResearchClient
from artiquity.core.synchronicity import (
    audience_items,
    extract_themes,
    fallback_dashboard,
    merge_sources,
)
from artiquity.core.timestamps import epoch_ms, iso, utc_now
from artiquity.services import prompts

logger = logging.getLogger(__name__)

CAMPAIGN_TIMEOUT_SECONDS = 35
MAX_TARGETS = 3
DEFAULT_IDEA = "Creative concept"
DEFAULT_SCORE = 85
CONTEXTUAL_TEMPERATURE = 0.8
CONTEXTUAL_MAX_TOKENS = 8192


# ─── Synchronicity ──────────────────────────────────────────────

async def synchronicity_dashboard(research: ResearchClient, creative_output: dict) -> dict:
    themes = extract_themes(creative_output)
    result = await research.research(
        prompts.SYNCHRONICITY_SYSTEM,
        prompts.synchronicity_prompt(creative_output, themes),
    )
    dashboard = parse_model_object(result.content)
    if dashboard is None:
        logger.warning(
            "Research content is not JSON, using canned dashboard",
            extra={"provider": "perplexity"},
        )
        dashboard = fallback_dashboard()
    dashboard["sources"] = merge_sources(result.citations, result.search_results)
    return dashboard


# ─── Campaign generation ────────────────────────────────────────

async def generate_campaign(
    llm: LanguageModel,
    brand_name: str,
    synchronicity_result: dict,
    identity_elements: list[str] | None,
    now: datetime | None = None,
) -> dict:
    now_ms = epoch_ms(now)
    idea = synchronicity_result.get("idea") or DEFAULT_IDEA
    score = synchronicity_result.get("score") or DEFAULT_SCORE
    prompt = prompts.campaign_prompt(
        brand_name, idea, score, identity_elements, f"campaign_{now_ms}",
    )
    try:
        text = await asyncio.wait_for(
            llm.generate(prompt), timeout=CAMPAIGN_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        raise ProviderAPIError(
            llm.provider, f"no answer within {CAMPAIGN_TIMEOUT_SECONDS}s", "timeout",
            context=ErrorContext(user_message="Campaign generation timed out"),
        )

    campaign = parse_model_object(text)
    if campaign is None or not isinstance(campaign.get("campaign"), dict):
        logger.warning("Campaign response unusable, using fallback campaign")
        return fallback_campaign(brand_name, idea, now_ms)
    return campaign


async def _generate_json(llm: LanguageModel, prompt: str):
    text = await llm.generate(
        prompt,
        temperature=CONTEXTUAL_TEMPERATURE,
        max_output_tokens=CONTEXTUAL_MAX_TOKENS,
    )
    value = parse_model_json(text)
    if value is None:
        raise ValueError("response is not JSON")
    return value


async def _ad_copy(llm, brand_name, dashboard, identity_elements) -> dict:
    subcultures = audience_items(dashboard.get("dashboard") or {}, "Subcultures")
    if not subcultures:
        return dict(NO_SUBCULTURES)
    copy: dict = {}
    for subculture in subcultures[:MAX_TARGETS]:
        try:
            copy[subculture] = await _generate_json(
                llm, prompts.ad_copy_prompt(brand_name, dashboard, identity_elements, subculture),
            )
        except (ArtiquityError, ValueError) as e:
            logger.warning(f"Ad copy for {subculture} failed: {e}")
            copy[subculture] = fallback_ad_copy(brand_name, subculture)
    return copy


async def _social_plan(llm, brand_name, dashboard, identity_elements):
    try:
        return await _generate_json(
            llm, prompts.social_plan_prompt(brand_name, dashboard, identity_elements),
        )
    except (ArtiquityError, ValueError) as e:
        logger.warning(f"Social plan failed: {e}")
        return fallback_social_plan(brand_name)


async def _outreach(llm, brand_name, dashboard, identity_elements) -> dict:
    influencers = audience_items(dashboard.get("dashboard") or {}, "Influencers/Tastemakers")
    if not influencers:
        return dict(NO_INFLUENCERS)
    templates: dict = {}
    for influencer in influencers[:MAX_TARGETS]:
        try:
            templates[influencer] = await _generate_json(
                llm, prompts.outreach_prompt(brand_name, dashboard, identity_elements, influencer),
            )
        except (ArtiquityError, ValueError) as e:
            logger.warning(f"Outreach for {influencer} failed: {e}")
            templates[influencer] = fallback_outreach(brand_name, influencer)
    return templates


async def _platform_content(llm, brand_name, dashboard, identity_elements):
    platforms = (
        audience_items(dashboard.get("dashboard") or {}, "Platforms")
        or list(DEFAULT_PLATFORMS)
    )
    try:
        return await _generate_json(
            llm,
            prompts.platform_content_prompt(brand_name, dashboard, identity_elements, platforms),
        )
    except (ArtiquityError, ValueError) as e:
        logger.warning(f"Platform content failed: {e}")
        return fallback_platform_content()


async def generate_contextual_campaign(
    llm: LanguageModel,
    brand_name: str,
    dashboard: dict,
    identity_elements: list[str] | None,
    now: datetime | None = None,
) -> dict:
    now = now or utc_now()
    ad_copy, social_plan, outreach, platform_content = await asyncio.gather(
        _ad_copy(llm, brand_name, dashboard, identity_elements),
        _social_plan(llm, brand_name, dashboard, identity_elements),
        _outreach(llm, brand_name, dashboard, identity_elements),
        _platform_content(llm, brand_name, dashboard, identity_elements),
    )
    inner = dashboard.get("dashboard") or {}
    return {
        "success": True,
        "brandName": brand_name,
        "generatedAt": iso(now),
        "campaign": {
            "id": f"contextual_campaign_{epoch_ms(now)}",
            "name": f"{brand_name} Contextual Campaign",
            "type": "contextual_marketing",
            "culturalContext": inner.get("trendMatches") or [],
            "targetAudiences": inner.get("audienceNodes") or [],
            "adCopy": ad_copy,
            "socialPlan": social_plan,
            "outreachTemplates": outreach,
            "platformContent": platform_content,
            "metadata": {
                "identityElements": identity_elements or [],
                "generationMethod": "context_aware_specialized_prompts",
                "culturalAlignment": "high",
            },
        },
    }


def deploy_campaign(
    campaign: dict,
    brand_name: str,
    *,
    promote_base_url: str,
    environment: str,
    now: datetime | None = None,
) -> dict:
    deployment = build_deployment(
        campaign, brand_name,
        promote_base_url=promote_base_url,
        environment=environment,
        now=now or utc_now(),
    )
    logger.info(f"Campaign {deployment['campaignId']} packaged for deployment")
    return deployment
