"""Campaign Deployment — deployment package, promote URLs and estimated metrics.

Invariants:
    - All functions are PURE: now and campaign id are injected by the caller
    - reach = budget base x product of matching platform multipliers
    - engagement = round(reach x campaign-type rate); conversions = round(engagement x budget rate)
    - Rounding is half-up, never banker's rounding
    - Large and enterprise budgets always require review

Design Decisions:
    - Platform multipliers match by case-insensitive substring so "Instagram Reels"
      still counts as Instagram; first matching platform wins
"""

import math
import random
import string
from datetime import datetime

from artiquity.core.timestamps import epoch_ms, iso

BUDGET_REACH = {
    "micro": 1000,
    "small": 5000,
    "medium": 25000,
    "large": 100000,
    "enterprise": 500000,
}
DEFAULT_REACH = 10000

PLATFORM_MULTIPLIERS = {
    "Instagram": 1.2,
    "TikTok": 1.5,
    "YouTube": 1.3,
    "Twitter": 1.1,
    "LinkedIn": 0.8,
    "Facebook": 1.0,
}

ENGAGEMENT_RATES = {
    "social": 0.05,
    "influencer": 0.08,
    "experiential": 0.15,
    "digital": 0.03,
    "hybrid": 0.06,
    "content": 0.04,
    "guerrilla": 0.12,
}
DEFAULT_ENGAGEMENT_RATE = 0.05

CONVERSION_RATES = {
    "micro": 0.02,
    "small": 0.025,
    "medium": 0.03,
    "large": 0.035,
    "enterprise": 0.04,
}
DEFAULT_CONVERSION_RATE = 0.02

REVIEW_TIERS = ("large", "enterprise")

NEXT_STEPS = (
    "Review campaign details in dashboard",
    "Set up team permissions",
    "Configure tracking pixels",
    "Schedule content publishing",
    "Activate monitoring alerts",
)

_BASE36 = string.digits + string.ascii_lowercase


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def new_campaign_id(now: datetime | None = None) -> str:
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"campaign_{epoch_ms(now)}_{suffix}"


def _platform_multiplier(platform: str) -> float:
    lowered = platform.lower()
    for name, multiplier in PLATFORM_MULTIPLIERS.items():
        if name.lower() in lowered:
            return multiplier
    return 1


def estimate_reach(campaign: dict) -> int:
    reach = float(BUDGET_REACH.get(campaign.get("budget_tier"), DEFAULT_REACH))
    for platform in campaign.get("platforms") or []:
        reach *= _platform_multiplier(str(platform))
    return round_half_up(reach)


def estimate_engagement(campaign: dict) -> int:
    rate = ENGAGEMENT_RATES.get(campaign.get("campaign_type"), DEFAULT_ENGAGEMENT_RATE)
    return round_half_up(estimate_reach(campaign) * rate)


def estimate_conversions(campaign: dict) -> int:
    rate = CONVERSION_RATES.get(campaign.get("budget_tier"), DEFAULT_CONVERSION_RATE)
    return round_half_up(estimate_engagement(campaign) * rate)


def estimate_metrics(campaign: dict) -> dict[str, int]:
    return {
        "reach": estimate_reach(campaign),
        "engagement": estimate_engagement(campaign),
        "conversions": estimate_conversions(campaign),
    }


def promote_urls(base_url: str, campaign_id: str) -> dict[str, str]:
    base = base_url.rstrip("/")
    return {
        "campaign": f"{base}/campaigns/{campaign_id}",
        "dashboard": f"{base}/dashboard/{campaign_id}",
        "analytics": f"{base}/analytics/{campaign_id}",
        "preview": f"{base}/preview/{campaign_id}",
        "publicShare": f"{base}/share/{campaign_id}",
    }


def build_deployment(
    campaign: dict,
    brand_name: str,
    *,
    promote_base_url: str,
    environment: str,
    now: datetime,
    campaign_id: str | None = None,
) -> dict:
    """Full deploy-campaign response body."""
    campaign_id = campaign.get("id") or campaign_id or new_campaign_id(now)
    package = {
        "campaignId": campaign_id,
        "brandName": brand_name,
        "campaign": {
            **campaign,
            "id": campaign_id,
            "createdAt": iso(now),
            "status": "draft",
            "deploymentReady": True,
        },
        "metadata": {
            "platform": "promote.fun",
            "environment": environment,
            "version": "1.0.0",
            "createdBy": "Artiquity Trinity Graph",
        },
        "integrations": {
            "socialPlatforms": campaign.get("platforms") or [],
            "analyticsEnabled": True,
            "automationEnabled": False,
        },
        "deployment": {
            "status": "ready",
            "estimatedLaunchTime": "24-48 hours",
            "requiresReview": campaign.get("budget_tier") in REVIEW_TIERS,
            "approvalStatus": "pending",
        },
    }
    return {
        "success": True,
        "campaignId": campaign_id,
        "deploymentPackage": package,
        "urls": promote_urls(promote_base_url, campaign_id),
        "status": "Campaign successfully created and ready for deployment",
        "nextSteps": list(NEXT_STEPS),
        "estimatedMetrics": estimate_metrics(campaign),
    }
