"""Campaign Fallbacks — literal objects returned when a campaign generation step fails.

Invariants:
    - All functions are PURE: ids derive from the injected timestamp
    - Every fallback embeds the brand name so the wizard never renders a blank card
    - Component fallbacks keep the {error, fallback} envelope the UI checks for
"""

DEFAULT_PLATFORMS = ("Instagram", "TikTok", "Website")


def fallback_campaign(brand_name: str, idea: str, now_ms: int) -> dict:
    return {
        "campaign": {
            "id": f"campaign_{now_ms}",
            "creative_idea": idea,
            "campaign_name": f"{brand_name} Campaign",
            "campaign_tagline": "Innovative brand experience",
            "campaign_type": "digital",
            "platforms": list(DEFAULT_PLATFORMS),
            "target_audience": {
                "primary": "Creative professionals and art enthusiasts",
                "secondary": ["Digital natives", "Cultural trendsetters"],
                "demographics": ["25-45 years", "Urban areas", "College educated"],
                "psychographics": [
                    "Innovation-focused", "Aesthetically driven", "Culturally aware",
                ],
            },
            "key_messages": [
                "Authentic creativity", "Cultural relevance", "Innovative expression",
            ],
            "budget_tier": "small",
            "estimated_budget_range": "$10K-50K",
            "success_metrics": ["Engagement rate", "Brand awareness", "Creative impact"],
        },
        "executionPlan": {
            "week1": ["Campaign setup", "Content creation", "Platform preparation"],
            "week2_4": [
                "Content publishing", "Community engagement", "Performance monitoring",
            ],
            "month2": ["Optimization", "Scaling", "Partnership development"],
            "month3": ["Analysis", "Reporting", "Next phase planning"],
            "ongoing": ["Community management", "Content updates", "Performance tracking"],
        },
    }


def fallback_ad_copy(brand_name: str, subculture: str) -> dict:
    return {
        "error": f"Failed to generate ad copy for {subculture}",
        "fallback": {
            "variation_1": {
                "headline": f"{brand_name} for {subculture}",
                "body": "Discover authentic creative expression that resonates with your community.",
                "cta": "Explore Now",
            },
        },
    }


def fallback_social_plan(brand_name: str) -> dict:
    return {
        "error": "Failed to generate social media plan",
        "fallback": [{
            "day": 1,
            "platform": "Instagram",
            "format": "Image Post",
            "theme": "Brand Introduction",
            "content_idea": f"Introduce {brand_name} with key visual elements",
            "sample_caption": (
                f"Introducing {brand_name} - where authenticity meets innovation. "
                "#NewBrand #Authentic"
            ),
            "timing": "10:00 AM",
        }],
    }


def fallback_outreach(brand_name: str, influencer: str) -> dict:
    return {
        "error": f"Failed to generate outreach for {influencer}",
        "fallback": {
            "subject": f"Partnership opportunity with {brand_name}",
            "body": (
                f"Hi! I've been following your content and think {brand_name} would "
                "resonate with your audience. Would you be interested in learning more?"
            ),
            "follow_up": (
                f"Just wanted to follow up on my previous message about {brand_name}. "
                "No pressure, but happy to share more details if you're interested."
            ),
        },
    }


def fallback_platform_content() -> dict:
    return {
        "error": "Failed to generate platform content",
        "fallback": {
            "Instagram": {
                "content_strategy": "Visual storytelling with high-quality imagery",
                "content_types": ["Image posts", "Stories", "Reels"],
                "posting_frequency": "Daily",
                "engagement_tactics": ["Hashtag strategy", "Story interactions"],
                "success_metrics": ["Engagement rate", "Reach", "Saves"],
            },
        },
    }


NO_SUBCULTURES = {"note": "No subcultures identified for targeted ad copy"}
NO_INFLUENCERS = {"note": "No influencers identified for outreach templates"}
