"""Prompt Builders — the text sent to language and research models for each AI route.

Invariants:
    - All functions are PURE string builders: no IO, no clock (ids are passed in)
    - User-supplied values are interpolated verbatim; JSON context is indented
      with json.dumps so nested dashboards stay readable to the model
    - Prompts that expect JSON without a response schema spell out the shape
"""

import json
import re

_NOT_SPECIFIED = "Not specified"


def _elements(identity_elements: list[str] | None) -> str:
    return ", ".join(identity_elements or []) or _NOT_SPECIFIED


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


# ─── Brand and artist ideation ──────────────────────────────────

def identity_capsule_prompt(brand_name: str) -> str:
    return (
        f'Build an Identity Capsule for the brand "{brand_name}". Break the brand '
        "down into these categories, with line items specific to this brand:\n"
        "1. Hero products: flagship products and key services.\n"
        "2. Aesthetic codes and expressions: colors, logos, packaging, taglines, "
        "photography style.\n"
        "3. Mission and values: purpose, beliefs and promises.\n"
        "4. Usage contexts: when, where and why people engage with the brand.\n"
        "5. Constraints and boundaries: what the brand will not do or claim.\n"
        "6. Brand archetype: each archetype as 'Archetype: role and how the brand "
        "already plays it'.\n\n"
        "Give 3-5 concise points per category. Use any attached brand files as "
        "reference material."
    )


def artist_capsule_prompt(artist_name: str) -> str:
    return (
        f"Describe the enduring artistic DNA of '{artist_name}': the recurring "
        "elements that make the work unmistakably theirs. Give 3-5 elements each "
        "for aesthetic codes, tonal signatures, techniques and mediums, philosophy "
        "and intent, constraints and boundaries, and signature gestures and codes."
    )


def creative_ideas_prompt(
    brand_name: str, identity_selections: list[str], categories: list[str],
) -> str:
    return (
        f'The brand "{brand_name}" is defined by these identity elements: '
        f"{', '.join(identity_selections)}.\n"
        f"Generate creative ideas for these categories: {', '.join(categories)}.\n\n"
        "For each category give 3-5 specific, actionable ideas that build on the "
        "identity elements."
    )


def trend_analysis_prompt(brand_name: str, ideas: list[str]) -> str:
    return (
        "You are a cultural trend strategist assessing how a creative concept "
        "resonates right now.\n\n"
        f'Brand: "{brand_name}"\n'
        f"Creative ideas:\n{_numbered(ideas)}\n\n"
        "For the strongest opportunity across these ideas provide:\n"
        "- score: trend intensity from 0 to 100 (higher is stronger alignment)\n"
        "- rationale: how the idea taps into the moment\n"
        "- analysis: bullet lists for trend and brand fit mapping, influencers and "
        "nodes to activate, activation concepts, distribution hooks and hacks\n"
        "- sources: 3 to 5 web sources supporting the assessment (title and URL)\n\n"
        "Respond only with JSON matching the schema."
    )


def samples_prompt(idea: str, brand_name: str, identity_elements: list[str]) -> str:
    return (
        f'Produce concrete samples for the creative idea "{idea}" for the brand '
        f'"{brand_name}", grounded in these identity elements: '
        f"{_elements(identity_elements)}.\n"
        "Include examples, mockup descriptions and execution detail."
    )


def vision_board_prompt(brand_name: str, idea: str) -> str:
    return (
        f'Professional vision board for "{brand_name}" expressing the creative idea '
        f'"{idea}": a modern artistic collage showing mood, color palette, '
        "typography, brand personality and the concept itself. Clean composition, "
        "presentation quality."
    )


def _label(key: str) -> str:
    spaced = re.sub(r"([A-Z])", r" \1", key)
    return spaced[:1].upper() + spaced[1:]


def format_inputs(inputs: dict) -> str:
    """camelCase keys become labels; blank values are dropped."""
    parts = []
    for key, value in (inputs or {}).items():
        text = value.strip() if isinstance(value, str) else ""
        if text:
            parts.append(f"{_label(key)}: {text}")
    return ", ".join(parts)


def creative_image_prompt(
    artist_name: str, strategy: str, identity_elements: list[str], inputs: dict,
) -> str:
    extra = format_inputs(inputs)
    return (
        f"professional artistic image for {artist_name}, {strategy} creative strategy, "
        f"featuring {' and '.join(identity_elements)}, modern high-quality digital art, "
        "visually striking marketing brand identity"
        + (f", {extra}" if extra else "")
    )


def creative_concept_prompt(
    artist_name: str, strategy: str, identity_elements: list[str],
) -> str:
    return (
        f'Write a brief creative concept for the artist "{artist_name}" using a '
        f"{strategy} strategy and these identity elements: {', '.join(identity_elements)}."
    )


# ─── Synchronicity and campaigns ────────────────────────────────

SYNCHRONICITY_SYSTEM = (
    "You are a cultural trend analyst and marketing strategist. Analyze creative "
    "content and report real-time cultural synchronicity. Always answer with "
    "valid JSON in the requested format."
)

_DASHBOARD_SHAPE = {
    "dashboard": {
        "trendMatches": [
            {"name": "Trend name", "velocity": "Rising|Peak|Emerging|Declining",
             "description": "What the trend looks like now"},
        ],
        "audienceNodes": [
            {"category": "Subcultures", "items": ["subculture"]},
            {"category": "Influencers/Tastemakers", "items": ["@handle"]},
            {"category": "Platforms", "items": ["platform (subreddit or hashtag)"]},
        ],
        "formatSuggestions": [
            {"idea": "Content format", "timing": "When to publish"},
        ],
    },
}


def synchronicity_prompt(creative_output: dict, themes: list[str]) -> str:
    title = creative_output.get("title") or "Untitled"
    description = creative_output.get("description") or "No description"
    return (
        f'Analyze the cultural synchronicity of the creative work "{title}": '
        f"{description}\n"
        f"Key themes: {', '.join(themes)}\n\n"
        "Build a cultural synchronicity dashboard from current data, as JSON in "
        f"exactly this shape:\n{json.dumps(_DASHBOARD_SHAPE, indent=2)}\n\n"
        "Focus on current (2024-2025) trends that align with the work, the specific "
        "communities and platforms where it would resonate, and actionable formats "
        "and timing."
    )


def campaign_prompt(
    brand_name: str,
    idea: str,
    score: float,
    identity_elements: list[str] | None,
    campaign_id: str,
) -> str:
    shape = {
        "campaign": {
            "id": campaign_id,
            "creative_idea": idea,
            "campaign_name": "memorable campaign name",
            "campaign_tagline": "tagline",
            "campaign_type": "digital",
            "platforms": ["Instagram", "TikTok", "Website"],
            "target_audience": {
                "primary": "main audience",
                "demographics": ["25-35", "Urban"],
                "psychographics": ["Creative", "Trend-conscious"],
            },
            "key_messages": ["message 1", "message 2", "message 3"],
            "budget_tier": "medium",
            "budget_range": "$50K-250K",
            "duration": "90 Days",
            "success_metrics": ["Engagement rate", "Brand awareness"],
            "content_pillars": ["Brand story", "Cultural relevance"],
        },
        "executionPlan": {
            "week1": ["setup"], "week2_4": ["publishing"], "month2": ["optimization"],
            "month3": ["analysis"], "ongoing": ["community management"],
        },
    }
    return (
        f"Create a campaign strategy for {brand_name}.\n"
        f"Creative idea: {idea}\n"
        f"Synchronicity score: {score}/100\n"
        f"Brand elements: {_elements((identity_elements or [])[:3])}\n\n"
        f"Return JSON only, in this shape:\n{json.dumps(shape, indent=2)}\n\n"
        "Make it innovative, culturally relevant and executable."
    )


def _campaign_context(brand_name: str, dashboard: dict, identity_elements: list[str] | None) -> str:
    return (
        f"Analysis data for {brand_name}:\n{json.dumps(dashboard, indent=2)}\n"
        f"Brand identity elements: {_elements(identity_elements)}"
    )


def ad_copy_prompt(
    brand_name: str, dashboard: dict, identity_elements: list[str] | None, subculture: str,
) -> str:
    return (
        "You are a copywriter for culturally aware audiences.\n"
        f"{_campaign_context(brand_name, dashboard, identity_elements)}\n\n"
        f'Write 3 distinct ad copy variations for the "{subculture}" subculture, '
        "appealing to what this group values most about the brand.\n"
        'Return JSON only: {"variation_1": {"headline": "", "body": "", "cta": ""}, '
        '"variation_2": {...}, "variation_3": {...}}'
    )


def social_plan_prompt(
    brand_name: str, dashboard: dict, identity_elements: list[str] | None,
) -> str:
    return (
        "You are a social media strategist for art and culture.\n"
        f"{_campaign_context(brand_name, dashboard, identity_elements)}\n\n"
        "Plan 7 days of launch content. Use trendMatches as themes and "
        "formatSuggestions as formats, building momentum day by day.\n"
        'Return a JSON array only: [{"day": 1, "platform": "", "format": "", '
        '"theme": "", "content_idea": "", "sample_caption": "", "timing": ""}]'
    )


def outreach_prompt(
    brand_name: str, dashboard: dict, identity_elements: list[str] | None, influencer: str,
) -> str:
    return (
        "You are a brand manager.\n"
        f"{_campaign_context(brand_name, dashboard, identity_elements)}\n\n"
        f'Write a short, personal outreach message to "{influencer}" that '
        f"acknowledges their niche, explains why {brand_name} fits their audience, "
        "respects their time and ends with a low-pressure call to action.\n"
        'Return JSON only: {"subject": "", "body": "", "follow_up": ""}'
    )


def platform_content_prompt(
    brand_name: str, dashboard: dict, identity_elements: list[str] | None,
    platforms: list[str],
) -> str:
    return (
        "You are a content strategist.\n"
        f"{_campaign_context(brand_name, dashboard, identity_elements)}\n"
        f"Target platforms: {', '.join(platforms)}\n\n"
        "Give a content strategy per platform that fits its audience behavior.\n"
        'Return JSON only: {"<platform>": {"content_strategy": "", '
        '"content_types": [], "posting_frequency": "", "engagement_tactics": [], '
        '"success_metrics": []}}'
    )


# ─── Data licensing ─────────────────────────────────────────────

def data_estimate_prompt(description: str, purposes: list[str]) -> str:
    return (
        "From the description, the intended purposes and any attached images, "
        "estimate the potential dataset size in one concise sentence.\n"
        f'Description: "{description}"\n'
        f'Purposes: "{", ".join(purposes)}"\n'
        'Example: "Estimates suggest a potential dataset of 15,000 - 20,000 '
        'high-quality works."'
    )


def data_capsules_prompt(description: str, purposes: list[str]) -> str:
    return (
        f'A user wants a dataset described as: "{description}", for these '
        f'purposes: "{", ".join(purposes)}". Attached images are visual reference.\n'
        "Generate 4 thematically distinct Identity Capsules, each with a 2-4 word "
        "title, a one-sentence description and a profile of 3-5 keywords each for "
        "styles, moods, domains, demographics and provenance."
    )


def data_profile_prompt(description: str) -> str:
    return (
        f'Based on this description: "{description}", build a data profile with '
        "keywords, plus pricing, target market and licensing suggestions for a "
        "data marketplace."
    )


def dataset_summary_prompt(profile: dict) -> str:
    return (
        f"Summarize the dataset described by this profile: {json.dumps(profile)}.\n"
        "Cover its potential value, applications and market opportunities."
    )


def dataset_preview_prompt(profile: dict, capsule: dict) -> str:
    return (
        f"Preview the dataset defined by this profile: {json.dumps(profile)} and "
        f"capsule: {json.dumps(capsule)}.\n"
        "Describe its structure, potential applications and value proposition."
    )


def licensing_estimate_prompt(profile: dict, terms: dict) -> str:
    return (
        "Given this data profile and these licensing terms, estimate the dataset "
        "size and cost in one sentence.\n"
        f"Data profile: {json.dumps(profile)}\n"
        f"Licensing terms: {json.dumps(terms)}\n"
        'Examples: "With your terms, we estimate ~12,000 works, at a cost of '
        '$4,200/mo." or "With your terms, we estimate ~5,000 works for a one-time '
        'cost of $8,000."'
    )
