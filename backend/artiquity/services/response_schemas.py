"""Response Schemas — structured-output contracts for every JSON-producing AI route.

Invariants:
    - OpenAPI subset with upper-case type names (OBJECT, ARRAY, STRING, NUMBER):
      the form Gemini accepts as response_schema and Anthropic reads as an instruction
    - Property names are the wire keys the wizard reads; they are never renamed
"""

from artiquity.core.domain_types import CreativeCategory


def _string_list(description: str | None = None) -> dict:
    schema: dict = {"type": "ARRAY", "items": {"type": "STRING"}}
    if description:
        schema["description"] = description
    return schema


def _object(properties: dict, required: list[str] | None = None) -> dict:
    schema: dict = {"type": "OBJECT", "properties": properties}
    if required:
        schema["required"] = required
    return schema


BRAND_CAPSULE_KEYS = (
    "hero_products",
    "aesthetic_codes_and_expressions",
    "mission_and_values",
    "usage_contexts",
    "constraints_and_boundaries",
    "brand_archetype",
)

IDENTITY_CAPSULE = _object(
    {
        "hero_products": _string_list(
            "Core commercial offer: flagship products and key services."),
        "aesthetic_codes_and_expressions": _string_list(
            "Visual, sensory and verbal identity: colors, packaging, photography, key phrases."),
        "mission_and_values": _string_list(
            "What the brand stands for: mission, values, promise."),
        "usage_contexts": _string_list(
            "When, where and why the brand is used."),
        "constraints_and_boundaries": _string_list(
            "What the brand will not do or claim."),
        "brand_archetype": _string_list(
            "Archetypes formatted as 'Archetype: how the brand plays the role'."),
    },
    list(BRAND_CAPSULE_KEYS),
)

ARTIST_CAPSULE_KEYS = (
    "aestheticCodes",
    "tonalSignatures",
    "techniquesAndMediums",
    "philosophyAndIntent",
    "constraintsAndBoundaries",
    "signatureGesturesAndCodes",
)

ARTIST_IDENTITY_CAPSULE = _object(
    {
        "aestheticCodes": _string_list("Visual styles, color palettes, recurring motifs."),
        "tonalSignatures": _string_list("Emotional undertones, mood, atmosphere."),
        "techniquesAndMediums": _string_list("Methods, materials and processes."),
        "philosophyAndIntent": _string_list("Core ideas, messages and purpose."),
        "constraintsAndBoundaries": _string_list("Self-imposed rules and frameworks."),
        "signatureGesturesAndCodes": _string_list("Distinctive marks, symbols, repeated actions."),
    },
    list(ARTIST_CAPSULE_KEYS),
)

_CATEGORY_DESCRIPTIONS = {
    CreativeCategory.AUDIENCE_EXPANSION: "Reach new consumer segments or demographics.",
    CreativeCategory.PRODUCT_AND_FORMAT_TRANSPOSITION: "Re-imagine products or codes in new formats.",
    CreativeCategory.CAMPAIGN_AND_EXPERIENCE_INNOVATION: "Fresh activations of the brand story.",
    CreativeCategory.CATEGORY_EXPLORATION: "Extend the brand's codes into adjacent spaces.",
    CreativeCategory.PARTNERSHIP_AND_COLLABORATION: "Collaborations that use the brand's codes.",
}

CREATIVE_IDEAS = _object({
    category.value: _string_list(description)
    for category, description in _CATEGORY_DESCRIPTIONS.items()
})

TREND_ANALYSIS = _object(
    {
        "analysis": _object(
            {
                "trend_brand_fit_mapping": _string_list(),
                "influencer_and_node_id": _string_list(),
                "activation_concepts": _string_list(),
                "distribution_hooks_and_hacks": _string_list(),
            },
            [
                "trend_brand_fit_mapping", "influencer_and_node_id",
                "activation_concepts", "distribution_hooks_and_hacks",
            ],
        ),
        "sources": {
            "type": "ARRAY",
            "items": _object(
                {"web": _object({"uri": {"type": "STRING"}, "title": {"type": "STRING"}})},
                ["web"],
            ),
        },
        "score": {"type": "NUMBER", "description": "Trend intensity score between 0 and 100"},
        "rationale": {"type": "STRING"},
    },
    ["analysis", "sources", "score", "rationale"],
)

SAMPLES = _object({
    "samples": _string_list("Concrete examples of the idea."),
    "execution_details": _string_list("Execution steps and considerations."),
    "variations": _string_list("Alternative approaches."),
})

DATA_IDENTITY_CAPSULES = {
    "type": "ARRAY",
    "items": _object(
        {
            "title": {"type": "STRING"},
            "description": {"type": "STRING"},
            "profile": _object(
                {
                    "description": {"type": "STRING"},
                    "styles": _string_list(),
                    "moods": _string_list(),
                    "domains": _string_list(),
                    "demographics": _string_list(),
                    "provenance": _string_list(),
                },
                ["description", "styles", "moods", "domains", "demographics", "provenance"],
            ),
        },
        ["title", "description", "profile"],
    ),
}

DATA_PROFILE = _object({
    "profile": _object({
        "title": {"type": "STRING"},
        "description": {"type": "STRING"},
        "category": {"type": "STRING"},
        "keywords": _string_list(),
        "estimated_size": {"type": "STRING"},
        "quality_indicators": _string_list(),
    }),
    "suggestions": _object({
        "pricing_recommendations": _string_list(),
        "target_markets": _string_list(),
        "licensing_options": _string_list(),
    }),
})
