"""Synchronicity Dashboard — theme extraction, canned dashboard and source merging.

Invariants:
    - All functions are PURE
    - extract_themes returns 1..5 unique lowercase themes, in discovery order
    - merge_sources returns at most MAX_SOURCES entries, unique by uri, never empty

Design Decisions:
    - The canned dashboard is returned whenever the research answer is not JSON,
      so the wizard always has trend/audience/format cards to render
"""

import copy

MAX_THEMES = 5
MAX_SOURCES = 6

_STOPWORDS = frozenset({
    "this", "that", "with", "from", "they", "have", "been",
    "will", "would", "could", "should",
})
_DEFAULT_THEMES = ("digital art", "creative content", "visual art")

CITATION_TITLE = "Perplexity Research Source"
SEARCH_RESULT_TITLE = "Cultural Research Source"

FALLBACK_SOURCES = (
    {"uri": "https://trends.google.com", "title": "Google Trends Analysis"},
    {"uri": "https://www.reddit.com/r/gaming", "title": "Gaming Community Insights"},
    {"uri": "https://socialblade.com", "title": "Social Media Analytics"},
)

FALLBACK_DASHBOARD = {
    "dashboard": {
        "trendMatches": [
            {
                "name": "AI-Generated Content Boom",
                "velocity": "Peak",
                "description": (
                    "AI-generated creative content is experiencing massive growth "
                    "across all platforms"
                ),
            },
            {
                "name": "Gaming Culture Crossovers",
                "velocity": "Rising",
                "description": (
                    "Gaming characters and themes are increasingly appearing in "
                    "non-gaming contexts"
                ),
            },
        ],
        "audienceNodes": [
            {
                "category": "Subcultures",
                "items": ["AI Art Community", "Gaming Meme Enthusiasts", "Digital Art Collectors"],
            },
            {
                "category": "Influencers/Tastemakers",
                "items": ["@AIArtists", "@GamingInfluencers", "@DigitalCreators"],
            },
            {
                "category": "Platforms",
                "items": ["Reddit (r/midjourney, r/gaming)", "Twitter/X", "Instagram", "TikTok"],
            },
        ],
        "formatSuggestions": [
            {"idea": "Short-form video content", "timing": "Post during peak gaming hours (6-10 PM)"},
            {"idea": "Meme format variations", "timing": "Daily posting for viral potential"},
        ],
    },
}


def extract_themes(creative_output: dict) -> list[str]:
    themes: list[str] = []
    description = creative_output.get("description")
    if description:
        words = description.lower().split()
        themes += [w for w in words if len(w) > 4 and w not in _STOPWORDS][:3]
    for key in ("title", "style", "medium"):
        value = creative_output.get(key)
        if value:
            themes.append(str(value).lower())
    if len(themes) < 2:
        themes += _DEFAULT_THEMES
    return list(dict.fromkeys(themes))[:MAX_THEMES]


def fallback_dashboard() -> dict:
    return copy.deepcopy(FALLBACK_DASHBOARD)


def merge_sources(citations: list[str], search_results: list[dict]) -> list[dict[str, str]]:
    sources = [{"uri": c, "title": CITATION_TITLE} for c in citations]
    sources += [
        {"uri": r.get("url") or "#", "title": r.get("title") or SEARCH_RESULT_TITLE}
        for r in search_results
    ]
    if not sources:
        sources = [dict(s) for s in FALLBACK_SOURCES]

    seen: set[str] = set()
    unique = []
    for source in sources:
        if source["uri"] in seen:
            continue
        seen.add(source["uri"])
        unique.append(source)
    return unique[:MAX_SOURCES]


def audience_items(dashboard: dict, category: str) -> list[str]:
    """Items of one audience-node category ("Subcultures", "Influencers/Tastemakers", ...)."""
    for node in dashboard.get("audienceNodes") or []:
        if node.get("category") == category:
            return [str(i) for i in node.get("items") or []]
    return []
