"""Synchronicity Dashboard — theme extraction and source merging.

Invariants:
    - 1..5 unique lowercase themes
    - At most six sources, unique by uri, never empty
"""

from artiquity.core.synchronicity import (
    FALLBACK_SOURCES,
    MAX_SOURCES,
    audience_items,
    extract_themes,
    fallback_dashboard,
    merge_sources,
)


def test_themes_from_description_and_fields():
    themes = extract_themes({
        "description": "Moody neon cityscapes painted with glowing acrylics",
        "title": "Night Shift",
        "style": "Cyberpunk",
    })
    assert themes == ["moody", "cityscapes", "painted", "night shift", "cyberpunk"]


def test_stopwords_and_short_words_skipped():
    themes = extract_themes({"description": "this would have been great"})
    assert "would" not in themes
    assert themes[0] == "great"


def test_sparse_output_gets_default_themes():
    assert extract_themes({}) == ["digital art", "creative content", "visual art"]


def test_sources_deduplicated_and_capped():
    citations = [f"https://c{i}.example" for i in range(5)] + ["https://c0.example"]
    results = [{"url": "https://r.example", "title": "R"}, {"title": None}]
    sources = merge_sources(citations, results)
    assert len(sources) == MAX_SOURCES
    assert len({s["uri"] for s in sources}) == MAX_SOURCES
    assert sources[0] == {"uri": "https://c0.example", "title": "Perplexity Research Source"}


def test_search_result_without_url_uses_placeholder():
    sources = merge_sources([], [{"title": ""}])
    assert sources == [{"uri": "#", "title": "Cultural Research Source"}]


def test_no_sources_fall_back():
    assert merge_sources([], []) == list(FALLBACK_SOURCES)


def test_fallback_dashboard_is_a_copy():
    first = fallback_dashboard()
    first["dashboard"]["trendMatches"].clear()
    assert fallback_dashboard()["dashboard"]["trendMatches"]


def test_audience_items_by_category():
    inner = fallback_dashboard()["dashboard"]
    assert audience_items(inner, "Subcultures")[0] == "AI Art Community"
    assert audience_items(inner, "Missing") == []
