"""AI Routes — provider wiring, configuration errors and the shared IP budget.

Invariants:
    - Routes needing an unconfigured provider answer 503 PROVIDER_NOT_CONFIGURED
    - search-insights, deploy-campaign and vision boards need no API key
    - Provider fakes enter only through dependency overrides
"""

import base64
import json
import time

import pytest

from artiquity.api.dependencies import (
    get_image_generator, get_language_model,
    get_optional_language_model, get_research_client,
)
from artiquity.config import get_settings
from artiquity.core.provider_protocols import ResearchResult
from artiquity.main import app
from tests.services.fakes import FakeImages, FakeLanguageModel, FakeResearch


def _use_model(llm: FakeLanguageModel) -> FakeLanguageModel:
    app.dependency_overrides[get_language_model] = lambda: llm
    app.dependency_overrides[get_optional_language_model] = lambda: llm
    return llm


@pytest.mark.parametrize("path,body,setting", [
    ("/api/v1/ai/generate", {"prompt": "hi"}, "GEMINI_API_KEY"),
    ("/api/v1/ai/artist-identity-capsule", {"artistName": "Ada"}, "GEMINI_API_KEY"),
    ("/api/v1/ai/synchronicity-dashboard", {"creativeOutput": {}}, "PERPLEXITY_API_KEY"),
    ("/api/v1/ai/licensing-estimates",
     {"terms": {"compensationModel": "royalty", "maxBudget": 100}}, "GEMINI_API_KEY"),
])
async def test_unconfigured_provider(client, path, body, setting):
    response = await client.post(path, json=body)
    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == "PROVIDER_NOT_CONFIGURED"
    assert error["message"] == f"Server configuration error: {setting} is missing."


async def test_licensing_placeholder_needs_no_key(client):
    response = await client.post("/api/v1/ai/licensing-estimates", json={"terms": {}})
    assert response.json() == {"estimate": "Select a model and set a budget to see estimates."}


async def test_identity_capsule_passes_brand_files(client):
    llm = _use_model(FakeLanguageModel('{"brandEssence": "calm"}'))
    logo = base64.b64encode(b"\x89PNGfake").decode()
    response = await client.post("/api/v1/ai/identity-capsule", json={
        "brandName": " Acme ",
        "brandFiles": [{"base64": f"data:image/png;base64,{logo}", "mimeType": "image/png"}],
    })
    assert response.json() == {"brandEssence": "calm"}
    attachment = llm.calls[0]["attachments"][0]
    assert attachment.data == b"\x89PNGfake"
    assert attachment.mime_type == "image/png"


async def test_invalid_base64_is_400(client):
    _use_model(FakeLanguageModel())
    response = await client.post("/api/v1/ai/identity-capsule", json={
        "brandName": "Acme", "brandFiles": [{"base64": "%%%", "mimeType": "image/png"}],
    })
    assert response.status_code == 400


async def test_blank_brand_name_is_400(client):
    _use_model(FakeLanguageModel())
    response = await client.post("/api/v1/ai/artist-identity-capsule", json={"artistName": "  "})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_unparsable_model_reply_is_502(client):
    _use_model(FakeLanguageModel("no json here"))
    response = await client.post("/api/v1/ai/generate-samples", json={
        "idea": "glow", "brandName": "Acme",
    })
    assert response.status_code == 502
    assert response.json()["error"]["code"] == "INVALID_PROVIDER_RESPONSE"


async def test_creative_ideas_category_values(client):
    llm = _use_model(FakeLanguageModel(json.dumps({"audience_expansion": ["x"]})))
    response = await client.post("/api/v1/ai/creative-ideas", json={
        "brandName": "Acme", "selectedCreativeCategories": ["audience_expansion"],
    })
    assert response.json() == {"audience_expansion": ["x"]}
    assert "audience_expansion" in llm.calls[0]["prompt"]


async def test_creative_image_and_vision_board(client):
    images = FakeImages()
    app.dependency_overrides[get_image_generator] = lambda: images
    app.dependency_overrides[get_optional_language_model] = lambda: None

    image = (await client.post("/api/v1/ai/creative-image", json={})).json()
    assert image["imageUrl"] == images.url
    assert image["concept"] == "Visual concept for Artist"

    board = (await client.post("/api/v1/ai/generate-vision-board", json={"idea": "koi"})).json()
    assert board["imageDataUrl"].startswith("https://image.pollinations.ai/")


async def test_search_insights_without_provider(client):
    body = (await client.post("/api/v1/ai/search-insights", json={
        "query": "neo-noir", "type": "audience",
    })).json()
    assert body["searchQuery"].startswith("neo-noir")
    assert len(body["sources"]) <= 6


async def test_synchronicity_dashboard(client):
    research = FakeResearch(ResearchResult(content="prose", citations=["https://c.example"]))
    app.dependency_overrides[get_research_client] = lambda: research
    body = (await client.post("/api/v1/ai/synchronicity-dashboard", json={
        "creativeOutput": {"title": "Tides", "description": "ocean glass sculptures"},
    })).json()
    assert body["sources"][0]["uri"] == "https://c.example"
    assert body["dashboard"]["trendMatches"]


async def test_deploy_campaign_uses_settings(client):
    body = (await client.post("/api/v1/ai/deploy-campaign", json={
        "campaign": {"id": "c1"}, "brandName": "Acme", "action": "schedule",
    })).json()
    assert body["campaignId"] == "c1"
    assert body["deploymentPackage"]["metadata"]["environment"] == "development"
    assert all(url.startswith("https://promote.fun") for url in body["urls"].values())


async def test_data_capsules_route(client):
    _use_model(FakeLanguageModel('[{"name": "Set", "profile": {}}]'))
    body = (await client.post("/api/v1/ai/data-identity-capsules", json={
        "description": "Field recordings", "purposes": ["training"],
    })).json()
    assert body["capsules"][0]["profile"]["description"] == "Field recordings"


async def test_ip_rate_limit(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "rate_limit_requests", 2)
    for _ in range(2):
        assert (await client.post("/api/v1/ai/search-insights", json={"query": "q"})).status_code == 200
    limited = await client.post("/api/v1/ai/search-insights", json={"query": "q"})
    assert limited.status_code == 429
    assert limited.headers["retry-after"] == "60"


async def test_ip_budget_shared_across_ai_routers(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "rate_limit_requests", 1)
    assert (await client.post("/api/v1/ai/search-insights", json={"query": "q"})).status_code == 200
    limited = await client.post("/api/v1/ai/deploy-campaign", json={
        "campaign": {"id": "c1"}, "brandName": "Acme", "action": "schedule",
    })
    assert limited.status_code == 429
    assert limited.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"


async def test_ip_budget_returns_after_window(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "rate_limit_requests", 1)
    assert (await client.post("/api/v1/ai/search-insights", json={"query": "q"})).status_code == 200
    assert (await client.post("/api/v1/ai/search-insights", json={"query": "q"})).status_code == 429

    later = time.time() + 61
    monkeypatch.setattr(time, "time", lambda: later)
    assert (await client.post("/api/v1/ai/search-insights", json={"query": "q"})).status_code == 200
