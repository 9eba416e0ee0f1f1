"""Campaign Service — synchronicity research, campaign fallbacks and deployment.

Invariants:
    - Unparsable research content degrades to the canned dashboard
    - Contextual campaign components fail independently
"""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from artiquity.core.errors import ProviderAPIError
from artiquity.core.provider_protocols import ResearchResult
from artiquity.core.synchronicity import fallback_dashboard
from artiquity.services import campaigns
from tests.services.fakes import FakeLanguageModel, FakeResearch

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


async def test_dashboard_from_research_json():
    research = FakeResearch(ResearchResult(
        content='{"dashboard": {"trendMatches": [{"trend": "solarpunk"}]}}',
        citations=["https://a.example"],
    ))
    result = await campaigns.synchronicity_dashboard(research, {"description": "green utopian cities"})
    assert result["dashboard"]["trendMatches"] == [{"trend": "solarpunk"}]
    assert result["sources"][0]["uri"] == "https://a.example"
    assert "green utopian cities" in research.calls[0][1]


async def test_dashboard_falls_back_on_prose():
    research = FakeResearch(ResearchResult(content="I could not find anything."))
    result = await campaigns.synchronicity_dashboard(research, {})
    assert result["dashboard"] == fallback_dashboard()["dashboard"]
    assert result["sources"]


async def test_dashboard_research_failure_propagates():
    research = FakeResearch(ProviderAPIError("perplexity", "down", "server_error"))
    with pytest.raises(ProviderAPIError):
        await campaigns.synchronicity_dashboard(research, {})


async def test_generate_campaign_uses_model_object():
    reply = json.dumps({"campaign": {"id": "c1", "name": "Glow"}})
    result = await campaigns.generate_campaign(
        FakeLanguageModel(reply), "Acme", {"idea": "glow", "score": 91}, ["bold"], now=NOW,
    )
    assert result == {"campaign": {"id": "c1", "name": "Glow"}}


async def test_generate_campaign_fallback():
    result = await campaigns.generate_campaign(
        FakeLanguageModel("not json"), "Acme", {}, None, now=NOW,
    )
    assert result["campaign"]["creative_idea"] == "Creative concept"
    assert result["campaign"]["id"].startswith("campaign_")


async def test_generate_campaign_timeout(monkeypatch):
    monkeypatch.setattr(campaigns, "CAMPAIGN_TIMEOUT_SECONDS", 0.01)

    class SlowModel(FakeLanguageModel):
        async def generate(self, prompt, **kwargs):
            await asyncio.sleep(1)
            return "{}"

    with pytest.raises(ProviderAPIError) as exc:
        await campaigns.generate_campaign(SlowModel(), "Acme", {}, None)
    assert exc.value.api_error_type == "timeout"


async def test_contextual_campaign_isolates_failures():
    dashboard = fallback_dashboard()
    llm = FakeLanguageModel(default='{"ok": true}')
    llm.replies = ["not json"]
    result = await campaigns.generate_contextual_campaign(llm, "Acme", dashboard, ["bold"], now=NOW)
    campaign = result["campaign"]
    assert result["generatedAt"].startswith("2026-03-01")
    assert campaign["name"] == "Acme Contextual Campaign"
    assert len(campaign["adCopy"]) <= 3
    failed = [v for v in campaign["adCopy"].values() if "error" in v]
    assert len(failed) == 1
    assert campaign["socialPlan"] == {"ok": True}


async def test_contextual_campaign_without_audiences():
    result = await campaigns.generate_contextual_campaign(
        FakeLanguageModel(default="[]"), "Acme", {"dashboard": {}}, None, now=NOW,
    )
    campaign = result["campaign"]
    assert campaign["adCopy"] == {"note": "No subcultures identified for targeted ad copy"}
    assert campaign["outreachTemplates"] == {"note": "No influencers identified for outreach templates"}
    assert campaign["platformContent"] == []


def test_deploy_campaign_packages():
    result = campaigns.deploy_campaign(
        {"id": "c9", "platforms": ["Instagram"]}, "Acme",
        promote_base_url="https://promote.fun", environment="test", now=NOW,
    )
    assert result["success"] is True
    assert result["deploymentPackage"]["campaignId"] == "c9"
    assert result["deploymentPackage"]["metadata"]["environment"] == "test"
