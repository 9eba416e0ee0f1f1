"""Campaign Schemas — synchronicity research, campaign generation and deployment.

Invariants:
    - Nested AI payloads (creativeOutput, synchronicityResult, dashboards,
      campaigns) are free-form objects: their shape is owned by the model prompts
    - brandName is stripped and non-empty wherever it is required
"""

from typing import Any

from pydantic import Field

from artiquity.schemas.common import CamelModel, NonBlank


class SynchronicityRequest(CamelModel):
    creative_output: dict[str, Any]


class CampaignRequest(CamelModel):
    brand_name: NonBlank = Field(max_length=200)
    synchronicity_result: dict[str, Any] = Field(default_factory=dict)
    identity_elements: list[str] | None = None


class ContextualCampaignRequest(CamelModel):
    brand_name: NonBlank = Field(max_length=200)
    synchronicity_dashboard: dict[str, Any]
    identity_elements: list[str] | None = None


class DeployRequest(CamelModel):
    campaign: dict[str, Any]
    brand_name: NonBlank = Field(max_length=200)
    action: str = "deploy"
