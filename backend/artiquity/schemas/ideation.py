"""Ideation Schemas — request bodies of the brand and artist AI routes.

Invariants:
    - brandName / artistName / prompt / query are stripped and non-empty
    - BrandFile.base64 accepts bare base64 or a data URL; invalid base64 is a 400
    - creative-image defaults match the wizard's: "Artist", "creative",
      ["modern", "artistic"]; an empty identityElements list gets the defaults
"""

import base64
import binascii
from typing import Any

from pydantic import Field, field_validator

from artiquity.core.domain_types import CreativeCategory, InsightType
from artiquity.core.provider_protocols import Attachment
from artiquity.schemas.common import CamelModel, NonBlank

DEFAULT_IDENTITY_ELEMENTS = ["modern", "artistic"]


class BrandFile(CamelModel):
    base64: str
    mime_type: str = Field(min_length=1)

    @field_validator("base64")
    @classmethod
    def check_base64(cls, v: str) -> str:
        if v.startswith("data:") and "," in v:
            v = v.split(",", 1)[1]
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("base64 is not valid base64 data")
        return v

    def to_attachment(self) -> Attachment:
        return Attachment(base64.b64decode(self.base64), self.mime_type)


class IdentityCapsuleRequest(CamelModel):
    brand_name: NonBlank = Field(max_length=200)
    brand_files: list[BrandFile] = Field(default_factory=list, max_length=10)

    def attachments(self) -> tuple[Attachment, ...]:
        return tuple(f.to_attachment() for f in self.brand_files)


class ArtistCapsuleRequest(CamelModel):
    artist_name: NonBlank = Field(max_length=200)


class CreativeIdeasRequest(CamelModel):
    brand_name: NonBlank = Field(max_length=200)
    identity_selections: list[str] = Field(default_factory=list)
    selected_creative_categories: list[CreativeCategory] = Field(min_length=1)


class TrendAnalysisRequest(CamelModel):
    brand_name: NonBlank = Field(max_length=200)
    idea: str | None = None
    creative_ideas: list[str] | str | None = None


class SamplesRequest(CamelModel):
    idea: NonBlank
    brand_name: NonBlank = Field(max_length=200)
    identity_elements: list[str] = Field(default_factory=list)


class GenerateRequest(CamelModel):
    prompt: NonBlank = Field(max_length=50_000)


class VisionBoardRequest(CamelModel):
    brand_name: str | None = None
    idea: str | None = None
    selected_ideas: list[str] = Field(default_factory=list)
    identity_elements: list[str] = Field(default_factory=list)

    def resolved_idea(self) -> str:
        return self.idea or ", ".join(self.selected_ideas)


class CreativeImageRequest(CamelModel):
    artist_name: str = "Artist"
    selected_strategy: str = "creative"
    identity_elements: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IDENTITY_ELEMENTS),
    )
    inputs: dict[str, Any] = Field(default_factory=dict)

    @field_validator("identity_elements")
    @classmethod
    def default_elements(cls, v: list[str]) -> list[str]:
        return v or list(DEFAULT_IDENTITY_ELEMENTS)


class SearchInsightsRequest(CamelModel):
    query: NonBlank = Field(max_length=500)
    type: InsightType = InsightType.TREND
    context: str | None = None
