"""Data Licensing Schemas — request bodies of the data-owner AI helpers.

Invariants:
    - description is stripped and non-empty where the model needs it
    - files reuse the ideation BrandFile shape ({base64, mimeType})
"""

from typing import Any

from pydantic import Field

from artiquity.core.provider_protocols import Attachment
from artiquity.schemas.common import CamelModel, NonBlank
from artiquity.schemas.ideation import BrandFile


class DataDescriptionRequest(CamelModel):
    description: NonBlank = Field(max_length=10_000)
    purposes: list[str] = Field(default_factory=list)
    files: list[BrandFile] = Field(default_factory=list, max_length=10)

    def attachments(self) -> tuple[Attachment, ...]:
        return tuple(f.to_attachment() for f in self.files)


class ProfileKeywordsRequest(CamelModel):
    description: NonBlank = Field(max_length=10_000)


class DatasetSummaryRequest(CamelModel):
    profile: dict[str, Any]


class DatasetPreviewRequest(CamelModel):
    profile: dict[str, Any]
    capsule: dict[str, Any] = Field(default_factory=dict)


class LicensingEstimateRequest(CamelModel):
    profile: dict[str, Any] = Field(default_factory=dict)
    terms: dict[str, Any] = Field(default_factory=dict)
