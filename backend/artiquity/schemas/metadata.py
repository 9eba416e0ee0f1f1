"""Metadata Route Schemas — distribution helpers (robots.txt, Link headers, RSS).

Multipart embed/extract requests are declared with Form/File parameters on the
route itself; only the JSON bodies live here.
"""

from pydantic import Field

from artiquity.schemas.common import CamelModel


class RobotsTxtRequest(CamelModel):
    license_id: str = Field(min_length=1)
    domain: str = Field(min_length=1)
    additional_directives: list[str] = Field(default_factory=list)


class LinkHeadersRequest(CamelModel):
    license_id: str = Field(min_length=1)
    content_type: str = "text/html"


class LinkHeadersResponse(CamelModel):
    success: bool = True
    headers: dict[str, str]
    license_id: str


class RssFeedRequest(CamelModel):
    license_ids: list[str] = Field(min_length=1)
    feed_title: str | None = None
    feed_description: str | None = None
    feed_url: str | None = None
