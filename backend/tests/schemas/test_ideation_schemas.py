"""Ideation Schemas — stripped names, base64 uploads and wizard defaults."""

import pytest
from pydantic import ValidationError

from artiquity.schemas.ideation import (
    BrandFile, CreativeIdeasRequest, CreativeImageRequest, IdentityCapsuleRequest,
)


def test_brand_name_is_stripped():
    assert IdentityCapsuleRequest(brandName="  Acme ").brand_name == "Acme"


def test_data_url_prefix_removed():
    brand_file = BrandFile(base64="data:image/png;base64,aGVsbG8=", mimeType="image/png")
    assert brand_file.to_attachment().data == b"hello"


def test_invalid_base64():
    with pytest.raises(ValidationError):
        BrandFile(base64="not base64!", mimeType="image/png")


def test_categories_required_and_known():
    with pytest.raises(ValidationError):
        CreativeIdeasRequest(brandName="Acme", selectedCreativeCategories=[])
    with pytest.raises(ValidationError):
        CreativeIdeasRequest(brandName="Acme", selectedCreativeCategories=["astrology"])


def test_creative_image_defaults():
    request = CreativeImageRequest()
    assert request.artist_name == "Artist"
    assert request.identity_elements == ["modern", "artistic"]
    assert CreativeImageRequest(identityElements=[]).identity_elements == ["modern", "artistic"]
