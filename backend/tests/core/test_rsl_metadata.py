"""RSL Metadata — compact embedding payloads, XMP packets and format detection.

Invariants:
    - ai-summarize, archive and analysis are always listed
    - XMP packets parse back to the same fields plus the full license XML
    - Unknown MIME types fall back to sidecar
"""

from datetime import datetime, timezone

import pytest

from artiquity.core.domain_types import MetadataFormat
from artiquity.core.rsl_metadata import (
    build_sidecar,
    build_xmp_packet,
    create_rsl_metadata,
    detect_format,
    parse_xmp_packet,
    sidecar_name,
)

SERVER = "https://licenses.example.com"
CONTACT = "rights@example.com"


def _metadata(**options):
    return create_rsl_metadata(
        options, license_server=SERVER, contact=CONTACT,
        now=datetime(2026, 1, 2, tzinfo=timezone.utc),
    )


def test_default_permissions_without_options():
    metadata = _metadata()
    assert metadata["license"] == "RSL-1.0"
    assert metadata["permissions"] == ["ai-summarize", "archive", "analysis"]
    assert len(metadata["userTypes"]) == 5
    assert metadata["paymentModel"] == "free"
    assert metadata["dateIssued"] == "2026-01-02T00:00:00.000Z"


def test_ai_and_indexing_options_prepend_permissions():
    metadata = _metadata(allowAIModels=True, allowIndexing=True)
    assert metadata["permissions"][:2] == ["train-ai", "search"]


def test_xmp_packet_round_trip():
    metadata = _metadata(
        allowAIModels=True, paymentModel="per-crawl", paymentAmount=0.05,
        paymentCurrency="EUR", provenanceInfo="Studio archive",
    )
    packet = build_xmp_packet(metadata, "<rsl:license>doc</rsl:license>")
    assert packet.startswith('<?xpacket begin="﻿"')
    assert packet.endswith('<?xpacket end="w"?>')

    parsed, license_xml = parse_xmp_packet(packet)
    assert license_xml == "<rsl:license>doc</rsl:license>"
    assert parsed["permissions"] == metadata["permissions"]
    assert parsed["paymentAmount"] == 0.05
    assert parsed["paymentCurrency"] == "EUR"
    assert parsed["provenance"] == "Studio archive"
    assert parsed["licenseServer"] == SERVER
    assert "attributionText" not in parsed


def test_packet_without_document():
    _, license_xml = parse_xmp_packet(build_xmp_packet(_metadata()))
    assert license_xml is None


def test_parse_rejects_foreign_packets():
    with pytest.raises(ValueError):
        parse_xmp_packet("no packet here")
    foreign = (
        '<x:xmpmeta xmlns:x="adobe:ns:meta/">'
        '<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">'
        '<rdf:Description/></rdf:RDF></x:xmpmeta>'
    )
    with pytest.raises(ValueError):
        parse_xmp_packet(foreign)


@pytest.mark.parametrize("mime,expected", [
    ("image/jpeg", MetadataFormat.EXIF),
    ("IMAGE/PNG", MetadataFormat.EXIF),
    ("audio/mpeg", MetadataFormat.ID3),
    ("application/pdf", MetadataFormat.XMP),
    ("text/html", MetadataFormat.HTML),
    ("application/zip", MetadataFormat.SIDECAR),
    (None, MetadataFormat.SIDECAR),
])
def test_detect_format(mime, expected):
    assert detect_format(mime) == expected


def test_sidecar_layout():
    text = build_sidecar(
        "photo.jpg", "<xml/>", now=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    assert sidecar_name("photo.jpg") == "photo.jpg.rsl"
    assert text.splitlines()[:3] == [
        "# RSL License File",
        "# Generated for: photo.jpg",
        "# Created: 2026-01-01T00:00:00.000Z",
    ]
    assert text.rstrip().endswith("<xml/>")
