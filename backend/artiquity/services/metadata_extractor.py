"""Metadata Extractor — reads an embedded RSL license back out of an uploaded file.

Invariants:
    - extract() returns the license XML string or None; it never raises
    - Readers mirror metadata_embedder: every carrier it writes is readable here
    - A .rsl file name is read as a sidecar whatever MIME type the client sent

Design Decisions:
    - Each reader tries the richest carrier first (full XML) and falls back to
      the XMP packet's rsl:document element
    - Sidecar and raw-byte scans use regexes over the decoded text, matching
      the XML declaration when present so the result validates as a document
"""

import html
import io
import logging
import re

import piexif
import piexif.helper
from mutagen.id3 import ID3, ID3NoHeaderError
from PIL import Image
from PyPDF2 import PdfReader

from artiquity.core.domain_types import MetadataFormat
from artiquity.core.rsl_metadata import detect_format, parse_xmp_packet

logger = logging.getLogger(__name__)

_SIDECAR_XML = re.compile(
    r"(?:<\?xml[^>]*\?>\s*)?<rsl:license[\s>].*?</rsl:license>", re.DOTALL,
)
_HTML_SCRIPT = re.compile(
    r'<script[^>]*id="rsl-license"[^>]*>(.*?)</script>', re.DOTALL,
)
_HTML_META = re.compile(
    r'<meta[^>]*name="rsl-license"[^>]*content="([^"]*)"[^>]*>', re.IGNORECASE,
)
_XMP_PACKET = re.compile(r"<x:xmpmeta.*?</x:xmpmeta>", re.DOTALL)


def _document_from_packet(packet: str | None) -> str | None:
    if not packet:
        return None
    try:
        _, document = parse_xmp_packet(packet)
    except ValueError:
        return None
    return document


def _scan_for_packet(data: bytes) -> str | None:
    match = _XMP_PACKET.search(data.decode("utf-8", errors="ignore"))
    return _document_from_packet(match.group(0)) if match else None


def _read_jpeg(data: bytes) -> str | None:
    exif = piexif.load(data)
    comment = exif.get("Exif", {}).get(piexif.ExifIFD.UserComment)
    if comment:
        document = _document_from_packet(piexif.helper.UserComment.load(comment))
        if document:
            return document
    # XMP APP1 segment
    return _scan_for_packet(data)


def _read_png(data: bytes) -> str | None:
    with Image.open(io.BytesIO(data)) as image:
        image.load()
        text = dict(getattr(image, "text", {}) or {})
    if text.get("RSL:License"):
        return text["RSL:License"]
    return _document_from_packet(text.get("XML:com.adobe.xmp"))


def _read_image(data: bytes, mime: str) -> str | None:
    if mime in ("image/jpeg", "image/jpg"):
        return _read_jpeg(data)
    if mime == "image/png":
        return _read_png(data)
    return _scan_for_packet(data)


def _read_pdf(data: bytes) -> str | None:
    info = PdfReader(io.BytesIO(data)).metadata or {}
    license_xml = info.get("/RSLLicense")
    if license_xml:
        return str(license_xml)
    xmp = info.get("/XMP")
    return _document_from_packet(str(xmp)) if xmp else None


def _read_id3(data: bytes) -> str | None:
    try:
        tags = ID3(io.BytesIO(data))
    except ID3NoHeaderError:
        return None
    for frame in tags.getall("TXXX"):
        if frame.desc == "RSL_DOCUMENT" and frame.text:
            return str(frame.text[0])
    return None


def _read_html(data: bytes) -> str | None:
    content = data.decode("utf-8", errors="replace")
    script = _HTML_SCRIPT.search(content)
    if script:
        return script.group(1).strip()
    meta = _HTML_META.search(content)
    if meta:
        return html.unescape(meta.group(1))
    return None


def _read_sidecar(data: bytes) -> str | None:
    match = _SIDECAR_XML.search(data.decode("utf-8", errors="replace"))
    return match.group(0) if match else None


def extract(data: bytes, file_name: str, mime_type: str | None) -> str | None:
    """License XML embedded in the file, or None when there is none."""
    mime = (mime_type or "").lower()
    fmt = (
        MetadataFormat.SIDECAR if file_name.lower().endswith(".rsl")
        else detect_format(mime)
    )
    try:
        if fmt == MetadataFormat.EXIF:
            return _read_image(data, mime)
        if fmt == MetadataFormat.XMP:
            return _read_pdf(data)
        if fmt == MetadataFormat.ID3:
            return _read_id3(data)
        if fmt == MetadataFormat.HTML:
            return _read_html(data)
        return _read_sidecar(data)
    except Exception as e:
        # Unreadable container means "no metadata", not a server error
        logger.warning(f"Metadata extraction failed for {file_name}: {e}")
        return None
