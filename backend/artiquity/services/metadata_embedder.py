"""Metadata Embedder — splices RSL license payloads into media containers.

Invariants:
    - Bytes outside the inserted segment/chunk/tag are preserved as uploaded
      (JPEG, PNG and HTML are spliced, never re-encoded)
    - Any handler failure is logged and falls back to a <file>.rsl sidecar;
      embed() itself never raises for a malformed upload
    - EmbedResult.metadata_type is the format actually written, so a fallback
      is visible to the caller and recorded as "sidecar"
    - EmbedResult.position is the byte offset of the inserted payload, or None
      when the container library decides the layout (EXIF in JPEG, PDF)

Design Decisions:
    - One plain function per (format, container) pair dispatched from a table:
      handlers share no state, adding a container is one entry
    - piexif for EXIF, Pillow for PNG chunk encoding, PyPDF2 for the PDF info
      dictionary, mutagen for ID3v2 frames
    - EXIF UserComment carries the XMP packet (summary fields + full XML) so
      the extractor recovers a validatable document from JPEG files
"""

import base64
import html
import io
import json
import logging
import re
import struct
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import piexif
import piexif.helper
from mutagen.id3 import COMM, ID3, TALB, TIT2, TPE1, TXXX, ID3NoHeaderError
from PIL import Image
from PIL.PngImagePlugin import PngInfo, putchunk
from PyPDF2 import PdfReader, PdfWriter

from artiquity.core.domain_types import RSL_LICENSE_NAME, RSL_PLATFORM, MetadataFormat
from artiquity.core.rsl_metadata import build_sidecar, build_xmp_packet, sidecar_name

logger = logging.getLogger(__name__)

JPEG_SOI = b"\xff\xd8"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
XMP_APP1_HEADER = b"http://ns.adobe.com/xap/1.0/\x00"
EXIF_APP1_HEADER = b"Exif\x00\x00"
PNG_LICENSE_KEY = "RSL:License"
PNG_XMP_KEY = "XML:com.adobe.xmp"
MAX_SEGMENT_PAYLOAD = 0xFFFF - 2
SIDECAR_MIME_TYPE = "text/plain"

_HEAD_CLOSE = re.compile(r"</head>", re.IGNORECASE)


@dataclass(frozen=True)
class EmbedResult:
    data: bytes
    file_name: str
    mime_type: str
    metadata_type: str
    position: int | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class _Upload:
    data: bytes
    file_name: str
    mime_type: str
    license_xml: str
    metadata: dict


# ─── Image containers ───────────────────────────────────────────

def _jpeg_insert_offset(data: bytes) -> int:
    """Offset after SOI and any leading APP0 (JFIF) and APP1 Exif segments.

    Exif readers expect their APP1 right after SOI or JFIF, so XMP goes behind it.
    """
    pos = len(JPEG_SOI)
    while True:
        marker = data[pos:pos + 2]
        is_exif = marker == b"\xff\xe1" and data[pos + 4:pos + 10] == EXIF_APP1_HEADER
        if marker != b"\xff\xe0" and not is_exif:
            return pos
        (length,) = struct.unpack(">H", data[pos + 2:pos + 4])
        pos += 2 + length


def _embed_exif_jpeg(upload: _Upload) -> EmbedResult:
    exif = piexif.load(upload.data)
    exif["0th"][piexif.ImageIFD.Make] = RSL_PLATFORM.encode("ascii")
    exif["0th"][piexif.ImageIFD.Software] = RSL_LICENSE_NAME.encode("ascii")
    packet = build_xmp_packet(upload.metadata, upload.license_xml)
    exif["Exif"][piexif.ExifIFD.UserComment] = piexif.helper.UserComment.dump(
        packet, encoding="unicode",
    )
    out = io.BytesIO()
    piexif.insert(piexif.dump(exif), upload.data, out)
    return EmbedResult(
        out.getvalue(), upload.file_name, upload.mime_type, MetadataFormat.EXIF.value,
    )


def _embed_xmp_jpeg(upload: _Upload) -> EmbedResult:
    packet = build_xmp_packet(upload.metadata, upload.license_xml).encode("utf-8")
    payload = XMP_APP1_HEADER + packet
    if len(payload) > MAX_SEGMENT_PAYLOAD:
        raise ValueError(f"XMP packet of {len(payload)} bytes exceeds one APP1 segment")
    segment = b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload
    offset = _jpeg_insert_offset(upload.data)
    data = upload.data[:offset] + segment + upload.data[offset:]
    return EmbedResult(
        data, upload.file_name, upload.mime_type, MetadataFormat.XMP.value, offset,
    )


def _splice_png_chunks(data: bytes, info: PngInfo) -> tuple[bytes, int]:
    """Insert the chunks collected in info immediately before IEND."""
    if not data.startswith(PNG_SIGNATURE):
        raise ValueError("Not a PNG file")
    iend = data.rfind(b"IEND")
    if iend < len(PNG_SIGNATURE) + 4:
        raise ValueError("PNG has no IEND chunk")
    # IEND chunk starts at its 4-byte length field
    offset = iend - 4
    out = io.BytesIO()
    for chunk in info.chunks:
        putchunk(out, chunk[0], chunk[1])
    return data[:offset] + out.getvalue() + data[offset:], offset


def _verify_png(data: bytes) -> None:
    with Image.open(io.BytesIO(data)) as image:
        image.verify()


def _embed_exif_png(upload: _Upload) -> EmbedResult:
    _verify_png(upload.data)
    info = PngInfo()
    info.add_text(PNG_LICENSE_KEY, upload.license_xml)
    info.add_text(PNG_XMP_KEY, build_xmp_packet(upload.metadata))
    data, offset = _splice_png_chunks(upload.data, info)
    return EmbedResult(
        data, upload.file_name, upload.mime_type, MetadataFormat.EXIF.value, offset,
    )


def _embed_xmp_png(upload: _Upload) -> EmbedResult:
    _verify_png(upload.data)
    info = PngInfo()
    info.add_itxt(PNG_XMP_KEY, build_xmp_packet(upload.metadata, upload.license_xml))
    data, offset = _splice_png_chunks(upload.data, info)
    return EmbedResult(
        data, upload.file_name, upload.mime_type, MetadataFormat.XMP.value, offset,
    )


# ─── Documents and audio ────────────────────────────────────────

def _embed_xmp_pdf(upload: _Upload) -> EmbedResult:
    reader = PdfReader(io.BytesIO(upload.data))
    writer = PdfWriter()
    writer.append_pages_from_reader(reader)
    if reader.metadata:
        writer.add_metadata({k: str(v) for k, v in reader.metadata.items()})
    writer.add_metadata({
        "/Title": f"RSL Protected: {upload.file_name}",
        "/Author": RSL_PLATFORM,
        "/Subject": f"{RSL_LICENSE_NAME} Licensed Content",
        "/Keywords": "RSL, license, metadata",
        "/Producer": f"{RSL_PLATFORM} v1.0",
        "/Creator": RSL_PLATFORM,
        "/RSLLicense": upload.license_xml,
        "/XMP": build_xmp_packet(upload.metadata),
    })
    out = io.BytesIO()
    writer.write(out)
    return EmbedResult(
        out.getvalue(), upload.file_name, upload.mime_type, MetadataFormat.XMP.value,
    )


def _embed_id3(upload: _Upload) -> EmbedResult:
    buffer = io.BytesIO(upload.data)
    try:
        tags = ID3(buffer)
    except ID3NoHeaderError:
        tags = ID3()
    metadata = upload.metadata
    tags.add(TIT2(encoding=3, text="RSL Protected Content"))
    tags.add(TPE1(encoding=3, text=RSL_PLATFORM))
    tags.add(TALB(encoding=3, text=RSL_LICENSE_NAME))
    tags.add(COMM(
        encoding=3, lang="eng", desc="RSL",
        text=json.dumps(metadata, separators=(",", ":")),
    ))
    user_text = {
        "RSL_LICENSE": metadata.get("license") or RSL_LICENSE_NAME,
        "RSL_PERMISSIONS": ",".join(metadata.get("permissions") or []),
        "RSL_PAYMENT_MODEL": metadata.get("paymentModel") or "",
        "RSL_DOCUMENT": upload.license_xml,
    }
    for desc, value in user_text.items():
        tags.add(TXXX(encoding=3, desc=desc, text=value))
    buffer.seek(0)
    tags.save(buffer)
    return EmbedResult(
        buffer.getvalue(), upload.file_name, upload.mime_type, MetadataFormat.ID3.value, 0,
    )


def _embed_html(upload: _Upload) -> EmbedResult:
    content = upload.data.decode("utf-8")
    match = _HEAD_CLOSE.search(content)
    if match is None:
        raise ValueError("HTML document has no </head>")
    xml = upload.license_xml
    encoded = base64.b64encode(xml.encode("utf-8")).decode("ascii")
    block = (
        "\n"
        '<script type="application/rss+xml" id="rsl-license">\n'
        f"{xml}\n"
        "</script>\n"
        f'<meta name="rsl-license" content="{html.escape(xml, quote=True)}" />\n'
        f'<link rel="license" href="data:application/rss+xml;base64,{encoded}" />\n'
        "\n"
    )
    position = len(content[:match.start()].encode("utf-8"))
    modified = content[:match.start()] + block + content[match.start():]
    return EmbedResult(
        modified.encode("utf-8"), upload.file_name, upload.mime_type,
        MetadataFormat.HTML.value, position,
    )


def create_sidecar(
    file_name: str, license_xml: str, now: datetime | None = None,
) -> EmbedResult:
    content = build_sidecar(file_name, license_xml, now)
    return EmbedResult(
        content.encode("utf-8"), sidecar_name(file_name), SIDECAR_MIME_TYPE,
        MetadataFormat.SIDECAR.value,
    )


# ─── Dispatch ───────────────────────────────────────────────────

Handler = Callable[[_Upload], EmbedResult]

_HANDLERS: dict[tuple[MetadataFormat, str], Handler] = {
    (MetadataFormat.EXIF, "image/jpeg"): _embed_exif_jpeg,
    (MetadataFormat.EXIF, "image/jpg"): _embed_exif_jpeg,
    (MetadataFormat.EXIF, "image/png"): _embed_exif_png,
    (MetadataFormat.XMP, "application/pdf"): _embed_xmp_pdf,
    (MetadataFormat.XMP, "image/jpeg"): _embed_xmp_jpeg,
    (MetadataFormat.XMP, "image/jpg"): _embed_xmp_jpeg,
    (MetadataFormat.XMP, "image/png"): _embed_xmp_png,
    (MetadataFormat.ID3, "audio/mpeg"): _embed_id3,
    (MetadataFormat.ID3, "audio/mp3"): _embed_id3,
    (MetadataFormat.HTML, "text/html"): _embed_html,
}


def supported_containers(fmt: MetadataFormat) -> list[str]:
    return sorted(mime for (f, mime) in _HANDLERS if f == fmt)


def embed(
    data: bytes,
    file_name: str,
    mime_type: str,
    license_xml: str,
    metadata: dict,
    fmt: MetadataFormat,
) -> EmbedResult:
    """Write the license into the file, or produce a sidecar when it cannot be."""
    mime = (mime_type or "").lower()
    handler = _HANDLERS.get((fmt, mime))
    if handler is None:
        if fmt != MetadataFormat.SIDECAR:
            logger.info(
                f"No {fmt.value} handler for {mime or 'unknown type'}, writing sidecar",
            )
        return create_sidecar(file_name, license_xml)

    upload = _Upload(data, file_name, mime_type, license_xml, metadata)
    try:
        return handler(upload)
    except Exception as e:
        # Fallback contract: a malformed container never fails the request
        logger.warning(
            f"{fmt.value} embedding failed for {file_name}, writing sidecar: {e}",
            extra={"error_code": "EMBED_FALLBACK"},
        )
        return create_sidecar(file_name, license_xml)
