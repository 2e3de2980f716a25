"""Classification of files into SPDX file types."""

from __future__ import annotations

import os
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

SNIFF_LENGTH = 512
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_WHITESPACE = b"\t\n\x0c\r "
_TAG_TERMINATORS = b" >"
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)

_HTML_SIGNATURES = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

_FULL = 0xFF


def _mask(pattern: bytes, wildcards: range | tuple[int, ...] = ()) -> bytes:
    return bytes(0x00 if i in wildcards else _FULL for i in range(len(pattern)))


# (pattern, mask, content type); an all-0xFF mask is an exact prefix match.
_MASKED_SIGNATURES: tuple[tuple[bytes, bytes, str], ...] = (
    (b"%PDF-", _mask(b"%PDF-"), "application/pdf"),
    (b"%!PS-Adobe-", _mask(b"%!PS-Adobe-"), "application/postscript"),
    (b"\xfe\xff\x00\x00", b"\xff\xff\x00\x00", "text/plain; charset=utf-16be"),
    (b"\xff\xfe\x00\x00", b"\xff\xff\x00\x00", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf\x00", b"\xff\xff\xff\x00", "text/plain; charset=utf-8"),
    (b"\x00\x00\x01\x00", _mask(b"\x00\x00\x01\x00"), "image/x-icon"),
    (b"\x00\x00\x02\x00", _mask(b"\x00\x00\x02\x00"), "image/x-icon"),
    (b"BM", _mask(b"BM"), "image/bmp"),
    (b"GIF87a", _mask(b"GIF87a"), "image/gif"),
    (b"GIF89a", _mask(b"GIF89a"), "image/gif"),
    (b"RIFF\x00\x00\x00\x00WEBPVP", _mask(b"RIFF\x00\x00\x00\x00WEBPVP", range(4, 8)), "image/webp"),
    (b"\x89PNG\r\n\x1a\n", _mask(b"\x89PNG\r\n\x1a\n"), "image/png"),
    (b"\xff\xd8\xff", _mask(b"\xff\xd8\xff"), "image/jpeg"),
    (b"FORM\x00\x00\x00\x00AIFF", _mask(b"FORM\x00\x00\x00\x00AIFF", range(4, 8)), "audio/aiff"),
    (b"ID3", _mask(b"ID3"), "audio/mpeg"),
    (b"OggS\x00", _mask(b"OggS\x00"), "application/ogg"),
    (b"MThd\x00\x00\x00\x06", _mask(b"MThd\x00\x00\x00\x06"), "audio/midi"),
    (b"RIFF\x00\x00\x00\x00AVI ", _mask(b"RIFF\x00\x00\x00\x00AVI ", range(4, 8)), "video/avi"),
    (b"RIFF\x00\x00\x00\x00WAVE", _mask(b"RIFF\x00\x00\x00\x00WAVE", range(4, 8)), "audio/wave"),
)

_LATE_SIGNATURES: tuple[tuple[bytes, bytes, str], ...] = (
    (b"\x1a\x45\xdf\xa3", _mask(b"\x1a\x45\xdf\xa3"), "video/webm"),
    (b"\x00" * 34 + b"LP", b"\x00" * 34 + b"\xff\xff", "application/vnd.ms-fontobject"),
    (b"\x00\x01\x00\x00", _mask(b"\x00\x01\x00\x00"), "font/ttf"),
    (b"OTTO", _mask(b"OTTO"), "font/otf"),
    (b"ttcf", _mask(b"ttcf"), "font/collection"),
    (b"wOFF", _mask(b"wOFF"), "font/woff"),
    (b"wOF2", _mask(b"wOF2"), "font/woff2"),
    (b"\x1f\x8b\x08", _mask(b"\x1f\x8b\x08"), "application/x-gzip"),
    (b"PK\x03\x04", _mask(b"PK\x03\x04"), "application/zip"),
    (b"Rar!\x1a\x07\x00", _mask(b"Rar!\x1a\x07\x00"), "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", _mask(b"Rar!\x1a\x07\x01\x00"), "application/x-rar-compressed"),
    (b"\x00asm", _mask(b"\x00asm"), "application/wasm"),
)

_SOURCE_EXTENSIONS = frozenset(
    "go java rs rb c cgi class cpp cs h php py sh swift vb css".split()
)
_DOCUMENT_EXTENSIONS = frozenset(
    "txt text pdf md doc docx epub ppt pptx pps odp xls xlsm xlsx".split()
)
_TEXT_EXTENSIONS = frozenset("yml yaml json".split())
_BINARY_EXTENSIONS = frozenset(
    "exe a o octet-stream apk bat bin pl com gadget jar msi wsf".split()
)
_IMAGE_EXTENSIONS = frozenset(
    "jpeg jpg png svg ai bmp gif ico ps psd tif tiff".split()
)
_AUDIO_EXTENSIONS = frozenset("mp3 wav aif cda mid midi mpa ogg wma wpl".split())
_ARCHIVE_EXTENSIONS = frozenset(
    "zip tar tar.gz tar.bz2 7z arj deb pkg rar rpm z".split()
)


def _skip_whitespace(data: bytes) -> bytes:
    return data.lstrip(_WHITESPACE)


def _matches_html(data: bytes, signature: bytes) -> bool:
    if len(data) < len(signature) + 1:
        return False
    for expected, actual in zip(signature, data):
        if 0x41 <= expected <= 0x5A:
            actual &= 0xDF
        if expected != actual:
            return False
    return data[len(signature)] in _TAG_TERMINATORS


def _matches_masked(data: bytes, pattern: bytes, mask: bytes) -> bool:
    if len(data) < len(pattern):
        return False
    return all((byte & m) == p for byte, m, p in zip(data, mask, pattern))


def _is_mp4(data: bytes) -> bool:
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if len(data) < box_size or box_size % 4 != 0:
        return False
    if data[4:8] != b"ftyp":
        return False
    return any(
        data[start:start + 3] == b"mp4" for start in range(8, box_size, 4) if start != 12
    )


def detect_content_type(data: bytes) -> str:
    """Sniff a MIME type from the first 512 bytes of ``data``."""
    data = bytes(data[:SNIFF_LENGTH])
    trimmed = _skip_whitespace(data)

    if any(_matches_html(trimmed, sig) for sig in _HTML_SIGNATURES):
        return "text/html; charset=utf-8"
    if trimmed.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    for pattern, mask, content_type in _MASKED_SIGNATURES:
        if _matches_masked(data, pattern, mask):
            return content_type
    if _is_mp4(data):
        return "video/mp4"
    for pattern, mask, content_type in _LATE_SIGNATURES:
        if _matches_masked(data, pattern, mask):
            return content_type
    if not any(byte in _BINARY_BYTES for byte in trimmed):
        return "text/plain; charset=utf-8"
    return DEFAULT_CONTENT_TYPE


def file_content_type(path: PathLike) -> str:
    """Sniff the MIME type of a file from a zero-padded 512-byte head.

    Raises ``OSError`` when the file cannot be read and ``EOFError`` when it
    is empty.
    """
    with open(path, "rb") as handle:
        head = handle.read(SNIFF_LENGTH)
    if not head:
        raise EOFError(f"{os.fspath(path)} is empty")
    return detect_content_type(head.ljust(SNIFF_LENGTH, b"\x00"))


def _extension(path: str) -> str:
    base = path.rsplit("/", 1)[-1]
    if os.sep != "/":
        base = base.rsplit(os.sep, 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def get_file_types(path: PathLike) -> list[str]:
    """Return the SPDX file types of ``path``, judged by extension or content."""
    extension = _extension(os.fspath(path)).lstrip(".")

    if not extension:
        try:
            mime_type = file_content_type(path)
        except (OSError, EOFError):
            return ["OTHER"]
        major, _, minor = mime_type.partition("/")
        extension = minor if major == "application" else major

    if extension in _SOURCE_EXTENSIONS:
        return ["SOURCE"]
    if extension in _DOCUMENT_EXTENSIONS:
        return ["TEXT", "DOCUMENTATION"]
    if extension in _TEXT_EXTENSIONS:
        return ["TEXT"]
    if extension in _BINARY_EXTENSIONS:
        return ["BINARY", "APPLICATION"]
    if extension in _IMAGE_EXTENSIONS:
        return ["IMAGE"]
    if extension in _AUDIO_EXTENSIONS:
        return ["AUDIO"]
    if extension in _ARCHIVE_EXTENSIONS:
        return ["ARCHIVE"]
    return ["OTHER"]