"""Content-type sniffing from file magic numbers."""

from typing import Callable

# Detects a dotted extension (".png") from raw bytes, "" when unknown
Sniffer = Callable[[bytes], str]

# Checked in order; longer signatures first where prefixes overlap
FILE_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1", ".doc"),
    (b"Rar!\x1a\x07", ".rar"),
    (b"GIF87a", ".gif"),
    (b"GIF89a", ".gif"),
    (b"%PDF-", ".pdf"),
    (b"PK\x03\x04", ".zip"),
    (b"II*\x00", ".tif"),
    (b"MM\x00*", ".tif"),
    (b"OggS", ".ogg"),
    (b"\xFF\xD8\xFF", ".jpg"),
    (b"ID3", ".mp3"),
    (b"\x1f\x8b", ".gz"),
    (b"BM", ".bmp"),
    (b"\xFF\xFB", ".mp3"),
    (b"\xFF\xF3", ".mp3"),
    (b"\xFF\xF2", ".mp3"),
)

RIFF_TYPES = {
    b"WEBP": ".webp",
    b"AVI ": ".avi",
    b"WAVE": ".wav",
}

# Bytes that never occur in plain text
_BINARY_BYTES = set(range(0x00, 0x09)) | {0x0B, 0x0E, 0x0F} | set(range(0x10, 0x1B)) | set(range(0x1C, 0x20))

HEADER_SIZE = 512


def detect_extension(data: bytes) -> str:
    """
    Detect the extension of a file from its leading bytes.

    Args:
        data: File content (only the first bytes are inspected)

    Returns:
        Dotted extension such as ".png", ".txt" for UTF-8 text, or "" when
        the content is not recognized
    """
    header = data[:HEADER_SIZE]

    if header.startswith(b"RIFF") and len(header) >= 12:
        return RIFF_TYPES.get(header[8:12], "")

    # ISO base media: size box followed by "ftyp"
    if len(header) >= 12 and header[4:8] == b"ftyp":
        return ".mp4"

    for signature, extension in FILE_SIGNATURES:
        if header.startswith(signature):
            return extension

    if _looks_like_text(header):
        return ".txt"
    return ""


def _looks_like_text(header: bytes) -> bool:
    if any(byte in _BINARY_BYTES for byte in header):
        return False
    try:
        header.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character cut at the header boundary is still text
        return e.start >= len(header) - 3 and len(header) == HEADER_SIZE
    return True
