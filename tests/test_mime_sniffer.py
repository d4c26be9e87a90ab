"""
Tests for file type detection.
"""
import pytest
from record_validation.mime_sniffer import HEADER_SIZE, detect_extension


class TestDetectExtension:
    """Test detect_extension() on known signatures."""

    @pytest.mark.parametrize("data,expected", [
        (b"\xFF\xD8\xFF\xE0\x00\x10JFIF\x00", ".jpg"),
        (b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR", ".png"),
        (b"GIF89a\x01\x00\x01\x00", ".gif"),
        (b"RIFF\x24\x00\x00\x00WEBPVP8 ", ".webp"),
        (b"RIFF\x24\x00\x00\x00WAVEfmt ", ".wav"),
        (b"%PDF-1.4\n", ".pdf"),
        (b"PK\x03\x04\x14\x00", ".zip"),
        (b"\x1f\x8b\x08\x00", ".gz"),
        (b"\x00\x00\x00\x18ftypmp42", ".mp4"),
        (b"ID3\x03\x00", ".mp3"),
        (b"BM\x36\x00", ".bmp"),
    ])
    def test_signatures(self, data, expected):
        assert detect_extension(data) == expected

    def test_plain_text(self):
        assert detect_extension(b"name,email\nada,ada@domain.com\n") == ".txt"

    def test_utf8_text(self):
        assert detect_extension("résumé".encode("utf-8")) == ".txt"

    def test_unknown_binary(self):
        assert detect_extension(b"\x00\x01\x02\x03binary") == ""

    def test_unknown_riff(self):
        assert detect_extension(b"RIFF\x24\x00\x00\x00XXXX") == ""

    def test_text_cut_inside_character(self):
        """Test that a multi-byte character split at the header boundary is still text."""
        data = b"a" * (HEADER_SIZE - 1) + "é".encode("utf-8")
        assert detect_extension(data) == ".txt"
