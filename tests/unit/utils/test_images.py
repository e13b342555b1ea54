"""
Image Ingest Tests
==================
Tests for format sniffing, size limits and the ImageIngestPipeline.
"""

import base64

import pytest

from plantcare.domain.exceptions import ImageFormatError, SizeLimitExceeded
from plantcare.utils.images import (
    ImageIngestPipeline,
    build_data_uri,
    enforce_size_limit,
    sniff_format,
    validate_or_none,
)


class TestSniffFormat:
    @pytest.mark.parametrize(
        "data, expected",
        [
            (b"\x89PNG\r\n\x1a\n", "png"),
            (b"\xff\xd8\xff\xe0", "jpeg"),
            (b"GIF89a", "gif"),
            (b"RIFF....WEBP", "jpeg"),
            (b"", "jpeg"),
        ],
    )
    def test_magic_bytes(self, data, expected):
        assert sniff_format(data) == expected


class TestSizeLimit:
    def test_exactly_at_limit_is_allowed(self):
        enforce_size_limit(b"\x00" * (1024 * 1024), max_mb=1)

    def test_over_limit_carries_size(self):
        data = b"\x00" * (3 * 1024 * 1024 + 512 * 1024)

        with pytest.raises(SizeLimitExceeded) as excinfo:
            enforce_size_limit(data, max_mb=2)

        assert excinfo.value.size_mb == pytest.approx(3.5)
        assert excinfo.value.limit_mb == 2
        assert excinfo.value.http_status == 413
        assert "3.50MB" in str(excinfo.value)


class TestValidateOrNone:
    def test_data_uri_passes_through(self):
        uri = "data:image/png;base64,iVBORw0KGgo="
        assert validate_or_none(uri) == uri

    def test_bare_base64_is_wrapped_as_jpeg(self):
        assert validate_or_none("QUJD\nREVG") == "data:image/jpeg;base64,QUJDREVG"

    @pytest.mark.parametrize("candidate", ["https://example.com/plant.jpg", "not base64!", "", None])
    def test_unusable_returns_none(self, candidate):
        assert validate_or_none(candidate) is None


class TestImageIngestPipeline:
    def test_png_bytes_become_png_data_uri(self, png_bytes):
        uri = ImageIngestPipeline().prepare(png_bytes)

        assert uri.startswith("data:image/png;base64,")
        assert base64.b64decode(uri.split(",", 1)[1]) == png_bytes

    def test_unknown_bytes_default_to_jpeg(self):
        assert ImageIngestPipeline().prepare(b"\x01\x02\x03").startswith("data:image/jpeg;base64,")

    def test_build_data_uri_matches_prepare(self, jpeg_bytes):
        assert ImageIngestPipeline().prepare(jpeg_bytes) == build_data_uri(jpeg_bytes)

    def test_oversized_bytes_rejected(self):
        with pytest.raises(SizeLimitExceeded):
            ImageIngestPipeline(max_mb=1).prepare(b"\x00" * (2 * 1024 * 1024))

    def test_oversized_base64_rejected(self):
        payload = base64.b64encode(b"\x00" * (2 * 1024 * 1024)).decode("ascii")

        with pytest.raises(SizeLimitExceeded):
            ImageIngestPipeline(max_mb=1).prepare(payload)

    def test_url_is_rejected(self):
        with pytest.raises(ImageFormatError):
            ImageIngestPipeline().prepare("https://example.com/plant.jpg")

    def test_empty_bytes_rejected(self):
        with pytest.raises(ImageFormatError):
            ImageIngestPipeline().prepare(b"")

    def test_unsupported_type_rejected(self):
        with pytest.raises(ImageFormatError):
            ImageIngestPipeline().prepare(12345)
