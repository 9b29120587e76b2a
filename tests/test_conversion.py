"""Tests for byte-level conversions between representations."""

import io
import json

import pytest
import yaml
from PIL import Image, features

from fragments.exceptions import ConversionError, UnsupportedConversionError
from fragments.model.conversion import convert, convert_async, transcode_image

avif_available = pytest.mark.skipif(not features.check("avif"), reason="Pillow built without AVIF support")


def image_format(data: bytes) -> str:
    with Image.open(io.BytesIO(data)) as image:
        return image.format


class TestTextConversions:
    """Text-family conversions."""

    def test_identity_returns_same_bytes(self):
        data = b"# not rendered"
        assert convert(data, "text/markdown", "text/markdown") is data

    def test_identity_ignores_charset(self):
        assert convert(b"abc", "text/plain; charset=utf-8", "text/plain") == b"abc"

    def test_markdown_to_html(self):
        assert convert(b"# Heading level 1", "text/markdown", "text/html") == b"<h1>Heading level 1</h1>\n"

    def test_markdown_to_html_escapes_raw_html(self):
        html = convert(b"<script>x</script>", "text/markdown", "text/html")
        assert b"<script>" not in html

    def test_markdown_to_plain_text(self):
        assert convert(b"*emphasis*", "text/markdown", "text/plain") == b"*emphasis*"

    def test_html_to_plain_text(self):
        assert convert(b"<p>hi</p>", "text/html", "text/plain") == b"<p>hi</p>"

    def test_csv_to_json(self):
        data = b"name,age\nada,36\ngrace,45\n"
        result = json.loads(convert(data, "text/csv", "application/json"))
        assert result == [{"name": "ada", "age": "36"}, {"name": "grace", "age": "45"}]

    def test_csv_header_only(self):
        assert json.loads(convert(b"name,age\n", "text/csv", "application/json")) == []

    def test_json_to_yaml(self):
        result = convert(b'{"b": 1, "a": [1, 2]}', "application/json", "application/yaml")
        assert yaml.safe_load(result) == {"b": 1, "a": [1, 2]}
        assert result.startswith(b"b: 1")

    def test_invalid_json_cannot_become_yaml(self):
        with pytest.raises(ConversionError):
            convert(b"{not json", "application/json", "application/yaml")

    def test_non_utf8_text(self):
        with pytest.raises(ConversionError):
            convert(b"\xff\xfe", "text/markdown", "text/html")

    def test_unreachable_pair(self):
        with pytest.raises(UnsupportedConversionError):
            convert(b"abc", "text/plain", "text/html")

    def test_unsupported_conversion_is_a_conversion_error(self):
        with pytest.raises(ConversionError):
            convert(b"abc", "application/yaml", "application/json")


class TestImageConversions:
    """Image transcoding through Pillow."""

    @pytest.mark.parametrize("source,source_type", [
        ("PNG", "image/png"),
        ("JPEG", "image/jpeg"),
        ("WEBP", "image/webp"),
        ("GIF", "image/gif"),
    ])
    @pytest.mark.parametrize("target_type,expected", [
        ("image/png", "PNG"),
        ("image/jpeg", "JPEG"),
        ("image/webp", "WEBP"),
        ("image/gif", "GIF"),
    ])
    def test_transcode(self, image_factory, source, source_type, target_type, expected):
        data = image_factory(source)
        assert image_format(convert(data, source_type, target_type)) == expected

    @avif_available
    def test_png_to_avif(self, image_factory):
        data = convert(image_factory("PNG"), "image/png", "image/avif")
        assert image_format(data) in ("AVIF", "HEIF")

    def test_transcode_preserves_dimensions(self, image_factory):
        data = transcode_image(image_factory("PNG", size=(17, 5)), "image/jpeg")
        with Image.open(io.BytesIO(data)) as image:
            assert image.size == (17, 5)

    def test_transcode_rgba_to_jpeg(self):
        buffer = io.BytesIO()
        Image.new("RGBA", (4, 4), (1, 2, 3, 128)).save(buffer, format="PNG")
        assert image_format(convert(buffer.getvalue(), "image/png", "image/jpeg")) == "JPEG"

    def test_corrupt_image(self):
        with pytest.raises(ConversionError):
            convert(b"not an image", "image/png", "image/jpeg")

    def test_decompression_bomb(self, image_factory, monkeypatch):
        data = image_factory("PNG", size=(16, 16))
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        with pytest.raises(ConversionError):
            convert(data, "image/png", "image/webp")

    def test_image_cannot_become_text(self, image_factory):
        with pytest.raises(UnsupportedConversionError):
            convert(image_factory("PNG"), "image/png", "text/plain")

    @pytest.mark.asyncio
    async def test_convert_async(self, image_factory):
        data = await convert_async(image_factory("GIF"), "image/gif", "image/png")
        assert image_format(data) == "PNG"
