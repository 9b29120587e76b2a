"""Byte-level conversion between fragment representations."""

import asyncio
import csv
import io
import json
import logging
from typing import Callable, Dict, Tuple

import yaml
from markdown_it import MarkdownIt
from PIL import Image

from fragments.exceptions import ConversionError, UnsupportedConversionError
from fragments.model import negotiation
from fragments.model.negotiation import (
    APPLICATION_JSON,
    APPLICATION_YAML,
    IMAGE_TYPES,
    TEXT_CSV,
    TEXT_HTML,
    TEXT_MARKDOWN,
    TEXT_PLAIN,
)

logger = logging.getLogger(__name__)

_markdown = MarkdownIt("js-default")

# Pillow encoder names per image media type.
PILLOW_FORMATS: Dict[str, str] = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/webp": "WEBP",
    "image/avif": "AVIF",
    "image/gif": "GIF",
}


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ConversionError(f"Fragment data is not valid UTF-8 text: {e}") from e


def _to_plain_text(data: bytes) -> bytes:
    return _decode_text(data).encode("utf-8")


def _markdown_to_html(data: bytes) -> bytes:
    return _markdown.render(_decode_text(data)).encode("utf-8")


def _csv_to_json(data: bytes) -> bytes:
    reader = csv.DictReader(io.StringIO(_decode_text(data)))
    try:
        rows = [dict(row) for row in reader]
    except csv.Error as e:
        raise ConversionError(f"Fragment data is not valid CSV: {e}") from e
    return json.dumps(rows).encode("utf-8")


def _json_to_yaml(data: bytes) -> bytes:
    try:
        document = json.loads(_decode_text(data))
    except json.JSONDecodeError as e:
        raise ConversionError(f"Fragment data is not valid JSON: {e}") from e
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True).encode("utf-8")


def transcode_image(data: bytes, target_type: str) -> bytes:
    """
    Re-encode image pixel data into the container format of ``target_type``.

    Only the first frame of animated sources is kept.
    """
    target_format = PILLOW_FORMATS[target_type]
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            if target_format == "JPEG" and image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            elif target_format in ("WEBP", "AVIF") and image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA")

            output = io.BytesIO()
            image.save(output, format=target_format)
    except (Image.DecompressionBombError, OSError, ValueError, SyntaxError) as e:
        raise ConversionError(f"Unable to convert image to {target_type}: {e}") from e

    return output.getvalue()


def _image_converter(target_type: str) -> Callable[[bytes], bytes]:
    return lambda data: transcode_image(data, target_type)


# Non-identity conversions, keyed by (source, target). Identity pairs never
# reach this table.
CONVERTERS: Dict[Tuple[str, str], Callable[[bytes], bytes]] = {
    (TEXT_MARKDOWN, TEXT_HTML): _markdown_to_html,
    (TEXT_MARKDOWN, TEXT_PLAIN): _to_plain_text,
    (TEXT_HTML, TEXT_PLAIN): _to_plain_text,
    (TEXT_CSV, TEXT_PLAIN): _to_plain_text,
    (TEXT_CSV, APPLICATION_JSON): _csv_to_json,
    (APPLICATION_JSON, APPLICATION_YAML): _json_to_yaml,
    (APPLICATION_JSON, TEXT_PLAIN): _to_plain_text,
    (APPLICATION_YAML, TEXT_PLAIN): _to_plain_text,
    **{
        (source, target): _image_converter(target)
        for source in IMAGE_TYPES
        for target in IMAGE_TYPES
        if source != target
    },
}


def convert(data: bytes, source_type: str, target_type: str) -> bytes:
    """
    Convert ``data`` from ``source_type`` into ``target_type``.

    Identity conversions return the original bytes untouched.

    Raises:
        UnsupportedConversionError: If the pair is not reachable
        ConversionError: If the payload cannot be parsed as its source type
    """
    source = negotiation.parse_media_type(source_type)
    target = negotiation.parse_media_type(target_type)

    if not negotiation.can_convert(source, target):
        raise UnsupportedConversionError(source, target)

    if source == target:
        return data

    converter = CONVERTERS.get((source, target))
    if converter is None:
        raise UnsupportedConversionError(source, target)

    logger.debug(f"Converting {len(data)} bytes from {source} to {target}")
    return converter(data)


async def convert_async(data: bytes, source_type: str, target_type: str) -> bytes:
    """
    Run ``convert`` off the event loop; image codecs are CPU bound.
    """
    return await asyncio.to_thread(convert, data, source_type, target_type)
