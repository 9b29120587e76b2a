"""Checks that uploaded bytes agree with their declared media type."""

import asyncio
import io
import json
import logging

import yaml
from PIL import Image, UnidentifiedImageError

from fragments.exceptions import ContentMismatchError
from fragments.model import negotiation

logger = logging.getLogger(__name__)

# Pillow format names mapped to media subtypes. Some decoders report AVIF
# content as the generic HEIF container.
DETECTED_IMAGE_FORMATS = {
    "PNG": "png",
    "JPEG": "jpeg",
    "WEBP": "webp",
    "GIF": "gif",
    "AVIF": "avif",
    "HEIF": "avif",
}


def validate_json(data: bytes) -> None:
    try:
        json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Invalid JSON data, {e}")
        raise ContentMismatchError(f"Invalid JSON data, {e}") from e


def validate_yaml(data: bytes) -> None:
    try:
        yaml.safe_load(data)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML data, {e}")
        raise ContentMismatchError(f"Invalid YAML data, {e}") from e


def validate_text(data) -> None:
    if not isinstance(data, (str, bytes, bytearray)):
        logger.error("Invalid text data, must be a string or bytes")
        raise ContentMismatchError("Invalid text data, must be a string or bytes")


def detect_image_format(data: bytes) -> str:
    """
    Decode the image header and return the detected subtype (e.g. "png").
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            detected = image.format
            image.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        logger.error(f"Invalid image data, {e}")
        raise ContentMismatchError(f"Invalid image data, {e}") from e

    return DETECTED_IMAGE_FORMATS.get(detected, (detected or "unknown").lower())


def validate_image(data: bytes, mime_type: str) -> None:
    expected = mime_type.split("/", 1)[1]
    actual = detect_image_format(data)

    if actual != expected:
        logger.error(f"Invalid image data, expected {expected} but {actual} was passed instead")
        raise ContentMismatchError(
            f"Invalid image data, expected {expected} but {actual} was passed instead"
        )


def validate_fragment_data(data: bytes, content_type: str) -> None:
    """
    Confirm that ``data`` conforms to ``content_type``.

    Types without a dedicated check pass through; admission of the type
    itself is decided before the bytes reach this point.

    Raises:
        ContentMismatchError: If the bytes do not match the declared type
    """
    mime_type = negotiation.parse_media_type(content_type)

    if mime_type == negotiation.APPLICATION_JSON:
        validate_json(data)
    elif mime_type in (negotiation.APPLICATION_YAML, "application/yml"):
        validate_yaml(data)
    elif mime_type == negotiation.TEXT_PLAIN:
        validate_text(data)
    elif mime_type in negotiation.IMAGE_TYPES:
        validate_image(data, mime_type)


async def validate_fragment_data_async(data: bytes, content_type: str) -> None:
    await asyncio.to_thread(validate_fragment_data, data, content_type)
