"""Static knowledge of supported media types and their reachable conversions."""

from typing import Dict, List, Optional

from fragments.exceptions import UnsupportedConversionError

TEXT_PLAIN = "text/plain"
TEXT_MARKDOWN = "text/markdown"
TEXT_HTML = "text/html"
TEXT_CSV = "text/csv"
APPLICATION_JSON = "application/json"
APPLICATION_YAML = "application/yaml"
IMAGE_PNG = "image/png"
IMAGE_JPEG = "image/jpeg"
IMAGE_WEBP = "image/webp"
IMAGE_AVIF = "image/avif"
IMAGE_GIF = "image/gif"

IMAGE_TYPES: List[str] = [IMAGE_PNG, IMAGE_JPEG, IMAGE_WEBP, IMAGE_AVIF, IMAGE_GIF]

SUPPORTED_TYPES: List[str] = [
    TEXT_PLAIN,
    TEXT_MARKDOWN,
    TEXT_HTML,
    TEXT_CSV,
    APPLICATION_JSON,
    APPLICATION_YAML,
    *IMAGE_TYPES,
]

# Identity first, then the remaining reachable types in a stable order.
CONVERSIONS: Dict[str, List[str]] = {
    TEXT_PLAIN: [TEXT_PLAIN],
    TEXT_MARKDOWN: [TEXT_MARKDOWN, TEXT_HTML, TEXT_PLAIN],
    TEXT_HTML: [TEXT_HTML, TEXT_PLAIN],
    TEXT_CSV: [TEXT_CSV, TEXT_PLAIN, APPLICATION_JSON],
    APPLICATION_JSON: [APPLICATION_JSON, APPLICATION_YAML, TEXT_PLAIN],
    APPLICATION_YAML: [APPLICATION_YAML, TEXT_PLAIN],
    **{image: [image] + [other for other in IMAGE_TYPES if other != image] for image in IMAGE_TYPES},
}

EXTENSIONS: Dict[str, str] = {
    ".txt": TEXT_PLAIN,
    ".md": TEXT_MARKDOWN,
    ".html": TEXT_HTML,
    ".csv": TEXT_CSV,
    ".json": APPLICATION_JSON,
    ".yaml": APPLICATION_YAML,
    ".yml": APPLICATION_YAML,
    ".png": IMAGE_PNG,
    ".jpg": IMAGE_JPEG,
    ".jpeg": IMAGE_JPEG,
    ".webp": IMAGE_WEBP,
    ".gif": IMAGE_GIF,
    ".avif": IMAGE_AVIF,
}


def parse_media_type(value: str) -> str:
    """
    Strip parameters from a Content-Type value.

    "text/html; charset=utf-8" -> "text/html"
    """
    return value.split(";", 1)[0].strip().lower()


def is_supported_type(value: Optional[str]) -> bool:
    if not value:
        return False
    return parse_media_type(value) in SUPPORTED_TYPES


def reachable_types(mime_type: str) -> List[str]:
    """
    Return the media types a payload of ``mime_type`` can be converted into.

    Unknown types have no reachable representation.
    """
    return list(CONVERSIONS.get(parse_media_type(mime_type), []))


def can_convert(source_type: str, target_type: str) -> bool:
    return parse_media_type(target_type) in reachable_types(source_type)


def normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if not extension.startswith("."):
        extension = f".{extension}"
    return extension


def mime_type_for_extension(extension: str) -> Optional[str]:
    """
    Map a file-extension suffix to its media type.

    Returns None for unmapped suffixes; callers decide whether that means
    "unsupported extension" or "no extension requested".
    """
    if not extension:
        return None
    return EXTENSIONS.get(normalize_extension(extension))


def resolve_target_type(source_type: str, extension: str) -> str:
    """
    Resolve the target media type for a conversion request.

    Raises:
        UnsupportedConversionError: If the extension is unmapped or the target
            is not reachable from ``source_type``
    """
    target_type = mime_type_for_extension(extension)
    if target_type is None or not can_convert(source_type, target_type):
        raise UnsupportedConversionError(parse_media_type(source_type), target_type or extension)
    return target_type
