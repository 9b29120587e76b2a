"""Fragment API routes (v1)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from common.constants import MAX_FRAGMENT_SIZE_BYTES
from fragments import config
from fragments.auth import get_current_owner
from fragments.exceptions import (
    FragmentValidationError,
    PayloadTooLargeError,
    TypeChangeError,
    UnsupportedTypeError
)
from fragments.model import Fragment, negotiation
from fragments.model.validation import validate_fragment_data_async
from fragments.schemas.fragments import (
    FragmentListResponse,
    FragmentMetadata,
    FragmentResponse
)
from fragments.schemas.common import StatusResponse
from fragments.utils import parse_bool

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/fragments", tags=["Fragments"])

UNSUPPORTED_TYPE_MESSAGE = "Unsupported fragment type requested by the client!"


def _fragment_response(fragment: Fragment) -> FragmentResponse:
    return FragmentResponse(fragment=FragmentMetadata.from_record(fragment.to_dict()))


def _require_supported_type(request: Request) -> str:
    content_type = request.headers.get("content-type")
    if not Fragment.is_supported_type(content_type):
        logger.warning(f"Trying to store unsupported fragment type: {content_type}")
        raise UnsupportedTypeError(UNSUPPORTED_TYPE_MESSAGE)
    return content_type


async def read_body(request: Request, limit: int = MAX_FRAGMENT_SIZE_BYTES) -> bytes:
    """
    Buffer the request body, refusing anything above ``limit`` bytes.

    The declared Content-Length is checked before any bytes are read.

    Raises:
        PayloadTooLargeError: If the body is larger than ``limit``
    """
    content_length = request.headers.get("content-length")
    if content_length is not None:
        try:
            declared = int(content_length)
        except ValueError as e:
            raise FragmentValidationError("Invalid Content-Length header") from e
        if declared > limit:
            raise PayloadTooLargeError(f"Fragment exceeds the {limit} byte limit")

    body = bytearray()
    async for piece in request.stream():
        body.extend(piece)
        if len(body) > limit:
            raise PayloadTooLargeError(f"Fragment exceeds the {limit} byte limit")
    return bytes(body)


def split_extension(fragment_ref: str) -> tuple[str, Optional[str]]:
    """
    Split "abc.html" into ("abc", ".html"). No extension gives (ref, None).
    """
    fragment_id, dot, extension = fragment_ref.partition(".")
    if not dot:
        return fragment_id, None
    return fragment_id, f".{extension}"


@router.get("", response_model=FragmentListResponse)
async def list_fragments(
    expand: Optional[str] = Query(None, description="Return full metadata when truthy (e.g. expand=1)"),
    owner_id: str = Depends(get_current_owner)
):
    """
    List the current user's fragments.

    Returns:
        - fragments: ids, or full metadata when expand is set
    """
    expanded = parse_bool(expand)
    fragments = await Fragment.by_user(owner_id, expanded)

    if expanded:
        fragments = [FragmentMetadata.from_record(record) for record in fragments]
    return FragmentListResponse(fragments=fragments)


@router.post("", response_model=FragmentResponse, status_code=status.HTTP_201_CREATED)
async def create_fragment(
    request: Request,
    owner_id: str = Depends(get_current_owner)
):
    """
    Create a fragment from the raw request body.

    Raises:
        - 401: Invalid or missing credentials
        - 413: Body larger than the size ceiling
        - 415: Unsupported Content-Type, or body does not match it
    """
    content_type = _require_supported_type(request)
    data = await read_body(request)

    await validate_fragment_data_async(data, content_type)

    fragment = Fragment(owner_id=owner_id, type=content_type)
    await fragment.save()
    await fragment.set_data(data)

    logger.info(f"Created fragment {fragment.id} ({fragment.type}, {fragment.size} bytes)")

    base_url = config.API_URL or str(request.base_url)
    location = f"{base_url.rstrip('/')}/v1/fragments/{fragment.id}"

    body = _fragment_response(fragment)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=body.model_dump(by_alias=True),
        headers={"Location": location}
    )


@router.get("/{fragment_id}/info", response_model=FragmentResponse)
async def get_fragment_info(
    fragment_id: str,
    owner_id: str = Depends(get_current_owner)
):
    """
    Get a fragment's metadata.

    Raises:
        - 404: Fragment not found
    """
    fragment = await Fragment.by_id(owner_id, fragment_id)
    return _fragment_response(fragment)


@router.get("/{fragment_ref}")
async def get_fragment(
    fragment_ref: str,
    owner_id: str = Depends(get_current_owner)
):
    """
    Get a fragment's data, optionally converted by extension (e.g. /{id}.html).

    Raises:
        - 404: Fragment not found
        - 415: Extension unknown or not reachable from the fragment's type
    """
    fragment_id, extension = split_extension(fragment_ref)
    fragment = await Fragment.by_id(owner_id, fragment_id)

    if extension is None:
        data = await fragment.get_data()
        return Response(content=data, media_type=fragment.type)

    media_type = fragment.content_type_for(extension)
    data = await fragment.get_converted_into(extension)
    return Response(content=data, media_type=media_type)


@router.put("/{fragment_id}", response_model=FragmentResponse)
async def update_fragment(
    fragment_id: str,
    request: Request,
    owner_id: str = Depends(get_current_owner)
):
    """
    Replace a fragment's data. The type cannot change.

    Raises:
        - 400: Content-Type differs from the stored type
        - 404: Fragment not found
        - 413: Body larger than the size ceiling
        - 415: Unsupported Content-Type, or body does not match it
    """
    content_type = _require_supported_type(request)
    fragment = await Fragment.by_id(owner_id, fragment_id)

    if negotiation.parse_media_type(content_type) != fragment.mime_type:
        raise TypeChangeError(f"Cannot change type of the fragment to {content_type}!")

    data = await read_body(request)
    await validate_fragment_data_async(data, content_type)

    await fragment.set_data(data)
    logger.info(f"Updated fragment {fragment.id} ({fragment.size} bytes)")

    return _fragment_response(fragment)


@router.delete("/{fragment_id}", response_model=StatusResponse)
async def delete_fragment(
    fragment_id: str,
    owner_id: str = Depends(get_current_owner)
):
    """
    Delete a fragment's metadata and data.

    Raises:
        - 404: Fragment not found
    """
    logger.debug(f"Delete fragment with ID {fragment_id}")
    await Fragment.delete(owner_id, fragment_id)
    return StatusResponse()
