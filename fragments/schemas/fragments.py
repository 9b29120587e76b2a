"""Pydantic schemas for fragment endpoints."""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field


class FragmentMetadata(BaseModel):
    """Fragment metadata as exposed over HTTP (camelCase owner id)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    owner_id: str = Field(alias="ownerId")
    type: str
    size: int
    created: str
    updated: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "FragmentMetadata":
        return cls.model_validate(record)


class FragmentResponse(BaseModel):
    """Response model for a single fragment's metadata."""
    status: str = "ok"
    fragment: FragmentMetadata


class FragmentListResponse(BaseModel):
    """Response model for fragment listing (ids, or metadata when expanded)."""
    status: str = "ok"
    fragments: Union[List[FragmentMetadata], List[str]]


class HealthResponse(BaseModel):
    """Response model for the health check."""
    status: str = "ok"
    service: str
    version: str
