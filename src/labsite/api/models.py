"""
Pydantic models for response validation.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SubsectionOut(BaseModel):
    """A minor-heading subsection of a primer section."""

    title: str
    id: str
    blocks: List[str] = Field(default_factory=list, description="Rendered HTML blocks")


class SectionOut(BaseModel):
    """A major-heading section with its own blocks and subsections."""

    title: str
    id: str
    blocks: List[str] = Field(default_factory=list)
    subsections: List[SubsectionOut] = Field(default_factory=list)


class BackgroundResponse(BaseModel):
    """Background primer payload."""

    model_config = ConfigDict(populate_by_name=True)

    doc_id: str = Field(alias="docId")
    sections: List[SectionOut]


class ResourceOut(BaseModel):
    title: str
    summary: str = ""
    link: str = ""
    tags: str = ""


class ProtocolOut(BaseModel):
    title: str
    updated: Union[datetime, str] = ""
    summary: str = ""
    image: str
    link: str = "#"


class ProtocolsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sheet_id: Optional[str] = Field(default=None, alias="sheetId")
    protocols: List[ProtocolOut]


class CategoryOut(BaseModel):
    id: str
    title: str
    description: str = ""
    accent: str = ""
    resources: List[ResourceOut] = Field(default_factory=list)


class CommunicationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sheet_id: Optional[str] = Field(default=None, alias="sheetId")
    categories: List[CategoryOut]


class ErrorResponse(BaseModel):
    """Error payload returned by content endpoints."""

    error: str
    detail: Optional[str] = None
    error_code: Optional[str] = None
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
