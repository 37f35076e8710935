"""
Pydantic models for BizHub API requests and responses.
This module defines the request and response schemas used by the directory API.
"""

from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    Field,
)

from bizhub.core.schema import ModerationVerdict
from bizhub.tools.page_commands import PageCommand


# ---------------------------------------------------------------------------
# Pydantic request / response schema
# ---------------------------------------------------------------------------
class SessionResponse(BaseModel):
    """Response with session information."""

    session_id: str


class PageContext(BaseModel):
    """What the user's current page offers to the page tools."""

    has_search_field: bool = False
    element_ids: List[str] = Field(default_factory=list)


class MessageRequest(BaseModel):
    """Incoming chat message."""

    message: str = Field(..., min_length=1, description="User message for the assistant")
    session_id: Optional[str] = Field(None, description="Session ID for conversation context")
    page: PageContext = Field(default_factory=PageContext)


class MessageResponse(BaseModel):
    """Chat reply plus the page changes the browser should apply."""

    reply: str
    actions: List[PageCommand] = Field(default_factory=list)
    session_id: str
    ok: bool = True


class ListingRequest(BaseModel):
    """A business listing submitted from the creation form."""

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category_id: str
    category_name: str = Field(..., description="Human-readable category shown to the moderator")
    owner_id: str
    phone: str = ""
    address: str = ""
    email: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[str] = None
    images: List[str] = Field(default_factory=list, max_length=5)
    brochure_url: Optional[str] = None


class ListingResponse(BaseModel):
    """Outcome of a successful submission."""

    verdict: ModerationVerdict
    record: Dict[str, Any]


class UploadBucket(str, Enum):
    """Storage buckets listing files may be uploaded to."""

    IMAGES = "images"
    BROCHURES = "brochures"


class UploadResponse(BaseModel):
    """Where an uploaded file ended up."""

    path: str = Field(..., description="Object path inside the bucket")
    url: str = Field(..., description="Public URL to put in the listing")
