"""
Request bodies for the HTTP API.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class DiscoverRequest(BaseModel):
    """Body for /discover, /discover/stream and /agent. The URL may come under any of three keys."""

    maps_url: Optional[str] = None
    mapsUrl: Optional[str] = None
    url: Optional[str] = None

    @property
    def resolved_url(self) -> Optional[str]:
        value = self.maps_url or self.mapsUrl or self.url
        return value.strip() if value and value.strip() else None


class BusinessRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_id: Optional[str] = Field(default=None, alias="businessId")


class FeedbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_id: str = Field(alias="businessId")
    item_id: str = Field(alias="itemId")
    action: str
    edit_text: Optional[str] = Field(default=None, alias="editText")


class StatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_id: str = Field(alias="businessId")
    item_id: str = Field(alias="itemId")
    status: str


class WorkflowsUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_id: Optional[str] = Field(default=None, alias="businessId")
    workflows: List[Dict[str, Any]] = Field(default_factory=list)
