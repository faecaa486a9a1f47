"""Schemas for site registry endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class SiteCreate(BaseModel):
    """Request body for registering a site."""

    domain: str = Field(default="", max_length=255)

    @field_validator("domain", mode="before")
    @classmethod
    def _normalize_domain(cls, value):
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip().lower()
        return value


class SiteResponse(BaseModel):
    """Public projection of a site row."""

    id: str
    created_at: datetime
    domain: str
    site_id: str

    model_config = {"from_attributes": True}


class SiteListResponse(BaseModel):
    sites: list[SiteResponse]


class SiteCreateResponse(BaseModel):
    site: SiteResponse
