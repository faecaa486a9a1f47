"""Schemas for the /api/track endpoint."""

from pydantic import BaseModel, field_validator

MAX_PROPERTIES = 20
MAX_PROPERTY_KEY_LENGTH = 64
MAX_PROPERTY_VALUE_LENGTH = 512

PropertyValue = str | int | float | bool | None

# Column widths; longer strings are clipped, never rejected.
FIELD_LIMITS = {
    "domain": 255,
    "path": 2048,
    "referrer": 2048,
    "site_id": 36,
    "title": 512,
    "event": 128,
}


def clip(value, limit: int):
    """Truncate strings to ``limit`` characters; anything else passes through."""
    if isinstance(value, str) and len(value) > limit:
        return value[:limit]
    return value


class TrackPayload(BaseModel):
    """Event sent by a tracking client.

    ``domain`` and ``path`` are required in practice but declared optional
    here so the route can tell "missing" apart from "malformed".
    """

    domain: str | None = None
    path: str | None = None
    referrer: str | None = None
    site_id: str | None = None
    title: str | None = None
    event: str | None = None
    properties: dict[str, PropertyValue] | None = None

    model_config = {"extra": "ignore"}

    @field_validator(*FIELD_LIMITS, mode="before")
    @classmethod
    def _clip_to_column(cls, value, info):
        return clip(value, FIELD_LIMITS[info.field_name])

    @field_validator("properties")
    @classmethod
    def _bound_properties(cls, value: dict[str, PropertyValue] | None):
        if value is None:
            return None
        if len(value) > MAX_PROPERTIES:
            raise ValueError(f"at most {MAX_PROPERTIES} properties are allowed")
        for key, item in value.items():
            if not key or len(key) > MAX_PROPERTY_KEY_LENGTH:
                raise ValueError(
                    f"property keys must be 1-{MAX_PROPERTY_KEY_LENGTH} characters"
                )
            if isinstance(item, str) and len(item) > MAX_PROPERTY_VALUE_LENGTH:
                raise ValueError(
                    f"property values must be at most {MAX_PROPERTY_VALUE_LENGTH} characters"
                )
        return value or None

    def has_location(self) -> bool:
        """Return True when both domain and path are present and non-empty."""
        return bool(self.domain) and bool(self.path)


class TrackResponse(BaseModel):
    """Acknowledgement returned once the write has been scheduled."""

    status: str = "ok"
