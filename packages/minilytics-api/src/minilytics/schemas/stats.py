"""Schemas for the dashboard read path."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel

TimeRange = Literal["7d", "30d", "90d"]

RANGE_DAYS: dict[str, int] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
}


class DailyViews(BaseModel):
    date: date
    views: int


class TopPath(BaseModel):
    domain: str
    path: str
    count: int


class PageViewResponse(BaseModel):
    """A raw event row as shown in the dashboard's activity table."""

    id: str
    created_at: datetime
    domain: str
    path: str
    referrer: str | None
    site_id: str | None
    title: str | None = None
    event: str | None = None
    properties: dict | None = None

    model_config = {"from_attributes": True}


class StatsResponse(BaseModel):
    """Aggregated dashboard summary for one site or all of the caller's sites."""

    range: TimeRange
    total: int
    today: int
    average_per_day: int
    total_sites: int
    daily: list[DailyViews]
    top_paths: list[TopPath]
    recent: list[PageViewResponse]
