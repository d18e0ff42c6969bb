# src/forge_api/schemas/visitor.py
"""Visitor presence and analytics schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class Heartbeat(BaseModel):
    """Schema for a visitor heartbeat."""

    session_id: str = Field(..., min_length=1, max_length=128)


class VisitorStats(BaseModel):
    total: int
    authenticated: int
    guests: int


class PeakStats(BaseModel):
    count: int
    date: datetime | None


class VisitorOverview(BaseModel):
    current: VisitorStats
    peak: PeakStats


class AnalyticsStats(BaseModel):
    total_events: int
    unique_users: int
    authenticated_events: int
    anonymous_events: int
    unique_countries: int


class CountItem(BaseModel):
    name: str
    count: int


class CountryCount(BaseModel):
    country_code: str
    country_name: str | None
    count: int


class AnalyticsSummary(BaseModel):
    stats: AnalyticsStats
    top_events: list[CountItem]
    top_browsers: list[CountItem]
    top_platforms: list[CountItem]
    top_countries: list[CountryCount]
