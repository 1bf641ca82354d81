"""
schemas.py

Pydantic schemas for OTT releases and the paged releases response.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Release(BaseModel):
    """One generated OTT title. release_date is kept verbatim, even when malformed."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str = Field(..., min_length=1)
    platform: str = ""
    genre: str = ""
    release_date: Optional[str] = None


class ReleasePage(BaseModel):
    timeframe: str
    total: int
    count: int
    offset: int
    limit: int
    order: str
    releases: List[Release]
