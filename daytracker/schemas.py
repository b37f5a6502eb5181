"""
Pydantic schemas for the day tracker API.

Day records themselves are opaque JSON and pass through as plain dicts; only
the derived and fixed-shape payloads are modelled here.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class DaySummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    block_count: int = Field(0, alias="blockCount")
    total_minutes: Union[int, float] = Field(0, alias="totalMinutes")
    last_modified: Optional[str] = Field(None, alias="lastModified")


class SuccessResponse(BaseModel):
    success: Literal[True] = True


class ErrorResponse(BaseModel):
    error: str
