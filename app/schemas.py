"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class DeviceStatus(BaseModel):
    """Last report time per device plus the most recent raw requests."""

    model_config = ConfigDict(populate_by_name=True)

    last_seen: Dict[str, Dict[str, int]] = Field(
        default_factory=dict,
        alias="lastSeen",
        description="Epoch milliseconds of the last reading, keyed by sensor then model type.",
    )
    recent_requests: List[str] = Field(
        default_factory=list,
        alias="last10Reqs",
        description="Raw request paths, oldest first.",
    )


class UploadResponse(BaseModel):
    """Reply the hub expects after every upload."""

    timezone: str = Field(..., description="Server UTC offset in hours, e.g. -05.00.")
