"""
Pydantic models for the appointment monitor.

Covers the OpsGenie alert listing, the booking site's availability payload
and the in-memory state of the monitor loop.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


CLOSED_STATUS = "closed"


class Alert(BaseModel):
    """Single OpsGenie alert as returned by the listing endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Only status drives behaviour; the rest is passed through untyped
    id: Optional[Any] = None
    status: Optional[Any] = None
    message: Optional[Any] = None
    created_at: Optional[Any] = Field(default=None, alias="createdAt")

    @property
    def is_open(self) -> bool:
        return self.status != CLOSED_STATUS


class AlertList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: List[Alert] = Field(default_factory=list)

    def open_alerts(self) -> List[Alert]:
        return [alert for alert in self.data if alert.is_open]


class AvailableSlot(BaseModel):
    """Earliest bookable appointment reported by the booking site."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    first_available_time: datetime = Field(alias="firstAvailableTime")


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: List[AvailableSlot] = Field(min_length=1)

    @property
    def earliest(self) -> AvailableSlot:
        return self.data[0]


class MonitorState(BaseModel):
    """State of monitoring loop, used internally."""

    is_running: bool = False
    last_check_at: Optional[datetime] = None
    last_error: Optional[str] = None
    checks_count: int = 0
    skipped_count: int = 0
    alerts_sent: int = 0


__all__ = [
    "Alert",
    "AlertList",
    "AvailableSlot",
    "AvailabilityResponse",
    "MonitorState",
    "CLOSED_STATUS",
]
