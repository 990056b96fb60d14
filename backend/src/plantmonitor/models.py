from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

HEALTHY = "healthy"
WARNING = "warning"
CRITICAL = "critical"
STATUSES = (HEALTHY, WARNING, CRITICAL)

SORT_KEYS = ("name", "humidity", "status")
DEFAULT_SORT = "name"

VIEW_MODES = ("card", "list")

# Projection.empty values
NO_READINGS = "no-readings"
NO_MATCH = "no-match"


@dataclass(frozen=True)
class Reading:
    id: str
    name: str
    location: str
    humidity: float
    last_reading: datetime
    battery_level: int
    temperature: float


@dataclass
class ViewState:
    sort_by: str = DEFAULT_SORT
    status_filter: Optional[str] = None
    view_mode: str = "card"

    def as_dict(self) -> dict:
        return {
            "sort_by": self.sort_by,
            "status_filter": self.status_filter,
            "view_mode": self.view_mode,
        }


@dataclass
class Projection:
    readings: list[Reading] = field(default_factory=list)
    # None when there is something to show, else NO_READINGS or NO_MATCH
    empty: Optional[str] = None


# ---------------------------
# Request payloads
# ---------------------------
class SortPayload(BaseModel):
    sort_by: str = Field(..., description="name, humidity or status")
