"""Pydantic schemas for scenario events and results."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Kinds of events a scenario run reports."""

    info = "info"
    success = "success"
    error = "error"
    failure = "failure"


class ScenarioEvent(BaseModel):
    """One reported step of a scenario run."""

    type: EventType
    message: str
    exception: Optional[str] = Field(
        default=None, description="Text of the exception attached to the event."
    )
    data: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ScenarioResult(BaseModel):
    """Outcome of a scenario run or an offline reconciliation."""

    name: str
    success: bool
    message: str
    findings: Dict[str, str] = Field(default_factory=dict)
    expected_count: int = Field(..., ge=0)
    actual_count: int = Field(..., ge=0)
    events: List[ScenarioEvent] = Field(default_factory=list)
