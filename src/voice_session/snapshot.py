"""Session snapshot models.

Defines the Pydantic models handed to presentation listeners. Snapshots are
plain data and serialize to JSON for out-of-process front-ends.
"""

from typing import Literal

from pydantic import BaseModel, Field


class ErrorPayload(BaseModel):
    """Fatal error as seen by the presentation layer."""

    kind: Literal["auth", "timeout", "other"] = Field(..., description="Fault classification")
    message: str = Field(..., description="Human-readable error message")


class SessionSnapshot(BaseModel):
    """Controller state at a point in time."""

    type: Literal["session_state"] = "session_state"
    app_state: Literal["idle", "ready", "connecting", "connected"] = Field(
        ..., description="Reduced application state"
    )
    transport_state: str = Field(..., description="Raw transport state last observed")
    view: Literal["error", "session", "configure"] = Field(
        ..., description="View the presentation layer should render"
    )
    start_enabled: bool = Field(default=False, description="Whether the start action is enabled")
    status_text: str | None = Field(default=None, description="Start control label")
    start_muted: bool = Field(default=False, description="Start-muted session option")
    error: ErrorPayload | None = Field(default=None, description="Fatal error, if any")
