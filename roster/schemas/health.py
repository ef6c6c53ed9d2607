"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )
    role_catalog: Literal["complete", "incomplete"] | None = Field(
        default=None,
        description="Whether every canonical role has a catalog row",
    )
    missing_roles: list[str] = Field(default_factory=list)
