"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field

ConnectionStatus = Literal["connected", "disconnected"]


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: ConnectionStatus | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )
    rate_limiter: ConnectionStatus | None = Field(
        default=None,
        description="Whether the login rate-limit counter storage is reachable",
    )
