"""Service-level response schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for the /health endpoint."""

    ok: bool = Field(description="Service is up")
    version: str = Field(description="Service version")
