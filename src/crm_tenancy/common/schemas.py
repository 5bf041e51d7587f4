"""Shared Pydantic schemas for crm-tenancy."""

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "crm-tenancy"
    database: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body of every gate rejection and service error."""
    error: str
    message: Optional[str] = None
