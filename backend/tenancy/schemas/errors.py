"""Error response schemas."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error response schema.

    Used for all error responses (4xx, 5xx) across the API. ``error`` names
    the rule that rejected the request.
    """

    error: str = Field(
        ...,
        description="Error type identifier",
        examples=["not_authorized", "slug_conflict", "must_transfer_ownership"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["You must transfer ownership before leaving the organization"],
    )
    details: Optional[dict] = Field(
        None,
        description="Additional error context (field validation errors, etc.)",
        examples=[{"slug": "String should have at least 3 characters"}],
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "error": "slug_conflict",
                    "message": "An organization with this slug already exists",
                },
                {
                    "error": "not_authorized",
                    "message": "Only the organization owner can delete the organization",
                },
                {
                    "error": "validation_error",
                    "message": "String should have at least 3 characters",
                    "details": {"slug": "String should have at least 3 characters"},
                },
            ]
        }
    )
