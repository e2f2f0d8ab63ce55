"""Pydantic models for request/response validation."""
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class CandidateRequest(BaseModel):
    """Candidate creation request model."""

    id: str = Field(..., description="Unique candidate identifier")
    name: str = Field(..., description="Candidate display name")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "c1",
                "name": "Alice"
            }
        }


class VoterRequest(BaseModel):
    """Voter registration request model."""

    id: str = Field(..., description="Opaque voter token")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "v1"
            }
        }


class VoteRequest(BaseModel):
    """Vote submission request model."""

    voter_id: str = Field(..., description="Registered voter token")
    candidate_id: str = Field(..., description="Candidate identifier")

    class Config:
        json_schema_extra = {
            "example": {
                "voter_id": "v1",
                "candidate_id": "c1"
            }
        }


class CandidateOut(BaseModel):
    """Candidate record."""

    id: str
    name: str


class OperationResponse(BaseModel):
    """Successful mutation response model."""

    status: Literal["ok"] = "ok"
    message: str = Field(..., description="Response message")
    data: Optional[dict] = Field(default=None, description="Created or updated record")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "ok",
                "message": "Candidate added successfully",
                "data": {"id": "c1", "name": "Alice"}
            }
        }


class TurnoutResponse(BaseModel):
    """Participation summary response model."""

    registered_voters: int
    voters_who_voted: int
    total_votes: int
    phase: Literal["open", "closed"]


class HealthResponse(BaseModel):
    """Health check response model."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Overall health status")
    phase: Literal["open", "closed"] = Field(..., description="Election phase")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp"
    )


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Failure kind code")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional error details")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "already_voted",
                "message": "Voter has already cast a vote",
                "details": {"voter_id": "v1"}
            }
        }
