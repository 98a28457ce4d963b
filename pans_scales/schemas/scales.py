"""Pydantic schemas for scale scoring operations."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from pans_scales.models.scale_result import InstrumentKind


class ScoreRequest(BaseModel):
    """Schema for scoring a completed questionnaire."""

    answers: dict[str, Any] = Field(..., description="Questionnaire answers as JSON")


class SubmissionCreate(ScoreRequest):
    """Schema for scoring and saving a completed questionnaire."""

    session_id: str | None = Field(
        None,
        max_length=100,
        description="Anonymous client session identifier",
    )


class ScoreResponse(BaseModel):
    """Schema for a computed score."""

    instrument: InstrumentKind
    score_version: str
    scores: dict[str, Any]


class SubmissionResponse(ScoreResponse):
    """Schema for a computed score and the outcome of saving it."""

    result_id: str | None = None
    saved: bool
    save_error: str | None = None


class ScaleResultRead(BaseModel):
    """Schema for reading a stored scale result."""

    id: str
    instrument: InstrumentKind
    score_version: str
    session_id: str | None = None
    form_data: dict[str, Any]
    scores: dict[str, Any]
    calculated_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class BandInfo(BaseModel):
    """A severity or burden band of an instrument."""

    low: int
    high: int
    label: str
    interpretation: str


class InstrumentInfo(BaseModel):
    """Metadata describing a supported instrument."""

    instrument: InstrumentKind
    name: str
    score_version: str
    item_count: int
    max_score: int | None = None
    bands: list[BandInfo] = Field(default_factory=list)


class SummaryResponse(BaseModel):
    """Schema for a summary of stored results of one instrument."""

    instrument: InstrumentKind
    skipped: int = Field(0, description="Stored results whose answers could not be re-scored")
    summary: dict[str, Any]
