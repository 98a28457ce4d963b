"""Pydantic schemas for request/response validation."""

from pans_scales.schemas.scales import (
    BandInfo,
    InstrumentInfo,
    ScaleResultRead,
    ScoreRequest,
    ScoreResponse,
    SubmissionCreate,
    SubmissionResponse,
)

__all__ = [
    "BandInfo",
    "InstrumentInfo",
    "ScaleResultRead",
    "ScoreRequest",
    "ScoreResponse",
    "SubmissionCreate",
    "SubmissionResponse",
]
