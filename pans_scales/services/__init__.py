"""Business logic services."""

from pans_scales.services.scoring import SCORING_VERSIONS, ScoringService
from pans_scales.services.submissions import (
    ResultStore,
    ResultStoreError,
    SqlResultStore,
    SubmissionOutcome,
    SubmissionService,
)
from pans_scales.services.summaries import ResultSummary, ResultSummaryService

__all__ = [
    "SCORING_VERSIONS",
    "ScoringService",
    "ResultStore",
    "ResultStoreError",
    "SqlResultStore",
    "SubmissionOutcome",
    "SubmissionService",
    "ResultSummary",
    "ResultSummaryService",
]
