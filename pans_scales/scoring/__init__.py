"""Scoring modules for PANS/PANDAS clinical instruments."""

from pans_scales.scoring.errors import (
    ScoringError,
    RatingRangeError,
    IncompleteInputError,
    UnexpectedItemError,
)
from pans_scales.scoring.pandas_scale import (
    score_pandas_scale,
    summarize_pandas_scale,
    PansFormData,
    PansScaleResult,
)
from pans_scales.scoring.kovacevic import (
    evaluate_kovacevic,
    summarize_kovacevic,
    KovacevicFormData,
    DiagnosisResult,
)
from pans_scales.scoring.pans31 import score_pans31, summarize_pans31, Pans31FormData, Pans31Result
from pans_scales.scoring.ptec import (
    score_ptec,
    compare_evaluations,
    summarize_ptec,
    PtecFormData,
    PtecResult,
)
from pans_scales.scoring.cbi import score_cbi, summarize_cbi, CbiFormData, CbiResult

__all__ = [
    "ScoringError",
    "RatingRangeError",
    "IncompleteInputError",
    "UnexpectedItemError",
    "score_pandas_scale",
    "summarize_pandas_scale",
    "PansFormData",
    "PansScaleResult",
    "evaluate_kovacevic",
    "summarize_kovacevic",
    "KovacevicFormData",
    "DiagnosisResult",
    "score_pans31",
    "summarize_pans31",
    "Pans31FormData",
    "Pans31Result",
    "score_ptec",
    "compare_evaluations",
    "summarize_ptec",
    "PtecFormData",
    "PtecResult",
    "score_cbi",
    "summarize_cbi",
    "CbiFormData",
    "CbiResult",
]
