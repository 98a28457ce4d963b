"""Clinical scale scoring service.

Dispatches completed questionnaires to the instrument scorers:
- PANS/PANDAS time-windowed symptom scale
- Kovacevic diagnostic criteria
- PANS 31-item symptom rating scale
- PTEC treatment and flare evaluation checklist
- Caregiver Burden Inventory

All scoring is deterministic. Incomplete or out-of-range answers are
rejected with a ScoringError, never defaulted.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any

from pans_scales.models.scale_result import InstrumentKind
from pans_scales.scoring import cbi, kovacevic, pandas_scale, pans31, ptec
from pans_scales.scoring.bands import BandTable

# Scoring algorithm versions
SCORING_VERSIONS = {
    InstrumentKind.PANDAS: "1.0.0",
    InstrumentKind.KOVACEVIC: "1.0.0",
    InstrumentKind.PANS31: "1.0.0",
    InstrumentKind.PTEC: "1.0.0",
    InstrumentKind.CBI: "1.0.0",
}


@dataclass(frozen=True)
class InstrumentScorer:
    """Binds an instrument to its answer parser and scoring function."""

    name: str
    parse: Callable[[Mapping[str, Any]], Any]
    score: Callable[[Any], Any]
    summarize: Callable[[Sequence[Any]], Any]
    item_count: int
    max_score: int | None = None
    bands: BandTable | None = None

    def calculate(self, answers: Mapping[str, Any]) -> Any:
        return self.score(self.parse(answers))


def to_jsonable(value: Any) -> Any:
    """Convert a scoring result into JSON-compatible primitives.

    Dataclasses become dicts of their fields, enums their values and rating
    subclasses plain ints.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, Mapping):
        return {str(k.value if isinstance(k, Enum) else k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class ScoringService:
    """Service for calculating instrument scores."""

    SCORERS = {
        InstrumentKind.PANDAS: InstrumentScorer(
            name="PANS/PANDAS Symptom Scale",
            parse=pandas_scale.PansFormData.from_answers,
            score=pandas_scale.score_pandas_scale,
            summarize=pandas_scale.summarize_pandas_scale,
            item_count=len(pandas_scale.ALL_ITEMS),
            max_score=pandas_scale.MAX_TOTAL,
        ),
        InstrumentKind.KOVACEVIC: InstrumentScorer(
            name="Kovacevic Diagnostic Criteria",
            parse=kovacevic.KovacevicFormData.from_answers,
            score=kovacevic.evaluate_kovacevic,
            summarize=kovacevic.summarize_kovacevic,
            item_count=len(kovacevic.MANDATORY_CRITERIA) + kovacevic.SEVERITY_CRITERIA_COUNT,
            max_score=kovacevic.CONFIDENCE_CAP,
        ),
        InstrumentKind.PANS31: InstrumentScorer(
            name="PANS 31-Item Symptom Rating Scale",
            parse=pans31.Pans31FormData.from_answers,
            score=pans31.score_pans31,
            summarize=pans31.summarize_pans31,
            item_count=pans31.ITEM_COUNT,
            max_score=pans31.MAX_SCORE,
            bands=pans31.SEVERITY_BANDS,
        ),
        InstrumentKind.PTEC: InstrumentScorer(
            name="PANS/PANDAS Treatment and Flare Evaluation Checklist",
            parse=ptec.PtecFormData.from_answers,
            score=ptec.score_ptec,
            summarize=ptec.summarize_ptec,
            item_count=ptec.ITEM_COUNT,
            max_score=ptec.MAX_SCORE,
            bands=ptec.SEVERITY_BANDS,
        ),
        InstrumentKind.CBI: InstrumentScorer(
            name="Caregiver Burden Inventory",
            parse=cbi.CbiFormData.from_answers,
            score=cbi.score_cbi,
            summarize=cbi.summarize_cbi,
            item_count=sum(len(items) for items in cbi.SUBSCALES.values()),
            max_score=cbi.MAX_SCORE,
            bands=cbi.BURDEN_BANDS,
        ),
    }

    @classmethod
    def get_scorer(cls, kind: InstrumentKind) -> InstrumentScorer:
        scorer = cls.SCORERS.get(kind)
        if not scorer:
            raise ValueError(f"Unsupported instrument: {kind}")
        return scorer

    @classmethod
    def calculate(cls, kind: InstrumentKind, answers: Mapping[str, Any]) -> Any:
        """Score answers with the instrument's scorer.

        Args:
            kind: Instrument to score
            answers: Complete questionnaire answers

        Returns:
            The instrument's result dataclass

        Raises:
            ScoringError: If answers are incomplete or invalid
        """
        return cls.get_scorer(kind).calculate(answers)

    @classmethod
    def calculate_payload(cls, kind: InstrumentKind, answers: Mapping[str, Any]) -> dict[str, Any]:
        """Score answers and return the result as a JSON-ready dict."""
        return to_jsonable(cls.calculate(kind, answers))

    @classmethod
    def get_version(cls, kind: InstrumentKind) -> str:
        return SCORING_VERSIONS[kind]

    @classmethod
    def instruments(cls) -> list[dict[str, Any]]:
        """Describe every supported instrument."""
        return [
            {
                "instrument": kind.value,
                "name": scorer.name,
                "score_version": SCORING_VERSIONS[kind],
                "item_count": scorer.item_count,
                "max_score": scorer.max_score,
                "bands": [to_jsonable(band) for band in scorer.bands.bands] if scorer.bands else [],
            }
            for kind, scorer in cls.SCORERS.items()
        ]
