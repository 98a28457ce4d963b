"""PANS/PANDAS symptom severity scale scoring module.

Every item is rated 0-5 in three observation windows:
- before: before illness onset
- after: after onset (worst period)
- current: the most recent week

Each window is scored independently with identical formulas:
- Primary (OCD) score: highest OCD item rating x 5, range 0-25
- Associated score: highest rating per neuropsychiatric domain,
  top 5 domains summed, range 0-25
- Functional score: functional impairment rating x 10, range 0-50
- Total: sum of the three, range 0-100

Windows are never averaged or compared within one result. summarize_pandas_scale
averages each window across many results, still window by window.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pans_scales.scoring.domains import group_domain_values, select_top_domains
from pans_scales.scoring.ratings import (
    SymptomItem,
    SymptomRating,
    TimeWindow,
    TimeWindowedRating,
    check_items,
)
from pans_scales.scoring.summary import mean

INSTRUMENT = "PANS/PANDAS scale"

PRIMARY_ITEMS = (
    "ocd_contamination",
    "ocd_harm",
    "ocd_sex_religion",
    "ocd_symmetry",
    "ocd_hoarding",
    "ocd_eating",
    "ocd_misc",
)

DOMAINS = (
    "anxiety",
    "moodiness",
    "irritability",
    "cognitive",
    "regression",
    "sensory",
    "hallucinations",
    "motor",
    "urinary",
    "sleep",
    "pupil",
)

# Associated item -> neuropsychiatric domain
ASSOCIATED_ITEMS = {
    "assoc_separation": "anxiety",
    "assoc_general_anxiety": "anxiety",
    "assoc_phobias": "anxiety",
    "assoc_panic": "anxiety",
    "assoc_mood_changes": "moodiness",
    "assoc_depression": "moodiness",
    "assoc_irritability": "irritability",
    "assoc_withdrawal1": "regression",
    "assoc_withdrawal2": "regression",
    "assoc_school_function1": "cognitive",
    "assoc_school_function2": "cognitive",
    "assoc_school_function3": "cognitive",
    "assoc_sensory": "sensory",
    "assoc_hallucinations": "hallucinations",
    "assoc_motor1": "motor",
    "assoc_motor2": "motor",
    "assoc_motor3": "motor",
    "assoc_motor4": "motor",
    "assoc_motor5": "motor",
    "assoc_urinary": "urinary",
    "assoc_sleep2": "sleep",
    "assoc_sleep1": "sleep",
    "assoc_pupil": "pupil",
}

FUNCTIONAL_ITEM = "functional_impairment"

PRIMARY_MULTIPLIER = 5
FUNCTIONAL_MULTIPLIER = 10
TOP_DOMAIN_COUNT = 5

MAX_PRIMARY_SCORE = SymptomRating.MAX * PRIMARY_MULTIPLIER
MAX_ASSOCIATED_SCORE = SymptomRating.MAX * TOP_DOMAIN_COUNT
MAX_FUNCTIONAL_SCORE = SymptomRating.MAX * FUNCTIONAL_MULTIPLIER
MAX_TOTAL = MAX_PRIMARY_SCORE + MAX_ASSOCIATED_SCORE + MAX_FUNCTIONAL_SCORE

ALL_ITEMS = PRIMARY_ITEMS + tuple(ASSOCIATED_ITEMS) + (FUNCTIONAL_ITEM,)


@dataclass(frozen=True)
class PansFormData:
    """Completed PANS/PANDAS scale answers."""

    primary: tuple[SymptomItem, ...]
    associated: tuple[SymptomItem, ...]
    functional: SymptomItem

    @classmethod
    def from_answers(cls, answers: Mapping[str, Any]) -> "PansFormData":
        """Build form data from {item_key: {"before": r, "after": r, "current": r}}.

        Raises:
            IncompleteInputError: If any item is missing.
            RatingRangeError: If any rating is outside 0-5.
        """
        check_items(INSTRUMENT, answers, ALL_ITEMS)

        primary = tuple(
            SymptomItem(key=key, rating=TimeWindowedRating.parse(answers[key], key))
            for key in PRIMARY_ITEMS
        )
        associated = tuple(
            SymptomItem(
                key=key,
                rating=TimeWindowedRating.parse(answers[key], key),
                domain=domain,
            )
            for key, domain in ASSOCIATED_ITEMS.items()
        )
        functional = SymptomItem(
            key=FUNCTIONAL_ITEM,
            rating=TimeWindowedRating.parse(answers[FUNCTIONAL_ITEM], FUNCTIONAL_ITEM),
        )
        return cls(primary=primary, associated=associated, functional=functional)


@dataclass(frozen=True)
class WindowScores:
    """Scores for a single observation window."""

    primary: int
    associated: int
    functional: int
    total: int
    domain_ratings: dict[str, int]

    @property
    def symptoms(self) -> int:
        """Combined symptom score (primary + associated), range 0-50."""
        return self.primary + self.associated


@dataclass(frozen=True)
class PansScaleResult:
    """Result of PANS/PANDAS scale scoring."""

    before: WindowScores
    after: WindowScores
    current: WindowScores
    max_total: int = MAX_TOTAL

    def for_window(self, window: TimeWindow) -> WindowScores:
        return getattr(self, window.value)


def score_window(form_data: PansFormData, window: TimeWindow) -> WindowScores:
    """Score one observation window."""
    primary_max = max(
        (item.rating.for_window(window) for item in form_data.primary),
        default=0,
    )
    primary = primary_max * PRIMARY_MULTIPLIER

    domain_ratings = group_domain_values(
        (item.domain or item.key, item.rating.for_window(window))
        for item in form_data.associated
    )
    associated = sum(
        value for _, value in select_top_domains(domain_ratings, TOP_DOMAIN_COUNT)
    )

    functional = form_data.functional.rating.for_window(window) * FUNCTIONAL_MULTIPLIER

    return WindowScores(
        primary=primary,
        associated=associated,
        functional=functional,
        total=primary + associated + functional,
        domain_ratings=domain_ratings,
    )


def score_pandas_scale(form_data: PansFormData) -> PansScaleResult:
    """Score the PANS/PANDAS scale for all three observation windows.

    Args:
        form_data: Completed, validated answers

    Returns:
        PansScaleResult with independent before/after/current scores
    """
    return PansScaleResult(
        before=score_window(form_data, TimeWindow.BEFORE),
        after=score_window(form_data, TimeWindow.AFTER),
        current=score_window(form_data, TimeWindow.CURRENT),
    )


@dataclass(frozen=True)
class WindowAverages:
    """Average scores of one observation window across many results."""

    primary: float
    associated: float
    functional: float
    total: float


@dataclass(frozen=True)
class PansScaleSummary:
    """Per-window averages across many scored results."""

    count: int
    before: WindowAverages
    after: WindowAverages
    current: WindowAverages


def summarize_pandas_scale(forms: Sequence[PansFormData]) -> PansScaleSummary:
    """Average the scores of many completed scales, window by window."""
    results = [score_pandas_scale(form) for form in forms]

    def averages(window: TimeWindow) -> WindowAverages:
        scores = [result.for_window(window) for result in results]
        return WindowAverages(
            primary=mean([s.primary for s in scores]),
            associated=mean([s.associated for s in scores]),
            functional=mean([s.functional for s in scores]),
            total=mean([s.total for s in scores]),
        )

    return PansScaleSummary(
        count=len(results),
        before=averages(TimeWindow.BEFORE),
        after=averages(TimeWindow.AFTER),
        current=averages(TimeWindow.CURRENT),
    )
