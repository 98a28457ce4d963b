"""Caregiver Burden Inventory (CBI) scoring module.

Novak & Guest (1989), validated for PANS caregivers by Farmer et al. (2018).

Each item is scored 0-4:
- 0 = Never
- 1 = Rarely
- 2 = Sometimes
- 3 = Quite frequently
- 4 = Nearly always

24 items in 5 subscales: time dependency (5), developmental (5),
physical health (4), emotional health (5), social relationships (5).

Total score ranges 0-96. A total above 36 suggests the caregiver may
benefit from respite support.

Burden bands:
- 0-20: Low
- 21-36: Moderate
- 37-56: High
- 57-96: Severe

The physical subscale has only 4 items; physical_adjusted scales it by 1.25
so it is comparable to the 20-point subscales.

summarize_cbi reports average scores, the burden distribution and how many
caregivers cross the respite cutoff across many inventories.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pans_scales.scoring.bands import BandTable, SeverityBand
from pans_scales.scoring.norms import NormComparison, NormativeReference, compare_to_norms
from pans_scales.scoring.ratings import FrequencyRating, check_items
from pans_scales.scoring.summary import distribution, mean, percentage

INSTRUMENT = "CBI"

SUBSCALES: dict[str, tuple[str, ...]] = {
    "time_dependency": (
        "help_daily_tasks",
        "dependent",
        "watch_constantly",
        "help_basic_functions",
        "no_break",
    ),
    "developmental": (
        "missing_out_on_life",
        "wish_to_escape",
        "social_life_suffered",
        "emotionally_drained",
        "expected_different",
    ),
    "physical": (
        "not_enough_sleep",
        "health_suffered",
        "caregiving_made_sick",
        "physically_tired",
    ),
    "emotional": (
        "feel_embarrassed",
        "ashamed_of_child",
        "resent_child",
        "uncomfortable_friends_over",
        "angry_about_interactions",
    ),
    "social": (
        "not_get_along_family",
        "not_appreciated",
        "marriage_problems",
        "not_get_along_others",
        "resentful_relatives",
    ),
}

MAX_ITEM_SCORE = FrequencyRating.MAX
SUBSCALE_MAX_SCORES = {
    subscale: len(items) * MAX_ITEM_SCORE for subscale, items in SUBSCALES.items()
}
MAX_SCORE = sum(SUBSCALE_MAX_SCORES.values())

RESPITE_CUTOFF = 36

# physical_adjusted = physical * 5/4, rounded half up
PHYSICAL_ADJUSTMENT_NUMERATOR = 5
PHYSICAL_ADJUSTMENT_DENOMINATOR = 4

BURDEN_BANDS = BandTable(
    bands=(
        SeverityBand(0, 20, "low", "Low caregiver burden"),
        SeverityBand(21, 36, "moderate", "Moderate caregiver burden"),
        SeverityBand(37, 56, "high", "High caregiver burden; respite support is recommended"),
        SeverityBand(57, MAX_SCORE, "severe", "Severe caregiver burden; respite support is strongly recommended"),
    )
)

PANS_POPULATION = "PANS caregivers (Farmer et al., 2018)"

PANS_REFERENCE = NormativeReference(population=PANS_POPULATION, mean=36.7, sd=19.8)

SUBSCALE_REFERENCES = {
    "time_dependency": NormativeReference(population=PANS_POPULATION, mean=10.1, sd=4.6),
    "developmental": NormativeReference(population=PANS_POPULATION, mean=9.7, sd=6.1),
    "physical": NormativeReference(population=PANS_POPULATION, mean=6.6, sd=4.5),
    "emotional": NormativeReference(population=PANS_POPULATION, mean=5.1, sd=4.4),
    "social": NormativeReference(population=PANS_POPULATION, mean=5.1, sd=5.1),
}


@dataclass(frozen=True)
class CbiFormData:
    """Completed CBI answers, subscale -> item -> rating."""

    ratings: dict[str, dict[str, FrequencyRating]]

    @classmethod
    def from_answers(cls, answers: Mapping[str, Any]) -> "CbiFormData":
        """Build form data from {subscale: {item_key: rating}}.

        Raises:
            IncompleteInputError: If a subscale or item is missing.
            UnexpectedItemError: If a subscale or item is unknown.
            RatingRangeError: If any rating is outside 0-4.
        """
        check_items(INSTRUMENT, answers, SUBSCALES)

        ratings: dict[str, dict[str, FrequencyRating]] = {}
        for subscale, items in SUBSCALES.items():
            subscale_answers = answers[subscale]
            check_items(f"{INSTRUMENT} {subscale}", subscale_answers, items)
            ratings[subscale] = {
                item: FrequencyRating(subscale_answers[item], f"{subscale}.{item}")
                for item in items
            }
        return cls(ratings=ratings)


@dataclass(frozen=True)
class CbiResult:
    """Result of CBI scoring."""

    total: int
    subscales: dict[str, int]
    physical_adjusted: int
    burden_level: str
    interpretation: str
    needs_respite: bool
    norm_comparison: NormComparison
    subscale_comparisons: dict[str, NormComparison]
    max_score: int = MAX_SCORE


def adjust_physical(physical: int) -> int:
    """Scale the 4-item physical subscale to the 0-20 range."""
    return (
        physical * PHYSICAL_ADJUSTMENT_NUMERATOR + PHYSICAL_ADJUSTMENT_DENOMINATOR // 2
    ) // PHYSICAL_ADJUSTMENT_DENOMINATOR


def get_burden_band(total: int) -> SeverityBand:
    """Determine burden band from total score."""
    return BURDEN_BANDS.classify(total)


def needs_respite(total: int) -> bool:
    """True when the total exceeds the respite cutoff."""
    return total > RESPITE_CUTOFF


def score_cbi(form_data: CbiFormData) -> CbiResult:
    """Score Caregiver Burden Inventory responses.

    Args:
        form_data: Completed, validated answers

    Returns:
        CbiResult with subscale scores, burden level, respite flag and a
        comparison against PANS caregiver norms.
    """
    subscales = {
        subscale: sum(int(rating) for rating in items.values())
        for subscale, items in form_data.ratings.items()
    }
    total = sum(subscales.values())
    band = get_burden_band(total)

    return CbiResult(
        total=total,
        subscales=subscales,
        physical_adjusted=adjust_physical(subscales["physical"]),
        burden_level=band.label,
        interpretation=band.interpretation,
        needs_respite=needs_respite(total),
        norm_comparison=compare_to_norms(total, PANS_REFERENCE),
        subscale_comparisons={
            subscale: compare_to_norms(score, SUBSCALE_REFERENCES[subscale])
            for subscale, score in subscales.items()
        },
    )


@dataclass(frozen=True)
class CbiSummary:
    """Burden across many inventories."""

    count: int
    average_total: float
    average_subscales: dict[str, float]
    average_physical_adjusted: float
    burden_counts: dict[str, int]
    needs_respite_count: int
    needs_respite_percent: int


def summarize_cbi(forms: Sequence[CbiFormData]) -> CbiSummary:
    """Summarize many inventories."""
    results = [score_cbi(form) for form in forms]
    respite = sum(1 for result in results if result.needs_respite)

    return CbiSummary(
        count=len(results),
        average_total=mean([result.total for result in results]),
        average_subscales={
            subscale: mean([result.subscales[subscale] for result in results])
            for subscale in SUBSCALES
        },
        average_physical_adjusted=mean([result.physical_adjusted for result in results]),
        burden_counts=distribution(
            BURDEN_BANDS.labels, [result.burden_level for result in results]
        ),
        needs_respite_count=respite,
        needs_respite_percent=percentage(respite, len(results)),
    )
