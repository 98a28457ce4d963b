"""PANS 31-Item Symptom Rating Scale scoring module.

Murphy & Bernstein (2024), validated in Bernstein et al., J Child Adolesc
Psychopharmacol 2024 (PMID 38536004). License: CC BY-NC-SA 4.0.

Each item is scored 0-4:
- 0 = None
- 1 = Mild
- 2 = Moderate
- 3 = Severe
- 4 = Extreme

Six categories: OCD & eating (6 items), anxiety & mood (6), behavioral (7),
cognitive & academic (3), somatic (5), psychosis & tics (4).

Total score ranges 0-124.

Severity bands (10/25/50/75% of the maximum):
- 0-12: Minimal
- 13-31: Mild
- 32-62: Moderate
- 63-93: Severe
- 94-124: Extreme

Any item rated 3 or 4 is reported as a high-severity item, whatever the total.
High-severity items are listed most severe first; equal ratings keep
questionnaire order.

summarize_pans31 reports average scores, the band distribution and the items
most often rated high-severity across many questionnaires.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pans_scales.scoring.bands import BandTable, SeverityBand
from pans_scales.scoring.ratings import SeverityRating, check_items
from pans_scales.scoring.summary import distribution, mean, percentage

INSTRUMENT = "PANS-31"

CATEGORIES: dict[str, tuple[str, ...]] = {
    "ocd_eating": (
        "obsessions",
        "compulsions",
        "hoarding",
        "food_refusal",
        "overeating_urge",
        "fluid_refusal",
    ),
    "anxiety_mood": (
        "separation_anxiety",
        "other_anxiety",
        "mood_swings",
        "emotional_lability",
        "suicidal_ideation",
        "depression",
    ),
    "behavioral": (
        "irritability",
        "oppositional_behaviors",
        "aggressive_behaviors",
        "hyperactivity_impulsivity",
        "attention_problems",
        "baby_talk",
        "developmental_regression",
    ),
    "cognitive_academic": (
        "school_performance",
        "handwriting_problems",
        "cognitive_symptoms",
    ),
    "somatic": (
        "pain",
        "sleep_disturbance",
        "enuresis",
        "urinary_frequency",
        "sensory_amplification",
    ),
    "psychosis_tics": (
        "hallucinations",
        "delusions",
        "motor_tics",
        "vocal_tics",
    ),
}

ITEMS: tuple[str, ...] = tuple(item for items in CATEGORIES.values() for item in items)

ITEM_COUNT = 31
MAX_ITEM_SCORE = SeverityRating.MAX
CATEGORY_MAX_SCORES = {
    category: len(items) * MAX_ITEM_SCORE for category, items in CATEGORIES.items()
}
MAX_SCORE = len(ITEMS) * MAX_ITEM_SCORE

HIGH_SEVERITY_THRESHOLD = 3
COMMON_HIGH_SEVERITY_LIMIT = 10

SEVERITY_BANDS = BandTable(
    bands=(
        SeverityBand(0, 12, "minimal", "Minimal or no symptoms"),
        SeverityBand(13, 31, "mild", "Mild symptoms with minimal impact on functioning"),
        SeverityBand(32, 62, "moderate", "Moderate symptoms affecting daily functioning"),
        SeverityBand(63, 93, "severe", "Severe symptoms with significant impact on functioning"),
        SeverityBand(94, 124, "extreme", "Extreme symptoms severely affecting all areas of life"),
    )
)


@dataclass(frozen=True)
class Pans31FormData:
    """Completed PANS-31 answers, item key -> rating."""

    ratings: dict[str, SeverityRating]

    @classmethod
    def from_answers(cls, answers: Mapping[str, Any]) -> "Pans31FormData":
        """Build form data from {item_key: rating}.

        Raises:
            IncompleteInputError: If any of the 31 items is missing.
            RatingRangeError: If any rating is outside 0-4.
        """
        check_items(INSTRUMENT, answers, ITEMS)
        return cls(ratings={key: SeverityRating(answers[key], key) for key in ITEMS})


@dataclass(frozen=True)
class HighSeverityItem:
    """An item rated at or above the high-severity threshold."""

    key: str
    category: str
    rating: int


@dataclass(frozen=True)
class Pans31Result:
    """Result of PANS-31 scoring."""

    total: int
    categories: dict[str, int]
    severity: str
    interpretation: str
    high_severity_items: tuple[HighSeverityItem, ...]
    max_score: int = MAX_SCORE

    @property
    def has_high_severity_items(self) -> bool:
        return bool(self.high_severity_items)


def get_severity_band(total: int) -> SeverityBand:
    """Determine severity band from total score."""
    return SEVERITY_BANDS.classify(total)


def get_high_severity_items(
    form_data: Pans31FormData,
    threshold: int = HIGH_SEVERITY_THRESHOLD,
) -> tuple[HighSeverityItem, ...]:
    """Items rated at or above threshold, highest rating first.

    The sort is stable, so equal ratings stay in questionnaire order.
    """
    flagged = (
        HighSeverityItem(key=item, category=category, rating=int(form_data.ratings[item]))
        for category, items in CATEGORIES.items()
        for item in items
        if form_data.ratings[item] >= threshold
    )
    return tuple(sorted(flagged, key=lambda i: i.rating, reverse=True))


def score_pans31(form_data: Pans31FormData) -> Pans31Result:
    """Score PANS-31 questionnaire responses.

    Args:
        form_data: Completed, validated answers

    Returns:
        Pans31Result with total, category scores, severity band and
        high-severity items.
    """
    categories = {
        category: sum(int(form_data.ratings[item]) for item in items)
        for category, items in CATEGORIES.items()
    }
    total = sum(categories.values())
    band = get_severity_band(total)

    return Pans31Result(
        total=total,
        categories=categories,
        severity=band.label,
        interpretation=band.interpretation,
        high_severity_items=get_high_severity_items(form_data),
    )


@dataclass(frozen=True)
class CommonHighSeverityItem:
    """An item and how often it was rated high-severity."""

    key: str
    category: str
    count: int
    percentage: int


@dataclass(frozen=True)
class Pans31Summary:
    """Scores and high-severity items across many questionnaires."""

    count: int
    average_total: float
    average_categories: dict[str, float]
    severity_counts: dict[str, int]
    common_high_severity_items: tuple[CommonHighSeverityItem, ...]


def summarize_pans31(
    forms: Sequence[Pans31FormData],
    limit: int = COMMON_HIGH_SEVERITY_LIMIT,
) -> Pans31Summary:
    """Summarize many questionnaires.

    Items rated high-severity are ranked by how many questionnaires flag
    them, most frequent first; equal counts keep questionnaire order. At
    most `limit` items are listed.
    """
    results = [score_pans31(form) for form in forms]

    flagged: dict[str, int] = {}
    for result in results:
        for item in result.high_severity_items:
            flagged[item.key] = flagged.get(item.key, 0) + 1

    item_categories = {
        item: category for category, items in CATEGORIES.items() for item in items
    }
    common = sorted(
        (item for item in ITEMS if item in flagged),
        key=lambda item: flagged[item],
        reverse=True,
    )

    return Pans31Summary(
        count=len(results),
        average_total=mean([result.total for result in results]),
        average_categories={
            category: mean([result.categories[category] for result in results])
            for category in CATEGORIES
        },
        severity_counts=distribution(
            SEVERITY_BANDS.labels, [result.severity for result in results]
        ),
        common_high_severity_items=tuple(
            CommonHighSeverityItem(
                key=item,
                category=item_categories[item],
                count=flagged[item],
                percentage=percentage(flagged[item], len(results)),
            )
            for item in common[:limit]
        ),
    )
