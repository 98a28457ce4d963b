"""PTEC (PANS/PANDAS Treatment and Flare Evaluation Checklist) scoring module.

Based on the Neuroimmune Foundation's PTEC tool. The checklist tracks symptom
load over repeated evaluations and is not diagnostic.

Each item is scored 0-3:
- 0 = No difficulty
- 1 = Mild difficulty
- 2 = Moderate difficulty
- 3 = Severe difficulty

101 items in 10 categories. Category score is the sum of its items; total is
the sum of all categories, range 0-303.

Severity bands:
- 0-30: Minimal
- 31-75: Mild
- 76-150: Moderate
- 151-225: Severe
- 226-303: Extreme

summarize_ptec averages category scores across many evaluations and ranks
categories by their average load relative to the category maximum.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pans_scales.scoring.bands import BandTable, SeverityBand
from pans_scales.scoring.ratings import PtecRating, check_items
from pans_scales.scoring.summary import distribution, mean, percentage

INSTRUMENT = "PTEC"

CATEGORIES: dict[str, tuple[str, ...]] = {
    "behavior_mood": (
        "rages",
        "school_refusal",
        "uncooperative",
        "oppositional",
        "non_compliant",
        "tantrums",
        "shouts_screams",
        "insensitive",
        "inappropriate_laugh_cry",
        "impulsive",
        "avoids_contact",
        "self_harm",
        "irritable",
        "destructive",
        "verbal_aggression",
        "physical_aggression",
        "unhappy_crying",
        "depressed_mood",
        "no_motivation",
        "mood_swings",
    ),
    "ocd": (
        "sexual_thoughts",
        "violent_images",
        "intrusive_thoughts",
        "germ_fear",
        "washing_compulsions",
        "chemical_fear",
        "fear_harm_self",
        "fear_hurting_others",
        "fear_aggressive_behavior",
        "fear_obscenities",
        "perfectionism",
        "checking_rituals",
        "counting_rituals",
        "confessing",
        "reassurance_seeking",
        "obsessive_speech",
        "repetitive_speech",
        "rigid_routines",
        "hoarding_rituals",
        "magical_thoughts",
        "lucky_unlucky",
        "requires_symmetry",
        "arranging_obsessions",
        "order_obsession",
        "need_to_tap",
        "health_concern",
        "requires_participation",
    ),
    "anxiety": (
        "separation_anxiety",
        "irrational_fears",
        "avoids_leaving_home",
        "social_anxiety",
        "general_anxiety",
    ),
    "food_intake": (
        "food_refusal",
        "limited_fluid",
        "picky_eating",
        "negative_body_image",
        "choking_fear",
        "limited_no_reason",
        "contamination_fear",
        "overeating",
    ),
    "tics": (
        "vocal_tics",
        "motor_tics",
    ),
    "cognitive": (
        "memory_issues",
        "brain_fog",
        "stutters",
        "baby_talk",
        "gross_motor_regression",
        "fine_motor_regression",
        "math_regression",
    ),
    "sensory": (
        "sound_sensitive",
        "light_sensitive",
        "smell_sensitive",
        "texture_sensitive",
        "other_sensory",
        "sensory_seeking",
    ),
    "other": (
        "hallucinations",
        "delusions",
        "paranoia",
        "suicidal_ideation",
        "homicidal_ideation",
        "attention_issues",
        "hyperactivity",
        "urinary_frequency",
        "daytime_wetting",
        "lacks_friends",
        "dilated_pupils",
    ),
    "sleep": (
        "nightmares",
        "night_terrors",
        "falling_asleep",
        "staying_asleep",
        "bedwetting",
    ),
    "health": (
        "constipation",
        "diarrhea",
        "acute_infection",
        "fatigued",
        "lethargic",
        "stomach_pain",
        "head_pain",
        "joint_pain",
        "other_pain",
        "dysautonomia",
    ),
}

MAX_ITEM_SCORE = PtecRating.MAX
ITEM_COUNT = sum(len(items) for items in CATEGORIES.values())
CATEGORY_MAX_SCORES = {
    category: len(items) * MAX_ITEM_SCORE for category, items in CATEGORIES.items()
}
MAX_SCORE = ITEM_COUNT * MAX_ITEM_SCORE

SEVERITY_BANDS = BandTable(
    bands=(
        SeverityBand(0, 30, "minimal", "Minimal symptom load"),
        SeverityBand(31, 75, "mild", "Mild symptom load"),
        SeverityBand(76, 150, "moderate", "Moderate symptom load"),
        SeverityBand(151, 225, "severe", "Severe symptom load"),
        SeverityBand(226, MAX_SCORE, "extreme", "Extreme symptom load"),
    )
)


@dataclass(frozen=True)
class PtecFormData:
    """Completed PTEC answers, category -> item -> rating."""

    ratings: dict[str, dict[str, PtecRating]]

    @classmethod
    def from_answers(cls, answers: Mapping[str, Any]) -> "PtecFormData":
        """Build form data from {category: {item_key: rating}}.

        Raises:
            IncompleteInputError: If a category or item is missing.
            UnexpectedItemError: If a category or item is unknown.
            RatingRangeError: If any rating is outside 0-3.
        """
        check_items(INSTRUMENT, answers, CATEGORIES)

        ratings: dict[str, dict[str, PtecRating]] = {}
        for category, items in CATEGORIES.items():
            category_answers = answers[category]
            check_items(f"{INSTRUMENT} {category}", category_answers, items)
            ratings[category] = {
                item: PtecRating(category_answers[item], f"{category}.{item}")
                for item in items
            }
        return cls(ratings=ratings)


@dataclass(frozen=True)
class PtecResult:
    """Result of PTEC scoring."""

    total: int
    categories: dict[str, int]
    severity: str
    interpretation: str
    max_score: int = MAX_SCORE


@dataclass(frozen=True)
class CategoryChange:
    """Change in one category between two evaluations."""

    category: str
    before: int
    after: int
    change: int
    percent_change: int


def _round_half_away(value: float) -> int:
    # symmetric for negative changes
    if value < 0:
        return -int(-value + 0.5)
    return int(value + 0.5)


def get_severity_band(total: int) -> SeverityBand:
    """Determine severity band from total score."""
    return SEVERITY_BANDS.classify(total)


def score_ptec(form_data: PtecFormData) -> PtecResult:
    """Score PTEC checklist responses.

    Args:
        form_data: Completed, validated answers

    Returns:
        PtecResult with category scores, total and severity band
    """
    categories = {
        category: sum(int(rating) for rating in items.values())
        for category, items in form_data.ratings.items()
    }
    total = sum(categories.values())
    band = get_severity_band(total)

    return PtecResult(
        total=total,
        categories=categories,
        severity=band.label,
        interpretation=band.interpretation,
    )


def compare_evaluations(before: PtecResult, after: PtecResult) -> list[CategoryChange]:
    """Compare two independently scored evaluations category by category.

    Percent change is relative to the category maximum, so categories of
    different sizes are comparable. Negative change means improvement.
    """
    changes = []
    for category, max_score in CATEGORY_MAX_SCORES.items():
        change = after.categories[category] - before.categories[category]
        changes.append(
            CategoryChange(
                category=category,
                before=before.categories[category],
                after=after.categories[category],
                change=change,
                percent_change=_round_half_away(change / max_score * 100),
            )
        )
    return changes


@dataclass(frozen=True)
class CategoryLoad:
    """Average score of one category across many evaluations."""

    category: str
    average: float
    percent_of_max: int


@dataclass(frozen=True)
class PtecSummary:
    """Scores across many evaluations."""

    count: int
    average_total: float
    severity_counts: dict[str, int]
    category_loads: tuple[CategoryLoad, ...]


def summarize_ptec(forms: Sequence[PtecFormData]) -> PtecSummary:
    """Summarize many evaluations.

    Category loads are listed heaviest first by percent of the category
    maximum; equal percentages keep checklist order.
    """
    results = [score_ptec(form) for form in forms]
    count = len(results)

    loads = []
    for category, max_score in CATEGORY_MAX_SCORES.items():
        scores = [result.categories[category] for result in results]
        loads.append(
            CategoryLoad(
                category=category,
                average=mean(scores),
                percent_of_max=percentage(sum(scores), max_score * count),
            )
        )

    return PtecSummary(
        count=count,
        average_total=mean([result.total for result in results]),
        severity_counts=distribution(
            SEVERITY_BANDS.labels, [result.severity for result in results]
        ),
        category_loads=tuple(sorted(loads, key=lambda load: load.percent_of_max, reverse=True)),
    )
