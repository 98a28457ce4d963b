"""Comparison of scores against a published reference population."""

from dataclasses import dataclass
from enum import Enum

# z-score cutpoints between comparison labels
BELOW_AVERAGE_Z = -1.0
ABOVE_AVERAGE_Z = 1.0
WELL_ABOVE_AVERAGE_Z = 2.0


class NormLabel(str, Enum):
    """Qualitative position relative to the reference mean."""

    BELOW_AVERAGE = "below_average"
    AVERAGE = "average"
    ABOVE_AVERAGE = "above_average"
    WELL_ABOVE_AVERAGE = "well_above_average"


# Approximate percentile ranges for a normal distribution
PERCENTILE_RANGES = {
    NormLabel.BELOW_AVERAGE: "below 16%",
    NormLabel.AVERAGE: "16%-84%",
    NormLabel.ABOVE_AVERAGE: "84%-98%",
    NormLabel.WELL_ABOVE_AVERAGE: "above 98%",
}

DESCRIPTIONS = {
    NormLabel.BELOW_AVERAGE: "Lower than most of the reference population",
    NormLabel.AVERAGE: "Within the typical range of the reference population",
    NormLabel.ABOVE_AVERAGE: "Higher than most of the reference population",
    NormLabel.WELL_ABOVE_AVERAGE: "Much higher than almost all of the reference population",
}


@dataclass(frozen=True)
class NormativeReference:
    """Published mean and standard deviation for a population."""

    population: str
    mean: float
    sd: float

    def __post_init__(self) -> None:
        if self.sd <= 0:
            raise ValueError(f"Reference SD must be positive, got {self.sd}")


@dataclass(frozen=True)
class NormComparison:
    """Result of comparing one score to a reference population."""

    score: int
    population: str
    mean: float
    sd: float
    z_score: float
    label: NormLabel
    percentile_range: str
    description: str


def get_norm_label(z_score: float) -> NormLabel:
    """Map a z-score to its qualitative label."""
    if z_score < BELOW_AVERAGE_Z:
        return NormLabel.BELOW_AVERAGE
    if z_score < ABOVE_AVERAGE_Z:
        return NormLabel.AVERAGE
    if z_score < WELL_ABOVE_AVERAGE_Z:
        return NormLabel.ABOVE_AVERAGE
    return NormLabel.WELL_ABOVE_AVERAGE


def compare_to_norms(score: int, reference: NormativeReference) -> NormComparison:
    """Compare a score to a reference population.

    Args:
        score: Computed total or subscale score
        reference: Published mean/SD of the reference population

    Returns:
        NormComparison with z-score and qualitative label
    """
    z_score = (score - reference.mean) / reference.sd
    label = get_norm_label(z_score)

    return NormComparison(
        score=score,
        population=reference.population,
        mean=reference.mean,
        sd=reference.sd,
        z_score=round(z_score, 2),
        label=label,
        percentile_range=PERCENTILE_RANGES[label],
        description=DESCRIPTIONS[label],
    )
