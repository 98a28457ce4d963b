"""Kovacevic (2019) PANS/PANDAS diagnostic criteria evaluator.

Criteria groups:
- Mandatory (3 yes/no/unknown facts): sudden onset, parents can recall the
  exact onset, dynamic evolution of symptoms over 2-6 weeks
- Core (4): OCD, separation anxiety, tics/involuntary movements, eating disorder
- Secondary group 1 (5) and secondary group 2 (13)

Diagnostic formulas:
- Formula 1: sudden onset + mandatory criterion met + at least 2 core criteria
- Formula 2: at least 2 core criteria + at least 3 secondary criteria with
  at least one from each secondary group

Confidence is reported as four weighted components:
- Clinical symptoms: up to 80%
- Treatment response (antibiotics / steroids): up to 10%
- Lab results: up to 5% (negative labs do not rule out the diagnosis)
- Margin: a constant 5% uncertainty allowance

summarize_kovacevic reports outcome counts, average criteria met, treatment
response rates and the lab status distribution across many evaluations.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pans_scales.scoring.errors import ScoringError
from pans_scales.scoring.ratings import (
    CriterionResponse,
    CriterionSeverity,
    CriterionWithSeverity,
    check_items,
)
from pans_scales.scoring.summary import distribution, mean, percentage

INSTRUMENT = "Kovacevic criteria"

MANDATORY_CRITERIA = (
    "sudden_onset",
    "can_recall_exact_onset",
    "dynamic_evolution",
)

CORE_CRITERIA = (
    "ocd_symptoms",
    "separation_anxiety",
    "tics_or_movements",
    "eating_disorder",
)

SECONDARY_GROUP1_CRITERIA = (
    "sleep_disturbances",
    "mydriasis",
    "behavioral_regression",
    "frightened_appearance",
    "aggression_or_suicidal",
)

SECONDARY_GROUP2_CRITERIA = (
    "fine_motor_impairment",
    "hyperactivity_attention",
    "memory_loss",
    "learning_disabilities",
    "urinary_symptoms",
    "hallucinations",
    "sensory_hypersensitivity",
    "emotional_lability",
    "dysgraphia",
    "selective_mutism",
    "hypotonia",
    "dystonia",
    "abdominal_complaints",
)

TREATMENT_FIELDS = ("antibiotics_response", "steroids_response")

FORM_SECTIONS = (
    "mandatory",
    "core",
    "secondary_group1",
    "secondary_group2",
    "treatment",
    "lab_status",
)

# Formula thresholds
MIN_CORE_CRITERIA = 2
MIN_SECONDARY_CRITERIA = 3
MIN_PER_SECONDARY_GROUP = 1

# Confidence weights (percent)
CLINICAL_WEIGHT = 80
FORMULA2_BASE_WEIGHT = 70
EXTRA_CRITERION_BONUS = 2
FORMULA2_MAX_BONUS = 10
PARTIAL_CORE_WEIGHT = 40
PARTIAL_SECONDARY_WEIGHT = 20
TREATMENT_RESPONSE_WEIGHT = 5
TREATMENT_WEIGHT = 10
LAB_WEIGHT = 5
LAB_INCONCLUSIVE_WEIGHT = 2.5
MARGIN_WEIGHT = 5
CONFIDENCE_CAP = 100

SECONDARY_CRITERIA_COUNT = len(SECONDARY_GROUP1_CRITERIA) + len(SECONDARY_GROUP2_CRITERIA)
SEVERITY_CRITERIA_COUNT = len(CORE_CRITERIA) + SECONDARY_CRITERIA_COUNT


class LabStatus(str, Enum):
    """Overall status of PANS/PANDAS-related lab work."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    INCONCLUSIVE = "inconclusive"
    NOT_TESTED = "not_tested"


class DiagnosisOutcome(str, Enum):
    """Categorical diagnostic outcome."""

    FORMULA1 = "formula1"
    FORMULA2 = "formula2"
    PARTIAL = "partial"
    INCONCLUSIVE = "inconclusive"
    NOT_MET = "not_met"


@dataclass(frozen=True)
class KovacevicFormData:
    """Completed Kovacevic criteria answers."""

    mandatory: dict[str, CriterionResponse]
    core: dict[str, CriterionWithSeverity]
    secondary_group1: dict[str, CriterionWithSeverity]
    secondary_group2: dict[str, CriterionWithSeverity]
    antibiotics_response: CriterionResponse = CriterionResponse.UNKNOWN
    steroids_response: CriterionResponse = CriterionResponse.UNKNOWN
    lab_status: LabStatus = LabStatus.NOT_TESTED

    @classmethod
    def from_answers(cls, answers: Mapping[str, Any]) -> "KovacevicFormData":
        """Build form data from a nested answer mapping.

        Expected shape:
            {
                "mandatory": {"sudden_onset": "yes", ...},
                "core": {"ocd_symptoms": {"present": "yes", "severity": 3}, ...},
                "secondary_group1": {...},
                "secondary_group2": {...},
                "treatment": {"antibiotics_response": "unknown", "steroids_response": "no"},
                "lab_status": "not_tested",
            }

        Raises:
            IncompleteInputError: If a section or criterion is missing.
            UnexpectedItemError: If a section contains unknown criteria.
            ScoringError: If a response or lab status is invalid.
        """
        check_items(INSTRUMENT, answers, FORM_SECTIONS)

        check_items(f"{INSTRUMENT} mandatory", answers["mandatory"], MANDATORY_CRITERIA)
        mandatory = {
            key: CriterionResponse.parse(answers["mandatory"][key], key)
            for key in MANDATORY_CRITERIA
        }

        check_items(f"{INSTRUMENT} treatment", answers["treatment"], TREATMENT_FIELDS)
        treatment = {
            key: CriterionResponse.parse(answers["treatment"][key], key)
            for key in TREATMENT_FIELDS
        }

        try:
            lab_status = LabStatus(answers["lab_status"])
        except ValueError:
            raise ScoringError(
                f"lab_status must be one of {[s.value for s in LabStatus]}, "
                f"got {answers['lab_status']!r}"
            ) from None

        return cls(
            mandatory=mandatory,
            core=_parse_group("core", answers["core"], CORE_CRITERIA),
            secondary_group1=_parse_group(
                "secondary_group1", answers["secondary_group1"], SECONDARY_GROUP1_CRITERIA
            ),
            secondary_group2=_parse_group(
                "secondary_group2", answers["secondary_group2"], SECONDARY_GROUP2_CRITERIA
            ),
            antibiotics_response=treatment["antibiotics_response"],
            steroids_response=treatment["steroids_response"],
            lab_status=lab_status,
        )

    def criteria(self) -> list[CriterionWithSeverity]:
        """All core and secondary criteria in questionnaire order."""
        return [
            *self.core.values(),
            *self.secondary_group1.values(),
            *self.secondary_group2.values(),
        ]


def _parse_group(
    section: str,
    answers: Mapping[str, Any],
    keys: tuple[str, ...],
) -> dict[str, CriterionWithSeverity]:
    check_items(f"{INSTRUMENT} {section}", answers, keys)
    return {key: CriterionWithSeverity.parse(answers[key], key) for key in keys}


@dataclass(frozen=True)
class CriteriaMet:
    """Counts of criteria met per group."""

    mandatory_met: bool
    mandatory_count: int
    core_count: int
    secondary_group1_count: int
    secondary_group2_count: int

    @property
    def total_secondary(self) -> int:
        return self.secondary_group1_count + self.secondary_group2_count


@dataclass(frozen=True)
class ConfidenceBreakdown:
    """Diagnostic confidence split into weighted components (percent)."""

    clinical_symptoms: float
    treatment_response: float
    lab_results: float
    margin: float
    total: float


@dataclass(frozen=True)
class DiagnosisResult:
    """Result of Kovacevic criteria evaluation."""

    outcome: DiagnosisOutcome
    formula1_met: bool
    formula2_met: bool
    criteria_met: CriteriaMet
    confidence: ConfidenceBreakdown
    severity_index: int
    summary: str


def count_present(criteria: Mapping[str, CriterionWithSeverity]) -> int:
    """Count criteria answered "yes"."""
    return sum(1 for criterion in criteria.values() if criterion.is_present)


def count_criteria(form_data: KovacevicFormData) -> CriteriaMet:
    """Count the criteria met in each group."""
    mandatory_count = sum(1 for r in form_data.mandatory.values() if r.is_yes)

    return CriteriaMet(
        mandatory_met=mandatory_count == len(MANDATORY_CRITERIA),
        mandatory_count=mandatory_count,
        core_count=count_present(form_data.core),
        secondary_group1_count=count_present(form_data.secondary_group1),
        secondary_group2_count=count_present(form_data.secondary_group2),
    )


def is_formula1_met(form_data: KovacevicFormData, counts: CriteriaMet) -> bool:
    """Sudden onset + mandatory criterion + at least 2 core criteria."""
    return (
        form_data.mandatory["sudden_onset"].is_yes
        and counts.mandatory_met
        and counts.core_count >= MIN_CORE_CRITERIA
    )


def is_formula2_met(counts: CriteriaMet) -> bool:
    """At least 2 core + 3 secondary criteria, one or more from each group."""
    return (
        counts.core_count >= MIN_CORE_CRITERIA
        and counts.total_secondary >= MIN_SECONDARY_CRITERIA
        and counts.secondary_group1_count >= MIN_PER_SECONDARY_GROUP
        and counts.secondary_group2_count >= MIN_PER_SECONDARY_GROUP
    )


def has_any_answer(form_data: KovacevicFormData) -> bool:
    """Check whether any mandatory, core or secondary criterion was answered."""
    if any(r is not CriterionResponse.UNKNOWN for r in form_data.mandatory.values()):
        return True
    return any(c.present is not CriterionResponse.UNKNOWN for c in form_data.criteria())


def determine_outcome(form_data: KovacevicFormData, counts: CriteriaMet) -> DiagnosisOutcome:
    """Select the diagnostic outcome.

    Formula 1 takes precedence over formula 2. Without a formula, any core or
    secondary criterion present gives a partial outcome. With nothing present,
    the outcome is inconclusive when every criterion was left "unknown" and
    not met when at least one was explicitly answered.
    """
    if is_formula1_met(form_data, counts):
        return DiagnosisOutcome.FORMULA1
    if is_formula2_met(counts):
        return DiagnosisOutcome.FORMULA2
    if counts.core_count >= 1 or counts.total_secondary >= 1:
        return DiagnosisOutcome.PARTIAL
    if not has_any_answer(form_data):
        return DiagnosisOutcome.INCONCLUSIVE
    return DiagnosisOutcome.NOT_MET


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def calculate_clinical_score(outcome: DiagnosisOutcome, counts: CriteriaMet) -> float:
    """Clinical symptoms component (0-80)."""
    if outcome == DiagnosisOutcome.FORMULA1:
        score = CLINICAL_WEIGHT
    elif outcome == DiagnosisOutcome.FORMULA2:
        extra_core = max(0, counts.core_count - MIN_CORE_CRITERIA)
        extra_secondary = max(0, counts.total_secondary - MIN_SECONDARY_CRITERIA)
        bonus = min(FORMULA2_MAX_BONUS, (extra_core + extra_secondary) * EXTRA_CRITERION_BONUS)
        score = FORMULA2_BASE_WEIGHT + bonus
    elif outcome == DiagnosisOutcome.PARTIAL:
        core_part = counts.core_count / len(CORE_CRITERIA) * PARTIAL_CORE_WEIGHT
        secondary_part = counts.total_secondary / SECONDARY_CRITERIA_COUNT * PARTIAL_SECONDARY_WEIGHT
        score = _round_half_up(core_part + secondary_part)
    else:
        score = 0
    return float(min(score, CLINICAL_WEIGHT))


def calculate_treatment_score(form_data: KovacevicFormData) -> float:
    """Treatment response component (0-10): 5 per positive response."""
    score = 0
    if form_data.antibiotics_response.is_yes:
        score += TREATMENT_RESPONSE_WEIGHT
    if form_data.steroids_response.is_yes:
        score += TREATMENT_RESPONSE_WEIGHT
    return float(min(score, TREATMENT_WEIGHT))


def calculate_lab_score(lab_status: LabStatus) -> float:
    """Lab results component (0-5)."""
    if lab_status == LabStatus.POSITIVE:
        return float(LAB_WEIGHT)
    if lab_status == LabStatus.INCONCLUSIVE:
        return LAB_INCONCLUSIVE_WEIGHT
    return 0.0


def calculate_severity_index(form_data: KovacevicFormData) -> int:
    """Normalized severity of present criteria (0-100)."""
    max_possible = SEVERITY_CRITERIA_COUNT * CriterionSeverity.MAX
    total = sum(c.effective_severity for c in form_data.criteria())
    return _round_half_up(total / max_possible * 100)


def generate_summary(
    outcome: DiagnosisOutcome,
    counts: CriteriaMet,
    confidence: ConfidenceBreakdown,
) -> str:
    """Plain-language summary of the outcome."""
    if outcome == DiagnosisOutcome.FORMULA1:
        return (
            f"Meets formula 1: sudden onset with {counts.core_count} core criteria. "
            f"Confidence: {confidence.total:g}%."
        )
    if outcome == DiagnosisOutcome.FORMULA2:
        return (
            f"Meets formula 2: {counts.core_count} core and {counts.total_secondary} "
            f"secondary criteria. Confidence: {confidence.total:g}%."
        )
    if outcome == DiagnosisOutcome.PARTIAL:
        return (
            f"Partially meets the criteria: {counts.core_count} core and "
            f"{counts.total_secondary} secondary criteria. "
            "Consultation with a specialist is recommended."
        )
    if outcome == DiagnosisOutcome.INCONCLUSIVE:
        return (
            "A diagnosis cannot be determined from the information entered. "
            "Consultation with a specialist is recommended."
        )
    return (
        "The information entered does not meet the diagnostic criteria. "
        "Consultation with a specialist is recommended."
    )


def evaluate_kovacevic(form_data: KovacevicFormData) -> DiagnosisResult:
    """Evaluate the Kovacevic diagnostic criteria.

    Args:
        form_data: Completed, validated answers

    Returns:
        DiagnosisResult with outcome, criteria counts and confidence breakdown
    """
    counts = count_criteria(form_data)
    outcome = determine_outcome(form_data, counts)

    clinical = calculate_clinical_score(outcome, counts)
    treatment = calculate_treatment_score(form_data)
    labs = calculate_lab_score(form_data.lab_status)
    margin = float(MARGIN_WEIGHT)

    confidence = ConfidenceBreakdown(
        clinical_symptoms=clinical,
        treatment_response=treatment,
        lab_results=labs,
        margin=margin,
        total=min(clinical + treatment + labs + margin, float(CONFIDENCE_CAP)),
    )

    return DiagnosisResult(
        outcome=outcome,
        formula1_met=is_formula1_met(form_data, counts),
        formula2_met=is_formula2_met(counts),
        criteria_met=counts,
        confidence=confidence,
        severity_index=calculate_severity_index(form_data),
        summary=generate_summary(outcome, counts, confidence),
    )


@dataclass(frozen=True)
class KovacevicSummary:
    """Outcomes and inputs across many evaluations."""

    count: int
    outcome_counts: dict[str, int]
    average_criteria_met: dict[str, float]
    average_confidence: float
    treatment_response_rates: dict[str, int]
    lab_status_counts: dict[str, int]


def summarize_kovacevic(forms: Sequence[KovacevicFormData]) -> KovacevicSummary:
    """Summarize many evaluations.

    Treatment response rates are the percentage of evaluations with a "yes"
    response; "no" and "unknown" both count against the rate.
    """
    results = [evaluate_kovacevic(form) for form in forms]
    counts = [result.criteria_met for result in results]
    total = len(results)

    return KovacevicSummary(
        count=total,
        outcome_counts=distribution(
            [o.value for o in DiagnosisOutcome],
            [result.outcome.value for result in results],
        ),
        average_criteria_met={
            "mandatory": mean([c.mandatory_count for c in counts]),
            "core": mean([c.core_count for c in counts]),
            "secondary_group1": mean([c.secondary_group1_count for c in counts]),
            "secondary_group2": mean([c.secondary_group2_count for c in counts]),
        },
        average_confidence=mean([result.confidence.total for result in results]),
        treatment_response_rates={
            "antibiotics": percentage(
                sum(1 for form in forms if form.antibiotics_response.is_yes), total
            ),
            "steroids": percentage(
                sum(1 for form in forms if form.steroids_response.is_yes), total
            ),
        },
        lab_status_counts=distribution(
            [s.value for s in LabStatus],
            [form.lab_status.value for form in forms],
        ),
    )
