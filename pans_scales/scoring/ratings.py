"""Rating primitives shared by all instruments.

Ratings are plain integers bounded to an instrument-specific range. They are
validated when constructed and never clamped:

- SymptomRating (0-5): PANS/PANDAS time-windowed symptom scale
- CriterionSeverity (0-5): severity sub-rating of a Kovacevic criterion
- SeverityRating (0-4): PANS 31-item scale
- PtecRating (0-3): PTEC checklist
- FrequencyRating (0-4): Caregiver Burden Inventory
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional

from pans_scales.scoring.errors import (
    IncompleteInputError,
    RatingRangeError,
    ScoringError,
    UnexpectedItemError,
)


class RatingValue(int):
    """Integer rating constrained to the closed range [0, MAX]."""

    MAX: ClassVar[int] = 4

    def __new__(cls, value: Any, field: Optional[str] = None) -> "RatingValue":
        # bool is an int subclass; True must not pass as a rating of 1
        if isinstance(value, bool) or not isinstance(value, int):
            raise RatingRangeError(value, cls.MAX, field)
        if value < 0 or value > cls.MAX:
            raise RatingRangeError(value, cls.MAX, field)
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class SymptomRating(RatingValue):
    """Time-windowed scale rating: 0 = none ... 5 = extreme."""

    MAX = 5


class CriterionSeverity(RatingValue):
    """Severity of a present diagnostic criterion (0-5)."""

    MAX = 5


class SeverityRating(RatingValue):
    """PANS-31 rating: 0 = none, 1 = mild, 2 = moderate, 3 = severe, 4 = extreme."""

    MAX = 4


class PtecRating(RatingValue):
    """PTEC rating: 0 = no difficulty ... 3 = severe difficulty."""

    MAX = 3


class FrequencyRating(RatingValue):
    """CBI rating: 0 = never ... 4 = nearly always."""

    MAX = 4


class CriterionResponse(str, Enum):
    """Answer to a binary clinical fact."""

    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any, field: Optional[str] = None) -> "CriterionResponse":
        """Parse a response from its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            target = f"{field} " if field else ""
            raise ScoringError(
                f"Criterion {target}must be one of yes/no/unknown, got {value!r}"
            ) from None

    @property
    def is_yes(self) -> bool:
        return self is CriterionResponse.YES


@dataclass(frozen=True)
class CriterionWithSeverity:
    """A criterion response paired with a severity sub-rating.

    The severity is only meaningful when the criterion is present.
    """

    present: CriterionResponse
    severity: CriterionSeverity = CriterionSeverity(0)

    @property
    def is_present(self) -> bool:
        return self.present.is_yes

    @property
    def effective_severity(self) -> int:
        return int(self.severity) if self.is_present else 0

    @classmethod
    def parse(cls, value: Any, field: Optional[str] = None) -> "CriterionWithSeverity":
        """Parse from {"present": "yes", "severity": 3} or a bare response string.

        A present criterion must carry its severity. Absent or unknown
        criteria default to severity 0.

        Raises:
            IncompleteInputError: If "present" is missing, or the criterion
                is present without a severity.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            if "present" not in value:
                raise IncompleteInputError("criterion", [f"{field}.present" if field else "present"])
            present = CriterionResponse.parse(value["present"], field)
            severity = value.get("severity")
        else:
            present = CriterionResponse.parse(value, field)
            severity = None

        if severity is None:
            if present.is_yes:
                raise IncompleteInputError(
                    "criterion", [f"{field}.severity" if field else "severity"]
                )
            severity = 0
        return cls(present=present, severity=CriterionSeverity(severity, field))


class TimeWindow(str, Enum):
    """Observation window of the time-windowed symptom scale."""

    BEFORE = "before"    # before illness onset
    AFTER = "after"      # after onset, worst period
    CURRENT = "current"  # most recent week


@dataclass(frozen=True)
class TimeWindowedRating:
    """One rating per observation window. Windows are never combined."""

    before: SymptomRating
    after: SymptomRating
    current: SymptomRating

    def for_window(self, window: TimeWindow) -> int:
        return int(getattr(self, window.value))

    @classmethod
    def parse(cls, value: Any, field: Optional[str] = None) -> "TimeWindowedRating":
        """Parse from {"before": r, "after": r, "current": r}."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise ScoringError(
                f"Time-windowed rating {field or ''} must be a mapping of windows"
            )
        missing = [w.value for w in TimeWindow if w.value not in value]
        if missing:
            prefix = f"{field}." if field else ""
            raise IncompleteInputError("time-windowed rating", [prefix + m for m in missing])
        return cls(
            before=SymptomRating(value["before"], f"{field}.before"),
            after=SymptomRating(value["after"], f"{field}.after"),
            current=SymptomRating(value["current"], f"{field}.current"),
        )


@dataclass(frozen=True)
class SymptomItem:
    """A rated symptom with a stable key and an optional domain tag."""

    key: str
    rating: TimeWindowedRating
    domain: Optional[str] = None


def check_items(
    instrument: str,
    answers: Mapping[str, Any],
    required: Iterable[str],
) -> None:
    """Ensure an answer mapping contains exactly the required keys.

    Raises:
        IncompleteInputError: If any required key is missing.
        UnexpectedItemError: If any key is not part of the instrument.
    """
    if not isinstance(answers, Mapping):
        raise ScoringError(f"{instrument} answers must be a mapping")
    required = list(required)
    missing = [key for key in required if key not in answers]
    if missing:
        raise IncompleteInputError(instrument, missing)
    expected = set(required)
    unexpected = sorted(key for key in answers if key not in expected)
    if unexpected:
        raise UnexpectedItemError(instrument, unexpected)
