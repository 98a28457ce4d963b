"""Errors raised by the scoring engine."""


class ScoringError(ValueError):
    """Base exception for invalid scoring input."""

    pass


class RatingRangeError(ScoringError):
    """A rating value is outside its instrument's permitted range."""

    def __init__(self, value: object, max_value: int, field: str | None = None) -> None:
        self.value = value
        self.max_value = max_value
        self.field = field
        target = f"{field} " if field else ""
        super().__init__(
            f"Rating {target}must be integer 0-{max_value}, got {value!r}"
        )


class IncompleteInputError(ScoringError):
    """A required item is missing from the answer set."""

    def __init__(self, instrument: str, missing: list[str]) -> None:
        self.instrument = instrument
        self.missing = missing
        super().__init__(f"Missing {instrument} items: {', '.join(missing)}")


class UnexpectedItemError(ScoringError):
    """The answer set contains keys the instrument does not define."""

    def __init__(self, instrument: str, unexpected: list[str]) -> None:
        self.instrument = instrument
        self.unexpected = unexpected
        super().__init__(f"Unknown {instrument} items: {', '.join(unexpected)}")
