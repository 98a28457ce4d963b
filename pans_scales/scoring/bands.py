"""Severity banding of total scores.

A band table is an ordered list of contiguous, non-overlapping integer ranges
covering every possible total of an instrument, lowest band first.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SeverityBand:
    """A labelled score range with its clinical interpretation."""

    low: int
    high: int
    label: str
    interpretation: str

    def contains(self, total: int) -> bool:
        return self.low <= total <= self.high


@dataclass(frozen=True)
class BandTable:
    """Ordered severity bands for one instrument."""

    bands: tuple[SeverityBand, ...]

    def __post_init__(self) -> None:
        if not self.bands:
            raise ValueError("Band table must contain at least one band")
        if self.bands[0].low != 0:
            raise ValueError("Lowest band must start at 0")
        for band in self.bands:
            if band.low > band.high:
                raise ValueError(f"Band '{band.label}' has low > high")
        for previous, band in zip(self.bands, self.bands[1:]):
            if band.low != previous.high + 1:
                raise ValueError(
                    f"Bands '{previous.label}' and '{band.label}' are not contiguous"
                )

    @property
    def max_total(self) -> int:
        return self.bands[-1].high

    @property
    def labels(self) -> list[str]:
        return [band.label for band in self.bands]

    def classify(self, total: int) -> SeverityBand:
        """Return the band containing total.

        Raises:
            ValueError: If total is outside the table's range.
        """
        for band in self.bands:
            if band.contains(total):
                return band
        raise ValueError(f"Score {total} is outside 0-{self.max_total}")

    def rank(self, label: str) -> int:
        """Ordinal position of a band label (0 = lowest)."""
        return self.labels.index(label)
