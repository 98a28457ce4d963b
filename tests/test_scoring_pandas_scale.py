"""Unit tests for the PANS/PANDAS time-windowed symptom scale."""

import random

import pytest

from pans_scales.scoring.errors import (
    IncompleteInputError,
    RatingRangeError,
    UnexpectedItemError,
)
from pans_scales.scoring.pandas_scale import (
    ASSOCIATED_ITEMS,
    DOMAINS,
    FUNCTIONAL_ITEM,
    MAX_TOTAL,
    PRIMARY_ITEMS,
    PansFormData,
    score_pandas_scale,
    summarize_pandas_scale,
)
from pans_scales.scoring.ratings import TimeWindow


def _score(answers):
    return score_pandas_scale(PansFormData.from_answers(answers))


def _windowed(rating: int) -> dict[str, int]:
    return {"before": rating, "after": rating, "current": rating}


class TestItemLayout:
    """Tests for the fixed item set."""

    def test_item_counts(self) -> None:
        """Test 7 primary items, 23 associated items in 11 domains."""
        assert len(PRIMARY_ITEMS) == 7
        assert len(ASSOCIATED_ITEMS) == 23
        assert len(DOMAINS) == 11
        assert set(ASSOCIATED_ITEMS.values()) == set(DOMAINS)

    def test_max_total(self) -> None:
        """Test the documented maximum of 100."""
        assert MAX_TOTAL == 100


class TestPandasScaleScoring:
    """Tests for per-window score calculation."""

    def test_all_zeros(self, make_pandas_answers) -> None:
        """Test all items rated 0 score 0 in every window."""
        result = _score(make_pandas_answers(0))

        for window in TimeWindow:
            scores = result.for_window(window)
            assert scores.primary == 0
            assert scores.associated == 0
            assert scores.functional == 0
            assert scores.total == 0

    def test_all_fives(self, make_pandas_answers) -> None:
        """Test maximum ratings give 25 + 25 + 50 = 100."""
        result = _score(make_pandas_answers(5))

        assert result.current.primary == 25
        assert result.current.associated == 25
        assert result.current.functional == 50
        assert result.current.total == 100
        assert result.current.symptoms == 50

    def test_primary_fives_in_current_window_only(self, make_pandas_answers) -> None:
        """Test primary items at 5 in the current window, everything else 0."""
        overrides = {key: {"before": 0, "after": 0, "current": 5} for key in PRIMARY_ITEMS}
        result = _score(make_pandas_answers(0, **overrides))

        assert result.current.primary == 25
        assert result.current.associated == 0
        assert result.current.functional == 0
        assert result.current.total == 25
        assert result.before.total == 0
        assert result.after.total == 0

    def test_primary_uses_highest_item(self, make_pandas_answers) -> None:
        """Test primary score is 5 x the single highest OCD item."""
        result = _score(
            make_pandas_answers(
                0,
                ocd_harm={"before": 0, "after": 3, "current": 1},
                ocd_hoarding={"before": 0, "after": 2, "current": 4},
            )
        )

        assert result.after.primary == 15
        assert result.current.primary == 20

    def test_domain_uses_max_not_sum(self, make_pandas_answers) -> None:
        """Test five motor items at 5 count once as one domain."""
        overrides = {
            key: {"before": 5, "after": 5, "current": 5}
            for key, domain in ASSOCIATED_ITEMS.items()
            if domain == "motor"
        }
        result = _score(make_pandas_answers(0, **overrides))

        assert result.current.associated == 5
        assert result.current.domain_ratings["motor"] == 5

    def test_top_five_domains_summed(self, make_pandas_answers) -> None:
        """Test only the five highest domains count."""
        result = _score(
            make_pandas_answers(
                0,
                assoc_panic=_windowed(5),
                assoc_depression=_windowed(4),
                assoc_irritability=_windowed(3),
                assoc_withdrawal2=_windowed(2),
                assoc_school_function1=_windowed(1),
                assoc_sensory=_windowed(1),
                assoc_pupil=_windowed(1),
            )
        )

        assert result.current.associated == 5 + 4 + 3 + 2 + 1

    def test_functional_multiplier(self, make_pandas_answers) -> None:
        """Test functional impairment is rating x 10."""
        result = _score(
            make_pandas_answers(0, **{FUNCTIONAL_ITEM: {"before": 1, "after": 4, "current": 2}})
        )

        assert result.before.functional == 10
        assert result.after.functional == 40
        assert result.current.functional == 20

    def test_windows_are_independent(self, make_pandas_answers) -> None:
        """Test each window is scored from its own ratings only."""
        answers = {
            key: {"before": 5, "after": 0, "current": 2}
            for key in make_pandas_answers(0)
        }
        result = _score(answers)

        assert result.before.total == 100
        assert result.after.total == 0
        assert result.current.total == 10 + 10 + 20

    def test_idempotent(self, make_pandas_answers) -> None:
        """Test scoring the same answers twice gives equal results."""
        answers = make_pandas_answers(3)

        assert _score(answers) == _score(answers)

    def test_random_inputs_respect_invariants(self, make_pandas_answers) -> None:
        """Test documented ranges and primary formula on random answers."""
        rng = random.Random(20240601)
        keys = list(make_pandas_answers(0))

        for _ in range(50):
            answers = {
                key: {w.value: rng.randint(0, 5) for w in TimeWindow}
                for key in keys
            }
            result = _score(answers)

            for window in TimeWindow:
                scores = result.for_window(window)
                highest = max(answers[key][window.value] for key in PRIMARY_ITEMS)
                assert scores.primary == 5 * highest
                assert 0 <= scores.associated <= 25
                assert 0 <= scores.total <= MAX_TOTAL


class TestPandasScaleSummary:
    """Tests for per-window averages across many scales."""

    def test_windows_averaged_independently(self, make_pandas_answers) -> None:
        """Test each window is averaged on its own."""
        forms = [
            PansFormData.from_answers(make_pandas_answers(0)),
            PansFormData.from_answers(
                make_pandas_answers(
                    1, **{FUNCTIONAL_ITEM: {"before": 0, "after": 3, "current": 1}}
                )
            ),
        ]

        summary = summarize_pandas_scale(forms)

        assert summary.count == 2
        assert summary.before.total == 5.0
        assert summary.after.total == 20.0
        assert summary.current.total == 10.0
        assert summary.after.functional == 15.0
        assert summary.current.primary == 2.5
        assert summary.current.associated == 2.5

    def test_empty(self) -> None:
        """Test no results gives zero averages."""
        summary = summarize_pandas_scale([])

        assert summary.count == 0
        assert summary.before.total == 0.0
        assert summary.current.functional == 0.0


class TestPandasScaleValidation:
    """Tests for answer validation."""

    def test_missing_item(self, make_pandas_answers) -> None:
        """Test a missing item is rejected rather than scored as 0."""
        answers = make_pandas_answers(0)
        del answers["assoc_sleep1"]

        with pytest.raises(IncompleteInputError) as exc_info:
            PansFormData.from_answers(answers)

        assert exc_info.value.missing == ["assoc_sleep1"]

    def test_unknown_item(self, make_pandas_answers) -> None:
        """Test an unknown item is rejected."""
        answers = make_pandas_answers(0)
        answers["assoc_extra"] = {"before": 0, "after": 0, "current": 0}

        with pytest.raises(UnexpectedItemError):
            PansFormData.from_answers(answers)

    def test_rating_above_five(self, make_pandas_answers) -> None:
        """Test a rating of 6 is rejected."""
        answers = make_pandas_answers(0, ocd_misc={"before": 0, "after": 6, "current": 0})

        with pytest.raises(RatingRangeError):
            PansFormData.from_answers(answers)
