"""
Test suite for the Robust Statistics service.

Verifies the shared descriptive statistics (mean, population std, median,
MAD), the log-domain helpers, the modified z-score with its degenerate
fallbacks, percentile rank and niche-normalized velocity.
"""

import math

import pytest

from creator_signals.core.exceptions import InvalidInput
from creator_signals.models import NicheStanding
from creator_signals.services.robust_statistics import (
    exp_transform,
    log_mean,
    log_modified_z_score,
    log_robust_center_and_spread,
    log_std_dev,
    log_transform,
    mean,
    median,
    median_absolute_deviation,
    modified_z_score,
    niche_normalized_velocity,
    percentile_rank,
    robust_center_and_spread,
    std_dev,
    z_score,
)


# =============================================================================
# Basic Statistics
# =============================================================================


class TestBasicStatistics:
    """Tests for mean, std_dev, median and the classic z-score."""

    def test_mean_of_sample(self) -> None:
        assert mean([1, 2, 3, 4]) == pytest.approx(2.5)

    def test_mean_of_empty_sample_is_zero(self) -> None:
        assert mean([]) == 0.0

    def test_std_dev_is_population_std(self) -> None:
        # Textbook example: population std of this sample is exactly 2
        assert std_dev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)

    def test_std_dev_of_singleton_is_zero(self) -> None:
        assert std_dev([5]) == 0.0
        assert std_dev([]) == 0.0

    def test_median_odd_and_even(self) -> None:
        assert median([3, 1, 2]) == 2.0
        assert median([4, 1, 3, 2]) == 2.5
        assert median([]) == 0.0

    def test_z_score_zero_when_std_below_floor(self) -> None:
        assert z_score(10.0, 5.0, 0.0) == 0.0
        assert z_score(10.0, 5.0, 1e-12) == 0.0

    def test_z_score_standard_case(self) -> None:
        assert z_score(9.0, 5.0, 2.0) == pytest.approx(2.0)

    def test_accepts_generators(self) -> None:
        assert mean(x for x in [2.0, 4.0]) == pytest.approx(3.0)


class TestInputValidation:
    """Negative and non-finite values are rejected before any statistic runs."""

    @pytest.mark.parametrize("values", [
        [1.0, -2.0],
        [1.0, float('nan')],
        [float('inf')],
    ])
    def test_invalid_values_raise(self, values) -> None:
        with pytest.raises(InvalidInput):
            mean(values)

    def test_non_numeric_values_raise(self) -> None:
        with pytest.raises(InvalidInput):
            median(['ten', 'twenty'])

    def test_invalid_input_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            std_dev([-1.0, 1.0])


# =============================================================================
# Log Domain
# =============================================================================


class TestLogDomain:
    """Tests for ln(x + 1) helpers."""

    def test_log_transform_of_zero(self) -> None:
        assert log_transform(0) == 0.0

    def test_exp_transform_inverts_log_transform(self) -> None:
        for value in (0.0, 1.0, 99.0, 125000.0):
            assert exp_transform(log_transform(value)) == pytest.approx(value)

    def test_log_transform_rejects_negative(self) -> None:
        with pytest.raises(InvalidInput):
            log_transform(-1)

    def test_log_mean_stays_in_log_domain(self) -> None:
        # mean of ln(1), ln(e^2) with the +1 offset removed by construction
        values = [0.0, math.e ** 2 - 1]
        assert log_mean(values) == pytest.approx(1.0)

    def test_log_std_dev_roughly_ignores_channel_size(self) -> None:
        # The +1 offset makes the match approximate for small values
        small = log_std_dev([10, 100, 1000])
        large = log_std_dev([1000, 10000, 100000])
        assert small == pytest.approx(large, rel=0.05)

    def test_log_std_dev_short_sample(self) -> None:
        assert log_std_dev([42]) == 0.0
        assert log_mean([]) == 0.0


# =============================================================================
# Robust Scores
# =============================================================================


class TestModifiedZScore:
    """Tests for MAD and the modified z-score."""

    def test_median_absolute_deviation(self) -> None:
        assert median_absolute_deviation([1, 2, 3, 4, 100]) == pytest.approx(1.0)
        assert median_absolute_deviation([]) == 0.0

    def test_modified_z_score_formula(self) -> None:
        # 0.6745 * (100 - 3) / 1
        assert modified_z_score(100, [1, 2, 3, 4, 100]) == pytest.approx(0.6745 * 97)

    def test_identical_values_score_zero(self) -> None:
        assert modified_z_score(5, [5, 5, 5, 5]) == 0.0
        assert log_modified_z_score(5, [5, 5, 5, 5]) == 0.0

    def test_zero_mad_scores_zero(self) -> None:
        # MAD is 0 because six of seven values coincide
        values = [100] * 6 + [5000]
        assert robust_center_and_spread(values) == (100.0, 0.0)
        assert modified_z_score(5000, values) == 0.0
        assert log_modified_z_score(5000, values) == 0.0

    def test_mean_absolute_deviation_fallback_is_opt_in(self) -> None:
        # MAD is 0 because four of five values coincide; mean AD is 9 / 5
        center, spread = robust_center_and_spread([1, 1, 1, 1, 10], mean_ad_fallback=True)
        assert center == 1.0
        assert spread == pytest.approx(1.2533 * 1.8)
        assert modified_z_score(10, [1, 1, 1, 1, 10], mean_ad_fallback=True) == pytest.approx(9 / (1.2533 * 1.8))
        assert log_modified_z_score(5000, [100] * 6 + [5000], mean_ad_fallback=True) > 1.5

    def test_fallback_leaves_constant_sample_at_zero(self) -> None:
        assert modified_z_score(5, [5, 5, 5], mean_ad_fallback=True) == 0.0

    @pytest.mark.parametrize("values", [
        [42],
        [1, 2, 3],
        [5, 100, 1000, 7, 8],
        [0, 0, 3, 250000, 17, 9, 12],
        [100] * 6 + [5000],
    ])
    def test_median_scores_zero_for_odd_lengths(self, values) -> None:
        # ln(x + 1) is monotonic, so the log of the median is the median log
        assert log_modified_z_score(median(values), values) == pytest.approx(0.0, abs=1e-9)

    def test_median_scores_near_zero_for_even_lengths(self) -> None:
        # The arithmetic median of an even sample averages the two middle
        # values, which differs slightly from the median of their logs
        values = [5, 100, 1000, 7, 8, 9]
        assert log_modified_z_score(median(values), values) == pytest.approx(0.0, abs=0.05)

    @pytest.mark.parametrize("values", [[7, 7], [0, 0, 0], [3.5] * 10])
    def test_identical_values(self, values) -> None:
        assert std_dev(values) == 0.0
        assert z_score(values[0], mean(values), std_dev(values)) == 0.0
        assert modified_z_score(values[0], values) == 0.0
        assert log_modified_z_score(values[0], values) == 0.0

    def test_empty_population_scores_zero(self) -> None:
        assert modified_z_score(10, []) == 0.0

    def test_extreme_values_do_not_hide_each_other(self) -> None:
        values = [100, 101, 99, 102, 98, 100, 5000, 5000]
        assert log_modified_z_score(5000, values) > 3.5

    def test_log_center_is_log_median(self) -> None:
        center, _ = log_robust_center_and_spread([0, 9, 99])
        assert center == pytest.approx(math.log(10))


# =============================================================================
# Percentile and Niche Velocity
# =============================================================================


class TestNicheVelocity:
    """Tests for percentile_rank and niche_normalized_velocity."""

    def test_percentile_rank(self) -> None:
        # 3 of 4 values below, divided by 5 once the value is inserted
        assert percentile_rank(50, [10, 20, 30, 60]) == 60

    def test_percentile_rank_empty_population(self) -> None:
        assert percentile_rank(50, []) == 50

    def test_exceptional_velocity(self) -> None:
        result = niche_normalized_velocity(10000, [10, 100, 1000])
        assert result.raw == 10000
        assert result.normalized == pytest.approx(2.48, abs=0.02)
        assert result.percentile == 75
        assert result.interpretation == NicheStanding.EXCEPTIONAL

    def test_below_average_velocity(self) -> None:
        result = niche_normalized_velocity(1, [100, 1000, 10000])
        assert result.normalized < -1
        assert result.percentile == 0
        assert result.interpretation == NicheStanding.BELOW_AVERAGE

    def test_constant_baseline_is_typical(self) -> None:
        result = niche_normalized_velocity(1000, [100, 100, 100])
        assert result.normalized == 0.0
        assert result.interpretation == NicheStanding.TYPICAL

    def test_empty_baseline(self) -> None:
        result = niche_normalized_velocity(500, [])
        assert result.normalized == 0.0
        assert result.percentile == 50

    def test_negative_velocity_rejected(self) -> None:
        with pytest.raises(InvalidInput):
            niche_normalized_velocity(-5, [1, 2, 3])
