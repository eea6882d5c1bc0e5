"""
Robust Statistics Service - descriptive statistics for view and velocity samples.

Every mean, standard deviation, median and z-score used by the engine is
computed here. Other services depend on these helpers instead of re-deriving
the same math inline.

Key Concepts:
    Log domain:
        View counts and velocities are heavy-tailed and right-skewed. Values
        are mapped through ln(x + 1) before comparing across orders of
        magnitude; exp_transform inverts the mapping.

    Modified z-score:
        0.6745 * (x - median) / MAD, where MAD is the median absolute
        deviation. Unlike a mean/std z-score, a handful of extreme items
        cannot inflate the spread and hide each other.

Edge Cases:
    - Empty input: every statistic is 0 and every z-score is 0.
    - Zero spread (all values identical): z-scores are 0.
    - MAD of 0 (more than half the values equal): z-scores are 0. Passing
      mean_ad_fallback=True scores against the scaled mean absolute
      deviation instead.
    - Negative, NaN or infinite values: InvalidInput.

Dependencies:
    - numpy: array reductions (mean, std, median)
"""

import math
from typing import Iterable, List, Tuple

import numpy as np

from creator_signals.core.constants import MAD_SCALE, MEAN_AD_SCALE, SPREAD_FLOOR
from creator_signals.core.exceptions import InvalidInput
from creator_signals.models import NicheStanding, NicheVelocity


# =============================================================================
# Input Validation
# =============================================================================


def _as_array(values: Iterable[float]) -> np.ndarray:
    """
    Convert an iterable of metric values into a validated float64 array.

    Raises:
        InvalidInput: If any value is non-numeric, non-finite or negative.
    """
    try:
        array = np.asarray(list(values), dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Metric values must be numeric: {e}") from e

    if array.ndim != 1:
        raise InvalidInput("Metric values must be a flat sequence")
    if array.size == 0:
        return array
    if not np.all(np.isfinite(array)):
        raise InvalidInput("Metric values must be finite")
    if np.any(array < 0):
        raise InvalidInput("Metric values must be non-negative")
    return array


def _check_value(value: float) -> float:
    """Validate a single metric value and return it as a float."""
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Metric value must be numeric: {e}") from e
    if not math.isfinite(value):
        raise InvalidInput("Metric value must be finite")
    if value < 0:
        raise InvalidInput(f"Metric value must be non-negative, got {value}")
    return value


# =============================================================================
# Basic Statistics
# =============================================================================


def mean(values: Iterable[float]) -> float:
    """
    Calculate the arithmetic mean.

    Args:
        values: Non-negative metric values

    Returns:
        Arithmetic mean, or 0 for an empty sample
    """
    array = _as_array(values)
    if array.size == 0:
        return 0.0
    return float(np.mean(array))


def std_dev(values: Iterable[float]) -> float:
    """
    Calculate the population standard deviation (ddof=0).

    Args:
        values: Non-negative metric values

    Returns:
        Standard deviation, or 0 for fewer than 2 values
    """
    array = _as_array(values)
    if array.size < 2:
        return 0.0
    return float(np.std(array))


def median(values: Iterable[float]) -> float:
    """Median of the sample, or 0 when empty."""
    array = _as_array(values)
    if array.size == 0:
        return 0.0
    return float(np.median(array))


def z_score(value: float, avg: float, std: float, floor: float = SPREAD_FLOOR) -> float:
    """
    Classic z-score of a value against a mean and standard deviation.

    Returns:
        (value - avg) / std, or 0 when std is below the floor
    """
    if std <= floor:
        return 0.0
    return (value - avg) / std


def percentile_rank(value: float, values: Iterable[float]) -> int:
    """
    Percentile of a value once it is inserted into a population.

    Counts population members strictly below the value and divides by the
    population size including the value itself.

    Returns:
        Percentile rank (0-100), or 50 for an empty population
    """
    value = _check_value(value)
    array = _as_array(values)
    if array.size == 0:
        return 50
    below = int(np.sum(array < value))
    return int(round(below / (array.size + 1) * 100))


# =============================================================================
# Log-Domain Statistics
# =============================================================================


def log_transform(value: float) -> float:
    """Map a non-negative metric into the log domain: ln(x + 1)."""
    return math.log1p(_check_value(value))


def exp_transform(log_value: float) -> float:
    """Inverse of log_transform: e^y - 1."""
    return math.expm1(log_value)


def _log_array(values: Iterable[float]) -> np.ndarray:
    return np.log1p(_as_array(values))


def log_mean(values: Iterable[float]) -> float:
    """
    Mean of ln(x + 1) over the sample.

    The result stays in the log domain. Callers that need an original-scale
    value apply exp_transform themselves.

    Returns:
        Log-domain mean, or 0 for an empty sample
    """
    logs = _log_array(values)
    if logs.size == 0:
        return 0.0
    return float(np.mean(logs))


def log_std_dev(values: Iterable[float]) -> float:
    """
    Population standard deviation of ln(x + 1).

    Scale-invariant dispersion: a channel whose videos all land within the
    same order of magnitude scores low (consistent) regardless of its size.

    Returns:
        Log-domain standard deviation, or 0 for fewer than 2 values
    """
    logs = _log_array(values)
    if logs.size < 2:
        return 0.0
    return float(np.std(logs))


# =============================================================================
# Robust (MAD-Based) Scores
# =============================================================================


def median_absolute_deviation(values: Iterable[float]) -> float:
    """Median of |x - median(x)|, or 0 when empty."""
    array = _as_array(values)
    if array.size == 0:
        return 0.0
    center = np.median(array)
    return float(np.median(np.abs(array - center)))


def _center_and_spread(array: np.ndarray, floor: float, mean_ad_fallback: bool) -> Tuple[float, float]:
    if array.size == 0:
        return 0.0, 0.0
    center = float(np.median(array))
    deviations = np.abs(array - center)

    mad = float(np.median(deviations))
    if mad > floor:
        return center, mad / MAD_SCALE

    if mean_ad_fallback:
        mean_ad = float(np.mean(deviations))
        if mean_ad > floor:
            return center, MEAN_AD_SCALE * mean_ad

    return center, 0.0


def robust_center_and_spread(
    values: Iterable[float],
    floor: float = SPREAD_FLOOR,
    mean_ad_fallback: bool = False,
) -> Tuple[float, float]:
    """
    Median and robust standard-deviation equivalent of a sample.

    The spread is MAD / 0.6745, so that (x - median) / spread equals the
    modified z-score. When MAD is below the floor the spread is 0 and every
    score against it is 0, even if a minority of values differ from the
    median. With mean_ad_fallback the scaled mean absolute deviation is used
    in that case instead, and only a constant sample has spread 0.

    Returns:
        Tuple of (median, spread)
    """
    return _center_and_spread(_as_array(values), floor, mean_ad_fallback)


def log_robust_center_and_spread(
    values: Iterable[float],
    floor: float = SPREAD_FLOOR,
    mean_ad_fallback: bool = False,
) -> Tuple[float, float]:
    """robust_center_and_spread computed on ln(x + 1)."""
    return _center_and_spread(_log_array(values), floor, mean_ad_fallback)


def robust_z(value: float, center: float, spread: float) -> float:
    """Score a value against a precomputed (center, spread) pair."""
    if spread <= 0.0:
        return 0.0
    return (value - center) / spread


def modified_z_score(
    value: float,
    values: Iterable[float],
    floor: float = SPREAD_FLOOR,
    mean_ad_fallback: bool = False,
) -> float:
    """
    Modified z-score: 0.6745 * (x - median) / MAD.

    Args:
        value: Value to score
        values: Population sample
        floor: MAD below which the distribution is considered degenerate
        mean_ad_fallback: Score against the scaled mean absolute deviation
            instead of returning 0 when MAD is degenerate

    Returns:
        Robust z-score, 0 for an empty population or one with MAD = 0
    """
    value = _check_value(value)
    center, spread = robust_center_and_spread(values, floor, mean_ad_fallback)
    return robust_z(value, center, spread)


def log_modified_z_score(
    value: float,
    values: Iterable[float],
    floor: float = SPREAD_FLOOR,
    mean_ad_fallback: bool = False,
) -> float:
    """
    Modified z-score computed in the log domain.

    0.6745 * (ln(x+1) - median(ln(V+1))) / MAD(ln(V+1)). This is the preferred
    score for view counts and velocities.
    """
    log_value = log_transform(value)
    center, spread = log_robust_center_and_spread(values, floor, mean_ad_fallback)
    return robust_z(log_value, center, spread)


# =============================================================================
# Niche Normalization
# =============================================================================


def _niche_standing(normalized: float) -> NicheStanding:
    if normalized >= 2:
        return NicheStanding.EXCEPTIONAL
    if normalized >= 1:
        return NicheStanding.ABOVE_AVERAGE
    if normalized >= -1:
        return NicheStanding.TYPICAL
    return NicheStanding.BELOW_AVERAGE


def niche_normalized_velocity(
    velocity: float,
    baseline: Iterable[float],
    floor: float = SPREAD_FLOOR,
) -> NicheVelocity:
    """
    Compare one velocity against a niche-wide baseline sample.

    The baseline is a different population from the channel's own history
    (e.g. all videos returned for a niche search). Comparison happens in the
    log domain so a 10k/day channel and a 100/day channel sit on one scale.

    Args:
        velocity: Views per day of the item being compared
        baseline: Velocities of the niche sample
        floor: Standard deviation below which the z-score is 0

    Returns:
        NicheVelocity with the log-domain z-score, percentile and label
    """
    velocity = _check_value(velocity)
    baseline_values: List[float] = list(baseline)
    logs = _log_array(baseline_values)

    normalized = 0.0
    if logs.size > 0:
        niche_mean = float(np.mean(logs))
        niche_std = float(np.std(logs))
        normalized = z_score(math.log1p(velocity), niche_mean, niche_std, floor)

    return NicheVelocity(
        raw=velocity,
        normalized=normalized,
        percentile=percentile_rank(velocity, baseline_values),
        interpretation=_niche_standing(normalized),
    )
