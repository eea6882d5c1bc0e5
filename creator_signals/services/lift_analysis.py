"""
Pattern Lift Analysis Service.

Measures whether items that exhibit a title feature outperform items that do
not. For two partitions of a sample it reports the ratio of their means
(lift) and a two-sided Welch's t-test, so that a large-looking lift coming
from five or ten items can be recognized as plausible noise.

Algorithm Overview:
    liftRatio  = mean(with) / mean(without)
    t          = (mean_with - mean_without) / sqrt(s1^2/n1 + s2^2/n2)
    df         = Welch-Satterthwaite approximation
    pValue     = 2 * P(T_df > |t|)
    significant = pValue < alpha

Welch's variant is used because the two partitions rarely share a variance
or a size. Both the ratio of means and the t statistic are invariant to
rescaling every value by the same positive constant.

Neutral Fallbacks (never raised):
    - Either partition empty: liftRatio=1, pValue=1, significant=False
    - Mean of the "without" partition is 0: liftRatio=1, significant=False
    - A partition smaller than min_group_size, or zero standard error:
      pValue=1, significant=False

Dependencies:
    - numpy: sample means and variances
    - scipy.stats: Student t survival function for the p-value
    - pandas: feature matrix for the vocabulary-wide lift report
"""

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from creator_signals.core.constants import (
    FEATURE_LIFT_MIN_PREVALENCE,
    LIFT_MIN_GROUP_SIZE,
    SIGNIFICANCE_ALPHA,
    SPREAD_FLOOR,
)
from creator_signals.core.exceptions import InvalidInput
from creator_signals.models import FeatureLift, Item, LiftResult, MetricBasis
from creator_signals.services.feature_extraction import BOOLEAN_FEATURES, extract_features
from creator_signals.services.outliers import age_in_days, validate_items, velocity
from creator_signals.services.robust_statistics import _as_array

logger = logging.getLogger(__name__)


# =============================================================================
# Welch's t-test
# =============================================================================


def welch_t_test(
    group_a: np.ndarray,
    group_b: np.ndarray,
    floor: float = SPREAD_FLOOR,
) -> Tuple[float, float, float]:
    """
    Two-sided Welch's t-test for a difference of means.

    Args:
        group_a: First sample (at least 2 values)
        group_b: Second sample (at least 2 values)
        floor: Standard error, relative to the larger absolute group mean,
            below which the test is reported as neutral

    Returns:
        Tuple of (t_statistic, degrees_of_freedom, p_value). A zero standard
        error (both samples constant) yields (0.0, 0.0, 1.0). The floor is
        relative, so rescaling both samples never changes the result.
    """
    n_a, n_b = group_a.size, group_b.size
    var_a = float(np.var(group_a, ddof=1))
    var_b = float(np.var(group_b, ddof=1))

    se_a = var_a / n_a
    se_b = var_b / n_b
    standard_error = math.sqrt(se_a + se_b)
    mean_a = float(np.mean(group_a))
    mean_b = float(np.mean(group_b))
    scale = max(abs(mean_a), abs(mean_b))
    if scale == 0.0 or standard_error <= floor * scale:
        return 0.0, 0.0, 1.0

    t_statistic = (mean_a - mean_b) / standard_error

    # Welch-Satterthwaite degrees of freedom
    denominator = 0.0
    if n_a > 1:
        denominator += se_a ** 2 / (n_a - 1)
    if n_b > 1:
        denominator += se_b ** 2 / (n_b - 1)
    degrees_of_freedom = (se_a + se_b) ** 2 / denominator if denominator > 0 else float(n_a + n_b - 2)

    p_value = float(2.0 * stats.t.sf(abs(t_statistic), degrees_of_freedom))
    return t_statistic, degrees_of_freedom, min(1.0, max(0.0, p_value))


# =============================================================================
# Pattern Lift
# =============================================================================


def calculate_pattern_lift(
    group_with_feature: Iterable[float],
    group_without_feature: Iterable[float],
    alpha: float = SIGNIFICANCE_ALPHA,
    min_group_size: int = LIFT_MIN_GROUP_SIZE,
) -> LiftResult:
    """
    Compare the outcome of items with a feature against items without it.

    Args:
        group_with_feature: Metric values (views or velocity) of items with the feature
        group_without_feature: Metric values of items without the feature
        alpha: Significance level for the p-value
        min_group_size: Minimum size of each group for the t-test to run

    Returns:
        LiftResult. Missing data yields the documented neutral values rather
        than an exception.

    Raises:
        InvalidInput: If any value is negative or non-finite

    Example:
        >>> result = calculate_pattern_lift([900, 1100, 1000], [400, 600, 500])
        >>> result.liftRatio
        2.0
    """
    with_values = _as_array(group_with_feature)
    without_values = _as_array(group_without_feature)
    n_with, n_without = int(with_values.size), int(without_values.size)

    if n_with == 0 or n_without == 0:
        return LiftResult(sampleSizeWith=n_with, sampleSizeWithout=n_without)

    avg_with = float(np.mean(with_values))
    avg_without = float(np.mean(without_values))

    lift_defined = avg_without > 0
    lift_ratio = avg_with / avg_without if lift_defined else 1.0

    t_statistic, degrees_of_freedom, p_value = 0.0, 0.0, 1.0
    if n_with >= min_group_size and n_without >= min_group_size:
        t_statistic, degrees_of_freedom, p_value = welch_t_test(with_values, without_values)

    return LiftResult(
        averageWithFeature=avg_with,
        averageWithoutFeature=avg_without,
        liftRatio=lift_ratio,
        pValue=p_value,
        significant=lift_defined and p_value < alpha,
        tStatistic=t_statistic,
        degreesOfFreedom=degrees_of_freedom,
        sampleSizeWith=n_with,
        sampleSizeWithout=n_without,
    )


# =============================================================================
# Vocabulary-Wide Feature Lift
# =============================================================================


def build_feature_frame(
    items: Sequence[Item],
    as_of: Optional[datetime] = None,
    basis: MetricBasis = MetricBasis.VELOCITY,
) -> pd.DataFrame:
    """
    Build a feature matrix with one row per item.

    Columns are the boolean feature vocabulary plus a `metric` column holding
    velocity or raw views depending on the basis.

    Raises:
        InvalidInput: If any metricValue is negative or non-finite
    """
    validate_items(items)
    as_of = as_of or datetime.now(timezone.utc)

    rows = []
    for item in items:
        features = extract_features(item.title)
        row = {name: bool(features[name]) for name in BOOLEAN_FEATURES}
        if basis == MetricBasis.VELOCITY:
            row['metric'] = velocity(item.metricValue, age_in_days(item.timestampCreated, as_of))
        else:
            row['metric'] = item.metricValue
        rows.append(row)

    return pd.DataFrame(rows, columns=list(BOOLEAN_FEATURES) + ['metric'])


def analyze_feature_lift(
    items: Sequence[Item],
    as_of: Optional[datetime] = None,
    basis: MetricBasis = MetricBasis.VELOCITY,
    alpha: float = SIGNIFICANCE_ALPHA,
    min_prevalence: float = FEATURE_LIFT_MIN_PREVALENCE,
    min_group_size: int = LIFT_MIN_GROUP_SIZE,
) -> List[FeatureLift]:
    """
    Lift of every vocabulary feature across an item population.

    For each boolean feature the population is split by presence and the two
    partitions are compared with calculate_pattern_lift. Features carried by
    fewer than min_prevalence of the items are skipped.

    Args:
        items: Items to analyze
        as_of: Reference instant for velocity ages
        basis: Compare velocity (default) or raw views
        alpha: Significance level
        min_prevalence: Minimum share of items carrying a feature
        min_group_size: Minimum partition size for the t-test

    Returns:
        FeatureLift entries sorted by liftRatio descending (ties keep
        vocabulary order)
    """
    try:
        basis = MetricBasis(basis)
    except ValueError:
        raise InvalidInput(f"Unknown metric basis: {basis}")

    frame = build_feature_frame(items, as_of, basis)
    if frame.empty:
        logger.warning("Feature lift requested for an empty item population")
        return []

    results: List[FeatureLift] = []
    for name in BOOLEAN_FEATURES:
        mask = frame[name]
        prevalence = float(mask.mean())
        if prevalence < min_prevalence or prevalence == 0.0:
            continue

        lift = calculate_pattern_lift(
            frame.loc[mask, 'metric'].tolist(),
            frame.loc[~mask, 'metric'].tolist(),
            alpha=alpha,
            min_group_size=min_group_size,
        )
        results.append(FeatureLift(featureName=name, prevalence=prevalence, lift=lift))

    results.sort(key=lambda r: r.lift.liftRatio, reverse=True)
    logger.info(
        f"Feature lift over {len(frame)} items ({basis.value}): "
        f"{len(results)} features reported, "
        f"{sum(1 for r in results if r.lift.significant)} significant"
    )
    return results
