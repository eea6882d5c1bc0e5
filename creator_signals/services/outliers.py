"""
Outlier Scoring Service - velocity and z-scores for item populations.

Turns caller-supplied items into ScoredItems: age in whole days (floored at
1), velocity (metric per day), a z-score under the selected method and the
outlier/underperformer flags. All population statistics are recomputed from
the sample passed in; nothing is carried between calls.

Methods:
    OutlierMethod.MAD_LOG (default):
        Log-domain modified z-score, robust to the heavy right tail of view
        counts.
    OutlierMethod.ZSCORE:
        Classic (velocity - mean) / std on raw velocities. Extreme items
        inflate the std and can suppress each other; kept for comparison
        with older reports.

Validation happens up front: a negative metric or an unusable timestamp
rejects the whole batch before any statistic is computed.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from creator_signals.core.constants import (
    OUTLIER_Z_THRESHOLD,
    SPREAD_FLOOR,
    UNDERPERFORMER_Z_THRESHOLD,
)
from creator_signals.core.exceptions import InvalidInput
from creator_signals.models import Item, OutlierMethod, ScoredItem, ZScoreReport, ZScoreResult
from creator_signals.services.robust_statistics import (
    log_robust_center_and_spread,
    mean,
    robust_z,
    std_dev,
    z_score,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


# =============================================================================
# Item Preparation
# =============================================================================


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def build_items(raw_items: Iterable[Union[Item, dict]]) -> List[Item]:
    """
    Coerce raw dicts into Items, converting validation failures to InvalidInput.

    Args:
        raw_items: Items or dicts with title, metricValue and timestampCreated

    Raises:
        InvalidInput: If any entry is malformed (e.g. an unparseable timestamp)
    """
    items: List[Item] = []
    for index, raw in enumerate(raw_items):
        if isinstance(raw, Item):
            items.append(raw)
            continue
        try:
            items.append(Item.model_validate(raw))
        except ValidationError as e:
            raise InvalidInput(f"Item {index} is malformed: {e.errors()[0]['msg']}") from e
    return items


def validate_items(items: Sequence[Item]) -> None:
    """
    Reject a batch containing unusable metric values.

    Raises:
        InvalidInput: On the first negative or non-finite metricValue
    """
    for index, item in enumerate(items):
        value = item.metricValue
        if not math.isfinite(value):
            raise InvalidInput(f"Item {index} has a non-finite metricValue")
        if value < 0:
            raise InvalidInput(f"Item {index} has a negative metricValue ({value})")


def age_in_days(created: datetime, as_of: datetime) -> int:
    """
    Whole days between creation and the reference instant, floored at 1.

    Items dated in the future also get an age of 1.
    """
    elapsed = (_as_utc(as_of) - _as_utc(created)).total_seconds()
    return max(1, int(elapsed // SECONDS_PER_DAY))


def velocity(metric_value: float, age_days: int) -> float:
    """Metric per day; the age is floored at 1 day."""
    return metric_value / max(age_days, 1)


def parse_method(method: Union[OutlierMethod, str, None]) -> OutlierMethod:
    """
    Resolve a method name into an OutlierMethod.

    Raises:
        InvalidInput: If the name is not a known method
    """
    if method is None:
        return OutlierMethod.MAD_LOG
    try:
        return OutlierMethod(method)
    except ValueError:
        raise InvalidInput(
            f"Unknown outlier method: {method}. Valid values: {[m.value for m in OutlierMethod]}"
        )


# =============================================================================
# Z-Score Computation
# =============================================================================


def _population_stats(velocities: List[float], method: OutlierMethod, floor: float) -> Tuple[float, float]:
    if method == OutlierMethod.MAD_LOG:
        return log_robust_center_and_spread(velocities, floor)
    return mean(velocities), std_dev(velocities)


def _score(value: float, center: float, spread: float, method: OutlierMethod, floor: float) -> float:
    if method == OutlierMethod.MAD_LOG:
        return robust_z(math.log1p(value), center, spread)
    return z_score(value, center, spread, floor)


def score_value(
    value: float,
    population: Iterable[float],
    method: Union[OutlierMethod, str] = OutlierMethod.MAD_LOG,
    outlier_threshold: float = OUTLIER_Z_THRESHOLD,
    floor: float = SPREAD_FLOOR,
) -> ZScoreResult:
    """
    Score a single value against a population.

    Args:
        value: Value to score (e.g. one video's velocity)
        population: Sample providing the center and spread
        method: Scoring method
        outlier_threshold: z-score above which isOutlier is set
        floor: Spread below which the score is 0

    Returns:
        ZScoreResult with the population center/spread the score used
    """
    method = parse_method(method)
    population = list(population)
    if value < 0 or not math.isfinite(value):
        raise InvalidInput(f"Value must be finite and non-negative, got {value}")

    center, spread = _population_stats(population, method, floor)
    score = _score(value, center, spread, method, floor)
    return ZScoreResult(
        rawValue=value,
        mean=center,
        spread=spread,
        zScore=score,
        isOutlier=score > outlier_threshold,
    )


def compute_z_scores(
    items: Sequence[Item],
    as_of: Optional[datetime] = None,
    method: Union[OutlierMethod, str] = OutlierMethod.MAD_LOG,
    outlier_threshold: float = OUTLIER_Z_THRESHOLD,
    underperformer_threshold: float = UNDERPERFORMER_Z_THRESHOLD,
    floor: float = SPREAD_FLOOR,
) -> ZScoreReport:
    """
    Annotate every item with velocity, z-score and outlier flags.

    Process:
        1. Validate metric values (fail fast)
        2. Derive ageInDays and velocity against as_of
        3. Compute the population center/spread of velocities under the method
        4. Score each item and flag outliers / underperformers

    Args:
        items: Items to score
        as_of: Reference instant for ages. Defaults to now (UTC).
        method: OutlierMethod.MAD_LOG (default) or OutlierMethod.ZSCORE
        outlier_threshold: z-score above which an item is an outlier
        underperformer_threshold: z-score below which an item underperforms
        floor: Spread below which all z-scores are 0

    Returns:
        ZScoreReport with ScoredItems in input order

    Raises:
        InvalidInput: If any metricValue is negative or non-finite, or the
            method is unknown

    Example:
        >>> report = compute_z_scores(items, as_of=datetime(2026, 10, 1, tzinfo=timezone.utc))
        >>> [i.title for i in report.items if i.isOutlier]
    """
    method = parse_method(method)
    validate_items(items)
    as_of = as_of or datetime.now(timezone.utc)

    ages = [age_in_days(item.timestampCreated, as_of) for item in items]
    velocities = [velocity(item.metricValue, age) for item, age in zip(items, ages)]

    center, spread = _population_stats(velocities, method, floor)

    scored: List[ScoredItem] = []
    for item, age, item_velocity in zip(items, ages, velocities):
        score = _score(item_velocity, center, spread, method, floor)
        scored.append(
            ScoredItem(
                title=item.title,
                metricValue=item.metricValue,
                timestampCreated=item.timestampCreated,
                ageInDays=age,
                velocity=item_velocity,
                zScore=score,
                isOutlier=score > outlier_threshold,
                isUnderperformer=score < underperformer_threshold,
            )
        )

    outlier_count = sum(1 for s in scored if s.isOutlier)
    underperformer_count = sum(1 for s in scored if s.isUnderperformer)
    if scored and spread == 0.0:
        logger.warning(
            f"Degenerate velocity distribution across {len(scored)} items; all z-scores are 0"
        )
    logger.info(
        f"Scored {len(scored)} items with {method.value}: "
        f"{outlier_count} outliers, {underperformer_count} underperformers"
    )

    return ZScoreReport(
        method=method,
        items=scored,
        center=center,
        spread=spread,
        outlierCount=outlier_count,
        underperformerCount=underperformer_count,
    )


def split_outliers(scored: Sequence[ScoredItem]) -> Tuple[List[ScoredItem], List[ScoredItem]]:
    """Partition scored items into (outliers, underperformers)."""
    outliers = [s for s in scored if s.isOutlier]
    underperformers = [s for s in scored if s.isUnderperformer]
    return outliers, underperformers
