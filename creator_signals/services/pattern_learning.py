"""
Title Pattern Learning Service.

Learns which title features go with exceptional performance and which go
with underperformance in a caller-supplied item population.

Process:
    1. Score every item (velocity z-score, MAD-log by default)
    2. Partition into outliers (z > 1.5) and underperformers (z < -1.0)
    3. Tag every title with the boolean feature vocabulary
    4. For each feature, compare its frequency inside each subset against
       the minimum occurrence and prevalence gates
    5. Weight and rank the surviving features

Pattern Rules:
    Positive: >= 2 outliers and >= 3 items overall carry the feature, and it
        appears in >= 20% of outliers.
        weight = round(prevalence * averageZScore * 10)
    Negative: same occurrence gates against underperformers, prevalence
        >= 30%.
        weight = round(prevalence * 5), a saturation magnitude

Patterns are correlations observed in one sample, not causal levers.

Dependencies:
    - pandas: feature matrix with z-score and subset columns
"""

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd

from creator_signals.core.constants import (
    DEFAULT_WORD_COUNT_WINDOW,
    HIGH_CONFIDENCE_OUTLIERS,
    MEDIUM_CONFIDENCE_OUTLIERS,
    NEGATIVE_WEIGHT_SCALE,
    OUTLIER_Z_THRESHOLD,
    PATTERN_MIN_NEGATIVE_PREVALENCE,
    PATTERN_MIN_POPULATION_OCCURRENCES,
    PATTERN_MIN_POSITIVE_PREVALENCE,
    PATTERN_MIN_SUBSET_OCCURRENCES,
    POSITIVE_WEIGHT_SCALE,
    TOP_WORD_LIMIT,
    UNDERPERFORMER_Z_THRESHOLD,
)
from creator_signals.models import (
    Item,
    OutlierMethod,
    Pattern,
    PatternConfidence,
    PatternSet,
    ScoredItem,
)
from creator_signals.services.feature_extraction import BOOLEAN_FEATURES, extract_features
from creator_signals.services.outliers import compute_z_scores, split_outliers

logger = logging.getLogger(__name__)


# Words skipped when ranking the vocabulary of outlier titles
STOP_WORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by',
    'is', 'it', 'this', 'that', 'i', 'you', 'my', 'your', 'how', 'what', 'why',
])

_NON_LOWER_LETTERS = re.compile(r'[^a-z]')


@dataclass
class LearnedPatterns:
    """
    Everything the title optimizer needs from one population.

    Attributes:
        patterns: Positive and negative patterns, each sorted by weight
        outliers: Scored items above the outlier threshold
        underperformers: Scored items below the underperformer threshold
        sample_size: Number of items in the population
        outlier_average_z: Mean z-score of the outliers (0 with no outliers)
        word_count_window: (min, max) word count observed among outliers
        top_words: Most frequent non-stop words in outlier titles
        confidence: Data-quality label driven by outlier count
    """
    patterns: PatternSet
    outliers: List[ScoredItem] = field(default_factory=list)
    underperformers: List[ScoredItem] = field(default_factory=list)
    sample_size: int = 0
    outlier_average_z: float = 0.0
    word_count_window: Tuple[int, int] = DEFAULT_WORD_COUNT_WINDOW
    top_words: List[str] = field(default_factory=list)
    confidence: PatternConfidence = PatternConfidence.LOW


# =============================================================================
# Feature Matrix
# =============================================================================


def build_pattern_frame(scored: Sequence[ScoredItem]) -> pd.DataFrame:
    """
    One row per scored item: boolean features plus zScore and subset flags.
    """
    rows = []
    for item in scored:
        features = extract_features(item.title)
        row = {name: bool(features[name]) for name in BOOLEAN_FEATURES}
        row['wordCount'] = features['wordCount']
        row['zScore'] = item.zScore
        row['isOutlier'] = item.isOutlier
        row['isUnderperformer'] = item.isUnderperformer
        rows.append(row)

    columns = list(BOOLEAN_FEATURES) + ['wordCount', 'zScore', 'isOutlier', 'isUnderperformer']
    return pd.DataFrame(rows, columns=columns)


def _subset_patterns(
    frame: pd.DataFrame,
    subset_column: str,
    min_subset_occurrences: int,
    min_population_occurrences: int,
    min_prevalence: float,
) -> List[Tuple[str, float, float, int]]:
    """(feature, prevalence, averageZScore, sampleSize) for features passing the gates."""
    subset = frame[frame[subset_column]]
    if subset.empty:
        return []

    found = []
    for name in BOOLEAN_FEATURES:
        with_feature = subset[subset[name]]
        subset_count = len(with_feature)
        population_count = int(frame[name].sum())
        if subset_count < min_subset_occurrences or population_count < min_population_occurrences:
            continue

        prevalence = subset_count / len(subset)
        if prevalence < min_prevalence:
            continue
        found.append((name, prevalence, float(with_feature['zScore'].mean()), subset_count))
    return found


def _by_weight(patterns: List[Pattern]) -> List[Pattern]:
    # sorted() is stable, so equal weights keep vocabulary order
    return sorted(patterns, key=lambda p: p.weight, reverse=True)


# =============================================================================
# Pattern Learning
# =============================================================================


def learn_patterns_from_scored(
    scored: Sequence[ScoredItem],
    min_subset_occurrences: int = PATTERN_MIN_SUBSET_OCCURRENCES,
    min_population_occurrences: int = PATTERN_MIN_POPULATION_OCCURRENCES,
    min_positive_prevalence: float = PATTERN_MIN_POSITIVE_PREVALENCE,
    min_negative_prevalence: float = PATTERN_MIN_NEGATIVE_PREVALENCE,
    positive_weight_scale: float = POSITIVE_WEIGHT_SCALE,
    negative_weight_scale: float = NEGATIVE_WEIGHT_SCALE,
) -> PatternSet:
    """
    Derive positive and negative patterns from already-scored items.

    The outlier / underperformer partition is read from the isOutlier and
    isUnderperformer flags, so thresholds are whatever the scoring step used.
    """
    frame = build_pattern_frame(scored)
    if frame.empty:
        return PatternSet()

    positive = [
        Pattern(
            featureName=name,
            prevalence=prevalence,
            averageZScore=avg_z,
            sampleSize=count,
            weight=int(round(prevalence * avg_z * positive_weight_scale)),
        )
        for name, prevalence, avg_z, count in _subset_patterns(
            frame, 'isOutlier', min_subset_occurrences, min_population_occurrences, min_positive_prevalence
        )
    ]
    negative = [
        Pattern(
            featureName=name,
            prevalence=prevalence,
            averageZScore=avg_z,
            sampleSize=count,
            weight=int(round(prevalence * negative_weight_scale)),
        )
        for name, prevalence, avg_z, count in _subset_patterns(
            frame, 'isUnderperformer', min_subset_occurrences, min_population_occurrences, min_negative_prevalence
        )
    ]
    return PatternSet(positive=_by_weight(positive), negative=_by_weight(negative))


def learn_patterns(
    items: Sequence[Item],
    as_of: Optional[datetime] = None,
    method: Union[OutlierMethod, str] = OutlierMethod.MAD_LOG,
    outlier_threshold: float = OUTLIER_Z_THRESHOLD,
    underperformer_threshold: float = UNDERPERFORMER_Z_THRESHOLD,
    **gates,
) -> PatternSet:
    """
    Score items and derive weighted title patterns.

    Args:
        items: Item population
        as_of: Reference instant for ages (defaults to now, UTC)
        method: Outlier scoring method
        outlier_threshold: z-score above which an item is an outlier
        underperformer_threshold: z-score below which an item underperforms
        **gates: Occurrence, prevalence and weight-scale overrides accepted
            by learn_patterns_from_scored

    Returns:
        PatternSet with both lists sorted by weight descending. No outliers
        (or no underperformers) simply yields an empty list on that side.

    Raises:
        InvalidInput: If an item has a negative or non-finite metricValue
    """
    report = compute_z_scores(
        items,
        as_of=as_of,
        method=method,
        outlier_threshold=outlier_threshold,
        underperformer_threshold=underperformer_threshold,
    )
    patterns = learn_patterns_from_scored(report.items, **gates)
    logger.info(
        f"Learned {len(patterns.positive)} positive and {len(patterns.negative)} negative patterns "
        f"from {len(report.items)} items ({report.outlierCount} outliers)"
    )
    return patterns


# =============================================================================
# Vocabulary and Length Signals
# =============================================================================


def top_outlier_words(scored: Sequence[ScoredItem], limit: int = TOP_WORD_LIMIT) -> List[str]:
    """
    Most frequent words across outlier titles.

    Words are lowercased and stripped to letters; stop words and words of
    two letters or fewer are skipped. Ties keep first-seen order.
    """
    counts: Counter = Counter()
    for item in scored:
        if not item.isOutlier:
            continue
        for word in item.title.lower().split():
            clean = _NON_LOWER_LETTERS.sub('', word)
            if len(clean) > 2 and clean not in STOP_WORDS:
                counts[clean] += 1
    return [word for word, _ in counts.most_common(limit)]


def optimal_word_count_window(scored: Sequence[ScoredItem]) -> Tuple[int, int]:
    """
    Word-count window centered on the outliers' average title length.

    Returns (max(3, floor(avg - 2)), ceil(avg + 2)). With no outliers the
    whole population is used; with no items at all, DEFAULT_WORD_COUNT_WINDOW.
    """
    outliers = [s for s in scored if s.isOutlier]
    source = outliers or list(scored)
    if not source:
        return DEFAULT_WORD_COUNT_WINDOW

    average = sum(len(s.title.split()) for s in source) / len(source)
    return max(3, math.floor(average - 2)), math.ceil(average + 2)


def pattern_confidence(outlier_count: int) -> PatternConfidence:
    """Label how much to trust learned patterns, by number of outliers."""
    if outlier_count >= HIGH_CONFIDENCE_OUTLIERS:
        return PatternConfidence.HIGH
    if outlier_count >= MEDIUM_CONFIDENCE_OUTLIERS:
        return PatternConfidence.MEDIUM
    return PatternConfidence.LOW


def learn_title_model(
    items: Sequence[Item],
    as_of: Optional[datetime] = None,
    method: Union[OutlierMethod, str] = OutlierMethod.MAD_LOG,
    outlier_threshold: float = OUTLIER_Z_THRESHOLD,
    underperformer_threshold: float = UNDERPERFORMER_Z_THRESHOLD,
    top_word_limit: int = TOP_WORD_LIMIT,
    **gates,
) -> LearnedPatterns:
    """
    Score a population once and collect every signal the optimizer uses.

    Raises:
        InvalidInput: If an item has a negative or non-finite metricValue
    """
    report = compute_z_scores(
        items,
        as_of=as_of,
        method=method,
        outlier_threshold=outlier_threshold,
        underperformer_threshold=underperformer_threshold,
    )
    outliers, underperformers = split_outliers(report.items)
    patterns = learn_patterns_from_scored(report.items, **gates)

    if not outliers:
        logger.warning(
            f"No outliers among {len(report.items)} items; "
            f"optimizer will rely on length and hook scores only"
        )

    outlier_average_z = (
        sum(s.zScore for s in outliers) / len(outliers) if outliers else 0.0
    )
    return LearnedPatterns(
        patterns=patterns,
        outliers=outliers,
        underperformers=underperformers,
        sample_size=len(report.items),
        outlier_average_z=outlier_average_z,
        word_count_window=optimal_word_count_window(report.items),
        top_words=top_outlier_words(report.items, limit=top_word_limit),
        confidence=pattern_confidence(len(outliers)),
    )
