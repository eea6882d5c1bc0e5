"""
Enumeration definitions for the Creator Signals service.

All enums inherit from both `str` and `Enum` to ensure JSON serialization compatibility
with Pydantic models, enabling automatic serialization/deserialization in API responses.
"""

from enum import Enum


class OutlierMethod(str, Enum):
    """
    Scoring formula used to classify items as outliers or underperformers.

    - MAD_LOG: modified z-score on ln(velocity + 1) using the median absolute
      deviation. Resists distortion from the heavy right tail of view counts
      and is the default everywhere.
    - ZSCORE: classic (velocity - mean) / population std. Kept for comparison
      with reports produced by older call sites.
    """
    MAD_LOG = "mad_log"
    ZSCORE = "zscore"


class MetricBasis(str, Enum):
    """
    Per-item metric compared by the feature-lift report.

    - VELOCITY: views per day since creation (age-normalized)
    - VIEWS: raw cumulative view count
    """
    VELOCITY = "velocity"
    VIEWS = "views"


class ProposalStrategy(str, Enum):
    """
    How the random walk picks a proposal from the surviving mutations.

    - RANDOM: sample one mutation uniformly at random and score it
    - BEST_OF_BATCH: score every mutation and propose the highest-scoring one.
      Ties go to the mutation generated first, so catalogue order decides
      (list-count prefixes come before question, year and hook edits).
    """
    RANDOM = "random"
    BEST_OF_BATCH = "best_of_batch"


class PatternConfidence(str, Enum):
    """
    Data-quality label attached to learned patterns, driven by outlier count.

    - HIGH: 10 or more outliers
    - MEDIUM: 5 to 9 outliers
    - LOW: fewer than 5 outliers
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReadabilityLevel(str, Enum):
    """Interpretation bands for the character-level readability score."""
    EMPTY = "Empty"
    VERY_ACCESSIBLE = "Very accessible"
    ACCESSIBLE = "Accessible"
    MODERATE = "Moderate"
    COMPLEX = "Complex vocabulary"


class NicheStanding(str, Enum):
    """Interpretation bands for a niche-normalized velocity z-score."""
    EXCEPTIONAL = "Exceptional for this niche"
    ABOVE_AVERAGE = "Above average for niche"
    TYPICAL = "Typical for niche"
    BELOW_AVERAGE = "Below niche average"
