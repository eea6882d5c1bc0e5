"""
Named policy constants for the Creator Signals engine.

Every threshold used by the statistics, pattern learning and optimizer
services is declared here exactly once. Services use these values as
keyword-argument defaults and ``creator_signals.core.config.Settings`` uses
them as field defaults, so an override through the environment and an
override through a direct function call land on the same knob.

This module has no imports so that it can be loaded from anywhere in the
package without creating import cycles.
"""

# =============================================================================
# Outlier Classification
# =============================================================================

# z-score above which an item counts as an outlier (exceptional performer)
OUTLIER_Z_THRESHOLD: float = 1.5

# z-score below which an item counts as an underperformer
UNDERPERFORMER_Z_THRESHOLD: float = -1.0

# Consistency constant that makes MAD comparable to a standard deviation
# for normally distributed data
MAD_SCALE: float = 0.6745

# Consistency constant for the mean absolute deviation fallback
# (sqrt(pi / 2)), used when more than half the sample shares one value
MEAN_AD_SCALE: float = 1.2533

# Spreads below this value are treated as zero
SPREAD_FLOOR: float = 1e-9

# Default outlier scoring method ("mad_log" or "zscore")
DEFAULT_OUTLIER_METHOD: str = "mad_log"

# =============================================================================
# Lift and Significance
# =============================================================================

# p-value below which a lift counts as significant
SIGNIFICANCE_ALPHA: float = 0.1

# Minimum size of each partition for the t-test to run
LIFT_MIN_GROUP_SIZE: int = 2

# Minimum prevalence for a feature to appear in a feature-lift report
FEATURE_LIFT_MIN_PREVALENCE: float = 0.1

# =============================================================================
# Confidence Intervals
# =============================================================================

CI_CONFIDENCE: float = 0.95

# Per-sample size below which an interval is flagged as untrustworthy
CI_MIN_SAMPLE_SIZE: int = 5

# =============================================================================
# Pattern Learning
# =============================================================================

# Occurrences required inside the outlier / underperformer subset
PATTERN_MIN_SUBSET_OCCURRENCES: int = 2

# Occurrences required across the whole population
PATTERN_MIN_POPULATION_OCCURRENCES: int = 3

PATTERN_MIN_POSITIVE_PREVALENCE: float = 0.2
PATTERN_MIN_NEGATIVE_PREVALENCE: float = 0.3

# weight = round(prevalence * averageZScore * POSITIVE_WEIGHT_SCALE)
POSITIVE_WEIGHT_SCALE: float = 10.0

# weight = round(prevalence * NEGATIVE_WEIGHT_SCALE)
NEGATIVE_WEIGHT_SCALE: float = 5.0

# Number of positive / negative patterns included in an optimizer report
PATTERN_REPORT_LIMIT: int = 5

# Number of high-frequency outlier words offered to the mutator
TOP_WORD_LIMIT: int = 10

# Word-count window used when no sample is available to learn one
DEFAULT_WORD_COUNT_WINDOW: tuple = (6, 10)

# Outlier counts at which pattern confidence is labelled high / medium
HIGH_CONFIDENCE_OUTLIERS: int = 10
MEDIUM_CONFIDENCE_OUTLIERS: int = 5

# =============================================================================
# Title Optimizer
# =============================================================================

WALK_TEMPERATURE: float = 0.3

# Geometric cooling factor applied per iteration; 1.0 keeps the temperature
# fixed
WALK_COOLING_RATE: float = 1.0

WALK_DEFAULT_ITERATIONS: int = 20
WALK_MAX_ITERATIONS: int = 50

# Character window a mutated title must fall into to be scored
MUTATION_MIN_CHARS: int = 20
MUTATION_MAX_CHARS: int = 80

# Titles with more words than this get a "drop the last two words" mutation
MUTATION_TRIM_WORD_COUNT: int = 6

# Number of deduplicated alternatives returned from a walk
WALK_TOP_ALTERNATIVES: int = 8

# Fitness sub-score caps
PATTERN_MATCH_CAP: float = 40.0
SATURATION_PENALTY_CAP: float = 20.0
LENGTH_SCORE_MAX: float = 20.0
HOOK_BONUS_CAP: float = 20.0

# Character counts outside this window cost length points
TARGET_CHAR_MIN: int = 25
TARGET_CHAR_MAX: int = 60
