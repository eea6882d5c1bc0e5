"""
Creator Signals Services Module

This module contains the analysis engine. Every service is synchronous,
stateless and free of I/O: it takes caller-supplied items or samples and
recomputes all statistics from them on each call.

Services:
- robust_statistics: mean/std, log-domain statistics, MAD, z-scores, niche velocity
- outliers: item validation, velocity and per-item outlier scoring
- lift_analysis: lift ratio with Welch's t-test, vocabulary-wide feature lift
- readability: character readability, Flesch-Kincaid, mean-difference intervals
- feature_extraction: versioned title feature vocabulary
- pattern_learning: weighted positive/negative title patterns
- title_optimizer: Metropolis-Hastings title random walk

All services are designed to be consumed by the API layer
(creator_signals/api/) or imported directly as a library.
"""

# =============================================================================
# Robust Statistics Exports
# Descriptive statistics shared by every other service
# =============================================================================

from creator_signals.services.robust_statistics import (
    mean,
    std_dev,
    median,
    z_score,
    percentile_rank,
    log_transform,
    exp_transform,
    log_mean,
    log_std_dev,
    median_absolute_deviation,
    robust_center_and_spread,
    log_robust_center_and_spread,
    modified_z_score,
    log_modified_z_score,
    niche_normalized_velocity,
)

# =============================================================================
# Outlier Scoring Exports
# Velocity derivation and per-item z-scores under a selectable method
# =============================================================================

from creator_signals.services.outliers import (
    build_items,
    validate_items,
    age_in_days,
    velocity,
    parse_method,
    score_value,
    compute_z_scores,
    split_outliers,
)

# =============================================================================
# Feature Extraction Exports
# Fixed title feature vocabulary
# =============================================================================

from creator_signals.services.feature_extraction import (
    extract_features,
    matched_features,
    BOOLEAN_FEATURES,
    NUMERIC_FEATURES,
    FEATURE_VOCABULARY,
    FEATURE_VOCABULARY_VERSION,
)

# =============================================================================
# Lift Analysis Exports
# Feature lift with significance testing
# =============================================================================

from creator_signals.services.lift_analysis import (
    welch_t_test,
    calculate_pattern_lift,
    build_feature_frame,
    analyze_feature_lift,
)

# =============================================================================
# Readability Exports
# Title and description readability plus the mean-difference comparator
# =============================================================================

from creator_signals.services.readability import (
    character_readability,
    count_syllables,
    flesch_kincaid,
    mean_difference_ci,
    compare_readability,
)

# =============================================================================
# Pattern Learning Exports
# Weighted title patterns learned from outliers and underperformers
# =============================================================================

from creator_signals.services.pattern_learning import (
    LearnedPatterns,
    learn_patterns,
    learn_patterns_from_scored,
    learn_title_model,
    top_outlier_words,
    optimal_word_count_window,
    pattern_confidence,
)

# =============================================================================
# Title Optimizer Exports
# Mutation catalogue, fitness function and random walk
# =============================================================================

from creator_signals.services.title_optimizer import (
    HOOK_WORDS,
    TitleMutator,
    TitleFitness,
    RandomWalkOptimizer,
    WalkOutcome,
    resolve_iterations,
    top_alternatives,
    optimize_title,
)

__all__ = [
    # Robust statistics
    "mean",
    "std_dev",
    "median",
    "z_score",
    "percentile_rank",
    "log_transform",
    "exp_transform",
    "log_mean",
    "log_std_dev",
    "median_absolute_deviation",
    "robust_center_and_spread",
    "log_robust_center_and_spread",
    "modified_z_score",
    "log_modified_z_score",
    "niche_normalized_velocity",
    # Outlier scoring
    "build_items",
    "validate_items",
    "age_in_days",
    "velocity",
    "parse_method",
    "score_value",
    "compute_z_scores",
    "split_outliers",
    # Feature extraction
    "extract_features",
    "matched_features",
    "BOOLEAN_FEATURES",
    "NUMERIC_FEATURES",
    "FEATURE_VOCABULARY",
    "FEATURE_VOCABULARY_VERSION",
    # Lift analysis
    "welch_t_test",
    "calculate_pattern_lift",
    "build_feature_frame",
    "analyze_feature_lift",
    # Readability
    "character_readability",
    "count_syllables",
    "flesch_kincaid",
    "mean_difference_ci",
    "compare_readability",
    # Pattern learning
    "LearnedPatterns",
    "learn_patterns",
    "learn_patterns_from_scored",
    "learn_title_model",
    "top_outlier_words",
    "optimal_word_count_window",
    "pattern_confidence",
    # Title optimizer
    "HOOK_WORDS",
    "TitleMutator",
    "TitleFitness",
    "RandomWalkOptimizer",
    "WalkOutcome",
    "resolve_iterations",
    "top_alternatives",
    "optimize_title",
]
