"""
Package initialization file for Creator Signals models.

This module exports all Pydantic schemas and enumerations from schemas.py and enums.py,
making them importable from creator_signals.models directly.

Usage:
    from creator_signals.models import (
        Item,
        ScoredItem,
        Pattern,
        LiftResult,
        OutlierMethod,
        # ... etc
    )
"""

# =============================================================================
# Enums - Import and re-export all enumerations from enums.py
# =============================================================================

from creator_signals.models.enums import (
    MetricBasis,
    NicheStanding,
    OutlierMethod,
    PatternConfidence,
    ProposalStrategy,
    ReadabilityLevel,
)

# =============================================================================
# Schemas - Import and re-export all Pydantic models from schemas.py
# =============================================================================

from creator_signals.models.schemas import (
    # Input items and z-scores
    FeatureVector,
    Item,
    ScoredItem,
    ZScoreResult,
    ZScoreReport,
    NicheVelocity,
    # Patterns and lift
    Pattern,
    PatternSet,
    LiftResult,
    FeatureLift,
    # Readability
    CharacterReadability,
    FleschKincaidResult,
    MeanDifferenceCI,
    # Title optimizer
    ScoreBreakdown,
    TitleCandidate,
    OptimizationStatistics,
    WalkMethodology,
    OptimizationResult,
    # API requests
    ItemsRequest,
    FeatureLiftRequest,
    LiftRequest,
    ReadabilityRequest,
    MeanDifferenceRequest,
    NicheVelocityRequest,
    OptimizeTitleRequest,
)

__all__ = [
    # Enums
    "MetricBasis",
    "NicheStanding",
    "OutlierMethod",
    "PatternConfidence",
    "ProposalStrategy",
    "ReadabilityLevel",
    # Input items and z-scores
    "FeatureVector",
    "Item",
    "ScoredItem",
    "ZScoreResult",
    "ZScoreReport",
    "NicheVelocity",
    # Patterns and lift
    "Pattern",
    "PatternSet",
    "LiftResult",
    "FeatureLift",
    # Readability
    "CharacterReadability",
    "FleschKincaidResult",
    "MeanDifferenceCI",
    # Title optimizer
    "ScoreBreakdown",
    "TitleCandidate",
    "OptimizationStatistics",
    "WalkMethodology",
    "OptimizationResult",
    # API requests
    "ItemsRequest",
    "FeatureLiftRequest",
    "LiftRequest",
    "ReadabilityRequest",
    "MeanDifferenceRequest",
    "NicheVelocityRequest",
    "OptimizeTitleRequest",
]
