"""
Pydantic request/response models for the Creator Signals service.

This module provides type-safe data validation and serialization for the
performance-signal engine: input items, z-score annotations, learned title
patterns, lift and confidence-interval results, readability scores, and the
title optimizer's candidates and reports.

Field names are camelCase because these models are the JSON contract consumed
by the report layer.

All models use Pydantic v2 syntax with proper field validation and examples.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from creator_signals.models.enums import (
    MetricBasis,
    NicheStanding,
    OutlierMethod,
    PatternConfidence,
    ProposalStrategy,
    ReadabilityLevel,
)


# Mapping from feature name to its boolean or integer value
FeatureVector = Dict[str, Union[bool, int]]


# =============================================================================
# Input Items
# =============================================================================


class Item(BaseModel):
    """
    A candidate item (typically a video) supplied by the caller.

    Items are immutable once received; derived values are attached by building
    a ScoredItem, never by mutating the Item.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "title": "7 Mistakes Every Beginner Makes",
                "metricValue": 125000,
                "timestampCreated": "2026-09-01T14:00:00Z",
            }
        }
    )

    title: str = Field(
        ...,
        description="Item title as published"
    )
    metricValue: float = Field(
        ...,
        description="Cumulative metric (views). Must be non-negative."
    )
    timestampCreated: datetime = Field(
        ...,
        description="Creation instant. Naive values are interpreted as UTC."
    )


class ScoredItem(BaseModel):
    """
    An Item annotated with derived performance fields.

    velocity = metricValue / ageInDays, with ageInDays floored at 1.
    """
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Item title")
    metricValue: float = Field(..., ge=0.0, description="Cumulative metric (views)")
    timestampCreated: datetime = Field(..., description="Creation instant")
    ageInDays: int = Field(..., ge=1, description="Whole days since creation, at least 1")
    velocity: float = Field(..., ge=0.0, description="Metric per day")
    zScore: float = Field(..., description="Outlier score under the selected method")
    isOutlier: bool = Field(..., description="zScore above the outlier threshold")
    isUnderperformer: bool = Field(..., description="zScore below the underperformer threshold")


class ZScoreResult(BaseModel):
    """
    Single-value z-score with the population statistics it was computed from.

    For OutlierMethod.MAD_LOG, `mean` holds the log-domain median and `spread`
    the log-domain MAD. For OutlierMethod.ZSCORE they are the population mean
    and standard deviation of the raw values.
    """
    rawValue: float = Field(..., description="Value that was scored")
    mean: float = Field(..., description="Population center")
    spread: float = Field(..., ge=0.0, description="Population dispersion")
    zScore: float = Field(..., description="Standardized score")
    isOutlier: bool = Field(..., description="zScore above the outlier threshold")


class ZScoreReport(BaseModel):
    """Per-item z-scores plus the population summary they share."""
    method: OutlierMethod = Field(..., description="Scoring method used")
    items: List[ScoredItem] = Field(default_factory=list)
    center: float = Field(0.0, description="Population center under the method")
    spread: float = Field(0.0, ge=0.0, description="Population dispersion under the method")
    outlierCount: int = Field(0, ge=0)
    underperformerCount: int = Field(0, ge=0)


class NicheVelocity(BaseModel):
    """Velocity of one item normalized against a niche-wide baseline sample."""
    raw: float = Field(..., ge=0.0, description="Velocity being compared")
    normalized: float = Field(..., description="Log-domain z-score against the baseline")
    percentile: int = Field(..., ge=0, le=100, description="Share of baseline strictly below")
    interpretation: NicheStanding = Field(...)


# =============================================================================
# Patterns and Lift
# =============================================================================


class Pattern(BaseModel):
    """
    A title feature that is over-represented among outliers (positive) or
    underperformers (negative).

    weight is a ranking signal, not a probability.
    """
    featureName: str = Field(..., description="Key from the feature vocabulary")
    prevalence: float = Field(..., ge=0.0, le=1.0, description="Share of the subset with the feature")
    averageZScore: float = Field(..., description="Mean z-score of subset items with the feature")
    sampleSize: int = Field(..., ge=0, description="Subset items with the feature")
    weight: int = Field(..., description="Scaled ranking weight")


class PatternSet(BaseModel):
    """Positive and negative patterns, each sorted by weight descending."""
    positive: List[Pattern] = Field(default_factory=list)
    negative: List[Pattern] = Field(default_factory=list)


class LiftResult(BaseModel):
    """
    Lift of a feature with Welch's t-test significance.

    A neutral result (liftRatio=1, pValue=1, significant=False) means there was
    not enough data to say anything.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "averageWithFeature": 5400.0,
                "averageWithoutFeature": 3000.0,
                "liftRatio": 1.8,
                "pValue": 0.032,
                "significant": True,
                "tStatistic": 2.41,
                "degreesOfFreedom": 17.3,
                "sampleSizeWith": 9,
                "sampleSizeWithout": 21,
            }
        }
    )

    averageWithFeature: float = Field(0.0)
    averageWithoutFeature: float = Field(0.0)
    liftRatio: float = Field(1.0, description="avgWith / avgWithout, 1 when undefined")
    pValue: float = Field(1.0, ge=0.0, le=1.0)
    significant: bool = Field(False)
    tStatistic: float = Field(0.0)
    degreesOfFreedom: float = Field(0.0, ge=0.0)
    sampleSizeWith: int = Field(0, ge=0)
    sampleSizeWithout: int = Field(0, ge=0)


class FeatureLift(BaseModel):
    """Lift of one vocabulary feature across an item population."""
    featureName: str = Field(...)
    prevalence: float = Field(..., ge=0.0, le=1.0)
    lift: LiftResult = Field(...)


# =============================================================================
# Readability
# =============================================================================


class CharacterReadability(BaseModel):
    """Syllable-free readability for short strings such as titles."""
    score: int = Field(..., ge=0, le=100)
    avgWordLength: float = Field(0.0, ge=0.0)
    commonWordRatio: float = Field(0.0, ge=0.0, le=1.0)
    vowelDensity: float = Field(0.0, ge=0.0, le=1.0)
    punctuationDensity: float = Field(0.0, ge=0.0, le=1.0)
    longWordRatio: float = Field(0.0, ge=0.0, le=1.0)
    wordCount: int = Field(0, ge=0)
    interpretation: ReadabilityLevel = Field(...)


class FleschKincaidResult(BaseModel):
    """Flesch reading ease and Flesch-Kincaid grade for description-length text."""
    readingEase: float = Field(0.0)
    gradeLevel: float = Field(0.0)
    wordCount: int = Field(0, ge=0)
    sentenceCount: int = Field(0, ge=0)
    syllableCount: int = Field(0, ge=0)
    interpretation: str = Field("Empty")


class MeanDifferenceCI(BaseModel):
    """Difference of two sample means (a - b) with a pooled-variance interval."""
    difference: float = Field(0.0)
    lowerBound: float = Field(0.0)
    upperBound: float = Field(0.0)
    significant: bool = Field(False, description="Interval excludes zero")
    sampleSufficient: bool = Field(False, description="Both samples meet the minimum size")
    confidence: float = Field(0.95, gt=0.0, lt=1.0)


# =============================================================================
# Title Optimizer
# =============================================================================


class ScoreBreakdown(BaseModel):
    """The four bounded sub-scores that make up a title's fitness."""
    patternMatch: float = Field(0.0, ge=0.0, le=40.0)
    saturationPenalty: float = Field(0.0, ge=0.0, le=20.0)
    lengthScore: float = Field(0.0, ge=0.0, le=20.0)
    hookBonus: float = Field(0.0, ge=0.0, le=20.0)


class TitleCandidate(BaseModel):
    """One accepted state of the title random walk."""
    model_config = ConfigDict(frozen=True)

    text: str = Field(...)
    fitnessScore: float = Field(..., ge=0.0, le=100.0)
    scoreBreakdown: ScoreBreakdown = Field(...)
    confidencePercent: int = Field(..., ge=0, le=100, description="Share of positive patterns matched")
    stepIndex: int = Field(..., ge=0, description="Iteration that produced the candidate; 0 is the start")


class OptimizationStatistics(BaseModel):
    """Sample summary behind an optimization run."""
    sampleSize: int = Field(0, ge=0)
    outliersAnalyzed: int = Field(0, ge=0)
    underperformersAnalyzed: int = Field(0, ge=0)
    patternConfidence: PatternConfidence = Field(PatternConfidence.LOW)


class WalkMethodology(BaseModel):
    """Plain-language description of how a walk was run, for report footers."""
    algorithm: str = Field(...)
    fitnessFunction: str = Field(...)
    iterations: int = Field(..., ge=0)
    temperature: float = Field(..., gt=0.0)
    coolingRate: float = Field(..., gt=0.0)
    acceptanceCriteria: str = Field(...)
    limitations: List[str] = Field(default_factory=list)


class OptimizationResult(BaseModel):
    """Output of optimize_title."""
    input: str = Field(..., description="Starting title")
    bestTitle: TitleCandidate = Field(...)
    walkPath: List[TitleCandidate] = Field(
        default_factory=list,
        description="Accepted candidates deduplicated by text, best first"
    )
    acceptedPath: List[TitleCandidate] = Field(
        default_factory=list,
        description="Every accepted candidate in walk order, starting state first"
    )
    patterns: PatternSet = Field(default_factory=PatternSet)
    statistics: OptimizationStatistics = Field(default_factory=OptimizationStatistics)
    methodology: WalkMethodology = Field(...)


# =============================================================================
# API Request Models
# =============================================================================


class ItemsRequest(BaseModel):
    """Body for endpoints that analyze an item population."""
    items: List[Item] = Field(..., description="Items to analyze")
    asOf: Optional[datetime] = Field(
        default=None,
        description="Reference instant for item ages; defaults to now (UTC)"
    )
    method: Optional[OutlierMethod] = Field(
        default=None,
        description="Outlier scoring method; defaults to the configured method"
    )


class FeatureLiftRequest(ItemsRequest):
    """Body for the feature-lift report."""
    basis: MetricBasis = Field(default=MetricBasis.VELOCITY)


class LiftRequest(BaseModel):
    """Body for a single two-group lift test."""
    groupWithFeature: List[float] = Field(default_factory=list)
    groupWithoutFeature: List[float] = Field(default_factory=list)


class ReadabilityRequest(BaseModel):
    """Body for readability scoring."""
    text: str = Field("", description="Text to score")


class MeanDifferenceRequest(BaseModel):
    """Body for a mean-difference confidence interval."""
    sampleA: List[float] = Field(default_factory=list)
    sampleB: List[float] = Field(default_factory=list)
    confidence: Optional[float] = Field(default=None, gt=0.0, lt=1.0)


class NicheVelocityRequest(BaseModel):
    """Body for niche-normalized velocity."""
    velocity: float = Field(...)
    baseline: List[float] = Field(default_factory=list)


class OptimizeTitleRequest(ItemsRequest):
    """Body for the title optimizer."""
    title: str = Field(..., min_length=1, description="Starting title")
    iterations: Optional[int] = Field(
        default=None,
        description="Walk length; defaults to the configured value and is capped at the maximum"
    )
    seed: Optional[int] = Field(default=None, description="Seed for a reproducible walk")
    strategy: ProposalStrategy = Field(default=ProposalStrategy.RANDOM)
