"""
FastAPI router module for the performance-signal analysis endpoints.

Every endpoint takes its full input in the JSON body (items, samples or
text) and recomputes all statistics from it; nothing is stored between
requests. Policy values (thresholds, alpha, walk temperature, iteration
cap) come from the injected Settings so a deployment can tune them through
the environment.

Endpoints:
- POST /analysis/z-scores: per-item velocity, z-score and outlier flags
- POST /analysis/patterns: weighted positive/negative title patterns
- POST /analysis/lift: lift and Welch's t-test for two metric groups
- POST /analysis/feature-lift: lift of every title feature in a population
- POST /analysis/readability: character-level title readability
- POST /analysis/flesch-kincaid: reading ease and grade for long text
- POST /analysis/mean-difference: confidence interval on a mean difference
- POST /analysis/niche-velocity: velocity normalized against a niche baseline
- POST /analysis/optimize-title: Metropolis-Hastings title random walk

Error Mapping:
- InvalidInput (negative metrics, bad timestamps, negative iterations): 400
- Optimizer exceeding OPTIMIZE_TIMEOUT_SECONDS: 504
- Anything else: logged and returned as 500
"""

import asyncio
import logging
import time
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from creator_signals.core.config import Settings
from creator_signals.core.dependencies import SettingsDep, build_random_source
from creator_signals.core.exceptions import InvalidInput
from creator_signals.models import (
    CharacterReadability,
    FeatureLift,
    FeatureLiftRequest,
    FleschKincaidResult,
    ItemsRequest,
    LiftRequest,
    LiftResult,
    MeanDifferenceCI,
    MeanDifferenceRequest,
    NicheVelocity,
    NicheVelocityRequest,
    OptimizationResult,
    OptimizeTitleRequest,
    OutlierMethod,
    PatternSet,
    ReadabilityRequest,
    ZScoreReport,
)
from creator_signals.services.lift_analysis import analyze_feature_lift, calculate_pattern_lift
from creator_signals.services.outliers import compute_z_scores, parse_method
from creator_signals.services.pattern_learning import learn_patterns
from creator_signals.services.readability import (
    character_readability,
    flesch_kincaid,
    mean_difference_ci,
)
from creator_signals.services.robust_statistics import niche_normalized_velocity
from creator_signals.services.title_optimizer import optimize_title

logger = logging.getLogger(__name__)


# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/analysis",
    tags=["analysis"],
    responses={
        400: {"description": "Invalid input (negative metric, malformed timestamp, bad parameter)"},
        422: {"description": "Validation error in request"},
        500: {"description": "Internal server error during processing"},
    },
)


def _method(request: ItemsRequest, settings: Settings) -> OutlierMethod:
    return parse_method(request.method or settings.outlier_method)


def _pattern_gates(settings: Settings) -> Dict[str, Any]:
    return {
        "min_subset_occurrences": settings.pattern_min_subset_occurrences,
        "min_population_occurrences": settings.pattern_min_population_occurrences,
        "min_positive_prevalence": settings.pattern_min_positive_prevalence,
        "min_negative_prevalence": settings.pattern_min_negative_prevalence,
        "positive_weight_scale": settings.positive_weight_scale,
        "negative_weight_scale": settings.negative_weight_scale,
    }


def _bad_request(e: InvalidInput) -> HTTPException:
    return HTTPException(status_code=400, detail=f"Invalid input: {str(e)}")


# =============================================================================
# POST /analysis/z-scores
# =============================================================================


@router.post("/z-scores", response_model=ZScoreReport)
async def score_items(request: ItemsRequest, settings: SettingsDep) -> ZScoreReport:
    """
    Annotate every item with age, velocity, z-score and outlier flags.

    The population statistics come from the items in this request only.

    Raises:
        HTTPException 400: If an item has a negative or non-finite metricValue
        HTTPException 500: If scoring fails unexpectedly
    """
    try:
        return compute_z_scores(
            request.items,
            as_of=request.asOf,
            method=_method(request, settings),
            outlier_threshold=settings.outlier_z_threshold,
            underperformer_threshold=settings.underperformer_z_threshold,
        )
    except InvalidInput as e:
        raise _bad_request(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error scoring {len(request.items)} items: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error computing z-scores: {str(e)}")


# =============================================================================
# POST /analysis/patterns
# =============================================================================


@router.post("/patterns", response_model=PatternSet)
async def learn_title_patterns(request: ItemsRequest, settings: SettingsDep) -> PatternSet:
    """
    Learn weighted title patterns from outliers and underperformers.

    Returns:
        PatternSet with positive and negative patterns sorted by weight
    """
    try:
        return learn_patterns(
            request.items,
            as_of=request.asOf,
            method=_method(request, settings),
            outlier_threshold=settings.outlier_z_threshold,
            underperformer_threshold=settings.underperformer_z_threshold,
            **_pattern_gates(settings),
        )
    except InvalidInput as e:
        raise _bad_request(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error learning patterns: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error learning patterns: {str(e)}")


# =============================================================================
# POST /analysis/lift and /analysis/feature-lift
# =============================================================================


@router.post("/lift", response_model=LiftResult)
async def pattern_lift(request: LiftRequest, settings: SettingsDep) -> LiftResult:
    """
    Lift ratio and Welch's t-test between items with and without a feature.

    Empty or undersized groups return the neutral result instead of an error.
    """
    try:
        return calculate_pattern_lift(
            request.groupWithFeature,
            request.groupWithoutFeature,
            alpha=settings.significance_alpha,
            min_group_size=settings.lift_min_group_size,
        )
    except InvalidInput as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing lift: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error computing lift: {str(e)}")


@router.post("/feature-lift", response_model=List[FeatureLift])
async def feature_lift(request: FeatureLiftRequest, settings: SettingsDep) -> List[FeatureLift]:
    """Lift of every title feature that clears the minimum prevalence."""
    try:
        return analyze_feature_lift(
            request.items,
            as_of=request.asOf,
            basis=request.basis,
            alpha=settings.significance_alpha,
            min_prevalence=settings.feature_lift_min_prevalence,
            min_group_size=settings.lift_min_group_size,
        )
    except InvalidInput as e:
        raise _bad_request(e)
    except Exception as e:
        logger.exception(f"Error computing feature lift: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error computing feature lift: {str(e)}")


# =============================================================================
# Readability and Interval Endpoints
# =============================================================================


@router.post("/readability", response_model=CharacterReadability)
async def title_readability(request: ReadabilityRequest) -> CharacterReadability:
    """Character-level readability (0-100) for a title or other short string."""
    return character_readability(request.text)


@router.post("/flesch-kincaid", response_model=FleschKincaidResult)
async def description_readability(request: ReadabilityRequest) -> FleschKincaidResult:
    """Flesch reading ease and grade level for description-length text."""
    return flesch_kincaid(request.text)


@router.post("/mean-difference", response_model=MeanDifferenceCI)
async def mean_difference(request: MeanDifferenceRequest, settings: SettingsDep) -> MeanDifferenceCI:
    """Confidence interval on mean(sampleA) - mean(sampleB)."""
    try:
        return mean_difference_ci(
            request.sampleA,
            request.sampleB,
            confidence=request.confidence or settings.ci_confidence,
            min_sample_size=settings.ci_min_sample_size,
        )
    except InvalidInput as e:
        raise _bad_request(e)


@router.post("/niche-velocity", response_model=NicheVelocity)
async def niche_velocity(request: NicheVelocityRequest) -> NicheVelocity:
    """Velocity compared against a niche-wide baseline in the log domain."""
    try:
        return niche_normalized_velocity(request.velocity, request.baseline)
    except InvalidInput as e:
        raise _bad_request(e)


# =============================================================================
# POST /analysis/optimize-title
# =============================================================================


@router.post("/optimize-title", response_model=OptimizationResult)
async def optimize(request: OptimizeTitleRequest, settings: SettingsDep) -> OptimizationResult:
    """
    Run the title random walk against patterns learned from the items.

    The walk is CPU-bound, so it runs in a worker thread bounded by
    OPTIMIZE_TIMEOUT_SECONDS. A thread cannot be cancelled, so the same
    budget is passed to the walk as a deadline: after a 504 the worker
    finishes its current step and stops instead of running to completion.
    Each request gets its own random generator, seeded from the request seed
    or the configured RANDOM_SEED.

    Raises:
        HTTPException 400: Negative iterations or invalid items
        HTTPException 504: Walk exceeded the time budget
        HTTPException 500: Unexpected failure
    """
    try:
        rng = build_random_source(request.seed, settings)
        deadline = time.monotonic() + settings.optimize_timeout_seconds
        return await asyncio.wait_for(
            asyncio.to_thread(
                optimize_title,
                request.title,
                request.items,
                iterations=request.iterations,
                rng=rng,
                as_of=request.asOf,
                method=_method(request, settings),
                strategy=request.strategy,
                temperature=settings.walk_temperature,
                cooling_rate=settings.walk_cooling_rate,
                default_iterations=settings.walk_default_iterations,
                max_iterations=settings.walk_max_iterations,
                outlier_threshold=settings.outlier_z_threshold,
                underperformer_threshold=settings.underperformer_z_threshold,
                min_chars=settings.mutation_min_chars,
                max_chars=settings.mutation_max_chars,
                alternatives_limit=settings.walk_top_alternatives,
                pattern_report_limit=settings.pattern_report_limit,
                deadline=deadline,
                top_word_limit=settings.top_word_limit,
                **_pattern_gates(settings),
            ),
            timeout=settings.optimize_timeout_seconds,
        )
    except InvalidInput as e:
        raise _bad_request(e)
    except asyncio.TimeoutError:
        logger.warning(
            f"Title optimization exceeded {settings.optimize_timeout_seconds}s for '{request.title}'"
        )
        raise HTTPException(status_code=504, detail="Title optimization timed out")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error optimizing title '{request.title}': {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error optimizing title: {str(e)}")
