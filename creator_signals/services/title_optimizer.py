"""
Title Optimizer Service - Metropolis-Hastings random walk over title mutations.

Searches for a better-performing title by repeatedly mutating the current
title and scoring the mutation against patterns learned from an item
population.

Algorithm Overview:
    1. Learn patterns, outlier vocabulary and a word-count window from items
    2. Score the starting title (step 0)
    3. For each iteration:
         a. Generate mutations of the current title (TitleMutator)
         b. Propose one (uniform random, or best of the batch)
         c. Accept with the Metropolis criterion:
                delta > 0               -> accept
                otherwise               -> accept with probability exp(delta / T)
         d. Multiply T by the cooling rate (1.0 keeps T fixed)
    4. Report the best candidate seen and the accepted path

Fitness (TitleFitness, 0-100):
    patternMatch (0-40) - saturationPenalty (0-20) + lengthScore (0-20)
    + hookBonus (0-20), clamped to [0, 100].

Randomness:
    Every draw (proposal choice, word shuffle, acceptance) comes from the
    numpy Generator passed in, so a fixed seed reproduces a walk exactly. There
    is no module-level generator.
"""

import logging
import math
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from creator_signals.core.constants import (
    HOOK_BONUS_CAP,
    LENGTH_SCORE_MAX,
    MUTATION_MAX_CHARS,
    MUTATION_MIN_CHARS,
    MUTATION_TRIM_WORD_COUNT,
    OUTLIER_Z_THRESHOLD,
    PATTERN_MATCH_CAP,
    PATTERN_REPORT_LIMIT,
    SATURATION_PENALTY_CAP,
    TARGET_CHAR_MAX,
    TARGET_CHAR_MIN,
    UNDERPERFORMER_Z_THRESHOLD,
    WALK_COOLING_RATE,
    WALK_DEFAULT_ITERATIONS,
    WALK_MAX_ITERATIONS,
    WALK_TEMPERATURE,
    WALK_TOP_ALTERNATIVES,
)
from creator_signals.core.exceptions import InvalidInput
from creator_signals.models import (
    Item,
    OptimizationResult,
    OptimizationStatistics,
    OutlierMethod,
    PatternSet,
    ProposalStrategy,
    ScoreBreakdown,
    TitleCandidate,
    WalkMethodology,
)
from creator_signals.services.feature_extraction import YEAR_PATTERN, extract_features
from creator_signals.services.pattern_learning import learn_title_model

logger = logging.getLogger(__name__)


HOOK_WORDS: Tuple[str, ...] = (
    'Ultimate', 'Complete', 'Best', 'Top', 'Essential', 'Must-Know', 'Proven', 'Simple',
)

LIST_COUNTS: Tuple[int, ...] = (5, 7, 10)

_LEADING_DIGIT = re.compile(r'^\d')
_LIST_FRAME = re.compile(r'\d+\s+(ways|tips|things)', re.IGNORECASE)


# =============================================================================
# Mutation
# =============================================================================


class TitleMutator:
    """
    Generates single-step edits of a title.

    Catalogue:
        - Prefix a list count ("5 ", "7 ", "10 ") when the title has no leading digit
        - Question forms ("...?", "Why ...?", "What is ...?") when there is no "?"
        - Year as "(YEAR)" or "in YEAR" when the title carries no year
        - Each hook word prepended, or appended after a colon, when absent
        - First or last word replaced by a top outlier word (titles over 3 words)
        - Random word order (titles of 3+ words)
        - "5 Ways to ..." and "...: 7 Tips" frames when no list frame exists
        - Last two words dropped for titles longer than 6 words

    Mutations outside [min_chars, max_chars] characters are discarded.
    """

    def __init__(
        self,
        top_words: Sequence[str] = (),
        hook_words: Sequence[str] = HOOK_WORDS,
        year: Optional[int] = None,
        min_chars: int = MUTATION_MIN_CHARS,
        max_chars: int = MUTATION_MAX_CHARS,
        trim_word_count: int = MUTATION_TRIM_WORD_COUNT,
    ):
        self.top_words = list(top_words)
        self.hook_words = list(hook_words)
        self.year = year or datetime.now(timezone.utc).year
        self.min_chars = min_chars
        self.max_chars = max_chars
        self.trim_word_count = trim_word_count

    def generate(self, title: str, rng: np.random.Generator) -> List[str]:
        """
        All surviving mutations of a title, without duplicates.

        Args:
            title: Current title
            rng: Random source for the word-order shuffle

        Returns:
            Mutations in catalogue order; the title itself is never included
        """
        words = title.split()
        lowered = title.lower()
        mutations: List[str] = []

        if not _LEADING_DIGIT.match(title):
            mutations.extend(f"{count} {title}" for count in LIST_COUNTS)

        if '?' not in title:
            mutations.extend([f"{title}?", f"Why {title}?", f"What is {title}?"])

        if not YEAR_PATTERN.search(title):
            mutations.extend([f"{title} ({self.year})", f"{title} in {self.year}"])

        for hook in self.hook_words:
            if hook.lower() not in lowered:
                mutations.extend([f"{hook} {title}", f"{title}: {hook}"])

        if len(words) > 3:
            for word in self.top_words:
                if word.lower() in lowered:
                    continue
                mutations.append(' '.join([word[:1].upper() + word[1:]] + words[1:]))
                mutations.append(' '.join(words[:-1] + [word]))

        if len(words) >= 3:
            shuffled = list(words)
            rng.shuffle(shuffled)
            mutations.append(' '.join(shuffled))

        if not _LIST_FRAME.search(title):
            mutations.extend([f"5 Ways to {title}", f"{title}: 7 Tips"])

        if len(words) > self.trim_word_count:
            mutations.append(' '.join(words[:-2]))

        seen = {title}
        surviving: List[str] = []
        for mutation in mutations:
            if mutation in seen or not self.min_chars <= len(mutation) <= self.max_chars:
                continue
            seen.add(mutation)
            surviving.append(mutation)
        return surviving


# =============================================================================
# Fitness
# =============================================================================


class TitleFitness:
    """
    Scores a title against learned patterns.

    Sub-scores:
        patternMatch: sum over matched positive patterns of
            weight * averageZScore / max(outlierAverageZ, 1), capped at 40
        saturationPenalty: sum of matched negative pattern weights, capped at 20
        lengthScore: 20, minus 3 per word outside the word-count window,
            minus 5 above 60 characters, minus 5 below 25 characters
        hookBonus: digit +5, question +5, leading number +5, year +3,
            list format +2, capped at 20
    """

    def __init__(
        self,
        patterns: PatternSet,
        word_count_window: Tuple[int, int],
        outlier_average_z: float = 0.0,
    ):
        self.patterns = patterns
        self.word_count_window = word_count_window
        self.outlier_average_z = outlier_average_z
        self._cache: Dict[str, Tuple[float, ScoreBreakdown, int]] = {}

    def _length_score(self, word_count: int, char_count: int) -> float:
        low, high = self.word_count_window
        score = LENGTH_SCORE_MAX
        if word_count < low:
            score -= (low - word_count) * 3
        if word_count > high:
            score -= (word_count - high) * 3
        if char_count > TARGET_CHAR_MAX:
            score -= 5
        if char_count < TARGET_CHAR_MIN:
            score -= 5
        return max(0.0, score)

    @staticmethod
    def _hook_bonus(features) -> float:
        bonus = 0.0
        if features['hasNumber']:
            bonus += 5
        if features['hasQuestion']:
            bonus += 5
        if features['startsWithNumber']:
            bonus += 5
        if features['hasYear']:
            bonus += 3
        if features['hasListFormat']:
            bonus += 2
        return min(HOOK_BONUS_CAP, bonus)

    def score(self, title: str) -> Tuple[float, ScoreBreakdown, int]:
        """
        Fitness of a title.

        Returns:
            Tuple of (score in [0, 100], breakdown, confidence percent). The
            confidence is the share of positive patterns the title matches.
        """
        if title in self._cache:
            return self._cache[title]

        features = extract_features(title)
        normalizer = max(self.outlier_average_z, 1.0)

        pattern_match = 0.0
        matched = 0
        for pattern in self.patterns.positive:
            if features.get(pattern.featureName):
                pattern_match += pattern.weight * (pattern.averageZScore / normalizer)
                matched += 1
        pattern_match = max(0.0, min(PATTERN_MATCH_CAP, pattern_match))

        saturation = sum(
            p.weight for p in self.patterns.negative if features.get(p.featureName)
        )
        saturation = max(0.0, min(SATURATION_PENALTY_CAP, float(saturation)))

        length_score = self._length_score(features['wordCount'], features['charCount'])
        hook_bonus = self._hook_bonus(features)

        total = pattern_match - saturation + length_score + hook_bonus
        confidence = min(100, int(round(matched / max(len(self.patterns.positive), 1) * 100)))

        result = (
            max(0.0, min(100.0, total)),
            ScoreBreakdown(
                patternMatch=pattern_match,
                saturationPenalty=saturation,
                lengthScore=length_score,
                hookBonus=hook_bonus,
            ),
            confidence,
        )
        self._cache[title] = result
        return result

    def candidate(self, title: str, step: int) -> TitleCandidate:
        """Score a title and wrap it as the candidate produced at `step`."""
        score, breakdown, confidence = self.score(title)
        return TitleCandidate(
            text=title,
            fitnessScore=score,
            scoreBreakdown=breakdown,
            confidencePercent=confidence,
            stepIndex=step,
        )


# =============================================================================
# Random Walk
# =============================================================================


@dataclass
class WalkOutcome:
    """Result of one RandomWalkOptimizer.run."""
    best: TitleCandidate
    accepted_path: List[TitleCandidate] = field(default_factory=list)
    iterations: int = 0
    proposals: int = 0


def resolve_iterations(
    iterations: Optional[int],
    default: int = WALK_DEFAULT_ITERATIONS,
    maximum: int = WALK_MAX_ITERATIONS,
) -> int:
    """
    Effective walk length: default when None, capped at the maximum.

    Raises:
        InvalidInput: If iterations is negative
    """
    if iterations is None:
        iterations = default
    if iterations < 0:
        raise InvalidInput(f"Iterations must be non-negative, got {iterations}")
    return min(iterations, maximum)


class RandomWalkOptimizer:
    """
    Metropolis-Hastings walk with optional geometric cooling.

    The best candidate is tracked separately from the current state and only
    changes on a strictly higher score, so an accepted downhill move never
    loses the best title found so far.
    """

    def __init__(
        self,
        mutator: TitleMutator,
        fitness: TitleFitness,
        temperature: float = WALK_TEMPERATURE,
        cooling_rate: float = WALK_COOLING_RATE,
        strategy: Union[ProposalStrategy, str] = ProposalStrategy.RANDOM,
        max_iterations: int = WALK_MAX_ITERATIONS,
    ):
        if temperature <= 0:
            raise InvalidInput(f"Temperature must be positive, got {temperature}")
        if not 0 < cooling_rate <= 1:
            raise InvalidInput(f"Cooling rate must lie in (0, 1], got {cooling_rate}")
        try:
            strategy = ProposalStrategy(strategy)
        except ValueError:
            raise InvalidInput(f"Unknown proposal strategy: {strategy}")

        self.mutator = mutator
        self.fitness = fitness
        self.temperature = temperature
        self.cooling_rate = cooling_rate
        self.strategy = strategy
        self.max_iterations = max_iterations

    def _propose(self, mutations: List[str], rng: np.random.Generator) -> str:
        if self.strategy == ProposalStrategy.BEST_OF_BATCH:
            # max keeps the first of equal scores
            return max(mutations, key=lambda m: self.fitness.score(m)[0])
        return mutations[int(rng.integers(len(mutations)))]

    def run(
        self,
        start: str,
        iterations: int,
        rng: np.random.Generator,
        deadline: Optional[float] = None,
    ) -> WalkOutcome:
        """
        Walk from a starting title.

        Args:
            start: Starting title (step 0)
            iterations: Number of steps; capped at max_iterations
            rng: Random source for every draw in the walk
            deadline: time.monotonic() value after which no further step
                starts; the outcome then reports the steps completed

        Returns:
            WalkOutcome with the best candidate and every accepted candidate
            in order, starting state first

        Raises:
            InvalidInput: If iterations is negative
        """
        iterations = resolve_iterations(iterations, maximum=self.max_iterations)

        current = self.fitness.candidate(start, 0)
        best = current
        accepted = [current]
        temperature = self.temperature
        proposals = 0

        for step in range(1, iterations + 1):
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(f"Walk stopped after {step - 1} of {iterations} steps: deadline reached")
                iterations = step - 1
                break

            mutations = self.mutator.generate(current.text, rng)
            if mutations:
                proposals += 1
                proposal = self.fitness.candidate(self._propose(mutations, rng), step)
                delta = proposal.fitnessScore - current.fitnessScore

                if delta > 0 or float(rng.random()) < math.exp(delta / temperature):
                    logger.debug(
                        f"Step {step}: accepted '{proposal.text}' "
                        f"({current.fitnessScore:.1f} -> {proposal.fitnessScore:.1f}, T={temperature:.3f})"
                    )
                    current = proposal
                    accepted.append(proposal)
                    if proposal.fitnessScore > best.fitnessScore:
                        best = proposal
                else:
                    logger.debug(f"Step {step}: rejected '{proposal.text}' (delta={delta:.1f})")
            else:
                logger.debug(f"Step {step}: no mutation survived the length filter")

            temperature *= self.cooling_rate

        return WalkOutcome(best=best, accepted_path=accepted, iterations=iterations, proposals=proposals)


def top_alternatives(path: Sequence[TitleCandidate], limit: int = WALK_TOP_ALTERNATIVES) -> List[TitleCandidate]:
    """
    Deduplicate candidates by text (keeping the higher score, earliest on
    ties) and return the best `limit`, highest score first.
    """
    unique: Dict[str, TitleCandidate] = {}
    for candidate in path:
        existing = unique.get(candidate.text)
        if existing is None or candidate.fitnessScore > existing.fitnessScore:
            unique[candidate.text] = candidate
    ranked = sorted(unique.values(), key=lambda c: c.fitnessScore, reverse=True)
    return ranked[:limit]


# =============================================================================
# Orchestration
# =============================================================================


def optimize_title(
    starting_title: str,
    items: Sequence[Item],
    iterations: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    as_of: Optional[datetime] = None,
    method: Union[OutlierMethod, str] = OutlierMethod.MAD_LOG,
    strategy: Union[ProposalStrategy, str] = ProposalStrategy.RANDOM,
    temperature: float = WALK_TEMPERATURE,
    cooling_rate: float = WALK_COOLING_RATE,
    default_iterations: int = WALK_DEFAULT_ITERATIONS,
    max_iterations: int = WALK_MAX_ITERATIONS,
    outlier_threshold: float = OUTLIER_Z_THRESHOLD,
    underperformer_threshold: float = UNDERPERFORMER_Z_THRESHOLD,
    min_chars: int = MUTATION_MIN_CHARS,
    max_chars: int = MUTATION_MAX_CHARS,
    alternatives_limit: int = WALK_TOP_ALTERNATIVES,
    pattern_report_limit: int = PATTERN_REPORT_LIMIT,
    deadline: Optional[float] = None,
    **gates,
) -> OptimizationResult:
    """
    Optimize a title against patterns learned from an item population.

    Args:
        starting_title: Title to improve
        items: Population the patterns are learned from
        iterations: Walk length (default 20, capped at 50)
        rng: Random source; a fresh unseeded generator when omitted
        as_of: Reference instant for item ages and the year mutation
        method: Outlier scoring method used for pattern learning
        strategy: Proposal strategy for the walk
        temperature: Initial Metropolis temperature
        cooling_rate: Per-iteration temperature multiplier (1.0 = fixed)
        deadline: time.monotonic() value at which the walk stops early
        **gates: Pattern-learning overrides (occurrence/prevalence gates,
            weight scales)

    Returns:
        OptimizationResult with the best candidate, deduplicated top
        alternatives, the full accepted path and the learned patterns

    Raises:
        InvalidInput: On an empty starting title, a negative iteration count
            or an invalid item

    Example:
        >>> result = optimize_title("Learn Python Programming Today", items,
        ...                         iterations=30, rng=np.random.default_rng(7))
        >>> result.bestTitle.fitnessScore >= result.acceptedPath[0].fitnessScore
        True
    """
    if not starting_title or not starting_title.strip():
        raise InvalidInput("Starting title must not be empty")
    starting_title = starting_title.strip()

    effective_iterations = resolve_iterations(iterations, default_iterations, max_iterations)
    rng = rng if rng is not None else np.random.default_rng()
    as_of = as_of or datetime.now(timezone.utc)

    model = learn_title_model(
        items,
        as_of=as_of,
        method=method,
        outlier_threshold=outlier_threshold,
        underperformer_threshold=underperformer_threshold,
        **gates,
    )

    mutator = TitleMutator(
        top_words=model.top_words,
        year=as_of.year,
        min_chars=min_chars,
        max_chars=max_chars,
    )
    fitness = TitleFitness(model.patterns, model.word_count_window, model.outlier_average_z)
    optimizer = RandomWalkOptimizer(
        mutator,
        fitness,
        temperature=temperature,
        cooling_rate=cooling_rate,
        strategy=strategy,
        max_iterations=max_iterations,
    )
    outcome = optimizer.run(starting_title, effective_iterations, rng, deadline=deadline)

    logger.info(
        f"Title walk over {outcome.iterations} iterations: "
        f"{len(outcome.accepted_path) - 1} accepted, "
        f"best score {outcome.best.fitnessScore:.1f} "
        f"(start {outcome.accepted_path[0].fitnessScore:.1f})"
    )

    annealed = cooling_rate < 1.0
    methodology = WalkMethodology(
        algorithm=(
            'Metropolis-Hastings random walk with simulated annealing'
            if annealed else 'Metropolis-Hastings random walk at fixed temperature'
        ),
        fitnessFunction=(
            'Pattern match (0-40) - Saturation penalty (0-20) '
            '+ Length optimization (0-20) + Hook bonus (0-20)'
        ),
        iterations=outcome.iterations,
        temperature=temperature,
        coolingRate=cooling_rate,
        acceptanceCriteria=(
            'Accept improvements always; accept downgrades with probability exp(delta/temperature)'
        ),
        limitations=[
            'Patterns learned from correlation, not causation',
            f"Based on {len(model.outliers)} outliers from {model.sample_size} items",
            'Optimal title depends on many factors beyond pattern matching',
        ],
    )

    return OptimizationResult(
        input=starting_title,
        bestTitle=outcome.best,
        walkPath=top_alternatives(outcome.accepted_path, alternatives_limit),
        acceptedPath=outcome.accepted_path,
        patterns=PatternSet(
            positive=model.patterns.positive[:pattern_report_limit],
            negative=model.patterns.negative[:pattern_report_limit],
        ),
        statistics=OptimizationStatistics(
            sampleSize=model.sample_size,
            outliersAnalyzed=len(model.outliers),
            underperformersAnalyzed=len(model.underperformers),
            patternConfidence=model.confidence,
        ),
        methodology=methodology,
    )
