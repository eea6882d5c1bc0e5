"""
Readability Scoring Service.

Two readability measures and a comparator for score populations:

    character_readability:
        Syllable-free heuristic for short strings such as titles. Flesch-style
        formulas assume multi-sentence prose and swing wildly on a single
        eight-word phrase, so titles are scored from character-class ratios
        instead: word-length distribution, share of very common words, vowel
        density and punctuation density.

    flesch_kincaid:
        Reading ease and grade level for description-length text, with a
        vowel-group syllable counter.

    mean_difference_ci:
        Difference of two sample means with a pooled-variance Student-t
        interval. Used to tell whether one title population actually reads
        differently from another.

Every function is total: empty or degenerate text yields a defined score
(never NaN), and tiny samples yield a neutral interval flagged as
insufficient.

Dependencies:
    - numpy: sample means and variances
    - scipy.stats: Student t quantile for interval critical values
"""

import logging
import math
import re
import string
from typing import Iterable, List, Sequence

import numpy as np
from scipy import stats

from creator_signals.core.constants import CI_CONFIDENCE, CI_MIN_SAMPLE_SIZE
from creator_signals.core.exceptions import InvalidInput
from creator_signals.models import (
    CharacterReadability,
    FleschKincaidResult,
    MeanDifferenceCI,
    ReadabilityLevel,
)

logger = logging.getLogger(__name__)


# Very common English words plus the stock vocabulary of video titles
COMMON_WORDS = frozenset([
    'the', 'be', 'to', 'of', 'and', 'a', 'in', 'that', 'have', 'i', 'it', 'for', 'not', 'on', 'with',
    'he', 'as', 'you', 'do', 'at', 'this', 'but', 'his', 'by', 'from', 'they', 'we', 'say', 'her', 'she',
    'or', 'an', 'will', 'my', 'one', 'all', 'would', 'there', 'their', 'what', 'so', 'up', 'out', 'if',
    'about', 'who', 'get', 'which', 'go', 'me', 'when', 'make', 'can', 'like', 'time', 'no', 'just', 'him',
    'know', 'take', 'people', 'into', 'year', 'your', 'good', 'some', 'could', 'them', 'see', 'other', 'than',
    'then', 'now', 'look', 'only', 'come', 'its', 'over', 'think', 'also', 'back', 'after', 'use', 'two',
    'how', 'our', 'work', 'first', 'well', 'way', 'even', 'new', 'want', 'because', 'any', 'these', 'give',
    'day', 'most', 'us', 'is', 'was', 'are', 'were', 'been', 'has', 'had', 'did', 'does', 'being',
    'best', 'top', 'why', 'free', 'easy', 'fast', 'simple', 'watch', 'learn', 'start', 'stop', 'try',
    'never', 'always', 'every', 'real', 'true', 'secret', 'amazing', 'ultimate', 'complete', 'guide',
])

VOWELS = frozenset('aeiouAEIOU')
PUNCTUATION = frozenset(string.punctuation + '“”‘’…')

# Words with more letters than this count as long
LONG_WORD_LETTERS = 6

# Component weights of the character readability score
LENGTH_WEIGHT = 0.35
COMMON_WEIGHT = 0.30
LONG_WORD_WEIGHT = 0.15
VOWEL_WEIGHT = 0.10
PUNCTUATION_WEIGHT = 0.10

# Vowel share of letters in ordinary English text
TYPICAL_VOWEL_DENSITY = 0.4

_NON_LETTERS = re.compile(r'[^a-zA-Z]')
_VOWEL_GROUPS = re.compile(r'[aeiouy]+')
_SENTENCE_BREAKS = re.compile(r'[.!?]+')


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


# =============================================================================
# Character-Level Readability
# =============================================================================


def _readability_level(score: int) -> ReadabilityLevel:
    if score >= 70:
        return ReadabilityLevel.VERY_ACCESSIBLE
    if score >= 50:
        return ReadabilityLevel.ACCESSIBLE
    if score >= 30:
        return ReadabilityLevel.MODERATE
    return ReadabilityLevel.COMPLEX


def character_readability(text: str) -> CharacterReadability:
    """
    Score how easily a short string reads, on a 0-100 scale.

    Components (higher is more readable):
        - Word length: 100 at 3 letters per word, minus 15 per extra letter
        - Common words: share of words in COMMON_WORDS
        - Long words: share of words with more than 6 letters, inverted
        - Vowel density: distance from the typical 40% vowel share
        - Punctuation density: share of punctuation among non-space characters

    Args:
        text: Title or other short string

    Returns:
        CharacterReadability. Empty or whitespace-only text scores 0 with
        interpretation "Empty".

    Example:
        >>> character_readability("How to Start a Garden").interpretation
        <ReadabilityLevel.VERY_ACCESSIBLE: 'Very accessible'>
    """
    words = (text or '').split()
    word_count = len(words)
    if word_count == 0:
        return CharacterReadability(score=0, interpretation=ReadabilityLevel.EMPTY)

    letters_per_word = [len(_NON_LETTERS.sub('', word)) for word in words]
    letter_count = sum(letters_per_word)
    avg_word_length = letter_count / word_count

    common_count = sum(1 for word in words if _NON_LETTERS.sub('', word.lower()) in COMMON_WORDS)
    common_ratio = common_count / word_count

    long_ratio = sum(1 for n in letters_per_word if n > LONG_WORD_LETTERS) / word_count

    characters = ''.join(words)
    vowel_density = (
        sum(1 for ch in characters if ch in VOWELS) / letter_count if letter_count else 0.0
    )
    punctuation_density = sum(1 for ch in characters if ch in PUNCTUATION) / len(characters)

    length_score = _clamp(100.0 - (avg_word_length - 3.0) * 15.0)
    common_score = common_ratio * 100.0
    long_word_score = (1.0 - long_ratio) * 100.0
    vowel_score = _clamp(100.0 - abs(vowel_density - TYPICAL_VOWEL_DENSITY) * 250.0)
    punctuation_score = _clamp(100.0 - punctuation_density * 400.0)

    score = int(round(_clamp(
        LENGTH_WEIGHT * length_score
        + COMMON_WEIGHT * common_score
        + LONG_WORD_WEIGHT * long_word_score
        + VOWEL_WEIGHT * vowel_score
        + PUNCTUATION_WEIGHT * punctuation_score
    )))

    return CharacterReadability(
        score=score,
        avgWordLength=round(avg_word_length, 2),
        commonWordRatio=round(common_ratio, 2),
        vowelDensity=round(vowel_density, 3),
        punctuationDensity=round(punctuation_density, 3),
        longWordRatio=round(long_ratio, 2),
        wordCount=word_count,
        interpretation=_readability_level(score),
    )


# =============================================================================
# Flesch-Kincaid
# =============================================================================


def count_syllables(word: str) -> int:
    """
    Estimate syllables by counting vowel groups.

    A trailing silent "e" is dropped ("make" -> 1) unless the word ends in a
    consonant followed by "le" ("table" -> 2). Every word has at least one
    syllable; a string with no letters has none.
    """
    word = _NON_LETTERS.sub('', word or '').lower()
    if not word:
        return 0

    count = len(_VOWEL_GROUPS.findall(word))
    if word.endswith('e') and not word.endswith(('ee', 'ye')):
        consonant_le = len(word) > 2 and word.endswith('le') and word[-3] not in 'aeiouy'
        if not consonant_le:
            count -= 1
    return max(1, count)


def _flesch_interpretation(reading_ease: float) -> str:
    if reading_ease >= 90:
        return 'Very easy'
    if reading_ease >= 80:
        return 'Easy'
    if reading_ease >= 70:
        return 'Fairly easy'
    if reading_ease >= 60:
        return 'Standard'
    if reading_ease >= 50:
        return 'Fairly difficult'
    if reading_ease >= 30:
        return 'Difficult'
    return 'Very confusing'


def flesch_kincaid(text: str) -> FleschKincaidResult:
    """
    Flesch reading ease and Flesch-Kincaid grade level.

        readingEase = 206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words)
        gradeLevel  = 0.39 * (words / sentences) + 11.8 * (syllables / words) - 15.59

    Intended for descriptions and other multi-sentence text. Titles should
    use character_readability.

    Returns:
        FleschKincaidResult. Text without words yields zeros and
        interpretation "Empty".
    """
    words = [w for w in (text or '').split() if _NON_LETTERS.sub('', w)]
    if not words:
        return FleschKincaidResult()

    sentences = [s for s in _SENTENCE_BREAKS.split(text) if s.strip()]
    sentence_count = max(1, len(sentences))
    word_count = len(words)
    syllable_count = sum(count_syllables(w) for w in words)

    words_per_sentence = word_count / sentence_count
    syllables_per_word = syllable_count / word_count

    reading_ease = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
    grade_level = 0.39 * words_per_sentence + 11.8 * syllables_per_word - 15.59

    return FleschKincaidResult(
        readingEase=round(reading_ease, 1),
        gradeLevel=round(grade_level, 1),
        wordCount=word_count,
        sentenceCount=sentence_count,
        syllableCount=syllable_count,
        interpretation=_flesch_interpretation(reading_ease),
    )


# =============================================================================
# Mean Difference Confidence Interval
# =============================================================================


def _finite_array(values: Iterable[float], label: str) -> np.ndarray:
    try:
        array = np.asarray(list(values), dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{label} must be numeric: {e}") from e
    if array.size and not np.all(np.isfinite(array)):
        raise InvalidInput(f"{label} must contain only finite values")
    return array


def mean_difference_ci(
    sample_a: Iterable[float],
    sample_b: Iterable[float],
    confidence: float = CI_CONFIDENCE,
    min_sample_size: int = CI_MIN_SAMPLE_SIZE,
) -> MeanDifferenceCI:
    """
    Confidence interval on mean(sample_a) - mean(sample_b).

    Uses the pooled variance
        sp^2 = ((n1 - 1) s1^2 + (n2 - 1) s2^2) / (n1 + n2 - 2)
    with standard error sp * sqrt(1/n1 + 1/n2) and the Student-t critical
    value on n1 + n2 - 2 degrees of freedom.

    Args:
        sample_a: First sample (any finite values; differences may be negative)
        sample_b: Second sample
        confidence: Two-sided confidence level in (0, 1)
        min_sample_size: Per-sample size at which the interval is trusted

    Returns:
        MeanDifferenceCI. significant is set when the interval excludes 0;
        sampleSufficient when both samples reach min_sample_size.

    Raises:
        InvalidInput: For non-finite values or a confidence outside (0, 1)
    """
    if not 0.0 < confidence < 1.0:
        raise InvalidInput(f"Confidence must lie strictly between 0 and 1, got {confidence}")

    a = _finite_array(sample_a, "sample_a")
    b = _finite_array(sample_b, "sample_b")
    n_a, n_b = int(a.size), int(b.size)

    if n_a == 0 or n_b == 0:
        return MeanDifferenceCI(confidence=confidence)

    difference = float(np.mean(a)) - float(np.mean(b))
    sufficient = n_a >= min_sample_size and n_b >= min_sample_size
    degrees_of_freedom = n_a + n_b - 2

    if degrees_of_freedom < 1:
        return MeanDifferenceCI(
            difference=difference,
            lowerBound=difference,
            upperBound=difference,
            significant=False,
            sampleSufficient=sufficient,
            confidence=confidence,
        )

    var_a = float(np.var(a, ddof=1)) if n_a > 1 else 0.0
    var_b = float(np.var(b, ddof=1)) if n_b > 1 else 0.0
    pooled_variance = ((n_a - 1) * var_a + (n_b - 1) * var_b) / degrees_of_freedom
    standard_error = math.sqrt(pooled_variance) * math.sqrt(1.0 / n_a + 1.0 / n_b)

    critical_value = float(stats.t.ppf((1.0 + confidence) / 2.0, degrees_of_freedom))
    margin = critical_value * standard_error
    lower, upper = difference - margin, difference + margin

    return MeanDifferenceCI(
        difference=difference,
        lowerBound=lower,
        upperBound=upper,
        significant=lower > 0.0 or upper < 0.0,
        sampleSufficient=sufficient,
        confidence=confidence,
    )


def compare_readability(
    titles_a: Sequence[str],
    titles_b: Sequence[str],
    confidence: float = CI_CONFIDENCE,
    min_sample_size: int = CI_MIN_SAMPLE_SIZE,
) -> MeanDifferenceCI:
    """
    Compare the character readability of two title populations.

    Typical use is outliers versus underperformers: a significant positive
    difference means the first group reads measurably easier.
    """
    scores_a: List[float] = [character_readability(t).score for t in titles_a]
    scores_b: List[float] = [character_readability(t).score for t in titles_b]
    result = mean_difference_ci(scores_a, scores_b, confidence, min_sample_size)
    if not result.sampleSufficient:
        logger.warning(
            f"Readability comparison on small samples ({len(scores_a)} vs {len(scores_b)}); "
            f"interval should not be trusted"
        )
    return result
