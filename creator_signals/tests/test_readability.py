"""
Test suite for the Readability Scoring service.

Covers the character-level title score (always finite, empty input handled),
the syllable counter and Flesch-Kincaid formulas, and the pooled-variance
mean-difference confidence interval.
"""

import math

import pytest

from creator_signals.core.exceptions import InvalidInput
from creator_signals.models import ReadabilityLevel
from creator_signals.services.readability import (
    character_readability,
    compare_readability,
    count_syllables,
    flesch_kincaid,
    mean_difference_ci,
)


# =============================================================================
# Character Readability
# =============================================================================


class TestCharacterReadability:
    """Tests for character_readability."""

    @pytest.mark.parametrize("text", ['', '   ', None])
    def test_empty_text(self, text) -> None:
        result = character_readability(text)
        assert result.score == 0
        assert result.interpretation == ReadabilityLevel.EMPTY
        assert result.wordCount == 0

    def test_single_letter_is_defined(self) -> None:
        result = character_readability('A')
        assert 0 <= result.score <= 100
        assert not math.isnan(result.score)
        assert result.wordCount == 1

    def test_punctuation_only_is_defined(self) -> None:
        result = character_readability('?!? ...')
        assert 0 <= result.score <= 100
        assert result.vowelDensity == 0.0

    def test_simple_title_very_accessible(self) -> None:
        result = character_readability('How to Start a Garden')
        assert result.interpretation == ReadabilityLevel.VERY_ACCESSIBLE
        assert result.avgWordLength == pytest.approx(3.4)
        assert result.commonWordRatio == pytest.approx(0.8)
        assert result.longWordRatio == 0.0

    def test_jargon_scores_lower(self) -> None:
        simple = character_readability('How to Start a Garden')
        jargon = character_readability('Comprehensive Epistemological Characterization Methodologies')
        assert jargon.score < simple.score
        assert jargon.interpretation == ReadabilityLevel.COMPLEX
        assert jargon.longWordRatio == 1.0

    def test_heavy_punctuation_lowers_score(self) -> None:
        plain = character_readability('Bake Better Bread Today')
        noisy = character_readability('Bake!!! Better??? Bread... Today!!!')
        assert noisy.score < plain.score
        assert noisy.punctuationDensity > plain.punctuationDensity


# =============================================================================
# Flesch-Kincaid
# =============================================================================


class TestFleschKincaid:
    """Tests for count_syllables and flesch_kincaid."""

    @pytest.mark.parametrize("word,expected", [
        ('make', 1),
        ('table', 2),
        ('the', 1),
        ('beautiful', 3),
        ('a', 1),
        ('free', 1),
        ('Sourdough!', 2),
    ])
    def test_count_syllables(self, word, expected) -> None:
        assert count_syllables(word) == expected

    def test_count_syllables_without_letters(self) -> None:
        assert count_syllables('123') == 0
        assert count_syllables('') == 0

    def test_simple_sentence(self) -> None:
        result = flesch_kincaid('The cat sat on the mat.')

        assert result.wordCount == 6
        assert result.sentenceCount == 1
        assert result.syllableCount == 6
        assert result.readingEase == pytest.approx(116.1, abs=0.1)
        assert result.gradeLevel == pytest.approx(-1.45, abs=0.1)
        assert result.interpretation == 'Very easy'

    def test_multiple_sentences(self) -> None:
        result = flesch_kincaid('I bake bread. It is good! Do you bake?')
        assert result.sentenceCount == 3
        assert result.wordCount == 9

    def test_complex_text_is_harder(self) -> None:
        easy = flesch_kincaid('The dog ran to the park. It was fun.')
        hard = flesch_kincaid(
            'Comprehensive fermentation methodologies necessitate meticulous '
            'temperature regulation throughout extraordinarily prolonged proofing intervals.'
        )
        assert hard.readingEase < easy.readingEase
        assert hard.gradeLevel > easy.gradeLevel

    def test_empty_text(self) -> None:
        result = flesch_kincaid('')
        assert result.wordCount == 0
        assert result.readingEase == 0.0
        assert result.interpretation == 'Empty'


# =============================================================================
# Mean Difference Confidence Interval
# =============================================================================


class TestMeanDifferenceCI:
    """Tests for mean_difference_ci and compare_readability."""

    def test_clearly_separated_samples(self) -> None:
        result = mean_difference_ci([10, 12, 11, 13, 9], [50, 52, 48, 51, 49])

        assert result.difference == pytest.approx(-39.0)
        # pooled SE is exactly 1.0; t(0.975, 8) = 2.306
        assert result.lowerBound == pytest.approx(-41.306, abs=0.01)
        assert result.upperBound == pytest.approx(-36.694, abs=0.01)
        assert result.significant
        assert result.sampleSufficient
        assert result.upperBound < 0

    def test_overlapping_samples_not_significant(self) -> None:
        result = mean_difference_ci([10, 20, 15, 12, 18], [11, 19, 16, 13, 17])
        assert result.lowerBound < 0 < result.upperBound
        assert not result.significant

    def test_small_samples_flagged(self) -> None:
        result = mean_difference_ci([10, 12, 11], [50, 52, 48])
        assert not result.sampleSufficient
        assert result.significant

    def test_empty_sample(self) -> None:
        result = mean_difference_ci([], [1, 2, 3])
        assert result.difference == 0.0
        assert not result.significant
        assert not result.sampleSufficient

    def test_no_degrees_of_freedom(self) -> None:
        result = mean_difference_ci([5], [3])
        assert result.difference == pytest.approx(2.0)
        assert result.lowerBound == result.upperBound == pytest.approx(2.0)
        assert not result.significant

    def test_wider_interval_at_higher_confidence(self) -> None:
        a, b = [10, 12, 11, 13, 9], [14, 15, 13, 16, 12]
        narrow = mean_difference_ci(a, b, confidence=0.8)
        wide = mean_difference_ci(a, b, confidence=0.99)
        assert (wide.upperBound - wide.lowerBound) > (narrow.upperBound - narrow.lowerBound)

    def test_invalid_confidence(self) -> None:
        with pytest.raises(InvalidInput):
            mean_difference_ci([1, 2], [3, 4], confidence=1.5)

    def test_non_finite_values_rejected(self) -> None:
        with pytest.raises(InvalidInput):
            mean_difference_ci([1, float('nan')], [3, 4])

    def test_compare_readability(self) -> None:
        simple = ['How to Start a Garden', 'Best Way to Bake Bread', 'Try This New Trick',
                  'Learn to Cook Rice', 'Make It Easy Today']
        jargon = ['Comprehensive Epistemological Characterization Methodologies',
                  'Multidimensional Hermeneutical Reconstructions',
                  'Thermodynamic Equilibrium Considerations Explained',
                  'Phenomenological Interpretations Reconsidered',
                  'Institutional Infrastructure Rationalization']
        result = compare_readability(simple, jargon)

        assert result.difference > 0
        assert result.significant
        assert result.sampleSufficient
