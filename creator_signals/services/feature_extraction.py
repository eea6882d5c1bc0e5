"""
Title Feature Extraction Service.

Maps a title to a fixed vocabulary of boolean and integer features: hooks,
punctuation, casing, leading words, listicle phrasing, lexical markers and
length. The vocabulary is an explicit, versioned list. Adding a feature means
appending a rule here and bumping FEATURE_VOCABULARY_VERSION so that any
cached pattern keys can be invalidated; features are never inferred.

extract_features is pure and total: every title, including the empty string,
yields a value for every key.
"""

import re
from typing import Callable, Dict, List, Tuple

from creator_signals.models import FeatureVector


FEATURE_VOCABULARY_VERSION: str = "1"

LIST_FORMAT_PATTERN = re.compile(r"\d+\s+(ways|tips|things|reasons|steps|mistakes)", re.IGNORECASE)
YEAR_PATTERN = re.compile(r"\b20\d{2}\b")


def _contains(pattern: str, flags: int = 0) -> Callable[[str], bool]:
    compiled = re.compile(pattern, flags)
    return lambda title: compiled.search(title) is not None


def _word_count(title: str) -> int:
    return len(title.split())


# Ordered vocabulary. Order is the tie-break order for pattern ranking.
_BOOLEAN_RULES: List[Tuple[str, Callable[[str], bool]]] = [
    ("hasNumber", _contains(r"\d")),
    ("hasQuestion", _contains(r"\?")),
    ("hasExclamation", _contains(r"!")),
    ("hasPipe", _contains(r"\|")),
    ("hasDash", _contains(r"-")),
    ("hasColon", _contains(r":")),
    ("hasParens", _contains(r"[()]")),
    ("hasQuotes", _contains(r"[\"“”]")),
    ("hasAllCaps", _contains(r"[A-Z]{3,}")),
    ("startsWithNumber", _contains(r"^\d")),
    ("startsWithHow", _contains(r"^how", re.IGNORECASE)),
    ("startsWithWhy", _contains(r"^why", re.IGNORECASE)),
    ("startsWithWhat", _contains(r"^what", re.IGNORECASE)),
    ("hasListFormat", lambda title: LIST_FORMAT_PATTERN.search(title) is not None),
    ("hasBeginner", _contains(r"beginner", re.IGNORECASE)),
    ("hasUltimate", _contains(r"ultimate", re.IGNORECASE)),
    ("hasComplete", _contains(r"complete", re.IGNORECASE)),
    ("hasGuide", _contains(r"guide", re.IGNORECASE)),
    ("hasSecret", _contains(r"secret", re.IGNORECASE)),
    ("hasTruth", _contains(r"truth", re.IGNORECASE)),
    ("hasNever", _contains(r"never", re.IGNORECASE)),
    ("hasAlways", _contains(r"always", re.IGNORECASE)),
    ("hasMistake", _contains(r"mistake", re.IGNORECASE)),
    ("hasEasy", _contains(r"easy", re.IGNORECASE)),
    ("hasSimple", _contains(r"simple", re.IGNORECASE)),
    ("hasFast", _contains(r"fast", re.IGNORECASE)),
    ("hasYear", lambda title: YEAR_PATTERN.search(title) is not None),
]

_NUMERIC_RULES: List[Tuple[str, Callable[[str], int]]] = [
    ("wordCount", _word_count),
    ("charCount", len),
]

BOOLEAN_FEATURES: Tuple[str, ...] = tuple(name for name, _ in _BOOLEAN_RULES)
NUMERIC_FEATURES: Tuple[str, ...] = tuple(name for name, _ in _NUMERIC_RULES)
FEATURE_VOCABULARY: Tuple[str, ...] = BOOLEAN_FEATURES + NUMERIC_FEATURES


def extract_features(title: str) -> FeatureVector:
    """
    Extract the full feature vector for a title.

    Args:
        title: Title text; leading/trailing whitespace is ignored

    Returns:
        Dict with one entry per FEATURE_VOCABULARY key, in vocabulary order.
        Boolean features map to bool, wordCount/charCount to int.

    Example:
        >>> features = extract_features("7 Mistakes Every Beginner Makes")
        >>> features["startsWithNumber"], features["hasBeginner"], features["wordCount"]
        (True, True, 5)
    """
    title = (title or "").strip()
    features: Dict[str, object] = {name: rule(title) for name, rule in _BOOLEAN_RULES}
    features.update({name: rule(title) for name, rule in _NUMERIC_RULES})
    return features


def matched_features(title: str) -> List[str]:
    """Names of the boolean features present in a title, in vocabulary order."""
    features = extract_features(title)
    return [name for name in BOOLEAN_FEATURES if features[name]]
