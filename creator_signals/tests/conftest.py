"""
Pytest Configuration and Shared Fixtures for Creator Signals Tests.

This module provides fixtures and configuration for all tests, supporting:
- Async test execution with pytest-asyncio (asyncio_mode configured in pyproject.toml)
- A deterministic synthetic item population with known outliers and
  underperformers
- A fixed reference instant so item ages never depend on the wall clock

Synthetic Population (population fixture):
    25 "normal" items with velocity 100 * exp(0.01 * k) for k = -12..12 and
    5 outliers at velocity 1000. Every item is exactly 10 days old at AS_OF,
    so metricValue = velocity * 10.

    - Outlier titles all start with a digit (list-style titles)
    - The three slowest normal items (k = -12, -11, -10) have question titles
      and land below the underperformer threshold under the MAD-log method

    With MAD-log scoring the log-domain MAD is about 0.075, outliers score
    around z = 20 and normal items stay within roughly [-1.3, 0.9].
"""

import math
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from creator_signals.models import Item


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - slow: Marks tests as slow (deselect with -m "not slow")
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )


# ============================================================
# SYNTHETIC DATA
# ============================================================

AS_OF = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
ITEM_AGE_DAYS = 10

NORMAL_TOPICS = [
    'Rye', 'Spelt', 'Einkorn', 'Emmer', 'Barley', 'Oat', 'Buckwheat', 'Millet', 'Sorghum',
    'Teff', 'Amaranth', 'Quinoa', 'Durum', 'Kamut', 'Semolina', 'Chickpea', 'Chestnut',
    'Almond', 'Hazelnut', 'Walnut', 'Potato', 'Cassava', 'Coconut', 'Banana', 'Acorn',
]

OUTLIER_TITLES = [
    '7 Mistakes Every Beginner Baker Makes',
    '5 Secrets To Perfect Sourdough Crust',
    '10 Tips For Better Homemade Bread',
    '3 Ways To Shape Sourdough Loaves',
    '9 Things Nobody Tells You About Starters',
]

# k values of normal items whose titles are phrased as questions
QUESTION_KS = (-12, -11, -10)


def make_item(title: str, velocity: float, age_days: int = ITEM_AGE_DAYS, as_of: datetime = AS_OF) -> Item:
    """Build an Item that has exactly `velocity` views per day at `as_of`."""
    return Item(
        title=title,
        metricValue=velocity * age_days,
        timestampCreated=as_of - timedelta(days=age_days),
    )


def normal_title(k: int) -> str:
    topic = NORMAL_TOPICS[k + 12]
    if k in QUESTION_KS:
        return f'Does {topic} Flour Really Work For Baking?'
    return f'Baking Sourdough Bread With {topic} Flour'


def build_population() -> List[Item]:
    items = [make_item(normal_title(k), 100.0 * math.exp(0.01 * k)) for k in range(-12, 13)]
    items.extend(make_item(title, 1000.0) for title in OUTLIER_TITLES)
    return items


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def as_of() -> datetime:
    """Fixed reference instant shared by every synthetic item."""
    return AS_OF


@pytest.fixture
def population() -> List[Item]:
    """30 items: 25 normal, 5 digit-led outliers, 3 slow question titles."""
    return build_population()


@pytest.fixture
def uniform_population() -> List[Item]:
    """Items that all share one velocity (degenerate distribution)."""
    return [make_item(f'Baking Sourdough Bread With {topic} Flour', 250.0) for topic in NORMAL_TOPICS[:10]]


@pytest.fixture
def population_payload(population) -> List[dict]:
    """The synthetic population as JSON-ready dicts for API tests."""
    return [item.model_dump(mode='json') for item in population]
