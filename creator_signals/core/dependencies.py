"""
FastAPI dependency injection module for the Creator Signals service.

Provides reusable dependencies so route handlers never reach for ambient
state directly:

- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints
- build_random_source: Builds a fresh numpy Generator per request

Every request gets its own generator, so concurrent optimizer runs never
share generator state. A request-level seed takes precedence over the
configured RANDOM_SEED.

Usage Examples:
    @router.post("/optimize-title")
    async def optimize(request: OptimizeTitleRequest, settings: SettingsDep):
        ...
"""

from typing import Annotated, Optional

import numpy as np
from fastapi import Depends

from creator_signals.core.config import Settings, get_settings


def get_settings_dependency() -> Settings:
    """
    Return the application settings singleton.

    Wrapping get_settings in a dependency lets tests swap the configuration
    with app.dependency_overrides.
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


def build_random_source(seed: Optional[int], settings: Settings) -> np.random.Generator:
    """
    Create an isolated random generator.

    Args:
        seed: Seed supplied with the request, if any.
        settings: Settings whose random_seed is used when no request seed is given.

    Returns:
        A new numpy Generator. With neither seed set it is seeded from
        system entropy.
    """
    if seed is None:
        seed = settings.random_seed
    return np.random.default_rng(seed)
