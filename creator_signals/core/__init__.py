"""
Core infrastructure package for the Creator Signals service.

Provides:
- Named policy constants shared by services and settings
- Configuration management via pydantic-settings
- The InvalidInput exception raised for unusable input
- FastAPI dependency injection utilities

This module re-exports key components from submodules for convenient importing
by other modules throughout the package:

    from creator_signals.core import get_settings, InvalidInput, SettingsDep
"""

# =============================================================================
# Re-exports from creator_signals.core.config
# =============================================================================
from creator_signals.core.config import Settings, get_settings

# =============================================================================
# Re-exports from creator_signals.core.exceptions
# =============================================================================
from creator_signals.core.exceptions import InvalidInput

# =============================================================================
# Re-exports from creator_signals.core.dependencies
# =============================================================================
from creator_signals.core.dependencies import (
    SettingsDep,
    build_random_source,
    get_settings_dependency,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Error taxonomy (from exceptions.py)
    'InvalidInput',
    # FastAPI dependency injection (from dependencies.py)
    'SettingsDep',
    'build_random_source',
    'get_settings_dependency',
]
