"""Configuration components for the home security system."""

from .defaults import (
    DEFAULT_CONFIG,
    SYSTEM_CONSTANTS,
    CLASSIFIER_BACKENDS,
    LOG_LEVELS,
    DEFAULT_PATHS,
    CASCADE_SETTINGS
)

__all__ = [
    'DEFAULT_CONFIG',
    'SYSTEM_CONSTANTS',
    'CLASSIFIER_BACKENDS',
    'LOG_LEVELS',
    'DEFAULT_PATHS',
    'CASCADE_SETTINGS'
]
