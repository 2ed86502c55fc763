# Shared constants and utilities
from .constants import (
    ANALYSIS_THRESHOLD,
    FALLBACK_QUESTIONS,
    COMPANION_NAME,
)

__all__ = [
    "ANALYSIS_THRESHOLD",
    "FALLBACK_QUESTIONS",
    "COMPANION_NAME",
]
