"""
Application Constants
=====================

Centralized constants for the advisory layer and care scheduler.

Usage:
    from plantcare.constants import TokenBudgets, Models
"""

# =============================================================================
# Inference models
# =============================================================================


class Models:
    """Model identifiers for the inference service."""

    PRIMARY = "gpt-4o"
    FALLBACK = "gpt-4o-mini"  # cheaper model used for degraded retries


# =============================================================================
# Token budgets (max completion tokens per task)
# =============================================================================


class TokenBudgets:
    """Per-task completion budgets."""

    IDENTIFY = 1000
    DIAGNOSE = 1000
    PERSONALIZED_ADVICE = 1500
    SEASONAL_GUIDE = 2000
    ARRANGEMENT = 1500
    JOURNAL_ENTRY = 1000
    GROWTH_ANALYSIS = 1500
    GROWTH_ANALYSIS_DEGRADED = 800
    CARE_ANSWER = 1000
    OPTIMIZED_SCHEDULE = 2000
    COMMUNITY_INSIGHTS = 1500
    IDENTITY_VERIFY = 300
    LIGHT_LEVEL = 200


# =============================================================================
# Advisory retry / history defaults
# =============================================================================


class AdvisoryDefaults:
    """Retry policy and context-size defaults."""

    MAX_ATTEMPTS = 3
    BACKOFF_BASE_MS = 1000  # attempt n waits BACKOFF_BASE_MS * 2 ** (n - 1)
    CARE_HISTORY_LIMIT = 10
    TEMPERATURE = 0.4


# =============================================================================
# Image limits
# =============================================================================


class ImageLimits:
    """Image payload limits."""

    MAX_MB = 20
    BYTES_PER_MB = 1024 * 1024
    MAX_GROWTH_IMAGES = 2  # oldest and newest photo


# Fallback text used when a diagnosis arrives without a solution
DEFAULT_DIAGNOSIS_SOLUTION = (
    "Consult a local plant expert or nursery for a treatment plan tailored to your plant."
)

DEFAULT_PREVENTION_TIPS = (
    "Check soil moisture before watering to avoid over- or under-watering",
    "Keep the plant in light conditions suited to its species",
    "Inspect leaves regularly for early signs of pests or disease",
)
