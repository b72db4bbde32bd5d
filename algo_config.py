"""
Central configuration for difficulty ranges, modifier defaults and level bands.
Keep all tunable constants here so the engine, the backend and the tests rely
on one source.
"""

import math

# Difficulty bounds
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
DEFAULT_DIFFICULTY = 3.0

# Cap per-evaluation absolute difficulty change to avoid oscillation
MAX_CHANGE_PER_EVALUATION = 2.0

# Aggregation
DEFAULT_DIMINISHING_FACTOR = 0.6
DEFAULT_AGGREGATION_WEIGHT = 1.0

# Level bands (map difficulty to Easy/Medium/Hard)
# Easy: difficulty <= EASY_MAX
# Medium: EASY_MAX < difficulty <= MEDIUM_MAX
# Hard: difficulty > MEDIUM_MAX
EASY_MAX = 3.0
MEDIUM_MAX = 7.0

# Time helpers
HOURS_IN_DAY = 24.0
DAYS_IN_WEEK = 7.0

# Sessions shorter than this (seconds) after a quit count as a rage quit
RAGE_QUIT_SECONDS = 30.0

# A modifier slower than this (milliseconds) is logged as a warning
SLOW_MODIFIER_MS = 20.0

# Minimum |adjustment| reported as an actual change
CHANGE_EPSILON = 0.01

NO_CHANGE_REASON = "No change"
NO_MODIFIERS_REASON = "no modifiers applied"
PROVIDER_UNAVAILABLE_REASON = "provider unavailable"


class ConfigurationError(ValueError):
	"""Raised for structural misconfiguration of the engine."""


def clamp(value: float, low: float, high: float) -> float:
	if value < low:
		return low
	if value > high:
		return high
	return value


def clamp_difficulty(
	difficulty: float,
	min_difficulty: float = MIN_DIFFICULTY,
	max_difficulty: float = MAX_DIFFICULTY,
) -> float:
	"""Clamp difficulty to allowed range."""
	return clamp(difficulty, min_difficulty, max_difficulty)


def is_finite_number(value) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def difficulty_label(difficulty: float) -> str:
	"""Map difficulty to level label."""
	if difficulty <= EASY_MAX:
		return "Easy"
	if difficulty <= MEDIUM_MAX:
		return "Medium"
	return "Hard"
