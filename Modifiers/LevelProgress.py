from dataclasses import dataclass
from typing import Optional

from algo_config import CHANGE_EPSILON, ConfigurationError, clamp
from Modifiers.Base import BaseModifier, ModifierConfig
from Providers.Interfaces import LevelProgressProvider

SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class LevelProgressConfig(ModifierConfig):
    priority: int = 6
    # Attempts on the current level
    high_attempts_threshold: int = 5
    difficulty_decrease_per_attempt: float = 0.2
    max_attempts_penalty: float = 1.0
    # Share of the expected level time actually used
    fast_completion_ratio: float = 0.7
    slow_completion_ratio: float = 1.5
    fast_completion_bonus: float = 0.3
    slow_completion_penalty: float = 0.3
    # Levels-per-hour drift
    expected_levels_per_hour: float = 15.0
    level_progression_factor: float = 0.02
    max_progression_adjustment: float = 0.5
    min_levels_for_progression: int = 3
    # Mastery / struggle detection
    hard_level_threshold: float = 3.0
    easy_level_threshold: float = 2.0
    mastery_completion_rate: float = 0.7
    struggle_completion_rate: float = 0.3
    mastery_bonus: float = 0.3
    struggle_penalty: float = 0.3

    def validate(self) -> None:
        if self.fast_completion_ratio >= self.slow_completion_ratio:
            raise ConfigurationError("fast_completion_ratio must be below slow_completion_ratio")
        if self.easy_level_threshold > self.hard_level_threshold:
            raise ConfigurationError("easy_level_threshold must not exceed hard_level_threshold")


class LevelProgressModifier(BaseModifier):
    """
    Multi-factor signal built from level progression.

    Each factor adds its own term and its own reason:

    * attempts on the current level above the threshold cost a per-attempt
      penalty (capped);
    * finishing a level in well under / over the expected time adds a bonus /
      penalty;
    * levels-per-hour (derived from the average completion time) drifting
      from the expected rate shifts difficulty proportionally (capped);
    * high completion on hard levels adds a mastery bonus, low completion on
      easy levels a struggle penalty.
    """

    name = "LevelProgress"
    config_class = LevelProgressConfig

    def __init__(
        self,
        config: Optional[LevelProgressConfig] = None,
        level_progress_provider: Optional[LevelProgressProvider] = None,
        enable_debug_logs: bool = False,
    ):
        super().__init__(config, enable_debug_logs)
        self.level_progress_provider = level_progress_provider

    def _calculate(self):
        provider = self._require(self.level_progress_provider, "level_progress")
        attempts = self._count(provider.get_attempts_on_current_level(), "attempts on current level")
        current_level = self._count(provider.get_current_level(), "current level")
        avg_completion_time = self._non_negative(provider.get_average_completion_time(), "average completion time")
        time_percentage = self._non_negative(provider.get_current_level_time_percentage(), "level time percentage")
        level_difficulty = self._number(provider.get_current_level_difficulty(), "level difficulty")
        completion_rate = self._rate(provider.get_completion_rate(), "completion rate")

        terms = (
            self._attempts_term(attempts),
            self._completion_time_term(time_percentage),
            self._progression_term(current_level, avg_completion_time),
            self._mastery_term(level_difficulty, completion_rate),
        )
        value = 0.0
        reasons = []
        for adjustment, reason in terms:
            if reason:
                value += adjustment
                reasons.append(reason)

        return self._result(
            value,
            ", ".join(reasons) if reasons else "Normal level progression",
            attempts=attempts,
            current_level=current_level,
            level_difficulty=level_difficulty,
            completion_rate=completion_rate,
            avg_completion_time=avg_completion_time,
            time_percentage=time_percentage,
            applied=value != 0.0,
        )

    def _attempts_term(self, attempts: int):
        cfg = self.config
        if attempts <= cfg.high_attempts_threshold:
            return 0.0, None
        penalty = min(
            (attempts - cfg.high_attempts_threshold) * cfg.difficulty_decrease_per_attempt,
            cfg.max_attempts_penalty,
        )
        self._log_debug(f"Attempts {attempts} > {cfg.high_attempts_threshold} -> {-penalty:+.2f}")
        return -penalty, f"High attempts ({attempts})"

    def _completion_time_term(self, time_percentage: float):
        cfg = self.config
        # 0 means the provider has no timing for this level yet
        if time_percentage <= 0:
            return 0.0, None
        if time_percentage < cfg.fast_completion_ratio:
            return cfg.fast_completion_bonus, f"Fast completion ({time_percentage:.0%} of expected time)"
        if time_percentage > cfg.slow_completion_ratio:
            return -cfg.slow_completion_penalty, f"Slow completion ({time_percentage:.0%} of expected time)"
        return 0.0, None

    def _progression_term(self, current_level: int, avg_completion_time: float):
        cfg = self.config
        if avg_completion_time <= 0 or current_level < cfg.min_levels_for_progression:
            return 0.0, None
        levels_per_hour = SECONDS_PER_HOUR / avg_completion_time
        drift = levels_per_hour - cfg.expected_levels_per_hour
        adjustment = clamp(
            drift * cfg.level_progression_factor,
            -cfg.max_progression_adjustment,
            cfg.max_progression_adjustment,
        )
        if abs(adjustment) <= CHANGE_EPSILON:
            return 0.0, None
        pace = "Fast" if adjustment > 0 else "Slow"
        self._log_debug(f"{levels_per_hour:.1f} levels/h vs {cfg.expected_levels_per_hour} -> {adjustment:+.2f}")
        return adjustment, (
            f"{pace} progression ({levels_per_hour:.1f} levels/h vs expected {cfg.expected_levels_per_hour:g})"
        )

    def _mastery_term(self, level_difficulty: float, completion_rate: float):
        cfg = self.config
        if level_difficulty >= cfg.hard_level_threshold and completion_rate > cfg.mastery_completion_rate:
            return cfg.mastery_bonus, "Mastering hard levels"
        if level_difficulty <= cfg.easy_level_threshold and completion_rate < cfg.struggle_completion_rate:
            return -cfg.struggle_penalty, "Struggling on easy levels"
        return 0.0, None
