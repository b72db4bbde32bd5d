from dataclasses import dataclass
from typing import Optional

from algo_config import ConfigurationError
from Modifiers.Base import BaseModifier, ModifierConfig
from Providers.Interfaces import LevelProgressProvider, WinStreakProvider


@dataclass(frozen=True)
class CompletionRateConfig(ModifierConfig):
    priority: int = 5
    low_completion_threshold: float = 0.4
    high_completion_threshold: float = 0.7
    low_completion_decrease: float = 0.5
    high_completion_increase: float = 0.5
    min_attempts_required: int = 10
    # Share of the recent (level) completion rate in the blended rate
    recent_rate_weight: float = 0.3

    def validate(self) -> None:
        if self.low_completion_threshold > self.high_completion_threshold:
            raise ConfigurationError("low_completion_threshold must not exceed high_completion_threshold")
        if self.high_completion_threshold > 1.0 or self.recent_rate_weight > 1.0:
            raise ConfigurationError("completion thresholds and weights must lie within [0, 1]")


class CompletionRateModifier(BaseModifier):
    """
    Adjusts difficulty from the player's overall success ratio.

    The lifetime win ratio (wins / attempts) is blended with the recent
    completion rate reported by the level provider::

        rate = lifetime * (1 - recent_rate_weight) + recent * recent_rate_weight

    Below ``low_completion_threshold`` difficulty drops by a fixed step, above
    ``high_completion_threshold`` it rises by a fixed step and the band in
    between leaves it alone. Nothing happens until ``min_attempts_required``
    games have been played. Without a level provider only the lifetime ratio
    is used.
    """

    name = "CompletionRate"
    config_class = CompletionRateConfig

    def __init__(
        self,
        config: Optional[CompletionRateConfig] = None,
        win_streak_provider: Optional[WinStreakProvider] = None,
        level_progress_provider: Optional[LevelProgressProvider] = None,
        enable_debug_logs: bool = False,
    ):
        super().__init__(config, enable_debug_logs)
        self.win_streak_provider = win_streak_provider
        self.level_progress_provider = level_progress_provider

    def _calculate(self):
        provider = self._require(self.win_streak_provider, "win_streak")
        total_wins = self._count(provider.get_total_wins(), "total wins")
        total_losses = self._count(provider.get_total_losses(), "total losses")
        total_attempts = total_wins + total_losses
        cfg = self.config

        if total_attempts < cfg.min_attempts_required:
            return self._result(
                0.0,
                f"Not enough attempts ({total_attempts}/{cfg.min_attempts_required})",
                total_attempts=total_attempts,
                required=cfg.min_attempts_required,
                applied=False,
            )

        lifetime_rate = total_wins / total_attempts if total_attempts else 0.5
        if self.level_progress_provider is not None:
            recent_rate = self._rate(self.level_progress_provider.get_completion_rate(), "completion rate")
            weight = cfg.recent_rate_weight
        else:
            recent_rate = None
            weight = 0.0
        blended = lifetime_rate * (1.0 - weight) + (recent_rate or 0.0) * weight

        value = 0.0
        reason = "Completion rate normal"
        if blended < cfg.low_completion_threshold:
            value = -cfg.low_completion_decrease
            reason = f"Low completion rate ({blended:.0%}) - decreasing difficulty"
        elif blended > cfg.high_completion_threshold:
            value = cfg.high_completion_increase
            reason = f"High completion rate ({blended:.0%}) - increasing difficulty"

        self._log_debug(
            f"Completion rate {blended:.0%} (W:{total_wins}/L:{total_losses}) -> adjustment {value:+.2f}"
        )
        return self._result(
            value,
            reason,
            lifetime_rate=round(lifetime_rate, 4),
            recent_rate=None if recent_rate is None else round(recent_rate, 4),
            blended_rate=round(blended, 4),
            total_wins=total_wins,
            total_losses=total_losses,
            applied=value != 0.0,
        )
