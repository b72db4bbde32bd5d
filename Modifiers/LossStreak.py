from dataclasses import dataclass
from typing import Optional

from Modifiers.Base import BaseModifier, ModifierConfig
from Providers.Interfaces import WinStreakProvider


@dataclass(frozen=True)
class LossStreakConfig(ModifierConfig):
    priority: int = 2
    loss_threshold: float = 2.0
    step_size: float = 0.3
    max_reduction: float = 1.5


class LossStreakModifier(BaseModifier):
    """Lowers difficulty once consecutive losses pass the threshold."""

    name = "LossStreak"
    config_class = LossStreakConfig

    def __init__(
        self,
        config: Optional[LossStreakConfig] = None,
        win_streak_provider: Optional[WinStreakProvider] = None,
        enable_debug_logs: bool = False,
    ):
        super().__init__(config, enable_debug_logs)
        self.win_streak_provider = win_streak_provider

    def _calculate(self):
        provider = self._require(self.win_streak_provider, "win_streak")
        streak = self._count(provider.get_loss_streak(), "loss streak")
        cfg = self.config

        value = 0.0
        reason = "No significant loss streak"
        if streak >= cfg.loss_threshold:
            reduction = min((streak - cfg.loss_threshold) * cfg.step_size, cfg.max_reduction)
            if reduction > 0:
                value = -reduction
                reason = f"Loss streak: {streak} consecutive losses"
                self._log_debug(f"Loss streak {streak} -> adjustment {value:+.2f}")

        return self._result(
            value,
            reason,
            streak=streak,
            threshold=cfg.loss_threshold,
            applied=value < 0,
        )
