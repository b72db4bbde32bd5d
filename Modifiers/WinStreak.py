from dataclasses import dataclass
from typing import Optional

from Modifiers.Base import BaseModifier, ModifierConfig
from Providers.Interfaces import WinStreakProvider


@dataclass(frozen=True)
class WinStreakConfig(ModifierConfig):
    priority: int = 1
    win_threshold: float = 3.0
    step_size: float = 0.5
    max_bonus: float = 2.0


class WinStreakModifier(BaseModifier):
    """Raises difficulty once consecutive wins pass the threshold."""

    name = "WinStreak"
    config_class = WinStreakConfig

    def __init__(
        self,
        config: Optional[WinStreakConfig] = None,
        win_streak_provider: Optional[WinStreakProvider] = None,
        enable_debug_logs: bool = False,
    ):
        super().__init__(config, enable_debug_logs)
        self.win_streak_provider = win_streak_provider

    def _calculate(self):
        provider = self._require(self.win_streak_provider, "win_streak")
        streak = self._count(provider.get_win_streak(), "win streak")
        cfg = self.config

        value = 0.0
        reason = "No significant win streak"
        if streak >= cfg.win_threshold:
            value = min((streak - cfg.win_threshold) * cfg.step_size, cfg.max_bonus)
            if value > 0:
                reason = f"Win streak: {streak} consecutive wins"
                self._log_debug(f"Win streak {streak} -> adjustment {value:+.2f}")

        return self._result(
            value,
            reason,
            streak=streak,
            threshold=cfg.win_threshold,
            applied=value > 0,
        )
