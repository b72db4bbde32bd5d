from dataclasses import dataclass
from typing import Optional

from algo_config import DAYS_IN_WEEK, HOURS_IN_DAY
from Modifiers.Base import BaseModifier, ModifierConfig
from Providers.Interfaces import TimeDecayProvider


@dataclass(frozen=True)
class TimeDecayConfig(ModifierConfig):
    priority: int = 3
    decay_per_day: float = 0.5
    max_decay: float = 2.0
    grace_hours: float = 6.0


class TimeDecayModifier(BaseModifier):
    """
    Lowers difficulty for returning players.

    Nothing happens inside the grace window. Past it, decay accrues per day
    counted from the moment the grace window expired, not from the last play.
    """

    name = "TimeDecay"
    config_class = TimeDecayConfig

    def __init__(
        self,
        config: Optional[TimeDecayConfig] = None,
        time_decay_provider: Optional[TimeDecayProvider] = None,
        enable_debug_logs: bool = False,
    ):
        super().__init__(config, enable_debug_logs)
        self.time_decay_provider = time_decay_provider

    def _calculate(self):
        provider = self._require(self.time_decay_provider, "time_decay")
        time_since_play = provider.get_time_since_last_play()
        last_play_time = provider.get_last_play_time()
        days_away = self._count(provider.get_days_away_from_game(), "days away")
        hours_away = self._non_negative(time_since_play.total_seconds() / 3600.0, "hours since last play")
        cfg = self.config

        value = 0.0
        reason = "Recently played"
        if hours_away > cfg.grace_hours:
            elapsed_days = (hours_away - cfg.grace_hours) / HOURS_IN_DAY
            decay = min(elapsed_days * cfg.decay_per_day, cfg.max_decay)
            if decay > 0:
                value = -decay
            reason = self._describe_absence(hours_away, days_away, last_play_time)
            self._log_debug(f"Away {hours_away:.1f}h ({days_away} days) -> adjustment {value:+.2f}")

        return self._result(
            value,
            reason,
            last_play_time=last_play_time.isoformat(),
            hours_away=round(hours_away, 3),
            days_away=days_away,
            grace_hours=cfg.grace_hours,
            applied=value < 0,
        )

    @staticmethod
    def _describe_absence(hours_away: float, days_away: int, last_play_time) -> str:
        if days_away < 1:
            return f"Away for {hours_away:.1f} hours (last play: {last_play_time:%b %d %H:%M})"
        if days_away < DAYS_IN_WEEK:
            unit = "day" if days_away == 1 else "days"
            return f"Away for {days_away} {unit} (last play: {last_play_time:%b %d})"
        weeks = days_away / DAYS_IN_WEEK
        return f"Away for {weeks:.1f} weeks (last play: {last_play_time:%b %d})"
