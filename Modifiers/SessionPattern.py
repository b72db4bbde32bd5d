from dataclasses import dataclass
from typing import Optional

from DDA_Models import QuitType
from Modifiers.Base import BaseModifier, InvalidProviderDataError, ModifierConfig
from Providers.Interfaces import DifficultyDataProvider, RageQuitProvider, SessionPatternProvider


@dataclass(frozen=True)
class SessionPatternConfig(ModifierConfig):
    priority: int = 7
    # Session length (seconds)
    min_normal_session_duration: float = 180.0
    very_short_session_threshold: float = 60.0
    very_short_session_decrease: float = 0.5
    # Rolling history window
    session_history_size: int = 5
    short_session_ratio: float = 0.5
    consistent_short_sessions_decrease: float = 0.8
    # Quit clusters
    rage_quit_count_threshold: int = 2
    rage_quit_pattern_decrease: float = 1.0
    rage_quit_penalty_multiplier: float = 0.5
    mid_level_quit_decrease: float = 0.4
    mid_level_quit_ratio: float = 0.3
    # Adjustment effectiveness feedback
    difficulty_improvement_threshold: float = 1.2
    ineffective_adjustment_decrease: float = 0.3


class SessionPatternModifier(BaseModifier):
    """
    Reads frustration out of how the player's sessions look.

    Every detector contributes its own negative term: a very short current
    session, short sessions on average, a cluster of rage quits, a mid-level
    quit, a rolling history dominated by short sessions, a high share of
    mid-level quits, and a previous difficulty decrease that did not make
    sessions measurably longer.

    The history, quit ratio and effectiveness detectors need the optional
    session pattern provider; effectiveness additionally needs the difficulty
    provider to know which way the last adjustment went.
    """

    name = "SessionPattern"
    config_class = SessionPatternConfig

    def __init__(
        self,
        config: Optional[SessionPatternConfig] = None,
        rage_quit_provider: Optional[RageQuitProvider] = None,
        session_pattern_provider: Optional[SessionPatternProvider] = None,
        difficulty_provider: Optional[DifficultyDataProvider] = None,
        enable_debug_logs: bool = False,
    ):
        super().__init__(config, enable_debug_logs)
        self.rage_quit_provider = rage_quit_provider
        self.session_pattern_provider = session_pattern_provider
        self.difficulty_provider = difficulty_provider

    def _calculate(self):
        provider = self._require(self.rage_quit_provider, "rage_quit")
        current_duration = self._non_negative(provider.get_current_session_duration(), "current session duration")
        avg_duration = self._non_negative(provider.get_average_session_duration(), "average session duration")
        rage_quits = self._count(provider.get_recent_rage_quit_count(), "recent rage quit count")
        last_quit_type = provider.get_last_quit_type()
        if not isinstance(last_quit_type, QuitType):
            raise InvalidProviderDataError(f"unknown quit type {last_quit_type!r}")
        cfg = self.config

        terms = []
        metadata = {
            "current_session_duration": current_duration,
            "avg_session_duration": avg_duration,
            "rage_quit_count": rage_quits,
            "last_quit_type": last_quit_type.value,
        }

        if 0 < current_duration < cfg.very_short_session_threshold:
            terms.append((-cfg.very_short_session_decrease, f"Very short session ({current_duration:.0f}s)"))

        if 0 < avg_duration < cfg.min_normal_session_duration:
            ratio = avg_duration / cfg.min_normal_session_duration
            terms.append((
                -(1.0 - ratio) * cfg.consistent_short_sessions_decrease,
                f"Short avg sessions ({avg_duration:.0f}s)",
            ))

        if rage_quits >= cfg.rage_quit_count_threshold:
            terms.append((
                -cfg.rage_quit_pattern_decrease * cfg.rage_quit_penalty_multiplier,
                f"Recent rage quits ({rage_quits})",
            ))

        if last_quit_type is QuitType.MID_PLAY:
            terms.append((-cfg.mid_level_quit_decrease, "Mid-level quit detected"))

        if self.session_pattern_provider is not None:
            terms.extend(self._history_terms(current_duration, metadata))

        value = sum(adjustment for adjustment, _ in terms)
        for adjustment, reason in terms:
            self._log_debug(f"{reason} -> {adjustment:+.2f}")
        reason = ", ".join(r for _, r in terms) if terms else "Normal session patterns"
        metadata["applied"] = value != 0.0
        return self._result(value, reason, **metadata)

    def _history_terms(self, current_duration: float, metadata: dict):
        cfg = self.config
        history = self.session_pattern_provider
        window = int(cfg.session_history_size)

        durations = [
            self._non_negative(d, "session duration")
            for d in history.get_recent_session_durations(window)
        ][:window]
        metadata["history_size"] = len(durations)
        # Only judge the history once the window is full
        if window > 0 and len(durations) >= window:
            short = sum(1 for d in durations if d < cfg.min_normal_session_duration)
            short_ratio = short / len(durations)
            metadata["short_session_ratio"] = round(short_ratio, 4)
            if short_ratio >= cfg.short_session_ratio:
                yield (
                    -cfg.consistent_short_sessions_decrease * short_ratio,
                    f"History shows {short}/{len(durations)} short sessions",
                )

        total_quits = self._count(history.get_total_recent_quits(), "total recent quits")
        mid_level_quits = self._count(history.get_recent_mid_level_quits(), "recent mid-level quits")
        if total_quits > 0:
            mid_ratio = min(mid_level_quits / total_quits, 1.0)
            metadata["mid_level_quit_ratio"] = round(mid_ratio, 4)
            if mid_ratio > cfg.mid_level_quit_ratio:
                yield (
                    -cfg.mid_level_quit_decrease * mid_ratio,
                    f"High mid-level quit ratio ({mid_ratio:.0%})",
                )

        effective = self._adjustment_effective(current_duration)
        metadata["adjustment_effective"] = effective
        if effective is False:
            yield (-cfg.ineffective_adjustment_decrease, "Difficulty adjustment not effective")

    def _adjustment_effective(self, current_duration: float) -> Optional[bool]:
        """
        True/False when the last decrease can be judged, None otherwise.

        A decrease counts as effective when the current session is at least
        ``difficulty_improvement_threshold`` times longer than the session
        observed before the adjustment.
        """
        if self.difficulty_provider is None:
            return None
        previous = self._non_negative(self.session_pattern_provider.get_previous_difficulty(), "previous difficulty")
        before = self._non_negative(
            self.session_pattern_provider.get_session_duration_before_last_adjustment(),
            "session duration before last adjustment",
        )
        current = self._number(self.difficulty_provider.get_current_difficulty(), "current difficulty")
        if previous <= 0 or before <= 0 or current_duration <= 0 or current >= previous:
            return None
        return current_duration / before >= self.config.difficulty_improvement_threshold
