from dataclasses import dataclass
from typing import Optional

from algo_config import RAGE_QUIT_SECONDS, ConfigurationError
from DDA_Models import QuitType
from Modifiers.Base import BaseModifier, InvalidProviderDataError, ModifierConfig
from Providers.Interfaces import RageQuitProvider


@dataclass(frozen=True)
class RageQuitConfig(ModifierConfig):
    priority: int = 4
    rage_quit_threshold: float = RAGE_QUIT_SECONDS
    rage_quit_reduction: float = 1.0
    quit_reduction: float = 0.5
    mid_play_reduction: float = 0.3
    # 0 disables scaling by repeated rage quits
    repeat_scale: float = 0.0
    max_reduction: float = 2.0

    def validate(self) -> None:
        if self.max_reduction < self.rage_quit_reduction:
            raise ConfigurationError("RageQuitConfig.max_reduction must be >= rage_quit_reduction")


class RageQuitModifier(BaseModifier):
    """
    Classifies how the last session ended and subtracts a penalty per kind.

    A session counts as a rage quit when the provider reports one, or when a
    plain quit came faster than ``rage_quit_threshold`` seconds.
    """

    name = "RageQuit"
    config_class = RageQuitConfig

    def __init__(
        self,
        config: Optional[RageQuitConfig] = None,
        rage_quit_provider: Optional[RageQuitProvider] = None,
        enable_debug_logs: bool = False,
    ):
        super().__init__(config, enable_debug_logs)
        self.rage_quit_provider = rage_quit_provider

    def classify(self, quit_type: QuitType, duration: float) -> str:
        if quit_type is QuitType.RAGE_QUIT:
            return "rage"
        if quit_type is QuitType.QUIT:
            return "rage" if duration < self.config.rage_quit_threshold else "quit"
        if quit_type is QuitType.MID_PLAY:
            return "mid_level"
        return "normal"

    def _calculate(self):
        provider = self._require(self.rage_quit_provider, "rage_quit")
        quit_type = provider.get_last_quit_type()
        if not isinstance(quit_type, QuitType):
            raise InvalidProviderDataError(f"unknown quit type {quit_type!r}")
        duration = self._non_negative(provider.get_current_session_duration(), "session duration")
        recent_rage_quits = self._count(provider.get_recent_rage_quit_count(), "recent rage quit count")
        cfg = self.config

        kind = self.classify(quit_type, duration)
        value = 0.0
        reason = "Normal session end"
        if kind == "rage":
            penalty = cfg.rage_quit_reduction
            if cfg.repeat_scale > 0 and recent_rage_quits > 1:
                penalty *= 1.0 + cfg.repeat_scale * (recent_rage_quits - 1)
            value = -min(penalty, cfg.max_reduction)
            reason = f"Rage quit detected (played only {duration:.1f}s)"
            if recent_rage_quits > 1:
                reason += f", {recent_rage_quits} recent rage quits"
        elif kind == "quit":
            value = -cfg.quit_reduction
            reason = f"Quit after {duration:.1f}s"
        elif kind == "mid_level":
            value = -cfg.mid_play_reduction
            reason = "Quit during play"

        if value:
            self._log_debug(f"{kind} quit after {duration:.1f}s -> adjustment {value:+.2f}")

        return self._result(
            value,
            reason,
            last_quit_type=quit_type.value,
            classification=kind,
            session_duration=duration,
            recent_rage_quits=recent_rage_quits,
            rage_quit_detected=kind == "rage",
        )
