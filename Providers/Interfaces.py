"""
Read-only provider interfaces consumed by the modifiers.

The host application implements these; the engine only reads from them. Any
object with the right methods satisfies a protocol (structural typing), so a
single host class may implement several of them.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Protocol

from DDA_Models import QuitType


class DifficultyDataProvider(Protocol):
    """Owner of the persisted current difficulty. Only the host writes it."""

    def get_current_difficulty(self) -> float:
        ...

    def set_current_difficulty(self, difficulty: float) -> None:
        ...


class WinStreakProvider(Protocol):

    def get_win_streak(self) -> int:
        ...

    def get_loss_streak(self) -> int:
        ...

    def get_total_wins(self) -> int:
        ...

    def get_total_losses(self) -> int:
        ...


class TimeDecayProvider(Protocol):

    def get_time_since_last_play(self) -> timedelta:
        ...

    def get_last_play_time(self) -> datetime:
        ...

    def get_days_away_from_game(self) -> int:
        ...


class RageQuitProvider(Protocol):

    def get_last_quit_type(self) -> QuitType:
        ...

    # Durations are in seconds.
    def get_current_session_duration(self) -> float:
        ...

    def get_average_session_duration(self) -> float:
        ...

    def get_recent_rage_quit_count(self) -> int:
        ...


class LevelProgressProvider(Protocol):

    def get_current_level(self) -> int:
        ...

    def get_average_completion_time(self) -> float:
        ...

    def get_attempts_on_current_level(self) -> int:
        ...

    def get_completion_rate(self) -> float:
        ...

    def get_current_level_difficulty(self) -> float:
        ...

    # 1.0 means the level took exactly the expected time.
    def get_current_level_time_percentage(self) -> float:
        ...


class SessionPatternProvider(Protocol):

    def get_recent_session_durations(self, count: int) -> List[float]:
        """Most recent session first."""
        ...

    def get_total_recent_quits(self) -> int:
        ...

    def get_recent_mid_level_quits(self) -> int:
        ...

    def get_previous_difficulty(self) -> float:
        """Difficulty value before the last adjustment (0 when unknown)."""
        ...

    def get_session_duration_before_last_adjustment(self) -> float:
        ...


@dataclass
class ProviderSet:
    """Optional provider capabilities handed to the modifier registry."""

    difficulty: Optional[DifficultyDataProvider] = None
    win_streak: Optional[WinStreakProvider] = None
    time_decay: Optional[TimeDecayProvider] = None
    rage_quit: Optional[RageQuitProvider] = None
    level_progress: Optional[LevelProgressProvider] = None
    session_pattern: Optional[SessionPatternProvider] = None

    @classmethod
    def from_single(cls, provider) -> "ProviderSet":
        """Use one object that implements every protocol for all slots."""
        return cls(
            difficulty=provider,
            win_streak=provider,
            time_decay=provider,
            rage_quit=provider,
            level_progress=provider,
            session_pattern=provider,
        )
