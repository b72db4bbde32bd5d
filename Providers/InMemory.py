"""
In-memory provider implementations.

Used by the HTTP tester, the stdin runner and the tests. A real host would
back these with its own save data.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta
from typing import List, Optional

from algo_config import DEFAULT_DIFFICULTY, HOURS_IN_DAY
from DDA_Models import QuitType, utc_now


class InMemoryDifficultyProvider:
    """Keeps the current difficulty in memory; falls back to the default."""

    __slots__ = ("_difficulty", "_default")

    def __init__(self, initial: Optional[float] = None, default: float = DEFAULT_DIFFICULTY):
        self._difficulty = initial
        self._default = default

    def get_current_difficulty(self) -> float:
        if self._difficulty is None:
            return self._default
        return self._difficulty

    def set_current_difficulty(self, difficulty: float) -> None:
        self._difficulty = float(difficulty)


@dataclass
class PlayerSignalSnapshot:
    """Plain-value snapshot of every player signal; implements all providers."""

    current_difficulty: float = DEFAULT_DIFFICULTY
    # Streaks
    win_streak: int = 0
    loss_streak: int = 0
    total_wins: int = 0
    total_losses: int = 0
    # Time away
    hours_since_last_play: float = 0.0
    days_away: Optional[int] = None
    as_of: datetime = field(default_factory=utc_now)
    # Quits / sessions (seconds)
    last_quit_type: QuitType = QuitType.NORMAL
    current_session_duration: float = 0.0
    average_session_duration: float = 0.0
    recent_rage_quit_count: int = 0
    # Level progress
    current_level: int = 1
    average_completion_time: float = 0.0
    attempts_on_current_level: int = 0
    completion_rate: float = 0.0
    current_level_difficulty: float = DEFAULT_DIFFICULTY
    current_level_time_percentage: float = 0.0
    # Session pattern history
    recent_session_durations: List[float] = field(default_factory=list)
    total_recent_quits: int = 0
    recent_mid_level_quits: int = 0
    previous_difficulty: float = 0.0
    session_duration_before_last_adjustment: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PlayerSignalSnapshot":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown signal fields: {', '.join(unknown)}")
        if "last_quit_type" in data:
            data["last_quit_type"] = QuitType.parse(data["last_quit_type"])
        if "as_of" in data and isinstance(data["as_of"], str):
            data["as_of"] = datetime.fromisoformat(data["as_of"])
        if "recent_session_durations" in data:
            data["recent_session_durations"] = [float(d) for d in data["recent_session_durations"]]
        return cls(**data)

    # DifficultyDataProvider
    def get_current_difficulty(self) -> float:
        return self.current_difficulty

    def set_current_difficulty(self, difficulty: float) -> None:
        self.current_difficulty = float(difficulty)

    # WinStreakProvider
    def get_win_streak(self) -> int:
        return self.win_streak

    def get_loss_streak(self) -> int:
        return self.loss_streak

    def get_total_wins(self) -> int:
        return self.total_wins

    def get_total_losses(self) -> int:
        return self.total_losses

    # TimeDecayProvider
    def get_time_since_last_play(self) -> timedelta:
        return timedelta(hours=self.hours_since_last_play)

    def get_last_play_time(self) -> datetime:
        return self.as_of - self.get_time_since_last_play()

    def get_days_away_from_game(self) -> int:
        if self.days_away is not None:
            return self.days_away
        return int(self.hours_since_last_play // HOURS_IN_DAY)

    # RageQuitProvider
    def get_last_quit_type(self) -> QuitType:
        return self.last_quit_type

    def get_current_session_duration(self) -> float:
        return self.current_session_duration

    def get_average_session_duration(self) -> float:
        return self.average_session_duration

    def get_recent_rage_quit_count(self) -> int:
        return self.recent_rage_quit_count

    # LevelProgressProvider
    def get_current_level(self) -> int:
        return self.current_level

    def get_average_completion_time(self) -> float:
        return self.average_completion_time

    def get_attempts_on_current_level(self) -> int:
        return self.attempts_on_current_level

    def get_completion_rate(self) -> float:
        return self.completion_rate

    def get_current_level_difficulty(self) -> float:
        return self.current_level_difficulty

    def get_current_level_time_percentage(self) -> float:
        return self.current_level_time_percentage

    # SessionPatternProvider
    def get_recent_session_durations(self, count: int) -> List[float]:
        return list(self.recent_session_durations[:count])

    def get_total_recent_quits(self) -> int:
        return self.total_recent_quits

    def get_recent_mid_level_quits(self) -> int:
        return self.recent_mid_level_quits

    def get_previous_difficulty(self) -> float:
        return self.previous_difficulty

    def get_session_duration_before_last_adjustment(self) -> float:
        return self.session_duration_before_last_adjustment
