"""
DDA_Models.py
-------------
Immutable value types shared by the modifiers, the aggregator and the
calculator.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from algo_config import CHANGE_EPSILON, difficulty_label


class QuitType(Enum):
    NORMAL = "normal"
    QUIT = "quit"
    MID_PLAY = "mid_play"
    RAGE_QUIT = "rage_quit"

    @classmethod
    def parse(cls, value) -> "QuitType":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise TypeError("quit type must be a string or QuitType")
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValueError(f"unknown quit type: {value!r}")


class DifficultyLevel(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def from_difficulty(cls, difficulty: float) -> "DifficultyLevel":
        return cls(difficulty_label(difficulty))


@dataclass(frozen=True)
class ModifierResult:
    name: str
    value: float
    reason: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Frozen dataclass: freeze the metadata view too, keeping insertion order.
        object.__setattr__(self, "value", float(self.value))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def no_change(
        cls, name: str, reason: str, metadata: Optional[Mapping[str, Any]] = None
    ) -> "ModifierResult":
        return cls(name=name, value=0.0, reason=reason, metadata=metadata or {})

    @property
    def is_no_change(self) -> bool:
        return self.value == 0.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "value": round(self.value, 3),
            "reason": self.reason,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class DifficultyResult:
    previous_difficulty: float
    new_difficulty: float
    applied_modifiers: tuple
    calculated_at: datetime
    primary_reason: str
    integrity_warning: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "applied_modifiers", tuple(self.applied_modifiers))

    @property
    def total_adjustment(self) -> float:
        return self.new_difficulty - self.previous_difficulty

    @property
    def has_changed(self) -> bool:
        return abs(self.total_adjustment) > CHANGE_EPSILON

    @property
    def level(self) -> DifficultyLevel:
        return DifficultyLevel.from_difficulty(self.new_difficulty)

    def to_dict(self) -> dict:
        return {
            "previous_difficulty": round(self.previous_difficulty, 3),
            "new_difficulty": round(self.new_difficulty, 3),
            "total_adjustment": round(self.total_adjustment, 3),
            "difficulty_label": self.level.value,
            "primary_reason": self.primary_reason,
            "integrity_warning": self.integrity_warning,
            "calculated_at": self.calculated_at.isoformat(),
            "applied_modifiers": [m.to_dict() for m in self.applied_modifiers],
        }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
