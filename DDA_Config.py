"""
DDA_Config.py
-------------
Engine-level configuration: difficulty bounds, the aggregation strategy and
the per-type modifier configs. Validated on construction so structural
mistakes fail fast instead of surfacing per call.
"""

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Dict, Mapping, Optional

from algo_config import (
    DEFAULT_DIFFICULTY,
    DEFAULT_DIMINISHING_FACTOR,
    MAX_CHANGE_PER_EVALUATION,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    ConfigurationError,
)
from Modifier_Aggregator import AggregationStrategy
from Modifiers.Base import ModifierConfig
from Modifiers.Registry import default_modifier_configs, parse_modifier_configs


class TieBreak(Enum):
    """Which modifier's reason wins when two share the largest |value|."""

    LOWEST_PRIORITY = "lowest_priority"
    HIGHEST_PRIORITY = "highest_priority"

    @classmethod
    def parse(cls, value) -> "TieBreak":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(f"unknown tie break policy: {value!r}") from None


@dataclass(frozen=True)
class DifficultyConfig:
    min_difficulty: float = MIN_DIFFICULTY
    max_difficulty: float = MAX_DIFFICULTY
    default_difficulty: float = DEFAULT_DIFFICULTY
    max_change_per_evaluation: float = MAX_CHANGE_PER_EVALUATION
    aggregation_strategy: AggregationStrategy = AggregationStrategy.DIMINISHING_RETURNS
    diminishing_factor: float = DEFAULT_DIMINISHING_FACTOR
    preserve_opposing_signs: bool = True
    aggregation_weights: Mapping[str, float] = field(default_factory=dict)
    primary_reason_tie_break: TieBreak = TieBreak.LOWEST_PRIORITY
    enable_debug_logs: bool = False
    modifier_configs: Mapping[str, ModifierConfig] = field(default_factory=default_modifier_configs)

    def __post_init__(self):
        for name in ("min_difficulty", "max_difficulty", "default_difficulty", "max_change_per_evaluation"):
            value = getattr(self, name)
            if value is None:
                raise ConfigurationError(f"{name} is required")
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
        if self.min_difficulty > self.max_difficulty:
            raise ConfigurationError(
                f"min_difficulty ({self.min_difficulty}) exceeds max_difficulty ({self.max_difficulty})"
            )
        if not self.min_difficulty <= self.default_difficulty <= self.max_difficulty:
            raise ConfigurationError("default_difficulty must lie within [min_difficulty, max_difficulty]")
        if self.max_change_per_evaluation < 0:
            raise ConfigurationError("max_change_per_evaluation cannot be negative")
        if self.aggregation_strategy is None:
            raise ConfigurationError("an aggregation strategy is required")
        object.__setattr__(self, "aggregation_strategy", AggregationStrategy.parse(self.aggregation_strategy))
        object.__setattr__(self, "primary_reason_tie_break", TieBreak.parse(self.primary_reason_tie_break))
        if not 0.0 <= self.diminishing_factor <= 1.0:
            raise ConfigurationError("diminishing_factor must lie within [0, 1]")
        object.__setattr__(self, "modifier_configs", parse_modifier_configs(self.modifier_configs))

    def get_modifier_config(self, modifier_type: str) -> Optional[ModifierConfig]:
        return self.modifier_configs.get(modifier_type)

    def with_modifier(self, modifier_type: str, **changes) -> "DifficultyConfig":
        """Copy of this config with one modifier config's fields replaced."""
        configs = dict(self.modifier_configs)
        configs[modifier_type] = replace(configs[modifier_type], **changes)
        return replace(self, modifier_configs=configs)

    def to_dict(self) -> dict:
        return {
            "min_difficulty": self.min_difficulty,
            "max_difficulty": self.max_difficulty,
            "default_difficulty": self.default_difficulty,
            "max_change_per_evaluation": self.max_change_per_evaluation,
            "aggregation_strategy": self.aggregation_strategy.value,
            "diminishing_factor": self.diminishing_factor,
            "preserve_opposing_signs": self.preserve_opposing_signs,
            "aggregation_weights": dict(self.aggregation_weights),
            "primary_reason_tie_break": self.primary_reason_tie_break.value,
            "enable_debug_logs": self.enable_debug_logs,
            "modifiers": {key: cfg.to_dict() for key, cfg in self.modifier_configs.items()},
        }


def default_config() -> DifficultyConfig:
    return DifficultyConfig()


def config_from_dict(data: Optional[dict]) -> DifficultyConfig:
    """Build a DifficultyConfig from plain JSON-style values."""
    data = dict(data or {})
    modifiers = data.pop("modifiers", None)
    known = {f.name for f in fields(DifficultyConfig)} - {"modifier_configs"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"unknown config fields: {', '.join(unknown)}")
    return DifficultyConfig(modifier_configs=modifiers or {}, **data)
