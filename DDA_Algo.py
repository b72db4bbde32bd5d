"""
DDA_Algo.py
-----------
Dynamic Difficulty Adjustment calculator. Evaluates the enabled modifiers,
aggregates their results into one delta, caps and clamps it and returns a
DifficultyResult with a human-readable primary reason.

The calculator is stateless: the previous difficulty is read once per call
from the data provider and never written back. Persisting the new value is
the host's job (see DDA_Service).
"""

import logging
import math
import time
from typing import Iterable, List, Optional, Tuple

from algo_config import (
    NO_CHANGE_REASON,
    NO_MODIFIERS_REASON,
    SLOW_MODIFIER_MS,
    ConfigurationError,
    clamp,
    clamp_difficulty,
    is_finite_number,
)
from DDA_Config import DifficultyConfig, TieBreak
from DDA_Models import DifficultyLevel, DifficultyResult, ModifierResult, utc_now
from Modifier_Aggregator import ModifierAggregator

logger = logging.getLogger(__name__)


class DifficultyCalculator:

    __slots__ = ("_config", "_aggregator", "_data_provider")

    def __init__(
        self,
        config: DifficultyConfig,
        aggregator: ModifierAggregator,
        data_provider=None,
    ):
        if config is None:
            raise ConfigurationError("DifficultyCalculator requires a DifficultyConfig")
        if aggregator is None:
            raise ConfigurationError("DifficultyCalculator requires an aggregator")
        self._config = config
        self._aggregator = aggregator
        self._data_provider = data_provider

    @classmethod
    def from_config(cls, config: DifficultyConfig, data_provider=None) -> "DifficultyCalculator":
        return cls(config, ModifierAggregator.from_config(config), data_provider)

    @property
    def config(self) -> DifficultyConfig:
        return self._config

    @property
    def aggregator(self) -> ModifierAggregator:
        return self._aggregator

    # Bounds helpers

    def clamp_difficulty(self, difficulty: float) -> float:
        return clamp_difficulty(difficulty, self._config.min_difficulty, self._config.max_difficulty)

    def is_valid_difficulty(self, difficulty: float) -> bool:
        if not is_finite_number(difficulty):
            return False
        return self._config.min_difficulty <= difficulty <= self._config.max_difficulty

    def get_default_difficulty(self) -> float:
        return self._config.default_difficulty

    def get_difficulty_level(self, difficulty: float) -> DifficultyLevel:
        return DifficultyLevel.from_difficulty(self.clamp_difficulty(difficulty))

    def get_difficulty_percentage(self, difficulty: float) -> float:
        """Position of difficulty inside [min, max] as 0.0-1.0."""
        low, high = self._config.min_difficulty, self._config.max_difficulty
        if high <= low:
            return 0.0
        return (self.clamp_difficulty(difficulty) - low) / (high - low)

    # Pipeline steps

    @staticmethod
    def _select_modifiers(modifiers) -> list:
        enabled = [m for m in (modifiers or ()) if m is not None and m.enabled]
        seen = set()
        for modifier in enabled:
            if modifier.name in seen:
                raise ConfigurationError(f"modifier {modifier.name!r} appears more than once")
            seen.add(modifier.name)
        # sort() is stable, declaration order breaks priority ties
        enabled.sort(key=lambda m: m.priority)
        return enabled

    def _evaluate(self, modifier) -> ModifierResult:
        started = time.perf_counter()
        try:
            result = modifier.calculate()
        except Exception as e:
            logger.exception("Modifier %s raised out of calculate()", modifier.name)
            result = ModifierResult.no_change(modifier.name, f"modifier error: {e}")
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        if elapsed_ms > SLOW_MODIFIER_MS:
            logger.warning({"event": "slow_modifier", "modifier": modifier.name, "elapsed_ms": round(elapsed_ms, 2)})
        if not isinstance(result, ModifierResult):
            logger.error({"event": "invalid_modifier_result", "modifier": modifier.name})
            result = ModifierResult.no_change(modifier.name, "modifier error: no result returned")
        elif not math.isfinite(result.value):
            logger.error({"event": "non_finite_modifier_value", "modifier": modifier.name})
            result = ModifierResult.no_change(modifier.name, "modifier error: non-finite value")
        if self._config.enable_debug_logs:
            logger.debug("[DifficultyCalculator] %s: %+.2f (%s)", result.name, result.value, result.reason)
        return result

    def _read_previous_difficulty(self) -> Tuple[float, Optional[str]]:
        default = self._config.default_difficulty
        if self._data_provider is None:
            return default, None
        try:
            stored = self._data_provider.get_current_difficulty()
        except Exception as e:
            logger.exception("Difficulty data provider failed to return the stored difficulty")
            return default, f"Stored difficulty unreadable ({e}); using default {default:g}"
        if not is_finite_number(stored):
            warning = f"Stored difficulty {stored!r} is not a number; reset to default {default:g}"
            logger.warning({"event": "difficulty_integrity", "stored": repr(stored), "used": default})
            return default, warning
        if not self.is_valid_difficulty(stored):
            corrected = self.clamp_difficulty(stored)
            warning = f"Stored difficulty {stored:g} out of range; clamped to {corrected:g}"
            logger.warning({"event": "difficulty_integrity", "stored": stored, "used": corrected})
            return corrected, warning
        return float(stored), None

    def _cap_delta(self, raw_delta: float) -> float:
        limit = self._config.max_change_per_evaluation
        return clamp(raw_delta, -limit, limit)

    def _primary_reason(self, results: List[ModifierResult]) -> Optional[str]:
        """Reason of the largest non-zero |value|, None when every result is zero."""
        candidates = [r for r in results if not r.is_no_change]
        if not candidates:
            return None
        if self._config.primary_reason_tie_break is TieBreak.HIGHEST_PRIORITY:
            candidates.reverse()
        # results arrive in priority order and max() keeps the first of ties
        return max(candidates, key=lambda r: abs(r.value)).reason

    def calculate(self, modifiers: Optional[Iterable]) -> DifficultyResult:
        """Evaluate modifiers and produce the next bounded difficulty."""
        selected = self._select_modifiers(modifiers)
        previous, integrity_warning = self._read_previous_difficulty()

        results = [self._evaluate(modifier) for modifier in selected]
        raw_delta = self._aggregator.aggregate(results)
        if not math.isfinite(raw_delta):
            logger.error({"event": "non_finite_delta", "raw_delta": repr(raw_delta)})
            raw_delta = 0.0
        capped_delta = self._cap_delta(raw_delta)
        new_difficulty = self.clamp_difficulty(previous + capped_delta)

        if not selected:
            primary_reason = NO_MODIFIERS_REASON
        else:
            primary_reason = self._primary_reason(results) or integrity_warning or NO_CHANGE_REASON

        result = DifficultyResult(
            previous_difficulty=previous,
            new_difficulty=new_difficulty,
            applied_modifiers=results,
            calculated_at=utc_now(),
            primary_reason=primary_reason,
            integrity_warning=integrity_warning,
        )
        self._log_calculation(result, raw_delta, capped_delta)
        return result

    def _log_calculation(self, result: DifficultyResult, raw_delta: float, capped_delta: float) -> None:
        logger.info(
            {
                "event": "dda_calculate",
                "previous": round(result.previous_difficulty, 3),
                "new": round(result.new_difficulty, 3),
                "raw_delta": round(raw_delta, 3),
                "capped_delta": round(capped_delta, 3),
                "strategy": self._aggregator.strategy.value,
                "modifiers": len(result.applied_modifiers),
                "primary_reason": result.primary_reason,
            }
        )
