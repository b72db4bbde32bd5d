"""
DDA_Service.py
--------------
High-level entry point used by hosts and the backend. Wires the modifiers
from config, runs the calculator and writes the new difficulty back through
the difficulty data provider.
"""

import logging
from threading import RLock
from typing import List, Optional

from algo_config import ConfigurationError
from DDA_Algo import DifficultyCalculator
from DDA_Config import DifficultyConfig, default_config
from DDA_Models import DifficultyLevel, DifficultyResult
from Modifiers.Registry import build_modifiers
from Providers.Interfaces import ProviderSet

logger = logging.getLogger(__name__)


class DifficultyService:

    def __init__(
        self,
        config: Optional[DifficultyConfig] = None,
        providers: Optional[ProviderSet] = None,
        modifiers: Optional[List] = None,
    ):
        self.config = config or default_config()
        self.providers = providers or ProviderSet()
        if self.providers.difficulty is None:
            raise ConfigurationError("DifficultyService requires a difficulty data provider")
        self.calculator = DifficultyCalculator.from_config(self.config, self.providers.difficulty)
        if modifiers is None:
            modifiers = build_modifiers(
                self.config.modifier_configs, self.providers, self.config.enable_debug_logs
            )
        self._modifiers = []
        for modifier in modifiers:
            self.add_modifier(modifier)
        # Held from the read of the stored value to its write-back; reentrant so
        # update_difficulty can call apply_result while holding it
        self._write_lock = RLock()

    @property
    def current_difficulty(self) -> float:
        return self.providers.difficulty.get_current_difficulty()

    @property
    def modifiers(self) -> tuple:
        return tuple(self._modifiers)

    # Modifier management

    def get_modifier(self, name: str):
        for modifier in self._modifiers:
            if modifier.name == name:
                return modifier
        return None

    def add_modifier(self, modifier) -> None:
        if self.get_modifier(modifier.name) is not None:
            raise ConfigurationError(f"modifier {modifier.name!r} is already registered")
        self._modifiers.append(modifier)

    def remove_modifier(self, name: str) -> bool:
        modifier = self.get_modifier(name)
        if modifier is None:
            return False
        self._modifiers.remove(modifier)
        return True

    def set_modifier_enabled(self, name: str, enabled: bool) -> None:
        modifier = self.get_modifier(name)
        if modifier is None:
            raise KeyError(f"no modifier named {name!r}")
        modifier.enabled = bool(enabled)

    # Evaluation

    def calculate(self) -> DifficultyResult:
        """Compute the next difficulty without persisting it."""
        return self.calculator.calculate(self._modifiers)

    def apply_result(self, result: DifficultyResult) -> float:
        with self._write_lock:
            self.providers.difficulty.set_current_difficulty(result.new_difficulty)
        for modifier in self._modifiers:
            on_applied = getattr(modifier, "on_applied", None)
            if modifier.enabled and on_applied is not None:
                on_applied(result)
        logger.info(
            {
                "event": "dda_apply",
                "previous": round(result.previous_difficulty, 3),
                "new": round(result.new_difficulty, 3),
                "reason": result.primary_reason,
            }
        )
        return result.new_difficulty

    def update_difficulty(self) -> DifficultyResult:
        with self._write_lock:
            result = self.calculate()
            self.apply_result(result)
        return result

    def reset_difficulty(self) -> float:
        default = self.calculator.get_default_difficulty()
        with self._write_lock:
            self.providers.difficulty.set_current_difficulty(default)
        logger.info({"event": "dda_reset", "difficulty": default})
        return default

    def get_difficulty_level(self) -> DifficultyLevel:
        return self.calculator.get_difficulty_level(self.current_difficulty)

    def get_difficulty_stats(self) -> dict:
        current = self.current_difficulty
        return {
            "current_difficulty": current,
            "difficulty_label": self.calculator.get_difficulty_level(current).value,
            "difficulty_percentage": round(self.calculator.get_difficulty_percentage(current), 3),
            "strategy": self.calculator.aggregator.strategy.value,
            "modifiers": {m.name: {"priority": m.priority, "enabled": m.enabled} for m in self._modifiers},
        }
