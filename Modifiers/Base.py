"""
Modifier contract shared by every difficulty signal.

A modifier is named, prioritized (lower runs first) and can be toggled with
``enabled``. ``calculate()`` takes no arguments: everything it needs comes from
providers injected at construction. ``calculate()`` never raises; a missing
provider, a provider error or invalid provider data all turn into a zero
``ModifierResult`` whose reason says what went wrong.
"""

import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Optional

from algo_config import PROVIDER_UNAVAILABLE_REASON, ConfigurationError
from DDA_Models import ModifierResult

logger = logging.getLogger(__name__)


class ProviderUnavailableError(LookupError):
    def __init__(self, provider_name: str):
        super().__init__(f"{provider_name} provider is not wired")
        self.provider_name = provider_name


class InvalidProviderDataError(ValueError):
    pass


@dataclass(frozen=True)
class ModifierConfig:
    enabled: bool = True
    priority: int = 0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ("enabled", "priority"):
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{type(self).__name__}.{f.name} must be numeric")
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(
                    f"{type(self).__name__}.{f.name} must be a finite non-negative number"
                )
        if not isinstance(self.priority, int) or isinstance(self.priority, bool):
            raise ConfigurationError(f"{type(self).__name__}.priority must be an integer")
        self.validate()

    def validate(self) -> None:
        """Hook for cross-field checks in subclasses."""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ModifierConfig":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"unknown {cls.__name__} fields: {', '.join(unknown)}"
            )
        return cls(**data)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class BaseModifier:
    name = "Base"
    config_class = ModifierConfig

    def __init__(self, config: Optional[ModifierConfig] = None, enable_debug_logs: bool = False):
        if config is None:
            config = self.config_class()
        if not isinstance(config, self.config_class):
            raise ConfigurationError(
                f"{self.name} expects {self.config_class.__name__}, got {type(config).__name__}"
            )
        self.config = config
        self.enabled = config.enabled
        self._debug = enable_debug_logs

    @property
    def priority(self) -> int:
        return self.config.priority

    def __repr__(self):
        return f"{type(self).__name__}(priority={self.priority}, enabled={self.enabled})"

    def calculate(self) -> ModifierResult:
        try:
            return self._calculate()
        except ProviderUnavailableError as e:
            logger.debug({"event": "provider_unavailable", "modifier": self.name, "provider": e.provider_name})
            return ModifierResult.no_change(
                self.name, PROVIDER_UNAVAILABLE_REASON, {"missing_provider": e.provider_name}
            )
        except InvalidProviderDataError as e:
            logger.warning({"event": "invalid_provider_data", "modifier": self.name, "error": str(e)})
            return ModifierResult.no_change(self.name, f"invalid provider data: {e}")
        except Exception as e:
            logger.exception("Modifier %s failed while reading providers", self.name)
            return ModifierResult.no_change(self.name, f"modifier error: {e}")

    def _calculate(self) -> ModifierResult:
        raise NotImplementedError

    def on_applied(self, result) -> None:
        """Called by the host after a DifficultyResult has been written back."""

    def _result(self, value: float, reason: str, **metadata: Any) -> ModifierResult:
        return ModifierResult(name=self.name, value=value, reason=reason, metadata=metadata)

    def _log_debug(self, message: str) -> None:
        if self._debug:
            logger.debug("[%s] %s", self.name, message)

    # Provider access helpers

    @staticmethod
    def _require(provider, provider_name: str):
        if provider is None:
            raise ProviderUnavailableError(provider_name)
        return provider

    @staticmethod
    def _count(value, label: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidProviderDataError(f"{label} must be an integer, got {value!r}")
        if value < 0:
            raise InvalidProviderDataError(f"{label} cannot be negative ({value})")
        return value

    @staticmethod
    def _number(value, label: str) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidProviderDataError(f"{label} must be numeric, got {value!r}")
        if not math.isfinite(value):
            raise InvalidProviderDataError(f"{label} must be finite ({value})")
        return float(value)

    @classmethod
    def _non_negative(cls, value, label: str) -> float:
        value = cls._number(value, label)
        if value < 0:
            raise InvalidProviderDataError(f"{label} cannot be negative ({value})")
        return value

    @classmethod
    def _rate(cls, value, label: str) -> float:
        value = cls._number(value, label)
        if not 0.0 <= value <= 1.0:
            raise InvalidProviderDataError(f"{label} must be within [0, 1] ({value})")
        return value
