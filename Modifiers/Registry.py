"""
Type-discriminated table of every modifier the engine knows about.

Each entry pairs a modifier type key with its typed config class, its
modifier class and a factory that wires the providers it needs out of a
``ProviderSet``. The table is built once at import; no reflection.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from algo_config import ConfigurationError
from Modifiers.Base import BaseModifier, ModifierConfig
from Modifiers.CompletionRate import CompletionRateConfig, CompletionRateModifier
from Modifiers.LevelProgress import LevelProgressConfig, LevelProgressModifier
from Modifiers.LossStreak import LossStreakConfig, LossStreakModifier
from Modifiers.RageQuit import RageQuitConfig, RageQuitModifier
from Modifiers.SessionPattern import SessionPatternConfig, SessionPatternModifier
from Modifiers.TimeDecay import TimeDecayConfig, TimeDecayModifier
from Modifiers.WinStreak import WinStreakConfig, WinStreakModifier
from Providers.Interfaces import ProviderSet


@dataclass(frozen=True)
class ModifierEntry:
    config_class: type
    modifier_class: type
    factory: Callable[[ModifierConfig, ProviderSet, bool], BaseModifier]


MODIFIER_REGISTRY: Dict[str, ModifierEntry] = {
    WinStreakModifier.name: ModifierEntry(
        WinStreakConfig,
        WinStreakModifier,
        lambda cfg, p, debug: WinStreakModifier(cfg, p.win_streak, debug),
    ),
    LossStreakModifier.name: ModifierEntry(
        LossStreakConfig,
        LossStreakModifier,
        lambda cfg, p, debug: LossStreakModifier(cfg, p.win_streak, debug),
    ),
    TimeDecayModifier.name: ModifierEntry(
        TimeDecayConfig,
        TimeDecayModifier,
        lambda cfg, p, debug: TimeDecayModifier(cfg, p.time_decay, debug),
    ),
    RageQuitModifier.name: ModifierEntry(
        RageQuitConfig,
        RageQuitModifier,
        lambda cfg, p, debug: RageQuitModifier(cfg, p.rage_quit, debug),
    ),
    CompletionRateModifier.name: ModifierEntry(
        CompletionRateConfig,
        CompletionRateModifier,
        lambda cfg, p, debug: CompletionRateModifier(cfg, p.win_streak, p.level_progress, debug),
    ),
    LevelProgressModifier.name: ModifierEntry(
        LevelProgressConfig,
        LevelProgressModifier,
        lambda cfg, p, debug: LevelProgressModifier(cfg, p.level_progress, debug),
    ),
    SessionPatternModifier.name: ModifierEntry(
        SessionPatternConfig,
        SessionPatternModifier,
        lambda cfg, p, debug: SessionPatternModifier(
            cfg, p.rage_quit, p.session_pattern, p.difficulty, debug
        ),
    ),
}


def get_entry(modifier_type: str) -> ModifierEntry:
    try:
        return MODIFIER_REGISTRY[modifier_type]
    except KeyError:
        known = ", ".join(MODIFIER_REGISTRY)
        raise ConfigurationError(f"unknown modifier type {modifier_type!r} (known: {known})") from None


def default_modifier_configs() -> Dict[str, ModifierConfig]:
    return {key: entry.config_class() for key, entry in MODIFIER_REGISTRY.items()}


def parse_modifier_configs(data: Optional[Mapping[str, dict]]) -> Dict[str, ModifierConfig]:
    """
    Build typed configs from ``{type key: {field: value}}``.

    Types not mentioned keep their defaults; unknown types or fields raise
    ConfigurationError.
    """
    configs = default_modifier_configs()
    for modifier_type, values in (data or {}).items():
        entry = get_entry(modifier_type)
        if isinstance(values, entry.config_class):
            configs[modifier_type] = values
        else:
            configs[modifier_type] = entry.config_class.from_dict(values)
    return configs


def build_modifiers(
    modifier_configs: Mapping[str, ModifierConfig],
    providers: Optional[ProviderSet] = None,
    enable_debug_logs: bool = False,
) -> List[BaseModifier]:
    """Instantiate every configured modifier in priority order (disabled ones included)."""
    providers = providers or ProviderSet()
    modifiers = []
    for modifier_type, config in modifier_configs.items():
        entry = get_entry(modifier_type)
        if not isinstance(config, entry.config_class):
            raise ConfigurationError(
                f"{modifier_type} expects {entry.config_class.__name__}, got {type(config).__name__}"
            )
        modifiers.append(entry.factory(config, providers, enable_debug_logs))
    modifiers.sort(key=lambda m: m.priority)
    return modifiers
