import threading
import time

import pytest

from algo_config import ConfigurationError
from DDA_Config import DifficultyConfig, config_from_dict, default_config
from DDA_Models import DifficultyLevel, ModifierResult
from DDA_Service import DifficultyService
from Modifier_Aggregator import AggregationStrategy
from Modifiers.Registry import MODIFIER_REGISTRY, build_modifiers, parse_modifier_configs
from Modifiers.WinStreak import WinStreakConfig
from Providers.InMemory import InMemoryDifficultyProvider, PlayerSignalSnapshot
from Providers.Interfaces import ProviderSet


class RecordingModifier:
	name = "Recorder"
	priority = 99

	def __init__(self):
		self.enabled = True
		self.applied = []

	def calculate(self):
		return ModifierResult.no_change(self.name, "recording")

	def on_applied(self, result):
		self.applied.append(result)


def make_service(config=None, **signals):
	snapshot = PlayerSignalSnapshot(**signals)
	return DifficultyService(config, ProviderSet.from_single(snapshot)), snapshot


def test_win_streak_raises_and_writes_back():
	service, snapshot = make_service(current_difficulty=3.0, win_streak=5)
	result = service.update_difficulty()
	assert result.new_difficulty == pytest.approx(4.0)
	assert result.primary_reason == "Win streak: 5 consecutive wins"
	assert snapshot.current_difficulty == pytest.approx(4.0)
	assert len(result.applied_modifiers) == len(MODIFIER_REGISTRY)


def test_calculate_alone_does_not_persist():
	service, snapshot = make_service(current_difficulty=3.0, loss_streak=6)
	result = service.calculate()
	assert result.new_difficulty < 3.0
	assert snapshot.current_difficulty == 3.0


def test_modifiers_follow_priority_order():
	service, _ = make_service()
	names = [m.name for m in service.modifiers]
	assert names == ["WinStreak", "LossStreak", "TimeDecay", "RageQuit", "CompletionRate", "LevelProgress", "SessionPattern"]


def test_disabling_a_modifier_removes_its_signal():
	service, _ = make_service(current_difficulty=3.0, win_streak=5)
	service.set_modifier_enabled("WinStreak", False)
	result = service.calculate()
	assert result.new_difficulty == 3.0
	assert "WinStreak" not in [r.name for r in result.applied_modifiers]
	with pytest.raises(KeyError):
		service.set_modifier_enabled("Missing", True)


def test_config_disables_modifier_at_build_time():
	config = DifficultyConfig().with_modifier("WinStreak", enabled=False)
	service, _ = make_service(config, current_difficulty=3.0, win_streak=8)
	assert service.get_modifier("WinStreak").enabled is False
	assert service.calculate().new_difficulty == 3.0


def test_add_and_remove_modifiers():
	service, _ = make_service()
	recorder = RecordingModifier()
	service.add_modifier(recorder)
	with pytest.raises(ConfigurationError):
		service.add_modifier(RecordingModifier())
	service.update_difficulty()
	assert len(recorder.applied) == 1
	assert service.remove_modifier("Recorder") is True
	assert service.remove_modifier("Recorder") is False


def test_reset_and_stats():
	service, snapshot = make_service(current_difficulty=8.5)
	assert service.get_difficulty_level() is DifficultyLevel.HARD
	assert service.reset_difficulty() == default_config().default_difficulty
	assert snapshot.current_difficulty == default_config().default_difficulty
	stats = service.get_difficulty_stats()
	assert stats["difficulty_label"] == "Easy"
	assert stats["strategy"] == AggregationStrategy.DIMINISHING_RETURNS.value
	assert stats["modifiers"]["SessionPattern"] == {"priority": 7, "enabled": True}


def test_service_requires_difficulty_provider():
	with pytest.raises(ConfigurationError):
		DifficultyService(providers=ProviderSet())


def test_missing_optional_providers_degrade_to_no_change():
	service = DifficultyService(providers=ProviderSet(difficulty=InMemoryDifficultyProvider(initial=5.0)))
	result = service.calculate()
	assert result.new_difficulty == 5.0
	assert all(r.reason == "provider unavailable" for r in result.applied_modifiers)


class SlowRaise:
	name = "SlowRaise"
	priority = 0

	def __init__(self):
		self.enabled = True

	def calculate(self):
		time.sleep(0.05)
		return ModifierResult(name=self.name, value=1.0, reason="slow raise")


def test_concurrent_updates_are_not_lost():
	provider = InMemoryDifficultyProvider(initial=3.0)
	service = DifficultyService(
		DifficultyConfig(aggregation_strategy="sum"),
		ProviderSet(difficulty=provider),
		modifiers=[SlowRaise()],
	)
	threads = [threading.Thread(target=service.update_difficulty) for _ in range(2)]
	for t in threads:
		t.start()
	for t in threads:
		t.join()
	assert provider.get_current_difficulty() == pytest.approx(5.0)


def test_host_modifier_without_apply_hook():
	provider = InMemoryDifficultyProvider(initial=3.0)
	service = DifficultyService(
		DifficultyConfig(aggregation_strategy="sum"),
		ProviderSet(difficulty=provider),
		modifiers=[],
	)
	service.add_modifier(SlowRaise())
	result = service.update_difficulty()
	assert result.new_difficulty == pytest.approx(4.0)
	assert provider.get_current_difficulty() == pytest.approx(4.0)


# Config layer

def test_config_from_dict_overrides_modifiers():
	config = config_from_dict({
		"aggregation_strategy": "sum",
		"max_change_per_evaluation": 1.0,
		"modifiers": {"WinStreak": {"step_size": 1.0}},
	})
	assert config.aggregation_strategy is AggregationStrategy.SUM
	assert config.get_modifier_config("WinStreak").step_size == 1.0
	# untouched types keep defaults
	assert config.get_modifier_config("LossStreak").step_size == 0.3


def test_config_round_trips_through_dict():
	config = config_from_dict({"diminishing_factor": 0.5, "primary_reason_tie_break": "highest_priority"})
	assert config_from_dict(config.to_dict()) == config


def test_structural_misconfiguration_fails_fast():
	with pytest.raises(ConfigurationError):
		DifficultyConfig(min_difficulty=5.0, max_difficulty=1.0)
	with pytest.raises(ConfigurationError):
		DifficultyConfig(max_change_per_evaluation=-1.0)
	with pytest.raises(ConfigurationError):
		DifficultyConfig(aggregation_strategy=None)
	with pytest.raises(ConfigurationError):
		DifficultyConfig(diminishing_factor=2.0)
	with pytest.raises(ConfigurationError):
		config_from_dict({"max_difficulty": 10.0, "speed": 3})
	with pytest.raises(ConfigurationError):
		config_from_dict({"modifiers": {"Unknown": {}}})


def test_registry_builds_typed_modifiers():
	configs = parse_modifier_configs({"WinStreak": WinStreakConfig(priority=9)})
	modifiers = build_modifiers(configs)
	assert modifiers[-1].name == "WinStreak"
	assert [m.priority for m in modifiers] == sorted(m.priority for m in modifiers)
