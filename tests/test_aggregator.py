import itertools

import pytest

from algo_config import ConfigurationError
from DDA_Models import ModifierResult
from Modifier_Aggregator import AggregationStrategy, ModifierAggregator


def make_results(*values):
	return [ModifierResult(name=f"m{i}", value=v, reason=f"reason {i}") for i, v in enumerate(values)]


def test_empty_input_is_zero_for_every_strategy():
	for strategy in AggregationStrategy:
		aggregator = ModifierAggregator(strategy=strategy)
		assert aggregator.aggregate([]) == 0.0
		assert aggregator.aggregate(None) == 0.0


def test_sum_of_mixed_signals():
	results = make_results(1.5, -1.0, 0.3)
	assert ModifierAggregator(strategy="sum").aggregate(results) == pytest.approx(0.8)


def test_sum_is_order_independent():
	values = (1.5, -1.0, 0.3, 0.0, -0.25)
	expected = ModifierAggregator.aggregate_sum(make_results(*values))
	for permutation in itertools.permutations(values):
		assert ModifierAggregator.aggregate_sum(make_results(*permutation)) == expected


def test_weighted_average_defaults_missing_weights_to_one():
	results = make_results(2.0, 4.0)
	# m0 weight 3, m1 default 1 -> (6 + 4) / 4
	assert ModifierAggregator.aggregate_weighted(results, {"m0": 3.0}) == pytest.approx(2.5)
	assert ModifierAggregator.aggregate_weighted(results, None) == pytest.approx(3.0)


def test_weighted_average_zero_total_weight_is_zero():
	results = make_results(2.0, 4.0)
	assert ModifierAggregator.aggregate_weighted(results, {"m0": 0.0, "m1": 0.0}) == 0.0


def test_max_magnitude_keeps_sign():
	results = make_results(1.0, -3.0, 2.0)
	assert ModifierAggregator.aggregate_max(results) == -3.0


def test_max_magnitude_tie_goes_to_first_occurrence():
	assert ModifierAggregator.aggregate_max(make_results(-2.0, 2.0)) == -2.0
	assert ModifierAggregator.aggregate_max(make_results(2.0, -2.0)) == 2.0


def test_diminishing_discounts_weaker_signals():
	results = make_results(1.5, -1.0, 0.3)
	total = ModifierAggregator.aggregate_diminishing(results, 0.6)
	# 1.5 + (-1.0 * 0.6) + (0.3 * 0.36)
	assert total == pytest.approx(1.008)


def test_diminishing_can_align_opposing_signs_with_dominant_term():
	results = make_results(1.5, -1.0, 0.3)
	total = ModifierAggregator.aggregate_diminishing(results, 0.6, preserve_opposing_signs=False)
	assert total == pytest.approx(1.5 + 0.6 + 0.108)


def test_diminishing_with_factor_one_matches_sum():
	results = make_results(0.7, -1.2, 0.4, 2.0)
	assert ModifierAggregator.aggregate_diminishing(results, 1.0) == pytest.approx(
		ModifierAggregator.aggregate_sum(results)
	)


def test_diminishing_with_factor_zero_matches_max_magnitude():
	results = make_results(0.7, -1.2, 0.4, 2.0)
	assert ModifierAggregator.aggregate_diminishing(results, 0.0) == pytest.approx(
		ModifierAggregator.aggregate_max(results)
	)


def test_diminishing_sort_is_stable_for_equal_magnitudes():
	# -1.0 comes first, so it keeps full weight and +1.0 is discounted
	results = make_results(-1.0, 1.0)
	assert ModifierAggregator.aggregate_diminishing(results, 0.5) == pytest.approx(-0.5)
	assert ModifierAggregator.aggregate_diminishing(list(reversed(results)), 0.5) == pytest.approx(0.5)


def test_zero_values_do_not_move_the_outcome():
	aggregator = ModifierAggregator(strategy=AggregationStrategy.DIMINISHING_RETURNS, diminishing_factor=0.6)
	assert aggregator.aggregate(make_results(1.0, 0.0, 0.0)) == pytest.approx(1.0)


def test_strategy_parsing_accepts_names_and_values():
	assert AggregationStrategy.parse("max-magnitude") is AggregationStrategy.MAX_MAGNITUDE
	assert AggregationStrategy.parse("WEIGHTED_AVERAGE") is AggregationStrategy.WEIGHTED_AVERAGE


def test_invalid_construction_fails_fast():
	with pytest.raises(ConfigurationError):
		ModifierAggregator(strategy=None)
	with pytest.raises(ConfigurationError):
		ModifierAggregator(strategy="median")
	with pytest.raises(ConfigurationError):
		ModifierAggregator(diminishing_factor=1.5)
	with pytest.raises(ConfigurationError):
		ModifierAggregator(weights={"WinStreak": -1.0})
