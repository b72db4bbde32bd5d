"""
Modifier_Aggregator.py
----------------------
Reduces the ordered list of ModifierResults produced in one evaluation to a
single raw difficulty delta. The calculator caps and clamps the delta later.

Strategies:
- SUM: plain total, order independent.
- WEIGHTED_AVERAGE: sum(value * weight) / sum(weight), weight 1.0 by default.
- MAX_MAGNITUDE: the value with the largest |value|, sign kept, first wins ties.
- DIMINISHING_RETURNS: stable sort by |value| descending, then
  sum(value_i * factor ** i), so the dominant signal keeps full weight and
  each weaker one counts geometrically less.
"""

import logging
import math
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

from algo_config import DEFAULT_AGGREGATION_WEIGHT, DEFAULT_DIMINISHING_FACTOR, ConfigurationError
from DDA_Models import ModifierResult

logger = logging.getLogger(__name__)


class AggregationStrategy(Enum):
    SUM = "sum"
    WEIGHTED_AVERAGE = "weighted_average"
    MAX_MAGNITUDE = "max_magnitude"
    DIMINISHING_RETURNS = "diminishing_returns"

    @classmethod
    def parse(cls, value) -> "AggregationStrategy":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ConfigurationError(f"aggregation strategy must be a string, got {value!r}")
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ConfigurationError(f"unknown aggregation strategy: {value!r}")


class ModifierAggregator:

    __slots__ = ("_strategy", "_factor", "_weights", "_preserve_opposing_signs")

    def __init__(
        self,
        strategy=AggregationStrategy.DIMINISHING_RETURNS,
        diminishing_factor: float = DEFAULT_DIMINISHING_FACTOR,
        weights: Optional[Mapping[str, float]] = None,
        preserve_opposing_signs: bool = True,
    ):
        if strategy is None:
            raise ConfigurationError("an aggregation strategy is required")
        self._strategy = AggregationStrategy.parse(strategy)
        self._factor = self._validate_factor(diminishing_factor)
        self._weights = dict(weights or {})
        for name, weight in self._weights.items():
            if not isinstance(weight, (int, float)) or not math.isfinite(weight) or weight < 0:
                raise ConfigurationError(f"weight for {name!r} must be a finite non-negative number")
        self._preserve_opposing_signs = bool(preserve_opposing_signs)

    @classmethod
    def from_config(cls, config) -> "ModifierAggregator":
        return cls(
            strategy=config.aggregation_strategy,
            diminishing_factor=config.diminishing_factor,
            weights=config.aggregation_weights,
            preserve_opposing_signs=config.preserve_opposing_signs,
        )

    @property
    def strategy(self) -> AggregationStrategy:
        return self._strategy

    @property
    def diminishing_factor(self) -> float:
        return self._factor

    @staticmethod
    def _validate_factor(factor: float) -> float:
        if isinstance(factor, bool) or not isinstance(factor, (int, float)) or not 0.0 <= factor <= 1.0:
            raise ConfigurationError(f"diminishing factor must lie within [0, 1], got {factor!r}")
        return float(factor)

    def aggregate(self, results: Optional[Iterable[ModifierResult]]) -> float:
        """Aggregate with the configured strategy."""
        results = list(results or ())
        if self._strategy is AggregationStrategy.SUM:
            total = self.aggregate_sum(results)
        elif self._strategy is AggregationStrategy.WEIGHTED_AVERAGE:
            total = self.aggregate_weighted(results, self._weights)
        elif self._strategy is AggregationStrategy.MAX_MAGNITUDE:
            total = self.aggregate_max(results)
        else:
            total = self.aggregate_diminishing(results, self._factor, self._preserve_opposing_signs)
        logger.debug({
            "event": "aggregate",
            "strategy": self._strategy.value,
            "count": len(results),
            "total": round(total, 4),
        })
        return total

    @staticmethod
    def aggregate_sum(results: Optional[Sequence[ModifierResult]]) -> float:
        if not results:
            return 0.0
        return math.fsum(r.value for r in results)

    @staticmethod
    def aggregate_weighted(
        results: Optional[Sequence[ModifierResult]],
        weights: Optional[Mapping[str, float]] = None,
    ) -> float:
        if not results:
            return 0.0
        weights = weights or {}
        total_value = 0.0
        total_weight = 0.0
        for result in results:
            weight = weights.get(result.name, DEFAULT_AGGREGATION_WEIGHT)
            total_value += result.value * weight
            total_weight += weight
        if total_weight <= 0.0:
            return 0.0
        return total_value / total_weight

    @staticmethod
    def aggregate_max(results: Optional[Sequence[ModifierResult]]) -> float:
        if not results:
            return 0.0
        # max() keeps the first of equal keys
        return max(results, key=lambda r: abs(r.value)).value

    @staticmethod
    def aggregate_diminishing(
        results: Optional[Sequence[ModifierResult]],
        factor: float = DEFAULT_DIMINISHING_FACTOR,
        preserve_opposing_signs: bool = True,
    ) -> float:
        """
        Geometric discount over results ranked by magnitude.

        ``sorted`` is stable, so equal magnitudes keep their input order. With
        ``preserve_opposing_signs=False`` lower-ranked terms push in the
        dominant term's direction instead of against it.
        """
        if not results:
            return 0.0
        ranked = sorted(results, key=lambda r: abs(r.value), reverse=True)
        dominant_sign = math.copysign(1.0, ranked[0].value)
        total = 0.0
        weight = 1.0
        for index, result in enumerate(ranked):
            value = result.value
            if index and not preserve_opposing_signs:
                value = dominant_sign * abs(value)
            total += value * weight
            weight *= factor
        return total
