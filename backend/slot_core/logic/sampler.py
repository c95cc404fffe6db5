"""Weighted symbol sampler."""
from collections.abc import Sequence

from slot_core.logic.models import Symbol
from slot_core.logic.rng import ProductionRNG, RNGBase
from slot_core.validators import validate_weights


class WeightedSampler:
    """
    Draws symbols with probability weight[i] / total_weight.

    Each pick consumes exactly one uniform draw from the injected RNG.
    """

    def __init__(
        self,
        items: Sequence[Symbol],
        weights: Sequence[float],
        rng: RNGBase | None = None,
    ):
        self.total_weight = validate_weights(items, weights)
        self.items = list(items)
        self.weights = list(weights)
        self.rng = rng or ProductionRNG()

    def pick(self) -> Symbol:
        """Cumulative-weight scan over a single draw in [0, total_weight)."""
        r = self.rng.random() * self.total_weight
        for item, weight in zip(self.items, self.weights):
            if r < weight:
                return item
            r -= weight
        # Float rounding can leave a tiny remainder; land on the last drawable item
        return next(i for i, w in zip(reversed(self.items), reversed(self.weights)) if w > 0)

    def pick_many(self, count: int) -> list[Symbol]:
        return [self.pick() for _ in range(count)]

    def probability(self, item: Symbol) -> float:
        """Exact probability of drawing item (summed if listed twice)."""
        weight = sum(w for i, w in zip(self.items, self.weights) if i == item)
        return weight / self.total_weight
