"""Weighted sampler tests."""
import pytest

from slot_core.errors import ErrorCode, InvalidConfigError
from slot_core.logic.rng import ProductionRNG, SeededRNG, SequenceRNG
from slot_core.logic.sampler import WeightedSampler


class TestWeightedPick:
    """Distribution and scan behavior of pick()."""

    def test_frequency_converges_to_weight_share(self):
        """Weights [3, 1]: A must come up ~75% of the time."""
        sampler = WeightedSampler(["A", "B"], [3, 1], rng=SeededRNG(seed=42))
        draws = 20000
        hits = sum(1 for _ in range(draws) if sampler.pick() == "A")
        assert abs(hits / draws - 0.75) < 0.02, f"Observed {hits / draws:.4f}"

    def test_zero_weight_never_drawn(self):
        """Weights [1, 0] always return the first item."""
        sampler = WeightedSampler(["A", "B"], [1, 0], rng=SeededRNG(seed=7))
        assert all(sampler.pick() == "A" for _ in range(1000))

    def test_cumulative_scan_over_single_draw(self):
        """Draw r = u * total is matched against running weight bands."""
        rng = SequenceRNG([0.0, 0.1, 0.4, 0.5, 0.99])
        sampler = WeightedSampler(["A", "B", "C"], [1, 2, 3], rng=rng)
        # total 6: [0,1) -> A, [1,3) -> B, [3,6) -> C
        assert [sampler.pick() for _ in range(5)] == ["A", "A", "B", "C", "C"]

    def test_one_draw_per_pick(self):
        rng = SequenceRNG([0.3, 0.6, 0.9])
        sampler = WeightedSampler(["A", "B"], [1, 1], rng=rng)
        sampler.pick_many(7)
        assert rng.draws == 7

    def test_real_valued_weights(self):
        rng = SequenceRNG([0.5])
        sampler = WeightedSampler(["A", "B"], [0.25, 0.75], rng=rng)
        assert sampler.pick() == "B"

    def test_probability(self):
        sampler = WeightedSampler(["A", "B", "C"], [1, 1, 2], rng=SeededRNG(seed=1))
        assert sampler.probability("C") == pytest.approx(0.5)
        assert sampler.probability("missing") == 0.0


class TestInvalidConfig:
    """INVALID_CONFIG is raised at construction."""

    def test_length_mismatch(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            WeightedSampler(["A", "B"], [1])
        assert exc_info.value.code == ErrorCode.INVALID_CONFIG

    def test_zero_total(self):
        with pytest.raises(InvalidConfigError):
            WeightedSampler(["A", "B"], [0, 0])

    def test_negative_weight(self):
        with pytest.raises(InvalidConfigError):
            WeightedSampler(["A", "B"], [2, -1])

    def test_empty_table(self):
        with pytest.raises(InvalidConfigError):
            WeightedSampler([], [])


class TestRandomSources:
    """Uniform sources behind the sampler."""

    def test_production_ranges(self):
        rng = ProductionRNG()
        for _ in range(200):
            assert 0.0 <= rng.random() < 1.0
            assert 3 <= rng.randint(3, 5) <= 5

    def test_seeded_replays(self):
        a, b = SeededRNG(seed=11), SeededRNG(seed=11)
        assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]
        assert repr(a) == "SeededRNG(seed=11)"

    def test_sequence_randint_stays_in_range(self):
        rng = SequenceRNG([0.0, 0.999999])
        assert rng.randint(0, 2) == 0
        assert rng.randint(0, 2) == 2
