"""Tests for clamped proportional and equal sample allocation."""

import numpy as np
import pytest

from geoclasskit.domain.allocation import (
    allocate_clamped,
    allocate_equal,
    round_half_away_from_zero,
)
from geoclasskit.domain.errors import InvalidConfigurationError


class TestRounding:
    """Integer round-half-away-from-zero."""

    def test_halves_round_up(self):
        assert round_half_away_from_zero(5, 2) == 3
        assert round_half_away_from_zero(1, 2) == 1
        assert round_half_away_from_zero(9, 2) == 5

    def test_negative_halves_round_down(self):
        assert round_half_away_from_zero(-5, 2) == -3

    def test_non_halves(self):
        assert round_half_away_from_zero(1, 3) == 0
        assert round_half_away_from_zero(2, 3) == 1
        assert round_half_away_from_zero(12, 4) == 3

    def test_zero_denominator_raises(self):
        with pytest.raises(ValueError):
            round_half_away_from_zero(1, 0)


class TestAllocateClamped:
    """Proportional allocation clamped to [min_points, max_points]."""

    def test_worked_example(self):
        """{A:100, B:10, C:1}, 50 points, bounds [5, 30]."""
        # A: 100/111*50 = 45.05 -> 45 -> clamp 30
        # B: 10/111*50  = 4.505 -> 5 -> 5
        # C: 1/111*50   = 0.45  -> 0 -> clamp 5
        alloc, warnings = allocate_clamped({1: 100, 2: 10, 3: 1}, 50, 5, 30)
        assert alloc.n_per_class == {1: 30, 2: 5, 3: 5}
        assert alloc.raw_points == {1: 45, 2: 5, 3: 0}
        assert alloc.total == 40
        assert len(warnings) == 2   # A capped, C raised

    def test_exact_half_rounds_away_from_zero(self):
        """Python's round() would give 0 for 0.5; we give 1."""
        alloc, _ = allocate_clamped({1: 1, 2: 3}, 2, 1, 10)
        # 1/4*2 = 0.5 -> 1, 3/4*2 = 1.5 -> 2
        assert alloc.raw_points == {1: 1, 2: 2}

    def test_bounds_hold_for_random_histograms(self):
        rng = np.random.RandomState(0)
        for _ in range(50):
            k = rng.randint(1, 12)
            counts = {c: int(rng.randint(0, 100000)) for c in range(1, k + 1)}
            if sum(counts.values()) == 0:
                continue
            lo = int(rng.randint(1, 50))
            hi = lo + int(rng.randint(0, 500))
            alloc, _ = allocate_clamped(counts, int(rng.randint(1, 5000)), lo, hi)
            for label, n in alloc.n_per_class.items():
                assert lo <= n <= hi
                assert counts[label] > 0

    def test_zero_count_class_skipped(self):
        alloc, warnings = allocate_clamped({1: 500, 2: 0, 3: 500}, 100, 10, 60)
        assert 2 not in alloc.n_per_class
        assert alloc.skipped_classes == (2,)
        assert any("no pixels" in w for w in warnings)

    def test_clamping_may_raise_total(self):
        counts = {1: 9990, 2: 5, 3: 5}
        alloc, _ = allocate_clamped(counts, 100, 25, 1000)
        assert alloc.total > 100

    def test_proportions_sum_to_one(self):
        alloc, _ = allocate_clamped({1: 3, 2: 5, 3: 12}, 40, 1, 40)
        assert abs(sum(alloc.proportions.values()) - 1.0) < 1e-12

    def test_deterministic(self):
        counts = {1: 123, 2: 456, 3: 789}
        a, _ = allocate_clamped(counts, 333, 7, 200)
        b, _ = allocate_clamped(counts, 333, 7, 200)
        assert a == b

    @pytest.mark.parametrize("counts,total,lo,hi", [
        ({}, 100, 1, 10),
        ({1: 0, 2: 0}, 100, 1, 10),
        ({1: 10}, 0, 1, 10),
        ({1: 10}, -5, 1, 10),
        ({1: 10}, 100, 20, 10),
        ({1: 10}, 100, 0, 10),
        ({1: -3, 2: 10}, 100, 1, 10),
    ])
    def test_invalid_configuration(self, counts, total, lo, hi):
        with pytest.raises(InvalidConfigurationError):
            allocate_clamped(counts, total, lo, hi)


class TestAllocateEqual:

    def test_equal_basic(self):
        alloc, warnings = allocate_equal(200, [1, 2, 3, 4])
        assert alloc == {1: 50, 2: 50, 3: 50, 4: 50}
        assert warnings == []

    def test_equal_remainder(self):
        alloc, _ = allocate_equal(100, [3, 1, 2])
        assert sum(alloc.values()) == 100
        assert alloc[1] == 34

    def test_too_few_samples_warns(self):
        alloc, warnings = allocate_equal(2, [1, 2, 3])
        assert alloc[3] == 0
        assert len(warnings) == 1

    def test_empty_raises(self):
        with pytest.raises(InvalidConfigurationError):
            allocate_equal(100, [])
