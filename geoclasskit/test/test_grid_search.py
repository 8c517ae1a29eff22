"""Tests for the hyperparameter grid search loop."""

import numpy as np
import pytest

from geoclasskit.domain.errors import (
    InvalidConfigurationError,
    NoViableModelError,
    TrainingFailureError,
)
from geoclasskit.domain.grid_search import (
    parameter_grid,
    run_grid_search,
    select_best,
    sequence,
    to_arrays,
)
from geoclasskit.domain.models import GridSearchOutcome, HyperparameterPoint


class TestSequence:

    def test_integer_range_inclusive(self):
        assert sequence(10, 150, 10) == list(range(10, 151, 10))

    def test_float_range_no_drift(self):
        values = sequence(0.1, 0.9, 0.1)
        assert len(values) == 9
        assert values[2] == 0.3
        assert values[-1] == 0.9

    def test_invalid_step(self):
        with pytest.raises(ValueError):
            sequence(0, 10, 0)


class TestParameterGrid:

    def test_cartesian_product_order(self):
        grid = parameter_grid(n_trees=[10, 20], bag_fraction=[0.5, 0.7])
        assert [p.as_dict() for p in grid] == [
            {"n_trees": 10, "bag_fraction": 0.5},
            {"n_trees": 10, "bag_fraction": 0.7},
            {"n_trees": 20, "bag_fraction": 0.5},
            {"n_trees": 20, "bag_fraction": 0.7},
        ]
        assert [p.index for p in grid] == [0, 1, 2, 3]

    def test_single_parameter(self):
        grid = parameter_grid(n_trees=sequence(10, 150, 10))
        assert len(grid) == 15

    def test_empty_range_raises(self):
        with pytest.raises(ValueError):
            parameter_grid(n_trees=[])
        with pytest.raises(ValueError):
            parameter_grid()


class TestToArrays:

    def test_shapes(self, threshold_split):
        training, _ = threshold_split
        features, labels = to_arrays(training, ["x"])
        assert features.shape == (20, 1)
        assert labels.tolist() == [1] * 10 + [2] * 10

    def test_missing_feature_raises(self, threshold_split):
        training, _ = threshold_split
        with pytest.raises(KeyError):
            to_arrays(training, ["y"])


class TestRunGridSearch:

    def test_selects_most_accurate(self, threshold_split, threshold_trainer):
        training, validation = threshold_split
        grid = parameter_grid(threshold=[0, 3, 10])
        result = run_grid_search(training, validation, grid, threshold_trainer, ["x"])
        assert result.best.point.as_dict() == {"threshold": 3}
        assert result.best.accuracy == 1.0
        # threshold 0 predicts everything as class 2: 4 of 10 correct
        assert abs(result.outcomes[0].accuracy - 0.4) < 1e-12
        assert abs(result.outcomes[2].accuracy - 0.6) < 1e-12

    def test_reports_every_point(self, threshold_split, threshold_trainer):
        training, validation = threshold_split
        grid = parameter_grid(threshold=[0, 1, 2, 3, 4])
        result = run_grid_search(training, validation, grid, threshold_trainer, ["x"])
        assert [o.point.index for o in result.outcomes] == [0, 1, 2, 3, 4]
        assert len(threshold_trainer.calls) == 5

    def test_tie_goes_to_first_point(self, threshold_split, threshold_trainer):
        training, validation = threshold_split
        grid = parameter_grid(threshold=[0, 4, 3, 2])
        result = run_grid_search(training, validation, grid, threshold_trainer, ["x"])
        assert result.best.point.index == 1

    def test_failures_recorded_not_raised(self, threshold_split, threshold_trainer):
        training, validation = threshold_split
        grid = parameter_grid(threshold=[-1, 0, 3, -5])
        result = run_grid_search(training, validation, grid, threshold_trainer, ["x"])
        assert result.best.point.as_dict() == {"threshold": 3}
        failed = result.failures
        assert [o.point.index for o in failed] == [0, 3]
        for outcome in failed:
            assert outcome.accuracy is None
            assert isinstance(outcome.error, TrainingFailureError)
            assert isinstance(outcome.error.__cause__, ValueError)

    def test_all_failed_raises(self, threshold_split, threshold_trainer):
        training, validation = threshold_split
        grid = parameter_grid(threshold=[-1, -2])
        with pytest.raises(NoViableModelError) as info:
            run_grid_search(training, validation, grid, threshold_trainer, ["x"])
        assert len(info.value.failures) == 2

    def test_parallel_matches_sequential(self, threshold_split, threshold_trainer):
        training, validation = threshold_split
        grid = parameter_grid(threshold=[-1, 0, 4, 3, 2, 10, 5.5])
        seq = run_grid_search(training, validation, grid, threshold_trainer, ["x"])
        par = run_grid_search(
            training, validation, grid, threshold_trainer, ["x"], max_workers=4
        )
        assert [o.accuracy for o in seq.outcomes] == [o.accuracy for o in par.outcomes]
        assert seq.best.point == par.best.point

    def test_deterministic(self, threshold_split, threshold_trainer):
        training, validation = threshold_split
        grid = parameter_grid(threshold=np.linspace(0, 6, 13).tolist())
        a = run_grid_search(training, validation, grid, threshold_trainer, ["x"])
        b = run_grid_search(training, validation, grid, threshold_trainer, ["x"])
        assert a.best.point == b.best.point

    def test_empty_grid_raises(self, threshold_split, threshold_trainer):
        training, validation = threshold_split
        with pytest.raises(ValueError):
            run_grid_search(training, validation, [], threshold_trainer, ["x"])


    def test_empty_validation_partition(self, threshold_split, threshold_trainer):
        training, _ = threshold_split
        grid = parameter_grid(threshold=[3])
        with pytest.raises(InvalidConfigurationError, match="validation partition"):
            run_grid_search(training, [], grid, threshold_trainer, ["x"])
        assert threshold_trainer.calls == []

    def test_empty_training_partition(self, threshold_split, threshold_trainer):
        _, validation = threshold_split
        grid = parameter_grid(threshold=[3])
        with pytest.raises(InvalidConfigurationError, match="training partition"):
            run_grid_search([], validation, grid, threshold_trainer, ["x"])

class TestSelectBest:

    def test_ignores_arrival_order(self):
        points = [HyperparameterPoint(i, (("a", i),)) for i in range(3)]
        outcomes = [
            GridSearchOutcome(points[2], 0.9),
            GridSearchOutcome(points[0], 0.9),
            GridSearchOutcome(points[1], 0.5),
        ]
        assert select_best(outcomes).point.index == 0
