"""Hyperparameter grid search under a held-out validation protocol.

Every grid point is trained on the training partition and scored by
overall accuracy on the validation partition. The classifier is opaque:
anything implementing the Trainer protocol works.

No I/O. Only depends on: numpy, typing, concurrent.futures.
"""

import itertools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Protocol, Sequence, Tuple

import numpy as np

from .confusion_matrix import build_matrix, overall_accuracy
from .errors import (
    InvalidConfigurationError,
    NoViableModelError,
    TrainingFailureError,
)
from .models import (
    GridSearchOutcome,
    GridSearchResult,
    HyperparameterPoint,
    LabeledLocation,
)


class Model(Protocol):
    """A trained classifier."""

    def predict(self, features: np.ndarray) -> np.ndarray: ...


class Trainer(Protocol):
    """Builds a Model from labeled feature vectors and settings."""

    def train(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        params: Dict[str, Any],
    ) -> Model: ...


def sequence(start: float, stop: float, step: float) -> List[float]:
    """Inclusive numeric range, e.g. sequence(0.1, 0.9, 0.1).

    Values are rounded to 10 decimals so float steps do not drift.
    Integer arguments give integers.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    n = int(round((stop - start) / step)) + 1
    values = [round(start + i * step, 10) for i in range(max(n, 0))]
    if all(isinstance(v, int) for v in (start, stop, step)):
        return [int(v) for v in values]
    return values


def parameter_grid(**ranges: Sequence[Any]) -> List[HyperparameterPoint]:
    """Cartesian product of parameter ranges, in keyword order.

    parameter_grid(n_trees=[10, 20], bag_fraction=[0.5, 0.7]) gives
    (10, 0.5), (10, 0.7), (20, 0.5), (20, 0.7) with indices 0..3.
    """
    if not ranges:
        raise ValueError("At least one parameter range is required")
    names = list(ranges)
    for name in names:
        if len(ranges[name]) == 0:
            raise ValueError(f"Parameter range {name!r} is empty")

    return [
        HyperparameterPoint(index=i, params=tuple(zip(names, values)))
        for i, values in enumerate(itertools.product(*(ranges[n] for n in names)))
    ]


def to_arrays(
    locations: Sequence[LabeledLocation],
    feature_names: Sequence[str],
) -> Tuple[np.ndarray, np.ndarray]:
    """(n x f feature matrix, n labels) for a set of locations."""
    if not locations:
        raise ValueError("No locations to convert")
    features = np.vstack([loc.feature_vector(feature_names) for loc in locations])
    labels = np.array([loc.label for loc in locations], dtype=np.int64)
    return features, labels


def evaluate_point(
    point: HyperparameterPoint,
    trainer: Trainer,
    train_xy: Tuple[np.ndarray, np.ndarray],
    valid_xy: Tuple[np.ndarray, np.ndarray],
) -> GridSearchOutcome:
    """Train and score one point; failures become a recorded outcome."""
    x_train, y_train = train_xy
    x_valid, y_valid = valid_xy
    try:
        model = trainer.train(x_train, y_train, point.as_dict())
        predicted = np.asarray(model.predict(x_valid))
        accuracy = overall_accuracy(build_matrix(y_valid, predicted))
    except Exception as exc:
        error = TrainingFailureError(point, exc)
        error.__cause__ = exc
        return GridSearchOutcome(point=point, accuracy=None, error=error)
    return GridSearchOutcome(point=point, accuracy=accuracy)


def select_best(outcomes: Sequence[GridSearchOutcome]) -> GridSearchOutcome:
    """Highest accuracy; ties go to the lowest grid index."""
    best = None
    for outcome in sorted(outcomes, key=lambda o: o.point.index):
        if not outcome.succeeded:
            continue
        if best is None or outcome.accuracy > best.accuracy:
            best = outcome
    if best is None:
        raise NoViableModelError(tuple(outcomes))
    return best


def run_grid_search(
    training: Sequence[LabeledLocation],
    validation: Sequence[LabeledLocation],
    grid: Sequence[HyperparameterPoint],
    trainer: Trainer,
    feature_names: Sequence[str],
    max_workers: int = 1,
) -> GridSearchResult:
    """Evaluate every grid point and select the most accurate one.

    Args:
        training: Training partition (features filled in).
        validation: Validation partition (features filled in).
        grid: Points from parameter_grid().
        trainer: Trainer capability.
        feature_names: Feature order for the model inputs.
        max_workers: >1 evaluates points on a thread pool. Outcomes are
            re-sorted by grid index, so the result does not depend on
            completion order.

    Returns:
        GridSearchResult with every outcome in grid order.

    Raises:
        InvalidConfigurationError: If either partition is empty.
        NoViableModelError: If every grid point failed.
    """
    if not grid:
        raise ValueError("Hyperparameter grid is empty")
    for name, partition in (("training", training), ("validation", validation)):
        if not partition:
            raise InvalidConfigurationError(
                f"The {name} partition is empty; collect more samples or "
                f"change split_fraction"
            )

    train_xy = to_arrays(training, feature_names)
    valid_xy = to_arrays(validation, feature_names)

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(
                lambda p: evaluate_point(p, trainer, train_xy, valid_xy), grid
            ))
    else:
        outcomes = [evaluate_point(p, trainer, train_xy, valid_xy) for p in grid]

    outcomes.sort(key=lambda o: o.point.index)
    return GridSearchResult(outcomes=tuple(outcomes), best=select_best(outcomes))
