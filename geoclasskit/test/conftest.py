"""Test configuration for GeoClassKit.

All tests run with plain pytest on in-memory arrays; no raster files
or network access needed.
"""

import numpy as np
import pytest

from geoclasskit.domain.models import LabeledLocation


@pytest.fixture
def simple_2class_matrix():
    """Simple 2-class confusion matrix for basic tests."""
    # 80% overall accuracy
    # Reference=rows, Predicted=cols
    #          Predicted
    #            P0   P1
    # Ref  R0 [ 40,  10 ]
    #      R1 [ 10,  40 ]
    return np.array([[40, 10], [10, 40]], dtype=np.int64)


@pytest.fixture
def perfect_matrix():
    """Perfect 3-class confusion matrix (100% accuracy)."""
    return np.array([[50, 0, 0], [0, 30, 0], [0, 0, 20]], dtype=np.int64)


@pytest.fixture
def asymmetric_5class_matrix():
    """Realistic 5-class matrix with varied accuracy."""
    return np.array([
        [45,  3,  1,  0,  1],   # Forest: PA = 90%
        [ 2, 28,  4,  1,  0],   # Pasture: PA = 80%
        [ 1,  2, 15,  1,  1],   # Water: PA = 75%
        [ 3,  1,  2, 38,  1],   # Crop: PA = 84%
        [ 0,  1,  0,  2, 12],   # Urban: PA = 80%
    ], dtype=np.int64)


@pytest.fixture
def reference_map():
    """40x40 reference map.

    Class 1: top half (800 px), class 2: bottom-left (400 px),
    class 3: bottom-right (397 px), class 4: 3 px in the last row.
    """
    ref = np.ones((40, 40), dtype=np.int64)
    ref[20:, :20] = 2
    ref[20:, 20:] = 3
    ref[39, 37:40] = 4
    return ref


@pytest.fixture
def feature_stack(reference_map):
    """Two bands: 'signal' separates classes, 'noise' does not."""
    rng = np.random.RandomState(7)
    signal = reference_map * 10.0 + rng.normal(0.0, 1.0, reference_map.shape)
    noise = rng.uniform(0.0, 1.0, reference_map.shape)
    return np.stack([signal, noise])


class ThresholdModel:
    """Predicts class 2 where feature 0 >= threshold, else class 1."""

    def __init__(self, threshold):
        self.threshold = threshold

    def predict(self, features):
        return np.where(features[:, 0] >= self.threshold, 2, 1)


class ThresholdTrainer:
    """Deterministic fake Trainer; negative thresholds fail to train."""

    def __init__(self):
        self.calls = []

    def train(self, features, labels, params):
        self.calls.append(dict(params))
        threshold = params["threshold"]
        if threshold < 0:
            raise ValueError(f"negative threshold {threshold}")
        return ThresholdModel(threshold)


@pytest.fixture
def threshold_trainer():
    return ThresholdTrainer()


def _locations(values, label, start_id):
    return [
        LabeledLocation(id=start_id + i, location=(label, i), label=label,
                        features={"x": float(v)})
        for i, v in enumerate(values)
    ]


@pytest.fixture
def threshold_split():
    """Class 1 has x in [0, 1), class 2 has x in [5, 6)."""
    training = (
        _locations(np.linspace(0.0, 0.9, 10), 1, 1)
        + _locations(np.linspace(5.0, 5.9, 10), 2, 11)
    )
    validation = (
        _locations(np.linspace(0.05, 0.95, 6), 1, 21)
        + _locations(np.linspace(5.05, 5.95, 4), 2, 27)
    )
    return training, validation
