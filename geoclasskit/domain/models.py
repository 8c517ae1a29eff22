"""Domain data models for GeoClassKit.

All models are frozen dataclasses (immutable once created).
This module has ZERO I/O. Only depends on: numpy, typing, dataclasses.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Optional, Sequence, Tuple

import numpy as np

from .errors import TrainingFailureError


# ---------------------------------------------------------------------------
# Sampling models
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=True)
class LabeledLocation:
    """A sampled location with its class and (optional) feature values."""
    id: int
    location: Hashable                # (row, col) or any coordinate key
    label: int
    features: Dict[str, float] = field(default_factory=dict, hash=False)

    def feature_vector(self, feature_names: Sequence[str]) -> np.ndarray:
        """Feature values in the order of ``feature_names``."""
        missing = [n for n in feature_names if n not in self.features]
        if missing:
            raise KeyError(
                f"Location {self.id} has no value for feature(s) {missing}"
            )
        return np.array(
            [self.features[n] for n in feature_names], dtype=np.float64
        )

    def with_features(self, features: Dict[str, float]) -> "LabeledLocation":
        return LabeledLocation(
            id=self.id,
            location=self.location,
            label=self.label,
            features=dict(features),
        )


@dataclass(frozen=True)
class ClassAllocation:
    """Target sample count per class, derived from a class histogram."""
    n_per_class: Dict[int, int]       # class_value -> allocated count
    proportions: Dict[int, float]     # class_value -> share of total count
    raw_points: Dict[int, int]        # rounded, before clamping
    skipped_classes: Tuple[int, ...]  # zero-count classes (no allocation)
    num_total_points: int
    min_points: int
    max_points: int

    @property
    def total(self) -> int:
        """Effective total after clamping (may exceed num_total_points)."""
        return sum(self.n_per_class.values())


@dataclass(frozen=True)
class DatasetSplit:
    """Disjoint training/validation partition of sampled locations."""
    training: Tuple[LabeledLocation, ...]
    validation: Tuple[LabeledLocation, ...]
    split_fraction: float
    seed: int

    def distribution(self, which: str = "all") -> Dict[int, int]:
        """Per-class counts for "training", "validation" or "all"."""
        if which == "training":
            locations = self.training
        elif which == "validation":
            locations = self.validation
        elif which == "all":
            locations = self.training + self.validation
        else:
            raise ValueError(f"Unknown partition: {which}")
        counts: Dict[int, int] = {}
        for loc in locations:
            counts[loc.label] = counts.get(loc.label, 0) + 1
        return dict(sorted(counts.items()))

    def sizes_per_class(self) -> Dict[int, Tuple[int, int]]:
        """class_value -> (n_training, n_validation)."""
        train = self.distribution("training")
        valid = self.distribution("validation")
        labels = sorted(set(train) | set(valid))
        return {c: (train.get(c, 0), valid.get(c, 0)) for c in labels}


# ---------------------------------------------------------------------------
# Hyperparameter search
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HyperparameterPoint:
    """One point of a hyperparameter grid, in enumeration order."""
    index: int
    params: Tuple[Tuple[str, Any], ...]

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.params)


@dataclass(frozen=True)
class GridSearchOutcome:
    """Validation accuracy of one grid point (None when it failed)."""
    point: HyperparameterPoint
    accuracy: Optional[float]
    error: Optional[TrainingFailureError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.accuracy is not None


@dataclass(frozen=True)
class GridSearchResult:
    """All grid outcomes (grid order) plus the selected best one."""
    outcomes: Tuple[GridSearchOutcome, ...]
    best: GridSearchOutcome

    @property
    def failures(self) -> Tuple[GridSearchOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.succeeded)


# ---------------------------------------------------------------------------
# Confusion matrix and categorical accuracy
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfusionMatrixResult:
    """Complete categorical accuracy assessment result."""
    matrix: np.ndarray                # (k x k), reference=rows, predicted=columns
    class_labels: Tuple[int, ...]
    class_names: Dict[int, str]
    n_samples: int

    # Global metrics
    overall_accuracy: float
    overall_accuracy_ci: Tuple[float, float]

    # Per-class metrics
    producers_accuracy: Dict[int, float]
    consumers_accuracy: Dict[int, float]
    producers_accuracy_ci: Dict[int, Tuple[float, float]]
    consumers_accuracy_ci: Dict[int, Tuple[float, float]]
    f1_per_class: Dict[int, float]

    # None when undefined (degenerate matrix)
    kappa: Optional[float] = None
    kappa_ci: Optional[Tuple[float, float]] = None
    warnings: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Workflow results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SampleSet:
    """Result of a sample generation run."""
    config: Any                       # core.config.WorkflowConfig
    histogram: Dict[int, int]         # class -> pixel count
    allocation: ClassAllocation
    points: Tuple[LabeledLocation, ...]
    split: DatasetSplit
    strata_info: Dict[int, dict]      # class -> {name, pixel_count, n_requested, ...}
    warnings: Tuple[str, ...]


@dataclass(frozen=True)
class TuningResult:
    """Grid search result plus the model retrained with the best point."""
    search: GridSearchResult
    best_params: Dict[str, Any]
    model: Any
    assessment: ConfusionMatrixResult
    baseline_assessment: Optional[ConfusionMatrixResult] = None   # untuned model
    feature_importance: Optional[Dict[str, float]] = None  # feature -> % of total


@dataclass(frozen=True)
class PipelineResult:
    """Everything the core exposes for reporting."""
    sample_set: SampleSet
    tuning: TuningResult
    classified: np.ndarray
    smoothed: np.ndarray
    assessment: ConfusionMatrixResult
    smoothed_assessment: ConfusionMatrixResult
