"""Random forest Trainer backed by scikit-learn.

Translates random-forest settings (number of trees, bag fraction,
variables per split, minimum leaf population) into
RandomForestClassifier arguments. Any other parameter name is passed
through unchanged.

Depends on: numpy, scikit-learn.
"""

from typing import Any, Dict, Optional, Sequence

import numpy as np
from sklearn.ensemble import RandomForestClassifier

PARAMETER_NAMES = {
    "n_trees": "n_estimators",
    "bag_fraction": "max_samples",
    "variables_per_split": "max_features",
    "min_leaf_population": "min_samples_leaf",
}


class RandomForestTrainer:
    """Trainer producing fitted RandomForestClassifier models.

    Args:
        seed: random_state for every forest, so identical inputs give
            identical models.
        n_jobs: Passed to scikit-learn (trees built in parallel).
        defaults: Settings applied before grid-point parameters.
    """

    def __init__(
        self,
        seed: int = 123,
        n_jobs: Optional[int] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ):
        self.seed = seed
        self.n_jobs = n_jobs
        self.defaults = dict(defaults or {})

    def build(self, params: Dict[str, Any]) -> RandomForestClassifier:
        kwargs: Dict[str, Any] = {}
        for name, value in {**self.defaults, **params}.items():
            kwargs[PARAMETER_NAMES.get(name, name)] = value

        if "n_estimators" in kwargs:
            kwargs["n_estimators"] = int(kwargs["n_estimators"])
        # bag fraction of 1.0 means a full bootstrap sample
        if kwargs.get("max_samples") is not None and float(kwargs["max_samples"]) >= 1.0:
            kwargs["max_samples"] = None

        return RandomForestClassifier(
            random_state=self.seed, n_jobs=self.n_jobs, **kwargs
        )

    def train(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        params: Dict[str, Any],
    ) -> RandomForestClassifier:
        model = self.build(params)
        model.fit(features, labels)
        return model


def relative_importance(
    model: Any,
    feature_names: Sequence[str],
) -> Optional[Dict[str, float]]:
    """Variable importance per feature, as percentages summing to 100.

    Uses the model's ``feature_importances_``; returns None for models
    that do not expose one. A forest without any split (all importances
    zero) gives 0 for every feature.
    """
    importances = getattr(model, "feature_importances_", None)
    if importances is None:
        return None
    importances = np.asarray(importances, dtype=np.float64)
    if importances.shape != (len(feature_names),):
        raise ValueError(
            f"{importances.size} importances for {len(feature_names)} features"
        )
    total = importances.sum()
    if total <= 0:
        return {name: 0.0 for name in feature_names}
    return {
        name: float(value * 100.0 / total)
        for name, value in zip(feature_names, importances)
    }
