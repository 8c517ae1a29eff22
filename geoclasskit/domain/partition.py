"""Stratified random train/validation split.

Each location of a class draws a uniform value in [0, 1); values below
the split fraction go to training, the rest to validation. Ratios
converge to the fraction per class; there is no exact-count quota.

No I/O. Only depends on: typing, domain.sampling.
"""

from typing import Dict, List, Sequence

from .errors import InvalidConfigurationError
from .models import DatasetSplit, LabeledLocation
from .sampling import STREAM_SPLIT, class_rng


def split_stratified(
    locations: Sequence[LabeledLocation],
    split_fraction: float = 0.7,
    seed: int = 0,
) -> DatasetSplit:
    """Split locations into training/validation independently per class.

    Args:
        locations: Sampled locations.
        split_fraction: Probability of a location landing in training,
            strictly between 0 and 1.
        seed: Random seed.

    Returns:
        DatasetSplit. Within each partition, locations keep input order.
    """
    if not 0.0 < split_fraction < 1.0:
        raise InvalidConfigurationError(
            f"split_fraction must be in (0, 1), got {split_fraction}"
        )

    by_class: Dict[int, List[int]] = {}
    for i, loc in enumerate(locations):
        by_class.setdefault(loc.label, []).append(i)

    in_training = [False] * len(locations)
    for class_val in sorted(by_class):
        indices = by_class[class_val]
        draws = class_rng(seed, class_val, STREAM_SPLIT).random_sample(len(indices))
        for idx, value in zip(indices, draws):
            in_training[idx] = bool(value < split_fraction)

    training = tuple(loc for loc, t in zip(locations, in_training) if t)
    validation = tuple(loc for loc, t in zip(locations, in_training) if not t)

    return DatasetSplit(
        training=training,
        validation=validation,
        split_fraction=split_fraction,
        seed=seed,
    )
