"""Stratified random sampling of labeled locations.

Draws, per class, a seeded uniform subset without replacement from all
locations carrying that class label.

No I/O. Only depends on: numpy, typing.
"""

from typing import Dict, Hashable, Iterable, List, Tuple

import numpy as np

from .errors import InsufficientSamplesError, InvalidConfigurationError
from .models import LabeledLocation

POLICY_CLAMP = "clamp"
POLICY_RAISE = "raise"
INSUFFICIENT_POLICIES = (POLICY_CLAMP, POLICY_RAISE)


STREAM_SAMPLING = 0
STREAM_SPLIT = 1


def class_rng(
    seed: int,
    class_value: int,
    stream: int = STREAM_SAMPLING,
) -> np.random.RandomState:
    """Generator for one class, independent of which other classes exist.

    Sampling and splitting draw from different streams, so equal seeds
    do not replay the sampling permutation in the split.
    """
    key = [int(seed), int(class_value)]
    if stream != STREAM_SAMPLING:
        key.append(int(stream))
    return np.random.RandomState(key)


def group_by_class(
    pairs: Iterable[Tuple[Hashable, int]],
) -> Dict[int, List[Hashable]]:
    """{class_value: [location, ...]} preserving input order."""
    groups: Dict[int, List[Hashable]] = {}
    for location, class_value in pairs:
        groups.setdefault(int(class_value), []).append(location)
    return groups


def sample_stratified(
    pairs: Iterable[Tuple[Hashable, int]],
    n_per_class: Dict[int, int],
    seed: int = 42,
    policy: str = POLICY_CLAMP,
) -> Tuple[Tuple[LabeledLocation, ...], List[str]]:
    """Select n_per_class[c] distinct locations of each class c.

    Args:
        pairs: (location, class_value) pairs, e.g. from a reference map.
            Locations must be unique within a class.
        n_per_class: {class_value: desired sample count}.
        seed: Random seed. Same seed and same input order give
            identical samples.
        policy: "clamp" takes every available location of a short class
            and records a warning; "raise" raises InsufficientSamplesError.

    Returns:
        (sampled locations with sequential ids, warning messages)
    """
    if policy not in INSUFFICIENT_POLICIES:
        raise InvalidConfigurationError(
            f"Unknown insufficient-samples policy: {policy!r} "
            f"(expected one of {INSUFFICIENT_POLICIES})"
        )

    groups = group_by_class(pairs)
    points: List[LabeledLocation] = []
    warnings: List[str] = []
    point_id = 1

    for class_val in sorted(n_per_class):
        n_desired = int(n_per_class[class_val])
        candidates = groups.get(class_val, [])
        available = len(candidates)

        if available < n_desired:
            if policy == POLICY_RAISE:
                raise InsufficientSamplesError(class_val, n_desired, available)
            warnings.append(
                f"Class {class_val}: only {available} of {n_desired} "
                f"samples generated (insufficient locations)."
            )
            n_desired = available

        if n_desired == 0:
            continue

        order = class_rng(seed, class_val).permutation(available)
        for idx in order[:n_desired]:
            points.append(LabeledLocation(
                id=point_id,
                location=candidates[idx],
                label=class_val,
            ))
            point_id += 1

    return tuple(points), warnings
