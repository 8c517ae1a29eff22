"""Per-class sample allocation.

Proportional allocation from a class histogram, clamped to
[min_points, max_points] per class, plus an equal-allocation strategy.
Clamping deliberately over-samples rare classes relative to their
prevalence, so the effective total may exceed the nominal target.

No I/O. Only depends on: typing, domain.errors, domain.models.
"""

from typing import Dict, List, Sequence, Tuple

from .errors import InvalidConfigurationError
from .models import ClassAllocation


def round_half_away_from_zero(numerator: int, denominator: int) -> int:
    """Round numerator/denominator to the nearest integer, ties away from 0.

    Integer arithmetic only, so exact halves (e.g. 9/2) always round the
    same way regardless of float representation.
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")
    sign = -1 if numerator < 0 else 1
    q, r = divmod(abs(numerator), denominator)
    if 2 * r >= denominator:
        q += 1
    return sign * q


def allocate_clamped(
    class_counts: Dict[int, int],
    num_total_points: int,
    min_points: int,
    max_points: int,
) -> Tuple[ClassAllocation, List[str]]:
    """Allocate samples proportionally to class counts, then clamp.

    For each class with count c and total T:
        raw = round(c / T * num_total_points)   (half away from zero)
        allocated = clamp(raw, min_points, max_points)

    Classes with zero members are skipped rather than forced to
    ``min_points``: there is nothing to sample from them.

    Args:
        class_counts: {class_value: pixel_count}.
        num_total_points: Nominal total number of samples (> 0).
        min_points: Minimum samples per class (> 0).
        max_points: Maximum samples per class (>= min_points).

    Returns:
        (ClassAllocation, [warning_messages])

    Raises:
        InvalidConfigurationError: On empty histogram, zero total count,
            non-positive target or inconsistent bounds.
    """
    if not class_counts:
        raise InvalidConfigurationError("No classes provided")
    if num_total_points <= 0:
        raise InvalidConfigurationError(
            f"num_total_points must be positive, got {num_total_points}"
        )
    if min_points <= 0:
        raise InvalidConfigurationError(
            f"min_points must be positive, got {min_points}"
        )
    if min_points > max_points:
        raise InvalidConfigurationError(
            f"min_points ({min_points}) > max_points ({max_points})"
        )
    negative = [c for c, n in class_counts.items() if n < 0]
    if negative:
        raise InvalidConfigurationError(
            f"Negative pixel counts for classes {sorted(negative)}"
        )

    total = sum(class_counts.values())
    if total == 0:
        raise InvalidConfigurationError("Total pixel count is zero")

    warnings: List[str] = []
    n_per_class: Dict[int, int] = {}
    proportions: Dict[int, float] = {}
    raw_points: Dict[int, int] = {}
    skipped: List[int] = []

    for label in sorted(class_counts):
        count = class_counts[label]
        if count == 0:
            skipped.append(label)
            continue

        proportions[label] = count / total
        raw = round_half_away_from_zero(count * num_total_points, total)
        raw_points[label] = raw
        allocated = min(max(raw, min_points), max_points)
        n_per_class[label] = allocated

        if allocated > raw:
            warnings.append(
                f"Class {label}: proportional allocation {raw} raised to "
                f"minimum {min_points}."
            )
        elif allocated < raw:
            warnings.append(
                f"Class {label}: proportional allocation {raw} capped at "
                f"maximum {max_points}."
            )

    if skipped:
        warnings.append(
            f"Classes {skipped} have no pixels and receive no samples."
        )

    allocation = ClassAllocation(
        n_per_class=n_per_class,
        proportions=proportions,
        raw_points=raw_points,
        skipped_classes=tuple(skipped),
        num_total_points=num_total_points,
        min_points=min_points,
        max_points=max_points,
    )
    return allocation, warnings


def allocate_equal(
    total_n: int,
    class_labels: Sequence[int],
) -> Tuple[Dict[int, int], List[str]]:
    """Allocate samples equally across classes.

    Args:
        total_n: Total number of samples.
        class_labels: Class values.

    Returns:
        ({class_value: n_samples}, [warning_messages])
    """
    if not class_labels:
        raise InvalidConfigurationError("No classes provided")
    if total_n <= 0:
        raise InvalidConfigurationError(
            f"total_n must be positive, got {total_n}"
        )

    warnings = []
    base, remainder = divmod(total_n, len(class_labels))

    allocation = {}
    for i, label in enumerate(sorted(class_labels)):
        allocation[label] = base + (1 if i < remainder else 0)

    if base == 0:
        warnings.append(
            f"Equal allocation of {total_n} samples over "
            f"{len(class_labels)} classes leaves some classes empty."
        )

    return allocation, warnings
