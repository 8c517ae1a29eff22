"""Confidence intervals for accuracy statistics.

Wilson score intervals for proportions (overall, producer's and
consumer's accuracy) and the large-sample interval for Kappa.

No I/O. Only depends on: math, scipy.stats.
"""

import math
from typing import Tuple

from scipy.stats import norm


def z_score_for_confidence(confidence_level: float) -> float:
    """Two-sided z-score, e.g. 0.95 -> 1.959964."""
    if not 0.0 < confidence_level < 1.0:
        raise ValueError(
            f"confidence_level must be in (0, 1), got {confidence_level}"
        )
    return float(norm.ppf((1.0 + confidence_level) / 2.0))


def wilson_ci(p: float, n: int, z: float = 1.96) -> Tuple[float, float]:
    """Wilson score confidence interval for a proportion.

    Stays inside [0, 1] and behaves for p near 0 or 1 and small n
    (Agresti & Coull 1998).

    Args:
        p: Observed proportion.
        n: Number of trials behind the proportion.
        z: Z-score for the desired confidence level.

    Returns:
        (lower, upper). (0, 1) when n is 0.
    """
    if n == 0:
        return (0.0, 1.0)

    z2 = z * z
    denom = 1.0 + z2 / n
    center = (p + z2 / (2.0 * n)) / denom
    spread = z * math.sqrt(p * (1.0 - p) / n + z2 / (4.0 * n * n)) / denom

    return (max(0.0, center - spread), min(1.0, center + spread))


def kappa_ci(kappa: float, p_o: float, p_e: float, n: int,
             z: float = 1.96) -> Tuple[float, float]:
    """Large-sample confidence interval for Cohen's Kappa.

    var(k) ~= p_o (1 - p_o) / (n (1 - p_e)^2)
    (Congalton & Green 2019).
    """
    if n == 0 or p_e >= 1.0:
        raise ValueError("Kappa interval undefined for n=0 or p_e=1")

    se = math.sqrt(p_o * (1.0 - p_o) / (n * (1.0 - p_e) ** 2))
    return (kappa - z * se, kappa + z * se)
