"""Cohen's Kappa coefficient.

Agreement corrected for the agreement expected by chance from the
row and column marginals.

No I/O. Only depends on: numpy, confidence module.
"""

from typing import Tuple

import numpy as np

from .confidence import kappa_ci as _kappa_ci
from .errors import DegenerateMatrixError


def expected_agreement(matrix: np.ndarray) -> float:
    """p_e = sum_c(row_c * col_c) / N^2."""
    N = float(matrix.sum())
    row_totals = matrix.sum(axis=1).astype(float)
    col_totals = matrix.sum(axis=0).astype(float)
    return float((row_totals * col_totals).sum()) / (N * N)


def compute(matrix: np.ndarray, z: float = 1.96) -> Tuple[float, Tuple[float, float]]:
    """Compute Cohen's Kappa and its confidence interval.

    Args:
        matrix: k x k confusion matrix (reference=rows, predicted=cols).
        z: Z-score for the interval.

    Returns:
        (kappa_value, (ci_lower, ci_upper))

    Raises:
        ValueError: If matrix is empty.
        DegenerateMatrixError: If expected agreement is 1 (e.g. a single
            class on both axes), where Kappa is undefined.
    """
    N = int(matrix.sum())
    if N == 0:
        raise ValueError("Cannot compute Kappa on empty matrix")

    p_o = float(np.trace(matrix)) / N
    p_e = expected_agreement(matrix)

    if abs(1.0 - p_e) < 1e-15:
        raise DegenerateMatrixError(
            f"Kappa undefined: expected agreement is 1 "
            f"(matrix shape {matrix.shape}, N={N})"
        )

    kappa = (p_o - p_e) / (1.0 - p_e)
    return (float(kappa), _kappa_ci(kappa, p_o, p_e, N, z))
