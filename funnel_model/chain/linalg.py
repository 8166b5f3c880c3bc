# funnel_model/chain/linalg.py
"""
Dense linear-algebra helpers for small Markov chains.

The inverse is computed with Gauss-Jordan elimination and partial pivoting so
that a vanishing pivot is reported as a SingularMatrixError instead of being
absorbed into an ill-conditioned result. Suitable for chains with tens of
states, not thousands.
"""

import logging

import numpy as np

from .exceptions import SingularMatrixError

logger = logging.getLogger(__name__)

PIVOT_TOLERANCE = 1e-10


def invert_matrix(matrix: np.ndarray, tolerance: float = PIVOT_TOLERANCE) -> np.ndarray:
    """
    Invert a square matrix by Gauss-Jordan elimination with partial pivoting.

    At each step the row (at or below the pivot) with the largest absolute
    value in the pivot column is swapped into place, the pivot row is scaled
    to 1 and the pivot column is eliminated from every other row.

    Args:
        matrix: Square 2-D array to invert
        tolerance: Smallest pivot magnitude accepted

    Returns:
        The inverse as a new float array.

    Raises:
        ValueError: If the input is not a square 2-D array
        SingularMatrixError: If a pivot magnitude falls below ``tolerance``
    """
    a = np.asarray(matrix, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {a.shape}")

    n = a.shape[0]
    augmented = np.hstack([a, np.eye(n)])

    for i in range(n):
        max_row = i + int(np.argmax(np.abs(augmented[i:, i])))
        if max_row != i:
            augmented[[i, max_row]] = augmented[[max_row, i]]

        pivot = augmented[i, i]
        if abs(pivot) < tolerance:
            logger.debug(f"Pivot {pivot:.3e} at column {i} is below tolerance {tolerance:.1e}")
            raise SingularMatrixError("Matrix is singular")

        augmented[i] = augmented[i] / pivot

        factors = augmented[:, i].copy()
        factors[i] = 0.0
        augmented -= np.outer(factors, augmented[i])

    return augmented[:, n:]


def matrix_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Multiply an (m x p) matrix by a (p x n) matrix."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape[1] != b.shape[0]:
        raise ValueError(f"Cannot multiply shapes {a.shape} and {b.shape}")
    return a @ b
