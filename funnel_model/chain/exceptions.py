"""
Custom exception classes for Markov chain analysis.

Numerical failures are raised as explicit errors so callers never receive a
silently wrong answer from a degenerate chain.
"""


class MarkovChainError(Exception):
    """Base exception for all Markov chain errors."""

    pass


class SingularMatrixError(MarkovChainError):
    """Raised when a matrix cannot be inverted because a pivot vanished."""

    pass
