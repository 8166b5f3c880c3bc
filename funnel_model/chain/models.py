from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class MarkovState:
    """A single state of a Markov chain.

    Args:
        id: Unique identifier used by transitions
        label: Human-readable name
        value: Initial occupancy basis (population count or percentage)
        is_absorbing: Whether the state is never left once entered
    """
    id: str
    label: str
    value: float = 0.0
    is_absorbing: bool = False


@dataclass(frozen=True)
class TransitionProbability:
    """One-period move probability between two states."""
    from_state: str
    to_state: str
    probability: float

    def __post_init__(self):
        if not (0 <= self.probability <= 1):
            raise ValueError(
                f"Invalid transition probability {self.probability} for "
                f"{self.from_state!r} -> {self.to_state!r}. Probabilities must be between 0 and 1."
            )


@dataclass
class MarkovChainResult:
    """Bundle of the headline figures for a chain.

    Args:
        steady_state: Long-run occupancy distribution
        expected_steps: Expected periods before absorption, per state
        absorption_probabilities: Transient-by-absorbing probability frame
        customer_lifetime_value: CLV for the supplied monthly revenue
        retention_rate: Average active-to-active transition probability
        churn_rate: Complement of the retention rate
        average_lifetime: Expected periods retained (1 / churn_rate)
    """
    steady_state: np.ndarray
    expected_steps: np.ndarray
    absorption_probabilities: pd.DataFrame
    customer_lifetime_value: float
    retention_rate: float
    churn_rate: float
    average_lifetime: float
    state_ids: Optional[list] = field(default=None)

    def is_unbounded(self) -> bool:
        """True when churn is zero and lifetime figures are infinite."""
        return not np.isfinite(self.average_lifetime)
