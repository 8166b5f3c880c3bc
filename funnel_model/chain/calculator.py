# funnel_model/chain/calculator.py
"""
Absorbing Markov chain analysis for subscription funnels.

The calculator owns an ordered state list and a row-stochastic transition
matrix built once at construction. Every analysis method is a pure function
of that matrix; nothing is mutated after ``__init__`` returns, so a single
instance can be shared freely.
"""

import logging
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from .linalg import invert_matrix, matrix_multiply
from .models import MarkovChainResult, MarkovState, TransitionProbability

logger = logging.getLogger(__name__)

MAX_STEADY_STATE_ITERATIONS = 1000
STEADY_STATE_TOLERANCE = 1e-6


class MarkovChainCalculator:
    """Steady-state, absorption, retention and lifetime-value analysis."""

    def __init__(self, states: Sequence[MarkovState], transitions: Sequence[TransitionProbability]):
        self._states = tuple(states)
        self._state_index: Dict[str, int] = {}
        for i, state in enumerate(self._states):
            if state.id in self._state_index:
                raise ValueError(f"Duplicate state id '{state.id}' in Markov chain definition")
            self._state_index[state.id] = i

        self._matrix = self._build_transition_matrix(transitions)
        self._matrix.setflags(write=False)

        self._active_mask = np.array([not s.is_absorbing for s in self._states], dtype=bool)
        self._active_mask.setflags(write=False)

        logger.debug(
            f"Built {len(self._states)}-state Markov chain "
            f"({int(self._active_mask.sum())} active, {int((~self._active_mask).sum())} absorbing)"
        )

    @property
    def states(self) -> tuple:
        return self._states

    @property
    def state_ids(self) -> List[str]:
        return [s.id for s in self._states]

    @property
    def transition_matrix(self) -> pd.DataFrame:
        """Copy of the normalized transition matrix labelled by state id."""
        return pd.DataFrame(self._matrix.copy(), index=self.state_ids, columns=self.state_ids)

    def _build_transition_matrix(self, transitions: Sequence[TransitionProbability]) -> np.ndarray:
        n = len(self._states)
        matrix = np.zeros((n, n), dtype=float)

        for t in transitions:
            row = self._state_index.get(t.from_state)
            col = self._state_index.get(t.to_state)
            if row is None or col is None:
                logger.warning(
                    f"Ignoring transition {t.from_state!r} -> {t.to_state!r}: unknown state id"
                )
                continue
            matrix[row, col] = t.probability

        for i in range(n):
            row_sum = matrix[i].sum()
            if row_sum > 0 and row_sum != 1:
                matrix[i] = matrix[i] / row_sum
            elif row_sum == 0:
                logger.debug(f"State '{self._states[i].id}' has no outgoing transitions")

        return matrix

    def _step(self, vector: np.ndarray) -> np.ndarray:
        return vector @ self._matrix

    def calculate_steady_state(self) -> np.ndarray:
        """
        Long-run occupancy distribution by power iteration from a uniform start.

        Iteration stops once the largest per-state change drops below
        STEADY_STATE_TOLERANCE or after MAX_STEADY_STATE_ITERATIONS steps, in
        which case the last vector is returned as an approximation.
        """
        n = len(self._states)
        if n == 0:
            return np.zeros(0)

        state = np.full(n, 1.0 / n)
        for iteration in range(MAX_STEADY_STATE_ITERATIONS):
            new_state = self._step(state)
            diff = np.max(np.abs(new_state - state))
            state = new_state
            if diff < STEADY_STATE_TOLERANCE:
                logger.debug(f"Steady state converged after {iteration + 1} iterations")
                break
        else:
            logger.debug(
                f"Steady state did not converge within {MAX_STEADY_STATE_ITERATIONS} iterations"
            )

        return state

    def _partition(self):
        transient = [i for i, s in enumerate(self._states) if not s.is_absorbing]
        absorbing = [i for i, s in enumerate(self._states) if s.is_absorbing]
        return transient, absorbing

    def _fundamental_matrix(self, transient: List[int]) -> np.ndarray:
        q = self._matrix[np.ix_(transient, transient)]
        return invert_matrix(np.eye(len(transient)) - q)

    def calculate_absorption_probabilities(self) -> pd.DataFrame:
        """
        Probability that a process started in each transient state ends in each
        absorbing state, ``B = (I - Q)^-1 R``.

        Returns:
            DataFrame indexed by transient state id with one column per
            absorbing state id; empty when the chain has no absorbing state.

        Raises:
            SingularMatrixError: If ``I - Q`` cannot be inverted.
        """
        transient, absorbing = self._partition()
        if not absorbing:
            return pd.DataFrame()

        r = self._matrix[np.ix_(transient, absorbing)]
        n_fund = self._fundamental_matrix(transient)
        b = matrix_multiply(n_fund, r)

        return pd.DataFrame(
            b,
            index=[self._states[i].id for i in transient],
            columns=[self._states[j].id for j in absorbing],
        )

    def calculate_expected_steps(self) -> np.ndarray:
        """
        Expected number of periods before absorption from each state.

        Transient entries are the row sums of the fundamental matrix; absorbing
        states take 0. Without any absorbing state absorption never happens
        and every entry is infinite.
        """
        transient, absorbing = self._partition()
        steps = np.zeros(len(self._states))
        if not absorbing:
            steps[:] = np.inf
            return steps

        n_fund = self._fundamental_matrix(transient)
        steps[transient] = n_fund.sum(axis=1)
        return steps

    def calculate_retention_rate(self) -> float:
        """Uniform average of all active-to-active transition probabilities."""
        active = np.flatnonzero(self._active_mask)
        if active.size == 0:
            return 0.0
        sub = self._matrix[np.ix_(active, active)]
        return float(sub.sum() / (active.size * active.size))

    def calculate_customer_lifetime_value(self, monthly_revenue: float, acquisition_cost: float = 0.0) -> float:
        """
        CLV as the value of a geometric perpetuity, ``revenue / churn - CAC``,
        floored at zero. Zero churn yields ``inf``.
        """
        churn_rate = 1 - self.calculate_retention_rate()
        if churn_rate == 0:
            return float("inf")
        clv = monthly_revenue / churn_rate - acquisition_cost
        return max(0.0, clv)

    def predict_future_states(self, initial_state: Sequence[float], periods: int) -> pd.DataFrame:
        """
        Project a state vector forward ``periods`` steps.

        Returns:
            DataFrame with ``periods + 1`` rows (index ``period``, row 0 is the
            initial vector) and one column per state id.
        """
        vector = np.asarray(initial_state, dtype=float)
        if vector.shape != (len(self._states),):
            raise ValueError(
                f"Initial state has length {vector.size} but the chain has {len(self._states)} states"
            )
        if periods < 0:
            raise ValueError(f"periods must be non-negative, got {periods}")

        rows = [vector]
        for _ in range(periods):
            rows.append(self._step(rows[-1]))

        frame = pd.DataFrame(np.vstack(rows), columns=self.state_ids)
        frame.index.name = "period"
        return frame

    def calculate_cohort_retention(self, cohort_size: float, periods: int) -> pd.Series:
        """Fraction of a cohort, started in the first state, still active per period."""
        if cohort_size <= 0:
            raise ValueError(f"cohort_size must be positive, got {cohort_size}")
        if not self._states:
            raise ValueError("Cannot project a cohort through a chain with no states")

        initial = np.zeros(len(self._states))
        initial[0] = cohort_size
        projection = self.predict_future_states(initial, periods)

        active_ids = [s.id for s in self._states if not s.is_absorbing]
        retention = projection[active_ids].sum(axis=1) / cohort_size
        retention.name = "retention"
        return retention

    def get_comprehensive_analysis(self, monthly_revenue: float, acquisition_cost: float = 0.0) -> MarkovChainResult:
        """Bundle steady state, absorption, retention and lifetime figures."""
        steady_state = self.calculate_steady_state()
        retention_rate = self.calculate_retention_rate()
        churn_rate = 1 - retention_rate
        average_lifetime = 1 / churn_rate if churn_rate > 0 else float("inf")
        clv = self.calculate_customer_lifetime_value(monthly_revenue, acquisition_cost)

        expected_steps = self.calculate_expected_steps()
        absorption = self.calculate_absorption_probabilities()

        logger.info(
            f"Chain analysis: retention={retention_rate:.4f}, churn={churn_rate:.4f}, "
            f"clv={clv:.2f}, lifetime={average_lifetime:.2f}"
        )

        return MarkovChainResult(
            steady_state=steady_state,
            expected_steps=expected_steps,
            absorption_probabilities=absorption,
            customer_lifetime_value=clv,
            retention_rate=retention_rate,
            churn_rate=churn_rate,
            average_lifetime=average_lifetime,
            state_ids=self.state_ids,
        )
