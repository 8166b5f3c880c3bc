# funnel_model/reporting/metrics.py
"""
Functions to turn chain analysis results into reporting tables.
"""

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from funnel_model.chain.calculator import MarkovChainCalculator
from funnel_model.chain.models import MarkovChainResult
from .formatting import format_currency, format_months, format_percentage

logger = logging.getLogger(__name__)

DEFAULT_SCALE_COHORTS = (100, 1000, 10000)


def estimate_cohort_size(visitors: float, registration_rate: float, join_rate: float) -> int:
    """Number of new subscribers a month of visitors produces (rates in percent)."""
    return int(round(visitors * (registration_rate / 100) * (join_rate / 100)))


def build_cohort_table(
    calculator: MarkovChainCalculator,
    cohort_size: float,
    monthly_price: float,
    periods: int,
) -> pd.DataFrame:
    """
    Per-period retention and revenue for a single cohort.

    Args:
        calculator: Chain to project the cohort through
        cohort_size: Customers in the cohort at period 0
        monthly_price: Revenue per active customer per period
        periods: Number of periods after the start

    Returns:
        DataFrame with period, retention, active_customers, revenue and
        cumulative_revenue columns, one row per period.
    """
    retention = calculator.calculate_cohort_retention(cohort_size, periods)

    table = pd.DataFrame({
        "period": retention.index.to_numpy(),
        "retention": retention.to_numpy(),
    })
    table["active_customers"] = np.round(cohort_size * table["retention"]).astype(int)
    table["revenue"] = table["active_customers"] * monthly_price
    table["cumulative_revenue"] = table["revenue"].cumsum()

    logger.debug(
        f"Cohort of {cohort_size} over {periods} periods: "
        f"final retention {table['retention'].iloc[-1]:.4f}, "
        f"cumulative revenue {table['cumulative_revenue'].iloc[-1]:.2f}"
    )
    return table


def revenue_at_scale(clv: float, cohort_sizes: Sequence[int] = DEFAULT_SCALE_COHORTS) -> pd.Series:
    """Total lifetime revenue for cohorts of several sizes."""
    return pd.Series(
        [size * clv for size in cohort_sizes],
        index=pd.Index(list(cohort_sizes), name="cohort_size"),
        name="lifetime_revenue",
    )


def summarize_analysis(result: MarkovChainResult) -> pd.DataFrame:
    """One row per headline metric with raw and display values."""
    rows = [
        ("customer_lifetime_value", result.customer_lifetime_value,
         format_currency(result.customer_lifetime_value)),
        ("retention_rate", result.retention_rate, format_percentage(result.retention_rate * 100)),
        ("churn_rate", result.churn_rate, format_percentage(result.churn_rate * 100)),
        ("average_lifetime", result.average_lifetime, format_months(result.average_lifetime)),
    ]
    return pd.DataFrame(rows, columns=["metric", "value", "display"])
