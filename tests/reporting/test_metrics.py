import numpy as np
import pandas as pd
import pytest

from funnel_model.reporting.formatting import format_currency, format_months, format_percentage
from funnel_model.reporting.metrics import (
    build_cohort_table,
    estimate_cohort_size,
    revenue_at_scale,
    summarize_analysis,
)

pytestmark = pytest.mark.reporting


def test_build_cohort_table(dashboard_calculator):
    table = build_cohort_table(dashboard_calculator, 100, 29.90, 12)

    assert list(table.columns) == ["period", "retention", "active_customers", "revenue", "cumulative_revenue"]
    assert len(table) == 13
    assert table["period"].tolist() == list(range(13))
    assert table.loc[0, "active_customers"] == 100
    assert table.loc[0, "revenue"] == pytest.approx(2990.0)
    assert table.loc[1, "active_customers"] == 15
    assert np.allclose(table["revenue"], table["active_customers"] * 29.90)
    assert table["cumulative_revenue"].iloc[-1] == pytest.approx(table["revenue"].sum())


def test_estimate_cohort_size():
    assert estimate_cohort_size(10000, 15, 76.8) == 1152
    assert estimate_cohort_size(0, 15, 76.8) == 0


def test_revenue_at_scale():
    s = revenue_at_scale(36.0)
    assert s.index.tolist() == [100, 1000, 10000]
    assert s.tolist() == [3600.0, 36000.0, 360000.0]
    assert np.isinf(revenue_at_scale(float("inf"), [10])).all()


def test_summarize_analysis(dashboard_calculator):
    result = dashboard_calculator.get_comprehensive_analysis(29.90)
    summary = summarize_analysis(result)

    assert summary["metric"].tolist() == [
        "customer_lifetime_value", "retention_rate", "churn_rate", "average_lifetime"
    ]
    row = summary.set_index("metric").loc["customer_lifetime_value"]
    assert row["value"] == pytest.approx(result.customer_lifetime_value)
    assert row["display"] == "$36"
    assert summary.set_index("metric").loc["retention_rate", "display"] == "16.9%"


@pytest.mark.parametrize("func", [format_currency, format_percentage, format_months])
def test_infinite_values_render_as_symbol(func):
    assert func(float("inf")) == "∞"
    assert func(float("nan")) == "∞"


def test_format_currency():
    assert format_currency(1234.56) == "$1,235"
    assert format_currency(0) == "$0"


def test_format_percentage():
    assert format_percentage(16.8875) == "16.9%"


def test_format_months():
    assert format_months(0.5) == "15 days"
    assert format_months(1.2032) == "1.2 months"
