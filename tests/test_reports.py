"""Report definitions and their rendered SQL."""
import pytest
from pydantic import ValidationError

from sales_dashboard.core.config import TableReference
from sales_dashboard.services.reports import (
    AVERAGE_ORDER_VALUE,
    GROWTH_METRICS,
    REPORTS,
    REVENUE_TRENDS,
)


def normalized(sql):
    return " ".join(sql.split())


def test_fixed_report_order():
    assert [r.name for r in REPORTS] == [
        "Revenue Trends",
        "Average Order Value",
        "Growth Metrics",
    ]
    assert [r.action for r in REPORTS] == [
        "populateRevenueTrends",
        "populateAverageOrderValue",
        "populateGrowthMetrics",
    ]


@pytest.mark.parametrize("report", REPORTS, ids=lambda r: r.name)
def test_templates_reference_the_configured_table(report, table_ref):
    sql = report.render(table_ref)

    assert "FROM `acme-analytics.sales_mart.sales`" in sql
    assert "{" not in sql


def test_revenue_trends_sql(table_ref):
    sql = normalized(REVENUE_TRENDS.render(table_ref))

    assert "DATE(order_date) AS date" in sql
    assert "SUM(revenue) AS total_revenue" in sql
    assert sql.endswith("GROUP BY date ORDER BY date")


def test_average_order_value_rounds_to_cents(table_ref):
    sql = normalized(AVERAGE_ORDER_VALUE.render(table_ref))

    assert "ROUND(AVG(order_value), 2) AS avg_order_value" in sql
    assert sql.endswith("GROUP BY date ORDER BY date")


def test_growth_metrics_sql(table_ref):
    sql = normalized(GROWTH_METRICS.render(table_ref))

    assert "LAG(revenue) OVER (ORDER BY yr, mth) AS prev_revenue" in sql
    assert "LPAD(CAST(mth AS STRING), 2, '0')" in sql
    assert (
        "ROUND(SAFE_DIVIDE(revenue - prev_revenue, prev_revenue) * 100, 2) AS mom_growth_pct"
        in sql
    )
    assert sql.endswith("ORDER BY yr, mth")


def test_definitions_are_immutable():
    with pytest.raises(ValidationError):
        REVENUE_TRENDS.destination = "Elsewhere"


@pytest.mark.parametrize(
    "field, value",
    [
        ("project", "acme`; DROP TABLE x; --"),
        ("dataset", "sales mart"),
        ("table", "sales`"),
        ("table", ""),
    ],
)
def test_table_reference_rejects_unsafe_identifiers(field, value):
    parts = {"project": "acme-analytics", "dataset": "sales_mart", "table": "sales"}
    parts[field] = value

    with pytest.raises(ValidationError):
        TableReference(**parts)
