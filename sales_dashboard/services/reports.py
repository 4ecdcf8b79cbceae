# sales_dashboard/services/reports.py
"""
The fixed set of dashboard reports.

Each template is BigQuery Standard SQL with ``{project}``, ``{dataset}`` and
``{table}`` placeholders. They are filled in by plain string interpolation
because they address the table itself, which query parameters cannot do; the
identifiers are validated by TableReference before they get here.
"""
from typing import Tuple

from pydantic import BaseModel, ConfigDict

from sales_dashboard.core.config import TableReference


class ReportDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    sql_template: str
    destination: str
    action: str

    def render(self, table_ref: TableReference) -> str:
        return self.sql_template.format(
            project=table_ref.project,
            dataset=table_ref.dataset,
            table=table_ref.table,
        )


REVENUE_TRENDS_SQL = """
SELECT
  DATE(order_date) AS date,
  SUM(revenue) AS total_revenue
FROM `{project}.{dataset}.{table}`
GROUP BY date
ORDER BY date
"""

# BigQuery ROUND rounds half away from zero: 33.335 -> 33.34
AVERAGE_ORDER_VALUE_SQL = """
SELECT
  DATE(order_date) AS date,
  ROUND(AVG(order_value), 2) AS avg_order_value
FROM `{project}.{dataset}.{table}`
GROUP BY date
ORDER BY date
"""

# LAG runs over the months that have orders, so a month with no orders is
# skipped rather than treated as zero revenue. SAFE_DIVIDE yields NULL growth
# for the first month and after a zero-revenue month.
GROWTH_METRICS_SQL = """
WITH monthly AS (
  SELECT
    EXTRACT(YEAR FROM order_date) AS yr,
    EXTRACT(MONTH FROM order_date) AS mth,
    SUM(revenue) AS revenue
  FROM `{project}.{dataset}.{table}`
  GROUP BY yr, mth
),
ranked AS (
  SELECT
    yr,
    mth,
    revenue,
    LAG(revenue) OVER (ORDER BY yr, mth) AS prev_revenue
  FROM monthly
)
SELECT
  CONCAT(CAST(yr AS STRING), '-', LPAD(CAST(mth AS STRING), 2, '0')) AS year_month,
  revenue,
  ROUND(SAFE_DIVIDE(revenue - prev_revenue, prev_revenue) * 100, 2) AS mom_growth_pct
FROM ranked
ORDER BY yr, mth
"""

REVENUE_TRENDS = ReportDefinition(
    name="Revenue Trends",
    sql_template=REVENUE_TRENDS_SQL,
    destination="Revenue Trends",
    action="populateRevenueTrends",
)

AVERAGE_ORDER_VALUE = ReportDefinition(
    name="Average Order Value",
    sql_template=AVERAGE_ORDER_VALUE_SQL,
    destination="Average Order Value",
    action="populateAverageOrderValue",
)

GROWTH_METRICS = ReportDefinition(
    name="Growth Metrics",
    sql_template=GROWTH_METRICS_SQL,
    destination="Growth Metrics",
    action="populateGrowthMetrics",
)

# Refresh order for "Refresh All"
REPORTS: Tuple[ReportDefinition, ...] = (
    REVENUE_TRENDS,
    AVERAGE_ORDER_VALUE,
    GROWTH_METRICS,
)
