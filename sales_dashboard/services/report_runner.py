# sales_dashboard/services/report_runner.py
import logging
import time

from sales_dashboard.core.config import TableReference
from sales_dashboard.services.bigquery_service import QueryClient
from sales_dashboard.services.models import RefreshOutcome
from sales_dashboard.services.reports import ReportDefinition
from sales_dashboard.services.sheet_service import TabularSink

logger = logging.getLogger(__name__)


class ReportRunner:
    """Renders a report's SQL, runs it and hands the result to the sink. Errors propagate."""

    def __init__(self, query_client: QueryClient, sink: TabularSink, table_ref: TableReference):
        self.query_client = query_client
        self.sink = sink
        self.table_ref = table_ref

    def run(self, definition: ReportDefinition) -> RefreshOutcome:
        logger.info(f"Refreshing '{definition.name}' from {self.table_ref}")
        started = time.monotonic()
        sql = definition.render(self.table_ref)
        result = self.query_client.execute(sql)
        self.sink.write(definition.destination, result)
        outcome = RefreshOutcome(
            report=definition.name,
            destination=definition.destination,
            row_count=result.row_count,
            elapsed_seconds=round(time.monotonic() - started, 3),
        )
        logger.info(
            f"'{definition.name}' refreshed: {outcome.row_count} rows in {outcome.elapsed_seconds}s"
        )
        return outcome
