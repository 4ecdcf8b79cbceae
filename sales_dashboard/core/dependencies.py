# sales_dashboard/core/dependencies.py
import functools
import logging

from sales_dashboard.core.config import Settings
from sales_dashboard.services.bigquery_service import BigQueryBackend, QueryClient
from sales_dashboard.services.dashboard import DashboardController
from sales_dashboard.services.report_runner import ReportRunner
from sales_dashboard.services.sheet_service import WorkbookSink

logger = logging.getLogger(__name__)


# Use functools.lru_cache so settings and clients are built once per process
@functools.lru_cache()
def get_settings() -> Settings:
    return Settings()


@functools.lru_cache()
def get_query_client() -> QueryClient:
    settings = get_settings()
    try:
        backend = BigQueryBackend(
            project_id=settings.GOOGLE_CLOUD_PROJECT_ID,
            service_account_key_path=settings.BIGQUERY_SERVICE_ACCOUNT_KEY_PATH,
            location=settings.BQ_LOCATION,
        )
    except (FileNotFoundError, ConnectionError) as e:
        logger.critical(f"Failed to initialize BigQuery backend: {e}")
        raise
    return QueryClient(backend, policy=settings.polling_policy)


@functools.lru_cache()
def get_sink() -> WorkbookSink:
    return WorkbookSink(get_settings().WORKBOOK_PATH)


@functools.lru_cache()
def get_dashboard_controller() -> DashboardController:
    """
    Dependency that provides the DashboardController.
    The controller and its collaborators are created once and reused across requests.
    """
    runner = ReportRunner(
        query_client=get_query_client(),
        sink=get_sink(),
        table_ref=get_settings().table_reference,
    )
    logger.info("DashboardController dependency successfully initialized.")
    return DashboardController(runner)
