"""Shared fixtures: scripted BigQuery stand-ins, a fake clock, and an API client."""
import pytest
from fastapi.testclient import TestClient

from sales_dashboard.core.config import PollingPolicy, TableReference
from sales_dashboard.core.dependencies import get_dashboard_controller
from sales_dashboard.core.exceptions import BackendSubmissionError
from sales_dashboard.main import app
from sales_dashboard.services.bigquery_service import QueryClient
from sales_dashboard.services.dashboard import DashboardController
from sales_dashboard.services.models import JobHandle
from sales_dashboard.services.report_runner import ReportRunner
from sales_dashboard.services.sheet_service import WorkbookSink


class ScriptedBackend:
    """Replays queued submit/poll responses; queued exceptions are raised."""

    def __init__(self, submits=(), polls=()):
        self.submits = list(submits)
        self.polls = list(polls)
        self.submitted = []
        self.polled = []
        self.poll_locations = []

    def submit(self, sql):
        self.submitted.append(sql)
        return self._next(self.submits)

    def poll(self, job_id, location=None):
        self.polled.append(job_id)
        self.poll_locations.append(location)
        return self._next(self.polls)

    @staticmethod
    def _next(queue):
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class ReportBackend:
    """
    Completes every job on submit, answering with the result registered for the
    metric column the SQL projects (total_revenue, avg_order_value, mom_growth_pct).
    Columns listed in ``rejected`` fail at submission.
    """

    def __init__(self, results, rejected=()):
        self.results = results
        self.rejected = set(rejected)
        self.submitted = []

    def submit(self, sql):
        self.submitted.append(sql)
        for column, (headers, rows) in self.results.items():
            if column in sql:
                if column in self.rejected:
                    raise BackendSubmissionError(f"quota exceeded for {column}")
                return JobHandle(
                    job_id=f"job-{len(self.submitted)}",
                    complete=True,
                    headers=headers,
                    rows=rows,
                )
        raise AssertionError(f"unexpected SQL: {sql}")

    def poll(self, job_id, location=None):
        raise AssertionError("jobs complete on submit")


class FakeClock:
    """Monotonic clock advanced only by sleep(); records every wait."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def __call__(self):
        return self.now


REPORT_RESULTS = {
    "total_revenue": (
        ["date", "total_revenue"],
        [["2024-01-01", 120.5], ["2024-01-02", 80.0]],
    ),
    "avg_order_value": (
        ["date", "avg_order_value"],
        [["2024-01-01", 33.34], ["2024-01-02", 40.0]],
    ),
    "mom_growth_pct": (
        ["year_month", "revenue", "mom_growth_pct"],
        [["2024-01", 100, None], ["2024-02", 150, 50.0], ["2024-03", 0, -100.0]],
    ),
}


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def table_ref():
    return TableReference(project="acme-analytics", dataset="sales_mart", table="sales")


@pytest.fixture
def workbook_path(tmp_path):
    return str(tmp_path / "dashboard.xlsx")


@pytest.fixture
def sink(workbook_path):
    return WorkbookSink(workbook_path)


@pytest.fixture
def make_controller(sink, table_ref, fake_clock):
    def _make(backend, policy=None):
        query_client = QueryClient(
            backend, policy=policy or PollingPolicy(), sleep=fake_clock.sleep, clock=fake_clock
        )
        return DashboardController(ReportRunner(query_client, sink, table_ref))

    return _make


@pytest.fixture
def report_backend():
    return ReportBackend(REPORT_RESULTS)


@pytest.fixture
def client(make_controller, report_backend):
    controller = make_controller(report_backend)
    app.dependency_overrides[get_dashboard_controller] = lambda: controller
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
