# sales_dashboard/services/dashboard.py
import logging
import threading
from enum import Enum
from typing import Callable, Dict, List, Sequence

from sales_dashboard.core.exceptions import UnknownActionError, UnknownReportError
from sales_dashboard.services.models import RefreshOutcome
from sales_dashboard.services.report_runner import ReportRunner
from sales_dashboard.services.reports import REPORTS, ReportDefinition

logger = logging.getLogger(__name__)

MENU_TITLE = "Sales Dashboard"


class DashboardAction(str, Enum):
    REFRESH_ALL = "refreshAll"
    POPULATE_REVENUE_TRENDS = "populateRevenueTrends"
    POPULATE_AVERAGE_ORDER_VALUE = "populateAverageOrderValue"
    POPULATE_GROWTH_METRICS = "populateGrowthMetrics"


class DashboardController:
    """
    Entry point for the menu: runs one report, all reports, or a named action.

    ``run_all`` refreshes the reports strictly in order and stops at the first
    failure, so reports after the failing one keep their previous contents.
    Runs are serialized: a refresh requested while another is in progress
    waits for it to finish.
    """

    def __init__(self, runner: ReportRunner, reports: Sequence[ReportDefinition] = REPORTS):
        self.runner = runner
        self.reports = tuple(reports)
        self._by_name = {report.name: report for report in self.reports}
        self._actions = self._build_actions()
        self._run_lock = threading.Lock()

    def _build_actions(self) -> Dict[str, Callable[[], List[RefreshOutcome]]]:
        actions: Dict[str, Callable[[], List[RefreshOutcome]]] = {
            DashboardAction.REFRESH_ALL.value: self.run_all,
        }
        for report in self.reports:
            actions[report.action] = lambda name=report.name: [self.run_one(name)]
        return actions

    def run_all(self) -> List[RefreshOutcome]:
        with self._run_lock:
            logger.info(f"Refreshing all {len(self.reports)} reports")
            return [self.runner.run(report) for report in self.reports]

    def run_one(self, name: str) -> RefreshOutcome:
        report = self._by_name.get(name)
        if report is None:
            raise UnknownReportError(name)
        with self._run_lock:
            return self.runner.run(report)

    def dispatch(self, action: str) -> List[RefreshOutcome]:
        handler = self._actions.get(action)
        if handler is None:
            raise UnknownActionError(action)
        logger.info(f"Dispatching menu action '{action}'")
        return handler()

    @property
    def actions(self) -> List[str]:
        return list(self._actions)

    def list_reports(self) -> List[Dict[str, str]]:
        return [
            {"name": r.name, "destination": r.destination, "action": r.action}
            for r in self.reports
        ]

    def menu(self) -> Dict[str, object]:
        items: List[Dict[str, object]] = [
            {"label": "Refresh All", "action": DashboardAction.REFRESH_ALL.value},
            {"label": None, "action": None, "separator": True},
        ]
        items.extend({"label": r.name, "action": r.action} for r in self.reports)
        return {"title": MENU_TITLE, "items": items}
