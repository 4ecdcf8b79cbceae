# sales_dashboard/api/v1/endpoints/dashboard.py
import logging
from typing import Callable, List

from fastapi import APIRouter, Depends, HTTPException, status

from sales_dashboard.api.models.dashboard_models import (
    MenuResponse,
    RefreshResponse,
    RefreshResult,
    ReportListResponse,
)
from sales_dashboard.core.dependencies import get_dashboard_controller
from sales_dashboard.core.exceptions import (
    BackendPollError,
    BackendSubmissionError,
    DashboardError,
    QueryTimeoutError,
    SinkWriteError,
    UnknownActionError,
    UnknownReportError,
)
from sales_dashboard.services.dashboard import DashboardController
from sales_dashboard.services.models import RefreshOutcome

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS = (
    ((UnknownActionError, UnknownReportError), status.HTTP_404_NOT_FOUND),
    ((BackendSubmissionError, BackendPollError), status.HTTP_502_BAD_GATEWAY),
    ((QueryTimeoutError,), status.HTTP_504_GATEWAY_TIMEOUT),
    ((SinkWriteError,), status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def _refresh(label: str, run: Callable[[], List[RefreshOutcome]]) -> RefreshResponse:
    try:
        outcomes = run()
    except DashboardError as e:
        for kinds, status_code in ERROR_STATUS:
            if isinstance(e, kinds):
                break
        else:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        if status_code != status.HTTP_404_NOT_FOUND:
            logger.error(f"Refresh '{label}' failed: {e}")
        raise HTTPException(status_code=status_code, detail=str(e)) from e
    return RefreshResponse(
        action=label,
        results=[RefreshResult(**outcome.model_dump()) for outcome in outcomes],
    )


@router.get("/menu", response_model=MenuResponse, summary="Menu layout for the host UI")
def get_menu(controller: DashboardController = Depends(get_dashboard_controller)):
    return MenuResponse(**controller.menu())


@router.get("/reports", response_model=ReportListResponse, summary="List dashboard reports")
def list_reports(controller: DashboardController = Depends(get_dashboard_controller)):
    return ReportListResponse(reports=controller.list_reports())


@router.post(
    "/actions/{action}",
    response_model=RefreshResponse,
    summary="Invoke a menu action (refreshAll, populateRevenueTrends, ...)",
)
def invoke_action(
    action: str, controller: DashboardController = Depends(get_dashboard_controller)
):
    """
    Runs the named menu action. Reports are refreshed in order and the first
    failure aborts the remaining ones.
    """
    return _refresh(action, lambda: controller.dispatch(action))


@router.post(
    "/reports/{name}/refresh",
    response_model=RefreshResponse,
    summary="Refresh a single report by name",
)
def refresh_report(
    name: str, controller: DashboardController = Depends(get_dashboard_controller)
):
    return _refresh(name, lambda: [controller.run_one(name)])
