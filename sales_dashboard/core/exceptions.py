# sales_dashboard/core/exceptions.py


class DashboardError(Exception):
    """Base class for every error raised while refreshing the dashboard."""


class BackendSubmissionError(DashboardError):
    """The analytical backend rejected the query at submission time."""


class BackendPollError(DashboardError):
    """The backend failed, or reported a job error, while a query was being polled."""


class QueryTimeoutError(DashboardError):
    """A query job did not complete within the configured polling budget."""

    def __init__(self, job_id: str, attempts: int, elapsed_seconds: float):
        self.job_id = job_id
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        super().__init__(
            f"Job '{job_id}' still running after {attempts} polls "
            f"({elapsed_seconds:.1f}s)"
        )


class SinkWriteError(DashboardError):
    """A destination sheet could not be created or written."""


class UnknownReportError(DashboardError, KeyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No report named '{name}'")

    def __str__(self) -> str:
        return self.args[0]


class UnknownActionError(DashboardError, KeyError):
    def __init__(self, action: str):
        self.action = action
        super().__init__(f"No dashboard action named '{action}'")

    def __str__(self) -> str:
        return self.args[0]
