# sales_dashboard/services/bigquery_service.py
import logging
import os
import time
from typing import Callable, Optional, Protocol

from google.cloud import bigquery
from google.cloud.exceptions import GoogleCloudError
from pydantic import ValidationError

from sales_dashboard.core.config import PollingPolicy
from sales_dashboard.core.exceptions import (
    BackendPollError,
    BackendSubmissionError,
    QueryTimeoutError,
)
from sales_dashboard.services.models import JobHandle, QueryResult

logger = logging.getLogger(__name__)


class QueryBackend(Protocol):
    def submit(self, sql: str) -> JobHandle:
        ...

    def poll(self, job_id: str, location: Optional[str] = None) -> JobHandle:
        ...


class BigQueryBackend:
    """
    Submits Standard SQL jobs to BigQuery and reports their status.

    Credentials are provisioned outside this tool. When a service account key
    path is given it is exported as GOOGLE_APPLICATION_CREDENTIALS, otherwise
    the client falls back to application default credentials.
    """

    def __init__(
        self,
        project_id: str,
        service_account_key_path: Optional[str] = None,
        location: Optional[str] = None,
        client: Optional[bigquery.Client] = None,
    ):
        self.project_id = project_id
        self.location = location
        if client is not None:
            self.client = client
            return

        if service_account_key_path:
            if not os.path.exists(service_account_key_path):
                logger.error(
                    f"Service account key file not found at: {service_account_key_path}"
                )
                raise FileNotFoundError(
                    f"Service account key file not found at: {service_account_key_path}"
                )
            os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = service_account_key_path

        try:
            self.client = bigquery.Client(project=self.project_id, location=location)
        except Exception as e:
            logger.error(f"Failed to initialize BigQuery client: {e}")
            raise ConnectionError(
                f"Could not connect to BigQuery. Check credentials and project ID. Error: {e}"
            ) from e
        logger.info(f"BigQuery client initialized for project: {self.client.project}")

    def submit(self, sql: str) -> JobHandle:
        job_config = bigquery.QueryJobConfig(use_legacy_sql=False)
        try:
            job = self.client.query(sql, job_config=job_config)
            return self._snapshot(job)
        except GoogleCloudError as e:
            raise BackendSubmissionError(f"BigQuery rejected the query: {e}") from e
        except BackendPollError as e:
            # A job that already failed in the submit response was never accepted.
            raise BackendSubmissionError(str(e)) from e

    def poll(self, job_id: str, location: Optional[str] = None) -> JobHandle:
        # Jobs live in the region BigQuery picked at submit time
        try:
            job = self.client.get_job(job_id, location=location or self.location)
            return self._snapshot(job)
        except GoogleCloudError as e:
            raise BackendPollError(f"Failed to fetch status of job '{job_id}': {e}") from e

    def _snapshot(self, job) -> JobHandle:
        if not job.done():
            return JobHandle(job_id=job.job_id, location=job.location, complete=False)
        if job.error_result:
            message = job.error_result.get("message", job.error_result)
            raise BackendPollError(f"Job '{job.job_id}' failed: {message}")

        row_iterator = job.result()
        headers = [field.name for field in row_iterator.schema]
        rows = [list(row.values()) for row in row_iterator]
        return JobHandle(
            job_id=job.job_id,
            location=job.location,
            complete=True,
            headers=headers,
            rows=rows,
        )


class QueryClient:
    """
    Runs one read-only statement to completion and normalizes its result.

    After submission the job is re-fetched with geometric backoff: the first
    wait is ``policy.initial_wait_ms`` and every later wait is multiplied by
    ``policy.backoff_factor``. Polling stops on the first complete snapshot,
    or raises QueryTimeoutError once ``max_attempts`` polls have been made or
    ``timeout_seconds`` have elapsed. The last sleep is shortened so the
    final poll lands on the deadline rather than past it.
    """

    def __init__(
        self,
        backend: QueryBackend,
        policy: Optional[PollingPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.policy = policy or PollingPolicy()
        self._sleep = sleep
        self._clock = clock

    def execute(self, sql: str) -> QueryResult:
        logger.info(f"Submitting query: {' '.join(sql.split())[:100]}...")
        started = self._clock()
        handle = self.backend.submit(sql)

        wait_ms = float(self.policy.initial_wait_ms)
        attempts = 0
        while not handle.complete:
            self._sleep(self._next_wait(handle.job_id, attempts, started, wait_ms))
            wait_ms *= self.policy.backoff_factor
            attempts += 1
            handle = self.backend.poll(handle.job_id, handle.location)
            logger.debug(
                f"Poll {attempts} of job {handle.job_id}: complete={handle.complete}"
            )

        result = self._to_result(handle)
        logger.info(
            f"Job {handle.job_id} complete after {attempts} polls. "
            f"Fetched {result.row_count} rows."
        )
        return result

    def _next_wait(self, job_id: str, attempts: int, started: float, wait_ms: float) -> float:
        """Seconds to sleep before the next poll, never past the deadline."""
        elapsed = self._clock() - started
        max_attempts = self.policy.max_attempts
        timeout = self.policy.timeout_seconds
        if max_attempts is not None and attempts >= max_attempts:
            raise QueryTimeoutError(job_id, attempts, elapsed)
        wait = wait_ms / 1000.0
        if timeout is None:
            return wait
        remaining = timeout - elapsed
        if remaining <= 0:
            raise QueryTimeoutError(job_id, attempts, elapsed)
        return min(wait, remaining)

    @staticmethod
    def _to_result(handle: JobHandle) -> QueryResult:
        if not handle.headers:
            raise BackendPollError(f"Job '{handle.job_id}' completed without a schema")
        try:
            return QueryResult(headers=handle.headers, rows=handle.rows or [])
        except ValidationError as e:
            raise BackendPollError(
                f"Job '{handle.job_id}' returned malformed rows: {e}"
            ) from e
