# sales_dashboard/core/config.py
import os
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Identifiers are interpolated into SQL text, so only plain tokens are accepted.
PROJECT_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9\-.:]*$")  # e.g. my-project, example.com:proj
IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_project_id(value: str) -> str:
    if not PROJECT_ID_RE.match(value):
        raise ValueError(f"invalid project id: {value!r}")
    return value


def check_identifier(value: str) -> str:
    if not IDENT_RE.match(value):
        raise ValueError(f"invalid identifier: {value!r}")
    return value


class TableReference(BaseModel):
    """The fully-qualified sales table every report reads from."""

    model_config = ConfigDict(frozen=True)

    project: str
    dataset: str
    table: str

    @field_validator("project")
    @classmethod
    def validate_project(cls, value: str) -> str:
        return check_project_id(value)

    @field_validator("dataset", "table")
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        return check_identifier(value)

    def __str__(self) -> str:
        return f"{self.project}.{self.dataset}.{self.table}"


class PollingPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    initial_wait_ms: int = Field(default=1000, gt=0)
    backoff_factor: float = Field(default=1.5, ge=1.0)
    max_attempts: Optional[int] = Field(default=None, gt=0)
    timeout_seconds: Optional[float] = Field(default=600.0, gt=0)


class Settings(BaseSettings):
    GOOGLE_CLOUD_PROJECT_ID: str
    BQ_DATASET: str
    BQ_TABLE: str = "sales"
    BQ_LOCATION: Optional[str] = None
    BIGQUERY_SERVICE_ACCOUNT_KEY_PATH: Optional[str] = None

    WORKBOOK_PATH: str = "sales_dashboard.xlsx"

    # Query polling
    POLL_INITIAL_WAIT_MS: int = 1000
    POLL_BACKOFF_FACTOR: float = 1.5
    POLL_MAX_ATTEMPTS: Optional[int] = None
    POLL_TIMEOUT_SECONDS: Optional[float] = 600.0

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("GOOGLE_CLOUD_PROJECT_ID")
    @classmethod
    def validate_project(cls, value: str) -> str:
        return check_project_id(value)

    @field_validator("BQ_DATASET", "BQ_TABLE")
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        return check_identifier(value)

    @field_validator("POLL_MAX_ATTEMPTS", "POLL_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def disable_cap(cls, value):
        # "none", "null", "" or 0 switch the cap off
        if value is None:
            return None
        if isinstance(value, str):
            if value.strip().lower() in ("", "none", "null"):
                return None
            try:
                return None if float(value) == 0 else value
            except ValueError:
                return value
        if value == 0:
            return None
        return value

    @field_validator("BIGQUERY_SERVICE_ACCOUNT_KEY_PATH", "WORKBOOK_PATH")
    @classmethod
    def make_absolute(cls, value: Optional[str]) -> Optional[str]:
        if value and not os.path.isabs(value):
            return os.path.abspath(value)
        return value

    @property
    def table_reference(self) -> TableReference:
        return TableReference(
            project=self.GOOGLE_CLOUD_PROJECT_ID,
            dataset=self.BQ_DATASET,
            table=self.BQ_TABLE,
        )

    @property
    def polling_policy(self) -> PollingPolicy:
        return PollingPolicy(
            initial_wait_ms=self.POLL_INITIAL_WAIT_MS,
            backoff_factor=self.POLL_BACKOFF_FACTOR,
            max_attempts=self.POLL_MAX_ATTEMPTS,
            timeout_seconds=self.POLL_TIMEOUT_SECONDS,
        )
