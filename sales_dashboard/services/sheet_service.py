# sales_dashboard/services/sheet_service.py
import logging
import os
import threading
import zipfile
from typing import Protocol

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from sales_dashboard.core.exceptions import SinkWriteError
from sales_dashboard.services.models import QueryResult

logger = logging.getLogger(__name__)

HEADER_FONT = Font(bold=True)


class TabularSink(Protocol):
    def write(self, destination: str, data: QueryResult) -> None:
        ...


class WorkbookSink:
    """
    Renders query results into an .xlsx workbook, one worksheet per destination.

    Every write replaces the destination wholesale: the worksheet is created if
    missing, otherwise dropped and recreated at the same position, and the
    header row plus data rows are written from A1.
    """

    def __init__(self, workbook_path: str):
        self.workbook_path = workbook_path
        # load -> modify -> save of one file must not interleave
        self._lock = threading.Lock()

    def write(self, destination: str, data: QueryResult) -> None:
        if not data.headers:
            raise SinkWriteError(f"Refusing to write '{destination}': result has no columns")

        with self._lock:
            workbook = self._open()
            sheet = self._resolve_or_create(workbook, destination)
            sheet = self._clear(workbook, sheet)
            self._write_grid(sheet, data, origin_row=1, origin_col=1)
            self._save(workbook)
        logger.info(
            f"Wrote {data.row_count} rows to sheet '{sheet.title}' in {self.workbook_path}"
        )

    def _open(self) -> Workbook:
        if not os.path.exists(self.workbook_path):
            workbook = Workbook()
            workbook.remove(workbook.active)
            return workbook
        try:
            return load_workbook(self.workbook_path)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise SinkWriteError(f"Cannot open workbook {self.workbook_path}: {e}") from e

    @staticmethod
    def _resolve_or_create(workbook: Workbook, name: str) -> Worksheet:
        # Excel sheet titles are case-insensitive
        for sheet in workbook.worksheets:
            if sheet.title.lower() == name.lower():
                return sheet
        try:
            return workbook.create_sheet(title=name)
        except ValueError as e:
            raise SinkWriteError(f"Cannot create sheet '{name}': {e}") from e

    @staticmethod
    def _clear(workbook: Workbook, sheet: Worksheet) -> Worksheet:
        index = workbook.index(sheet)
        title = sheet.title
        workbook.remove(sheet)
        return workbook.create_sheet(title=title, index=index)

    @staticmethod
    def _write_grid(
        sheet: Worksheet, data: QueryResult, origin_row: int = 1, origin_col: int = 1
    ) -> None:
        try:
            for row_offset, values in enumerate(data.as_grid()):
                for col_offset, value in enumerate(values):
                    sheet.cell(
                        row=origin_row + row_offset,
                        column=origin_col + col_offset,
                        value=value,
                    )
        except (ValueError, TypeError) as e:
            raise SinkWriteError(f"Cannot write value to sheet '{sheet.title}': {e}") from e

        for cell in sheet[origin_row]:
            cell.font = HEADER_FONT
        sheet.freeze_panes = sheet.cell(row=origin_row + 1, column=origin_col)

    def _save(self, workbook: Workbook) -> None:
        try:
            parent = os.path.dirname(self.workbook_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            workbook.save(self.workbook_path)
        except (OSError, TypeError, ValueError) as e:
            # openpyxl rejects e.g. timezone-aware datetimes only when serializing
            raise SinkWriteError(f"Cannot save workbook {self.workbook_path}: {e}") from e
