"""Spreadsheet and CSV export of flat delivery records."""

from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from ...persistence.filesystem import FileStorage
from ..draft import RouteDraft
from ..results import FailureKind, OperationResult

logger = logging.getLogger(__name__)

ExportFormat = Literal["xlsx", "csv"]

COLOR_HEADER = "000000"
COLOR_TOTALS = "F0F0F0"
TOTALS_LABEL = "TOTALS"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _safe_filename(filename: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", filename.strip()).strip("._")
    return cleaned or "export"


def _columns(records: Sequence[Mapping[str, Any]]) -> list[str]:
    columns: list[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    return columns


def totals_row(records: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> dict[str, Any]:
    """Sum every numeric column; the first column carries the TOTALS label."""

    row: dict[str, Any] = {}
    for column in columns:
        values = [record.get(column) for record in records]
        numeric = [value for value in values if _is_number(value)]
        if numeric and len(numeric) == len([v for v in values if v is not None]):
            row[column] = round(sum(numeric), 2)
        else:
            row[column] = ""
    if columns:
        row[columns[0]] = TOTALS_LABEL
    return row


def write_excel(records: Sequence[Mapping[str, Any]], path: Path, sheet_title: str = "Deliveries") -> Path:
    columns = _columns(records)
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title

    ws.append(columns)
    for cell in ws[1]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color=COLOR_HEADER, end_color=COLOR_HEADER, fill_type="solid")

    for record in records:
        ws.append([record.get(column, "") for column in columns])

    totals = totals_row(records, columns)
    ws.append([totals[column] for column in columns])
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)
        cell.fill = PatternFill(start_color=COLOR_TOTALS, end_color=COLOR_TOTALS, fill_type="solid")

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    return path


def records_to_csv(records: Sequence[Mapping[str, Any]]) -> str:
    columns = _columns(records)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns)
    writer.writeheader()
    for record in records:
        writer.writerow({column: record.get(column, "") for column in columns})
    writer.writerow(totals_row(records, columns))
    return buffer.getvalue()


def delivery_rows(draft: RouteDraft) -> list[dict[str, Any]]:
    """Flat per-stop rows for the current draft, with fuel cost shared by leg distance."""

    legs = draft.leg_distances_km if len(draft.leg_distances_km) == draft.stop_count else []
    total_leg_km = sum(legs)
    fuel_cost = draft.estimated_cost or 0.0
    rows: list[dict[str, Any]] = []
    for index, stop in enumerate(draft.stops):
        kms = legs[index] if legs else 0.0
        share = fuel_cost * kms / total_leg_km if total_leg_km else 0.0
        rows.append(
            {
                "siteName": stop.location.name,
                "cylinders": stop.quantity,
                "kms": round(kms, 1),
                "fuelCost": round(share, 2),
            }
        )
    return rows


class ExportService:
    """Export collaborator; failures are reported, never retried."""

    def __init__(self, storage: Optional[FileStorage] = None) -> None:
        self._storage = storage

    @property
    def storage(self) -> FileStorage:
        if self._storage is None:
            self._storage = FileStorage()
        return self._storage

    def export(
        self,
        records: Sequence[Mapping[str, Any]],
        filename: str,
        fmt: ExportFormat = "xlsx",
    ) -> OperationResult:
        if not records:
            return OperationResult.failure(FailureKind.VALIDATION, "There is nothing to export.")
        if fmt not in ("xlsx", "csv"):
            return OperationResult.failure(FailureKind.VALIDATION, f"Unsupported export format '{fmt}'")

        name = _safe_filename(filename)
        try:
            run_dir = self.storage.make_run_directory(prefix="export")
            path = run_dir / f"{name}.{fmt}"
            if fmt == "xlsx":
                write_excel(records, path)
            else:
                self.storage.write_text(path, records_to_csv(records))
        except OSError as e:
            logger.error(f"Error exporting {name}.{fmt}: {e}")
            return OperationResult.failure(FailureKind.COLLABORATOR, f"Failed to export data to {fmt.upper()}")

        logger.info(f"Exported {len(records)} records to {path}")
        return OperationResult.success(path)
