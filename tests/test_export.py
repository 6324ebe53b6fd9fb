from pathlib import Path

from conftest import make_location
from openpyxl import load_workbook

from gasroute.models.domain import OptimizedRoute, Stop
from gasroute.persistence.filesystem import FileStorage
from gasroute.services.draft import RouteDraft
from gasroute.services.export import ExportService, delivery_rows
from gasroute.services.results import FailureKind

RECORDS = [
    {"siteName": "Shop A", "cylinders": 12, "kms": 4.5, "fuelCost": 30.0},
    {"siteName": "Shop B", "cylinders": 8, "kms": 5.5, "fuelCost": 36.5},
]


class ReadOnlyStorage(FileStorage):
    def make_run_directory(self, prefix: str = "export") -> Path:
        raise PermissionError("read-only file system")


def test_export_xlsx_writes_header_rows_and_totals(tmp_path: Path) -> None:
    service = ExportService(FileStorage(root=tmp_path))

    result = service.export(RECORDS, "delivery report", "xlsx")

    assert result.ok
    path = result.value
    assert path.name == "delivery_report.xlsx"
    assert path.parent.parent == tmp_path / "outputs"

    sheet = load_workbook(path).active
    rows = list(sheet.iter_rows(values_only=True))
    assert sheet.title == "Deliveries"
    assert rows[0] == ("siteName", "cylinders", "kms", "fuelCost")
    assert rows[1] == ("Shop A", 12, 4.5, 30)
    assert rows[-1] == ("TOTALS", 20, 10, 66.5)


def test_export_csv(tmp_path: Path) -> None:
    service = ExportService(FileStorage(root=tmp_path))

    result = service.export(RECORDS, "deliveries", "csv")

    lines = result.value.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "siteName,cylinders,kms,fuelCost"
    assert lines[1] == "Shop A,12,4.5,30.0"
    assert lines[-1] == "TOTALS,20,10.0,66.5"


def test_export_rejects_empty_records(tmp_path: Path) -> None:
    result = ExportService(FileStorage(root=tmp_path)).export([], "empty")

    assert result.kind is FailureKind.VALIDATION


def test_export_storage_failure_is_reported(tmp_path: Path) -> None:
    result = ExportService(ReadOnlyStorage(root=tmp_path)).export(RECORDS, "blocked", "xlsx")

    assert result.kind is FailureKind.COLLABORATOR
    assert "XLSX" in result.reason


def test_delivery_rows_share_fuel_cost_by_leg_distance() -> None:
    sites = [make_location(site_id) for site_id in ("a", "b", "c")]
    draft = RouteDraft({loc.id: loc for loc in sites}.get)
    for site in sites:
        draft.add_stop(site, 10)
    draft.apply_optimization(
        OptimizedRoute(
            stops=[Stop(location=loc, quantity=10) for loc in sites],
            distance_km=10.0,
            duration_min=30.0,
            estimated_cost=100.0,
            cylinder_totals={},
            leg_distances_km=[0.0, 4.0, 6.0],
        )
    )

    rows = delivery_rows(draft)

    assert [row["siteName"] for row in rows] == ["Site a", "Site b", "Site c"]
    assert [row["kms"] for row in rows] == [0.0, 4.0, 6.0]
    assert [row["fuelCost"] for row in rows] == [0.0, 40.0, 60.0]


def test_delivery_rows_before_optimization_have_zero_distance() -> None:
    site = make_location("a")
    draft = RouteDraft({"a": site}.get)
    draft.add_stop(site)

    assert delivery_rows(draft) == [{"siteName": "Site a", "cylinders": 10, "kms": 0.0, "fuelCost": 0.0}]
