"""Export services."""

from .spreadsheet import ExportService, delivery_rows, records_to_csv, write_excel

__all__ = ["ExportService", "delivery_rows", "records_to_csv", "write_excel"]
