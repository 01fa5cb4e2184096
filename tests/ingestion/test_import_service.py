"""Tests for BudgetImportService: file -> adapter -> pipeline."""

from decimal import Decimal
from pathlib import Path

import openpyxl
import pytest

from budget_ingestion.adapters.csv_adapter import CsvSourceAdapter
from budget_kernel.domain.dtos import ErrorCode
from budget_kernel.exceptions import UnsupportedSourceFormatError
from budget_services import BudgetImportService


@pytest.fixture
def service() -> BudgetImportService:
    return BudgetImportService()


class TestAdapterSelection:
    @pytest.mark.parametrize("suffix", [".csv", ".CSV", ".txt", ".tsv", ".xlsx"])
    def test_supported(self, service, suffix):
        assert service.adapter_for(Path(f"budget{suffix}")) is not None

    def test_unsupported(self, service):
        with pytest.raises(UnsupportedSourceFormatError) as exc_info:
            service.adapter_for(Path("budget.pdf"))
        assert exc_info.value.source_format == ".pdf"
        assert ".csv" in exc_info.value.supported

    def test_custom_adapters(self):
        service = BudgetImportService(adapters={".dat": CsvSourceAdapter()})
        assert service.supported_suffixes == (".dat",)
        with pytest.raises(UnsupportedSourceFormatError):
            service.adapter_for(Path("budget.csv"))


class TestImportFile:
    def test_csv(self, service, tmp_path, spanish_budget):
        path = tmp_path / "obra.csv"
        path.write_text(spanish_budget, encoding="utf-8")
        result = service.import_file(path)
        assert result.errors == ()
        assert result.totals.total == Decimal("363.00")

    def test_tab_separated(self, service, tmp_path):
        path = tmp_path / "obra.tsv"
        path.write_text("level\tid\tname\nchapter\t1\tA\nchapter\t3\tC\n", encoding="utf-8")
        result = service.import_file(path)
        assert [e.code for e in result.errors] == [ErrorCode.SEQUENCE]

    def test_xlsx(self, service, tmp_path):
        path = tmp_path / "obra.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["Presupuesto"])
        ws.append(["nivel", "id", "nombre", "ud", "%iva", "cantidad", "pvp"])
        ws.append(["Capítulo", 1, "Obra"])
        ws.append(["Subcapítulo", "1.1", "Muros"])
        ws.append(["Apartado", "1.1.1", "Ladrillo"])
        ws.append(["Partida", "1.1.1.1", "Muro", "m2", 21, 2, 150])
        wb.save(path)

        result = service.import_file(path)
        assert result.errors == ()
        assert result.totals.total == Decimal("363.00")

    def test_empty_file_is_fatal_result(self, service, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        result = service.import_file(path)
        assert result.is_fatal
        assert result.rows == ()

    def test_missing_file(self, service, tmp_path):
        with pytest.raises(FileNotFoundError):
            service.import_file(tmp_path / "missing.csv")

    def test_logs_source_name(self, service, tmp_path, spanish_budget, captured_logs):
        path = tmp_path / "obra.csv"
        path.write_text(spanish_budget, encoding="utf-8")
        service.import_file(path, correlation_id="corr-9")
        records = captured_logs()
        started = next(r for r in records if r["message"] == "budget_file_import_started")
        assert started["source_name"] == "obra.csv"
        assert started["adapter"] == "CsvSourceAdapter"
        completed = next(r for r in records if r["message"] == "budget_pipeline_completed")
        assert completed["correlation_id"] == "corr-9"

    def test_probe(self, service, tmp_path, spanish_budget):
        path = tmp_path / "obra.csv"
        path.write_text(spanish_budget, encoding="utf-8")
        probe = service.probe_file(path)
        assert probe.row_count == 4
        assert probe.detected_delimiter == ","
