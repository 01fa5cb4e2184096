"""
Tests for the source adapters: CSV and XLSX.

Files are written to tmp_path; XLSX fixtures are built with openpyxl.
"""

from pathlib import Path

import openpyxl
import pytest

from budget_ingestion.adapters import CsvSourceAdapter, SourceAdapter, XlsxSourceAdapter
from budget_ingestion.domain.normalizer import normalize_rows, normalize_text


@pytest.fixture
def csv_file(tmp_path: Path, spanish_budget: str) -> Path:
    path = tmp_path / "presupuesto.csv"
    path.write_text("\ufeff" + spanish_budget.replace(",", ";").replace('"150;00"', "150,00"), encoding="utf-8")
    return path


def _write_xlsx(path: Path, rows: list[list], title_rows: int = 0, sheet_name: str | None = None) -> Path:
    wb = openpyxl.Workbook()
    ws = wb.active
    if sheet_name:
        ws.title = sheet_name
    for _ in range(title_rows):
        ws.append(["Presupuesto de obra"])
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


XLSX_ROWS = [
    ["nivel", "id", "nombre", "descripcion", "ud", "%iva", "cantidad", "pvp"],
    ["Capítulo", 1, "Demolición", None, None, None, None, None],
    ["Subcapítulo", "1.1", "Tabiques", None, None, None, None, None],
    ["Apartado", "1.1.1", "Ladrillo", None, None, None, None, None],
    ["Partida", "1.1.1.1", "Tabique", None, "m2", 21, 2.0, 150.5],
]


class TestProtocol:
    def test_adapters_satisfy_protocol(self):
        assert isinstance(CsvSourceAdapter(), SourceAdapter)
        assert isinstance(XlsxSourceAdapter(), SourceAdapter)


class TestCsvSourceAdapter:
    def test_load_strips_bom(self, csv_file):
        text = CsvSourceAdapter().load(csv_file, {})
        assert text.startswith("nivel;id")

    def test_loaded_text_normalizes(self, csv_file):
        result = normalize_text(CsvSourceAdapter().load(csv_file, {}))
        assert not result.errors
        assert result.delimiter == ";"
        assert result.rows[-1].get("unit_price") == "150,00"

    def test_skip_rows(self, tmp_path):
        path = tmp_path / "budget.csv"
        path.write_text("Exported budget\nlevel,id,name\nchapter,1,A\n", encoding="utf-8")
        text = CsvSourceAdapter().load(path, {"skip_rows": 1})
        assert text.startswith("level,id,name")

    def test_other_encoding(self, tmp_path):
        path = tmp_path / "budget.csv"
        path.write_bytes("level,id,name\nchapter,1,Demolición\n".encode("latin-1"))
        text = CsvSourceAdapter().load(path, {"encoding": "latin-1"})
        assert "Demolición" in text

    def test_probe(self, csv_file):
        probe = CsvSourceAdapter().probe(csv_file, {})
        assert probe.row_count == 4
        assert probe.columns[:3] == ("nivel", "id", "nombre")
        assert probe.detected_delimiter == ";"
        assert probe.encoding == "utf-8-sig"
        assert probe.sample_rows[0][1] == "1"

    def test_probe_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        probe = CsvSourceAdapter().probe(path, {})
        assert probe.row_count == 0
        assert probe.columns == ()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CsvSourceAdapter().load(tmp_path / "missing.csv", {})


class TestXlsxSourceAdapter:
    def test_load_cells_as_text(self, tmp_path):
        path = _write_xlsx(tmp_path / "budget.xlsx", XLSX_ROWS)
        rows = XlsxSourceAdapter().load(path, {})
        assert rows[0] == XLSX_ROWS[0]
        assert rows[1] == ["Capítulo", "1", "Demolición"]
        assert rows[-1] == ["Partida", "1.1.1.1", "Tabique", "", "m2", "21", "2", "150.5"]

    def test_auto_detects_header_below_title(self, tmp_path):
        path = _write_xlsx(tmp_path / "budget.xlsx", XLSX_ROWS, title_rows=2)
        rows = XlsxSourceAdapter().load(path, {})
        assert rows[0][0] == "nivel"

    def test_explicit_header_row(self, tmp_path):
        path = _write_xlsx(tmp_path / "budget.xlsx", XLSX_ROWS, title_rows=1)
        rows = XlsxSourceAdapter().load(path, {"header_row": 1, "auto_detect_header": False})
        assert rows[0][0] == "nivel"

    def test_header_row_overrides_auto_detection(self, tmp_path):
        path = _write_xlsx(tmp_path / "budget.xlsx", XLSX_ROWS)
        rows = XlsxSourceAdapter().load(path, {"header_row": 1})
        assert rows[0] == ["Capítulo", "1", "Demolición"]

    def test_sheet_by_name(self, tmp_path):
        path = _write_xlsx(tmp_path / "budget.xlsx", XLSX_ROWS, sheet_name="Obra")
        rows = XlsxSourceAdapter().load(path, {"sheet": "Obra"})
        assert len(rows) == len(XLSX_ROWS)

    def test_loaded_rows_normalize(self, tmp_path):
        path = _write_xlsx(tmp_path / "budget.xlsx", XLSX_ROWS, title_rows=1)
        result = normalize_rows(XlsxSourceAdapter().load(path, {}))
        assert not result.errors
        assert [row.get("id") for row in result.rows] == ["1", "1.1", "1.1.1", "1.1.1.1"]

    def test_probe(self, tmp_path):
        path = _write_xlsx(tmp_path / "budget.xlsx", XLSX_ROWS)
        probe = XlsxSourceAdapter().probe(path, {})
        assert probe.row_count == 4
        assert probe.columns[1] == "id"
        assert probe.detected_delimiter is None
