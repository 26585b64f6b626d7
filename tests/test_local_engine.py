"""
Tests for LocalEngine (readers, SQL over the source, export).
"""
import gzip
import json

import pandas as pd
import pytest

from lakedrop.core.errors import ExportError, QueryError, ScanError, SheetError
from lakedrop.engine import readers
from lakedrop.engine.file_types import FileKind, detect_file_kind
from lakedrop.engine.local_engine import LocalEngine
from lakedrop.engine.samples import SampleLibrary, build_samples, sample_frame


@pytest.fixture
def engine(tmp_path):
    engine = LocalEngine(samples=SampleLibrary(search_dirs=[], build_dir=tmp_path / "samples"))
    yield engine
    engine.close()


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "people.csv"
    path.write_text(
        "id,name,score,joined\n"
        "1,alpha,98.5,2024-01-05\n"
        "2,bravo,,2024-02-10\n"
        "3,charlie,88.0,2024-03-15\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def workbook(tmp_path):
    path = tmp_path / "book.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame({"city": ["Paris", "Lyon"], "pop": [2100000, 520000]}).to_excel(
            writer, sheet_name="Cities", index=False)
        pd.DataFrame({"a": [1.5], "b": [True]}).to_excel(writer, sheet_name="Other", index=False)
    return path


@pytest.fixture
def legacy_workbook(tmp_path):
    xlwt = pytest.importorskip("xlwt")
    path = tmp_path / "book.xls"
    book = xlwt.Workbook()
    cities = book.add_sheet("Cities")
    for r, row in enumerate([("city", "pop"), ("Paris", 2100000), ("Lyon", 520000)]):
        for c, value in enumerate(row):
            cities.write(r, c, value)
    other = book.add_sheet("Other")
    for r, row in enumerate([("a", "b"), (1.5, "x")]):
        for c, value in enumerate(row):
            other.write(r, c, value)
    book.save(str(path))
    return path


class TestFileTypes:

    @pytest.mark.parametrize("name, kind, compressed", [
        ("data.parquet", FileKind.PARQUET, False),
        ("data.PARQ", FileKind.PARQUET, False),
        ("data.tsv", FileKind.CSV, False),
        ("events.jsonl.gz", FileKind.JSON_LINES, True),
        ("events.ndjson", FileKind.JSON_LINES, False),
        ("table.feather", FileKind.ARROW, False),
        ("book.xlsm", FileKind.EXCEL, False),
        ("legacy.XLS", FileKind.EXCEL, False),
    ])
    def test_extension_mapping(self, tmp_path, name, kind, compressed):
        spec = detect_file_kind(tmp_path / name)
        assert spec.kind is kind
        assert spec.compressed is compressed

    def test_unknown_extension(self, tmp_path):
        with pytest.raises(ScanError, match=r"Unsupported file type: \.docx"):
            detect_file_kind(tmp_path / "letter.docx")

    def test_gzip_magic_without_extension(self, tmp_path):
        path = tmp_path / "data.csv"
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write("a,b\n1,2\n")
        assert detect_file_kind(path).compressed

    def test_gzip_not_supported_for_parquet(self, tmp_path):
        with pytest.raises(ScanError):
            detect_file_kind(tmp_path / "data.parquet.gz")

    def test_tsv_separator(self, tmp_path):
        assert detect_file_kind(tmp_path / "x.tsv").separator == "\t"
        assert detect_file_kind(tmp_path / "x.csv").separator == ","


class TestScanMetadata:

    def test_csv_metadata(self, engine, csv_file):
        meta = engine.scan_metadata(str(csv_file))

        assert engine.has_source
        assert meta.file_name == "people.csv"
        assert meta.file_size == csv_file.stat().st_size
        assert meta.row_count == 3
        assert [(f.name, f.dtype) for f in meta.schema] == [
            ("id", "int"), ("name", "str"), ("score", "float"), ("joined", "datetime"),
        ]
        assert meta.sheets == ()
        assert meta.active_sheet is None

    def test_missing_file(self, engine, tmp_path):
        with pytest.raises(ScanError, match="File not found"):
            engine.scan_metadata(str(tmp_path / "nope.csv"))

    def test_gzip_jsonl(self, engine, tmp_path):
        path = tmp_path / "events.jsonl.gz"
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write('{"id": 1, "payload": {"k": "v"}}\n{"id": 2, "payload": null}\n')

        meta = engine.scan_metadata(str(path))

        assert meta.row_count == 2
        result = engine.execute("SELECT payload FROM source ORDER BY id", 10)
        assert json.loads(result.rows[0][0]) == {"k": "v"}
        assert result.rows[1][0] is None

    def test_json_array(self, engine, tmp_path):
        path = tmp_path / "records.json"
        path.write_text('[{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]', encoding="utf-8")

        meta = engine.scan_metadata(str(path))

        assert meta.row_count == 2
        assert [f.name for f in meta.schema] == ["a", "b"]

    def test_cp1252_csv(self, engine, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes("name\nCafé\n".encode("cp1252"))

        engine.scan_metadata(str(path))

        assert engine.execute("SELECT name FROM source", 10).rows == (("Café",),)

    def test_workbook_sheets(self, engine, workbook):
        meta = engine.scan_metadata(str(workbook))

        assert meta.sheets == ("Cities", "Other")
        assert meta.active_sheet == "Cities"
        assert meta.row_count == 2
        # Workbook cells are kept as text
        assert engine.execute("SELECT * FROM source", 10).rows == (
            ("Paris", "2100000"), ("Lyon", "520000"),
        )

    def test_select_sheet(self, engine, workbook):
        engine.scan_metadata(str(workbook))

        meta = engine.select_sheet("Other")

        assert meta.active_sheet == "Other"
        assert engine.execute("SELECT a, b FROM source", 10).rows == (("1.5", "true"),)

    def test_select_unknown_sheet(self, engine, workbook):
        engine.scan_metadata(str(workbook))
        with pytest.raises(SheetError):
            engine.select_sheet("Missing")

    def test_legacy_xls_workbook(self, engine, legacy_workbook):
        meta = engine.scan_metadata(str(legacy_workbook))

        assert meta.sheets == ("Cities", "Other")
        assert meta.active_sheet == "Cities"
        assert meta.row_count == 2
        assert engine.execute("SELECT * FROM source", 10).rows == (
            ("Paris", "2100000"), ("Lyon", "520000"),
        )

    def test_select_sheet_in_legacy_xls(self, engine, legacy_workbook):
        engine.scan_metadata(str(legacy_workbook))

        meta = engine.select_sheet("Other")

        assert meta.active_sheet == "Other"
        assert engine.execute("SELECT a, b FROM source", 10).rows == (("1.5", "x"),)
        with pytest.raises(SheetError):
            engine.select_sheet("Missing")

    def test_workbook_without_sheets(self, engine, workbook, monkeypatch):
        """Opening an empty workbook is a scan failure, not a sheet failure."""
        class EmptyWorkbook:
            sheetnames = []

            def close(self):
                pass

        monkeypatch.setattr(readers, "load_workbook", lambda *args, **kwargs: EmptyWorkbook())

        with pytest.raises(ScanError, match="No sheets found"):
            engine.scan_metadata(str(workbook))
        assert not engine.has_source

        with pytest.raises(SheetError):
            readers.load_frame(workbook, detect_file_kind(workbook), "Cities")

    def test_select_sheet_requires_workbook(self, engine, csv_file):
        with pytest.raises(SheetError):
            engine.select_sheet("Sheet1")
        engine.scan_metadata(str(csv_file))
        with pytest.raises(SheetError, match="not an Excel workbook"):
            engine.select_sheet("Sheet1")


class TestExecute:

    def test_requires_source(self, engine):
        assert not engine.has_source
        with pytest.raises(QueryError, match="No file loaded"):
            engine.execute("SELECT 1", 10)

    def test_result_shape(self, engine, csv_file):
        engine.scan_metadata(str(csv_file))

        result = engine.execute("SELECT id, name, score FROM source ORDER BY id", 1000)

        assert [c.name for c in result.columns] == ["id", "name", "score"]
        assert [c.dtype for c in result.columns] == ["int", "str", "float"]
        assert result.rows == ((1, "alpha", 98.5), (2, "bravo", None), (3, "charlie", 88.0))
        assert result.row_count == 3

    def test_cap_keeps_total_row_count(self, engine, tmp_path):
        path = tmp_path / "many.csv"
        path.write_text("n\n" + "\n".join(str(i) for i in range(2500)) + "\n", encoding="utf-8")
        engine.scan_metadata(str(path))

        result = engine.execute("SELECT n FROM source", 1000)

        assert len(result.rows) == 1000
        assert result.row_count == 2500
        assert result.is_truncated

    def test_booleans_survive(self, engine, tmp_path):
        build_samples(tmp_path, ["sample.parquet"])
        engine.scan_metadata(str(tmp_path / "sample.parquet"))

        result = engine.execute("SELECT active FROM source ORDER BY id", 10)

        assert [row[0] for row in result.rows] == [True, False, True, True, False]
        assert result.columns[0].dtype == "bool"

    def test_timestamps_are_iso_text(self, engine, csv_file):
        engine.scan_metadata(str(csv_file))

        result = engine.execute("SELECT joined FROM source WHERE id = 1", 10)

        assert result.rows == (("2024-01-05T00:00:00",),)
        assert result.columns[0].dtype == "datetime"

    def test_syntax_error(self, engine, csv_file):
        engine.scan_metadata(str(csv_file))
        with pytest.raises(QueryError):
            engine.execute("SELEC * FROM source", 10)

    def test_write_statements_rejected(self, engine, csv_file):
        engine.scan_metadata(str(csv_file))
        with pytest.raises(QueryError, match="Only SELECT"):
            engine.execute("DROP VIEW source", 10)

    def test_multiple_statements_rejected(self, engine, csv_file):
        engine.scan_metadata(str(csv_file))
        with pytest.raises(QueryError, match="one statement"):
            engine.execute("SELECT 1; SELECT 2", 10)

    def test_with_clause(self, engine, csv_file):
        engine.scan_metadata(str(csv_file))
        result = engine.execute("WITH later AS (SELECT * FROM source WHERE id > 1) SELECT count(*) AS n FROM later", 10)
        assert result.rows == ((2,),)

    def test_new_file_replaces_source(self, engine, csv_file, tmp_path):
        engine.scan_metadata(str(csv_file))
        build_samples(tmp_path, ["sample.jsonl"])
        engine.scan_metadata(str(tmp_path / "sample.jsonl"))

        result = engine.execute("SELECT count(*) FROM source", 10)

        assert result.rows == ((5,),)


class TestExport:

    def test_csv_export_is_uncapped(self, engine, tmp_path):
        path = tmp_path / "many.csv"
        path.write_text("n\n" + "\n".join(str(i) for i in range(1500)) + "\n", encoding="utf-8")
        engine.scan_metadata(str(path))
        out = tmp_path / "out.csv"

        engine.export_query("SELECT n FROM source", str(out), "csv")

        exported = pd.read_csv(out)
        assert len(exported) == 1500
        assert list(exported.columns) == ["n"]

    def test_xlsx_export(self, engine, tmp_path):
        build_samples(tmp_path, ["sample.csv"])
        engine.scan_metadata(str(tmp_path / "sample.csv"))
        out = tmp_path / "out.xlsx"

        engine.export_query("SELECT name, score FROM source WHERE active", str(out), "xlsx")

        exported = pd.read_excel(out, engine="openpyxl")
        assert exported["name"].tolist() == ["alpha", "charlie", "delta"]

    def test_unknown_format(self, engine, csv_file, tmp_path):
        engine.scan_metadata(str(csv_file))
        with pytest.raises(ExportError):
            engine.export_query("SELECT * FROM source", str(tmp_path / "x.pdf"), "pdf")

    def test_export_requires_source(self, engine, tmp_path):
        with pytest.raises(ExportError):
            engine.export_query("SELECT 1", str(tmp_path / "x.csv"), "csv")


class TestSamples:

    def test_every_sample_loads(self, engine, tmp_path):
        paths = build_samples(tmp_path / "built")

        for path in paths:
            meta = engine.scan_metadata(str(path))
            assert meta.row_count == len(sample_frame()), path.name
            assert [f.name for f in meta.schema] == ["id", "name", "score", "active", "group"]

    def test_resolve_generates_missing_sample(self, engine, tmp_path):
        path = engine.resolve_sample_path("sample.arrow")

        assert path == str(tmp_path / "samples" / "sample.arrow")
        assert engine.scan_metadata(path).row_count == 5

    def test_resolve_by_label(self, tmp_path):
        library = SampleLibrary(search_dirs=[], build_dir=tmp_path)
        assert library.resolve("Parquet") == library.build_dir / "sample.parquet"

    def test_packaged_samples_found(self, tmp_path):
        library = SampleLibrary(build_dir=tmp_path / "unused")
        assert library.resolve("sample.csv").parent.name == "samples"
        assert not (tmp_path / "unused").exists()

    def test_unknown_sample(self, engine):
        from lakedrop.core.errors import SampleResolutionError
        with pytest.raises(SampleResolutionError, match="Sample file not found"):
            engine.resolve_sample_path("../etc/passwd")
        with pytest.raises(SampleResolutionError):
            engine.resolve_sample_path("other.csv")
