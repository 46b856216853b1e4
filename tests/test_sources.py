from bucketlist_api.db import SQLiteSheetSource
from bucketlist_api.settings import get_settings
from bucketlist_api.sources import (
    DEFAULT_HEADERS,
    CsvSheetSource,
    InMemorySheetSource,
    get_sheet_source,
)

VALUES = [
    ["id", "title", "completed"],
    [1, "Climb Mt. Fuji", 1],
    [2, "Learn to sail", 0],
]


class TestInMemorySheetSource:
    def test_get_and_missing(self):
        source = InMemorySheetSource({"list": VALUES})
        assert source.get_values("list") == VALUES
        assert source.get_values("other") is None

    def test_returns_copies(self):
        source = InMemorySheetSource({"list": VALUES})
        values = source.get_values("list")
        values[1][1] = "changed"
        values.append([3])
        assert source.get_values("list") == VALUES

    def test_put_replaces_sheet(self):
        source = InMemorySheetSource()
        source.put("list", [["id"]])
        assert source.get_values("list") == [["id"]]


class TestCsvSheetSource:
    def test_reads_rows_as_strings(self, tmp_path):
        (tmp_path / "list.csv").write_text(
            "id,title,completed\n1,Climb Mt. Fuji,1\n2,\"Learn, then sail\",0\n", encoding="utf-8"
        )
        source = CsvSheetSource(str(tmp_path))
        assert source.get_values("list") == [
            ["id", "title", "completed"],
            ["1", "Climb Mt. Fuji", "1"],
            ["2", "Learn, then sail", "0"],
        ]

    def test_strips_bom(self, tmp_path):
        (tmp_path / "list.csv").write_bytes("\ufeffid\n7\n".encode("utf-8"))
        assert CsvSheetSource(str(tmp_path)).get_values("list") == [["id"], ["7"]]

    def test_missing_and_empty(self, tmp_path):
        (tmp_path / "empty.csv").write_text("", encoding="utf-8")
        source = CsvSheetSource(str(tmp_path))
        assert source.get_values("list") is None
        assert source.get_values("empty") == []

    def test_sheet_name_cannot_escape_directory(self, tmp_path):
        (tmp_path / "secret.csv").write_text("id\n1\n", encoding="utf-8")
        sheets = tmp_path / "sheets"
        sheets.mkdir()
        assert CsvSheetSource(str(sheets)).get_values("../secret") is None


class TestSQLiteSheetSource:
    def test_put_and_get(self, tmp_path):
        source = SQLiteSheetSource(str(tmp_path / "sheets.db"))
        source.put("list", VALUES)
        assert source.get_values("list") == VALUES

    def test_short_rows_are_padded(self, tmp_path):
        source = SQLiteSheetSource(str(tmp_path / "sheets.db"))
        source.put("list", [["id", "title"], [1]])
        assert source.get_values("list") == [["id", "title"], [1, None]]

    def test_header_only_and_missing(self, tmp_path):
        source = SQLiteSheetSource(str(tmp_path / "nested" / "sheets.db"))
        source.put("list", [["id", "title"]])
        assert source.get_values("list") == [["id", "title"]]
        assert source.get_values("missing") is None

    def test_quoted_sheet_names(self, tmp_path):
        source = SQLiteSheetSource(str(tmp_path / "sheets.db"))
        source.put('my "list"', [["Note "], ["x"]])
        assert source.get_values('my "list"') == [["Note "], ["x"]]


class TestGetSheetSource:
    def test_memory_default_is_header_only(self, monkeypatch):
        monkeypatch.setenv("SHEET_BACKEND", "memory")
        monkeypatch.setenv("SHEET_NAME", "list")
        source = get_sheet_source(get_settings())
        assert isinstance(source, InMemorySheetSource)
        assert source.get_values("list") == [list(DEFAULT_HEADERS)]

    def test_csv_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHEET_BACKEND", "csv")
        monkeypatch.setenv("SHEET_CSV_DIR", str(tmp_path))
        assert isinstance(get_sheet_source(), CsvSheetSource)

    def test_sqlite_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHEET_BACKEND", "sqlite")
        monkeypatch.setenv("SHEET_SQLITE_PATH", str(tmp_path / "sheets.db"))
        assert isinstance(get_sheet_source(), SQLiteSheetSource)
