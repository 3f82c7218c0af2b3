"""Excel 내보내기 유닛 테스트."""

from datetime import datetime, timezone
from io import BytesIO
from types import SimpleNamespace

from openpyxl import load_workbook

from app.services.analytics_service import RespondentProfile, ResultRow
from app.services.export_service import build_results_workbook, export_filename
from tests.conftest import SAMPLE_QUESTIONS

SUBMITTED = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
ANA = RespondentProfile(id="u1", email="ana@test.com")
BRUNO = RespondentProfile(id="u2", email="bruno@test.com")


def _rows() -> list[ResultRow]:
    return [
        ResultRow("u1", "2", "Favorite color?", "Blue", SUBMITTED, ANA),
        ResultRow("u1", "3", "Which fruits?", ["Apple", "Cherry"], SUBMITTED, ANA),
        ResultRow("u2", "2", "Favorite color?", "Blue", SUBMITTED, BRUNO),
    ]


def _load(rows):
    survey = SimpleNamespace(title="Customer survey", questions=SAMPLE_QUESTIONS)
    return load_workbook(BytesIO(build_results_workbook(survey, rows)))


class TestResultsWorkbook:

    def test_sheet_names(self):
        wb = _load(_rows())
        assert wb.sheetnames == ["Raw Data", "Statistics", "Visualizations"]

    def test_raw_data_rows(self):
        ws = _load(_rows())["Raw Data"]
        values = list(ws.iter_rows(values_only=True))
        assert values[0] == ("User ID", "Email", "Question", "Answer", "Submitted At")
        assert values[2][3] == "Apple, Cherry"
        assert values[1][1] == "ana@test.com"
        assert len(values) == 4

    def test_statistics(self):
        ws = _load(_rows())["Statistics"]
        stats = {row[0]: row[1] for row in ws.iter_rows(min_row=2, values_only=True)}
        assert stats["Survey"] == "Customer survey"
        assert stats["Total responses"] == 2
        assert stats["What do you think?"] == "No responses"
        assert stats["Favorite color? - total answers"] == 2
        assert stats["Favorite color? - most common"] == "Blue (100%)"
        assert stats["Which fruits? - Apple"] == 1

    def test_visualization_tables(self):
        ws = _load(_rows())["Visualizations"]
        first_column = [row[0] for row in ws.iter_rows(values_only=True)]
        assert "Favorite color?" in first_column
        assert first_column.count("Answer") == 3

    def test_multiple_selection_counts_answers(self):
        rows = [
            ResultRow("u1", "3", "Which fruits?", ["Apple", "Banana"], SUBMITTED, ANA),
            ResultRow("u2", "3", "Which fruits?", ["Apple", "Cherry"], SUBMITTED, BRUNO),
        ]
        ws = _load(rows)["Statistics"]
        stats = {row[0]: row[1] for row in ws.iter_rows(min_row=2, values_only=True)}
        assert stats["Which fruits? - total answers"] == 2
        assert stats["Which fruits? - most common"] == "Apple (100%)"
        assert stats["Which fruits? - Banana"] == 1

    def test_legacy_rows_merge_by_question_text(self):
        rows = [
            ResultRow("u1", "2", "Favorite color?", "Blue", SUBMITTED, ANA),
            ResultRow("u2", None, "Favorite color?", "Red", SUBMITTED, BRUNO),
            ResultRow("u2", None, "Retired question", "Yes", SUBMITTED, BRUNO),
        ]
        wb = _load(rows)
        stats = {row[0]: row[1] for row in wb["Statistics"].iter_rows(min_row=2, values_only=True)}
        assert stats["Favorite color? - total answers"] == 2
        assert stats["Retired question - total answers"] == 1

        first_column = [row[0] for row in wb["Visualizations"].iter_rows(values_only=True)]
        assert first_column.count("Favorite color?") == 1
        assert first_column.count("Answer") == 4

    def test_empty_results(self):
        wb = _load([])
        assert wb["Raw Data"].max_row == 1


def test_export_filename():
    assert export_filename("abc") == "survey_report_abc.xlsx"
