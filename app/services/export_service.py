"""설문 결과 Excel 내보내기 서비스.

Survey result Excel export. Builds a three-sheet workbook (raw data,
statistics, visualization tables) from the same rows the analytics use.
"""

from collections import Counter
from io import BytesIO
from typing import Any, NamedTuple, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from app.services.analytics_service import ResultRow, rows_for_question
from app.services.response_validation import normalize_questions

XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# 분포 전체를 표시할 최대 고유 답변 수
MAX_DISTRIBUTION_VALUES: int = 5


def export_filename(survey_id: Any) -> str:
    return f"survey_report_{survey_id}.xlsx"


def _answer_text(answer: Any) -> str:
    """다중 선택 답변은 쉼표로 연결 — list answers are joined with ", "."""
    if isinstance(answer, list):
        return ", ".join(str(value) for value in answer)
    return "" if answer is None else str(answer)


def _answer_values(answer: Any) -> list[str]:
    if isinstance(answer, list):
        return [str(value) for value in answer]
    return [_answer_text(answer)]


class _Distribution(NamedTuple):
    """질문별 답변 분포 — counts are rows containing each value, total is the row count."""

    question: str
    counts: Counter
    total: int


def _distribution(question_text: str, rows: Sequence[ResultRow]) -> _Distribution:
    counts: Counter = Counter()
    for row in rows:
        # 한 답변 안의 중복 선택은 한 번만 집계
        counts.update(list(dict.fromkeys(_answer_values(row.answer))))
    return _Distribution(question_text, counts, len(rows))


def _distributions(questions: Sequence[dict[str, Any]], rows: Sequence[ResultRow]) -> list[_Distribution]:
    """질문 순서대로, 이어서 설문에 없는 질문의 행을 행 순서대로."""
    distributions: list[_Distribution] = []
    matched_ids: set[int] = set()
    for question in questions:
        matched = rows_for_question(question, rows)
        matched_ids.update(id(row) for row in matched)
        distributions.append(_distribution(question.get("question") or question.get("questionId") or "", matched))

    orphans: dict[str, tuple[str, list[ResultRow]]] = {}
    for row in rows:
        if id(row) in matched_ids:
            continue
        key = row.question_id or row.question
        orphans.setdefault(key, (row.question, []))[1].append(row)
    distributions.extend(_distribution(text, grouped) for text, grouped in orphans.values())
    return distributions


def build_results_workbook(survey: Any, rows: Sequence[ResultRow]) -> bytes:
    """설문 결과를 Excel 파일로 내보내기.

    Args:
        survey: 설문 (ORM ``Survey`` or any object with title and questions)
        rows: 결과 행 목록 (Result rows joined with respondents)

    Returns:
        bytes: xlsx 파일 내용 (Serialized workbook)
    """
    wb = Workbook()
    header_font = Font(bold=True, color="FFFFFF", size=11)
    title_font = Font(bold=True, size=12)

    def style_headers(ws, headers: list[str], color: str, row: int = 1) -> None:
        fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        for col_idx, h in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col_idx, value=h)
            cell.font = header_font
            cell.fill = fill
            cell.alignment = Alignment(horizontal="center")

    def set_widths(ws, widths: list[int]) -> None:
        for i, w in enumerate(widths, 1):
            ws.column_dimensions[ws.cell(row=1, column=i).column_letter].width = w

    distributions = _distributions(normalize_questions(survey.questions), rows)

    # --- Sheet 1: Raw Data ---
    ws1 = wb.active
    ws1.title = "Raw Data"
    style_headers(ws1, ["User ID", "Email", "Question", "Answer", "Submitted At"], "6C63FF")
    for row in rows:
        ws1.append([
            row.user_id,
            row.respondent.email if row.respondent else "",
            row.question,
            _answer_text(row.answer),
            row.created_at.isoformat() if row.created_at else "",
        ])
    set_widths(ws1, [38, 30, 50, 60, 25])

    # --- Sheet 2: Statistics ---
    ws2 = wb.create_sheet("Statistics")
    style_headers(ws2, ["Metric", "Value"], "4A90E2")
    ws2.append(["Survey", survey.title])
    ws2.append(["Total responses", len({row.user_id for row in rows})])
    for question_text, counter, total in distributions:
        if not counter:
            ws2.append([question_text, "No responses"])
            continue
        answer, count = counter.most_common(1)[0]
        ws2.append([f"{question_text} - total answers", total])
        ws2.append([f"{question_text} - most common", f"{answer} ({round(count / total * 100)}%)"])
        if len(counter) <= MAX_DISTRIBUTION_VALUES:
            for value, value_count in counter.most_common():
                ws2.append([f"{question_text} - {value}", value_count])
    set_widths(ws2, [60, 40])

    # --- Sheet 3: Visualizations ---
    ws3 = wb.create_sheet("Visualizations")
    current_row = 1
    for question_text, counter, _ in distributions:
        ws3.cell(row=current_row, column=1, value=question_text).font = title_font
        current_row += 1
        style_headers(ws3, ["Answer", "Count"], "00C897", row=current_row)
        current_row += 1
        for value, value_count in counter.most_common():
            ws3.cell(row=current_row, column=1, value=value)
            ws3.cell(row=current_row, column=2, value=value_count)
            current_row += 1
        current_row += 1  # 질문 사이 빈 줄
    set_widths(ws3, [60, 12])

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
