"""설문 분석 서비스 — 인구통계 집계 및 질문별 분석.

Survey analytics. ``build_survey_analytics`` is a pure single-pass reduction
over a survey's result rows joined with respondent demographics; it is
recomputed on every request and never touches the database.

Every respondent is counted once per demographic dimension, and missing or
out-of-range values fall into the ``unknown`` bucket, so the buckets of each
dimension always sum to the number of respondents.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Sequence

from app.services.response_validation import DEFAULT_OTHER_OPTION_TEXT, normalize_questions
from app.utils.datetime_utils import ensure_utc

UNKNOWN: str = "unknown"

AGE_GROUPS: tuple[str, ...] = ("18-25", "26-35", "36-45", "46-55", "56+")
CHILDREN_BUCKETS: tuple[str, ...] = ("0", "1", "2", "3+")
AMOUNT_RANGES: tuple[str, ...] = ("0-100", "101-500", "501-1000", "1000+")

# 텍스트 답변 그룹 키 길이 — Open-text answers are grouped by this many leading characters
GROUP_KEY_LENGTH: int = 50
MAX_GROUP_EXAMPLES: int = 3


@dataclass(frozen=True)
class RespondentProfile:
    """응답자 인구통계 스냅샷 (Respondent demographic snapshot)."""

    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    gender: str | None = None
    age: int | None = None
    city: str | None = None
    residential_area: str | None = None
    education_level: str | None = None
    purchase_responsibility: str | None = None
    children_count: int | None = None
    wallet_balance: float | None = None
    score: int | None = None

    @classmethod
    def from_user(cls, user: Any) -> "RespondentProfile":
        """ORM User에서 생성 — Build from a ``User`` row."""
        return cls(
            id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            gender=user.gender,
            age=user.age,
            city=user.city,
            residential_area=user.residential_area,
            education_level=user.education_level,
            purchase_responsibility=user.purchase_responsibility,
            children_count=user.children_count,
            wallet_balance=user.wallet_balance,
            score=user.score,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def as_info(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.full_name,
            "email": self.email,
            "gender": self.gender,
            "age": self.age,
            "city": self.city,
        }


@dataclass(frozen=True)
class ResultRow:
    """분석 입력 행 — 결과 하나와 응답자 정보.

    Attributes:
        user_id: 응답자 ID (Respondent id)
        question_id: 질문 ID, 레거시 행은 빈 값 (Question id; empty for legacy rows)
        question: 질문 문구 스냅샷 (Question text snapshot)
        answer: 저장된 답변 (Stored answer, str or list[str])
        created_at: 제출 일시 (Submission timestamp)
        respondent: 응답자 인구통계 (Respondent demographics, may be missing)
    """

    user_id: str
    question_id: str | None
    question: str
    answer: Any
    created_at: datetime | None = None
    respondent: RespondentProfile | None = None

    @classmethod
    def from_result(cls, result: Any, user: Any | None = None) -> "ResultRow":
        """ORM Result(+User)에서 생성 — Build from a ``Result`` and optional ``User``."""
        return cls(
            user_id=str(result.user_id),
            question_id=result.question_id,
            question=result.question,
            answer=result.answer,
            created_at=ensure_utc(result.created_at),
            respondent=RespondentProfile.from_user(user) if user is not None else None,
        )


# ---------------------------------------------------------------------------
# 구간 분류 — Bucketing
# ---------------------------------------------------------------------------

def age_group(age: int | None) -> str:
    """나이 구간 — 18세 미만 또는 미입력은 unknown."""
    if age is None or age < 18:
        return UNKNOWN
    if age <= 25:
        return "18-25"
    if age <= 35:
        return "26-35"
    if age <= 45:
        return "36-45"
    if age <= 55:
        return "46-55"
    return "56+"


def children_bucket(count: int | None) -> str:
    if count is None or count < 0:
        return UNKNOWN
    if count >= 3:
        return "3+"
    return str(count)


def amount_range(value: float | None) -> str:
    """지갑 잔액/점수 구간 — Wallet balance and score ranges."""
    if value is None:
        return UNKNOWN
    if value <= 100:
        return "0-100"
    if value <= 500:
        return "101-500"
    if value <= 1000:
        return "501-1000"
    return "1000+"


def _label(value: Any) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return UNKNOWN
    return str(value)


def _counter_dict(counter: Counter, fixed: Sequence[str] = ()) -> dict[str, int]:
    """고정 구간을 먼저 채운 뒤 나머지 값을 추가 — fixed buckets first, always present."""
    result: dict[str, int] = {bucket: counter.get(bucket, 0) for bucket in fixed}
    for key, count in counter.items():
        if key not in result:
            result[key] = count
    return result


def _top(buckets: dict[str, int]) -> str:
    known = [(key, count) for key, count in buckets.items() if key != UNKNOWN and count > 0]
    if not known:
        return "N/A"
    return max(known, key=lambda item: item[1])[0]


class _Breakdown:
    """질문/선택지 단위 인구통계 카운터."""

    def __init__(self, dimensions: Sequence[str]) -> None:
        self._dimensions = dimensions
        self._counters: dict[str, Counter] = {name: Counter() for name in dimensions}

    def add(self, respondent: RespondentProfile | None) -> None:
        for name in self._dimensions:
            self._counters[name][_dimension_value(name, respondent)] += 1

    def as_dict(self) -> dict[str, dict[str, int]]:
        return {f"by_{name}": dict(self._counters[name]) for name in self._dimensions}


_FULL_DIMENSIONS: tuple[str, ...] = ("gender", "age_group", "city", "education_level", "purchase_responsibility")
_TEXT_DIMENSIONS: tuple[str, ...] = ("gender", "age_group", "city")


def _dimension_value(name: str, respondent: RespondentProfile | None) -> str:
    if respondent is None:
        return UNKNOWN
    if name == "age_group":
        return age_group(respondent.age)
    return _label(getattr(respondent, name))


# ---------------------------------------------------------------------------
# 집계 — Aggregation
# ---------------------------------------------------------------------------

def _respondents(rows: Iterable[ResultRow]) -> dict[str, RespondentProfile]:
    """응답자별 1회만 — One profile per distinct respondent, first row wins."""
    respondents: dict[str, RespondentProfile] = {}
    for row in rows:
        if row.user_id not in respondents:
            respondents[row.user_id] = row.respondent or RespondentProfile(id=row.user_id)
    return respondents


def demographic_overview(respondents: Iterable[RespondentProfile]) -> dict[str, dict[str, int]]:
    """응답자 인구통계 개요 — 각 차원의 합은 응답자 수와 같음."""
    counters: dict[str, Counter] = {
        name: Counter()
        for name in (
            "gender", "age_group", "city", "residential_area", "education_level",
            "purchase_responsibility", "children_count", "wallet_balance", "score",
        )
    }
    for person in respondents:
        counters["gender"][_label(person.gender)] += 1
        counters["age_group"][age_group(person.age)] += 1
        counters["city"][_label(person.city)] += 1
        counters["residential_area"][_label(person.residential_area)] += 1
        counters["education_level"][_label(person.education_level)] += 1
        counters["purchase_responsibility"][_label(person.purchase_responsibility)] += 1
        counters["children_count"][children_bucket(person.children_count)] += 1
        counters["wallet_balance"][amount_range(person.wallet_balance)] += 1
        counters["score"][amount_range(person.score)] += 1

    return {
        "by_gender": _counter_dict(counters["gender"]),
        "by_age_group": _counter_dict(counters["age_group"], AGE_GROUPS),
        "by_city": _counter_dict(counters["city"]),
        "by_residential_area": _counter_dict(counters["residential_area"]),
        "by_education_level": _counter_dict(counters["education_level"]),
        "by_purchase_responsibility": _counter_dict(counters["purchase_responsibility"]),
        "by_children_count": _counter_dict(counters["children_count"], CHILDREN_BUCKETS),
        "wallet_balance_ranges": _counter_dict(counters["wallet_balance"], AMOUNT_RANGES),
        "score_ranges": _counter_dict(counters["score"], AMOUNT_RANGES),
    }


def rows_for_question(question: dict[str, Any], rows: Sequence[ResultRow]) -> list[ResultRow]:
    """질문에 해당하는 결과 행 — rows by question_id, legacy rows by question text."""
    question_id = question.get("questionId")
    text = question.get("question")
    matched: list[ResultRow] = []
    for row in rows:
        if row.question_id:
            if row.question_id == question_id:
                matched.append(row)
        elif text and row.question == text:
            # question_id 없는 레거시 행은 질문 문구로 매칭
            matched.append(row)
    return matched


def _percentage(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total else 0.0


def _multiple_choice_analytics(question: dict[str, Any], rows: list[ResultRow]) -> dict[str, Any]:
    other_enabled = bool(question.get("otherOption"))
    other_label = question.get("otherOptionText") or DEFAULT_OTHER_OPTION_TEXT
    other_prefix = f"{other_label}: "

    options: dict[str, dict[str, Any]] = {
        option: {"count": 0, "breakdown": _Breakdown(_FULL_DIMENSIONS)}
        for option in question.get("options") or []
        if isinstance(option, str)
    }
    other_count = 0
    other_breakdown = _Breakdown(_FULL_DIMENSIONS)
    other_responses: list[dict[str, Any]] = []
    question_breakdown = _Breakdown(_FULL_DIMENSIONS)

    for row in rows:
        values = row.answer if isinstance(row.answer, list) else [row.answer]
        for value in values:
            if not isinstance(value, str):
                continue
            if other_enabled and value.startswith(other_prefix) and value not in options:
                other_count += 1
                other_breakdown.add(row.respondent)
                other_responses.append({
                    "user_id": row.user_id,
                    "other_text": value[len(other_prefix):],
                    "timestamp": row.created_at,
                    "user_info": row.respondent.as_info() if row.respondent else None,
                })
            elif value in options:
                options[value]["count"] += 1
                options[value]["breakdown"].add(row.respondent)
            # 질문 수정 이후 사라진 선택지는 집계하지 않음
        question_breakdown.add(row.respondent)

    total = len(rows)
    return {
        "question_id": question.get("questionId"),
        "question": question.get("question"),
        "type": "multiple",
        "multiple_selections": question.get("multipleSelections", "no"),
        "total_responses": total,
        "options": [
            {
                "option": option,
                "count": data["count"],
                "percentage": _percentage(data["count"], total),
                "demographics": data["breakdown"].as_dict(),
            }
            for option, data in options.items()
        ],
        "other_option": {
            "enabled": other_enabled,
            "text": other_label,
            "count": other_count,
            "percentage": _percentage(other_count, total),
            "demographics": other_breakdown.as_dict(),
            "responses": other_responses,
        },
        "demographic_breakdown": question_breakdown.as_dict(),
    }


def _open_text_analytics(question: dict[str, Any], rows: list[ResultRow]) -> dict[str, Any]:
    groups: dict[str, dict[str, Any]] = {}
    question_breakdown = _Breakdown(_FULL_DIMENSIONS)

    for row in rows:
        answer = row.answer if isinstance(row.answer, str) else ("" if row.answer is None else str(row.answer))
        # 앞 50자 소문자 기준의 단순 그룹화 — naive prefix clustering
        key = answer[:GROUP_KEY_LENGTH].lower()
        group = groups.setdefault(key, {"count": 0, "examples": [], "breakdown": _Breakdown(_TEXT_DIMENSIONS)})
        group["count"] += 1
        if len(group["examples"]) < MAX_GROUP_EXAMPLES:
            group["examples"].append(answer)
        group["breakdown"].add(row.respondent)
        question_breakdown.add(row.respondent)

    ordered = sorted(groups.items(), key=lambda item: item[1]["count"], reverse=True)
    return {
        "question_id": question.get("questionId"),
        "question": question.get("question"),
        "type": question.get("type") or "text",
        "total_responses": len(rows),
        "response_groups": [
            {
                "key": key,
                "count": group["count"],
                "examples": group["examples"],
                "demographics": group["breakdown"].as_dict(),
            }
            for key, group in ordered
        ],
        "demographic_breakdown": question_breakdown.as_dict(),
    }


def question_analytics(questions: Sequence[dict[str, Any]], rows: Sequence[ResultRow]) -> list[dict[str, Any]]:
    """질문별 분석 — One entry per question definition, in survey order."""
    entries: list[dict[str, Any]] = []
    for question in questions:
        matched = rows_for_question(question, rows)
        if question.get("type") == "multiple" and question.get("options"):
            entries.append(_multiple_choice_analytics(question, matched))
        else:
            entries.append(_open_text_analytics(question, matched))
    return entries


def build_survey_analytics(survey: Any, rows: Sequence[ResultRow]) -> dict[str, Any]:
    """설문 전체 분석 문서를 생성합니다.

    Build the full analytics document for a survey.

    Args:
        survey: 설문 (Object exposing title, questions, status, created_at,
                expiration_time and response_limit, typically the ORM ``Survey``)
        rows: 결과 행 목록 (Result rows joined with respondent demographics)

    Returns:
        dict[str, Any]: ``basic_stats``, ``demographic_overview``,
            ``question_analytics`` 및 ``summary`` 키를 가진 분석 문서
    """
    respondents = _respondents(rows)
    total = len(respondents)
    limit = survey.response_limit
    overview = demographic_overview(respondents.values())

    return {
        "basic_stats": {
            "total_responses": total,
            "title": survey.title,
            "created_at": ensure_utc(survey.created_at),
            "expiration_time": ensure_utc(survey.expiration_time),
            "status": survey.status,
            "response_limit": limit,
            "completion_rate": min(100, round(total / limit * 100)) if limit else None,
        },
        "demographic_overview": overview,
        "question_analytics": question_analytics(normalize_questions(survey.questions), rows),
        "summary": {
            "top_gender": _top(overview["by_gender"]),
            "top_age_group": _top(overview["by_age_group"]),
            "top_city": _top(overview["by_city"]),
            "raw_results": [
                {
                    "user_id": row.user_id,
                    "question_id": row.question_id,
                    "question": row.question,
                    "answer": row.answer,
                    "created_at": row.created_at,
                    "user": row.respondent.as_info() if row.respondent else None,
                }
                for row in rows
            ],
        },
    }
