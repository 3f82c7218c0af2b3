"""설문 응답 검증 — 질문 정의 정규화 및 제출 답변 검증.

Survey response validation. Pure functions with no database access:
question definitions are normalized from their stored JSON form, then each
submitted ``{questionId, answer}`` item is checked against its question.

Answer shapes:
    text question:              "free text"
    single choice:              "Option A"
                                {"selectedOption": "other", "otherText": "..."}
    multiple choice:            ["Option A", "Option B"]
                                {"selectedOptions": ["Option A", "other"], "otherText": "..."}

Validation stops at the first violation and raises ``AnswerValidationError``
with a message meant for the respondent.
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

# 답변 길이 구간 — (최소, 최대) 글자 수 (Answer length buckets as (min, max) characters)
ANSWER_LENGTHS: dict[str, tuple[int, float]] = {
    "short": (1, 100),
    "medium": (10, 300),
    "long": (50, 1000),
    "unrestricted": (0, math.inf),
}

# "기타" 선택지 키워드 — Wire value that selects the free-text "other" choice
OTHER_CHOICE: str = "other"
DEFAULT_OTHER_OPTION_TEXT: str = "Other (specify)"


class AnswerValidationError(ValueError):
    """제출 답변이 질문 정의를 위반할 때 발생.

    Raised for the first submitted answer that violates its question definition.
    """


@dataclass(frozen=True)
class ValidatedAnswer:
    """검증 및 정규화된 답변 — 결과 행 하나에 대응.

    Attributes:
        question_id: 질문 ID (Question identifier, always a string)
        question: 질문 문구 (Question text snapshot)
        answer: 저장할 답변 (Normalized answer, str or list[str])
    """

    question_id: str
    question: str
    answer: str | list[str]


# ---------------------------------------------------------------------------
# 질문 정의 정규화 — Question definition normalization
# ---------------------------------------------------------------------------

def _as_yes_no(value: Any) -> Any:
    if value is None:
        return "no"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("yes", "true"):
            return "yes"
        if lowered in ("no", "false", ""):
            return "no"
    # 해석 불가 값은 그대로 두어 스키마 검증에서 거부되도록 함
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def normalize_question(raw: Mapping[str, Any]) -> dict[str, Any]:
    """질문 정의 하나를 정규화합니다.

    Coerce loosely-typed question fields into their canonical form:
    ``id`` → ``questionId`` (string), boolean/string ``multipleSelections`` →
    ``"yes"``/``"no"``, numeric-string ``selectionLimit`` → int,
    string ``otherOption`` → bool, and a default ``otherOptionText``.

    Args:
        raw: 저장된 질문 정의 (Stored question definition)

    Returns:
        dict[str, Any]: 정규화된 사본 (Normalized copy; the input is not mutated)
    """
    question: dict[str, Any] = dict(raw)

    if question.get("questionId") is None and question.get("id") is not None:
        question["questionId"] = question["id"]
    if question.get("questionId") is not None and not isinstance(question["questionId"], str):
        question["questionId"] = str(question["questionId"])

    if question.get("type") == "multiple" or "multipleSelections" in question:
        question["multipleSelections"] = _as_yes_no(question.get("multipleSelections"))

    limit = question.get("selectionLimit")
    if isinstance(limit, str):
        stripped = limit.strip()
        question["selectionLimit"] = int(stripped) if stripped.isdigit() else None

    if "otherOption" in question:
        question["otherOption"] = _as_bool(question["otherOption"])
    if question.get("otherOption") and not question.get("otherOptionText"):
        question["otherOptionText"] = DEFAULT_OTHER_OPTION_TEXT

    return question


def normalize_questions(raw: Any) -> list[dict[str, Any]]:
    """저장된 질문 목록을 정규화합니다.

    Accepts the stored ``questions`` value in any historical form: a list,
    a JSON string, or a double-encoded JSON string. Anything that does not
    decode to a list yields ``[]``.
    """
    value: Any = raw
    # 이중 직렬화된 JSON 문자열까지 해제 — Unwrap up to two levels of JSON encoding
    for _ in range(2):
        if not isinstance(value, str):
            break
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, list):
        return []
    return [normalize_question(item) for item in value if isinstance(item, Mapping)]


# ---------------------------------------------------------------------------
# 답변 검증 — Answer validation
# ---------------------------------------------------------------------------

def length_bounds(question: Mapping[str, Any]) -> tuple[int, float]:
    """질문의 answerLength 구간 — (min, max) for the question's answerLength."""
    return ANSWER_LENGTHS.get(question.get("answerLength") or "unrestricted", ANSWER_LENGTHS["unrestricted"])


def _check_length(text: str, question: Mapping[str, Any], label: str) -> None:
    minimum, maximum = length_bounds(question)
    if len(text) < minimum:
        raise AnswerValidationError(f"{label} too short. Minimum required: {minimum} characters")
    if len(text) > maximum:
        raise AnswerValidationError(f"{label} too long. Maximum allowed: {int(maximum)} characters")


def _question_title(question: Mapping[str, Any]) -> str:
    return question.get("question") or f"Question {question.get('questionId')}"


def _is_other(choice: str, options: Sequence[str]) -> bool:
    # 실제 선택지 이름이 "other"이면 일반 선택지로 취급
    return choice == OTHER_CHOICE and choice not in options


def _other_value(question: Mapping[str, Any], other_text: Any) -> str:
    """"기타" 선택을 '{otherOptionText}: {text}' 형태로 변환."""
    if not question.get("otherOption"):
        raise AnswerValidationError('Option "other" is not available for this question')
    text = other_text.strip() if isinstance(other_text, str) else ""
    if not text:
        raise AnswerValidationError('When selecting "other", you must provide text')
    _check_length(text, question, "Other text")
    label = question.get("otherOptionText") or DEFAULT_OTHER_OPTION_TEXT
    return f"{label}: {text}"


def _validate_text(question: Mapping[str, Any], answer: Any, title: str) -> str:
    if isinstance(answer, list):
        raise AnswerValidationError(f'Question "{title}" does not accept multiple answers')
    if not isinstance(answer, str):
        raise AnswerValidationError(f'Question "{title}" requires a text answer')
    text = answer.strip()
    _check_length(text, question, "Answer")
    return text


def _validate_single(
    question: Mapping[str, Any], answer: Any, title: str, options: Sequence[str]
) -> str:
    if isinstance(answer, list):
        raise AnswerValidationError(f'Question "{title}" only accepts a single answer')

    if isinstance(answer, Mapping):
        if "selectedOption" not in answer:
            raise AnswerValidationError(f'Question "{title}" has an unrecognized answer format')
        selected = answer.get("selectedOption")
        if isinstance(selected, str) and _is_other(selected, options):
            return _other_value(question, answer.get("otherText"))
        answer = selected

    if not isinstance(answer, str):
        raise AnswerValidationError(f'Invalid option "{answer}" for question "{title}"')
    if _is_other(answer, options):
        # 텍스트 없는 "other" — bare "other" never carries its text
        _other_value(question, None)
    if answer not in options:
        raise AnswerValidationError(f'Invalid option "{answer}" for question "{title}"')
    return answer


def _validate_multiple(
    question: Mapping[str, Any], answer: Any, title: str, options: Sequence[str]
) -> list[str]:
    other_text: Any = None
    if isinstance(answer, Mapping):
        if "selectedOptions" not in answer:
            raise AnswerValidationError(f'Question "{title}" has an unrecognized answer format')
        selections = answer.get("selectedOptions")
        other_text = answer.get("otherText")
    else:
        selections = answer
    if not isinstance(selections, list):
        raise AnswerValidationError(f'Question "{title}" requires multiple answers (array)')

    if not selections:
        raise AnswerValidationError(f'You must select at least one option for question "{title}"')

    limit = question.get("selectionLimit")
    if isinstance(limit, int) and not isinstance(limit, bool) and limit > 0 and len(selections) > limit:
        raise AnswerValidationError(
            f'Question "{title}" allows maximum {limit} selection(s). You selected {len(selections)}.'
        )

    seen: set[str] = set()
    normalized: list[str] = []
    for choice in selections:
        if not isinstance(choice, str):
            raise AnswerValidationError(f'Invalid option "{choice}" for question "{title}"')
        if choice in seen:
            raise AnswerValidationError(f'Option "{choice}" was selected more than once for question "{title}"')
        seen.add(choice)
        if _is_other(choice, options):
            normalized.append(_other_value(question, other_text))
        elif choice in options:
            normalized.append(choice)
        else:
            raise AnswerValidationError(f'Invalid option "{choice}" for question "{title}"')
    return normalized


def validate_answer(question: Mapping[str, Any], answer: Any) -> str | list[str]:
    """답변 하나를 질문 정의에 대해 검증하고 정규화합니다.

    Validate one answer against its (normalized) question definition.

    Args:
        question: 정규화된 질문 정의 (Normalized question definition)
        answer: 제출된 답변 (Submitted answer in any supported shape)

    Returns:
        str | list[str]: 저장할 정규화된 답변 (Normalized answer to persist)

    Raises:
        AnswerValidationError: 첫 번째 위반 사항 (First violation found)
    """
    title = _question_title(question)
    if answer is None:
        raise AnswerValidationError(f'Question "{title}" requires an answer')

    if question.get("type") != "multiple":
        return _validate_text(question, answer, title)

    options: list[str] = [o for o in question.get("options") or [] if isinstance(o, str)]
    if question.get("multipleSelections") == "yes":
        return _validate_multiple(question, answer, title, options)
    return _validate_single(question, answer, title, options)


def validate_submission(
    questions: Sequence[Mapping[str, Any]],
    answers: Any,
) -> list[ValidatedAnswer]:
    """제출된 답변 배열 전체를 검증합니다.

    Validate a submitted ``[{questionId, answer}, ...]`` array against the
    survey's questions. Questions are matched by ``questionId`` only; unknown
    ids and a question answered twice are rejected. Unanswered questions are
    allowed.

    Args:
        questions: 설문 질문 정의 목록 (Survey question definitions)
        answers: 제출된 답변 배열 (Submitted answer array)

    Returns:
        list[ValidatedAnswer]: 제출 순서대로 정규화된 답변 (Normalized answers in submission order)

    Raises:
        AnswerValidationError: 첫 번째 위반 사항 (First violation found)
    """
    if not isinstance(answers, list):
        raise AnswerValidationError("Response should be an array")
    if not answers:
        raise AnswerValidationError("Response must contain at least one answer")

    by_id: dict[str, dict[str, Any]] = {}
    for raw in questions:
        question = normalize_question(raw)
        if question.get("questionId") is not None:
            by_id[question["questionId"]] = question

    answered: set[str] = set()
    validated: list[ValidatedAnswer] = []
    for item in answers:
        if not isinstance(item, Mapping) or item.get("questionId") is None:
            raise AnswerValidationError("Each response item must include questionId and answer")
        question_id = str(item["questionId"])
        question = by_id.get(question_id)
        if question is None:
            raise AnswerValidationError(f"Question with ID {question_id} not found")
        title = _question_title(question)
        if question_id in answered:
            raise AnswerValidationError(f'Question "{title}" was answered more than once')
        answered.add(question_id)
        validated.append(
            ValidatedAnswer(
                question_id=question_id,
                question=title,
                answer=validate_answer(question, item.get("answer")),
            )
        )
    return validated
