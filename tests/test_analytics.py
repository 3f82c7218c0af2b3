"""설문 분석 유닛 테스트 — 인구통계 구간, 질문별 집계, 요약.

Pure tests for build_survey_analytics; no database involved.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from app.services.analytics_service import (
    RespondentProfile,
    ResultRow,
    age_group,
    amount_range,
    build_survey_analytics,
    children_bucket,
    demographic_overview,
)
from tests.conftest import SAMPLE_QUESTIONS

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

ANA = RespondentProfile(
    id="u1", email="ana@test.com", first_name="Ana", last_name="Silva",
    gender="female", age=29, city="Lisbon", education_level="university",
    purchase_responsibility="primary", children_count=1, wallet_balance=250.0, score=40,
)
BRUNO = RespondentProfile(id="u2", email="bruno@test.com", first_name="Bruno", gender="male", age=41, city="Porto")
CARLA = RespondentProfile(id="u3", email="carla@test.com", first_name="Carla", gender="female", age=16)


def _survey(**overrides):
    data = {
        "title": "Customer survey",
        "questions": SAMPLE_QUESTIONS,
        "status": "active",
        "created_at": NOW - timedelta(days=1),
        "expiration_time": NOW + timedelta(days=2),
        "response_limit": None,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def _row(person: RespondentProfile, question_id: str, answer, question: str = "") -> ResultRow:
    return ResultRow(
        user_id=person.id,
        question_id=question_id,
        question=question,
        answer=answer,
        created_at=NOW,
        respondent=person,
    )


ROWS = [
    _row(ANA, "1", "Great service", "What do you think?"),
    _row(ANA, "2", "Blue", "Favorite color?"),
    _row(ANA, "3", ["Apple", "Cherry"], "Which fruits?"),
    _row(BRUNO, "1", "great service", "What do you think?"),
    _row(BRUNO, "2", "Other: Green", "Favorite color?"),
    _row(CARLA, "2", "Blue", "Favorite color?"),
]


def _question(analytics: dict, question_id: str) -> dict:
    return next(q for q in analytics["question_analytics"] if q["question_id"] == question_id)


# ---------------------------------------------------------------------------
# 1. 구간 분류
# ---------------------------------------------------------------------------

class TestBuckets:

    def test_age_groups(self):
        assert age_group(None) == "unknown"
        assert age_group(17) == "unknown"
        assert age_group(18) == "18-25"
        assert age_group(26) == "26-35"
        assert age_group(45) == "36-45"
        assert age_group(55) == "46-55"
        assert age_group(80) == "56+"

    def test_children_buckets(self):
        assert children_bucket(None) == "unknown"
        assert children_bucket(0) == "0"
        assert children_bucket(2) == "2"
        assert children_bucket(5) == "3+"

    def test_amount_ranges(self):
        assert amount_range(None) == "unknown"
        assert amount_range(0) == "0-100"
        assert amount_range(100) == "0-100"
        assert amount_range(100.5) == "101-500"
        assert amount_range(1000) == "501-1000"
        assert amount_range(1001) == "1000+"


# ---------------------------------------------------------------------------
# 2. 인구통계 개요
# ---------------------------------------------------------------------------

class TestDemographicOverview:

    def test_every_dimension_sums_to_respondents(self):
        overview = demographic_overview([ANA, BRUNO, CARLA])
        for buckets in overview.values():
            assert sum(buckets.values()) == 3

    def test_fixed_buckets_present(self):
        overview = demographic_overview([])
        assert list(overview["by_age_group"]) == ["18-25", "26-35", "36-45", "46-55", "56+"]
        assert list(overview["by_children_count"]) == ["0", "1", "2", "3+"]
        assert overview["by_gender"] == {}

    def test_minor_counted_as_unknown(self):
        overview = demographic_overview([CARLA])
        assert overview["by_age_group"]["unknown"] == 1
        assert overview["by_city"] == {"unknown": 1}


# ---------------------------------------------------------------------------
# 3. 전체 분석 문서
# ---------------------------------------------------------------------------

class TestBuildSurveyAnalytics:

    def test_basic_stats_counts_distinct_respondents(self):
        analytics = build_survey_analytics(_survey(response_limit=4), ROWS)
        stats = analytics["basic_stats"]
        assert stats["total_responses"] == 3
        assert stats["completion_rate"] == 75
        assert stats["title"] == "Customer survey"

    def test_completion_rate_capped_and_optional(self):
        assert build_survey_analytics(_survey(response_limit=2), ROWS)["basic_stats"]["completion_rate"] == 100
        assert build_survey_analytics(_survey(), ROWS)["basic_stats"]["completion_rate"] is None

    def test_naive_timestamps_reported_as_utc(self):
        naive = datetime(2026, 3, 5, 8, 0)
        analytics = build_survey_analytics(_survey(expiration_time=naive), [])
        assert analytics["basic_stats"]["expiration_time"].tzinfo == timezone.utc

    def test_single_choice_options_and_other(self):
        entry = _question(build_survey_analytics(_survey(), ROWS), "2")
        assert entry["total_responses"] == 3
        counts = {o["option"]: o["count"] for o in entry["options"]}
        assert counts == {"Red": 0, "Blue": 2}
        blue = next(o for o in entry["options"] if o["option"] == "Blue")
        assert blue["percentage"] == 66.7
        assert blue["demographics"]["by_gender"] == {"female": 2}

        other = entry["other_option"]
        assert other["enabled"] is True
        assert other["count"] == 1
        assert other["responses"][0]["other_text"] == "Green"
        assert other["responses"][0]["user_info"]["name"] == "Bruno"

    def test_multiple_choice_counts_each_selection(self):
        entry = _question(build_survey_analytics(_survey(), ROWS), "3")
        counts = {o["option"]: o["count"] for o in entry["options"]}
        assert counts == {"Apple": 1, "Banana": 0, "Cherry": 1}
        assert entry["other_option"]["enabled"] is False

    def test_open_text_groups_case_insensitive(self):
        entry = _question(build_survey_analytics(_survey(), ROWS), "1")
        assert entry["total_responses"] == 2
        assert len(entry["response_groups"]) == 1
        group = entry["response_groups"][0]
        assert group["key"] == "great service"
        assert group["count"] == 2
        assert group["examples"] == ["Great service", "great service"]

    def test_legacy_rows_matched_by_question_text(self):
        legacy = [_row(ANA, "", "Red", "Favorite color?")]
        entry = _question(build_survey_analytics(_survey(), legacy), "2")
        assert {o["option"]: o["count"] for o in entry["options"]}["Red"] == 1

    def test_removed_option_not_counted(self):
        rows = [_row(ANA, "2", "Purple", "Favorite color?")]
        entry = _question(build_survey_analytics(_survey(), rows), "2")
        assert sum(o["count"] for o in entry["options"]) == 0
        assert entry["other_option"]["count"] == 0

    def test_summary(self):
        summary = build_survey_analytics(_survey(), ROWS)["summary"]
        assert summary["top_gender"] == "female"
        assert summary["top_city"] in ("Lisbon", "Porto")
        assert len(summary["raw_results"]) == len(ROWS)
        assert summary["raw_results"][0]["user"]["email"] == "ana@test.com"

    def test_empty_survey(self):
        analytics = build_survey_analytics(_survey(), [])
        assert analytics["basic_stats"]["total_responses"] == 0
        assert analytics["summary"]["top_gender"] == "N/A"
        assert [q["total_responses"] for q in analytics["question_analytics"]] == [0, 0, 0]

    def test_stored_questions_as_json_string(self):
        import json
        analytics = build_survey_analytics(_survey(questions=json.dumps(SAMPLE_QUESTIONS)), ROWS)
        assert len(analytics["question_analytics"]) == 3

    def test_missing_respondent_counts_unknown(self):
        rows = [ResultRow(user_id="ghost", question_id="2", question="Favorite color?", answer="Red")]
        analytics = build_survey_analytics(_survey(), rows)
        assert analytics["demographic_overview"]["by_gender"] == {"unknown": 1}
        assert analytics["summary"]["raw_results"][0]["user"] is None
