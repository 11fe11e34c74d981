"""Public read API: normalized event shape, defaults and filters."""

import pytest

from tests.conftest import add_event


def test_created_event_round_trips_in_normalized_shape(client):
    resp = add_event(client, start="2025-09-01", title_zh="開學典禮", type="school-activity")
    assert resp.status_code == 201, resp.text

    events = client.get("/api/events").json()
    assert events == [
        {
            "id": 1,
            "start": "2025-09-01",
            "end": "2025-09-01",
            "title": {"zh": "開學典禮", "en": ""},
            "description": {"zh": "", "en": ""},
            "type": "school-activity",
            "grade": ["all-grades"],
            "link": "",
        }
    ]


def test_title_is_trimmed_and_grades_kept_in_order(client):
    resp = client.post(
        "/admin/add",
        data={
            "start": "2025-10-01",
            "end": "2025-10-03",
            "title_zh": "  期中考  ",
            "title_en": "Midterm",
            "type": "important-exam",
            "grade": ["grade-2", "grade-1", "grade-2"],
            "link": "https://example.com/exam",
        },
    )
    assert resp.status_code == 201, resp.text

    event = client.get("/api/events").json()[0]
    assert event["title"] == {"zh": "期中考", "en": "Midterm"}
    assert event["grade"] == ["grade-2", "grade-1"]
    assert event["end"] == "2025-10-03"
    assert event["link"] == "https://example.com/exam"


def test_bracketed_grade_field_is_accepted(client):
    resp = client.post(
        "/admin/add",
        data={"start": "2025-10-01", "title_zh": "高三模擬考", "grade[]": ["grade-3"]},
    )
    assert resp.status_code == 201, resp.text
    event = client.get("/api/events").json()[0]
    assert event["grade"] == ["grade-3"]
    assert event["type"] == "other"


@pytest.mark.parametrize(
    "start,end",
    [("2025-09-02", "2025-09-01"), ("2025-01-01", "2024-12-31"), ("2026-03-10", "2026-02-28")],
)
def test_end_before_start_is_rejected(client, start, end):
    resp = add_event(client, start=start, end=end)
    assert resp.status_code == 400
    assert "結束日期不能早於開始日期" in resp.text
    assert client.get("/api/events").json() == []


@pytest.mark.parametrize("missing", ["start", "title_zh"])
def test_missing_required_field_is_rejected(client, missing):
    resp = add_event(client, **{missing: ""})
    assert resp.status_code == 400
    assert "請提供必要的開始日期與中文標題" in resp.text


def test_whitespace_title_is_rejected(client):
    resp = add_event(client, title_zh="   ")
    assert resp.status_code == 400


def test_unknown_type_and_grade_are_rejected(client):
    assert add_event(client, type="party").status_code == 400
    assert add_event(client, grade="grade-9").status_code == 400
    assert add_event(client, link="ftp://example.com").status_code == 400
    assert client.get("/api/events").json() == []


def test_get_single_event_and_missing(client):
    add_event(client)
    assert client.get("/api/events/1").json()["title"]["zh"] == "開學典禮"

    resp = client.get("/api/events/99")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "找不到指定的事件。"


def test_list_keeps_insertion_order(client):
    add_event(client, start="2025-12-01", title_zh="B")
    add_event(client, start="2025-09-01", title_zh="A")
    titles = [e["title"]["zh"] for e in client.get("/api/events").json()]
    assert titles == ["B", "A"]


@pytest.fixture
def seeded(client):
    add_event(client, start="2025-09-01", title_zh="開學典禮", title_en="Opening Ceremony", type="school-activity")
    add_event(client, start="2025-10-20", end="2025-10-22", title_zh="期中考", type="important-exam", grade=["grade-1", "grade-2"])
    add_event(client, start="2025-10-10", title_zh="國慶日", type="holiday", description_en="National Day")
    add_event(client, start="2026-01-15", title_zh="高三學測", type="important-exam", grade="grade-3")


def _titles(client, **params):
    return [e["title"]["zh"] for e in client.get("/api/events", params=params).json()]


def test_filter_by_keyword_is_case_insensitive_across_languages(client, seeded):
    assert _titles(client, search="opening") == ["開學典禮"]
    assert _titles(client, search="NATIONAL") == ["國慶日"]
    assert _titles(client, search="學") == ["開學典禮", "高三學測"]


def test_keyword_folds_non_ascii_case(client):
    add_event(client, title_zh="法語日", title_en="ÉCOLE FRANÇAISE")
    add_event(client, start="2025-09-02", title_zh="開學典禮")

    assert _titles(client, search="école") == ["法語日"]
    assert _titles(client, search="Française") == ["法語日"]


def test_filter_by_type_and_grade(client, seeded):
    assert _titles(client, type="important-exam") == ["期中考", "高三學測"]
    assert _titles(client, grade="grade-1") == ["期中考"]
    assert _titles(client, grade="all-grades") == ["開學典禮", "國慶日"]


def test_filter_by_date_range_uses_interval_overlap(client, seeded):
    assert _titles(client, start="2025-10-21", end="2025-10-31") == ["期中考"]
    assert _titles(client, start="2025-10-22") == ["期中考", "高三學測"]
    assert _titles(client, end="2025-09-30") == ["開學典禮"]


def test_empty_filters_are_ignored_and_bad_dates_rejected(client, seeded):
    assert len(_titles(client, search="", type="", grade="")) == 4
    resp = client.get("/api/events", params={"start": "2025/10/01"})
    assert resp.status_code == 400


def test_health_check(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
