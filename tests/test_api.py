from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

import api.catalog as catalog
from api.app import create_app
from api.sample_tests import SAMPLE_TEST
from conftest import make_test_payload


@pytest.fixture
def client():
    catalog.clear()
    with TestClient(create_app()) as c:
        yield c
    catalog.clear()


def test_sample_test_is_listed(client: TestClient) -> None:
    res = client.get("/api/tests")
    assert res.status_code == 200
    assert [t["name"] for t in res.json()] == [SAMPLE_TEST.name]


def test_create_and_fetch_test(client: TestClient) -> None:
    payload = make_test_payload(("S1", "1", 2), name="Weekly")
    res = client.post("/api/tests", json=payload)
    assert res.status_code == 201
    assert res.json()["total"] == 2

    res = client.get("/api/tests/Weekly")
    assert res.status_code == 200
    assert "correctAnswer" not in res.json()["sections"][0]["questions"][0]

    assert client.post("/api/tests", json=payload).status_code == 400
    assert client.get("/api/tests/Nope").status_code == 404


def test_create_rejects_empty_section(client: TestClient) -> None:
    payload = make_test_payload(("S1", "1", 0), name="Broken")
    assert client.post("/api/tests", json=payload).status_code == 400


def test_import_from_spreadsheet(client: TestClient) -> None:
    wb = Workbook()
    ws = wb.active
    ws.append(["question", "optionA", "optionB", "optionC", "optionD", "correctAnswer"])
    ws.append(["1 + 1 = ?", "1", "2", "3", "4", "B"])
    bio = BytesIO()
    wb.save(bio)

    res = client.post(
        "/api/tests/import",
        data={"name": "Imported", "section_names": ["Math"], "durations": ["15"]},
        files=[("files", ("math.xlsx", bio.getvalue(), "application/octet-stream"))],
    )
    assert res.status_code == 201
    assert res.json() == {"ok": True, "name": "Imported", "total": 1}

    res = client.post(
        "/api/tests/import",
        data={"name": "Bad", "section_names": ["Math"], "durations": ["15"]},
        files=[("files", ("bad.xlsx", b"garbage", "application/octet-stream"))],
    )
    assert res.status_code == 422


def test_exam_flow_and_results(client: TestClient) -> None:
    client.post("/api/tests", json=make_test_payload(("S1", "5", 2), ("S2", "5", 1), name="Flow"))

    state = client.post("/api/start-test", json={"name": "Flow"}).json()
    assert state["section_name"] == "S1"
    assert state["statuses"] == ["current", "notViewed"]

    state = client.post("/api/select", json={"option": "S1-0-A"}).json()
    assert state["selected_answer"] == "S1-0-A"

    # 저장하지 않은 답이 있으면 그냥 다음으로 넘어갈 수 없다
    assert client.post("/api/next").status_code == 409

    state = client.post("/api/save-next").json()
    assert state["question_index"] == 1
    assert state["statuses"] == ["answered", "current"]

    state = client.post("/api/flag").json()
    assert state["is_flagged"] is True
    assert state["attempted"] == 2

    state = client.post("/api/jump-section", json={"index": 1}).json()
    assert state["section_name"] == "S2"

    assert client.get("/api/results").status_code == 400

    res = client.post("/api/submit").json()
    assert res["phase"] == "manually_submitted"
    assert res["attempted"] == 2
    assert res["total"] == 3

    # 두 번째 제출은 아무것도 바꾸지 않는다
    assert client.post("/api/submit").json() == res
    assert client.post("/api/save").status_code == 409

    results = client.get("/api/results").json()
    assert results["overall"]["correct"] == 1
    assert results["overall"]["auto_submitted"] is False
    assert [s["section"] for s in results["sections"]] == ["S1", "S2"]
    assert len(results["review"]) == 3


def test_start_unknown_test(client: TestClient) -> None:
    assert client.post("/api/start-test", json={"name": "missing"}).status_code == 404


def test_state_without_session(client: TestClient) -> None:
    assert client.get("/api/session-state").status_code == 404


def test_sample_test_and_reset(client: TestClient) -> None:
    state = client.post("/api/start-sample-test").json()
    assert state["test_name"] == SAMPLE_TEST.name
    assert state["section_time_remaining"] == 600

    assert client.post("/api/reset").json() == {"ok": True}
    assert client.get("/api/session-state").status_code == 404


def test_start_respects_availability_window(client: TestClient) -> None:
    past = make_test_payload(
        ("S1", "5", 1), name="Closed",
        startDateTime="2020-01-01T09:00:00Z", endDateTime="2020-01-01T18:00:00Z",
    )
    future = make_test_payload(("S1", "5", 1), name="Later", startDateTime="2999-01-01T09:00:00Z")
    assert client.post("/api/tests", json=past).status_code == 201
    assert client.post("/api/tests", json=future).status_code == 201

    statuses = {t["name"]: t["status"] for t in client.get("/api/tests").json()}
    assert statuses == {SAMPLE_TEST.name: "active", "Closed": "expired", "Later": "upcoming"}

    assert client.post("/api/start-test", json={"name": "Closed"}).status_code == 409
    assert client.post("/api/start-test", json={"name": "Later"}).status_code == 409
    assert client.get("/api/session-state").status_code == 404


def test_api_serves_no_html_root(client: TestClient) -> None:
    # 응시 화면은 Streamlit 이 맡는다
    assert client.get("/").status_code == 404
