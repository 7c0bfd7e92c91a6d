import pytest

import api.catalog as catalog
from api.sample_tests import SAMPLE_TEST
from conftest import make_test
from exam_window.models.session_state import QuestionStatus
from exam_window.views import home_view
from exam_window.views.components.calculator import evaluate, format_result
from exam_window.views.components.sidebar import STATUS_COLORS, STATUS_LABELS
from exam_window.views.components.timer import format_time


def test_format_time() -> None:
    assert format_time(None) == "00:00"
    assert format_time(0) == "0:00"
    assert format_time(65) == "1:05"
    assert format_time(3600) == "60:00"
    assert format_time(-3) == "0:00"


def test_every_status_has_color_and_label() -> None:
    assert set(STATUS_COLORS) == set(QuestionStatus)
    assert set(STATUS_LABELS) == set(QuestionStatus)


@pytest.fixture
def empty_catalog():
    catalog.clear()
    yield
    catalog.clear()


def test_home_lists_catalog_with_sample(empty_catalog) -> None:
    catalog.add_test(make_test(("S1", "5", 2), name="Weekly"))
    catalog.add_test(make_test(
        ("S1", "5", 1), name="Old",
        startDateTime="2020-01-01T09:00:00Z", endDateTime="2020-01-02T09:00:00Z",
    ))

    entries = home_view.catalog_entries()

    assert [e["name"] for e in entries] == ["Weekly", "Old", SAMPLE_TEST.name]
    assert [e["status"] for e in entries] == ["active", "expired", "active"]
    assert {e["status"] for e in entries} <= set(home_view.AVAILABILITY_LABELS)


def test_home_seeds_sample_only_once(empty_catalog) -> None:
    home_view.catalog_entries()
    entries = home_view.catalog_entries()
    assert [e["name"] for e in entries] == [SAMPLE_TEST.name]


def test_format_window() -> None:
    assert home_view.format_window({"startDateTime": None, "endDateTime": None}) == "기간 제한 없음"
    assert home_view.format_window(
        {"startDateTime": "2026-03-01T09:00", "endDateTime": None}
    ) == "2026-03-01T09:00 ~ …"


@pytest.mark.parametrize("expression, expected", [
    ("1 + 2 × 3", "7"),
    ("(12.5 + 3) * 4", "62"),
    ("10 ÷ 4", "2.5"),
    ("2^10", "1024"),
    ("-3 + 1", "-2"),
    ("50%", "0.5"),
    ("50%200", "100"),
    ("√16 + sqrt(9)", "7"),
    ("log(1000)", "3"),
    ("factorial(5)", "120"),
    ("1 / 3", "0.3333333333"),
])
def test_calculator_evaluates(expression: str, expected: str) -> None:
    assert format_result(evaluate(expression)) == expected


@pytest.mark.parametrize("expression", [
    "",
    "1 +",
    "1 / 0",
    "__import__('os')",
    "open('x')",
    "sqrt(-1)",
    "factorial(2.5)",
    "[1, 2]",
])
def test_calculator_rejects_bad_input(expression: str) -> None:
    with pytest.raises(ValueError):
        evaluate(expression)
