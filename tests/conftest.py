from typing import Any

import pytest

from exam_window.models import question_model


class FakeClock:
    """수동으로 시간을 진행시키는 시계."""

    def __init__(self, start: float = 1000.0):
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def make_question(qid: str, answer: str = "A") -> dict[str, Any]:
    return {
        "id": qid,
        "question": f"Question {qid}?",
        "options": [{"text": f"{qid}-{letter}"} for letter in "ABCD"],
        "correctAnswer": answer,
        "explanation": f"Because {answer}.",
    }


def make_test_payload(*sections: tuple[str, str, int], **settings: Any) -> dict[str, Any]:
    """(섹션명, 분, 문제 수) 목록으로 시험 JSON을 만든다."""
    return {
        "name": settings.pop("name", "Mock Test"),
        "sections": [
            {
                "sectionName": name,
                "duration": duration,
                "questions": [make_question(f"{name}-{i}") for i in range(count)],
            }
            for name, duration, count in sections
        ],
        **settings,
    }


def make_test(*sections: tuple[str, str, int], **settings: Any) -> question_model.Test:
    return question_model.Test.model_validate(make_test_payload(*sections, **settings))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def two_section_test() -> question_model.Test:
    return make_test(("S1", "1", 3), ("S2", "2", 2))
