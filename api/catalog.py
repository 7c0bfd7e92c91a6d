"""
api/catalog.py — 인메모리 시험 목록 (시험명 → Test)

관리자가 등록한 시험을 보관한다. 프로세스 재시작 시 초기화된다.
"""

import threading
from typing import Any

from api.sample_tests import SAMPLE_TEST
from exam_window.models.question_model import Test

_lock = threading.Lock()
_tests: dict[str, Test] = {}


def add_test(test: Test) -> None:
    """시험 등록. 같은 이름이 이미 있으면 ValueError."""
    with _lock:
        if test.name in _tests:
            raise ValueError(f"이미 존재하는 시험명입니다: {test.name}")
        _tests[test.name] = test


def get_test(name: str) -> Test | None:
    with _lock:
        return _tests.get(name)


def list_tests() -> list[dict[str, Any]]:
    """등록 순서대로 시험 요약 목록 (status: upcoming / active / expired)."""
    with _lock:
        tests = list(_tests.values())
    return [
        {
            "name": t.name,
            "startDateTime": t.start_date_time,
            "endDateTime": t.end_date_time,
            "sections": [
                {"sectionName": s.section_name, "duration": s.duration, "questionCount": len(s.questions)}
                for s in t.sections
            ],
            "totalQuestions": t.total_questions,
            "calculatorEnabled": t.calculator_enabled,
            "status": t.availability(),
        }
        for t in tests
    ]


def seed_sample() -> None:
    """샘플 시험이 없으면 등록한다. API 서버와 Streamlit 화면이 함께 쓴다."""
    with _lock:
        _tests.setdefault(SAMPLE_TEST.name, SAMPLE_TEST)


def clear() -> None:
    with _lock:
        _tests.clear()
