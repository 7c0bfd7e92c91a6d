"""
services/exam_service.py

시험 채점 및 결과 분석 비즈니스 로직.
순수 Python 함수로 구성 — UI 코드, 전역 상태 변경 없음.

채점 규칙:
  - 저장(saved)된 문제만 채점한다. 저장하지 않은 선택은 미응답.
  - 정답 보기 = correctAnswer 문자(A~D) 위치의 보기 텍스트.
  - 비교는 앞뒤 공백 제거 + 대소문자 무시.
  - 빈 답으로 저장한 문제는 attempted에 포함되지만 정답/오답 어느 쪽도 아니다.
"""

import math
from typing import Dict, List

from exam_window.models.question_model import Question
from exam_window.models.session_state import Submission


def _normalize(text: str) -> str:
    return (text or "").strip().lower()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_correct(question: Question, user_answer: str) -> bool:
    return bool(user_answer) and _normalize(user_answer) == _normalize(question.correct_option_text)


def calculate_section_results(submission: Submission) -> List[Dict[str, object]]:
    """
    섹션별 결과를 계산하여 반환한다.

    Returns:
        [{"section": str, "total": int, "attempted": int, "correct": int,
          "incorrect": int, "unanswered": int, "accuracy": int,
          "performance": int}, ...]
        시험의 섹션 순서 유지.
    """
    negative = submission.test.negative_marking
    results = []

    for section in submission.test.sections:
        saved_flags = submission.progress.get(section.section_name, [])
        total = len(section.questions)
        attempted = correct = incorrect = 0

        for idx, q in enumerate(section.questions):
            if idx >= len(saved_flags) or not saved_flags[idx]:
                continue
            attempted += 1
            user_answer = submission.answers.get(q.id, "")
            if is_correct(q, user_answer):
                correct += 1
            elif _normalize(user_answer):
                incorrect += 1

        results.append({
            "section": section.section_name,
            "total": total,
            "attempted": attempted,
            "correct": correct,
            "incorrect": incorrect,
            "unanswered": total - attempted,
            "accuracy": _round_half_up(correct / attempted * 100) if attempted else 0,
            "performance": _round_half_up((correct - incorrect * negative) / total * 100) if total else 0,
        })
    return results


def get_performance_rating(accuracy: float) -> str:
    """
    정확도(%)에 따른 등급.

    85 이상 Excellent / 70 이상 Good / 50 이상 Average / 그 외 Needs Improvement
    """
    if accuracy >= 85:
        return "Excellent"
    if accuracy >= 70:
        return "Good"
    if accuracy >= 50:
        return "Average"
    return "Needs Improvement"


def calculate_results(submission: Submission) -> Dict[str, object]:
    """
    제출 스냅샷 전체를 채점한다.

    점수 계산:
        정답 1개당 +marksPerQuestion,
        오답 1개당 -marksPerQuestion × negativeMarking,
        미응답/빈 답 저장은 0점.

    Returns:
        {"overall": {...}, "sections": [...]}
    """
    test = submission.test
    sections = calculate_section_results(submission)
    marks = test.marks_per_question
    negative = test.negative_marking

    total = sum(s["total"] for s in sections)
    correct = sum(s["correct"] for s in sections)
    incorrect = sum(s["incorrect"] for s in sections)
    unanswered = sum(s["unanswered"] for s in sections)
    accuracy = _round_half_up(correct / total * 100) if total else 0

    overall = {
        "test_name": test.name,
        "total": total,
        "attempted": submission.attempted,
        "correct": correct,
        "incorrect": incorrect,
        "unanswered": unanswered,
        "total_score": round(correct * marks - incorrect * marks * negative, 2),
        "max_score": round(total * marks, 2),
        "accuracy": accuracy,
        "performance": _round_half_up((correct - incorrect * negative) / total * 100) if total else 0,
        "rating": get_performance_rating(accuracy),
        "auto_submitted": submission.auto_submitted,
    }
    return {"overall": overall, "sections": sections}


def review_items(submission: Submission) -> List[Dict[str, object]]:
    """
    문제별 리뷰 목록 (오답 노트용). 시험 순서 유지.
    """
    items: List[Dict[str, object]] = []
    for section in submission.test.sections:
        saved_flags = submission.progress.get(section.section_name, [])
        for idx, q in enumerate(section.questions):
            saved = idx < len(saved_flags) and saved_flags[idx]
            user_answer = submission.answers.get(q.id, "") if saved else ""
            items.append({
                "section": section.section_name,
                "id": q.id,
                "question": q.question_text,
                "user_answer": user_answer,
                "correct_answer": q.correct_option_text,
                "explanation": q.explanation,
                "is_correct": is_correct(q, user_answer),
            })
    return items
