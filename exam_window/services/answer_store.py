"""
services/answer_store.py

문제별로 현재 선택된 보기 텍스트를 보관하는 답안지.
보기 목록과의 대조 검증은 하지 않는다 (네비게이션 컨트롤러가 렌더링 시 담당).
"""

from typing import Dict, Iterable


class AnswerStore:
    def __init__(self, question_ids: Iterable[str] = ()):
        # 미응답은 빈 문자열
        self._answers: Dict[str, str] = {qid: "" for qid in question_ids}

    def set_answer(self, question_id: str, option_text: str) -> str:
        """
        같은 보기를 다시 선택하면 선택이 해제된다 (토글).

        Returns:
            반영 후 저장된 답 (해제 시 빈 문자열).
        """
        if self._answers.get(question_id, "") == option_text:
            self._answers[question_id] = ""
        else:
            self._answers[question_id] = option_text
        return self._answers[question_id]

    def get_answer(self, question_id: str) -> str:
        return self._answers.get(question_id, "")

    def has_answer(self, question_id: str) -> bool:
        return bool(self._answers.get(question_id))

    def snapshot(self) -> Dict[str, str]:
        return dict(self._answers)
