"""
services/progress_tracker.py

문제별 저장(saved) / 방문(visited) / 플래그(flagged) 여부를 기록한다.

규칙:
  - saved 는 섹션별로 문제 순서대로 고정 길이 리스트에 기록
  - 플래그를 토글하면 해당 문제는 즉시 저장 처리된다 (flag ⇒ save)
  - 저장된 문제는 항상 방문한 것으로 간주한다
"""

from typing import Dict, List

from exam_window.models.question_model import Test
from exam_window.models.session_state import QuestionStatus


class ProgressTracker:
    def __init__(self, test: Test):
        self._saved: Dict[str, List[bool]] = {
            s.section_name: [False] * len(s.questions) for s in test.sections
        }
        self._visited: Dict[str, bool] = {}
        self._flagged: Dict[str, bool] = {}
        # flag ⇒ save 처리를 위해 문제 id → (섹션명, 인덱스)
        self._positions: Dict[str, tuple] = {
            q.id: (s.section_name, idx)
            for s in test.sections
            for idx, q in enumerate(s.questions)
        }
        self._ids: Dict[tuple, str] = {pos: qid for qid, pos in self._positions.items()}

    # ── 변경 ────────────────────────────────────────────────────────────────

    def mark_saved(self, section_name: str, question_index: int) -> None:
        self._saved[section_name][question_index] = True
        self._visited[self._ids[(section_name, question_index)]] = True

    def mark_visited(self, question_id: str) -> None:
        self._visited[question_id] = True

    def toggle_flag(self, question_id: str) -> bool:
        """
        플래그를 뒤집고, 해당 문제를 저장 + 방문 처리한다.

        Returns:
            토글 후 플래그 상태.
        """
        flagged = not self._flagged.get(question_id, False)
        self._flagged[question_id] = flagged
        section_name, idx = self._positions[question_id]
        self.mark_saved(section_name, idx)
        self.mark_visited(question_id)
        return flagged

    # ── 조회 ────────────────────────────────────────────────────────────────

    def is_saved(self, section_name: str, question_index: int) -> bool:
        return self._saved[section_name][question_index]

    def is_visited(self, question_id: str) -> bool:
        return self._visited.get(question_id, False)

    def is_flagged(self, question_id: str) -> bool:
        return self._flagged.get(question_id, False)

    def status(
        self,
        question_id: str,
        question_index: int,
        section_name: str,
        is_current: bool,
        has_answer: bool,
    ) -> QuestionStatus:
        """진행 패널 상태. 위에서부터 처음 일치하는 항목이 결정된다."""
        saved = self.is_saved(section_name, question_index)
        if is_current:
            return QuestionStatus.CURRENT
        if self.is_flagged(question_id):
            return QuestionStatus.FLAGGED
        if saved and has_answer:
            return QuestionStatus.ANSWERED
        if saved:
            return QuestionStatus.SAVED
        if self.is_visited(question_id):
            return QuestionStatus.VISITED
        return QuestionStatus.NOT_VIEWED

    def attempted_count(self) -> int:
        """저장된 문제 수 합계 (빈 답으로 저장한 문제 포함)."""
        return sum(sum(flags) for flags in self._saved.values())

    def flagged_count(self) -> int:
        return sum(1 for f in self._flagged.values() if f)

    def snapshot(self) -> Dict[str, List[bool]]:
        return {name: list(flags) for name, flags in self._saved.items()}

    def flagged_snapshot(self) -> Dict[str, bool]:
        return dict(self._flagged)
