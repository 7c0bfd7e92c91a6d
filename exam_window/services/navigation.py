"""
services/navigation.py

현재 (섹션, 문제) 위치를 관리하고 저장/이동/플래그 조작을 적용한다.

불변 조건:
  0 <= section_index < len(sections)
  0 <= question_index < len(sections[section_index].questions)

"저장하지 않은 답이 있으면 다음으로 넘어가지 않는다"는 정책은
호출 측(UI/API)이 has_unsaved_answer()로 확인한다. 컨트롤러는 거부하지 않는다.
"""

import logging
from typing import Callable, Optional

from exam_window.models.question_model import Question, Section, Test
from exam_window.services.answer_store import AnswerStore
from exam_window.services.progress_tracker import ProgressTracker

logger = logging.getLogger(__name__)


class NavigationController:
    def __init__(
        self,
        test: Test,
        answers: AnswerStore,
        progress: ProgressTracker,
        on_section_change: Optional[Callable[[int], None]] = None,
        on_saved: Optional[Callable[[str], None]] = None,
    ):
        self._test = test
        self._answers = answers
        self._progress = progress
        self._on_section_change = on_section_change
        self._on_saved = on_saved
        self.section_index = 0
        self.question_index = 0
        self._progress.mark_visited(self.current_question.id)

    # ── 현재 위치 ───────────────────────────────────────────────────────────

    @property
    def current_section(self) -> Section:
        return self._test.sections[self.section_index]

    @property
    def current_question(self) -> Question:
        return self.current_section.questions[self.question_index]

    @property
    def is_first_position(self) -> bool:
        return self.section_index == 0 and self.question_index == 0

    @property
    def is_last_position(self) -> bool:
        return (
            self.section_index == len(self._test.sections) - 1
            and self.question_index == len(self.current_section.questions) - 1
        )

    def has_unsaved_answer(self) -> bool:
        """선택한 답이 있지만 아직 저장하지 않은 상태인지."""
        q = self.current_question
        return self._answers.has_answer(q.id) and not self._progress.is_saved(
            self.current_section.section_name, self.question_index
        )

    # ── 조작 ────────────────────────────────────────────────────────────────

    def select(self, option_text: str) -> str:
        """현재 문제의 보기를 선택(또는 같은 보기 재선택 시 해제)한다."""
        return self._answers.set_answer(self.current_question.id, option_text)

    def save_current(self) -> str:
        """현재 문제를 저장 + 방문 처리하고 문제 id를 반환한다."""
        qid = self.current_question.id
        self._progress.mark_saved(self.current_section.section_name, self.question_index)
        self._progress.mark_visited(qid)
        if self._on_saved:
            self._on_saved(qid)
        return qid

    def toggle_flag(self) -> bool:
        return self._progress.toggle_flag(self.current_question.id)

    def advance(self) -> None:
        """
        다음 문제로 이동 (저장 없이).
        섹션 마지막 문제면 다음 섹션 첫 문제로, 시험 마지막 문제면 그대로 둔다.
        """
        self._progress.mark_visited(self.current_question.id)
        if self.question_index < len(self.current_section.questions) - 1:
            self._move(self.section_index, self.question_index + 1)
        elif self.section_index < len(self._test.sections) - 1:
            self._move(self.section_index + 1, 0)

    def save_and_advance(self) -> str:
        qid = self.save_current()
        self.advance()
        return qid

    def retreat(self) -> None:
        """이전 문제로 이동. 섹션 첫 문제면 이전 섹션의 마지막 문제로."""
        self._progress.mark_visited(self.current_question.id)
        if self.question_index > 0:
            self._move(self.section_index, self.question_index - 1)
        elif self.section_index > 0:
            prev = self._test.sections[self.section_index - 1]
            self._move(self.section_index - 1, len(prev.questions) - 1)

    def jump_to(self, question_index: int) -> bool:
        """
        활성 섹션 내 문제로 바로 이동 (진행 패널 그리드).
        이전 문제는 방문 처리하지 않는다. 범위 밖 요청은 무시한다.
        """
        if not 0 <= question_index < len(self.current_section.questions):
            logger.debug(f"jump_to 범위 초과 무시: {question_index}")
            return False
        self._move(self.section_index, question_index)
        return True

    def jump_to_section(self, section_index: int) -> bool:
        """섹션을 바꾸고 해당 섹션의 첫 문제로 이동한다. 범위 밖 요청은 무시한다."""
        if not 0 <= section_index < len(self._test.sections):
            logger.debug(f"jump_to_section 범위 초과 무시: {section_index}")
            return False
        self._move(section_index, 0)
        return True

    # ── 내부 ────────────────────────────────────────────────────────────────

    def _move(self, section_index: int, question_index: int) -> None:
        section_changed = section_index != self.section_index
        self.section_index = section_index
        self.question_index = question_index
        # 화면에 표시되는 문제는 방문 처리
        self._progress.mark_visited(self.current_question.id)
        if section_changed and self._on_section_change:
            self._on_section_change(section_index)
