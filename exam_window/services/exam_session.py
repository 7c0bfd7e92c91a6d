"""
services/exam_session.py

응시 세션 상태 머신.
섹션 타이머, 답안지, 진행 기록, 네비게이션을 하나로 묶어 UI/API에 노출한다.

상태 전이:
  RUNNING(i) ──섹션 시간 만료, 다음 섹션 있음──▶ RUNNING(i+1)   (타이머 재설정)
  RUNNING(i) ──마지막 섹션 시간 만료──────────▶ TIME_UP_PENDING (카운트다운)
  TIME_UP_PENDING ──카운트다운 종료──────────▶ AUTO_SUBMITTED
  RUNNING / TIME_UP_PENDING ──submit()───────▶ MANUALLY_SUBMITTED

호스트(요청 핸들러, Streamlit 프래그먼트 등)가 주기적으로 tick()을 호출한다.
남은 시간은 시계 기준으로 계산되므로 호출 간격은 정확할 필요가 없다.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Optional

from config import TIME_UP_COUNTDOWN
from exam_window.models.question_model import Test
from exam_window.models.session_state import (
    QuestionStatus, SessionPhase, Submission, SubmitReason,
)
from exam_window.services.answer_store import AnswerStore
from exam_window.services.clock import Clock, SystemClock
from exam_window.services.navigation import NavigationController
from exam_window.services.progress_tracker import ProgressTracker
from exam_window.services.section_timer import SectionTimer

logger = logging.getLogger(__name__)


class ExamSession:
    """
    한 응시자의 시험 세션.

    Args:
        test:              검증된 Test 모델 (섹션 ≥ 1, 섹션별 문제 ≥ 1).
        clock:             시계 (기본 SystemClock).
        time_up_countdown: 마지막 섹션 만료 후 자동 제출까지 대기 시간 (초).
        on_submit:         제출 시 정확히 한 번 호출되는 콜백 (채점기 연결).
    """

    def __init__(
        self,
        test: Test,
        clock: Optional[Clock] = None,
        time_up_countdown: int = TIME_UP_COUNTDOWN,
        on_submit: Optional[Callable[[Submission], None]] = None,
    ):
        if not isinstance(test, Test):
            raise TypeError("ExamSession은 검증된 Test 모델로만 생성할 수 있습니다.")

        self.test = test
        self._clock = clock or SystemClock()
        self._time_up_countdown = time_up_countdown
        self._on_submit = on_submit

        self.phase = SessionPhase.RUNNING
        self.submission: Optional[Submission] = None
        self.last_saved_id: Optional[str] = None
        self._time_up_started: Optional[float] = None
        # 시간 만료로 섹션이 넘어갈 때 다음 섹션 타이머의 시작 시각
        self._next_section_start: Optional[float] = None
        self._closed = False

        self.answers = AnswerStore(test.question_index().keys())
        self.progress = ProgressTracker(test)
        self.timer = SectionTimer(self._clock, on_expired=self.on_timer_expired)
        self.navigator = NavigationController(
            test,
            self.answers,
            self.progress,
            on_section_change=self._on_section_change,
            on_saved=self._on_saved,
        )
        self.timer.start(self.navigator.current_section.duration_seconds)
        logger.info(
            f"시험 세션 시작: '{test.name}' "
            f"({len(test.sections)}개 섹션, {test.total_questions}문제)"
        )

    # ── 상태 조회 ───────────────────────────────────────────────────────────

    @property
    def is_finished(self) -> bool:
        return self.phase.is_terminal

    @property
    def accepts_input(self) -> bool:
        """시간 종료 대기 중이거나 종료된 세션은 응답 변경을 받지 않는다."""
        return self.phase == SessionPhase.RUNNING and not self._closed

    @property
    def section_index(self) -> int:
        return self.navigator.section_index

    @property
    def question_index(self) -> int:
        return self.navigator.question_index

    @property
    def section_time_remaining(self) -> int:
        if self.phase != SessionPhase.RUNNING:
            return 0
        return self.timer.remaining

    @property
    def time_up_remaining(self) -> Optional[int]:
        """자동 제출까지 남은 시간 (TIME_UP_PENDING 상태가 아니면 None)."""
        if self.phase != SessionPhase.TIME_UP_PENDING or self._time_up_started is None:
            return None
        elapsed = self._clock.now() - self._time_up_started
        return max(0, self._time_up_countdown - math.floor(elapsed))

    def has_unsaved_answer(self) -> bool:
        return self.navigator.has_unsaved_answer()

    def attempted_count(self) -> int:
        return self.progress.attempted_count()

    def question_statuses(self) -> List[QuestionStatus]:
        """활성 섹션 문제들의 진행 패널 상태."""
        section = self.navigator.current_section
        return [
            self.progress.status(
                q.id, idx, section.section_name,
                is_current=idx == self.question_index,
                has_answer=self.answers.has_answer(q.id),
            )
            for idx, q in enumerate(section.questions)
        ]

    # ── 시간 ────────────────────────────────────────────────────────────────

    def tick(self) -> SessionPhase:
        """경과 시간을 반영한다. 필요하면 섹션 전환 또는 자동 제출이 일어난다."""
        if self._closed or self.is_finished:
            return self.phase

        # 호출 간격이 길면 그 사이 여러 섹션이 만료됐을 수 있다.
        # 섹션이 넘어가지 않을 때까지 반복한다.
        while self.phase == SessionPhase.RUNNING:
            section_before = self.section_index
            self.timer.tick()
            if self.section_index == section_before:
                break

        if self.phase == SessionPhase.TIME_UP_PENDING and self.time_up_remaining == 0:
            self.submit(SubmitReason.AUTO)
        return self.phase

    def on_timer_expired(self) -> None:
        """
        섹션 타이머 만료 처리.
        다음 섹션이 있으면 이동, 없으면 자동 제출 카운트다운에 들어간다.
        RUNNING 이외 상태에서 들어온 만료 신호는 무시한다.
        """
        if self.phase != SessionPhase.RUNNING or self._closed:
            return

        expired_at = self.timer.expires_at
        if expired_at is None:
            expired_at = self._clock.now()

        next_index = self.section_index + 1
        if next_index < len(self.test.sections):
            logger.info(
                f"섹션 시간 종료: '{self.navigator.current_section.section_name}' → "
                f"'{self.test.sections[next_index].section_name}'"
            )
            self._next_section_start = expired_at
            try:
                self.navigator.jump_to_section(next_index)
            finally:
                self._next_section_start = None
            return

        logger.info(f"마지막 섹션 시간 종료, {self._time_up_countdown}초 후 자동 제출")
        self.phase = SessionPhase.TIME_UP_PENDING
        self._time_up_started = expired_at

    # ── 응시자 조작 ─────────────────────────────────────────────────────────
    # 입력을 받지 않는 상태에서는 아무것도 바꾸지 않고 False를 반환한다.

    def select(self, option_text: str) -> bool:
        if not self.accepts_input:
            return False
        self.navigator.select(option_text)
        return True

    def save(self) -> bool:
        if not self.accepts_input:
            return False
        self.navigator.save_current()
        return True

    def next(self) -> bool:
        if not self.accepts_input:
            return False
        self.navigator.advance()
        return True

    def save_and_next(self) -> bool:
        if not self.accepts_input:
            return False
        self.navigator.save_and_advance()
        return True

    def previous(self) -> bool:
        if not self.accepts_input:
            return False
        self.navigator.retreat()
        return True

    def toggle_flag(self) -> bool:
        if not self.accepts_input:
            return False
        self.navigator.toggle_flag()
        return True

    def jump_to(self, question_index: int) -> bool:
        if not self.accepts_input:
            return False
        return self.navigator.jump_to(question_index)

    def jump_to_section(self, section_index: int) -> bool:
        if not self.accepts_input:
            return False
        return self.navigator.jump_to_section(section_index)

    # ── 제출 ────────────────────────────────────────────────────────────────

    def submit(self, reason: SubmitReason = SubmitReason.MANUAL) -> Optional[Submission]:
        """
        세션을 동결하고 최종 스냅샷을 만든다.
        이미 제출된 세션에서 다시 호출하면 기존 스냅샷을 그대로 반환한다.
        close() 된 세션은 제출하지 않고 None 을 반환한다.
        """
        if self.submission is not None:
            return self.submission
        if self._closed:
            logger.debug(f"폐기된 세션 제출 요청 무시: '{self.test.name}'")
            return None

        reason = SubmitReason(reason)
        auto = reason == SubmitReason.AUTO
        self.phase = SessionPhase.AUTO_SUBMITTED if auto else SessionPhase.MANUALLY_SUBMITTED
        self.timer.cancel()

        self.submission = Submission(
            test=self.test,
            answers=self.answers.snapshot(),
            progress=self.progress.snapshot(),
            attempted=self.progress.attempted_count(),
            total=self.test.total_questions,
            auto_submitted=auto,
        )
        logger.info(
            f"시험 제출 ({reason.value}): '{self.test.name}' "
            f"{self.submission.attempted}/{self.submission.total}문제 저장"
        )
        if self._on_submit:
            self._on_submit(self.submission)
        return self.submission

    def close(self) -> None:
        """세션 폐기. 타이머 구독을 해제해 이후 만료가 들어오지 않게 한다."""
        self._closed = True
        self.timer.cancel()

    # ── 직렬화 ──────────────────────────────────────────────────────────────

    def state_dict(self) -> Dict[str, Any]:
        """UI/API용 현재 상태. 정답과 해설은 포함하지 않는다."""
        section = self.navigator.current_section
        q = self.navigator.current_question
        return {
            "test_name": self.test.name,
            "phase": self.phase.value,
            "calculator_enabled": self.test.calculator_enabled,
            "section_index": self.section_index,
            "section_name": section.section_name,
            "section_names": [s.section_name for s in self.test.sections],
            "question_index": self.question_index,
            "section_question_count": len(section.questions),
            "question": {
                "id": q.id,
                "question": q.question_text,
                "questionImage": q.question_image,
                "options": [o.model_dump() for o in q.options],
            },
            "selected_answer": self.answers.get_answer(q.id),
            "is_saved": self.progress.is_saved(section.section_name, self.question_index),
            "is_flagged": self.progress.is_flagged(q.id),
            "is_last_question": self.navigator.is_last_position,
            "section_time_remaining": self.section_time_remaining,
            "time_up_remaining": self.time_up_remaining,
            "statuses": [s.value for s in self.question_statuses()],
            "attempted": self.attempted_count(),
            "flagged": self.progress.flagged_count(),
            "total": self.test.total_questions,
        }

    # ── 내부 콜백 ───────────────────────────────────────────────────────────

    def _on_section_change(self, section_index: int) -> None:
        # 섹션이 활성화될 때마다 해당 섹션의 제한 시간으로 재설정
        self.timer.reset(
            self.test.sections[section_index].duration_seconds,
            started_at=self._next_section_start,
        )

    def _on_saved(self, question_id: str) -> None:
        self.last_saved_id = question_id
