"""
models/session_state.py

시험 세션 상태 열거형과 최종 제출 스냅샷 모델.
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
UI 코드 없음.
"""

import time
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field

from exam_window.models.question_model import Test


class SessionPhase(str, Enum):
    """
    세션 상태 머신의 단계.

    RUNNING            → 응시 중 (활성 섹션 타이머 동작)
    TIME_UP_PENDING    → 마지막 섹션 시간 종료, 자동 제출 카운트다운 중
    AUTO_SUBMITTED     → 카운트다운 종료 후 자동 제출됨 (종료 상태)
    MANUALLY_SUBMITTED → 응시자가 직접 제출함 (종료 상태)
    """
    RUNNING = "running"
    TIME_UP_PENDING = "time_up_pending"
    AUTO_SUBMITTED = "auto_submitted"
    MANUALLY_SUBMITTED = "manually_submitted"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionPhase.AUTO_SUBMITTED, SessionPhase.MANUALLY_SUBMITTED)


class SubmitReason(str, Enum):
    MANUAL = "manual"
    AUTO = "auto"


class QuestionStatus(str, Enum):
    """진행 패널에 표시되는 문제 상태 (우선순위 순)"""
    CURRENT = "current"
    FLAGGED = "flagged"
    ANSWERED = "answered"
    SAVED = "saved"
    VISITED = "visited"
    NOT_VIEWED = "notViewed"


class Submission(BaseModel):
    """
    채점기로 넘어가는 최종 제출 스냅샷.

    Attributes:
        test:           응시한 시험 정의 (보기 순서 그대로).
        answers:        {question.id: 선택한 보기 텍스트}. 미응답은 빈 문자열.
        progress:       {sectionName: [저장 여부, ...]} 문제 순서대로.
        attempted:      저장된 문제 수 (빈 답 저장 포함).
        total:          전체 문제 수.
        auto_submitted: 시간 종료로 자동 제출되었는지 여부.
        submitted_at:   제출 시각 (Unix timestamp).
    """

    test: Test
    answers: Dict[str, str] = Field(default_factory=dict)
    progress: Dict[str, List[bool]] = Field(default_factory=dict)
    attempted: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    auto_submitted: bool = Field(default=False, alias="autoSubmitted")
    submitted_at: float = Field(
        default_factory=time.time,
        description="제출 시각 (Unix timestamp, time.time() 기준)"
    )

    model_config = {"populate_by_name": True, "frozen": True}
