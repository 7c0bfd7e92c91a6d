"""
services/section_timer.py

활성 섹션의 남은 시간을 추적하는 카운트다운 타이머.

남은 시간은 (시작 시각 + 경과 시간) 기준으로 계산한다.
tick() 호출 간격이 밀리거나(백그라운드 탭, 느린 요청) 건너뛰어도
실제 경과 시간만큼 정확히 줄어든다.
"""

import logging
import math
from typing import Callable, Optional

from exam_window.services.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class SectionTimer:
    """
    섹션 카운트다운 타이머.

    만료 시 on_expired 콜백을 정확히 한 번 호출하고 스스로 멈춘다.
    만료 후 tick()은 아무 일도 하지 않는다.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        on_expired: Optional[Callable[[], None]] = None,
    ):
        self._clock = clock or SystemClock()
        self._on_expired = on_expired
        self._duration = 0
        self._started_at: Optional[float] = None
        self._expired = False

    def start(self, duration_seconds: int, started_at: Optional[float] = None) -> None:
        """
        남은 시간을 duration_seconds로 설정하고 카운트다운을 시작한다.

        started_at 을 주면 그 시각부터 센다. 앞 섹션이 만료된 시각을
        넘기면 tick 이 늦게 들어와도 밀린 시간이 다음 섹션에서 빠진다.
        """
        self._duration = int(duration_seconds)
        self._started_at = self._clock.now() if started_at is None else started_at
        self._expired = False

    def reset(self, duration_seconds: int, started_at: Optional[float] = None) -> None:
        """섹션 전환 시 남은 시간과 만료 상태를 초기화한다."""
        self.start(duration_seconds, started_at)

    def cancel(self) -> None:
        """세션 종료 시 호출. 이후 tick()과 만료 콜백이 모두 무시된다."""
        self._started_at = None
        self._on_expired = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None and not self._expired

    @property
    def is_expired(self) -> bool:
        return self._expired

    @property
    def expires_at(self) -> Optional[float]:
        """시계 기준 만료 시각 (시작 전이거나 취소되면 None)."""
        if self._started_at is None:
            return None
        return self._started_at + max(0, self._duration)

    @property
    def remaining(self) -> int:
        """남은 시간 (초, 0 이상)."""
        if self._expired or self._started_at is None:
            return 0 if self._expired else max(0, self._duration)
        elapsed = self._clock.now() - self._started_at
        return max(0, self._duration - math.floor(elapsed))

    def tick(self) -> int:
        """
        경과 시간을 반영한다. 0에 도달하면 만료 신호를 한 번 보낸다.

        Returns:
            반영 후 남은 시간 (초).
        """
        if not self.is_running:
            return self.remaining

        remaining = self.remaining
        if remaining <= 0:
            self._expired = True
            logger.info(f"섹션 타이머 만료 (제한 {self._duration}초)")
            if self._on_expired:
                self._on_expired()
        return remaining
