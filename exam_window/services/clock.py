"""
services/clock.py

타이머가 참조하는 시계. 경과 시간은 콜백 호출 횟수가 아니라
타임스탬프 차이로 계산하므로, 시계만 교체하면 테스트에서 시간을 조작할 수 있다.
"""

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """단조 증가하는 현재 시각 (초)."""
        ...


class SystemClock:
    """time.monotonic() 기반 실제 시계."""

    def now(self) -> float:
        return time.monotonic()
