"""
views/components/timer.py

활성 섹션의 남은 시간을 렌더링하는 컴포넌트.
1초마다 재실행되는 프래그먼트에서 ExamSession.tick()을 호출하여
섹션 전환 / 자동 제출이 사용자 조작 없이도 반영되도록 한다.
"""

from typing import Optional

import streamlit as st

from config import LOW_TIME_WARNING
from exam_window.services.exam_session import ExamSession


def format_time(seconds: Optional[int]) -> str:
    """초 → 'm:ss' (None은 '00:00')."""
    if seconds is None:
        return "00:00"
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}:{secs:02d}"


@st.fragment(run_every=1)
def render(exam: ExamSession) -> None:
    before = (exam.section_index, exam.phase)
    exam.tick()
    # 섹션이 바뀌었거나 시간 종료/제출 상태가 되면 전체 화면 갱신
    if (exam.section_index, exam.phase) != before:
        st.rerun()

    remaining = exam.section_time_remaining
    is_warning = remaining < LOW_TIME_WARNING

    css_class = "timer-display timer-warning" if is_warning else "timer-display"
    icon = "⚠️ " if is_warning else "⏱ "

    st.markdown(
        f'<div class="{css_class}">{icon}{exam.navigator.current_section.section_name} '
        f'· {format_time(remaining)}</div>',
        unsafe_allow_html=True,
    )

    countdown = exam.time_up_remaining
    if countdown is not None:
        st.error(f"⏰ 시험 시간이 종료되었습니다. {countdown}초 후 자동 제출됩니다.")
