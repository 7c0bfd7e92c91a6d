"""
views/components/sidebar.py

활성 섹션의 문제 번호 그리드 (진행 패널).
각 번호를 클릭하면 해당 문제로 바로 이동한다.
"""

from __future__ import annotations

import streamlit as st

from exam_window.models.session_state import QuestionStatus
from exam_window.services.exam_session import ExamSession

STATUS_COLORS = {
    QuestionStatus.CURRENT: "#2196f3",
    QuestionStatus.ANSWERED: "#4caf50",
    QuestionStatus.SAVED: "#ff9800",
    QuestionStatus.FLAGGED: "#9c27b0",
    QuestionStatus.VISITED: "#bdbdbd",
    QuestionStatus.NOT_VIEWED: "#ffffff",
}

STATUS_LABELS = {
    QuestionStatus.CURRENT: "현재",
    QuestionStatus.ANSWERED: "답함",
    QuestionStatus.SAVED: "빈 답 저장",
    QuestionStatus.FLAGGED: "플래그",
    QuestionStatus.VISITED: "방문",
    QuestionStatus.NOT_VIEWED: "미열람",
}

STATUS_ICONS = {
    QuestionStatus.CURRENT: "🔵",
    QuestionStatus.ANSWERED: "🟢",
    QuestionStatus.SAVED: "🟠",
    QuestionStatus.FLAGGED: "🟣",
    QuestionStatus.VISITED: "⚪",
    QuestionStatus.NOT_VIEWED: "▫️",
}


def render(exam: ExamSession) -> None:
    """
    사이드바에 진행 현황, 문제 번호 버튼 그리드, 범례를 렌더링한다.
    """
    total = exam.test.total_questions
    attempted = exam.attempted_count()

    # ── 진행 현황 ──────────────────────────────────────────────────────────
    st.markdown(
        f"""
        <div style="display:flex; justify-content:space-between;
                    font-size:0.8rem; color:#6b7280; margin-bottom:4px;">
            <span>저장한 문제</span>
            <span><b>{attempted}</b> / {total}</span>
        </div>
        """,
        unsafe_allow_html=True,
    )
    st.progress(attempted / total if total > 0 else 0)

    # ── 문제 번호 그리드 (5열) ─────────────────────────────────────────────
    statuses = exam.question_statuses()
    cols_per_row = 5
    disabled = not exam.accepts_input

    for row_start in range(0, len(statuses), cols_per_row):
        cols = st.columns(cols_per_row)
        for col_idx, status in enumerate(statuses[row_start : row_start + cols_per_row]):
            q_idx = row_start + col_idx
            with cols[col_idx]:
                if st.button(
                    f"{STATUS_ICONS[status]}{q_idx + 1}",
                    key=f"nav_{exam.section_index}_{q_idx}",
                    help=STATUS_LABELS[status],
                    disabled=disabled,
                ):
                    exam.jump_to(q_idx)
                    st.rerun()

    # ── 범례 ──────────────────────────────────────────────────────────────
    legend = "".join(
        f'<span style="display:inline-block; width:10px; height:10px; background:{STATUS_COLORS[s]};'
        f' border:1px solid #d1d9e6; border-radius:2px; margin-right:5px;"></span>{STATUS_LABELS[s]}<br>'
        for s in QuestionStatus
    )
    st.markdown(
        f'<div style="margin-top:16px; font-size:0.75rem; color:#9ca3af; line-height:1.9;">{legend}</div>',
        unsafe_allow_html=True,
    )
