"""
views/exam_view.py — 시험 풀기 화면

레이아웃:
  - st.sidebar : 섹션 타이머 + 문제 번호 진행 패널 + 계산기(허용 시) + 최종 제출
  - 메인 영역  : 섹션 탭 + 현재 문제 카드 + 이전/저장/다음/플래그

상태 관리:
  - st.session_state.exam (ExamSession) 하나가 모든 응시 상태를 가진다.
"""

from __future__ import annotations

import streamlit as st

from exam_window.models.session_state import SubmitReason
from exam_window.services.exam_session import ExamSession
from exam_window.views.components import calculator as calc
from exam_window.views.components import question_card as qcard
from exam_window.views.components import sidebar as nav
from exam_window.views.components import timer as tmr


def _go_to_result(exam: ExamSession) -> None:
    exam.submit(SubmitReason.MANUAL)
    st.session_state.confirm_submit = False
    st.session_state.page = "result"
    st.rerun()


def _render_submit(exam: ExamSession) -> None:
    unanswered = exam.test.total_questions - exam.attempted_count()
    if unanswered > 0:
        st.markdown(
            f"<p style='font-size:0.8rem; color:#f59e0b; margin-bottom:8px;'>"
            f"⚠️ 저장하지 않은 문제: {unanswered}개</p>",
            unsafe_allow_html=True,
        )

    if st.button("최종 제출", key="submit_sidebar", type="primary"):
        st.session_state.confirm_submit = True
        st.rerun()

    if st.session_state.get("confirm_submit"):
        st.warning("제출하면 더 이상 답안을 수정할 수 없습니다. 제출하시겠습니까?")
        col_yes, col_no = st.columns(2)
        with col_yes:
            if st.button("제출", key="confirm_yes", type="primary"):
                _go_to_result(exam)
        with col_no:
            if st.button("취소", key="confirm_no"):
                st.session_state.confirm_submit = False
                st.rerun()


def _render_section_tabs(exam: ExamSession) -> None:
    cols = st.columns(len(exam.test.sections))
    for idx, (col, section) in enumerate(zip(cols, exam.test.sections)):
        with col:
            if st.button(
                section.section_name,
                key=f"section_{idx}",
                type="primary" if idx == exam.section_index else "secondary",
                disabled=not exam.accepts_input,
                use_container_width=True,
            ):
                exam.jump_to_section(idx)
                st.rerun()


def _render_navigation(exam: ExamSession) -> None:
    disabled = not exam.accepts_input
    prev_col, save_col, flag_col, next_col, save_next_col = st.columns(5)

    with prev_col:
        if st.button("← 이전", key="prev_btn", disabled=disabled or exam.navigator.is_first_position,
                     use_container_width=True):
            exam.previous()
            st.rerun()

    with save_col:
        if st.button("저장", key="save_btn", disabled=disabled, use_container_width=True):
            exam.save()
            st.toast("답안이 저장되었습니다.")
            st.rerun()

    with flag_col:
        flagged = exam.progress.is_flagged(exam.navigator.current_question.id)
        if st.button("플래그 해제" if flagged else "🚩 플래그", key="flag_btn", disabled=disabled,
                     use_container_width=True):
            exam.toggle_flag()
            st.rerun()

    with next_col:
        if st.button("다음 →", key="next_btn", disabled=disabled or exam.navigator.is_last_position,
                     use_container_width=True):
            if exam.has_unsaved_answer():
                st.session_state.unsaved_warning = True
            else:
                exam.next()
            st.rerun()

    with save_next_col:
        if st.button("저장 후 다음", key="save_next_btn", type="primary", disabled=disabled,
                     use_container_width=True):
            exam.save_and_next()
            st.rerun()

    if st.session_state.pop("unsaved_warning", False):
        st.warning("답안을 저장한 후 이동하거나 '저장 후 다음'을 사용하세요.")


def render() -> None:
    """시험 화면 렌더링."""

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    exam: ExamSession | None = st.session_state.get("exam")
    if exam is None:
        st.warning("시험 정보가 없습니다. 홈 화면으로 돌아가세요.")
        if st.button("홈으로", type="primary"):
            st.session_state.page = "home"
            st.rerun()
        return

    if exam.is_finished:
        st.session_state.page = "result"
        st.rerun()

    # ── 사이드바 ───────────────────────────────────────────────────────────
    with st.sidebar:
        tmr.render(exam)
        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
        nav.render(exam)
        if exam.test.calculator_enabled:
            st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
            calc.render()
        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
        _render_submit(exam)

    # ── 메인 영역 ──────────────────────────────────────────────────────────
    st.markdown(
        f"<h2 style='font-size:1.3rem; font-weight:700; color:#1a1a2e;'>{exam.test.name}</h2>",
        unsafe_allow_html=True,
    )
    _render_section_tabs(exam)
    st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)

    qcard.render(exam)
    st.markdown("<br>", unsafe_allow_html=True)
    _render_navigation(exam)
