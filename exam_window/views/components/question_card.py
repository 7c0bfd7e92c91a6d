"""
views/components/question_card.py

현재 문제를 카드 형태로 렌더링하고 보기 선택을 세션에 반영하는 컴포넌트.
같은 보기를 다시 누르면 선택이 해제된다.
"""

from __future__ import annotations

import streamlit as st

from config import OPTION_LETTERS
from exam_window.services.exam_session import ExamSession


def render(exam: ExamSession) -> None:
    section = exam.navigator.current_section
    question = exam.navigator.current_question
    selected = exam.answers.get_answer(question.id)

    # ── 문제 헤더 ──────────────────────────────────────────────────────────
    flag = " 🚩" if exam.progress.is_flagged(question.id) else ""
    st.markdown(
        f"""
        <div style="display:flex; align-items:center; gap:10px; margin-bottom:12px;">
            <span class="question-number-badge">문제 {exam.question_index + 1} / {len(section.questions)}{flag}</span>
            <span style="font-size:0.8rem; color:#9ca3af;">{section.section_name}</span>
        </div>
        """,
        unsafe_allow_html=True,
    )

    # ── 문제 본문 ──────────────────────────────────────────────────────────
    st.markdown(f'<div class="question-card">{question.question_text}</div>', unsafe_allow_html=True)
    if question.question_image:
        st.image(question.question_image)

    # ── 보기 선택 ─────────────────────────────────────────────────────────
    for letter, option in zip(OPTION_LETTERS, question.options):
        is_selected = bool(selected) and selected == option.text
        label = f"{'✔ ' if is_selected else ''}{letter}. {option.text}"
        if st.button(
            label,
            key=f"opt_{question.id}_{letter}",
            type="primary" if is_selected else "secondary",
            disabled=not exam.accepts_input,
            use_container_width=True,
        ):
            exam.select(option.text)
            st.rerun()
        if option.image:
            st.image(option.image, width=240)
