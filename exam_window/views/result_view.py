"""
views/result_view.py — 시험 결과 화면

표시 내용:
  - 총점 / 만점, 정확도, 등급
  - 자동 제출 여부 안내
  - 섹션별 결과 표
  - 문제별 리뷰 (내 답 / 정답 / 해설)
  - 홈으로 버튼
"""

from __future__ import annotations

import streamlit as st

from exam_window.services.exam_session import ExamSession
from exam_window.services.exam_service import calculate_results, review_items


def _go_home() -> None:
    """홈 화면으로 이동하며 세션 정리."""
    exam: ExamSession | None = st.session_state.pop("exam", None)
    if exam is not None:
        exam.close()
    st.session_state.pop("confirm_submit", None)
    st.session_state.page = "home"
    st.rerun()


def render() -> None:
    """결과 화면 렌더링."""

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    exam: ExamSession | None = st.session_state.get("exam")
    if exam is None or exam.submission is None:
        st.warning("결과 정보가 없습니다.")
        if st.button("홈으로", type="primary"):
            _go_home()
        return

    results = calculate_results(exam.submission)
    overall = results["overall"]

    if overall["auto_submitted"]:
        st.info("⏰ 제한 시간이 끝나 자동 제출되었습니다.")

    st.markdown(f"## {overall['test_name']} 결과")

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("점수", f"{overall['total_score']} / {overall['max_score']}")
    c2.metric("정확도", f"{overall['accuracy']}%")
    c3.metric("저장한 문제", f"{overall['attempted']} / {overall['total']}")
    c4.metric("등급", overall["rating"])

    st.markdown(
        f"정답 **{overall['correct']}** · 오답 **{overall['incorrect']}** · "
        f"미응답 **{overall['unanswered']}**"
    )

    # ── 섹션별 결과 ───────────────────────────────────────────────────────
    st.markdown("### 섹션별 결과")
    st.dataframe(results["sections"], use_container_width=True, hide_index=True)

    # ── 리뷰 ──────────────────────────────────────────────────────────────
    st.markdown("### 문제 리뷰")
    for idx, item in enumerate(review_items(exam.submission), start=1):
        mark = "✅" if item["is_correct"] else "❌"
        with st.expander(f"{mark} {idx}. [{item['section']}] {item['question']}"):
            st.markdown(f"- 내 답: {item['user_answer'] or '(미응답)'}")
            st.markdown(f"- 정답: **{item['correct_answer']}**")
            if item["explanation"]:
                st.caption(item["explanation"])

    if st.button("홈으로", type="primary"):
        _go_home()
