"""
views/home_view.py — 홈 / 시작 화면

기능:
  - 등록된 시험 목록 (응시 기간 상태 표시, 응시 가능한 시험만 시작)
  - 섹션별 엑셀 업로드(섹션명, 제한 시간, 파일)로 시험 구성 후 등록 + 시작
"""

from __future__ import annotations

from typing import Any

import streamlit as st

import api.catalog as catalog
from exam_window.models.question_model import Test
from exam_window.services.exam_session import ExamSession
from exam_window.services.sheet_parser import REQUIRED_COLUMNS, build_test


AVAILABILITY_LABELS = {
    "upcoming": "🕒 응시 예정",
    "active": "🟢 응시 가능",
    "expired": "⚪ 응시 종료",
}


def catalog_entries() -> list[dict[str, Any]]:
    """홈 화면에 보여줄 시험 목록. 샘플 시험이 없으면 먼저 등록한다."""
    catalog.seed_sample()
    return catalog.list_tests()


def format_window(entry: dict[str, Any]) -> str:
    start, end = entry.get("startDateTime"), entry.get("endDateTime")
    if not start and not end:
        return "기간 제한 없음"
    return f"{start or '…'} ~ {end or '…'}"


def _start_exam(test: Test) -> None:
    """세션 초기화 후 exam 페이지로 이동."""
    previous: ExamSession | None = st.session_state.get("exam")
    if previous is not None:
        previous.close()
    st.session_state.exam = ExamSession(test)
    st.session_state.confirm_submit = False
    st.session_state.pop("calc_history", None)
    st.session_state.page = "exam"
    st.rerun()


def _render_upload() -> None:
    st.markdown("#### 엑셀로 시험 만들기")
    st.caption(f"필수 열: {', '.join(REQUIRED_COLUMNS)}")

    name = st.text_input("시험명", key="upload_name")
    section_count = st.number_input("섹션 수", min_value=1, max_value=10, value=1, step=1)
    marks = st.number_input("문제당 배점", min_value=0.5, value=1.0, step=0.5)
    negative = st.number_input("오답 감점 비율", min_value=0.0, value=0.0, step=0.25)
    calculator = st.checkbox("계산기 허용", key="upload_calculator")

    sections = []
    for idx in range(int(section_count)):
        c1, c2, c3 = st.columns([2, 1, 3])
        with c1:
            section_name = st.text_input("섹션명", key=f"sec_name_{idx}")
        with c2:
            duration = st.text_input("시간(분)", key=f"sec_dur_{idx}")
        with c3:
            upload = st.file_uploader("엑셀 파일", type=["xlsx"], key=f"sec_file_{idx}")
        sections.append((section_name, duration, upload))

    if st.button("업로드한 시험 등록 후 시작", type="primary"):
        if not name.strip() or any(not (n.strip() and d.strip() and f) for n, d, f in sections):
            st.error("시험명과 모든 섹션의 이름, 시간, 파일을 입력해 주세요.")
            return
        try:
            test = build_test(
                name.strip(),
                [(n.strip(), d.strip(), f.getvalue()) for n, d, f in sections],
                marksPerQuestion=marks,
                negativeMarking=negative,
                calculatorEnabled=calculator,
            )
            catalog.add_test(test)
        except ValueError as e:
            st.error(str(e))
            return
        _start_exam(test)


def _render_catalog() -> None:
    st.markdown("#### 시험 목록")
    for entry in catalog_entries():
        status = entry["status"]
        with st.container(border=True):
            c1, c2 = st.columns([3, 1])
            with c1:
                st.markdown(f"**{entry['name']}** · {AVAILABILITY_LABELS[status]}")
                sections = ", ".join(
                    f"{s['sectionName']} ({s['questionCount']}문제 / {s['duration']}분)"
                    for s in entry["sections"]
                )
                st.caption(f"{sections} · {format_window(entry)}")
            with c2:
                clicked = st.button(
                    "시작",
                    key=f"start_{entry['name']}",
                    type="primary",
                    disabled=status != "active",
                    use_container_width=True,
                )
            if clicked:
                test = catalog.get_test(entry["name"])
                # 목록을 그린 뒤 기간이 끝났을 수 있으므로 다시 확인
                if test is None or test.availability() != "active":
                    st.error("지금은 응시할 수 없는 시험입니다.")
                    return
                _start_exam(test)


def render() -> None:
    """홈 화면 렌더링."""
    _, col, _ = st.columns([0.8, 2.5, 0.8])

    with col:
        st.markdown("## 📝 온라인 모의고사")
        st.markdown(
            "섹션마다 제한 시간이 있으며, 시간이 끝나면 다음 섹션으로 자동 이동합니다. "
            "마지막 섹션이 끝나면 자동 제출됩니다."
        )

        _render_catalog()

        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
        _render_upload()
