"""
streamlit_app.py — Streamlit 응시 화면 진입점

실행: streamlit run streamlit_app.py  (또는 python main.py)
REST API 도 이 프로세스에서 함께 떠서 같은 시험 목록을 공유한다.
"""

import streamlit as st

import api.catalog as catalog
from main import serve_api_in_background, setup_logging
from exam_window.views import exam_view, home_view, result_view

_PAGES = {
    "home": home_view.render,
    "exam": exam_view.render,
    "result": result_view.render,
}


@st.cache_resource
def _start_api() -> int:
    # 프로세스당 한 번만 실행된다
    catalog.seed_sample()
    return serve_api_in_background()


setup_logging()
st.set_page_config(page_title="Exam Window CBT", page_icon="📝", layout="wide")
_start_api()

if "page" not in st.session_state:
    st.session_state.page = "home"

_PAGES.get(st.session_state.page, home_view.render)()
