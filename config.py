import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
STREAMLIT_APP = os.path.join(BASE_DIR, "streamlit_app.py")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
SESSION_TTL = int(os.getenv("SESSION_TTL", "3600"))   # 1시간
STREAMLIT_PORT = int(os.getenv("STREAMLIT_PORT", "0"))   # 0 이면 빈 포트 자동 선택

# 시험 진행 설정
TIME_UP_COUNTDOWN = 5       # 마지막 섹션 종료 후 자동 제출까지 대기 (초)
LOW_TIME_WARNING = 60       # 남은 시간 경고 기준 (초)
OPTION_LETTERS = ("A", "B", "C", "D")

# 엑셀 업로드 설정
MAX_SHEET_SIZE = 10 * 1024 * 1024   # 10 MB
