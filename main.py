"""
main.py — CBT 데스크톱 앱 진입점
"""

import os
import socket
import subprocess
import sys
import time
import threading
import logging
import traceback

# ── 패키지 경로 설정 (반드시 최상단) ──────────────────────────────────────────
# 실행 경로를 BASE_DIR로 설정하고 exam_window를 모듈 경로에 추가합니다.
_BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

from config import BASE_DIR, LOG_FILE, DEFAULT_HOST, DEFAULT_PORT, STREAMLIT_APP, STREAMLIT_PORT

logger = logging.getLogger(__name__)

# 서버가 0.0.0.0 에 바인딩돼도 접속 확인과 브라우저는 로컬 주소를 쓴다
_LOCAL_HOST = "127.0.0.1"


# ── 로깅 설정 ────────────────────────────────────────────────────────────────

def setup_logging() -> None:
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s [%(levelname)s] %(message)s',
            handlers=[
                logging.FileHandler(LOG_FILE, encoding='utf-8'),
                logging.StreamHandler(sys.stdout)
            ]
        )
    except PermissionError:
        # 로그 파일 점유 시 콘솔 출력만 사용
        logging.basicConfig(level=logging.INFO)


# ── 서버 및 네트워크 유틸 ───────────────────────────────────────────────────

def _find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((DEFAULT_HOST, 0))
        return s.getsockname()[1]

def _wait_for_server(port: int, timeout: float = 15.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            with socket.create_connection((_LOCAL_HOST, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False

def _open_browser(url: str) -> None:
    candidates = [
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files\Microsoft\Edge\Application\msedge.exe",
        r"C:\Program Files (x86)\Microsoft\Edge\Application\msedge.exe",
    ]
    flags = [f"--app={url}", "--no-first-run", "--window-size=1280,800"]

    for path in candidates:
        if os.path.exists(path):
            logger.info(f"브라우저 실행 시도: {path}")
            subprocess.Popen([path] + flags)
            return

    import webbrowser
    webbrowser.open(url)

def serve_api_in_background() -> int:
    """REST API 를 데몬 스레드로 띄우고 포트를 반환한다."""
    port = DEFAULT_PORT or _find_free_port()
    threading.Thread(target=_start_server, args=(port,), daemon=True).start()
    return port

def _start_server(port: int) -> None:
    try:
        import uvicorn
        from api.app import create_app
        logger.info(f"Uvicorn 서버 시작 - Port: {port}")
        app = create_app()
        uvicorn.run(app, host=DEFAULT_HOST, port=port, log_level="error")
    except Exception:
        logger.error(f"서버 오류 발생:\n{traceback.format_exc()}")

def _start_streamlit(port: int) -> subprocess.Popen:
    """응시 화면(Streamlit)을 별도 프로세스로 띄운다. 브라우저는 직접 연다."""
    cmd = [
        sys.executable, "-m", "streamlit", "run", STREAMLIT_APP,
        "--server.port", str(port),
        "--server.address", DEFAULT_HOST,
        "--server.headless", "true",
        "--browser.gatherUsageStats", "false",
    ]
    logger.info(f"Streamlit 화면 시작 - Port: {port}")
    return subprocess.Popen(cmd, cwd=BASE_DIR)

# ── 메인 실행 ────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    setup_logging()
    logger.info("=== Exam Window CBT Started ===")
    os.chdir(BASE_DIR)

    # 응시 화면. REST API 는 같은 시험 목록을 쓰도록 Streamlit 프로세스 안에서 뜬다.
    ui_port = STREAMLIT_PORT or _find_free_port()
    ui_process = _start_streamlit(ui_port)

    if _wait_for_server(ui_port, timeout=30.0):
        logger.info(f"화면 준비 완료 (Port: {ui_port}). 브라우저를 엽니다.")
        _open_browser(f"http://{_LOCAL_HOST}:{ui_port}")

        # Streamlit 프로세스가 끝날 때까지 메인 스레드 유지
        try:
            ui_process.wait()
        except KeyboardInterrupt:
            logger.info("사용자에 의해 종료되었습니다.")
        finally:
            if ui_process.poll() is None:
                ui_process.terminate()
    else:
        logger.error("서버 시작 제한 시간을 초과했습니다. 작업 관리자에서 기존 프로세스를 종료해 보세요.")
        ui_process.terminate()
        sys.exit(1)
