"""
api/app.py — FastAPI 앱 인스턴스 + 세션 미들웨어
"""

import logging
import threading
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import SESSION_TTL
from api.routes import router
import api.catalog as catalog
import api.session as session

SESSION_COOKIE = "cbt_session"


def create_app() -> FastAPI:
    app = FastAPI(title="Exam Window CBT", docs_url=None, redoc_url=None)

    # CORS (모바일 브라우저 등 다양한 출처 허용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 세션 미들웨어: 쿠키에서 세션 ID를 읽고, 없으면 새로 발급
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=SESSION_TTL,
        )
        return response

    app.include_router(router)

    # 샘플 시험은 항상 목록에 노출
    catalog.seed_sample()

    # 만료 세션 주기적 정리 (5분마다)
    def _cleanup_loop():
        while True:
            time.sleep(300)
            removed = session.cleanup_expired()
            if removed:
                logging.getLogger(__name__).info(f"만료 세션 {removed}개 정리")

    t = threading.Thread(target=_cleanup_loop, daemon=True)
    t.start()

    return app
