"""
api/routes.py — FastAPI 엔드포인트
"""

import asyncio
from typing import Any, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel, ValidationError

import config
import api.catalog as catalog
import api.session as session
from api.sample_tests import SAMPLE_TEST

# Core Logic Imports (Relative paths handled by package structure)
from exam_window.models.question_model import Test
from exam_window.models.session_state import SubmitReason
from exam_window.services.exam_session import ExamSession
from exam_window.services.exam_service import calculate_results, review_items
from exam_window.services.sheet_parser import build_test

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class StartTestBody(BaseModel):
    name: str

class SelectBody(BaseModel):
    option: str

class JumpBody(BaseModel):
    index: int = 0


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _sid(request: Request) -> str:
    return request.state.session_id


def _start(request: Request, test: Test) -> dict:
    sid = _sid(request)
    session.reset(sid)

    def _on_submit(submission) -> None:
        session.put(sid, "results", {
            **calculate_results(submission),
            "review": review_items(submission),
        })

    exam = ExamSession(test, on_submit=_on_submit)
    session.put(sid, "exam_session", exam)
    return exam.state_dict()


def _exam(request: Request) -> ExamSession:
    """현재 세션의 시험을 가져오고, 경과 시간을 먼저 반영한다."""
    exam: Optional[ExamSession] = session.get(_sid(request), "exam_session")
    if exam is None:
        raise HTTPException(status_code=404, detail="시험 세션이 없습니다.")
    exam.tick()
    return exam


def _apply(request: Request, action) -> dict:
    exam = _exam(request)
    if not exam.accepts_input:
        raise HTTPException(status_code=409, detail="시험 시간이 종료되었거나 이미 제출된 시험입니다.")
    action(exam)
    return exam.state_dict()


def _validation_detail(e: ValidationError) -> str:
    first = e.errors()[0]
    loc = ".".join(str(p) for p in first["loc"])
    return f"{loc}: {first['msg']}" if loc else first["msg"]


# ── 시험 목록 ────────────────────────────────────────────────────────────────

@router.get("/api/tests")
async def list_tests():
    return catalog.list_tests()


@router.get("/api/tests/{name}")
async def get_test(name: str):
    test = catalog.get_test(name)
    if test is None:
        raise HTTPException(status_code=404, detail="시험을 찾을 수 없습니다.")
    return test.public_dict()


@router.post("/api/tests", status_code=201)
async def create_test(body: dict[str, Any]):
    try:
        test = Test.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_detail(e))
    try:
        catalog.add_test(test)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "name": test.name, "total": test.total_questions}


@router.post("/api/tests/import", status_code=201)
async def import_test(
    name: str = Form(...),
    section_names: list[str] = Form(...),
    durations: list[str] = Form(...),
    files: list[UploadFile] = File(...),
    start_date_time: Optional[str] = Form(None),
    end_date_time: Optional[str] = Form(None),
    marks_per_question: float = Form(1.0),
    negative_marking: float = Form(0.0),
    calculator_enabled: bool = Form(False),
):
    if not (len(section_names) == len(durations) == len(files)):
        raise HTTPException(status_code=400, detail="섹션명, 제한 시간, 파일 개수가 일치하지 않습니다.")

    sections = []
    for section_name, duration, upload in zip(section_names, durations, files):
        file_bytes = await upload.read()
        if len(file_bytes) > config.MAX_SHEET_SIZE:
            raise HTTPException(status_code=413, detail="엑셀 파일이 너무 큽니다 (최대 10MB).")
        sections.append((section_name.strip(), duration.strip(), file_bytes))

    try:
        test = await asyncio.to_thread(
            build_test, name.strip(), sections,
            startDateTime=start_date_time,
            endDateTime=end_date_time,
            marksPerQuestion=marks_per_question,
            negativeMarking=negative_marking,
            calculatorEnabled=calculator_enabled,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        catalog.add_test(test)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "name": test.name, "total": test.total_questions}


# ── 응시 ─────────────────────────────────────────────────────────────────────

@router.post("/api/start-test")
async def start_test(body: StartTestBody, request: Request):
    test = catalog.get_test(body.name)
    if test is None:
        raise HTTPException(status_code=404, detail="시험을 찾을 수 없습니다.")
    status = test.availability()
    if status == "upcoming":
        raise HTTPException(status_code=409, detail="아직 응시 기간이 시작되지 않았습니다.")
    if status == "expired":
        raise HTTPException(status_code=409, detail="응시 기간이 종료된 시험입니다.")
    return _start(request, test)


@router.post("/api/start-sample-test")
async def start_sample_test(request: Request):
    return _start(request, SAMPLE_TEST)


@router.get("/api/session-state")
async def get_session_state(request: Request):
    return _exam(request).state_dict()


@router.post("/api/select")
async def select_option(body: SelectBody, request: Request):
    return _apply(request, lambda exam: exam.select(body.option))


@router.post("/api/save")
async def save_answer(request: Request):
    return _apply(request, lambda exam: exam.save())


@router.post("/api/next")
async def next_question(request: Request):
    exam = _exam(request)
    if exam.accepts_input and exam.has_unsaved_answer():
        raise HTTPException(
            status_code=409,
            detail="답안을 저장한 후 이동하거나 '저장 후 다음'을 사용하세요.",
        )
    return _apply(request, lambda exam: exam.next())


@router.post("/api/save-next")
async def save_and_next(request: Request):
    return _apply(request, lambda exam: exam.save_and_next())


@router.post("/api/previous")
async def previous_question(request: Request):
    return _apply(request, lambda exam: exam.previous())


@router.post("/api/flag")
async def flag_question(request: Request):
    return _apply(request, lambda exam: exam.toggle_flag())


@router.post("/api/jump")
async def jump_to_question(body: JumpBody, request: Request):
    return _apply(request, lambda exam: exam.jump_to(body.index))


@router.post("/api/jump-section")
async def jump_to_section(body: JumpBody, request: Request):
    return _apply(request, lambda exam: exam.jump_to_section(body.index))


@router.post("/api/submit")
async def submit_test(request: Request):
    exam = _exam(request)
    submission = exam.submit(SubmitReason.MANUAL)
    if submission is None:
        raise HTTPException(status_code=409, detail="이미 종료된 세션입니다.")
    return {
        "ok": True,
        "phase": exam.phase.value,
        "attempted": submission.attempted,
        "total": submission.total,
        "autoSubmitted": submission.auto_submitted,
    }


@router.get("/api/results")
async def get_results(request: Request):
    exam = _exam(request)
    if not exam.is_finished:
        raise HTTPException(status_code=400, detail="시험이 아직 제출되지 않았습니다.")
    return session.get(_sid(request), "results")


@router.post("/api/reset")
async def reset_session(request: Request):
    session.reset(_sid(request))
    return {"ok": True}
