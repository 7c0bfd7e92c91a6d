"""
services/sheet_parser.py

엑셀 시험지 import 서비스.
Public API:
  - parse_sheet(file_bytes, id_prefix) -> List[Question] : 섹션 하나 분량의 문제 파싱
  - build_test(name, sections, **settings) -> Test       : 섹션 파일들을 묶어 Test 생성

엑셀 형식 (첫 번째 시트, 1행 = 헤더):
  필수: question, optionA, optionB, optionC, optionD, correctAnswer
  선택: questionImage, optionAimg ~ optionDimg, explanation, explanationImage
"""

import logging
from io import BytesIO
from typing import Any, Dict, List, Sequence, Tuple

from openpyxl import load_workbook
from pydantic import ValidationError

from exam_window.models.question_model import Question, Section, Test

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("question", "optionA", "optionB", "optionC", "optionD", "correctAnswer")
_OPTION_KEYS = (("optionA", "optionAimg"), ("optionB", "optionBimg"),
                ("optionC", "optionCimg"), ("optionD", "optionDimg"))


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    # 숫자 보기(예: 42)가 "42.0"으로 바뀌지 않도록
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _read_rows(file_bytes: bytes) -> List[Tuple[int, Dict[str, str]]]:
    try:
        wb = load_workbook(filename=BytesIO(file_bytes), read_only=True, data_only=True)
    except Exception as e:
        logger.error(f"parse_sheet: 엑셀 열기 실패 - {e}")
        raise ValueError("엑셀 파일을 열 수 없습니다. .xlsx 형식인지 확인해 주세요.") from e

    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            raise ValueError("엑셀 파일이 비어 있습니다.")
        headers = [_cell_text(h) for h in header_row]

        missing = [c for c in REQUIRED_COLUMNS if c not in headers]
        if missing:
            raise ValueError(f"필수 열이 없습니다: {', '.join(missing)}")

        records = []
        for row_number, values in enumerate(rows, start=2):
            record = {h: _cell_text(v) for h, v in zip(headers, values) if h}
            if not any(record.values()):
                continue
            records.append((row_number, record))
        return records
    finally:
        wb.close()


def parse_sheet(file_bytes: bytes, id_prefix: str = "q") -> List[Question]:
    """
    엑셀 한 파일을 문제 리스트로 변환한다.

    Args:
        file_bytes: .xlsx 파일 내용
        id_prefix:  문제 id 접두사. 섹션마다 다르게 주어야 시험 전체에서 id가 고유하다.

    Raises:
        ValueError: 파일이 비었거나, 필수 열이 없거나, 잘못된 행이 있는 경우.
    """
    if not file_bytes:
        raise ValueError("엑셀 파일이 비어 있습니다.")

    records = _read_rows(file_bytes)
    if not records:
        raise ValueError("문제 행이 없습니다.")

    questions: List[Question] = []
    for row_number, row in records:
        try:
            questions.append(Question(
                id=f"{id_prefix}-{row_number}",
                question=row.get("question", ""),
                questionImage=row.get("questionImage") or None,
                options=[
                    {"text": row.get(text_key, ""), "image": row.get(img_key) or None}
                    for text_key, img_key in _OPTION_KEYS
                ],
                correctAnswer=row.get("correctAnswer", ""),
                explanation=row.get("explanation") or None,
                explanationImage=row.get("explanationImage") or None,
            ))
        except ValidationError as e:
            first = e.errors()[0]
            raise ValueError(f"{row_number}행 오류: {first['msg']}") from e

    logger.info(f"parse_sheet: {len(questions)}개 문제 추출 완료 (prefix={id_prefix})")
    return questions


def build_test(
    name: str,
    sections: Sequence[Tuple[str, str, bytes]],
    **settings: Any,
) -> Test:
    """
    (섹션명, 제한 시간(분), 엑셀 bytes) 목록으로 Test를 조립한다.

    settings 는 Test 필드(startDateTime, marksPerQuestion 등)를 그대로 전달한다.

    Raises:
        ValueError: 엑셀 파싱 실패 또는 Test 검증 실패.
    """
    built = []
    for idx, (section_name, duration, file_bytes) in enumerate(sections, start=1):
        questions = parse_sheet(file_bytes, id_prefix=f"s{idx}")
        built.append({"sectionName": section_name, "duration": duration, "questions": questions})

    try:
        return Test(name=name, sections=built, **settings)
    except ValidationError as e:
        first = e.errors()[0]
        raise ValueError(f"시험 정보 오류: {first['msg']}") from e
