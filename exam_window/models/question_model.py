from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from config import OPTION_LETTERS


def parse_datetime(value: str) -> datetime:
    """
    ISO 8601 문자열을 시간대 정보가 있는 datetime 으로 변환한다.
    끝의 'Z' 는 UTC, 시간대가 없는 값은 서버 로컬 시각으로 본다.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


class Option(BaseModel):
    """보기 하나 (텍스트 + 선택적 이미지)"""
    text: str = Field(default="", description="보기 텍스트")
    image: Optional[str] = Field(default=None, description="보기 이미지 URL")

    model_config = {"frozen": True}


class Question(BaseModel):
    """
    객관식 4지선다 문제 모델
    Pydantic v2 적용. 입력은 API의 camelCase 키를 그대로 받는다.
    """
    id: str = Field(
        ...,
        min_length=1,
        description="문제 식별자 (시험 전체에서 고유)"
    )
    question_text: str = Field(
        ...,
        alias="question",
        description="발문/문제 내용"
    )
    question_image: Optional[str] = Field(
        None,
        alias="questionImage",
        description="문제 이미지 URL"
    )
    options: List[Option] = Field(
        ...,
        description="보기 리스트 (정확히 4개, 순서 고정)"
    )
    correct_answer: str = Field(
        ...,
        alias="correctAnswer",
        description="정답 보기 문자 (A|B|C|D)"
    )
    explanation: Optional[str] = Field(None, description="해설")
    explanation_image: Optional[str] = Field(
        None,
        alias="explanationImage",
        description="해설 이미지 URL"
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """엑셀/JSON 원본은 숫자 id를 쓰므로 문자열로 통일한다."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v)) if float(v).is_integer() else str(v)
        return v

    @field_validator('options')
    @classmethod
    def validate_options_length(cls, v: List[Option]) -> List[Option]:
        """
        검증 로직 1: 보기는 정확히 4개여야 한다.
        """
        if len(v) != len(OPTION_LETTERS):
            raise ValueError(f"보기(options)는 정확히 {len(OPTION_LETTERS)}개여야 합니다. (입력: {len(v)}개)")
        return v

    @field_validator('correct_answer', mode='before')
    @classmethod
    def normalize_correct_answer(cls, v: Any) -> Any:
        """
        검증 로직 2: 정답은 A~D 중 하나 (대소문자 무시).
        """
        if not isinstance(v, str):
            return v
        letter = v.strip().upper()
        if letter not in OPTION_LETTERS:
            raise ValueError(f"정답('{v}')은 {'/'.join(OPTION_LETTERS)} 중 하나여야 합니다.")
        return letter

    @property
    def correct_option_text(self) -> str:
        return self.options[OPTION_LETTERS.index(self.correct_answer)].text


class Section(BaseModel):
    """독립적으로 시간이 측정되는 문제 묶음"""
    section_name: str = Field(
        ...,
        alias="sectionName",
        min_length=1,
        description="섹션명 (시험 내 고유)"
    )
    duration: str = Field(
        ...,
        description="제한 시간 (분 단위 숫자 문자열)"
    )
    questions: List[Question] = Field(
        ...,
        min_length=1,
        description="문제 리스트 (최소 1개, 순서 고정)"
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator('duration', mode='before')
    @classmethod
    def validate_duration(cls, v: Any) -> str:
        if isinstance(v, bool):
            raise ValueError("제한 시간은 숫자여야 합니다.")
        text = str(v).strip()
        try:
            minutes = float(text)
        except ValueError:
            raise ValueError(f"제한 시간('{v}')은 분 단위 숫자여야 합니다.") from None
        if minutes < 0:
            raise ValueError("제한 시간은 음수일 수 없습니다.")
        return text

    @property
    def duration_seconds(self) -> int:
        """분 단위 문자열 → 초 (소수점 이하 분은 버림)"""
        return int(float(self.duration)) * 60


class Test(BaseModel):
    """
    섹션별 제한 시간이 있는 시험 정의.
    세션 동안 변경되지 않는다.
    """
    name: str = Field(..., min_length=1, description="시험명")
    start_date_time: Optional[str] = Field(
        None,
        alias="startDateTime",
        description="응시 가능 시작 시각 (ISO 8601, 없으면 제한 없음)"
    )
    end_date_time: Optional[str] = Field(
        None,
        alias="endDateTime",
        description="응시 가능 종료 시각 (ISO 8601, 없으면 제한 없음)"
    )
    marks_per_question: float = Field(1.0, alias="marksPerQuestion", gt=0)
    negative_marking: float = Field(0.0, alias="negativeMarking", ge=0)
    calculator_enabled: bool = Field(False, alias="calculatorEnabled")
    sections: List[Section] = Field(
        ...,
        min_length=1,
        description="섹션 리스트 (최소 1개, 순서 고정)"
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode='after')
    def validate_unique_keys(self) -> 'Test':
        """
        섹션명은 시험 내에서, 문제 id는 시험 전체에서 고유해야 한다.
        """
        names = [s.section_name for s in self.sections]
        if len(names) != len(set(names)):
            raise ValueError(f"섹션명이 중복되었습니다: {names}")

        seen: set = set()
        for section in self.sections:
            for q in section.questions:
                if q.id in seen:
                    raise ValueError(f"문제 id('{q.id}')가 중복되었습니다.")
                seen.add(q.id)
        return self

    @model_validator(mode='after')
    def validate_window(self) -> 'Test':
        """응시 기간: 형식이 올바르고 시작이 종료보다 앞서야 한다."""
        bounds = []
        for label, value in (("startDateTime", self.start_date_time), ("endDateTime", self.end_date_time)):
            if value is None:
                bounds.append(None)
                continue
            try:
                bounds.append(parse_datetime(value))
            except ValueError:
                raise ValueError(f"{label} 형식이 올바르지 않습니다: '{value}'")
        start, end = bounds
        if start is not None and end is not None and start >= end:
            raise ValueError("startDateTime 은 endDateTime 보다 앞서야 합니다.")
        return self

    def availability(self, now: Optional[datetime] = None) -> str:
        """
        응시 가능 여부.

        Returns:
            "upcoming" (시작 전), "active" (응시 가능), "expired" (종료 후).
            기간이 지정되지 않은 쪽은 제한이 없는 것으로 본다.
        """
        now = now or datetime.now(timezone.utc)
        if self.start_date_time and now < parse_datetime(self.start_date_time):
            return "upcoming"
        if self.end_date_time and now > parse_datetime(self.end_date_time):
            return "expired"
        return "active"

    @property
    def total_questions(self) -> int:
        return sum(len(s.questions) for s in self.sections)

    def question_index(self) -> Dict[str, Question]:
        return {q.id: q for s in self.sections for q in s.questions}

    def public_dict(self) -> Dict[str, Any]:
        """응시자에게 내려주는 형태 (정답/해설 제외)."""
        return self.model_dump(
            by_alias=True,
            exclude={
                "sections": {
                    "__all__": {
                        "questions": {
                            "__all__": {"correct_answer", "explanation", "explanation_image"}
                        }
                    }
                }
            },
        )
