import pytest

from conftest import FakeClock, make_test
from exam_window.models.session_state import QuestionStatus, SessionPhase, SubmitReason
from exam_window.services.exam_session import ExamSession
from exam_window.services.section_timer import SectionTimer


def _session(test, clock, **kwargs) -> ExamSession:
    return ExamSession(test, clock=clock, time_up_countdown=5, **kwargs)


def test_rejects_unvalidated_test(clock: FakeClock) -> None:
    with pytest.raises(TypeError):
        ExamSession({"name": "raw", "sections": []}, clock=clock)


def test_section_expiry_moves_to_next_section(two_section_test, clock: FakeClock) -> None:
    exam = _session(two_section_test, clock)
    exam.jump_to(2)
    assert exam.section_time_remaining == 60

    for _ in range(60):
        clock.advance(1)
        exam.tick()

    assert exam.section_index == 1
    assert exam.question_index == 0
    assert exam.section_time_remaining == 120
    assert exam.phase == SessionPhase.RUNNING


def test_last_section_expiry_auto_submits_after_countdown(clock: FakeClock) -> None:
    submissions = []
    exam = _session(make_test(("Only", "0", 1)), clock, on_submit=submissions.append)

    exam.tick()
    assert exam.phase == SessionPhase.TIME_UP_PENDING
    assert exam.time_up_remaining == 5
    assert not exam.accepts_input

    clock.advance(4)
    exam.tick()
    assert exam.phase == SessionPhase.TIME_UP_PENDING
    assert submissions == []

    clock.advance(1)
    exam.tick()
    assert exam.phase == SessionPhase.AUTO_SUBMITTED
    assert len(submissions) == 1
    assert submissions[0].auto_submitted is True

    clock.advance(10)
    exam.tick()
    exam.submit(SubmitReason.AUTO)
    assert len(submissions) == 1


def test_expiry_signal_ignored_when_not_running(clock: FakeClock) -> None:
    exam = _session(make_test(("Only", "0", 1)), clock)
    exam.tick()
    started = exam.time_up_remaining
    clock.advance(2)
    exam.on_timer_expired()
    assert exam.phase == SessionPhase.TIME_UP_PENDING
    assert exam.time_up_remaining == started - 2


def test_manual_submit_is_idempotent(two_section_test, clock: FakeClock) -> None:
    submissions = []
    exam = _session(two_section_test, clock, on_submit=submissions.append)
    exam.select("S1-0-A")
    exam.save_and_next()

    first = exam.submit()
    second = exam.submit()
    assert first is second
    assert exam.phase == SessionPhase.MANUALLY_SUBMITTED
    assert submissions == [first]
    assert first.auto_submitted is False
    assert first.attempted == 1
    assert first.total == 5
    assert first.answers["S1-0"] == "S1-0-A"
    assert first.progress == {"S1": [True, False, False], "S2": [False, False]}


def test_manual_submit_wins_over_pending_auto_submit(clock: FakeClock) -> None:
    exam = _session(make_test(("Only", "0", 1)), clock)
    exam.tick()
    exam.submit(SubmitReason.MANUAL)
    clock.advance(10)
    exam.tick()
    assert exam.phase == SessionPhase.MANUALLY_SUBMITTED
    assert exam.submission.auto_submitted is False


def test_submitted_session_rejects_mutation(two_section_test, clock: FakeClock) -> None:
    exam = _session(two_section_test, clock)
    exam.submit()
    assert exam.select("S1-0-A") is False
    assert exam.save() is False
    assert exam.next() is False
    assert exam.answers.get_answer("S1-0") == ""
    assert exam.question_index == 0


def test_attempted_counts_saved_empty_answers(clock: FakeClock) -> None:
    exam = _session(make_test(("S1", "5", 3)), clock)
    exam.save()            # 빈 답으로 저장
    exam.jump_to(2)
    exam.select("S1-2-C")
    exam.save()
    exam.jump_to(1)
    exam.select("S1-1-B")  # 저장하지 않은 선택
    submission = exam.submit()
    assert submission.progress == {"S1": [True, False, True]}
    assert submission.attempted == 2


def test_navigating_to_another_section_resets_its_timer(two_section_test, clock: FakeClock) -> None:
    exam = _session(two_section_test, clock)
    clock.advance(30)
    exam.tick()
    assert exam.section_time_remaining == 30
    exam.jump_to_section(1)
    assert exam.section_time_remaining == 120


def test_question_statuses_for_active_section(two_section_test, clock: FakeClock) -> None:
    exam = _session(two_section_test, clock)
    exam.select("S1-0-A")
    exam.save_and_next()
    exam.toggle_flag()
    exam.next()
    assert exam.question_statuses() == [
        QuestionStatus.ANSWERED,
        QuestionStatus.FLAGGED,
        QuestionStatus.CURRENT,
    ]


def test_close_cancels_timer(two_section_test, clock: FakeClock) -> None:
    exam = _session(two_section_test, clock)
    exam.close()
    clock.advance(1000)
    exam.tick()
    assert exam.section_index == 0
    assert exam.phase == SessionPhase.RUNNING
    assert not exam.accepts_input


def test_closed_session_does_not_submit(two_section_test, clock: FakeClock) -> None:
    submissions = []
    exam = _session(two_section_test, clock, on_submit=submissions.append)
    exam.close()

    assert exam.submit() is None
    assert exam.submit(SubmitReason.AUTO) is None
    assert submissions == []
    assert exam.submission is None
    assert exam.phase == SessionPhase.RUNNING


def test_position_stays_in_bounds(two_section_test, clock: FakeClock) -> None:
    exam = _session(two_section_test, clock)
    ops = [exam.next, exam.previous, exam.save_and_next, exam.toggle_flag,
           lambda: exam.jump_to(7), lambda: exam.jump_to_section(-3), exam.next, exam.next]
    for _ in range(3):
        for op in ops:
            op()
            section = two_section_test.sections[exam.section_index]
            assert 0 <= exam.section_index < len(two_section_test.sections)
            assert 0 <= exam.question_index < len(section.questions)


def test_state_dict_hides_correct_answer(two_section_test, clock: FakeClock) -> None:
    exam = _session(two_section_test, clock)
    state = exam.state_dict()
    assert state["phase"] == "running"
    assert state["section_name"] == "S1"
    assert state["section_time_remaining"] == 60
    assert "correctAnswer" not in state["question"]
    assert state["statuses"][0] == "current"
    assert state["total"] == 5


def test_late_tick_carries_elapsed_time_across_sections(two_section_test, clock: FakeClock) -> None:
    # S1 은 60초, S2 는 120초: S1 만료 60초, S2 만료 180초, 자동 제출 185초
    submissions = []
    exam = _session(two_section_test, clock, on_submit=submissions.append)

    clock.advance(200)
    exam.tick()

    assert exam.phase == SessionPhase.AUTO_SUBMITTED
    assert len(submissions) == 1
    assert submissions[0].auto_submitted is True


def test_late_tick_counts_next_section_from_expiry(two_section_test, clock: FakeClock) -> None:
    exam = _session(two_section_test, clock)

    clock.advance(90)
    exam.tick()
    assert exam.section_index == 1
    assert exam.section_time_remaining == 90

    clock.advance(92)
    exam.tick()
    assert exam.phase == SessionPhase.TIME_UP_PENDING
    assert exam.time_up_remaining == 3


def test_timer_start_at_given_instant(clock: FakeClock) -> None:
    timer = SectionTimer(clock)
    timer.start(60, started_at=clock.now() - 45)
    assert timer.remaining == 15
    assert timer.expires_at == clock.now() + 15
