import pytest

from exam_window.services.answer_store import AnswerStore
from exam_window.services.navigation import NavigationController
from exam_window.services.progress_tracker import ProgressTracker


@pytest.fixture
def nav_parts(two_section_test):
    answers = AnswerStore(two_section_test.question_index().keys())
    progress = ProgressTracker(two_section_test)
    changes: list[int] = []
    saved: list[str] = []
    nav = NavigationController(
        two_section_test, answers, progress,
        on_section_change=changes.append,
        on_saved=saved.append,
    )
    return nav, answers, progress, changes, saved


def _assert_in_bounds(nav, test) -> None:
    assert 0 <= nav.section_index < len(test.sections)
    assert 0 <= nav.question_index < len(test.sections[nav.section_index].questions)


def test_first_question_is_visited_on_start(nav_parts, two_section_test) -> None:
    nav, _, progress, _, _ = nav_parts
    assert progress.is_visited(two_section_test.sections[0].questions[0].id)


def test_advance_crosses_section_boundary(nav_parts, two_section_test) -> None:
    nav, _, _, changes, _ = nav_parts
    nav.advance()
    nav.advance()
    assert (nav.section_index, nav.question_index) == (0, 2)
    nav.advance()
    assert (nav.section_index, nav.question_index) == (1, 0)
    assert changes == [1]


def test_advance_on_last_question_is_noop(nav_parts, two_section_test) -> None:
    nav, _, _, _, _ = nav_parts
    for _ in range(10):
        nav.advance()
        _assert_in_bounds(nav, two_section_test)
    assert nav.is_last_position
    assert (nav.section_index, nav.question_index) == (1, 1)


def test_retreat_goes_to_last_question_of_previous_section(nav_parts) -> None:
    nav, _, _, changes, _ = nav_parts
    nav.jump_to_section(1)
    nav.retreat()
    assert (nav.section_index, nav.question_index) == (0, 2)
    assert changes == [1, 0]


def test_retreat_on_first_question_is_noop(nav_parts) -> None:
    nav, _, _, changes, _ = nav_parts
    nav.retreat()
    assert (nav.section_index, nav.question_index) == (0, 0)
    assert changes == []


def test_save_current_marks_saved_and_notifies(nav_parts, two_section_test) -> None:
    nav, _, progress, _, saved = nav_parts
    qid = nav.save_current()
    assert qid == two_section_test.sections[0].questions[0].id
    assert progress.is_saved("S1", 0)
    assert saved == [qid]


def test_save_and_advance(nav_parts) -> None:
    nav, _, progress, _, _ = nav_parts
    nav.save_and_advance()
    assert progress.snapshot()["S1"] == [True, False, False]
    assert nav.question_index == 1


def test_unsaved_answer_guard_is_policy_only(nav_parts) -> None:
    nav, _, _, _, _ = nav_parts
    nav.select("S1-0-B")
    assert nav.has_unsaved_answer()
    # 컨트롤러는 이동 자체를 막지 않는다
    nav.advance()
    assert nav.question_index == 1


def test_saved_answer_clears_guard(nav_parts) -> None:
    nav, _, _, _, _ = nav_parts
    nav.select("S1-0-B")
    nav.save_current()
    assert not nav.has_unsaved_answer()


def test_jump_to_ignores_out_of_range(nav_parts, two_section_test) -> None:
    nav, _, _, _, _ = nav_parts
    assert nav.jump_to(2) is True
    assert nav.jump_to(3) is False
    assert nav.jump_to(-1) is False
    assert nav.question_index == 2
    assert nav.jump_to_section(5) is False
    _assert_in_bounds(nav, two_section_test)


def test_jump_to_section_resets_question_index(nav_parts) -> None:
    nav, _, _, changes, _ = nav_parts
    nav.jump_to(2)
    nav.jump_to_section(0)
    assert nav.question_index == 0
    # 같은 섹션 재선택은 섹션 변경이 아니다
    assert changes == []
