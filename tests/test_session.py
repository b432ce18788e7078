from __future__ import annotations

import dataclasses
import threading

import pytest

from assessment.errors import (
    AuthorizationCheckFailed,
    AuthorizationDenied,
    EmptyQuestionSet,
    IncompleteSubmission,
    InvalidTransition,
    QuestionLoadFailed,
    ValidationError,
)
from assessment.gate import SessionGate
from assessment.loader import QuestionBankLoader
from assessment.persister import PersistStatus, ResultPersister
from assessment.session import ExamSession, SessionStatus
from fakes import FakeHistory, FakeQuestions, FakeRegistry, correct_choice_id, make_question, wrong_choice_id

SLUG = "alice-engineering-42"


def _build(*, emails=("bob@x.com",), questions=None, registry_fail=False, load_fail=False, history=None, **kwargs):
    questions = questions if questions is not None else [make_question(1), make_question(2), make_question(3)]
    history = history or FakeHistory()
    registry = FakeRegistry(emails, fail=registry_fail)
    repo = FakeQuestions({42: questions}, fail=load_fail)
    persister = ResultPersister(history)
    session = ExamSession(SessionGate(registry), QuestionBankLoader(repo), persister, **kwargs)
    return session, registry, repo, history


def _answer_all(session, questions, n_correct=None):
    n_correct = len(questions) if n_correct is None else n_correct
    for i, q in enumerate(questions):
        session.select_answer(q.id, correct_choice_id(q) if i < n_correct else wrong_choice_id(q))


def test_start_enters_in_progress_with_empty_selections():
    session, *_ = _build()
    session.start("Bob@X.com", SLUG)

    assert session.status == SessionStatus.IN_PROGRESS
    assert session.identity == "bob@x.com"
    assert session.index == 0
    assert dict(session.selections) == {}
    assert session.question_count == 3
    assert session.attempt_key


def test_denied_identity_never_reaches_in_progress():
    session, _registry, repo, _ = _build(emails=())

    with pytest.raises(AuthorizationDenied):
        session.start("bob@x.com", SLUG)

    assert session.status == SessionStatus.ERROR
    assert repo.calls == []
    with pytest.raises(InvalidTransition):
        session.select_answer(1, 10)


def test_malformed_identity_is_validation_error():
    session, registry, _repo, _ = _build()
    with pytest.raises(ValidationError):
        session.start("not-an-email", SLUG)
    assert registry.calls == []
    assert session.status == SessionStatus.ERROR


def test_check_failure_is_retryable_by_starting_again():
    session, registry, *_ = _build(registry_fail=True)

    with pytest.raises(AuthorizationCheckFailed) as exc:
        session.start("bob@x.com", SLUG)
    assert exc.value.retryable
    assert session.status == SessionStatus.ERROR

    registry.fail = False
    session.start("bob@x.com", SLUG)
    assert session.status == SessionStatus.IN_PROGRESS


def test_load_failure_is_retryable():
    session, _registry, repo, _ = _build(load_fail=True)
    with pytest.raises(QuestionLoadFailed):
        session.start("bob@x.com", SLUG)

    repo.fail = False
    session.start("bob@x.com", SLUG)
    assert session.status == SessionStatus.IN_PROGRESS


def test_empty_question_set_moves_to_error():
    session, *_ = _build(questions=[])
    with pytest.raises(EmptyQuestionSet):
        session.start("bob@x.com", SLUG)
    assert session.status == SessionStatus.ERROR


def test_select_overwrites_and_keeps_index():
    session, *_ = _build()
    session.start("bob@x.com", SLUG)
    session.navigate(1)

    session.select_answer(1, 10)
    session.select_answer(1, 11)

    assert session.selections[1] == 11
    assert session.index == 1


def test_select_rejects_choice_of_another_question():
    session, *_ = _build()
    session.start("bob@x.com", SLUG)

    with pytest.raises(ValidationError):
        session.select_answer(1, 20)
    with pytest.raises(ValidationError):
        session.select_answer(99, 990)
    assert dict(session.selections) == {}


def test_navigate_clamps_without_wraparound():
    session, *_ = _build()
    session.start("bob@x.com", SLUG)

    assert session.navigate(-1) == 0
    assert session.navigate(1) == 1
    assert session.navigate(5) == 2
    assert session.navigate(1) == 2
    assert session.navigate(-10) == 0


def test_incomplete_submission_names_unanswered_then_succeeds():
    questions = [make_question(1), make_question(2), make_question(3)]
    session, _r, _q, history = _build(questions=questions)
    session.start("bob@x.com", SLUG)
    session.select_answer(1, correct_choice_id(questions[0]))
    session.select_answer(3, correct_choice_id(questions[2]))

    with pytest.raises(IncompleteSubmission) as exc:
        session.submit()
    assert exc.value.unanswered == [2]
    assert session.status == SessionStatus.IN_PROGRESS
    assert history.calls == 0

    session.select_answer(2, correct_choice_id(questions[1]))
    result = session.submit()

    assert session.status == SessionStatus.SUBMITTED
    assert (result.correct, result.total, result.passed) == (3, 3, True)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.correct = 0  # type: ignore[misc]


def test_submitted_state_is_frozen():
    questions = [make_question(1), make_question(2)]
    session, *_ = _build(questions=questions)
    session.start("bob@x.com", SLUG)
    _answer_all(session, questions)
    session.submit()

    with pytest.raises(InvalidTransition):
        session.select_answer(1, 11)
    with pytest.raises(InvalidTransition):
        session.navigate(1)
    with pytest.raises(TypeError):
        session.selections[1] = 11  # type: ignore[index]


def test_history_record_matches_shown_score():
    questions = [make_question(i) for i in range(1, 11)]
    session, _r, _q, history = _build(questions=questions, pass_ratio=0.8)
    session.start("bob@x.com", SLUG, full_name="Bob  Builder")
    _answer_all(session, questions, n_correct=7)

    result = session.submit()
    assert session.ticket.wait(2) == PersistStatus.SAVED

    record = history.records[0]
    assert (record.correct, record.total, record.passed) == (result.correct, result.total, result.passed) == (7, 10, False)
    assert record.identity == "bob@x.com"
    assert record.type_id == 42
    assert record.full_name == "Bob Builder"
    assert record.attempt_key == session.attempt_key


def test_persistence_failure_does_not_hide_result():
    questions = [make_question(1)]
    session, *_ = _build(questions=questions, history=FakeHistory(fail=True))
    session.start("bob@x.com", SLUG)
    _answer_all(session, questions)

    result = session.submit()

    assert result.passed is True
    assert session.status == SessionStatus.SUBMITTED
    assert session.ticket.wait(2) == PersistStatus.FAILED
    assert session.ticket.warning
    assert session.result is result


def test_result_shown_while_write_still_pending():
    gate = threading.Event()
    questions = [make_question(1)]
    session, *_ = _build(questions=questions, history=FakeHistory(block=gate))
    session.start("bob@x.com", SLUG)
    _answer_all(session, questions)

    result = session.submit()
    assert result.correct == 1
    assert session.ticket.status == PersistStatus.PENDING

    gate.set()
    assert session.ticket.wait(2) == PersistStatus.SAVED


def test_double_submit_writes_one_history_row():
    questions = [make_question(1), make_question(2)]
    session, _r, _q, history = _build(questions=questions)
    session.start("bob@x.com", SLUG)
    _answer_all(session, questions)

    first = session.submit()
    second = session.submit()

    assert first is second
    session.ticket.wait(2)
    assert history.calls == 1


def test_score_independent_of_event_order():
    questions = [make_question(i) for i in range(1, 5)]
    answers = {1: correct_choice_id(questions[0]), 2: wrong_choice_id(questions[1]), 3: 31, 4: correct_choice_id(questions[3])}

    a, *_ = _build(questions=questions)
    a.start("bob@x.com", SLUG)
    for qid, cid in answers.items():
        a.select_answer(qid, cid)
        a.navigate(1)

    b, *_ = _build(questions=questions)
    b.start("bob@x.com", SLUG)
    b.navigate(3)
    for qid in reversed(list(answers)):
        b.select_answer(qid, 30 if qid == 3 else answers[qid])
        b.navigate(-1)
    b.select_answer(3, answers[3])

    ra, rb = a.submit(), b.submit()
    assert (ra.correct, ra.total, ra.passed) == (rb.correct, rb.total, rb.passed)


def test_retake_starts_a_new_attempt():
    questions = [make_question(1), make_question(2)]
    session, _r, _q, history = _build(questions=questions)
    session.start("bob@x.com", SLUG)
    _answer_all(session, questions, n_correct=0)
    session.submit()
    session.ticket.wait(2)
    first_key = session.attempt_key

    session.retake()
    assert session.status == SessionStatus.IN_PROGRESS
    assert session.result is None
    assert dict(session.selections) == {}
    assert session.attempt_key != first_key

    _answer_all(session, questions)
    session.submit()
    session.ticket.wait(2)
    assert [r.attempt_key for r in history.records] == [first_key, session.attempt_key]


def test_events_before_start_are_rejected():
    session, *_ = _build()
    for call in (lambda: session.select_answer(1, 10), lambda: session.navigate(1), session.submit, session.retake):
        with pytest.raises(InvalidTransition):
            call()


def test_start_twice_is_rejected():
    session, *_ = _build()
    session.start("bob@x.com", SLUG)
    with pytest.raises(InvalidTransition):
        session.start("bob@x.com", SLUG)


def test_bad_pass_ratio_rejected_at_construction():
    with pytest.raises(ValueError):
        _build(pass_ratio=1.5)


def test_snapshot_keeps_submitted_view_across_retake():
    questions = [make_question(1), make_question(2)]
    session, *_ = _build(questions=questions)
    session.start("bob@x.com", SLUG)
    _answer_all(session, questions)
    result = session.submit()

    snap = session.snapshot()
    session.retake()

    assert snap.status == SessionStatus.SUBMITTED
    assert snap.result is result
    assert dict(snap.selections) == {1: 10, 2: 20}
    assert snap.answered_ids == (1, 2)
    assert session.snapshot().result is None


def test_snapshot_waits_for_event_in_flight():
    release = threading.Event()
    entered = threading.Event()

    class BlockingRegistry:
        def is_authorized(self, identity: str) -> bool:
            entered.set()
            release.wait(5)
            return True

    repo = FakeQuestions({42: [make_question(1)]})
    session = ExamSession(SessionGate(BlockingRegistry()), QuestionBankLoader(repo), ResultPersister(FakeHistory()))

    starter = threading.Thread(target=session.start, args=("bob@x.com", SLUG))
    starter.start()
    assert entered.wait(5)

    snaps = []
    reader = threading.Thread(target=lambda: snaps.append(session.snapshot()))
    reader.start()
    reader.join(0.2)
    assert reader.is_alive()

    release.set()
    starter.join(5)
    reader.join(5)
    assert snaps[0].status == SessionStatus.IN_PROGRESS
    assert snaps[0].question_count == 1
