from concurrent.futures import ThreadPoolExecutor

import pytest

from src.virtual_mic.domain.ids import SESSION_ID_ALPHABET, QuestionIdSequence, generate_session_id


def test_session_id_is_url_safe_token():
    session_id = generate_session_id()
    assert len(session_id) == 8
    assert set(session_id) <= set(SESSION_ID_ALPHABET)


def test_session_id_length_is_configurable():
    assert len(generate_session_id(12)) == 12
    with pytest.raises(ValueError):
        generate_session_id(0)


def test_session_ids_are_unique_in_practice():
    ids = {generate_session_id() for _ in range(1000)}
    assert len(ids) == 1000


def test_question_id_sequence_is_monotonic():
    sequence = QuestionIdSequence()
    assert [sequence.next() for _ in range(3)] == [1, 2, 3]
    assert QuestionIdSequence(start=10).next() == 10


def test_question_id_sequence_is_thread_safe():
    sequence = QuestionIdSequence()
    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(lambda _: sequence.next(), range(500)))
    assert sorted(ids) == list(range(1, 501))
