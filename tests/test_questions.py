import logging

import pytest

from code_maze.config import Difficulty
from code_maze.errors import StorageError
from code_maze.questions import (
    BUILTIN_QUESTIONS,
    DEAD_END_QUESTIONS,
    OPTION_LETTERS,
    Question,
    question_from_dict,
    select_dead_end_pool,
    select_pool,
)

EASY_IDS = {q.id for q in BUILTIN_QUESTIONS if q.difficulty == Difficulty.EASY}


def ids(pool):
    return {q.id for q in pool}


def test_builtin_bank_is_well_formed():
    all_ids = [q.id for q in BUILTIN_QUESTIONS + DEAD_END_QUESTIONS]
    assert len(all_ids) == len(set(all_ids))
    for q in BUILTIN_QUESTIONS:
        assert q.multiple_choice
        assert q.answer in OPTION_LETTERS[:len(q.options)]
    for q in DEAD_END_QUESTIONS:
        assert not q.multiple_choice


def test_tiers_are_cumulative():
    easy = ids(select_pool("easy"))
    medium = ids(select_pool("medium"))
    hard = ids(select_pool("hard"))

    assert easy == EASY_IDS
    assert easy < medium < hard
    assert hard == ids(BUILTIN_QUESTIONS)


def test_disabled_ids_only_filter_the_bank():
    custom = Question("easy-02", "Custom?", "yes", custom=True)
    pool = select_pool(Difficulty.EASY, [custom], disabled_ids=["easy-01", "easy-02"])

    assert "easy-01" not in ids(pool)
    assert custom in pool
    assert not any(q.id == "easy-02" and not q.custom for q in pool)


def test_custom_questions_respect_tiers():
    hard_custom = Question("c-hard", "Hard?", "yes", difficulty=Difficulty.HARD, custom=True)
    assert hard_custom not in select_pool("easy", [hard_custom])
    assert hard_custom in select_pool("hard", [hard_custom])


def test_empty_selection_falls_back_to_easy_bank(caplog):
    with caplog.at_level(logging.WARNING, logger="code_maze"):
        pool = select_pool("easy", disabled_ids=EASY_IDS)
    assert ids(pool) == EASY_IDS
    assert "falling back" in caplog.text


def test_selection_is_a_fresh_list_each_time():
    first = select_pool("medium")
    first.clear()
    assert select_pool("medium") == select_pool("medium")
    assert len(select_pool("medium")) > 0


@pytest.mark.parametrize("raw", ["b", " B ", "B\n"])
def test_check_ignores_case_and_whitespace(raw):
    q = Question("x", "?", "B", options=("1", "2"))
    assert q.check(raw)


def test_check_rejects_other_answers():
    q = Question("x", "?", "Java Virtual Machine")
    assert q.check("java virtual machine")
    assert not q.check("JVM")
    assert not q.check(None)


def test_dead_end_tiers():
    def tiers(difficulty):
        return {q.difficulty for q in select_dead_end_pool(difficulty)}

    assert tiers("easy") == {Difficulty.EASY}
    assert tiers("medium") == {Difficulty.EASY, Difficulty.MEDIUM}
    assert tiers("hard") == {Difficulty.MEDIUM, Difficulty.HARD}


def test_question_from_dict_maps_option_index():
    q = question_from_dict({
        "id": "c1",
        "text": "Pick one",
        "options": ["a", "b", "c"],
        "answer": 1,
        "difficulty": "Medium",
    })
    assert q.answer == "B"
    assert q.difficulty == Difficulty.MEDIUM
    assert q.custom


def test_question_from_dict_free_text():
    q = question_from_dict({"id": "c2", "text": "Say hi", "answer": " hi "})
    assert not q.multiple_choice
    assert q.check("HI")
    assert q.difficulty == Difficulty.EASY


@pytest.mark.parametrize("data", [
    {"id": "c3", "text": "?", "options": ["a", "b"], "answer": "D"},
    {"id": "c4", "options": ["a"], "answer": "A"},
    {"id": "c5", "text": "?", "answer": "x", "difficulty": "impossible"},
])
def test_question_from_dict_rejects_bad_records(data):
    with pytest.raises(StorageError):
        question_from_dict(data)
