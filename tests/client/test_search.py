import pytest

from codenotes.client.search import (
    favorite_problems,
    filter_by_difficulty,
    find_problem,
    iter_problems,
    saved_problems,
    search_problems,
    solved_problems,
)
from codenotes.data.schemas import ProblemRead, TopicRead


def problem(problem_id, title, statement="", difficulty="Easy", topic_id="Arrays", **flags):
    return ProblemRead(
        problem_id=problem_id,
        topic_id=topic_id,
        owner_id="owner-1",
        title=title,
        statement=statement or "no statement",
        difficulty=difficulty,
        language="python",
        **flags,
    )


@pytest.fixture
def topics():
    arrays = TopicRead(
        topic_id="Arrays",
        title="Arrays",
        owner_id="owner-1",
        problems={
            "p1": problem("p1", "Two Sum", "Use a hash map", is_favorite=True),
            "p2": problem("p2", "Trapping Rain Water", "Two pointers", difficulty="Hard", is_solved=True),
        },
    )
    graphs = TopicRead(
        topic_id="Graphs",
        title="Graphs",
        owner_id="owner-1",
        problems={
            "p3": problem(
                "p3", "Course Schedule", "Detect a cycle", difficulty="Medium",
                topic_id="Graphs", is_saved_for_later=True, is_favorite=True,
            ),
        },
    )
    return {"Arrays": arrays, "Graphs": graphs}


def ids(problems):
    return [p.problem_id for p in problems]


def test_iter_problems_accepts_mapping_or_list(topics):
    assert ids(iter_problems(topics)) == ["p1", "p2", "p3"]
    assert ids(iter_problems(list(topics.values()))) == ["p1", "p2", "p3"]


def test_search_matches_title_case_insensitively(topics):
    assert ids(search_problems(topics, "two SUM")) == ["p1"]


def test_search_matches_statement(topics):
    assert ids(search_problems(topics, "two")) == ["p1", "p2"]
    assert ids(search_problems(topics, "CYCLE")) == ["p3"]


def test_search_matches_exact_difficulty(topics):
    assert ids(search_problems(topics, "hard")) == ["p2"]
    assert ids(search_problems(topics, "medium")) == ["p3"]
    assert search_problems(topics, "med") == []


def test_search_blank_query(topics):
    assert search_problems(topics, "") == []
    assert search_problems(topics, "   ") == []


def test_filter_by_difficulty(topics):
    assert ids(filter_by_difficulty(topics, "Easy")) == ["p1"]
    assert ids(filter_by_difficulty(topics, " hard ")) == ["p2"]


def test_flag_views(topics):
    assert ids(favorite_problems(topics)) == ["p1", "p3"]
    assert ids(saved_problems(topics)) == ["p3"]
    assert ids(solved_problems(topics)) == ["p2"]


def test_find_problem(topics):
    assert find_problem(topics, "p3").title == "Course Schedule"
    assert find_problem(topics, "missing") is None
