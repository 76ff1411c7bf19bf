"""Derived views over the mirror's topic map. Nothing here is stored."""

from typing import Callable, Iterable, Iterator, List, Mapping, Optional, Union

from codenotes.data.schemas import MembershipFlag, ProblemRead, TopicRead

Topics = Union[Mapping[str, TopicRead], Iterable[TopicRead]]


def iter_problems(topics: Topics) -> Iterator[ProblemRead]:
    if isinstance(topics, Mapping):
        topics = topics.values()
    for topic in topics:
        yield from topic.problems.values()


def select_problems(topics: Topics, predicate: Callable[[ProblemRead], bool]) -> List[ProblemRead]:
    return [problem for problem in iter_problems(topics) if predicate(problem)]


def matches_query(problem: ProblemRead, query: str) -> bool:
    """Substring of title or statement, or exactly the difficulty. Case-insensitive."""
    needle = query.lower()
    return (
        needle in problem.title.lower()
        or needle in problem.statement.lower()
        or problem.difficulty.value.lower() == needle
    )


def search_problems(topics: Topics, query: str) -> List[ProblemRead]:
    if not query.strip():
        return []
    return select_problems(topics, lambda problem: matches_query(problem, query))


def filter_by_difficulty(topics: Topics, difficulty: str) -> List[ProblemRead]:
    wanted = difficulty.strip().lower()
    return select_problems(topics, lambda problem: problem.difficulty.value.lower() == wanted)


def flagged_problems(topics: Topics, flag: MembershipFlag) -> List[ProblemRead]:
    return select_problems(topics, lambda problem: getattr(problem, flag.problem_field))


def favorite_problems(topics: Topics) -> List[ProblemRead]:
    return flagged_problems(topics, MembershipFlag.FAVORITE)


def saved_problems(topics: Topics) -> List[ProblemRead]:
    return flagged_problems(topics, MembershipFlag.SAVED)


def solved_problems(topics: Topics) -> List[ProblemRead]:
    return flagged_problems(topics, MembershipFlag.SOLVED)


def find_problem(topics: Topics, problem_id: str) -> Optional[ProblemRead]:
    if isinstance(topics, Mapping):
        topics = topics.values()
    for topic in topics:
        problem = topic.problems.get(problem_id)
        if problem is not None:
            return problem
    return None
