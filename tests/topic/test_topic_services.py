from unittest.mock import AsyncMock, patch

import pytest

from codenotes.business import services
from codenotes.data import repositories as repo
from codenotes.data.schemas import Difficulty, Language, MembershipFlag, ProblemCreate
from codenotes.errors import DatabaseException, ResourceNotFoundException

OWNER = "owner-1"


def make_problem(title: str) -> ProblemCreate:
    return ProblemCreate(
        title=title,
        statement="Find two numbers that add up to target.",
        difficulty=Difficulty.EASY,
        language=Language.PYTHON,
        topic_id="Arrays",
    )


@pytest.mark.asyncio
async def test_failed_entry_removal_still_deletes_topic_and_problems(db):
    first = await services.create_problem(db, OWNER, make_problem("Two Sum"))
    second = await services.create_problem(db, OWNER, make_problem("Three Sum"))
    failing = AsyncMock(side_effect=DatabaseException(detail="Failed to update topic problems"))

    with patch.object(repo, "remove_entries_for_topic", failing), patch(
        "codenotes.business.services.topic.report_inconsistency"
    ) as report:
        response = await services.delete_topic(db, OWNER, "Arrays")

    assert response.message == "Topic and its problems deleted successfully"
    assert await repo.find_problem(db, OWNER, first.problem_id) is None
    assert await repo.find_problem(db, OWNER, second.problem_id) is None
    assert await repo.find_topic(db, OWNER, "Arrays") is None
    report.assert_called_once_with(
        "delete_topic", OWNER, "topics/Arrays", "Failed to update topic problems"
    )


@pytest.mark.asyncio
async def test_delete_topic_clears_memberships_of_its_problems(db):
    created = await services.create_problem(db, OWNER, make_problem("Two Sum"))
    await services.set_membership_flag(db, OWNER, created.problem_id, MembershipFlag.SOLVED, True)

    await services.delete_topic(db, OWNER, "Arrays")

    assert (await services.get_user(db, OWNER)).solved_problems == []
    assert await repo.list_entries(db, OWNER, "Arrays") == []
    with pytest.raises(ResourceNotFoundException):
        await services.get_topic(db, OWNER, "Arrays")
