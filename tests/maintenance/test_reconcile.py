import pytest
from fastapi import status

from codenotes.business import services
from codenotes.data import repositories as repo
from codenotes.data.schemas import Difficulty, Language, ProblemCreate, Topic

OWNER = "owner-1"


async def create(db, title="Two Sum", topic_id="Arrays"):
    return await services.create_problem(
        db,
        OWNER,
        ProblemCreate(
            title=title,
            statement="statement",
            difficulty=Difficulty.MEDIUM,
            language=Language.JAVA,
            topic_id=topic_id,
        ),
    )


@pytest.mark.asyncio
async def test_reconcile_without_drift(db):
    await create(db)

    report = await services.reconcile_owner(db, OWNER)

    assert not report.drift_found


@pytest.mark.asyncio
async def test_reconcile_restores_missing_entry(db):
    problem = await create(db)
    await create(db, title="Keeps the topic alive")
    await repo.remove_entry(db, OWNER, "Arrays", problem.problem_id)

    report = await services.reconcile_owner(db, OWNER)

    assert report.entries_written == 1
    topic = await services.get_topic(db, OWNER, "Arrays")
    assert topic.problems[problem.problem_id] == problem


@pytest.mark.asyncio
async def test_reconcile_rewrites_stale_entry(db):
    problem = await create(db)
    await repo.upsert_entry(db, OWNER, "Arrays", problem.problem_id, {"title": "stale"})

    report = await services.reconcile_owner(db, OWNER)

    assert report.entries_written == 1
    topic = await services.get_topic(db, OWNER, "Arrays")
    assert topic.problems[problem.problem_id].title == "Two Sum"


@pytest.mark.asyncio
async def test_reconcile_creates_missing_topic(db):
    problem = await create(db)
    await repo.remove_entries_for_topic(db, OWNER, "Arrays")
    await repo.delete_topic(db, OWNER, "Arrays")

    report = await services.reconcile_owner(db, OWNER)

    assert report.topics_created == 1
    topic = await services.get_topic(db, OWNER, "Arrays")
    assert topic.title == "Arrays"
    assert list(topic.problems) == [problem.problem_id]


@pytest.mark.asyncio
async def test_reconcile_removes_orphan_entry_and_prunes_topic(db):
    await create(db)
    await repo.insert_topic(db, Topic(owner_id=OWNER, topic_id="Ghosts", title="Ghosts"))
    await repo.upsert_entry(db, OWNER, "Ghosts", "deleted-problem", {"title": "gone"})

    report = await services.reconcile_owner(db, OWNER)

    assert report.entries_removed == 1
    assert report.topics_pruned == 1
    assert await repo.find_topic(db, OWNER, "Ghosts") is None


@pytest.mark.asyncio
async def test_reconcile_resyncs_membership_lists(db):
    problem = await create(db)
    await repo.set_problem_flag(db, OWNER, problem.problem_id, "is_solved", True)
    await repo.add_membership(db, OWNER, "favorites", problem.problem_id)

    report = await services.reconcile_owner(db, OWNER)

    assert report.memberships_added == 1
    assert report.memberships_removed == 1
    user = await services.get_user(db, OWNER)
    assert user.solved_problems == [problem.problem_id]
    assert user.favorites == []


@pytest.mark.asyncio
async def test_reconcile_route(client, auth_headers, created_problem):
    response = await client.post("/api/v1/maintenance/reconcile", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "entriesWritten": 0,
        "entriesRemoved": 0,
        "topicsCreated": 0,
        "topicsPruned": 0,
        "membershipsAdded": 0,
        "membershipsRemoved": 0,
    }


@pytest.mark.asyncio
async def test_reconcile_requires_token(client):
    response = await client.post("/api/v1/maintenance/reconcile")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}
