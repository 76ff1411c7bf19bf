import pytest
from fastapi import status


# Create and read back
@pytest.mark.asyncio
async def test_create_problem_success(client, auth_headers, problem_payload):
    response = await client.post("/api/v1/problems", json=problem_payload, headers=auth_headers)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["problemId"]
    assert data["title"] == "Two Sum"
    assert data["topicId"] == "Arrays"
    assert data["ownerId"] == "owner-1"
    assert data["isFavorite"] is False
    assert data["isSavedForLater"] is False
    assert data["isSolved"] is False


@pytest.mark.asyncio
async def test_created_problem_is_embedded_in_its_topic(client, auth_headers, created_problem):
    problem_id = created_problem["problemId"]

    problem = (await client.get(f"/api/v1/problems/{problem_id}", headers=auth_headers)).json()
    topic = (await client.get("/api/v1/topics/Arrays", headers=auth_headers)).json()

    assert problem == created_problem
    assert topic["problems"][problem_id] == created_problem


@pytest.mark.asyncio
async def test_create_problem_creates_missing_topic_with_title(client, auth_headers, problem_payload):
    problem_payload["topicId"] = "graphs"
    problem_payload["topicTitle"] = "Graphs"

    response = await client.post("/api/v1/problems", json=problem_payload, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED

    topic = (await client.get("/api/v1/topics/graphs", headers=auth_headers)).json()
    assert topic["title"] == "Graphs"
    assert list(topic["problems"]) == [response.json()["problemId"]]


@pytest.mark.asyncio
async def test_create_problem_topic_title_defaults_to_topic_id(client, auth_headers, created_problem):
    topic = (await client.get("/api/v1/topics/Arrays", headers=auth_headers)).json()
    assert topic["title"] == "Arrays"


@pytest.mark.asyncio
async def test_create_problem_ignores_client_identity_and_flags(client, auth_headers, problem_payload):
    problem_payload.update({"problemId": "chosen-by-client", "ownerId": "intruder", "isSolved": True})

    response = await client.post("/api/v1/problems", json=problem_payload, headers=auth_headers)

    data = response.json()
    assert data["problemId"] != "chosen-by-client"
    assert data["ownerId"] == "owner-1"
    assert data["isSolved"] is False


@pytest.mark.asyncio
async def test_create_problem_missing_title(client, auth_headers, problem_payload):
    del problem_payload["title"]

    response = await client.post("/api/v1/problems", json=problem_payload, headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert any(error["loc"][-1] == "title" for error in response.json()["detail"])


@pytest.mark.asyncio
async def test_create_problem_invalid_difficulty(client, auth_headers, problem_payload):
    problem_payload["difficulty"] = "Impossible"

    response = await client.post("/api/v1/problems", json=problem_payload, headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_create_problem_without_token(client, problem_payload):
    response = await client.post("/api/v1/problems", json=problem_payload)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_invalid_token_rejected(client):
    response = await client.get(
        "/api/v1/problems", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_get_problem_not_found(client, auth_headers):
    response = await client.get("/api/v1/problems/missing", headers=auth_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Problem not found"


@pytest.mark.asyncio
async def test_problems_are_scoped_by_owner(client, other_auth_headers, created_problem):
    problem_id = created_problem["problemId"]

    get_response = await client.get(f"/api/v1/problems/{problem_id}", headers=other_auth_headers)
    list_response = await client.get("/api/v1/problems", headers=other_auth_headers)
    delete_response = await client.delete(
        f"/api/v1/problems/{problem_id}", headers=other_auth_headers
    )

    assert get_response.status_code == status.HTTP_404_NOT_FOUND
    assert list_response.json() == []
    assert delete_response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_list_problems(client, auth_headers, created_problem, problem_payload):
    problem_payload.update({"title": "Course Schedule", "topicId": "Graphs", "difficulty": "Medium"})
    await client.post("/api/v1/problems", json=problem_payload, headers=auth_headers)

    response = await client.get("/api/v1/problems", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert [p["title"] for p in response.json()] == ["Two Sum", "Course Schedule"]


# Updates
@pytest.mark.asyncio
async def test_update_problem_keeps_embedded_copy_equal(client, auth_headers, created_problem):
    problem_id = created_problem["problemId"]

    for updates in ({"title": "Two Sum II"}, {"difficulty": "Medium", "code": "pass"}):
        response = await client.put(
            f"/api/v1/problems/{problem_id}", json=updates, headers=auth_headers
        )
        assert response.status_code == status.HTTP_200_OK

        canonical = (await client.get(f"/api/v1/problems/{problem_id}", headers=auth_headers)).json()
        topic = (await client.get("/api/v1/topics/Arrays", headers=auth_headers)).json()
        assert topic["problems"][problem_id] == canonical == response.json()

    assert canonical["title"] == "Two Sum II"
    assert canonical["difficulty"] == "Medium"


@pytest.mark.asyncio
async def test_update_problem_cannot_move_topic_or_owner(client, auth_headers, created_problem):
    problem_id = created_problem["problemId"]

    response = await client.put(
        f"/api/v1/problems/{problem_id}",
        json={"topicId": "Elsewhere", "ownerId": "intruder", "explanation": "hash map"},
        headers=auth_headers,
    )

    data = response.json()
    assert data["topicId"] == "Arrays"
    assert data["ownerId"] == "owner-1"
    assert data["explanation"] == "hash map"


@pytest.mark.asyncio
async def test_update_problem_not_found(client, auth_headers):
    response = await client.put(
        "/api/v1/problems/missing", json={"title": "x"}, headers=auth_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_update_problem_rejects_empty_title(client, auth_headers, created_problem):
    response = await client.put(
        f"/api/v1/problems/{created_problem['problemId']}",
        json={"title": ""},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


# Deletes
@pytest.mark.asyncio
async def test_delete_problem_twice(client, auth_headers, created_problem, problem_payload):
    problem_payload["title"] = "Three Sum"
    await client.post("/api/v1/problems", json=problem_payload, headers=auth_headers)
    problem_id = created_problem["problemId"]

    first = await client.delete(f"/api/v1/problems/{problem_id}", headers=auth_headers)
    second = await client.delete(f"/api/v1/problems/{problem_id}", headers=auth_headers)

    assert first.status_code == status.HTTP_200_OK
    assert first.json() == {"message": "Problem deleted successfully"}
    assert second.status_code == status.HTTP_404_NOT_FOUND
    topic = (await client.get("/api/v1/topics/Arrays", headers=auth_headers)).json()
    assert problem_id not in topic["problems"]
    assert len(topic["problems"]) == 1


@pytest.mark.asyncio
async def test_deleting_last_problem_prunes_topic(client, auth_headers, created_problem):
    await client.delete(f"/api/v1/problems/{created_problem['problemId']}", headers=auth_headers)

    topics = (await client.get("/api/v1/topics", headers=auth_headers)).json()
    topic_response = await client.get("/api/v1/topics/Arrays", headers=auth_headers)

    assert topics == []
    assert topic_response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_delete_problem_clears_membership_lists(client, auth_headers, created_problem):
    problem_id = created_problem["problemId"]
    await client.post("/api/v1/users/favorites", json={"problemId": problem_id}, headers=auth_headers)
    await client.post("/api/v1/users/solved", json={"problemId": problem_id}, headers=auth_headers)

    await client.delete(f"/api/v1/problems/{problem_id}", headers=auth_headers)

    profile = (await client.get("/api/v1/users/profile", headers=auth_headers)).json()
    assert profile["favorites"] == []
    assert profile["solvedProblems"] == []
