import pytest

from agora.domain.search import models
from agora.infra import jwt as jwt_helper

USER_ME = "00000000-0000-0000-0000-000000000001"
USER_EVE = "00000000-0000-0000-0000-000000000002"
USER_EVAN = "00000000-0000-0000-0000-000000000003"
USER_PAL = "00000000-0000-0000-0000-000000000004"


async def _seed(store):
	await store.seed(
		users=[
			models.MemoryUser(user_id=USER_ME, handle="self", display_name="Self"),
			models.MemoryUser(
				user_id=USER_EVE,
				handle="eve",
				display_handle="Eve",
				display_name="Eve Search",
				followers_count=120,
				verified=True,
			),
			models.MemoryUser(user_id=USER_EVAN, handle="evan", display_name="Evan Stone", followers_count=4_000),
			models.MemoryUser(user_id=USER_PAL, handle="pal", display_name="Pal", followers_count=80),
		],
		follows=[(USER_ME, USER_EVAN)],
	)


@pytest.mark.asyncio
async def test_search_requires_bearer_token(api_client):
	response = await api_client.get("/search/users", params={"q": "eve"})
	payload = response.json()
	assert response.status_code == 401
	assert payload["detail"] == "invalid_token"
	assert payload["request_id"]
	assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_search_rejects_bad_token(api_client):
	response = await api_client.get(
		"/search/users",
		params={"q": "eve"},
		headers={"Authorization": "Bearer not-a-jwt"},
	)
	assert response.status_code == 401
	assert response.json()["detail"] == "invalid_token"



@pytest.mark.asyncio
async def test_search_rejects_expired_or_anonymous_tokens(api_client):
	expired = jwt_helper.encode_access({"sub": USER_ME}, ttl_seconds=-60)
	anonymous = jwt_helper.encode_access({"handle": "ghost"})
	for token in (expired, anonymous):
		response = await api_client.get(
			"/search/users",
			params={"q": "eve"},
			headers={"Authorization": f"Bearer {token}"},
		)
		assert response.status_code == 401
		assert response.json()["detail"] == "invalid_token"
		assert response.headers["WWW-Authenticate"] == "Bearer"

@pytest.mark.asyncio
async def test_search_requires_query(api_client, auth_headers):
	response = await api_client.get("/search/users", params={"q": "  @ "}, headers=auth_headers(USER_ME))
	assert response.status_code == 400
	assert response.json()["detail"] == "query_required"

	response = await api_client.get("/search/users", headers=auth_headers(USER_ME))
	assert response.status_code == 400


@pytest.mark.asyncio
async def test_search_users_endpoint(api_client, memory_store, auth_headers):
	await _seed(memory_store)

	response = await api_client.get("/search/users", params={"q": "Eve"}, headers=auth_headers(USER_ME))
	payload = response.json()

	assert response.status_code == 200
	assert response.headers["X-Request-Id"]
	assert payload["query"] == "eve"
	assert payload["hasMore"] is False
	assert payload["nextCursor"] is None
	assert payload["count"] == len(payload["items"])
	first = payload["items"][0]
	assert first["userId"] == USER_EVE
	assert first["displayHandle"] == "Eve"
	assert first["followersCount"] == 120
	assert first["score"] == 1.0
	assert USER_ME not in {item["userId"] for item in payload["items"]}


@pytest.mark.asyncio
async def test_search_paginates_with_cursor(api_client, memory_store, auth_headers):
	await memory_store.seed(
		users=[
			models.MemoryUser(user_id=f"user-{idx}", handle=f"walker{idx:02d}", display_name="Walker")
			for idx in range(7)
		],
	)
	headers = auth_headers(USER_ME)

	first = (await api_client.get("/search/users", params={"q": "walker", "limit": 1}, headers=headers)).json()
	assert first["count"] == 5
	assert first["hasMore"] is True
	second = (
		await api_client.get(
			"/search/users",
			params={"q": "walker", "limit": 1, "after": first["nextCursor"]},
			headers=headers,
		)
	).json()

	handles = [item["handle"] for item in first["items"] + second["items"]]
	assert second["hasMore"] is False
	assert len(handles) == 7
	assert len(set(handles)) == 7


@pytest.mark.asyncio
async def test_non_numeric_limit_uses_default(api_client, memory_store, auth_headers):
	await _seed(memory_store)
	response = await api_client.get(
		"/search/users",
		params={"q": "eve", "limit": "lots"},
		headers=auth_headers(USER_ME),
	)
	assert response.status_code == 200


@pytest.mark.asyncio
async def test_suggested_creators_endpoint(api_client, memory_store, auth_headers):
	await _seed(memory_store)

	response = await api_client.get("/search/suggested-creators", headers=auth_headers(USER_ME))
	payload = response.json()

	assert response.status_code == 200
	assert [item["handle"] for item in payload["items"]] == ["eve", "pal"]
	assert payload["count"] == 2
	assert payload["items"][0]["score"] is None


@pytest.mark.asyncio
async def test_search_rate_limit(api_client, memory_store, auth_headers, monkeypatch):
	from agora.settings import settings

	monkeypatch.setattr(settings, "suggestions_per_minute", 1)
	headers = auth_headers(USER_ME)
	assert (await api_client.get("/search/suggested-creators", headers=headers)).status_code == 200
	response = await api_client.get("/search/suggested-creators", headers=headers)
	assert response.status_code == 429
	assert response.json()["detail"] == "rate_limit"
	assert 0 < int(response.headers["Retry-After"]) <= 60
