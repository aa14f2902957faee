import pytest

from agora.domain.search import models


@pytest.mark.asyncio
async def test_handle_required(api_client):
	for params in ({}, {"handle": "   "}):
		response = await api_client.get("/handles/check", params=params)
		assert response.status_code == 400
		assert response.json()["detail"] == "handle_required"


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"handle, reason",
	[("ab", "too_short"), ("_johndoe", "starts_with_underscore"), ("12345", "all_numbers"), ("john..doe", "consecutive_periods")],
)
async def test_format_violations(api_client, handle, reason):
	response = await api_client.get("/handles/check", params={"handle": handle})
	detail = response.json()["detail"]
	assert response.status_code == 400
	assert detail["reason"] == reason
	assert detail["message"]
	assert "suggestions" not in detail


@pytest.mark.asyncio
async def test_reserved_handle_offers_suggestions(api_client):
	response = await api_client.get("/handles/check", params={"handle": "admin"})
	detail = response.json()["detail"]
	assert response.status_code == 400
	assert detail["reason"] == "reserved"
	assert detail["suggestions"]


@pytest.mark.asyncio
async def test_available_handle(api_client):
	response = await api_client.get("/handles/check", params={"handle": "johndoe"})
	assert response.status_code == 200
	assert response.json() == {"available": True, "suggestions": []}


@pytest.mark.asyncio
async def test_taken_handle_is_case_insensitive(api_client, memory_store):
	await memory_store.seed(users=[models.MemoryUser(user_id="u1", handle="johndoe")])

	response = await api_client.get("/handles/check", params={"handle": "JohnDoe"})
	payload = response.json()

	assert response.status_code == 200
	assert payload["available"] is False
	assert len(payload["suggestions"]) == 5
	assert payload["suggestions"][0] == "johndoe1"
