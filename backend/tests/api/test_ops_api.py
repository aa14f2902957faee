import pytest

OPS_TOKEN = "ops-test-token"


@pytest.mark.asyncio
async def test_health_endpoints(api_client):
	live = await api_client.get("/health/live")
	ready = await api_client.get("/health/ready")

	assert live.json() == {"status": "ok"}
	assert ready.status_code == 200
	assert ready.json()["redis"]["ok"] is True
	assert ready.json()["postgres"]["skipped"] == "memory_store"


@pytest.mark.asyncio
async def test_metrics_require_admin_token(api_client):
	denied = await api_client.get("/metrics")
	allowed = await api_client.get("/metrics", headers={"X-Admin-Token": OPS_TOKEN})

	assert denied.status_code == 403
	assert allowed.status_code == 200
	assert "agora_http_requests_total" in allowed.text


@pytest.mark.asyncio
async def test_search_config_reports_active_values(api_client, memory_store):
	await memory_store.seed(config={"alpha_strong": 0.2})

	response = await api_client.get(
		"/ops/search-config",
		params={"reload": "true"},
		headers={"X-Admin-Token": OPS_TOKEN},
	)

	assert response.status_code == 200
	assert response.json()["config"]["alpha_strong"] == pytest.approx(0.2)
	assert response.json()["config"]["alpha_weak"] == pytest.approx(0.25)
