import pytest

from Tester.backend import app


@pytest.fixture
def client():
	app.config["TESTING"] = True
	with app.test_client() as client:
		yield client


def test_health(client):
	res = client.get("/api/health")
	assert res.status_code == 200
	assert res.get_json()["status"] == "ok"


def test_default_config_lists_every_modifier(client):
	data = client.get("/api/difficulty/config").get_json()
	assert data["success"] is True
	assert set(data["result"]["modifiers"]) >= {"WinStreak", "LossStreak", "SessionPattern"}
	assert data["result"]["aggregation_strategy"] == "diminishing_returns"


def test_calculate_with_win_streak(client):
	res = client.post("/api/difficulty/calculate", json={
		"current_difficulty": 3.0,
		"signals": {"win_streak": 5},
	})
	data = res.get_json()
	assert res.status_code == 200
	assert data["success"] is True
	assert data["result"]["new_difficulty"] == pytest.approx(4.0)
	assert data["result"]["primary_reason"] == "Win streak: 5 consecutive wins"


def test_calculate_with_rage_quit_and_sum_strategy(client):
	res = client.post("/api/difficulty/calculate", json={
		"current_difficulty": 5.0,
		"signals": {"last_quit_type": "rage_quit", "current_session_duration": 12},
		"config": {"aggregation_strategy": "sum"},
	})
	data = res.get_json()
	assert data["success"] is True
	# -1.0 rage quit, -0.5 very short session
	assert data["result"]["new_difficulty"] == pytest.approx(3.5)
	assert data["result"]["primary_reason"].startswith("Rage quit detected")


def test_calculate_rejects_unknown_signals(client):
	res = client.post("/api/difficulty/calculate", json={"signals": {"mood": "angry"}})
	assert res.status_code == 400
	assert res.get_json()["success"] is False


def test_calculate_rejects_bad_config(client):
	res = client.post("/api/difficulty/calculate", json={"config": {"diminishing_factor": 3}})
	assert res.status_code == 400


def test_aggregate_strategies(client):
	results = [
		{"name": "A", "value": 1.5, "reason": "a"},
		{"name": "B", "value": -1.0, "reason": "b"},
		{"name": "C", "value": 0.3, "reason": "c"},
	]
	summed = client.post("/api/difficulty/aggregate", json={"results": results, "strategy": "sum"}).get_json()
	assert summed["result"]["total"] == pytest.approx(0.8)
	assert summed["result"]["count"] == 3
	diminished = client.post("/api/difficulty/aggregate", json={"results": results, "factor": 0.6}).get_json()
	assert diminished["result"]["strategy"] == "diminishing_returns"
	assert diminished["result"]["total"] == pytest.approx(1.008)


def test_aggregate_rejects_unknown_strategy(client):
	res = client.post("/api/difficulty/aggregate", json={"results": [], "strategy": "median"})
	assert res.status_code == 400
	assert "median" in res.get_json()["error"]


def test_level_endpoint(client):
	data = client.post("/api/difficulty/level", json={"difficulty": 12.0}).get_json()
	assert data["success"] is True
	assert data["result"]["clamped"] == 10.0
	assert data["result"]["is_valid"] is False
	assert data["result"]["difficulty_label"] == "Hard"
	assert data["result"]["percentage"] == 1.0


def test_level_endpoint_requires_difficulty(client):
	res = client.post("/api/difficulty/level", json={})
	assert res.status_code == 400
