# tests/test_agents.py


def _register(client, agent_id="THEO-5001", **fields):
    payload = {"agentId": agent_id, "name": agent_id.split("-")[0].title(), "type": "frontend"}
    payload.update(fields)
    response = client.post("/api/agents", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# --- Register ---
def test_register_agent_mirrors_into_directory(client, directory, broadcaster):
    agent = _register(client, port=5001, capabilities=["react"])

    assert agent["agentId"] == "THEO-5001"
    assert agent["status"] == "offline"
    assert agent["performance"] == {"tasksCompleted": 0, "averageResponseTime": 0, "successRate": 100}
    assert agent["capabilities"] == ["react"]

    entry = directory.agents["THEO-5001"]
    assert entry["document"] == "Agent Theo - frontend"
    assert entry["metadata"]["agentId"] == "THEO-5001"
    assert entry["metadata"]["status"] == "offline"

    assert broadcaster.names() == ["agentRegistered"]
    assert "directoryStatus" not in broadcaster.last("agentRegistered")


def test_register_survives_directory_outage(client, directory, broadcaster):
    directory.available = False

    response = client.post("/api/agents", json={"agentId": "QUINN-5004", "name": "Quinn", "type": "qa"})

    assert response.status_code == 201
    assert directory.agents == {}
    assert broadcaster.names() == ["agentRegistered"]


def test_register_survives_directory_error(client, directory):
    directory.failure = "collection locked"
    response = client.post("/api/agents", json={"agentId": "QUINN-5004", "name": "Quinn", "type": "qa"})
    assert response.status_code == 201


def test_register_duplicate_agent_id_is_400(client):
    _register(client)
    response = client.post("/api/agents", json={"agentId": "THEO-5001", "name": "Other", "type": "qa"})
    assert response.status_code == 400
    assert "already exists" in response.json()["error"]


def test_register_validates_payload(client):
    assert client.post("/api/agents", json={"agentId": "X-1", "name": "X"}).status_code == 400
    assert client.post("/api/agents", json={"agentId": "X-1", "name": "X", "type": "robot"}).status_code == 400
    assert client.post("/api/agents", json={"name": "X", "type": "qa"}).status_code == 400
    assert client.post(
        "/api/agents", json={"agentId": "X-1", "name": "X", "type": "qa", "status": "sleeping"}
    ).status_code == 400


# --- List ---
def test_list_sorted_by_agent_id_with_presence(client, directory):
    _register(client, "MARCUS-5002")
    _register(client, "ALEX-5003")
    directory.available = False
    _register(client, "ZED-7000")
    directory.available = True

    agents = client.get("/api/agents").json()

    assert [a["agentId"] for a in agents] == ["ALEX-5003", "MARCUS-5002", "ZED-7000"]
    presence = {a["agentId"]: a["directoryStatus"] for a in agents}
    assert presence == {"ALEX-5003": "active", "MARCUS-5002": "active", "ZED-7000": "inactive"}


def test_list_marks_all_inactive_when_directory_down(client, directory):
    _register(client, "MARCUS-5002")
    directory.available = False

    agents = client.get("/api/agents").json()

    assert [a["directoryStatus"] for a in agents] == ["inactive"]


# --- Update ---
def test_update_agent_stamps_last_seen(client, broadcaster):
    agent = _register(client)

    response = client.put(f"/api/agents/{agent['id']}", json={"status": "busy", "currentProject": "p-1"})

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "busy"
    assert updated["currentProject"] == "p-1"
    assert updated["lastSeen"] >= agent["lastSeen"]
    assert broadcaster.last("agentUpdated")["status"] == "busy"


def test_update_agent_by_agent_id(client):
    _register(client)
    response = client.put("/api/agents/THEO-5001", json={"status": "online"})
    assert response.status_code == 200
    assert response.json()["status"] == "online"


def test_update_missing_agent_is_404(client):
    response = client.put("/api/agents/NOBODY-1", json={"status": "online"})
    assert response.status_code == 404
    assert response.json() == {"error": "Agent not found"}


def test_update_agent_validates(client):
    agent = _register(client)
    assert client.put(f"/api/agents/{agent['id']}", json={"status": "asleep"}).status_code == 400
    assert client.put(f"/api/agents/{agent['id']}", json={"type": None}).status_code == 400


def test_update_agent_id_collision_is_400(client):
    _register(client, "THEO-5001")
    other = _register(client, "MARCUS-5002")
    response = client.put(f"/api/agents/{other['id']}", json={"agentId": "THEO-5001"})
    assert response.status_code == 400


# --- Delete ---
def test_deleted_agent_disappears_from_list(client, broadcaster):
    keep = _register(client, "ALEX-5003")
    gone = _register(client, "MARCUS-5002")

    response = client.delete(f"/api/agents/{gone['id']}")

    assert response.status_code == 200
    assert broadcaster.last("agentDeleted") == {"id": gone["id"], "agentId": "MARCUS-5002"}
    assert [a["agentId"] for a in client.get("/api/agents").json()] == [keep["agentId"]]


def test_delete_leaves_directory_entry(client, directory):
    _register(client)
    client.delete("/api/agents/THEO-5001")
    assert "THEO-5001" in directory.agents


def test_delete_missing_agent_is_404(client):
    assert client.delete("/api/agents/NOBODY-1").status_code == 404


# --- Timestamps ---
def test_agent_timestamps_are_sent_as_utc(client, broadcaster):
    agent = _register(client)
    assert agent["lastSeen"].endswith("Z")
    assert agent["createdAt"].endswith("Z")

    listed = client.get("/api/agents").json()
    assert listed[0]["lastSeen"].endswith("Z")

    client.put("/api/agents/THEO-5001", json={"status": "busy"})
    assert broadcaster.last("agentUpdated")["lastSeen"].endswith("Z")
