"""
Notification inbox endpoints.
"""


def test_inbox_lists_newest_first(workflow, client, login, owner, collaborator, sale_property):
    proposal = workflow.propose(collaborator, sale_property)
    workflow.accept(owner, proposal["id"])
    workflow.sign(owner, proposal["id"])

    login(collaborator)
    response = client.get("/api/notifications")

    assert response.status_code == 200
    types = [n["type"] for n in response.json()]
    assert set(types) == {"collab:proposal_accepted", "contract:signed"}
    assert all(n["entity_id"] == proposal["id"] for n in response.json())
    assert all(n["read"] is False for n in response.json())


def test_unread_count_and_mark_read(workflow, client, login, owner, collaborator, sale_property):
    workflow.propose(collaborator, sale_property)

    login(owner)
    assert client.get("/api/notifications/unread-count").json() == {"unread_count": 1}

    notification_id = client.get("/api/notifications").json()[0]["id"]
    assert client.post(f"/api/notifications/{notification_id}/read").status_code == 200
    assert client.get("/api/notifications/unread-count").json() == {"unread_count": 0}
    assert client.get("/api/notifications", params={"unread_only": True}).json() == []


def test_mark_read_of_someone_else_notification(workflow, client, login, collaborator, other_agent, sale_property):
    workflow.propose(collaborator, sale_property)
    login(other_agent)
    assert client.post("/api/notifications/missing/read").status_code == 404


def test_mark_all_read(workflow, client, login, owner, collaborator, sale_property):
    proposal = workflow.propose(collaborator, sale_property)
    workflow.accept(owner, proposal["id"])
    workflow.sign(owner, proposal["id"])
    workflow.sign(collaborator, proposal["id"])

    login(owner)
    response = client.post("/api/notifications/read-all")

    assert response.json() == {"status": "success", "updated": 3}
    assert client.get("/api/notifications/unread-count").json() == {"unread_count": 0}
