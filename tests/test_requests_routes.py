def seed(fake_db, owner, admin, observer):
    fake_db.add_tool("Owned", owner.id)
    fake_db.add_tool("Foreign", admin.id)
    fake_db.add_request("r1", "tool-owned", observer.id, minutes=1)
    fake_db.add_request("r2", "tool-owned", observer.id, minutes=2)
    fake_db.add_request("r3", "tool-foreign", observer.id, minutes=3)


def statuses(fake_db):
    return {row["id"]: row["status"] for row in fake_db.rows("requests")}


def test_bulk_mark_in_progress(client, fake_db, owner, admin, observer, headers_for):
    seed(fake_db, owner, admin, observer)

    response = client.post(
        "/api/v1/requests/bulk",
        json={"ids": ["r1", "r2"], "action": "mark_in_progress"},
        headers=headers_for(owner),
    )

    assert response.status_code == 200
    assert response.json()["affected"] == 2
    assert statuses(fake_db) == {"r1": "in_progress", "r2": "in_progress", "r3": "pending"}
    updates = [n for n in fake_db.rows("notifications") if n["type"] == "request_updated"]
    assert {n["user_id"] for n in updates} == {observer.id}


def test_bulk_delete_needs_confirmation(client, fake_db, owner, admin, observer, headers_for):
    seed(fake_db, owner, admin, observer)

    response = client.post(
        "/api/v1/requests/bulk",
        json={"ids": ["r1", "r2"], "action": "delete"},
        headers=headers_for(owner),
    )

    assert response.status_code == 409
    assert len(fake_db.rows("requests")) == 3


def test_bulk_delete_with_confirmation(client, fake_db, owner, admin, observer, headers_for):
    seed(fake_db, owner, admin, observer)

    response = client.post(
        "/api/v1/requests/bulk",
        json={"ids": ["r1", "r2"], "action": "delete", "confirm": True},
        headers=headers_for(owner),
    )

    assert response.status_code == 200
    assert response.json()["affected"] == 2
    assert [row["id"] for row in fake_db.rows("requests")] == ["r3"]


def test_owner_cannot_touch_foreign_requests(client, fake_db, owner, admin, observer, headers_for):
    seed(fake_db, owner, admin, observer)

    response = client.post(
        "/api/v1/requests/bulk",
        json={"ids": ["r1", "r3"], "action": "mark_completed"},
        headers=headers_for(owner),
    )

    assert response.status_code == 403
    assert statuses(fake_db)["r1"] == "pending"


def test_empty_selection_rejected(client, fake_db, admin, headers_for):
    response = client.post(
        "/api/v1/requests/bulk",
        json={"ids": [], "action": "mark_completed"},
        headers=headers_for(admin),
    )
    assert response.status_code == 400


def test_observer_has_no_bulk_permission(client, fake_db, owner, admin, observer, headers_for):
    seed(fake_db, owner, admin, observer)
    response = client.post(
        "/api/v1/requests/bulk",
        json={"ids": ["r1"], "action": "mark_completed"},
        headers=headers_for(observer),
    )
    assert response.status_code == 403


def test_create_request_notifies_tool_owner(client, fake_db, owner, observer, headers_for):
    fake_db.add_tool("Owned", owner.id)

    response = client.post(
        "/api/v1/requests",
        json={"tool_id": "tool-owned", "title": "Add SSO"},
        headers=headers_for(observer),
    )

    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    assigned = [n for n in fake_db.rows("notifications") if n["type"] == "request_assigned"]
    assert [n["user_id"] for n in assigned] == [owner.id]


def test_mine_for_owner_means_requests_on_my_tools(client, fake_db, owner, admin, observer, headers_for):
    seed(fake_db, owner, admin, observer)
    response = client.get("/api/v1/requests?mine=true", headers=headers_for(owner))
    assert [row["id"] for row in response.json()] == ["r2", "r1"]


def test_unauthenticated_request_redirects_to_login(client):
    response = client.get("/api/v1/requests")
    assert response.status_code == 401
    assert response.json()["detail"] == {
        "message": "Authentication required", "redirect": "/login", "from": "/requests"
    }


def test_mfa_pending_user_is_sent_to_profile(client, fake_db, headers_for):
    from toolhub.config.permissions_config import Role

    pending = fake_db.add_user("Pen Ding", Role.OWNER, mfa=False)
    response = client.get("/api/v1/requests", headers=headers_for(pending))
    assert response.status_code == 403
    assert response.json()["detail"]["redirect"] == "/profile"
    assert response.json()["detail"]["mfa_required"] is True
