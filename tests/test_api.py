"""
API scenarios over the default dataset.
"""
import json

from app.features.save_data import routes as save_data_routes
from app.core.storage.blob import JsonFileBlobStore


SUPER_ADMIN = "superadmin@example.com"
ORG_ADMIN = "admin@techcorp.com"
ORG_USER = "user@techcorp.com"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_requires_login(client):
    assert client.get("/users").status_code == 401
    assert client.get("/orders").status_code == 401
    assert client.get("/auth/me").status_code == 401


def test_login_unknown_email(client):
    response = client.post("/auth/login", json={"email": "ghost@example.com", "password": "x"})

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["reason"] == "InvalidCredentials"
    assert client.get("/auth/me").status_code == 401


def test_login_and_logout(client, login):
    user = login(SUPER_ADMIN)
    assert user["id"] == "user-1"

    me = client.get("/auth/me").json()
    assert me["isAuthenticated"] is True
    assert me["user"]["email"] == SUPER_ADMIN

    assert client.post("/auth/logout").status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_org_admin_sees_own_organization(client, login):
    login(ORG_ADMIN)

    users = client.get("/users").json()
    assert sorted(user["id"] for user in users) == ["user-2", "user-3"]

    orders = client.get("/orders").json()
    assert sorted(order["id"] for order in orders) == ["order-1", "order-2"]

    assert client.get("/organizations").json() == []
    assert client.get("/organizations/org-1").status_code == 404
    assert client.get("/users/user-1").status_code == 404


def test_super_admin_sees_everything(client, login):
    login(SUPER_ADMIN)
    assert len(client.get("/users").json()) == 3
    assert len(client.get("/organizations").json()) == 2
    assert len(client.get("/orders").json()) == 2


def test_records_use_camel_case(client, login):
    login(ORG_ADMIN)
    order = client.get("/orders/order-1").json()
    assert order["userId"] == "user-3"
    assert order["organizationId"] == "org-1"
    assert order["status"] == "in_progress"
    assert order["createdAt"].startswith("2024-01-01T00:00:00")


def test_org_user_sees_only_self_and_own_orders(client, login):
    login(ORG_USER)
    users = client.get("/users").json()
    assert [user["id"] for user in users] == ["user-3"]
    assert len(client.get("/orders").json()) == 2


def test_org_user_order_is_pinned_to_caller(client, login):
    login(ORG_USER)

    response = client.post(
        "/orders",
        json={"title": "Sneaky", "userId": "user-2", "organizationId": "org-2"},
    )

    assert response.status_code == 201, response.text
    order = response.json()
    assert order["userId"] == "user-3"
    assert order["organizationId"] == "org-1"
    assert order["status"] == "pending"


def test_org_user_cannot_reassign_own_order(client, login):
    login(ORG_USER)
    response = client.patch("/orders/order-1", json={"userId": "user-2", "status": "completed"})
    assert response.status_code == 200
    assert response.json()["userId"] == "user-3"
    assert response.json()["status"] == "completed"


def test_org_admin_order_in_other_organization_denied(client, login):
    login(SUPER_ADMIN)
    mia = client.post(
        "/users",
        json={"email": "mia@marketing.com", "name": "Mia", "role": "org_user", "organizationId": "org-2"},
    ).json()

    login(ORG_ADMIN)
    response = client.post(
        "/orders",
        json={"title": "Elsewhere", "userId": mia["id"], "organizationId": "org-2"},
    )
    assert response.status_code == 403

    response = client.post("/orders", json={"title": "Team order", "userId": "user-3"})
    assert response.status_code == 201
    assert response.json()["organizationId"] == "org-1"


def test_validation_failure_is_structured(client, login):
    login(SUPER_ADMIN)
    response = client.post("/orders", json={"title": "No owner", "organizationId": "org-1"})
    assert response.status_code == 400
    assert "user_id" in response.json()

    response = client.post("/orders", json={"title": "", "userId": "user-3", "organizationId": "org-1"})
    assert response.status_code == 400
    assert "title" in response.json()


def test_org_admin_user_management(client, login):
    login(ORG_ADMIN)

    created = client.post(
        "/users",
        json={"email": "new@techcorp.com", "name": "New Hire", "role": "org_user", "organizationId": "org-1"},
    )
    assert created.status_code == 201
    new_id = created.json()["id"]

    foreign = client.post(
        "/users",
        json={"email": "spy@marketing.com", "name": "Spy", "role": "org_user", "organizationId": "org-2"},
    )
    assert foreign.status_code == 403

    promoted = client.patch(f"/users/{new_id}", json={"role": "super_admin", "organizationId": None})
    assert promoted.status_code == 403

    assert client.delete(f"/users/{new_id}").status_code == 200
    assert client.get(f"/users/{new_id}").status_code == 404
    assert client.delete("/users/user-2").status_code == 400


def test_org_user_profile_edit(client, login):
    login(ORG_USER)
    assert client.patch("/users/user-3", json={"name": "Renamed"}).json()["name"] == "Renamed"
    assert client.patch("/users/user-3", json={"role": "org_admin"}).status_code == 403
    assert client.patch("/users/user-2", json={"name": "Hacked"}).status_code == 404


def test_organization_crud_and_cascade(client, login):
    login(SUPER_ADMIN)

    created = client.post("/organizations", json={"name": "Initech", "description": "Software"})
    assert created.status_code == 201
    org_id = created.json()["id"]

    updated = client.patch(f"/organizations/{org_id}", json={"description": "TPS reports"})
    assert updated.json()["description"] == "TPS reports"
    assert updated.json()["name"] == "Initech"

    assert client.delete("/organizations/org-1").status_code == 200
    assert [user["id"] for user in client.get("/users").json()] == ["user-1"]
    assert client.get("/orders").json() == []
    assert client.delete("/organizations/org-1").status_code == 404


def test_org_admin_cannot_manage_organizations(client, login):
    login(ORG_ADMIN)
    assert client.post("/organizations", json={"name": "Mine"}).status_code == 403


def test_missing_records_are_404(client, login):
    login(SUPER_ADMIN)
    assert client.get("/orders/order-404").status_code == 404
    assert client.patch("/orders/order-404", json={"title": "x"}).status_code == 404
    assert client.delete("/orders/order-404").status_code == 404


def test_order_status_filter(client, login):
    login(SUPER_ADMIN)
    orders = client.get("/orders", params={"status": "pending"}).json()
    assert [order["id"] for order in orders] == ["order-2"]


def test_dashboard_stats(client, login):
    login(ORG_ADMIN)
    stats = client.get("/dashboard/stats").json()
    assert stats["totalOrganizations"] == 1
    assert stats["totalUsers"] == 2
    assert stats["orders"] == {
        "total": 2, "pending": 1, "inProgress": 1, "completed": 0, "cancelled": 0,
    }


def test_route_access(client, login):
    login(ORG_USER)
    assert client.get("/auth/routes", params={"path": "/users"}).json() == {"route": "/users", "allowed": False}
    assert client.get("/auth/routes", params={"path": "/orders"}).json()["allowed"] is True


def test_data_management_super_admin_only(client, login):
    login(ORG_ADMIN)
    assert client.post("/data-management/reset").status_code == 403

    login(SUPER_ADMIN)
    client.delete("/orders/order-1")
    assert client.get("/data-management/counts").json() == {"users": 3, "organizations": 2, "orders": 1}
    assert client.post("/data-management/reset").json() == {"users": 3, "organizations": 2, "orders": 2}


def test_save_data_endpoint(client, tmp_path):
    client.app.dependency_overrides[save_data_routes.get_file_store] = lambda: JsonFileBlobStore(tmp_path)

    assert client.get("/api/save-data").status_code == 400
    assert client.get("/api/save-data", params={"type": "users"}).status_code == 500

    payload = [{"id": "user-9", "email": "nine@example.com"}]
    saved = client.post("/api/save-data", json={"type": "users", "data": payload})
    assert saved.json() == {"success": True, "message": "users data saved successfully", "count": 1}
    assert json.loads((tmp_path / "users.json").read_text()) == {"users": payload}

    loaded = client.get("/api/save-data", params={"type": "users"}).json()
    assert loaded == {"success": True, "data": payload, "count": 1}

    assert client.post("/api/save-data", json={"type": "widgets", "data": []}).status_code == 400
