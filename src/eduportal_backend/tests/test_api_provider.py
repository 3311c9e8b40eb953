"""
Provider operators: signup, tenant provisioning and cross-provider isolation.
"""

import pytest

from eduportal_backend.settings import settings
from eduportal_backend.tests.fixtures import auth


def signup(client, name, email):
    response = client.post("/api/provider-auth/signup", json={
        "provider": {"name": name},
        "manager": {"first_name": "Pat", "last_name": "Provider", "email": email, "password": "secret123"},
    })
    assert response.status_code == 201
    return response.json()


def new_tenant(client, token, name, admin_email, password=None):
    admin = {"first_name": "Sally", "last_name": "School", "email": admin_email}
    if password is not None:
        admin["password"] = password
    return client.post("/api/provider/tenants", json={"tenant": {"name": name}, "admin": admin}, headers=auth(token))


@pytest.fixture
def acme(client):
    return signup(client, "Acme Education", "ops@acme.edu")


@pytest.fixture
def globex(client):
    return signup(client, "Globex Schools", "ops@globex.edu")


class TestProviderAuth:

    def test_signup_grants_default_permissions(self, acme):
        assert sorted(acme["provider_user"]["permissions"]) == [
            "tenants.create", "tenants.delete", "tenants.read", "tenants.update",
        ]

    def test_login_and_me(self, client, acme):
        response = client.post("/api/provider-auth/login", json={"email": "OPS@acme.edu", "password": "secret123"})
        assert response.status_code == 200

        me = client.get("/api/provider-auth/me", headers=auth(response.json()["token"]))
        assert me.json()["provider_id"] == acme["provider"]["id"]

    def test_duplicate_signup_email(self, client, acme):
        response = client.post("/api/provider-auth/signup", json={
            "provider": {"name": "Copycat"},
            "manager": {"first_name": "C", "last_name": "C", "email": "ops@acme.edu", "password": "secret123"},
        })
        assert response.status_code == 400

    def test_provider_token_cannot_use_portal(self, client, acme):
        response = client.get("/api/portal/students", headers=auth(acme["token"]))
        assert response.status_code == 401


class TestProviderRegister:

    def payload(self, acme):
        return {
            "provider_id": acme["provider"]["id"],
            "first_name": "Second",
            "last_name": "Operator",
            "email": "second@acme.edu",
            "password": "secret123",
            "permissions": ["tenants.read"],
        }

    def test_disabled_without_secret(self, client, acme, monkeypatch):
        monkeypatch.setattr(settings, "PROVIDER_SETUP_SECRET", None)
        response = client.post("/api/provider-auth/register", json=self.payload(acme), headers={"X-Setup-Secret": "anything"})
        assert response.status_code == 403

    def test_wrong_secret(self, client, acme, monkeypatch):
        monkeypatch.setattr(settings, "PROVIDER_SETUP_SECRET", "open-sesame")
        response = client.post("/api/provider-auth/register", json=self.payload(acme), headers={"X-Setup-Secret": "wrong"})
        assert response.status_code == 403

    def test_register_with_secret(self, client, acme, monkeypatch):
        monkeypatch.setattr(settings, "PROVIDER_SETUP_SECRET", "open-sesame")
        response = client.post("/api/provider-auth/register", json=self.payload(acme), headers={"X-Setup-Secret": "open-sesame"})

        assert response.status_code == 201
        assert response.json()["permissions"] == ["tenants.read"]

    def test_read_only_operator_cannot_create_tenants(self, client, acme, monkeypatch):
        monkeypatch.setattr(settings, "PROVIDER_SETUP_SECRET", "open-sesame")
        client.post("/api/provider-auth/register", json=self.payload(acme), headers={"X-Setup-Secret": "open-sesame"})

        login = client.post("/api/provider-auth/login", json={"email": "second@acme.edu", "password": "secret123"})
        response = new_tenant(client, login.json()["token"], "Read Only School", "ro@school.edu")

        assert response.status_code == 403
        assert response.json()["detail"]["required"] == ["tenants.create"]


class TestProviderTenants:

    def test_provision_tenant(self, client, acme):
        response = new_tenant(client, acme["token"], "Evergreen Terrace School", "sally@evergreen.edu")

        assert response.status_code == 201
        body = response.json()
        assert body["tenant"]["provider_id"] == acme["provider"]["id"]
        assert body["tenant"]["slug"] == "evergreen-terrace-school"
        assert len(body["roles"]) == 4
        assert len(body["temp_password"]) == 12

        login = client.post("/api/auth/login", json={"email": "sally@evergreen.edu", "password": body["temp_password"]})
        assert login.status_code == 200

    def test_list_filters_by_status(self, client, acme):
        tenant_id = new_tenant(client, acme["token"], "School One", "one@school.edu").json()["tenant"]["id"]
        new_tenant(client, acme["token"], "School Two", "two@school.edu")

        client.put(f"/api/provider/tenants/{tenant_id}/status", json={"status": "suspended"}, headers=auth(acme["token"]))

        response = client.get("/api/provider/tenants", params={"status": "suspended"}, headers=auth(acme["token"]))
        assert [t["id"] for t in response.json()] == [tenant_id]

    def test_other_provider_sees_nothing(self, client, acme, globex):
        tenant_id = new_tenant(client, acme["token"], "Private School", "p@private.edu").json()["tenant"]["id"]
        headers = auth(globex["token"])

        assert client.get("/api/provider/tenants", headers=headers).json() == []
        assert client.get(f"/api/provider/tenants/{tenant_id}", headers=headers).status_code == 404
        assert client.get(f"/api/provider/tenants/{tenant_id}/metrics", headers=headers).status_code == 404
        assert client.delete(f"/api/provider/tenants/{tenant_id}", headers=headers).status_code == 404
        assert client.post(f"/api/provider/tenants/{tenant_id}/admin/reset-password", headers=headers).status_code == 404

    def test_metrics(self, client, acme):
        body = new_tenant(client, acme["token"], "Metric School", "m@metric.edu").json()
        tenant_id = body["tenant"]["id"]

        client.post(f"/api/provider/tenants/{tenant_id}/users", json={
            "first_name": "Edna",
            "last_name": "Krabappel",
            "email": "edna@metric.edu",
            "role_ids": [role["id"] for role in body["roles"] if role["name"] == "TEACHER"],
        }, headers=auth(acme["token"]))

        response = client.get(f"/api/provider/tenants/{tenant_id}/metrics", headers=auth(acme["token"]))

        assert response.json() == {"tenant_id": tenant_id, "users": 2, "students": 0, "classes": 0, "subjects": 0}

    def test_reset_admin_password(self, client, acme):
        body = new_tenant(client, acme["token"], "Reset School", "r@reset.edu", password="original1").json()

        response = client.post(f"/api/provider/tenants/{body['tenant']['id']}/admin/reset-password", headers=auth(acme["token"]))
        assert response.status_code == 200

        new_password = response.json()["temp_password"]
        assert client.post("/api/auth/login", json={"email": "r@reset.edu", "password": "original1"}).status_code == 401
        assert client.post("/api/auth/login", json={"email": "r@reset.edu", "password": new_password}).status_code == 200

    def test_deleted_tenant_cannot_log_in(self, client, acme):
        tenant_id = new_tenant(client, acme["token"], "Closing School", "c@closing.edu", password="secret123").json()["tenant"]["id"]

        assert client.delete(f"/api/provider/tenants/{tenant_id}", headers=auth(acme["token"])).status_code == 200

        response = client.post("/api/auth/login", json={"email": "c@closing.edu", "password": "secret123"})
        assert response.status_code == 401
