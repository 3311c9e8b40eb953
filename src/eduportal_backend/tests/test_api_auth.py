"""
Login, registration and the request guards of both token namespaces.
"""

from eduportal_backend.auth.tokens import issue_provider_token
from eduportal_backend.model.tenant import Tenant
from eduportal_backend.tests.fixtures import auth, make_user, tenant_token


class TestTenantAuth:

    def test_register_creates_school_and_logs_in(self, client):
        response = client.post("/api/auth/register", json={
            "email": "Principal@Riverside.edu",
            "password": "secret123",
            "first_name": "Rita",
            "last_name": "River",
            "tenant_name": "Riverside Academy",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "principal@riverside.edu"
        assert [role["name"] for role in body["user"]["roles"]] == ["ADMIN"]

        me = client.get("/api/auth/me", headers=auth(body["token"]))
        assert me.status_code == 200
        assert me.json()["id"] == body["user"]["id"]

    def test_register_rejects_taken_email(self, client, school):
        response = client.post("/api/auth/register", json={
            "email": "admin@springfield.edu",
            "password": "secret123",
            "first_name": "Dup",
            "last_name": "Licate",
            "tenant_name": "Another School",
        })
        assert response.status_code == 400

    def test_register_validation_error_is_400(self, client):
        response = client.post("/api/auth/register", json={"email": "not-an-email"})
        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Validation failed"

    def test_login(self, client, school):
        response = client.post("/api/auth/login", json={"email": "ADMIN@springfield.edu", "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["user"]["tenant_id"] == school.tenant.id

    def test_login_wrong_password(self, client, school):
        response = client.post("/api/auth/login", json={"email": "admin@springfield.edu", "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_unknown_user(self, client):
        response = client.post("/api/auth/login", json={"email": "ghost@nowhere.edu", "password": "secret123"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_inactive_user(self, client, db, school):
        teacher = make_user(db, school.tenant.id, "teacher@springfield.edu")
        teacher.is_active = False
        db.commit()

        response = client.post("/api/auth/login", json={"email": "teacher@springfield.edu", "password": "secret123"})
        assert response.status_code == 401

    def test_login_suspended_tenant(self, client, db, school):
        tenant = db.query(Tenant).filter(Tenant.id == school.tenant.id).one()
        tenant.status = "suspended"
        db.commit()

        response = client.post("/api/auth/login", json={"email": "admin@springfield.edu", "password": "secret123"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Tenant account is not active"


class TestGuards:

    def test_missing_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authorized, no token"

    def test_malformed_header(self, client, school):
        token = tenant_token(school.admin_user)
        response = client.get("/api/auth/me", headers={"Authorization": f"Token {token}"})
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/api/auth/me", headers=auth("not.a.token"))
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_provider_token_rejected_on_tenant_routes(self, client, school):
        token = issue_provider_token(school.admin_user.id)
        response = client.get("/api/auth/me", headers=auth(token))
        assert response.status_code == 401

    def test_tenant_token_rejected_on_provider_routes(self, client, school):
        response = client.get("/api/provider-auth/me", headers=auth(tenant_token(school.admin_user)))
        assert response.status_code == 401

    def test_deactivated_user_loses_access(self, client, db, school):
        teacher = make_user(db, school.tenant.id, "teacher@springfield.edu")
        token = tenant_token(teacher)

        assert client.get("/api/auth/me", headers=auth(token)).status_code == 200

        teacher.is_active = False
        db.commit()

        assert client.get("/api/auth/me", headers=auth(token)).status_code == 401

    def test_suspended_tenant_reports_status(self, client, db, school):
        token = tenant_token(school.admin_user)

        tenant = db.query(Tenant).filter(Tenant.id == school.tenant.id).one()
        tenant.status = "suspended"
        db.commit()

        response = client.get("/api/auth/me", headers=auth(token))
        assert response.status_code == 401
        assert response.json()["detail"]["status"] == "suspended"

    def test_deleted_tenant_is_not_found(self, client, db, school):
        token = tenant_token(school.admin_user)

        tenant = db.query(Tenant).filter(Tenant.id == school.tenant.id).one()
        tenant.soft_delete()
        db.commit()

        assert client.get("/api/auth/me", headers=auth(token)).status_code == 404
