"""Authentication flow tests.

Tests company registration → email verification → login, the password
reset tokens, and user management guards.

Run with: pytest tests/test_auth.py -v
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from abasta.auth.jwt import create_access_token
from abasta.models import CompanyStatus, User, UserRole

NEW_PASSWORD = "Changed456!"

REGISTER_BODY = {
    "companyName": "Cafeteria Nova",
    "taxId": "B55555555",
    "companyEmail": "hola@novacuina.cat",
    "companyCity": "Girona",
    "adminEmail": "Jordi@NovaCuina.cat",
    "adminPassword": "Secret123!",
    "adminFirstName": "Jordi",
    "adminLastName": "Roca",
}


async def column_for(db, column, email: str):
    return await db.scalar(select(column).where(User.email == email))


# ── Company registration ─────────────────────────────────────

@pytest.mark.api
@pytest.mark.asyncio
class TestCompanyRegistration:
    """POST /api/companies/register, then verify and log in"""

    async def test_register_creates_pending_company_and_admin(
        self, unauth_client, db_session, mailer
    ):
        resp = await unauth_client.post("/api/companies/register", json=REGISTER_BODY)

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["status"] == "PENDING"
        assert data["taxId"] == "B55555555"

        role = await column_for(db_session, User.role, "jordi@novacuina.cat")
        assert role == UserRole.ADMIN
        assert [m["to"] for m in mailer.sent] == ["jordi@novacuina.cat"]

    async def test_full_flow_activates_company(self, unauth_client, db_session, mailer):
        await unauth_client.post("/api/companies/register", json=REGISTER_BODY)
        login = {"email": "jordi@novacuina.cat", "password": "Secret123!"}

        resp = await unauth_client.post("/api/auth/login", json=login)
        assert resp.status_code == 400
        assert "verified" in resp.json()["message"]

        token = await column_for(db_session, User.email_verification_token, "jordi@novacuina.cat")
        assert token in mailer.sent[0]["html"]
        resp = await unauth_client.post("/api/auth/verify-email", json={"token": token})
        assert resp.status_code == 200

        resp = await unauth_client.post("/api/auth/login", json=login)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["tokenType"] == "Bearer"
        assert data["expiresIn"] == 3600
        assert data["user"]["lastLogin"] is not None

        headers = {"Authorization": f"Bearer {data['accessToken']}"}
        resp = await unauth_client.get("/api/companies/me", headers=headers)
        assert resp.json()["data"]["status"] == CompanyStatus.ACTIVE.value

    async def test_duplicate_tax_id_is_409(self, unauth_client):
        await unauth_client.post("/api/companies/register", json=REGISTER_BODY)
        body = {**REGISTER_BODY, "adminEmail": "other@novacuina.cat"}

        resp = await unauth_client.post("/api/companies/register", json=body)
        assert resp.status_code == 409

    async def test_duplicate_admin_email_is_409(self, unauth_client, seed):
        body = {**REGISTER_BODY, "adminEmail": seed.admin_email.upper()}
        resp = await unauth_client.post("/api/companies/register", json=body)
        assert resp.status_code == 409

    async def test_weak_password_is_400_with_field_errors(self, unauth_client):
        body = {**REGISTER_BODY, "adminPassword": "password"}
        resp = await unauth_client.post("/api/companies/register", json=body)

        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["data"]

    async def test_other_company_lookup_forbidden(self, client, other_company):
        resp = await client.get(f"/api/companies/{other_company.company_uuid}")
        assert resp.status_code == 403


# ── Login ────────────────────────────────────────────────────

@pytest.mark.api
@pytest.mark.asyncio
class TestLogin:
    async def test_login_is_case_insensitive_on_email(self, unauth_client, seed):
        resp = await unauth_client.post(
            "/api/auth/login", json={"email": seed.admin_email.upper(), "password": "Secret123!"}
        )
        assert resp.status_code == 200

    async def test_wrong_password(self, unauth_client, seed):
        resp = await unauth_client.post(
            "/api/auth/login", json={"email": seed.admin_email, "password": "Wrong123!"}
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid email or password"

    async def test_inactive_user_cannot_log_in(self, unauth_client, seed, db_session):
        seed.admin.is_active = False
        await db_session.commit()

        resp = await unauth_client.post(
            "/api/auth/login", json={"email": seed.admin_email, "password": "Secret123!"}
        )
        assert resp.status_code == 400

    async def test_garbage_token_is_401(self, unauth_client, seed):
        resp = await unauth_client.get(
            "/api/suppliers/search", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert resp.status_code == 401

    async def test_token_for_unknown_user_is_401(self, unauth_client, seed):
        headers = {"Authorization": f"Bearer {create_access_token('ghost@abasta.cat')}"}
        resp = await unauth_client.get("/api/suppliers/search", headers=headers)
        assert resp.status_code == 401


# ── Password reset ───────────────────────────────────────────

@pytest.mark.api
@pytest.mark.asyncio
class TestPasswordReset:
    async def test_reset_flow(self, unauth_client, seed, db_session, mailer):
        resp = await unauth_client.post(
            "/api/auth/forgot-password", json={"email": seed.admin_email}
        )
        assert resp.status_code == 200
        token = await column_for(db_session, User.password_reset_token, seed.admin_email)
        assert token in mailer.sent[-1]["html"]

        resp = await unauth_client.post(
            "/api/auth/reset-password", json={"token": token, "newPassword": NEW_PASSWORD}
        )
        assert resp.status_code == 200

        # Token is single use
        resp = await unauth_client.post(
            "/api/auth/reset-password", json={"token": token, "newPassword": NEW_PASSWORD}
        )
        assert resp.status_code == 400

        resp = await unauth_client.post(
            "/api/auth/login", json={"email": seed.admin_email, "password": NEW_PASSWORD}
        )
        assert resp.status_code == 200

    async def test_new_request_replaces_previous_token(self, unauth_client, seed, db_session):
        await unauth_client.post("/api/auth/forgot-password", json={"email": seed.admin_email})
        first = await column_for(db_session, User.password_reset_token, seed.admin_email)
        await unauth_client.post("/api/auth/forgot-password", json={"email": seed.admin_email})
        second = await column_for(db_session, User.password_reset_token, seed.admin_email)

        assert first != second
        resp = await unauth_client.post(
            "/api/auth/reset-password", json={"token": first, "newPassword": NEW_PASSWORD}
        )
        assert resp.status_code == 400

    async def test_expired_token_rejected(self, unauth_client, seed, db_session):
        seed.admin.password_reset_token = "expired-token"
        seed.admin.password_reset_expires = datetime.utcnow() - timedelta(minutes=1)
        await db_session.commit()

        resp = await unauth_client.post(
            "/api/auth/reset-password",
            json={"token": "expired-token", "newPassword": NEW_PASSWORD},
        )
        assert resp.status_code == 400

    async def test_unknown_email_is_404(self, unauth_client, seed):
        resp = await unauth_client.post(
            "/api/auth/forgot-password", json={"email": "nobody@abasta.cat"}
        )
        assert resp.status_code == 404

    async def test_resend_verification_for_verified_user_is_400(self, unauth_client, seed):
        resp = await unauth_client.post(
            "/api/auth/resend-verification", json={"email": seed.admin_email}
        )
        assert resp.status_code == 400


# ── User management ──────────────────────────────────────────

@pytest.mark.api
@pytest.mark.asyncio
class TestUserManagement:
    NEW_USER = {
        "email": "cuina@abasta.cat",
        "password": "Cuina123!",
        "firstName": "Pere",
        "lastName": "Mas",
    }

    async def test_admin_adds_unverified_user(self, client, mailer):
        resp = await client.post("/api/users", json=self.NEW_USER)

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["role"] == "USER"
        assert data["emailVerified"] is False
        assert mailer.sent[-1]["to"] == "cuina@abasta.cat"

    async def test_plain_user_cannot_add_users(self, client, mailer):
        await client.post("/api/users", json=self.NEW_USER)
        headers = {"Authorization": f"Bearer {create_access_token('cuina@abasta.cat')}"}

        resp = await client.post(
            "/api/users", json={**self.NEW_USER, "email": "x@abasta.cat"}, headers=headers
        )
        assert resp.status_code == 403

    async def test_admin_cannot_deactivate_self(self, client, seed):
        resp = await client.patch(
            f"/api/users/{seed.admin_uuid}/status", params={"isActive": "false"}
        )
        assert resp.status_code == 400

    async def test_change_password_only_for_self(self, client, seed):
        created = (await client.post("/api/users", json=self.NEW_USER)).json()["data"]
        body = {"currentPassword": "Cuina123!", "newPassword": NEW_PASSWORD}

        resp = await client.patch(f"/api/users/{created['uuid']}/change-password", json=body)
        assert resp.status_code == 403

    async def test_change_password_requires_current(self, client, seed):
        body = {"currentPassword": "Wrong123!", "newPassword": NEW_PASSWORD}
        resp = await client.patch(f"/api/users/{seed.admin_uuid}/change-password", json=body)
        assert resp.status_code == 400

    async def test_other_company_user_is_hidden(self, client, other_company, db_session):
        other_uuid = await column_for(db_session, User.uuid, other_company.admin_email)
        resp = await client.get(f"/api/users/{other_uuid}")
        assert resp.status_code == 404
