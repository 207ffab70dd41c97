import pytest
from fastapi import HTTPException
from starlette.requests import Request

from toolhub.config.permissions_config import Role
from toolhub.core.dependencies import API_PREFIX, MFA_ENROLLMENT_API_PATHS, require_route_access
from toolhub.modules.auth.identity import IdentityGateway
from toolhub.modules.auth.service import AuthService, evict_cached_user
from toolhub.modules.users.service import UserService


def test_enrollment_lifts_the_mfa_redirect_on_the_same_token(client, fake_db, headers_for):
    pending = fake_db.add_user("Pen Ding", Role.OWNER, mfa=False)
    headers = headers_for(pending)

    # First lookup caches is_mfa_enabled=False for this token
    assert client.get("/api/v1/auth/me", headers=headers).json()["is_mfa_enabled"] is False
    assert client.get("/api/v1/tools", headers=headers).status_code == 403

    enrollment = client.post("/api/v1/profile/mfa/enroll", headers=headers)
    assert enrollment.status_code == 201
    body = enrollment.json()
    assert body["secret"] == "JBSWY3DPEHPK3PXP"
    assert fake_db.auth.enrollments[0]["issuer"] == "ApplyWizz ToolHub"
    assert fake_db.auth.enrollments[0]["friendly_name"] == pending.email

    verified = client.post(
        "/api/v1/profile/mfa/verify",
        json={"factor_id": body["factor_id"], "code": "123456"},
        headers=headers,
    )
    assert verified.status_code == 200
    assert verified.json()["is_mfa_enabled"] is True

    assert client.get("/api/v1/auth/me", headers=headers).json()["is_mfa_enabled"] is True
    assert client.get("/api/v1/tools", headers=headers).status_code == 200
    assert fake_db.rows("audit_logs")[-1]["details"]["mfa_enabled"] is True


def test_wrong_code_keeps_mfa_pending(client, fake_db, headers_for):
    pending = fake_db.add_user("Pen Ding", Role.OBSERVER, mfa=False)
    headers = headers_for(pending)
    factor_id = client.post("/api/v1/profile/mfa/enroll", headers=headers).json()["factor_id"]

    rejected = client.post(
        "/api/v1/profile/mfa/verify",
        json={"factor_id": factor_id, "code": "000000"},
        headers=headers,
    )

    assert rejected.status_code == 400
    status = client.get("/api/v1/profile/mfa/factors", headers=headers).json()
    assert status["is_mfa_enabled"] is False
    assert [f["status"] for f in status["factors"]] == ["unverified"]


def test_code_must_be_six_digits(client, fake_db, headers_for):
    pending = fake_db.add_user("Pen Ding", Role.OBSERVER, mfa=False)
    response = client.post(
        "/api/v1/profile/mfa/verify",
        json={"factor_id": "f", "code": "12ab"},
        headers=headers_for(pending),
    )
    assert response.status_code == 422


def test_enroll_twice_is_a_conflict(client, owner, headers_for):
    response = client.post("/api/v1/profile/mfa/enroll", headers=headers_for(owner))
    assert response.status_code == 409


def test_unenroll_brings_back_the_redirect(client, fake_db, owner, headers_for):
    headers = headers_for(owner)
    assert client.get("/api/v1/tools", headers=headers).status_code == 200

    response = client.post("/api/v1/profile/mfa/unenroll", json={}, headers=headers)

    assert response.status_code == 200
    assert response.json() == {"is_mfa_enabled": False, "factors": []}
    blocked = client.get("/api/v1/tools", headers=headers)
    assert blocked.status_code == 403
    assert blocked.json()["detail"]["mfa_required"] is True


def test_unenroll_without_factor(client, fake_db, headers_for):
    pending = fake_db.add_user("Pen Ding", Role.OBSERVER, mfa=False)
    response = client.post("/api/v1/profile/mfa/unenroll", json={}, headers=headers_for(pending))
    assert response.status_code == 404


def test_mfa_routes_require_a_session(client):
    response = client.post("/api/v1/profile/mfa/enroll")
    assert response.status_code == 401
    assert response.json()["detail"]["redirect"] == "/login"


def guard_request(path: str) -> Request:
    return Request({"type": "http", "method": "GET", "path": path, "headers": [], "query_string": b""})


def pending_identity(fake_db) -> IdentityGateway:
    pending = fake_db.add_user("Pen Ding", Role.OWNER, mfa=False)
    gateway = IdentityGateway(AuthService(fake_db), UserService(fake_db))
    gateway.initialize(fake_db.auth.issue_token(pending.id))
    return gateway


@pytest.mark.parametrize("path", sorted(MFA_ENROLLMENT_API_PATHS))
def test_enrollment_routes_stay_reachable(fake_db, path):
    gateway = pending_identity(fake_db)
    assert require_route_access(guard_request(API_PREFIX + path), gateway) is gateway.current_user


@pytest.mark.parametrize("path", ["/profile/anything", "/profile/", "/profile/../dashboard", "/profiles"])
def test_other_profile_like_paths_are_redirected(fake_db, path):
    gateway = pending_identity(fake_db)
    with pytest.raises(HTTPException) as exc:
        require_route_access(guard_request(API_PREFIX + path), gateway)
    assert exc.value.status_code == 403
    assert exc.value.detail["redirect"] == "/profile"


def test_evict_cached_user_drops_every_token(fake_db, owner):
    service = AuthService(fake_db)
    first = fake_db.auth.issue_token(owner.id)
    service.get_current_user(first)
    service.get_current_user(first)
    assert fake_db.auth.users[owner.id].factors

    fake_db.auth.users[owner.id].factors.clear()
    assert service.get_current_user(first)["is_mfa_enabled"] is True  # still cached

    assert evict_cached_user(owner.id) == 1
    assert service.get_current_user(first)["is_mfa_enabled"] is False
