"""
Integration tests for /api/v1/auth and /api/v1/users.
"""
from fitness_gh.db.models.account import Account
from fitness_gh.db.models.email_verification import EmailVerification
from fitness_gh.db.models.gym import Gym
from fitness_gh.db.models.refresh_token import RefreshToken

from conftest import create_user, auth_headers

API = "/api/v1"


def _register(client, **overrides):
    body = {
        "email": "ama@example.com",
        "password": "SecurePass123",
        "username": "ama_m",
        "first_name": "Ama",
        "last_name": "Mensah",
    }
    body.update(overrides)
    return client.post(f"{API}/auth/register", json=body)


def _login(client, email="ama@example.com", password="SecurePass123"):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


def test_register_sends_otp_instead_of_tokens(client, db_session):
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert "verification code" in body["message"]
    assert body["data"]["account"]["email_verified"] is False
    assert body["data"]["profile"]["username"] == "ama_m"
    assert "access_token" not in body["data"]

    otp = db_session.query(EmailVerification).filter(EmailVerification.email == "ama@example.com").one()
    assert len(otp.otp) == 6


def test_register_gym_owner_creates_gym(client, db_session):
    response = _register(client, user_type="GYM_OWNER", gym_name="East Legon Fitness")

    assert response.status_code == 201
    assert response.json()["data"]["gym"]["slug"] == "east-legon-fitness"
    assert db_session.query(Gym).count() == 1


def test_register_duplicates_conflict(client):
    assert _register(client).status_code == 201

    same_email = _register(client, username="someone_else")
    assert same_email.status_code == 409
    assert same_email.json() == {
        "success": False,
        "message": "Email already registered",
        "status": 409,
        "data": None,
        "details": None,
    }

    same_username = _register(client, email="other@example.com")
    assert same_username.status_code == 409


def test_register_validation_errors_use_envelope(client):
    response = _register(client, email="not-an-email", password="short")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    fields = {d["field"] for d in body["details"]}
    assert {"email", "password"} <= fields


def test_verify_otp_then_login(client, db_session):
    _register(client)
    otp = db_session.query(EmailVerification).filter(EmailVerification.email == "ama@example.com").one().otp

    wrong = "000000" if otp != "000000" else "111111"
    assert client.post(f"{API}/auth/verify-otp", json={"email": "ama@example.com", "otp": wrong}).status_code == 400

    verified = client.post(f"{API}/auth/verify-otp", json={"email": "ama@example.com", "otp": otp})
    assert verified.status_code == 200

    db_session.expire_all()
    assert db_session.query(Account).filter(Account.email == "ama@example.com").one().email_verified is True

    login = _login(client)
    assert login.status_code == 200
    data = login.json()["data"]
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["account"]["last_login_at"] is not None


def test_login_rejects_bad_credentials(client, db_session):
    create_user(db_session, "ama@example.com", "ama_m", password="SecurePass123")

    response = _login(client, password="WrongPass123")
    assert response.status_code == 401
    assert response.json()["success"] is False

    assert _login(client, email="nobody@example.com").status_code == 401


def test_login_rejects_inactive_account(client, db_session):
    account, _ = create_user(db_session, "ama@example.com", "ama_m", password="SecurePass123")
    account.is_active = False
    db_session.commit()

    assert _login(client).status_code == 401


def test_refresh_rotates_tokens(client, db_session):
    create_user(db_session, "ama@example.com", "ama_m", password="SecurePass123")
    old_refresh = _login(client).json()["data"]["refresh_token"]

    rotated = client.post(f"{API}/auth/refresh", json={"refresh_token": old_refresh})
    assert rotated.status_code == 200
    new_refresh = rotated.json()["data"]["refresh_token"]
    assert new_refresh != old_refresh

    replay = client.post(f"{API}/auth/refresh", json={"refresh_token": old_refresh})
    assert replay.status_code == 401

    assert client.post(f"{API}/auth/refresh", json={"refresh_token": "garbage"}).status_code == 401


def test_logout_revokes_refresh_token(client, db_session):
    create_user(db_session, "ama@example.com", "ama_m", password="SecurePass123")
    refresh = _login(client).json()["data"]["refresh_token"]

    assert client.post(f"{API}/auth/logout", json={"refresh_token": refresh}).status_code == 200
    assert client.post(f"{API}/auth/refresh", json={"refresh_token": refresh}).status_code == 401


def test_change_password_signs_out_everywhere(client, db_session):
    account, profile = create_user(db_session, "ama@example.com", "ama_m", password="SecurePass123")
    _login(client)
    _login(client)

    response = client.post(
        f"{API}/auth/change-password",
        json={"current_password": "SecurePass123", "new_password": "EvenBetter456"},
        headers=auth_headers(account, profile),
    )
    assert response.status_code == 200

    db_session.expire_all()
    live = db_session.query(RefreshToken).filter(RefreshToken.revoked_at.is_(None)).count()
    assert live == 0
    assert _login(client, password="EvenBetter456").status_code == 200


def test_change_password_wrong_current(client, db_session):
    account, profile = create_user(db_session, "ama@example.com", "ama_m", password="SecurePass123")
    response = client.post(
        f"{API}/auth/change-password",
        json={"current_password": "Nope12345", "new_password": "EvenBetter456"},
        headers=auth_headers(account, profile),
    )
    assert response.status_code == 401


def test_me_requires_token(client, db_session):
    assert client.get(f"{API}/auth/me").status_code == 401
    bad = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401

    account, profile = create_user(db_session, "ama@example.com", "ama_m")
    me = client.get(f"{API}/auth/me", headers=auth_headers(account, profile))
    assert me.status_code == 200
    assert me.json()["data"]["account"]["email"] == "ama@example.com"
    assert me.json()["data"]["profile"]["id"] == profile.id


def test_update_profile(client, db_session):
    account, profile = create_user(db_session, "ama@example.com", "ama_m")

    response = client.put(
        f"{API}/users/me",
        json={"height": 168.0, "weight": 61.5, "age": 29},
        headers=auth_headers(account, profile),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["height"] == 168.0
    assert data["first_name"] == "Ama_M"
