"""
Integration tests for gyms, employees and gym access checks.
"""
import pytest

from fitness_gh.core.errors import ForbiddenError, NotFoundError
from fitness_gh.db.models.employment import Employment
from fitness_gh.services import gym_service

from conftest import create_user, auth_headers

API = "/api/v1/gyms"


def test_only_owners_create_gyms(client, owner, member):
    created = client.post(API, json={"name": "Tema Strength Club"}, headers=auth_headers(*owner))
    assert created.status_code == 201
    assert created.json()["data"]["slug"] == "tema-strength-club"
    assert created.json()["data"]["country"] == "Ghana"

    denied = client.post(API, json={"name": "Member Gym"}, headers=auth_headers(*member))
    assert denied.status_code == 403


def test_explicit_slug_conflict_and_derived_slug_suffix(client, owner, gym):
    headers = auth_headers(*owner)

    clash = client.post(API, json={"name": "Anything", "slug": "osu-iron-works"}, headers=headers)
    assert clash.status_code == 409

    derived = client.post(API, json={"name": "Osu Iron Works"}, headers=headers)
    assert derived.json()["data"]["slug"] == "osu-iron-works-2"


def test_listing_and_lookup(client, owner, gym):
    assert [g["id"] for g in client.get(API).json()["data"]] == [gym.id]
    assert client.get(f"{API}/slug/osu-iron-works").json()["data"]["id"] == gym.id
    assert client.get(f"{API}/slug/nowhere").status_code == 404
    assert client.get(f"{API}/mine", headers=auth_headers(*owner)).json()["data"][0]["id"] == gym.id


def test_soft_delete_hides_gym_from_listing(client, owner, gym, employ):
    manager = employ("manager@example.com", "manager", "MANAGER")
    assert client.delete(f"{API}/{gym.id}", headers=auth_headers(*manager)).status_code == 403

    assert client.delete(f"{API}/{gym.id}", headers=auth_headers(*owner)).status_code == 200
    assert client.get(API).json()["data"] == []
    assert client.get(f"{API}/{gym.id}").json()["data"]["is_active"] is False


def test_employee_lifecycle(client, db_session, owner, gym):
    create_user(db_session, "trainer@example.com", "trainer")
    headers = auth_headers(*owner)

    added = client.post(
        f"{API}/{gym.id}/employees", json={"email": "trainer@example.com", "role": "TRAINER"}, headers=headers
    )
    assert added.status_code == 201
    employment_id = added.json()["data"]["id"]

    again = client.post(f"{API}/{gym.id}/employees", json={"email": "trainer@example.com"}, headers=headers)
    assert again.status_code == 409

    promoted = client.put(f"{API}/{gym.id}/employees/{employment_id}", json={"role": "MANAGER"}, headers=headers)
    assert promoted.json()["data"]["role"] == "MANAGER"

    assert client.delete(f"{API}/{gym.id}/employees/{employment_id}", headers=headers).status_code == 200
    db_session.expire_all()
    employment = db_session.query(Employment).filter(Employment.id == employment_id).one()
    assert employment.is_active is False
    assert employment.end_date is not None

    listed = client.get(f"{API}/{gym.id}/employees", headers=headers).json()["data"]
    assert listed == []

    unknown = client.post(f"{API}/{gym.id}/employees", json={"email": "ghost@example.com"}, headers=headers)
    assert unknown.status_code == 404


def test_check_gym_access_rules(db_session, owner, member, gym, employ):
    _, owner_profile = owner
    _, member_profile = member
    _, desk_profile = employ("desk@example.com", "desk", "RECEPTIONIST")

    assert gym_service.check_gym_access(db_session, gym.id, owner_profile.id, ["MANAGER"]) == "OWNER"
    assert gym_service.check_gym_access(db_session, gym.id, desk_profile.id) == "RECEPTIONIST"

    with pytest.raises(ForbiddenError):
        gym_service.check_gym_access(db_session, gym.id, desk_profile.id, ["MANAGER"])
    with pytest.raises(ForbiddenError):
        gym_service.check_gym_access(db_session, gym.id, member_profile.id)
    with pytest.raises(NotFoundError):
        gym_service.check_gym_access(db_session, 999, owner_profile.id)


def test_removed_employee_loses_access(db_session, gym, employ):
    _, desk_profile = employ("desk@example.com", "desk", "RECEPTIONIST")
    employment = db_session.query(Employment).filter(Employment.profile_id == desk_profile.id).one()

    gym_service.remove_employee(db_session, gym.id, employment.id)

    with pytest.raises(ForbiddenError):
        gym_service.check_gym_access(db_session, gym.id, desk_profile.id)


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["status"] == 404
