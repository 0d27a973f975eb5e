from datetime import date, timedelta

from fastapi.testclient import TestClient

from app.core.enums import MembershipStatus
from app.models.user import User
from app.services.membership import derive_status, expire_if_needed, membership_state


def member_with(start, end, status=MembershipStatus.ACTIVE) -> User:
    return User(
        email="m@example.com",
        membership_start_date=start,
        membership_end_date=end,
        membership_status=status,
    )


def test_membership_state():
    today = date(2024, 6, 15)

    blank = membership_state(member_with(None, None, MembershipStatus.INACTIVE), today)
    assert (blank.days_remaining, blank.is_expired, blank.is_active, blank.has_valid_membership) == (
        0,
        False,
        False,
        False,
    )

    running = membership_state(member_with(today - timedelta(days=10), today + timedelta(days=20)), today)
    assert running.days_remaining == 20
    assert running.is_active is True
    assert running.has_valid_membership is True

    paused = membership_state(
        member_with(today - timedelta(days=10), today + timedelta(days=20), MembershipStatus.INACTIVE), today
    )
    assert paused.is_active is False


def test_expired_membership_is_flipped_once():
    today = date(2024, 6, 15)
    user = member_with(today - timedelta(days=40), today - timedelta(days=1))

    assert expire_if_needed(user, today) is True
    assert user.membership_status == MembershipStatus.EXPIRED
    assert expire_if_needed(user, today) is False


def test_derive_status():
    today = date(2024, 6, 15)
    assert derive_status(today + timedelta(days=1), 30, today) == (
        today + timedelta(days=31),
        MembershipStatus.INACTIVE,
    )
    assert derive_status(today - timedelta(days=40), 30, today)[1] == MembershipStatus.EXPIRED
    assert derive_status(today - timedelta(days=5), 30, today) == (
        today + timedelta(days=25),
        MembershipStatus.ACTIVE,
    )


def test_admin_sets_membership(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    today = date.today()

    initial = client.get("/membership", headers=member.headers).json()
    assert initial["status"] == "INACTIVE"
    assert initial["has_valid_membership"] is False

    response = client.put(
        f"/admin/users/{member.id}/membership",
        json={"start_date": (today - timedelta(days=5)).isoformat(), "duration": 30, "notes": "Paid cash"},
        headers=admin.headers,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["status"] == "ACTIVE"
    assert body["end_date"] == (today + timedelta(days=25)).isoformat()
    assert body["days_remaining"] == 25
    assert body["set_by"] == admin.id

    mine = client.get("/membership", headers=member.headers).json()
    assert mine["is_active"] is True
    assert mine["notes"] == "Paid cash"

    overridden = client.put(
        f"/admin/users/{member.id}/membership",
        json={"start_date": today.isoformat(), "duration": 30, "status": "INACTIVE"},
        headers=admin.headers,
    ).json()
    assert overridden["status"] == "INACTIVE"
    assert overridden["is_active"] is False

    invalid = client.put(
        f"/admin/users/{member.id}/membership",
        json={"start_date": today.isoformat(), "duration": 0},
        headers=admin.headers,
    )
    assert invalid.status_code == 422
    assert client.get("/admin/users/999/membership", headers=admin.headers).status_code == 404


def test_lapsed_membership_expires_when_read(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    today = date.today()
    client.put(
        f"/admin/users/{member.id}/membership",
        json={"start_date": (today - timedelta(days=40)).isoformat(), "duration": 30, "status": "ACTIVE"},
        headers=admin.headers,
    )

    mine = client.get("/membership", headers=member.headers).json()
    assert mine["status"] == "EXPIRED"
    assert mine["is_expired"] is True
    assert mine["days_remaining"] == 0

    seen_by_admin = client.get(f"/admin/users/{member.id}/membership", headers=admin.headers).json()
    assert seen_by_admin["status"] == "EXPIRED"


def test_training_progressions(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    start = date(2024, 1, 1)

    created = client.post(
        "/admin/training-progressions",
        json={"user_id": member.id, "training_type": "hypertrophy", "start_date": start.isoformat()},
        headers=admin.headers,
    )
    assert created.status_code == 201, created.text
    progression = created.json()
    assert progression["target_weeks"] == 4
    assert progression["assigned_by"] == admin.id

    clash = client.post(
        "/admin/training-progressions",
        json={"user_id": member.id, "training_type": "strength"},
        headers=admin.headers,
    )
    assert clash.status_code == 409

    finished = client.patch(
        f"/admin/training-progressions/{progression['id']}",
        json={"is_completed": True, "is_active": False, "end_date": (start + timedelta(days=15)).isoformat()},
        headers=admin.headers,
    ).json()
    assert finished["actual_weeks"] == 3

    follow_up = client.post(
        "/admin/training-progressions",
        json={"user_id": member.id, "training_type": "strength"},
        headers=admin.headers,
    )
    assert follow_up.status_code == 201

    active = client.get(
        "/admin/training-progressions", params={"user_id": member.id, "active": True}, headers=admin.headers
    ).json()
    assert active["total"] == 1
    assert active["progressions"][0]["training_type"] == "strength"

    history = client.get(f"/admin/users/{member.id}/training-progressions", headers=admin.headers).json()
    assert [item["training_type"] for item in history] == ["strength", "hypertrophy"]
