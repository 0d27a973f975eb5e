from datetime import date, timedelta

from fastapi.testclient import TestClient

from app.services.streaks import (
    challenge_streak,
    completed_streak,
    completion_rate,
    days_passed,
    workout_streak,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def test_streak_helpers():
    today = date(2024, 3, 10)
    days = [today - timedelta(days=offset) for offset in range(5)]

    assert challenge_streak([days[0], days[1], days[3]], today, 10) == 2
    assert challenge_streak(days, today, 3) == 3
    assert challenge_streak(days[1:], today, 10) == 0

    assert workout_streak(days[1:3], today) == 2
    assert workout_streak([days[3]], today) == 0

    assert completed_streak({days[0]: True, days[1]: True, days[2]: False, days[3]: True}, today) == 2
    assert completed_streak({day: True for day in days}, today, cap=4) == 4

    assert completion_rate(3, 4) == 75.0
    assert completion_rate(3, 0) == 0.0
    assert days_passed(today + timedelta(days=2), today) == 0
    assert days_passed(today, today) == 1
    assert days_passed(today - timedelta(days=3), today) == 4


def start_challenge(client: TestClient, admin, days_ago: int = 4) -> dict:
    start = date.today() - timedelta(days=days_ago)
    response = client.post(
        "/admin/ninety-day-challenge",
        json={
            "title": "Spring Reset",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=90)).isoformat(),
            "is_active": True,
        },
        headers=admin.headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def enroll(client: TestClient, admin, challenge: dict, account) -> dict:
    participant = client.post(
        "/admin/ninety-day-challenge/participants",
        json={"user_id": account.id, "challenge_id": challenge["id"]},
        headers=admin.headers,
    ).json()
    enabled = client.patch(
        f"/admin/ninety-day-challenge/participants/{participant['id']}",
        json={"is_enabled": True},
        headers=admin.headers,
    )
    return enabled.json()


def post_day(client: TestClient, account, day: date, **fields):
    return client.post(
        "/ninety-day-challenge/posts",
        json={"date": day.isoformat(), **fields},
        headers=account.headers,
    )


def test_challenge_dates_are_validated(client: TestClient, admin):
    response = client.post(
        "/admin/ninety-day-challenge",
        json={"title": "Backwards", "start_date": "2024-05-01", "end_date": "2024-04-01"},
        headers=admin.headers,
    )
    assert response.status_code == 400


def test_access_follows_participant_flag(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    challenge = start_challenge(client, admin)

    participant = client.post(
        "/admin/ninety-day-challenge/participants",
        json={"user_id": member.id, "challenge_id": challenge["id"]},
        headers=admin.headers,
    )
    assert participant.status_code == 201
    assert participant.json()["is_enabled"] is False
    duplicate = client.post(
        "/admin/ninety-day-challenge/participants",
        json={"user_id": member.id, "challenge_id": challenge["id"]},
        headers=admin.headers,
    )
    assert duplicate.status_code == 400

    assert client.get("/ninety-day-challenge/check-access", headers=member.headers).json() == {
        "is_enabled": False,
        "challenge_id": None,
        "challenge_title": None,
    }
    assert client.get("/ninety-day-challenge/info", headers=member.headers).status_code == 404
    assert post_day(client, member, date.today()).status_code == 404

    client.patch(
        f"/admin/ninety-day-challenge/participants/{participant.json()['id']}",
        json={"is_enabled": True},
        headers=admin.headers,
    )
    access = client.get("/ninety-day-challenge/check-access", headers=member.headers).json()
    assert access["is_enabled"] is True
    assert access["challenge_title"] == "Spring Reset"

    admin_access = client.get("/ninety-day-challenge/check-access", headers=admin.headers).json()
    assert admin_access["challenge_id"] == challenge["id"]


def test_daily_posts_and_stats(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    challenge = start_challenge(client, admin)
    enroll(client, admin, challenge, member)
    today = date.today()

    created = post_day(client, member, today, sleep_hours=7.5, mood="GOOD", energy="HIGH")
    assert created.status_code == 201, created.text
    assert created.json()["photos"] == []
    assert post_day(client, member, today).status_code == 400
    assert post_day(client, member, today - timedelta(days=1)).status_code == 201
    assert post_day(client, member, today - timedelta(days=2), sleep_hours=25).status_code == 422

    stats = client.get("/ninety-day-challenge/stats", headers=member.headers).json()
    assert stats == {
        "total_days": 90,
        "days_passed": 5,
        "days_remaining": 86,
        "completed_days": 2,
        "streak": 2,
        "total_participants": 1,
    }

    found = client.get(
        "/ninety-day-challenge/posts/today", params={"date": today.isoformat()}, headers=member.headers
    ).json()
    assert found["post"]["id"] == created.json()["id"]
    empty = client.get(
        "/ninety-day-challenge/posts/today",
        params={"date": (today - timedelta(days=3)).isoformat()},
        headers=member.headers,
    ).json()
    assert empty["post"] is None

    calendar = client.get(
        "/ninety-day-challenge/posts/calendar",
        params={"month": today.month, "year": today.year},
        headers=member.headers,
    ).json()
    assert {"date": today.isoformat(), "has_post": True, "mood": "GOOD", "energy": "HIGH"} in calendar

    posts = client.get("/ninety-day-challenge/posts", headers=member.headers).json()
    assert posts["total"] == 2
    assert posts["posts"][0]["author"]["display_name"] == "member@example.com"


def test_first_day_post_counts_toward_streak(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    challenge = start_challenge(client, admin, days_ago=0)
    participant = enroll(client, admin, challenge, member)
    assert post_day(client, member, date.today()).status_code == 201

    stats = client.get("/ninety-day-challenge/stats", headers=member.headers).json()
    assert (stats["days_passed"], stats["completed_days"], stats["streak"]) == (1, 1, 1)

    admin_stats = client.get(
        f"/admin/ninety-day-challenge/participants/{participant['id']}/stats", headers=admin.headers
    ).json()
    assert admin_stats["streak"] == 1
    assert admin_stats["completion_rate"] == 100.0


def test_streak_covers_every_day_of_the_run(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    challenge = start_challenge(client, admin, days_ago=3)
    enroll(client, admin, challenge, member)
    for offset in range(4):
        assert post_day(client, member, date.today() - timedelta(days=offset)).status_code == 201

    stats = client.get("/ninety-day-challenge/stats", headers=member.headers).json()
    assert (stats["days_passed"], stats["completed_days"], stats["streak"]) == (4, 4, 4)


def test_malformed_post_body_is_rejected(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    challenge = start_challenge(client, admin)
    enroll(client, admin, challenge, member)

    broken = client.post(
        "/ninety-day-challenge/posts",
        content=b"{not json",
        headers={**member.headers, "Content-Type": "application/json"},
    )
    assert broken.status_code == 422
    assert client.post("/ninety-day-challenge/posts", json=[1, 2], headers=member.headers).status_code == 422


def test_only_authors_edit_posts(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    other = make_user("other@example.com")
    challenge = start_challenge(client, admin)
    enroll(client, admin, challenge, member)
    post = post_day(client, member, date.today()).json()

    denied = client.put(
        f"/ninety-day-challenge/posts/{post['id']}", json={"mood": "LOW"}, headers=other.headers
    )
    assert denied.status_code == 404
    updated = client.put(
        f"/ninety-day-challenge/posts/{post['id']}",
        json={"mood": "LOW", "achievements": "Ran 5k"},
        headers=member.headers,
    ).json()
    assert (updated["mood"], updated["achievements"]) == ("LOW", "Ran 5k")


def test_multipart_post_stores_photos_inline(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    challenge = start_challenge(client, admin)
    enroll(client, admin, challenge, member)

    created = client.post(
        "/ninety-day-challenge/posts",
        data={"date": date.today().isoformat(), "sleep_hours": "8", "day_description": "Rest day"},
        files={"photos": ("meal.png", PNG_BYTES, "image/png")},
        headers=member.headers,
    )
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["sleep_hours"] == 8
    assert len(body["photos"]) == 1
    assert body["photos"][0].startswith("data:image/png;base64,")

    rejected = client.post(
        "/ninety-day-challenge/posts",
        data={"date": (date.today() - timedelta(days=1)).isoformat()},
        files={"photos": ("notes.txt", b"hello", "text/plain")},
        headers=member.headers,
    )
    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "Only image files are allowed"


def test_admin_post_enrolls_into_active_challenge(client: TestClient, admin):
    challenge = start_challenge(client, admin)

    assert post_day(client, admin, date.today()).status_code == 201
    participants = client.get(
        "/admin/ninety-day-challenge/participants",
        params={"challenge_id": challenge["id"]},
        headers=admin.headers,
    ).json()
    assert [(item["user_id"], item["is_enabled"], item["completed_days"]) for item in participants] == [
        (admin.id, True, 1)
    ]


def test_reactions_toggle_and_feed_counts(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    outsider = make_user("outsider@example.com")
    challenge = start_challenge(client, admin)
    enroll(client, admin, challenge, member)
    post = post_day(client, member, date.today()).json()

    def toggle(account, kind: str):
        return client.post(
            "/ninety-day-challenge/reactions",
            json={"post_id": post["id"], "type": kind},
            headers=account.headers,
        )

    assert toggle(admin, "LOVE").json()["action"] == "added"
    removed = toggle(admin, "LOVE").json()
    assert removed == {"action": "removed", "reaction": None}

    assert toggle(member, "LIKE").json()["action"] == "added"
    updated = toggle(member, "FIRE").json()
    assert updated["action"] == "updated"
    assert updated["reaction"]["reaction_type"] == "FIRE"

    blocked = toggle(outsider, "LIKE")
    assert blocked.status_code == 403
    assert blocked.json()["detail"] == "Not enabled for this challenge"

    feed = client.get("/ninety-day-challenge/community-feed", headers=member.headers).json()
    assert feed["total"] == 1
    entry = feed["posts"][0]
    assert entry["reaction_counts"] == {
        "LIKE": 0,
        "LOVE": 0,
        "UNICORN": 0,
        "FIRE": 1,
        "BOOKMARK": 0,
        "HANDS": 0,
    }
    assert entry["user_reaction"] == "FIRE"

    admin_view = client.get("/ninety-day-challenge/community-feed", headers=admin.headers).json()
    assert admin_view["posts"][0]["user_reaction"] is None


def test_explicit_reaction_endpoints(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    challenge = start_challenge(client, admin)
    enroll(client, admin, challenge, member)
    post = post_day(client, member, date.today()).json()
    url = f"/ninety-day-challenge/posts/{post['id']}/reactions"

    assert client.post(url, json={"reaction_type": "HANDS"}, headers=member.headers).json()["reaction_type"] == "HANDS"
    assert client.post(url, json={"reaction_type": "LIKE"}, headers=member.headers).json()["reaction_type"] == "LIKE"
    mismatch = client.request("DELETE", url, json={"reaction_type": "HANDS"}, headers=member.headers)
    assert mismatch.status_code == 404
    removed = client.request("DELETE", url, json={"reaction_type": "LIKE"}, headers=member.headers)
    assert removed.json() == {"success": True}


def test_comments(client: TestClient, admin, make_user):
    member = make_user("member@example.com", first_name="Mia")
    outsider = make_user("outsider@example.com")
    challenge = start_challenge(client, admin)
    enroll(client, admin, challenge, member)
    post = post_day(client, member, date.today()).json()

    blank = client.post(
        "/ninety-day-challenge/comments", json={"post_id": post["id"], "content": "   "}, headers=member.headers
    )
    assert blank.status_code == 400
    assert blank.json()["detail"] == "Comment content is required"

    comment = client.post(
        "/ninety-day-challenge/comments",
        json={"post_id": post["id"], "content": " Nice work! "},
        headers=member.headers,
    )
    assert comment.status_code == 201
    assert comment.json()["content"] == "Nice work!"
    assert comment.json()["author"]["display_name"] == "Mia"

    coach_note = client.post(
        "/ninety-day-challenge/comments",
        json={"post_id": post["id"], "content": "Keep going"},
        headers=admin.headers,
    )
    assert coach_note.json()["author"]["is_admin"] is True
    denied = client.post(
        "/ninety-day-challenge/comments",
        json={"post_id": post["id"], "content": "hi"},
        headers=outsider.headers,
    )
    assert denied.status_code == 403

    feed = client.get("/ninety-day-challenge/community-feed", headers=member.headers).json()
    assert [item["content"] for item in feed["posts"][0]["comments"]] == ["Nice work!", "Keep going"]

    comment_id = comment.json()["id"]
    assert client.delete(f"/ninety-day-challenge/comments/{comment_id}", headers=outsider.headers).status_code == 403
    assert client.delete(f"/ninety-day-challenge/comments/{comment_id}", headers=member.headers).status_code == 200


def test_admin_participant_views(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    challenge = start_challenge(client, admin)
    participant = enroll(client, admin, challenge, member)
    today = date.today()
    first = post_day(client, member, today).json()
    post_day(client, member, today - timedelta(days=1))
    client.post(
        "/ninety-day-challenge/reactions",
        json={"post_id": first["id"], "type": "LIKE"},
        headers=admin.headers,
    )

    listed = client.get("/admin/ninety-day-challenge", headers=admin.headers).json()
    assert [(item["title"], item["participant_count"]) for item in listed] == [("Spring Reset", 1)]

    detail = client.get(
        f"/admin/ninety-day-challenge/challenges/{challenge['id']}", headers=admin.headers
    ).json()
    assert [len(item["posts"]) for item in detail["participants"]] == [2]

    posts = client.get(
        f"/admin/ninety-day-challenge/participants/{participant['id']}/posts", headers=admin.headers
    ).json()
    assert posts["total"] == 2
    assert [item["reaction_count"] for item in posts["posts"]] == [1, 0]

    stats = client.get(
        f"/admin/ninety-day-challenge/participants/{participant['id']}/stats", headers=admin.headers
    ).json()
    assert stats["completed_days"] == 2
    assert stats["streak"] == 2
    assert stats["completion_rate"] == 40.0
    assert stats["last_post_date"] == today.isoformat()

    renamed = client.put(
        f"/admin/ninety-day-challenge/{challenge['id']}", json={"title": "Summer Reset"}, headers=admin.headers
    )
    assert renamed.json()["title"] == "Summer Reset"

    assert client.delete(
        f"/admin/ninety-day-challenge/participants/{participant['id']}", headers=admin.headers
    ).status_code == 200
    assert client.get("/ninety-day-challenge/check-access", headers=member.headers).json()["is_enabled"] is False
    assert client.delete(f"/admin/ninety-day-challenge/{challenge['id']}", headers=admin.headers).status_code == 200
    assert client.get("/admin/ninety-day-challenge", headers=admin.headers).json() == []
