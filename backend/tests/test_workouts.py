from datetime import date, timedelta

from fastapi.testclient import TestClient

from app.models.workout import UserExercisePB, WorkoutPlan


def create_exercise(client: TestClient, headers: dict, name: str) -> dict:
    response = client.post(
        "/exercises",
        json={"name": name, "level": "beginner", "category": "strength"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_routine(client: TestClient, headers: dict, exercise_ids: list[int], name: str = "Push Day") -> dict:
    response = client.post(
        "/workouts/routines",
        json={
            "name": name,
            "notes": "Heavy",
            "exercises": [{"exercise_id": item, "sets": 3, "reps": 10} for item in exercise_ids],
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_system_routine(db_session, category: str = "full-body") -> int:
    routine = WorkoutPlan(name="Starter", is_system_routine=True, system_routine_category=category)
    db_session.add(routine)
    db_session.commit()
    return routine.id


def test_routine_lifecycle(client: TestClient, admin, make_user, db_session):
    member = make_user("member@example.com")
    squat = create_exercise(client, admin.headers, "Squat")
    press = create_exercise(client, admin.headers, "Overhead Press")
    system_id = create_system_routine(db_session)

    routine = create_routine(client, member.headers, [squat["id"], press["id"]])
    assert [item["order"] for item in routine["exercises"]] == [0, 1]
    assert routine["exercises"][0]["exercise"]["name"] == "Squat"

    listed = client.get("/workouts/routines", headers=member.headers).json()
    assert {item["id"] for item in listed} == {routine["id"], system_id}
    filtered = client.get(
        "/workouts/routines", params={"category": "cardio"}, headers=member.headers
    ).json()
    assert [item["id"] for item in filtered] == [routine["id"]]

    replaced = client.put(
        f"/workouts/routines/{routine['id']}",
        json={"name": "Leg Day", "exercises": [{"exercise_id": squat["id"], "sets": 5, "reps": 5}]},
        headers=member.headers,
    ).json()
    assert replaced["name"] == "Leg Day"
    assert [(item["exercise_id"], item["sets"]) for item in replaced["exercises"]] == [(squat["id"], 5)]

    added = client.post(
        f"/workouts/routines/{routine['id']}/exercises",
        json={"exercise_id": press["id"]},
        headers=member.headers,
    ).json()
    appended = added["exercises"][-1]
    assert (appended["sets"], appended["tracking_type"], appended["reps"]) == (1, "reps", 8)

    removed = client.delete(
        f"/workouts/routines/{routine['id']}/exercises/{squat['id']}", headers=member.headers
    ).json()
    assert [item["exercise_id"] for item in removed["exercises"]] == [press["id"]]
    missing = client.delete(
        f"/workouts/routines/{routine['id']}/exercises/{squat['id']}", headers=member.headers
    )
    assert missing.status_code == 404


def test_routine_access_rules(client: TestClient, admin, make_user, db_session):
    owner = make_user("owner@example.com")
    other = make_user("other@example.com")
    squat = create_exercise(client, admin.headers, "Squat")
    routine = create_routine(client, owner.headers, [squat["id"]])
    system_id = create_system_routine(db_session)

    assert client.get(f"/workouts/routines/{routine['id']}", headers=other.headers).status_code == 403
    assert client.get(f"/workouts/routines/{routine['id']}", headers=admin.headers).status_code == 200
    assert client.get(f"/workouts/routines/{system_id}", headers=other.headers).status_code == 200

    assert client.delete(f"/workouts/routines/{routine['id']}", headers=other.headers).status_code == 403
    system_delete = client.delete(f"/workouts/routines/{system_id}", headers=admin.headers)
    assert system_delete.status_code == 400
    assert system_delete.json()["detail"] == "Cannot delete system routines"


def test_deleting_routine_removes_its_assignments(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    squat = create_exercise(client, admin.headers, "Squat")
    routine = create_routine(client, admin.headers, [squat["id"]])
    client.post(
        "/admin/assignments",
        json={"user_id": member.id, "workout_plan_id": routine["id"]},
        headers=admin.headers,
    )

    assert client.delete(f"/workouts/routines/{routine['id']}", headers=admin.headers).status_code == 200
    assert client.get("/user/assigned-workouts", headers=member.headers).json() == []


def test_one_assignment_per_user_per_day(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    squat = create_exercise(client, admin.headers, "Squat")
    routine = create_routine(client, admin.headers, [squat["id"]])
    today = date.today()

    first = client.post(
        "/admin/assignments",
        json={"user_id": member.id, "workout_plan_id": routine["id"]},
        headers=admin.headers,
    )
    assert first.status_code == 201
    assert first.json()["assigned_at"] == today.isoformat()
    assert first.json()["status"] == "PENDING"

    clash = client.post(
        "/admin/assignments",
        json={"user_id": member.id, "workout_plan_id": routine["id"], "assigned_date": today.isoformat()},
        headers=admin.headers,
    )
    assert clash.status_code == 400
    detail = clash.json()["detail"]
    assert detail["error"] == "USER_ALREADY_HAS_WORKOUT_TODAY"
    assert detail["existing_workout"] == "Push Day"
    assert detail["date"] == today.isoformat()

    tomorrow = (today + timedelta(days=1)).isoformat()
    second = client.post(
        "/admin/assignments",
        json={"user_id": member.id, "workout_plan_id": routine["id"], "assigned_date": tomorrow},
        headers=admin.headers,
    ).json()

    moved = client.patch(
        f"/admin/assignments/{second['id']}",
        json={"assigned_date": today.isoformat()},
        headers=admin.headers,
    )
    assert moved.status_code == 400

    same_day = client.patch(
        f"/admin/assignments/{first.json()['id']}",
        json={"assigned_date": today.isoformat(), "status": "ABSENT", "notes": "sick"},
        headers=admin.headers,
    )
    assert same_day.status_code == 200
    assert same_day.json()["status"] == "ABSENT"

    summary = client.get(f"/admin/users/{member.id}/assigned-workouts", headers=admin.headers).json()
    assert [item["exercise_count"] for item in summary] == [1, 1]
    assert summary[0]["assigned_at"] == tomorrow

    assert client.delete(f"/admin/assignments/{second['id']}", headers=admin.headers).status_code == 200
    assert len(client.get("/admin/assignments", headers=admin.headers).json()) == 1


def test_users_update_only_their_own_assignments(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    other = make_user("other@example.com")
    squat = create_exercise(client, admin.headers, "Squat")
    routine = create_routine(client, admin.headers, [squat["id"]])
    assignment = client.post(
        "/admin/assignments",
        json={"user_id": member.id, "workout_plan_id": routine["id"]},
        headers=admin.headers,
    ).json()

    denied = client.patch(
        "/user/assigned-workouts",
        json={"assignment_id": assignment["id"], "status": "COMPLETED"},
        headers=other.headers,
    )
    assert denied.status_code == 404

    mine = client.get("/user/assigned-workouts", headers=member.headers).json()
    assert mine[0]["workout_plan"]["exercises"][0]["exercise"]["name"] == "Squat"
    done = client.patch(
        "/user/assigned-workouts",
        json={"assignment_id": assignment["id"], "status": "COMPLETED"},
        headers=member.headers,
    )
    assert done.json()["status"] == "COMPLETED"


def test_workout_log_and_personal_bests(client: TestClient, admin, make_user, db_session):
    member = make_user("member@example.com")
    squat = create_exercise(client, admin.headers, "Squat")
    plank = create_exercise(client, admin.headers, "Plank")
    routine = create_routine(client, member.headers, [squat["id"], plank["id"]])

    missing = client.post("/workout-logs", json={"workout_plan_id": routine["id"]}, headers=member.headers)
    assert missing.status_code == 400
    unknown_plan = client.post(
        "/workout-logs",
        json={"workout_plan_id": 999, "exercises": [{"exercise_id": squat["id"], "sets": []}]},
        headers=member.headers,
    )
    assert unknown_plan.status_code == 404

    summary = client.post(
        "/workout-logs",
        json={
            "workout_plan_id": routine["id"],
            "date": (date.today() - timedelta(days=1)).isoformat(),
            "duration": 50,
            "total_rest_time_seconds": 600,
            "total_active_time_seconds": 2400,
            "exercises": [
                {"exercise_id": squat["id"], "sets": [{"weight": 100, "reps": 5}, {"weight": 100, "reps": 6}]},
                {"exercise_id": plank["id"], "sets": [{"exercise_duration": 60}]},
            ],
        },
        headers=member.headers,
    )
    assert summary.status_code == 201, summary.text
    assert summary.json()["exercise_count"] == 2
    assert summary.json()["workout_plan_name"] == "Push Day"

    client.post(
        "/workout-logs",
        json={
            "workout_plan_id": routine["id"],
            "duration": 40,
            "exercises": [{"exercise_id": squat["id"], "sets": [{"weight": 90, "reps": 12}]}],
        },
        headers=member.headers,
    )

    best = (
        db_session.query(UserExercisePB)
        .filter(UserExercisePB.user_id == member.id, UserExercisePB.exercise_id == squat["id"])
        .one()
    )
    assert (best.weight, best.reps) == (100, 6)
    assert best.workout_log_id == summary.json()["id"]

    logs = client.get("/workout-logs", headers=member.headers).json()
    assert logs["total"] == 2
    older = logs["logs"][1]
    by_exercise = {item["exercise_id"]: item for item in older["exercises"]}
    assert [item["order"] for item in by_exercise[squat["id"]]["sets"]] == [1, 2]
    assert by_exercise[plank["id"]]["tracking_type"] == "duration"
    assert by_exercise[squat["id"]]["tracking_type"] == "reps"


def test_admin_logs_for_member_and_edits_sets(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    squat = create_exercise(client, admin.headers, "Squat")
    routine = create_routine(client, admin.headers, [squat["id"]])

    blocked = client.post(
        "/workout-logs",
        json={
            "workout_plan_id": routine["id"],
            "target_user_id": admin.id,
            "exercises": [{"exercise_id": squat["id"], "sets": []}],
        },
        headers=member.headers,
    )
    assert blocked.status_code == 403

    created = client.post(
        "/workout-logs",
        json={
            "workout_plan_id": routine["id"],
            "target_user_id": member.id,
            "duration": 30,
            "exercises": [
                {
                    "exercise_id": squat["id"],
                    "sets": [{"weight": 60, "reps": 5}, {"weight": 60, "reps": 5}, {"weight": 60, "reps": 5}],
                }
            ],
        },
        headers=admin.headers,
    )
    assert created.status_code == 201
    log = client.get("/workout-logs", headers=member.headers).json()["logs"][0]
    logged = log["exercises"][0]
    assert log["updated_at"] is None

    incomplete = client.put(f"/admin/workout-logs/{log['id']}", json={"date": log["date"]}, headers=admin.headers)
    assert incomplete.status_code == 400
    malformed = client.put(
        f"/admin/workout-logs/{log['id']}",
        json={"date": log["date"], "duration": 35, "exercises": [{"sets": []}]},
        headers=admin.headers,
    )
    assert malformed.status_code == 400

    updated = client.put(
        f"/admin/workout-logs/{log['id']}",
        json={
            "date": log["date"],
            "duration": 35,
            "exercises": [{"id": logged["id"], "sets": [{"weight": 70, "reps": 5}, {"weight": 72.5, "reps": 3}]}],
        },
        headers=admin.headers,
    )
    assert updated.status_code == 200, updated.text
    body = updated.json()
    assert body["duration"] == 35
    assert body["updated_at"] is not None
    assert [(item["weight"], item["reps"], item["order"]) for item in body["exercises"][0]["sets"]] == [
        (70, 5, 1),
        (72.5, 3, 2),
    ]


def test_member_replaces_own_log(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    other = make_user("other@example.com")
    squat = create_exercise(client, admin.headers, "Squat")
    routine = create_routine(client, member.headers, [squat["id"]])
    log_id = client.post(
        "/workout-logs",
        json={"workout_plan_id": routine["id"], "exercises": [{"exercise_id": squat["id"], "sets": [{"reps": 5}]}]},
        headers=member.headers,
    ).json()["id"]
    payload = {
        "date": date.today().isoformat(),
        "duration": 20,
        "exercises": [{"exercise_id": squat["id"], "sets": [{"weight": 20, "reps": 10}, {"weight": 20, "reps": 8}]}],
    }

    assert client.put(f"/workout-logs/{log_id}", json=payload, headers=other.headers).status_code == 404
    replaced = client.put(f"/workout-logs/{log_id}", json=payload, headers=member.headers).json()
    assert replaced["duration"] == 20
    assert len(replaced["exercises"][0]["sets"]) == 2


def test_admin_plan_listings(client: TestClient, admin):
    squat = create_exercise(client, admin.headers, "Squat")
    create_routine(client, admin.headers, [squat["id"]], name="Push Day")
    create_routine(client, admin.headers, [], name="Mobility")

    plans = client.get("/admin/workout-plans", headers=admin.headers).json()
    assert {(item["name"], item["exercise_count"]) for item in plans} == {("Push Day", 1), ("Mobility", 0)}

    page = client.get("/admin/workouts", params={"search": "mobil"}, headers=admin.headers).json()
    assert page["total"] == 1
    assert page["workouts"][0]["name"] == "Mobility"
