import asyncio
from io import BytesIO
from pathlib import Path

import pytest
from fastapi import HTTPException, UploadFile
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from app.core.config import get_settings
from app.services.uploads import default_exercise_image, exercise_slug, read_image_as_data_url

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def test_exercise_slugs():
    assert exercise_slug(" Barbell Bench Press ") == "Barbell_Bench_Press"
    assert exercise_slug("Push-Up (Wide)") == "Push-Up_Wide_"
    assert default_exercise_image("Farmer's Walk") == "/images/exercises/Farmer_s_Walk/images/0.jpg"


def test_upload_returns_data_url(client: TestClient, make_user):
    member = make_user("member@example.com")

    response = client.post(
        "/upload", files={"file": ("progress.png", PNG_BYTES, "image/png")}, headers=member.headers
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    assert body["url"].startswith("data:image/png;base64,")
    assert (body["filename"], body["file_type"], body["file_size"]) == ("progress.png", "image/png", len(PNG_BYTES))


def test_upload_rejections(client: TestClient, make_user):
    member = make_user("member@example.com")

    missing = client.post("/upload", data={"note": "nothing attached"}, headers=member.headers)
    assert missing.status_code == 400
    assert missing.json()["detail"] == "No file uploaded"

    text = client.post(
        "/upload", files={"file": ("notes.txt", b"hello", "text/plain")}, headers=member.headers
    )
    assert text.status_code == 400
    assert text.json()["detail"] == "Only image files are allowed"

    oversized = client.post(
        "/upload",
        files={"file": ("huge.png", b"\x00" * (get_settings().upload_max_bytes + 1), "image/png")},
        headers=member.headers,
    )
    assert oversized.status_code == 400
    assert oversized.json()["detail"] == "File size must be less than 5MB"

    assert client.post("/upload", files={"file": ("a.png", PNG_BYTES, "image/png")}).status_code == 401


def test_declared_size_is_checked_before_reading():
    body = BytesIO(PNG_BYTES)
    upload = UploadFile(
        body,
        size=get_settings().upload_max_bytes + 1,
        filename="huge.png",
        headers=Headers({"content-type": "image/png"}),
    )

    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(read_image_as_data_url(upload))
    assert excinfo.value.status_code == 400
    assert body.tell() == 0


def test_exercise_catalogue(client: TestClient, admin, make_user):
    member = make_user("member@example.com")

    created = client.post(
        "/exercises",
        json={
            "name": " Barbell Bench Press ",
            "level": "intermediate",
            "category": "strength",
            "primary_muscles": ["chest", " "],
        },
        headers=admin.headers,
    )
    assert created.status_code == 201, created.text
    exercise = created.json()
    assert exercise["name"] == "Barbell Bench Press"
    assert exercise["primary_muscles"] == ["chest"]
    assert exercise["image"] == "/images/exercises/Barbell_Bench_Press/images/0.jpg"

    duplicate = client.post(
        "/exercises",
        json={"name": "Barbell Bench Press", "level": "beginner", "category": "strength"},
        headers=admin.headers,
    )
    assert duplicate.status_code == 409
    blank = client.post(
        "/exercises", json={"name": "  ", "level": "beginner", "category": "strength"}, headers=admin.headers
    )
    assert blank.status_code == 422
    by_member = client.post(
        "/exercises", json={"name": "Row", "level": "beginner", "category": "strength"}, headers=member.headers
    )
    assert by_member.status_code == 403

    for name, category in (("Running", "cardio"), ("Rowing", "cardio")):
        client.post(
            "/exercises", json={"name": name, "level": "beginner", "category": category}, headers=admin.headers
        )
    page = client.get(
        "/exercises", params={"category": "cardio", "limit": 1}, headers=member.headers
    ).json()
    assert (page["total"], page["total_pages"]) == (2, 2)
    assert [item["name"] for item in page["exercises"]] == ["Rowing"]
    searched = client.get("/exercises", params={"search": "bench"}, headers=member.headers).json()
    assert [item["name"] for item in searched["exercises"]] == ["Barbell Bench Press"]

    assert client.get(f"/exercises/{exercise['id']}", headers=member.headers).json()["level"] == "intermediate"
    assert client.get("/exercises/999", headers=member.headers).status_code == 404


def test_favourites_toggle(client: TestClient, admin, make_user):
    member = make_user("member@example.com")
    exercise = client.post(
        "/exercises", json={"name": "Deadlift", "level": "advanced", "category": "strength"}, headers=admin.headers
    ).json()

    added = client.post(f"/exercises/{exercise['id']}/favourite", headers=member.headers).json()
    assert added == {"exercise_id": exercise["id"], "is_favourite": True}
    assert client.get("/exercises/favourites", headers=member.headers).json() == [
        {"id": exercise["id"], "name": "Deadlift"}
    ]
    assert client.get("/exercises/favourites", headers=admin.headers).json() == []

    removed = client.post(f"/exercises/{exercise['id']}/favourite", headers=member.headers).json()
    assert removed["is_favourite"] is False
    assert client.get("/exercises/favourites", headers=member.headers).json() == []


def test_exercise_images_are_stored_under_media_root(client: TestClient, admin):
    response = client.post(
        "/exercises/upload-images",
        data={"exercise_name": "Kettlebell Swing"},
        files=[
            ("images", ("front.png", PNG_BYTES, "image/png")),
            ("images", ("readme.txt", b"skip me", "text/plain")),
            ("images", ("side.JPG", PNG_BYTES, "image/jpeg")),
        ],
        headers=admin.headers,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["total_uploaded"] == 2
    assert [image["filename"] for image in body["images"]] == ["0.png", "1.jpg"]
    assert body["images"][1]["path"] == "/images/exercises/Kettlebell_Swing/images/1.jpg"

    images_dir = Path(get_settings().media_root) / "exercises" / "Kettlebell_Swing" / "images"
    assert (images_dir / "0.png").read_bytes() == PNG_BYTES
    assert not (images_dir / "2.txt").exists()

    no_name = client.post(
        "/exercises/upload-images",
        files={"images": ("front.png", PNG_BYTES, "image/png")},
        headers=admin.headers,
    )
    assert no_name.status_code == 400
    assert no_name.json()["detail"] == "Exercise name is required"

    no_images = client.post(
        "/exercises/upload-images", data={"exercise_name": "Kettlebell Swing"}, headers=admin.headers
    )
    assert no_images.status_code == 400
    assert no_images.json()["detail"] == "No images provided"


def test_deleting_exercise_cleans_up(client: TestClient, admin):
    exercise = client.post(
        "/exercises", json={"name": "Lunge", "level": "beginner", "category": "strength"}, headers=admin.headers
    ).json()
    client.post(
        "/exercises/upload-images",
        data={"exercise_name": "Lunge"},
        files={"images": ("lunge.png", PNG_BYTES, "image/png")},
        headers=admin.headers,
    )
    routine = client.post(
        "/workouts/routines",
        json={"name": "Legs", "exercises": [{"exercise_id": exercise["id"], "sets": 3, "reps": 12}]},
        headers=admin.headers,
    ).json()
    client.post(
        "/workout-logs",
        json={
            "workout_plan_id": routine["id"],
            "exercises": [{"exercise_id": exercise["id"], "sets": [{"weight": 20, "reps": 12}]}],
        },
        headers=admin.headers,
    )
    media_dir = Path(get_settings().media_root) / "exercises" / "Lunge"
    assert media_dir.exists()

    assert client.delete(f"/exercises/{exercise['id']}", headers=admin.headers).status_code == 200
    assert not media_dir.exists()
    assert client.get(f"/workouts/routines/{routine['id']}", headers=admin.headers).json()["exercises"] == []
    logs = client.get("/workout-logs", headers=admin.headers).json()
    assert logs["logs"][0]["exercises"] == []
