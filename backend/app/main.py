import logging

from fastapi import FastAPI

from .core.config import get_settings
from .routers import (
    admin,
    admin_challenge,
    admin_workouts,
    auth,
    challenge,
    exercises,
    membership,
    progressions,
    steps,
    uploads,
    users,
    workouts,
)

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=get_settings().app_name,
    version="0.1.0",
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(admin.router)
app.include_router(admin_workouts.router)
app.include_router(progressions.router)
app.include_router(membership.router)
app.include_router(exercises.router)
app.include_router(workouts.router)
app.include_router(workouts.logs_router)
app.include_router(steps.router)
app.include_router(steps.admin_router)
app.include_router(challenge.router)
app.include_router(admin_challenge.router)
app.include_router(uploads.router)


@app.get("/health", tags=["health"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
