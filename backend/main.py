from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from database import check_db, create_indexes
from deps import get_exercise_service, get_user_service
from errors import TrackerError
from models import ExerciseOut, LogOut, UserOut
from services import ExerciseLogService, UserService


load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

BASE_DIR = Path(__file__).resolve().parent

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


app = FastAPI(title="Exercise Tracker")


# --- CORS (the bundled page and external testers call from anywhere)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/public", StaticFiles(directory=BASE_DIR / "public"), name="public")


@app.exception_handler(TrackerError)
async def tracker_exception_handler(request: Request, exc: TrackerError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Server error"})


@app.on_event("startup")
async def startup_db_client():
    await check_db()
    await create_indexes()


async def read_body(request: Request) -> dict:
    """Form fields or a JSON object, whichever the client sent."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
    form = await request.form()
    return dict(form)


@app.get("/", include_in_schema=False)
async def root():
    return FileResponse(BASE_DIR / "views" / "index.html")


# ------------------------- USERS -------------------------


@app.post("/api/users", response_model=UserOut)
async def create_user(request: Request, users: UserService = Depends(get_user_service)):
    body = await read_body(request)
    user = await users.create_or_get_user(body.get("username"))
    return UserOut(username=user.username, id=str(user.id))


@app.get("/api/users", response_model=List[UserOut])
async def list_users(users: UserService = Depends(get_user_service)):
    return [UserOut(username=u.username, id=str(u.id)) for u in await users.list_users()]


# ------------------------- EXERCISES -------------------------


@app.post("/api/users/{user_id}/exercises", response_model=ExerciseOut)
async def add_exercise(
    user_id: str,
    request: Request,
    exercises: ExerciseLogService = Depends(get_exercise_service),
):
    body = await read_body(request)
    return await exercises.append_exercise(
        user_id,
        body.get("description"),
        body.get("duration"),
        body.get("date"),
    )


@app.get("/api/users/{user_id}/logs", response_model=LogOut)
async def get_logs(
    user_id: str,
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = None,
    limit: Optional[str] = None,
    exercises: ExerciseLogService = Depends(get_exercise_service),
):
    return await exercises.get_logs(user_id, from_=from_, to=to, limit=limit)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
