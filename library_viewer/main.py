"""FastAPI entry point for the Steam Library Viewer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NoReturn

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .client import LibraryClient
from .models import (
    DisplayDashboard,
    LibraryView,
    SortKey,
    ValueModel,
    ViewerMessage,
)
from .normalizer import InvalidInputError, normalize_many
from .stats import SORT_KEYS, build_library_view
from .validator import INVALID_ID_HINT, is_valid_identifier
from .viewer import LibraryViewer

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent
STATIC_DIR = BASE_DIR / "static"

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Steam Library Viewer",
    description="Browse a Steam library with playtime stats and a dashboard.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

BUSY_MESSAGE = "A request for this library is already running."

api_router = APIRouter(prefix="/api")
library_client = LibraryClient.from_env()


class SummarizeRequest(ValueModel):
    steam_id: str = ""
    sort_by: SortKey = "playtime"
    games: list[Any]


@api_router.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok"})


@api_router.get("/service")
def service_status() -> JSONResponse:
    reachable = library_client.test_connection()
    return JSONResponse({"reachable": reachable, "baseUrl": library_client.base_url})


def _require_identifier(steam_id: str) -> str:
    cleaned = steam_id.strip()
    if not is_valid_identifier(cleaned):
        raise HTTPException(status_code=400, detail=INVALID_ID_HINT)
    return cleaned


def _raise_for_message(message: ViewerMessage) -> NoReturn:
    if message.level == "warning":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message.text)
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message.text)


@api_router.get("/library/{steam_id}", response_model=LibraryView)
def get_library(steam_id: str, sort_by: str = "playtime") -> LibraryView:
    cleaned = _require_identifier(steam_id)
    if sort_by not in SORT_KEYS:
        raise HTTPException(
            status_code=400, detail='sort_by must be "name" or "playtime".'
        )
    result = LibraryViewer(library_client).search(cleaned, sort_by)
    if result is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=BUSY_MESSAGE)
    if result.view is None:
        _raise_for_message(result.message)
    logger.debug("Served library for %s: %s", cleaned, result.message.text)
    return result.view


@api_router.get("/library/{steam_id}/dashboard", response_model=DisplayDashboard)
def get_dashboard(steam_id: str) -> DisplayDashboard:
    cleaned = _require_identifier(steam_id)
    result = LibraryViewer(library_client).load_dashboard(cleaned)
    if result is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=BUSY_MESSAGE)
    if result.dashboard is None:
        _raise_for_message(result.message)
    return result.dashboard


@api_router.post("/library/summarize", response_model=LibraryView)
async def summarize_library(payload: SummarizeRequest) -> LibraryView:
    try:
        games = normalize_many(payload.games)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.debug("Summarizing %d uploaded games", len(games))
    return build_library_view(payload.steam_id.strip(), payload.sort_by, games)


app.include_router(api_router)


if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.get("/", include_in_schema=False)
async def serve_index() -> FileResponse:
    index_file = STATIC_DIR / "index.html"
    if not index_file.exists():
        raise HTTPException(
            status_code=404,
            detail="Frontend assets are missing. Did you delete the static directory?",
        )
    return FileResponse(index_file)
