"""
FastAPI application factory for the day tracker backend.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from daytracker import __version__
from daytracker.config import Settings, get_settings
from daytracker.dependencies import build_day_store
from daytracker.routes import router
from daytracker.service import DayRecordService


def create_app(
    service: Optional[DayRecordService] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the app around an explicit service. Without one, the store is
    chosen from settings and initialized here (``uvicorn --factory`` path).
    """
    settings = settings or get_settings()
    if service is None:
        store = build_day_store(settings)
        store.initialize()
        service = DayRecordService(store)

    app = FastAPI(title="Day Tracker", version=__version__)
    app.state.day_service = service
    app.include_router(router, prefix=settings.api_prefix)

    index_file = Path(settings.public_dir) / "index.html"

    def app_shell():
        if not index_file.is_file():
            raise HTTPException(status_code=404, detail="Not Found")
        return FileResponse(index_file)

    app.add_api_route("/", app_shell, methods=["GET"], include_in_schema=False)
    app.add_api_route(
        "/day/{date}", app_shell, methods=["GET"], include_in_schema=False
    )
    # Mounted last so the API and shell routes above take precedence.
    app.mount(
        "/",
        StaticFiles(directory=settings.public_dir, check_dir=False),
        name="public",
    )
    return app
