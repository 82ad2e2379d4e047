from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI

from api import create_router
from config import Settings
from logging_config import configure_logging
from repository import BookingRepository
from services import BookingService
from storage import JsonFileMirror


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app with one repository instance shared by every request."""
    if settings is None:
        settings = Settings.from_env()

    configure_logging(settings.log_level)

    repo = BookingRepository(JsonFileMirror(settings.data_file))
    service = BookingService(repo, rooms=settings.rooms)

    app = FastAPI(title="Boardroom Booking API", version="1.0.0")
    app.state.repository = repo
    app.state.service = service
    app.include_router(create_router(service))
    return app


def run(settings: Optional[Settings] = None) -> None:
    if settings is None:
        settings = Settings.from_env()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


app = create_app()


if __name__ == "__main__":
    run()
