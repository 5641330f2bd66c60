"""Entry point for the FastAPI-powered dub/sub scanner."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import Database
from .services.aggregator import ScanError
from .services.library import LibraryRepository, LibraryScanService, UserNotFoundError

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    database = Database(settings.database_url)
    await database.create_all()

    repository = LibraryRepository(database.session_factory)
    fastapi_app.state.scan_service = LibraryScanService(settings, repository)
    fastapi_app.state.database = database

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Dubbed and subtitled language coverage for TV libraries",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_scan_service(app: FastAPI) -> LibraryScanService:
    service = getattr(app.state, "scan_service", None)
    if not isinstance(service, LibraryScanService):
        raise RuntimeError("Scan service not initialised")
    return service


def _require_user_id(user_id: str | None) -> str:
    cleaned = (user_id or "").strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="userId is required")
    return cleaned


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/library/dub-sub-scan")
    async def dub_sub_scan(userId: str | None = None) -> dict[str, Any]:
        service = get_scan_service(fastapi_app)
        user_id = _require_user_id(userId)
        try:
            summary = await service.scan(user_id)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except PermissionError as exc:
            raise HTTPException(status_code=403, detail=str(exc)) from exc
        except ScanError as exc:
            logger.error("Dub sub scan failed: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return summary.to_payload()

    @fastapi_app.get("/user-views")
    async def user_views(
        userId: str | None = None, includeHidden: bool = False
    ) -> dict[str, Any]:
        service = get_scan_service(fastapi_app)
        user_id = _require_user_id(userId)
        try:
            views = await service.list_user_views(user_id, include_hidden=includeHidden)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {
            "items": [view.model_dump(by_alias=True) for view in views],
            "totalRecordCount": len(views),
        }

    @fastapi_app.get("/user-views/grouping-options")
    async def grouping_options(userId: str | None = None) -> list[dict[str, str]]:
        service = get_scan_service(fastapi_app)
        user_id = _require_user_id(userId)
        try:
            options = await service.list_grouping_options(user_id)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return [option.model_dump() for option in options]


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
