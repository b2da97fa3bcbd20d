# server.py
"""FastAPI app serving the rain simulation and its UI."""

from contextlib import asynccontextmanager
import datetime
import logging
import os
from typing import List, Literal, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from starlette.responses import FileResponse

from . import __version__
from .config import RainSettings, load_settings
from .geometry import MIN_RESOLUTION, circle_boundary_path, svg_path
from .sampler import Raindrop
from .state import RainSession, RainingError
from .storage_orm import Storage
from .utils import NoCacheHTMLMiddleware, finite_or_none, xy_payload

_current_dir = os.path.dirname(os.path.abspath(__file__))
MAX_DROP = 10_000


class DropRequest(BaseModel):
    count: int = Field(..., ge=0, le=MAX_DROP)


class StartRainRequest(BaseModel):
    interval_ms: Optional[float] = Field(None, gt=0)


def create_app(settings: Optional[RainSettings] = None, storage: Optional[Storage] = None) -> FastAPI:
    """Build the app around a fresh session.

    The session's scheduler is closed when the app shuts down, so no tick
    outlives the process serving it.
    """
    settings = settings or load_settings()
    storage = storage or Storage(settings.db_path, echo=settings.sql_logging)
    session = RainSession(rain_batch_size=settings.rain_batch)

    def record_batch(batch: List[Raindrop]) -> None:
        gauge = session.gauge
        try:
            storage.log_event(
                action=session.current_action or "drop",
                count=len(batch),
                total=gauge.total_count,
                inside=gauge.inside_count,
                approximation=gauge.approximation(),
            )
        except Exception:
            # The drops stay in the gauge; the request and the rain carry on.
            logging.exception("Could not record batch of %d drops", len(batch))

    session.gauge.subscribe(record_batch)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.info("Rain server %s starting (db=%s)", __version__, storage.db_path)
        try:
            yield
        finally:
            await session.aclose()
            storage.close()
            logging.info("Rain server stopped")

    app = FastAPI(title="Monte Carlo Pi Rain", version=__version__, lifespan=lifespan)
    app.state.session = session
    app.state.storage = storage
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*", "null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(NoCacheHTMLMiddleware)

    def state_payload():
        snapshot = session.gauge.snapshot()
        snapshot["approximation"] = finite_or_none(snapshot["approximation"])
        snapshot["raining"] = session.raining
        snapshot["interval"] = session.interval
        return snapshot

    @app.get("/")
    async def read_index():
        return FileResponse(os.path.join(_current_dir, "ui", "index.html"))

    @app.get("/api/health")
    async def health():
        return {"ok": True, "version": __version__, "raining": session.raining}

    @app.get("/api/config")
    async def get_config():
        return {
            "drop_sizes": list(settings.drop_sizes),
            "rain_interval_ms": settings.rain_interval_ms,
            "rain_batch": settings.rain_batch,
            "resolution": settings.resolution,
        }

    @app.get("/api/state")
    async def get_state():
        return state_payload()

    @app.get("/api/points")
    async def get_points():
        return {
            "inside": xy_payload(session.gauge.inside()),
            "outside": xy_payload(session.gauge.outside()),
        }

    @app.post("/api/drops")
    async def add_drops(body: DropRequest):
        try:
            session.drop(body.count)
        except RainingError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return state_payload()

    @app.post("/api/rain/start")
    async def start_rain(body: Optional[StartRainRequest] = None):
        interval_ms = settings.rain_interval_ms
        if body is not None and body.interval_ms is not None:
            interval_ms = body.interval_ms
        try:
            session.start_rain(interval_ms)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return state_payload()

    @app.post("/api/rain/stop")
    async def stop_rain():
        session.stop_rain()
        return state_payload()

    @app.get("/api/boundary")
    async def get_boundary(resolution: Optional[float] = Query(None, ge=MIN_RESOLUTION, le=1, allow_inf_nan=False)):
        res = settings.resolution if resolution is None else resolution
        try:
            points = circle_boundary_path(res)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"resolution": res, "points": points, "path": svg_path(points)}

    @app.get("/api/history")
    async def get_history(
        n: int = Query(100, ge=1, le=10_000),
        order: Literal["latest", "earliest"] = Query("latest"),
        action: Optional[Literal["drop", "rain"]] = Query(None),
        start_time: Optional[datetime.datetime] = Query(None),
        end_time: Optional[datetime.datetime] = Query(None),
    ):
        events = storage.fetch_events(action=action, n=n, order=order, start_time=start_time, end_time=end_time)
        return {"events": events, "actions": storage.distinct_actions()}

    return app
