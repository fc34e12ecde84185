"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    cd backend
    uvicorn api.server:app --reload --port 8000

Endpoints:
    GET    /api/health

    POST   /api/users                  register → {user, token}
    POST   /api/users/login            → {user, token}
    POST   /api/users/logout
    GET    /api/users/profile
    PUT    /api/users/profile

    POST   /api/trips
    GET    /api/trips
    GET    /api/trips/{trip_id}
    PUT    /api/trips/{trip_id}
    DELETE /api/trips/{trip_id}
    PUT    /api/trips/{trip_id}/itinerary

    POST   /api/gemini/trip-recommendations
    POST   /api/gemini/place-details
    POST   /api/gemini/optimize-budget
    POST   /api/gemini/destination-recommendations
    POST   /api/gemini/destination-details

Errors are always JSON: {"message": ..., "rawResponse"?: ..., "errors"?: [...]}.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from api.routes import gemini, health, trips, users
from db.connection import close_pool
from errors import TripPlannerError

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    close_pool()


app = FastAPI(
    title="Trip Planner API",
    version="1.0.0",
    description=(
        "AI trip planner backend: Gemini-generated itineraries, "
        "repaired and cost-checked, stored per user."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Allow the frontend (any origin during development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error bodies ───────────────────────────────────────────────────────────────

@app.exception_handler(TripPlannerError)
async def trip_planner_error_handler(request: Request, exc: TripPlannerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Invalid request", "errors": errors})


app.include_router(health.router, prefix="/api",        tags=["Health"])
app.include_router(users.router,  prefix="/api/users",  tags=["Users"])
app.include_router(trips.router,  prefix="/api/trips",  tags=["Trips"])
app.include_router(gemini.router, prefix="/api/gemini", tags=["Generation"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)
