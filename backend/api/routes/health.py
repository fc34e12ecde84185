"""
api/routes/health.py
--------------------
Health-check endpoint for load balancers and container probes.
"""
from __future__ import annotations

from fastapi import APIRouter

import config
from db.connection import ping

router = APIRouter()


@router.get("/health", summary="Health check")
def health() -> dict:
    """200 while the process is up; reports which backends are configured."""
    body = {
        "status": "ok",
        "service": "trip-planner-backend",
        "store": config.STORE_BACKEND,
        "llm": "stub" if config.USE_STUB_LLM else config.LLM_MODEL_NAME,
    }
    if config.STORE_BACKEND == "postgres":
        body["database"] = "ok" if ping() else "unavailable"
    return body
