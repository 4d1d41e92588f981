"""Aggregate all REST sub-routers into `api_router` for fast import."""

from fastapi import APIRouter

from .events import router as events_router
from .health import router as health_router
from .topics import router as topics_router

api_router = APIRouter()
api_router.include_router(events_router)
api_router.include_router(topics_router)
api_router.include_router(health_router)
