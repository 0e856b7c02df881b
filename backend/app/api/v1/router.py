"""
API Router v1

Combines all route modules. The Strava webhook router is mounted at the
app root (see app.main) because its callback URL is registered with
Strava.
"""

from fastapi import APIRouter

from app.api.v1.routes import strava, runs, chat

api_router = APIRouter()

api_router.include_router(strava.router, tags=["Strava"])
api_router.include_router(runs.router, tags=["Runs"])
api_router.include_router(chat.router, tags=["Chat"])
