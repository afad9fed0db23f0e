"""
API v1 router combining all endpoints.
"""
from fastapi import APIRouter
from app.api.v1 import auth, departments, health, tests

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(tests.router, prefix="/tests", tags=["tests"])
api_router.include_router(
    departments.router, prefix="/departments", tags=["departments"]
)
