"""
API router aggregator.
Includes all route modules.
"""
from fastapi import APIRouter
from gateway.api import health

api_router = APIRouter()

# Include route modules
api_router.include_router(health.router, prefix="/health", tags=["health"])
