"""Main router for API v1."""

from fastapi import APIRouter

from appaloosa_publisher.api.v1 import agent, health, projects

router = APIRouter(prefix="/v1")

# Include sub-routers
router.include_router(health.router, tags=["health"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(agent.router, prefix="/agent", tags=["agent"])
