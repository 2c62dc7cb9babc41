"""Top-level API router."""

from fastapi import APIRouter

from consultant_ledger.api.routes.consultants import router as consultants_router
from consultant_ledger.api.routes.health import router as health_router
from consultant_ledger.api.routes.roles import router as roles_router
from consultant_ledger.api.routes.tasks import router as tasks_router
from consultant_ledger.api.routes.work_entries import router as work_entries_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(roles_router)
api_router.include_router(consultants_router)
api_router.include_router(tasks_router)
api_router.include_router(work_entries_router)
