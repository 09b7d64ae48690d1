"""
Health check route.
"""
from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from wordbin.database import PasteStore
from wordbin.dependencies import get_store
from wordbin.models import HealthCheck

router = APIRouter()


@router.get("/api/healthz", response_model=HealthCheck)
async def health_check(store: PasteStore = Depends(get_store)) -> HealthCheck:
    """
    Health check endpoint.
    Returns 200 with ok=true if the snapshot backend is reachable.
    """
    is_healthy = await run_in_threadpool(store.is_healthy)
    return HealthCheck(ok=is_healthy)
