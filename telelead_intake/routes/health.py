# telelead_intake/routes/health.py
from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Liveness only; never touches the upstream."""
    return {"ok": True}
