# telelead_intake/routes/__init__.py
"""
API route handlers.
"""

from telelead_intake.routes.health import router as health_router
from telelead_intake.routes.leads import router as leads_router

__all__ = [
    "health_router",
    "leads_router",
]
