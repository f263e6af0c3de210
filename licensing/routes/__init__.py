# Import all routes
from .applicant_auth import router as applicant_auth_router
from .officer_auth import router as officer_auth_router
from .applications import router as applications_router
from .workflow import router as workflow_router
from .payment import router as payment_router
from .notifications import router as notifications_router
from .health import router as health_router

# All routers that should be included in main app
__all__ = [
    "applicant_auth_router",
    "officer_auth_router",
    "applications_router",
    "workflow_router",
    "payment_router",
    "notifications_router",
    "health_router",
]
