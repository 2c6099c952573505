from permitdesk.web.routers.admin import router as admin_router
from permitdesk.web.routers.permits import router as permits_router

__all__ = [
    "admin_router",
    "permits_router",
]
