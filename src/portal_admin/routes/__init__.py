"""HTTP routers."""

from portal_admin.routes.collections import router as collections_router
from portal_admin.routes.dashboard import router as dashboard_router
from portal_admin.routes.status import router as status_router
from portal_admin.routes.uploads import router as uploads_router

__all__ = ["collections_router", "dashboard_router", "status_router", "uploads_router"]
