from fastapi import APIRouter

from app.api.v1.health import router as health_router
from app.api.v1.auth import router as auth_router
from app.api.v1.issues import router as issues_router
from app.api.v1.dashboards import router as dashboards_router
from app.api.v1.admin_profiles import router as admin_profiles_router
from app.api.v1.views import router as views_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM / CORE
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(auth_router, tags=["auth"])
v1_router.include_router(views_router, tags=["views"])

# ------------------------------------------------------------------
# ISSUE WORKFLOW
# ------------------------------------------------------------------
v1_router.include_router(issues_router, tags=["issues"])

# ------------------------------------------------------------------
# DASHBOARDS
# ------------------------------------------------------------------
v1_router.include_router(dashboards_router, tags=["dashboards"])

# ------------------------------------------------------------------
# ADMIN
# ------------------------------------------------------------------
v1_router.include_router(admin_profiles_router, tags=["admin"])
