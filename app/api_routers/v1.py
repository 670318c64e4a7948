from fastapi import APIRouter

from app.features.audit.routes.audit import router as audit_router
from app.features.lighthouse.routes.lighthouse import router as lighthouse_router
from app.features.ux_audit.routes.ux_audit import router as ux_audit_router

api_router = APIRouter()

# Register all audit routes
api_router.include_router(audit_router)
api_router.include_router(lighthouse_router)
api_router.include_router(ux_audit_router)
