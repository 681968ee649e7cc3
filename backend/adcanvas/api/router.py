"""Main API router — combines all endpoint routers."""

from fastapi import APIRouter

from adcanvas.api.creative import router as creative_router
from adcanvas.api.health import router as health_router
from adcanvas.api.routing import router as routing_router
from adcanvas.api.validation import router as validation_router
from adcanvas.api.workflow import router as workflow_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Intent routing
api_router.include_router(routing_router, tags=["Routing"])

# Creative generation + human review
api_router.include_router(creative_router, tags=["Creative"])

# Compliance validation + auto-fix
api_router.include_router(validation_router, tags=["Validation"])

# Orchestrated workflow
api_router.include_router(workflow_router, tags=["Workflow"])
