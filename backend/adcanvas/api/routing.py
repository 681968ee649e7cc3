"""Routing API — classify a request without running any workflow."""

from fastapi import APIRouter, Depends

from adcanvas.agents.router import RouterDecision
from adcanvas.api.deps import get_registry
from adcanvas.models.requests import RouteRequest
from adcanvas.registry import Registry

router = APIRouter()


@router.post("/route", response_model=RouterDecision)
async def route_request(body: RouteRequest, registry: Registry = Depends(get_registry)):
    """Classify the request. The classifier never fails; a model outage yields a low-confidence decision."""
    return await registry.intent_classifier.classify(body.user_request, body.canvas_state.summary())
