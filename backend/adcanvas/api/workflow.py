"""Workflow API — the single-call entry point plus platform discovery."""

from fastapi import APIRouter, Depends

from adcanvas.api.deps import get_registry
from adcanvas.models.requests import WorkflowRequest
from adcanvas.models.responses import PlatformInfo, WorkflowResponse
from adcanvas.registry import Registry

router = APIRouter()


@router.post("/workflow", response_model=WorkflowResponse)
async def run_workflow(body: WorkflowRequest, registry: Registry = Depends(get_registry)):
    """Route the request, then run creative and/or validation as its category requires."""
    return await registry.orchestrator.execute(
        body.canvas_state,
        body.user_request,
        generation_mode=body.generation_mode,
        tier=body.tier,
    )


@router.get("/platforms", response_model=list[PlatformInfo])
async def list_platforms(registry: Registry = Depends(get_registry)):
    """Supported retail platforms with their required canvas size."""
    platforms = []
    for name in registry.rules.supported_platforms():
        profile = registry.rules.get_profile(name)
        platforms.append(PlatformInfo(
            platform=name,
            display_name=profile.display_name,
            width=profile.dimensions.width,
            height=profile.dimensions.height,
        ))
    return platforms
