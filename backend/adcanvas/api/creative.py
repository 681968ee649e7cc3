"""Creative API — start a creative run and feed human decisions into it."""

import structlog
from fastapi import APIRouter, Depends

from adcanvas.api.deps import get_registry
from adcanvas.graph.state import create_review_state
from adcanvas.models.requests import CreativeDecisionRequest, CreativeRequest
from adcanvas.models.responses import CreativeResponse
from adcanvas.registry import Registry

logger = structlog.get_logger()

router = APIRouter()


@router.post("/creative", response_model=CreativeResponse)
async def run_creative(body: CreativeRequest, registry: Registry = Depends(get_registry)):
    """Generate design options.

    When review triggers fire the response comes back in phase ``review`` with
    ``requiresHITL`` set; send the decision to ``/creative/decision``.
    Otherwise the first option is applied and the updated canvas returned.
    """
    state = await registry.creative_workflow.run(
        body.canvas_state,
        body.platform,
        body.user_request,
        body.generation_mode,
    )
    return CreativeResponse.from_state(state)


@router.post("/creative/decision", response_model=CreativeResponse)
async def decide_creative(body: CreativeDecisionRequest, registry: Registry = Depends(get_registry)):
    """Approve (optionally choosing an option) or reject the options from a paused run."""
    state = create_review_state(
        body.canvas_state,
        body.platform,
        body.design_options,
        body.user_request,
    )
    state = await registry.creative_workflow.resume(state, body.decision)

    logger.info(
        "creative_decision_processed",
        platform=body.platform,
        approved=body.decision.approved,
        phase=state["phase"].value,
    )
    return CreativeResponse.from_state(state)
