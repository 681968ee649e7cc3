"""Creative workflow state — phases, events and the state record passed between stages."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, TypedDict

from adcanvas.models.canvas import Design
from adcanvas.models.creative import BrandContext, DesignOption
from adcanvas.rules.models import PlatformProfile


class CreativePhase(str, Enum):
    ANALYZE = "analyze"
    PLAN = "plan"
    GENERATE = "generate"
    REVIEW = "review"
    APPLY = "apply"


class CreativeEvent(str, Enum):
    ANALYZED = "analyzed"
    PLANNED = "planned"
    GENERATED = "generated"
    AUTO_APPROVED = "auto_approved"      # No review trigger fired (or the mode skips review)
    AWAIT_DECISION = "await_decision"    # Review triggers fired; wait for a human
    NO_OPTIONS = "no_options"            # Planner produced nothing to review
    APPROVED = "approved"
    REJECTED = "rejected"
    APPLIED = "applied"


class CreativeState(TypedDict):
    """Everything a creative run knows. Each stage reads what it needs and writes its outputs."""

    # ── Input ──
    request: str
    platform: str
    generation_mode: str

    # ── Canvas ──
    design: Design                      # Replaced (never mutated) by apply

    # ── Stage Outputs ──
    profile: Optional[PlatformProfile]
    brand_context: Optional[BrandContext]
    design_options: list[DesignOption]
    selected_option: Optional[DesignOption]

    # ── Review ──
    requires_hitl: bool
    hitl_reasons: list[str]
    feedback: list[str]

    # ── Control Flow ──
    phase: CreativePhase
    transitions: list[str]              # "analyze --analyzed--> plan", ...

    # ── Error Tracking ──
    errors: list[str]

    # ── Metadata ──
    started_at: str
    completed_at: Optional[str]


def create_initial_state(
    design: Design,
    platform: str,
    request: str,
    generation_mode: str = "standard",
) -> CreativeState:
    """Create the initial state for a new creative run."""
    return CreativeState(
        request=request,
        platform=platform,
        generation_mode=generation_mode,
        design=design,
        profile=None,
        brand_context=None,
        design_options=[],
        selected_option=None,
        requires_hitl=False,
        hitl_reasons=[],
        feedback=[],
        phase=CreativePhase.ANALYZE,
        transitions=[],
        errors=[],
        started_at=datetime.now(timezone.utc).isoformat(),
        completed_at=None,
    )


def create_review_state(
    design: Design,
    platform: str,
    design_options: list[DesignOption],
    request: str = "",
) -> CreativeState:
    """Rebuild a state paused in review from what a client echoes back."""
    state = create_initial_state(design, platform, request)
    state["design_options"] = list(design_options)
    state["requires_hitl"] = True
    state["phase"] = CreativePhase.REVIEW
    return state
