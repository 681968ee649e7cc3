"""API response models."""

from typing import Literal, Optional

from pydantic import Field

from adcanvas.agents.router import RouterDecision
from adcanvas.graph.state import CreativePhase, CreativeState
from adcanvas.models.canvas import CamelModel, Design
from adcanvas.models.creative import BrandContext, DesignOption
from adcanvas.validators.models import ValidationResult


class CreativeResponse(CamelModel):
    """Outcome of a creative run (or of a decision fed into one)."""

    canvas_state: Design
    design_options: list[DesignOption] = Field(default_factory=list)
    selected_option: Optional[DesignOption] = None
    requires_hitl: bool = Field(default=False, alias="requiresHITL")
    hitl_reasons: list[str] = Field(default_factory=list)
    brand_context: Optional[BrandContext] = None
    phase: CreativePhase
    feedback: list[str] = Field(default_factory=list)

    @classmethod
    def from_state(cls, state: CreativeState) -> "CreativeResponse":
        return cls(
            canvas_state=state["design"],
            design_options=state["design_options"],
            selected_option=state["selected_option"],
            requires_hitl=state["requires_hitl"],
            hitl_reasons=state["hitl_reasons"],
            brand_context=state["brand_context"],
            phase=state["phase"],
            feedback=state["feedback"],
        )


class WorkflowResponse(CamelModel):
    """Orchestrated result: the routing decision plus whichever workflows ran."""

    routing: RouterDecision
    creative: Optional[CreativeResponse] = None
    validation: Optional[ValidationResult] = None


class AutoFixResponse(CamelModel):
    canvas_state: Design


class PlatformInfo(CamelModel):
    platform: str
    display_name: str
    width: int
    height: int


class HealthDependency(CamelModel):
    """Health status of a single dependency."""

    status: Literal["healthy", "unhealthy", "degraded"]
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class HealthResponse(CamelModel):
    """System health check response."""

    status: Literal["healthy", "unhealthy", "degraded"]
    version: str = "1.0.0"
    uptime_seconds: float
    dependencies: dict[str, HealthDependency]
