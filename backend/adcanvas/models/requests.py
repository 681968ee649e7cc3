"""API request models and boundary checks."""

from typing import Optional

from pydantic import Field, field_validator, model_validator

from adcanvas.errors import ValidationInputError
from adcanvas.models.canvas import CamelModel, Design
from adcanvas.models.creative import DesignOption, HITLDecision
from adcanvas.rules.models import SUPPORTED_PLATFORMS
from adcanvas.validators.models import ValidationIssue
from adcanvas.workflow_config import GenerationMode


def parse_platform(value: Optional[str]) -> str:
    """Normalise a platform name, rejecting anything outside the supported set."""
    if not value or not value.strip():
        raise ValidationInputError("Missing required field: platform")
    platform = value.strip().lower()
    if platform not in SUPPORTED_PLATFORMS:
        raise ValidationInputError(
            f"Unsupported platform '{value}'. Supported: {', '.join(SUPPORTED_PLATFORMS)}"
        )
    return platform


class RouteRequest(CamelModel):
    canvas_state: Design
    user_request: str = Field(..., min_length=1, max_length=5000)


class CreativeRequest(CamelModel):
    """Start a creative run."""

    canvas_state: Design
    platform: str
    user_request: str = Field(..., min_length=1, max_length=5000)
    generation_mode: Optional[GenerationMode] = None

    @field_validator("platform")
    @classmethod
    def _platform(cls, v: str) -> str:
        return parse_platform(v)


class CreativeDecisionRequest(CamelModel):
    """Resume a run paused in review. The client echoes what the review response returned."""

    canvas_state: Design
    platform: str
    design_options: list[DesignOption]
    decision: HITLDecision
    user_request: str = ""

    @field_validator("platform")
    @classmethod
    def _platform(cls, v: str) -> str:
        return parse_platform(v)


class ValidateRequest(CamelModel):
    canvas_state: Design
    platform: str
    tier: Optional[str] = None

    @field_validator("platform")
    @classmethod
    def _platform(cls, v: str) -> str:
        return parse_platform(v)


class AutoFixRequest(CamelModel):
    """Apply deterministic fixes for the given issues.

    ``platform`` falls back to the canvas metadata, then to Amazon, and is
    always checked against the supported set.
    """

    canvas_state: Design
    violations: list[ValidationIssue]
    platform: Optional[str] = None

    @model_validator(mode="after")
    def _resolve_platform(self) -> "AutoFixRequest":
        self.platform = parse_platform(self.platform or self.canvas_state.metadata.platform or "amazon")
        return self


class WorkflowRequest(CamelModel):
    canvas_state: Design
    user_request: str = Field(..., min_length=1, max_length=5000)
    generation_mode: Optional[GenerationMode] = None
    tier: Optional[str] = None
