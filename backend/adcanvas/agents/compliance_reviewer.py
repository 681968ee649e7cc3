"""Compliance Reviewer — the semantic, model-backed validation tier."""

import json
from typing import Optional

import structlog
from pydantic import BaseModel, Field

from adcanvas.agents.base import ModelMode, ModelRegistry, PromptSpec, StructuredModel
from adcanvas.config import get_settings
from adcanvas.models.canvas import Design
from adcanvas.rules.models import PlatformProfile
from adcanvas.validators.models import IssueCategory, Severity, ValidationIssue

logger = structlog.get_logger()

SYSTEM_PROMPT = """You are a compliance reviewer for retail media advertisement creatives.

Deterministic checks (dimensions, background, fonts, text limits, product presence) have
already run; their findings are listed below. Do NOT repeat them. Judge only the
subjective and semantic rules that need visual reasoning:
1. The product occupies {min_coverage}-{max_coverage}% of the frame and is clearly visible
2. No text overlaps the product
3. Brand colors are prominent and the layout feels on-brand
4. Copy avoids prohibited claims: {prohibited}
5. Required disclaimers are present: {disclaimers}

Platform: {platform} ({display_name})
Canvas: {width}x{height}
Platform rules:
{rules}

Elements:
{elements}

Findings from earlier tiers:
{prior_issues}

Respond with:
- violations: findings with severity critical or high
- warnings: findings with severity medium or low
- suggestions: short improvement ideas
Each finding has rule (snake_case id), severity, optional element id, message,
autoFixAvailable (false unless a deterministic fix obviously exists) and category
(visual | text | product | brand | compliance | performance)."""


class ModelFinding(BaseModel):
    rule: str
    severity: Severity
    element: Optional[str] = None
    message: str
    auto_fix_available: bool = False
    category: IssueCategory = IssueCategory.COMPLIANCE


class ComplianceReview(BaseModel):
    """Output contract of the semantic tier."""

    violations: list[ModelFinding] = Field(default_factory=list)
    warnings: list[ModelFinding] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    def issues(self) -> list[ValidationIssue]:
        return [
            ValidationIssue(
                rule=f.rule,
                severity=f.severity,
                element=f.element,
                message=f.message,
                auto_fix_available=f.auto_fix_available,
                category=f.category,
            )
            for f in [*self.violations, *self.warnings]
        ]


class ComplianceReviewer:
    """Asks the deterministic-mode model for semantic findings."""

    name = "compliance_reviewer"

    def __init__(self, models: ModelRegistry):
        self.models = models

    @property
    def model(self) -> StructuredModel:
        return self.models.for_mode(ModelMode.DETERMINISTIC, get_settings().VALIDATION_MODEL)

    def build_prompt(self, design: Design, profile: PlatformProfile, prior_issues: list[ValidationIssue]) -> PromptSpec:
        elements = [
            {
                "id": el.id,
                "type": el.type,
                "x": el.x,
                "y": el.y,
                "width": el.width,
                "height": el.height,
                "content": el.content,
                "isProduct": el.metadata.is_product,
                "isCritical": el.metadata.is_critical,
            }
            for el in design.elements
        ]
        prior = [i.model_dump(mode="json", include={"rule", "severity", "element", "message"}) for i in prior_issues]

        system = SYSTEM_PROMPT.format(
            min_coverage=profile.product.min_coverage or 60,
            max_coverage=profile.product.max_coverage or 80,
            prohibited=", ".join(profile.compliance.prohibited_content) or "none listed",
            disclaimers=", ".join(profile.compliance.required_disclaimers) or "none",
            platform=profile.platform.value,
            display_name=profile.display_name,
            width=design.width,
            height=design.height,
            rules="\n".join(f"- {r}" for r in profile.rules_summary()),
            elements=json.dumps(elements, indent=2),
            prior_issues=json.dumps(prior) if prior else "None",
        )
        return PromptSpec(
            system=system,
            user="Please validate this design against subjective and semantic rules.",
            name=self.name,
        )

    async def review(
        self,
        design: Design,
        profile: PlatformProfile,
        prior_issues: list[ValidationIssue],
    ) -> ComplianceReview:
        """Run the semantic review. Raises ``ExternalServiceError`` on model failure."""
        prompt = self.build_prompt(design, profile, prior_issues)
        review = await self.model.invoke(prompt, ComplianceReview)
        logger.info(
            "compliance_review_completed",
            platform=profile.platform.value,
            violations=len(review.violations),
            warnings=len(review.warnings),
            suggestions=len(review.suggestions),
        )
        return review
