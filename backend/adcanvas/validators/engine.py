"""Validation Pipeline — escalates from cheap deterministic checks to the semantic model tier.

States::

    INSTANT → RULE_ENGINE → (conditional) MODEL → DONE

The requested tier is a ceiling: ``instant`` stops after the instant tier,
``rule_engine`` after the rule engine. The model tier runs for ``llm`` and
``comprehensive`` requests, but ``llm`` skips it once a critical issue is known
(no point paying for semantic review of an already-fatal design).

Usage:
    pipeline = ValidationPipeline(rules, reviewer, autofix, config)
    result = await pipeline.validate(design, "amazon", tier="rule_engine")
"""

import time
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

import structlog

from adcanvas.errors import ExternalServiceError, ValidationInputError
from adcanvas.models.canvas import Design
from adcanvas.rules.loader import PlatformRuleProvider
from adcanvas.rules.models import Platform, PlatformProfile
from adcanvas.validators.autofix import AutoFixEngine
from adcanvas.validators.base import BaseValidator
from adcanvas.validators.models import (
    IssueCategory,
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidationTier,
)
from adcanvas.workflow_config import ValidationConfig

from adcanvas.validators.dimension_validator import DimensionValidator
from adcanvas.validators.background_validator import BackgroundValidator
from adcanvas.validators.text_validator import TextValidator
from adcanvas.validators.product_validator import ProductValidator
from adcanvas.validators.content_validator import ContentValidator

if TYPE_CHECKING:
    from adcanvas.agents.compliance_reviewer import ComplianceReviewer

logger = structlog.get_logger()


class PipelineState(str, Enum):
    INSTANT = "instant"
    RULE_ENGINE = "rule_engine"
    MODEL = "model"
    DONE = "done"


# Tier tag reported for each executed state
STATE_TIERS = {
    PipelineState.INSTANT: ValidationTier.INSTANT,
    PipelineState.RULE_ENGINE: ValidationTier.RULE_ENGINE,
    PipelineState.MODEL: ValidationTier.MODEL,
}

MODEL_TIER_REQUESTS = {ValidationTier.MODEL, ValidationTier.COMPREHENSIVE}


def parse_tier(tier: Union[ValidationTier, str, None], default: str = ValidationTier.RULE_ENGINE.value) -> ValidationTier:
    """Parse a requested tier, rejecting unknown values with a ``ValidationInputError``."""
    if isinstance(tier, ValidationTier):
        return tier
    try:
        return ValidationTier(tier or default)
    except ValueError as e:
        valid = ", ".join(t.value for t in ValidationTier)
        raise ValidationInputError(f"Unknown validation tier '{tier}'. Use one of: {valid}") from e


class ValidationPipeline:
    """Runs the tiers in order and produces a scored ``ValidationResult``.

    Design principles:
        - Read-only: the design is never mutated
        - Cheap first: the model tier only runs when asked for and worth it
        - Degrades gracefully: a model failure returns the rule-engine result
    """

    def __init__(
        self,
        rules: PlatformRuleProvider,
        reviewer: "ComplianceReviewer",
        autofix: AutoFixEngine,
        config: ValidationConfig,
        instant_validators: Optional[list[BaseValidator]] = None,
        rule_validators: Optional[list[BaseValidator]] = None,
    ):
        self.rules = rules
        self.reviewer = reviewer
        self.autofix = autofix
        self.config = config
        self.instant_validators = instant_validators or [DimensionValidator()]
        self.rule_validators = rule_validators or self._default_rule_validators()

    @staticmethod
    def _default_rule_validators() -> list[BaseValidator]:
        return [
            BackgroundValidator(),
            TextValidator(),
            ProductValidator(),
            ContentValidator(),
        ]

    async def validate(
        self,
        design: Design,
        platform: Union[Platform, str],
        tier: Union[ValidationTier, str, None] = None,
    ) -> ValidationResult:
        """Validate a design for a platform up to the requested tier."""
        requested = parse_tier(tier, self.config.default_tier)
        profile = self.rules.get_profile(platform)
        start_time = time.perf_counter()

        issues: list[ValidationIssue] = []
        suggestions: list[str] = []
        last_tier = ValidationTier.INSTANT
        timings: dict[str, float] = {}
        state = PipelineState.INSTANT

        while state != PipelineState.DONE:
            t_start = time.perf_counter()

            if state == PipelineState.INSTANT:
                issues.extend(self._run_validators(self.instant_validators, design, profile))
            elif state == PipelineState.RULE_ENGINE:
                issues.extend(self._run_validators(self.rule_validators, design, profile))
            elif state == PipelineState.MODEL:
                try:
                    review = await self.reviewer.review(design, profile, issues)
                except ExternalServiceError as e:
                    logger.warning(
                        "model_tier_unavailable",
                        platform=profile.platform.value,
                        error=str(e),
                        fallback_tier=last_tier.value,
                    )
                    break
                issues.extend(self._stamp(review.issues()))
                suggestions.extend(review.suggestions)

            last_tier = STATE_TIERS[state]
            timings[state.value] = round((time.perf_counter() - t_start) * 1000, 2)
            state = self._next_state(state, requested, issues)

        fixes = self.autofix.generate_fixes(issues, design, profile.platform)
        result = ValidationResult.build(issues, last_tier, auto_fixes=fixes, suggestions=suggestions)

        logger.info(
            "validation_complete",
            platform=profile.platform.value,
            requested_tier=requested.value,
            tier=result.tier.value,
            compliant=result.is_compliant,
            score=result.overall_score,
            summary=result.summary,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            tier_timings=timings,
        )
        return result

    @staticmethod
    def _next_state(
        state: PipelineState,
        requested: ValidationTier,
        issues: list[ValidationIssue],
    ) -> PipelineState:
        if state == PipelineState.INSTANT:
            return PipelineState.DONE if requested == ValidationTier.INSTANT else PipelineState.RULE_ENGINE

        if state == PipelineState.RULE_ENGINE:
            if requested not in MODEL_TIER_REQUESTS:
                return PipelineState.DONE
            has_critical = any(i.severity == Severity.CRITICAL for i in issues)
            if has_critical and requested != ValidationTier.COMPREHENSIVE:
                return PipelineState.DONE
            return PipelineState.MODEL

        return PipelineState.DONE

    def _run_validators(
        self,
        validators: list[BaseValidator],
        design: Design,
        profile: PlatformProfile,
    ) -> list[ValidationIssue]:
        found: list[ValidationIssue] = []
        for validator in validators:
            try:
                found.extend(validator.validate(design, profile))
            except Exception as e:
                logger.error("validator_failed", validator=validator.name, error=str(e))
                # Don't let one broken validator kill the whole pipeline
                found.append(ValidationIssue(
                    rule="validator_error",
                    severity=Severity.MEDIUM,
                    message=f"Validator '{validator.name}' crashed: {e}",
                    category=IssueCategory.COMPLIANCE,
                ))
        return self._stamp(found)

    def _stamp(self, issues: list[ValidationIssue]) -> list[ValidationIssue]:
        """Attach the configured severity score to each issue."""
        return [
            issue.model_copy(update={"severity_score": self.config.severity_score(issue.severity.value)})
            for issue in issues
        ]
