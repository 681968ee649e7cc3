"""Tests for the tiered ValidationPipeline and the scoring rules."""

import pytest

from adcanvas.agents.compliance_reviewer import ComplianceReview, ComplianceReviewer, ModelFinding
from adcanvas.errors import ExternalServiceError, ValidationInputError
from adcanvas.validators.autofix import AutoFixEngine
from adcanvas.validators.base import BaseValidator
from adcanvas.validators.engine import ValidationPipeline
from adcanvas.validators.models import (
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidationTier,
    compliance_score,
)
from tests.conftest import make_design


def _text(id, size=32, font="Arial", content="Fresh deals", color="#111111"):
    return {
        "id": id,
        "type": "text",
        "content": content,
        "style": {"fontSize": size, "fontFamily": font, "color": color},
    }


def _issue(severity, score):
    return ValidationIssue(rule="r", severity=severity, message="m", severity_score=score)


@pytest.fixture
def pipeline(rules, models, workflow_config):
    return ValidationPipeline(
        rules,
        ComplianceReviewer(models),
        AutoFixEngine(rules, workflow_config.validation.auto_fix),
        workflow_config.validation,
    )


class TestInstantTier:

    @pytest.mark.asyncio
    async def test_wrong_dimensions_yield_exactly_one_issue(self, pipeline):
        design = make_design(height=500)
        result = await pipeline.validate(design, "amazon", tier="instant")

        assert result.tier == ValidationTier.INSTANT
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.rule == "dimensions"
        assert issue.severity == Severity.CRITICAL
        assert issue.auto_fix_available is False
        assert not result.is_compliant

    @pytest.mark.asyncio
    async def test_instant_stops_before_rule_engine(self, pipeline):
        design = make_design(background={"color": "#000000"})
        result = await pipeline.validate(design, "amazon", tier="instant")
        assert result.issues == []
        assert result.overall_score == 100


class TestRuleEngineTier:

    @pytest.mark.asyncio
    async def test_compliant_design_passes(self, pipeline, design):
        result = await pipeline.validate(design, "amazon")

        assert result.tier == ValidationTier.RULE_ENGINE
        assert result.is_compliant
        assert result.violations == []
        assert result.warnings == []
        assert result.overall_score == 100

    @pytest.mark.asyncio
    async def test_small_font_is_high_and_fixable(self, pipeline):
        design = make_design(elements=[
            make_design().elements[0].model_dump(),
            _text("tiny", size=10),
        ])
        result = await pipeline.validate(design, "amazon", tier="rule_engine")

        font_issues = [i for i in result.issues if i.rule == "font_size"]
        assert len(font_issues) == 1
        assert font_issues[0].severity == Severity.HIGH
        assert font_issues[0].auto_fix_available is True
        assert font_issues[0].element == "tiny"
        assert font_issues[0] in result.violations
        # high alone does not break compliance
        assert result.is_compliant

    @pytest.mark.asyncio
    async def test_rule_engine_checks(self, pipeline):
        design = make_design(
            background={"color": "#FF0000"},
            elements=[
                _text("a", font="Comic Sans"),
                _text("b", size=90),
                _text("c", content="x" * 81),
                _text("d", content="The cheapest kettle, guaranteed"),
            ],
        )
        result = await pipeline.validate(design, "amazon")
        rules = {i.rule for i in result.issues}

        assert {"bg_color", "font_family", "font_size_max", "text_length",
                "text_lines", "product_missing", "prohibited_content"} <= rules
        assert not result.is_compliant
        assert result.tier == ValidationTier.RULE_ENGINE

    @pytest.mark.asyncio
    async def test_severity_scores_come_from_config(self, pipeline):
        design = make_design(background={"color": "#FF0000"})
        result = await pipeline.validate(design, "amazon")

        bg = next(i for i in result.issues if i.rule == "bg_color")
        assert bg.severity_score == 40
        assert result.overall_score == 60

    @pytest.mark.asyncio
    async def test_low_contrast_is_a_warning(self, pipeline):
        design = make_design(elements=[
            make_design().elements[0].model_dump(),
            _text("pale", color="#EEEEEE"),
        ])
        result = await pipeline.validate(design, "amazon")

        contrast = [i for i in result.warnings if i.rule == "contrast"]
        assert len(contrast) == 1
        assert result.overall_score == 95

    @pytest.mark.asyncio
    async def test_allowed_alternate_background_passes(self, pipeline):
        design = make_design(background={"color": "#f7f7f7"})
        result = await pipeline.validate(design, "amazon")
        assert not any(i.rule == "bg_color" for i in result.issues)

    @pytest.mark.asyncio
    async def test_fixes_offered_for_fixable_issues(self, pipeline):
        design = make_design(background={"color": "#FF0000"})
        result = await pipeline.validate(design, "amazon")

        assert [f.rule for f in result.auto_fixes] == ["bg_color"]
        fixed = result.auto_fixes[0].apply()
        assert fixed.background.color == "#FFFFFF"
        assert design.background.color == "#FF0000"

    @pytest.mark.asyncio
    async def test_pipeline_does_not_mutate_design(self, pipeline):
        design = make_design(background={"color": "#FF0000"}, elements=[_text("t", size=8)])
        before = design.model_dump()
        await pipeline.validate(design, "amazon", tier="comprehensive")
        assert design.model_dump() == before

    @pytest.mark.asyncio
    async def test_crashing_validator_becomes_an_issue(self, rules, models, workflow_config, design):
        class Broken(BaseValidator):
            @property
            def name(self):
                return "Broken"

            def validate(self, design, profile):
                raise RuntimeError("boom")

        pipeline = ValidationPipeline(
            rules,
            ComplianceReviewer(models),
            AutoFixEngine(rules, workflow_config.validation.auto_fix),
            workflow_config.validation,
            rule_validators=[Broken()],
        )
        result = await pipeline.validate(design, "amazon")
        assert [i.rule for i in result.issues] == ["validator_error"]
        assert result.issues[0].severity_score == 10


class TestModelTier:

    @pytest.mark.asyncio
    async def test_critical_issue_at_rule_engine_never_calls_model(self, pipeline, fake_model):
        design = make_design(background={"color": "#FF0000"})
        result = await pipeline.validate(design, "amazon", tier="rule_engine")

        assert fake_model.calls == []
        assert result.tier == ValidationTier.RULE_ENGINE

    @pytest.mark.asyncio
    async def test_llm_tier_skips_model_when_critical(self, pipeline, fake_model):
        design = make_design(background={"color": "#FF0000"})
        result = await pipeline.validate(design, "amazon", tier="llm")

        assert fake_model.calls == []
        assert result.tier == ValidationTier.RULE_ENGINE

    @pytest.mark.asyncio
    async def test_comprehensive_runs_model_despite_critical(self, pipeline, fake_model):
        fake_model.responses[ComplianceReview] = ComplianceReview()
        design = make_design(background={"color": "#FF0000"})
        result = await pipeline.validate(design, "amazon", tier="comprehensive")

        assert len(fake_model.calls) == 1
        assert result.tier == ValidationTier.MODEL

    @pytest.mark.asyncio
    async def test_model_findings_are_merged_after_prior_issues(self, pipeline, fake_model):
        fake_model.responses[ComplianceReview] = ComplianceReview(
            violations=[ModelFinding(rule="text_overlap", severity="high", element="headline",
                                     message="Headline overlaps the product")],
            warnings=[ModelFinding(rule="brand_prominence", severity="low", message="Brand colors are faint")],
            suggestions=["Move the headline to the top-left"],
        )
        design = make_design(elements=[
            make_design().elements[0].model_dump(),
            _text("pale", color="#EEEEEE"),
        ])
        result = await pipeline.validate(design, "amazon", tier="llm")

        assert result.tier == ValidationTier.MODEL
        assert [i.rule for i in result.warnings] == ["contrast", "brand_prominence"]
        assert [i.rule for i in result.violations] == ["text_overlap"]
        assert result.suggestions == ["Move the headline to the top-left"]
        # 100 - 20 - 0.5 * (10 + 5)
        assert result.overall_score == 72.5

    @pytest.mark.asyncio
    async def test_prompt_carries_prior_issues(self, pipeline, fake_model):
        fake_model.responses[ComplianceReview] = ComplianceReview()
        design = make_design(elements=[
            make_design().elements[0].model_dump(),
            _text("pale", color="#EEEEEE"),
        ])
        await pipeline.validate(design, "amazon", tier="llm")

        prompt = fake_model.calls_for(ComplianceReview)[0]
        assert "contrast" in prompt.system
        assert "1200x628" in prompt.system

    @pytest.mark.asyncio
    async def test_model_failure_falls_back_to_rule_engine(self, pipeline, fake_model):
        fake_model.error = ExternalServiceError("model down")
        design = make_design(elements=[
            make_design().elements[0].model_dump(),
            _text("pale", color="#EEEEEE"),
        ])
        result = await pipeline.validate(design, "amazon", tier="llm")

        assert len(fake_model.calls) == 1
        assert result.tier == ValidationTier.RULE_ENGINE
        assert [i.rule for i in result.issues] == ["contrast"]

    @pytest.mark.asyncio
    async def test_unknown_tier_rejected(self, pipeline, design):
        with pytest.raises(ValidationInputError, match="Unknown validation tier"):
            await pipeline.validate(design, "amazon", tier="thorough")


class TestScoring:

    def test_compliance_tracks_critical_violations_only(self):
        high = ValidationResult.build([_issue(Severity.HIGH, 20)], ValidationTier.RULE_ENGINE)
        critical = ValidationResult.build([_issue(Severity.CRITICAL, 40)], ValidationTier.RULE_ENGINE)

        assert high.is_compliant
        assert not critical.is_compliant
        assert critical.violations[0].severity == Severity.CRITICAL

    def test_medium_and_low_are_warnings(self):
        result = ValidationResult.build(
            [_issue(Severity.MEDIUM, 10), _issue(Severity.LOW, 5)],
            ValidationTier.RULE_ENGINE,
        )
        assert result.violations == []
        assert len(result.warnings) == 2
        assert result.overall_score == 92.5

    def test_score_never_increases_as_issues_are_added(self):
        severities = [
            (Severity.LOW, 5), (Severity.MEDIUM, 10), (Severity.HIGH, 20),
            (Severity.CRITICAL, 40), (Severity.CRITICAL, 40), (Severity.HIGH, 20),
        ]
        issues, previous = [], 100.0
        for severity, score in severities:
            issues.append(_issue(severity, score))
            current = ValidationResult.build(issues, ValidationTier.RULE_ENGINE).overall_score
            assert current <= previous
            assert 0 <= current <= 100
            previous = current
        assert previous == 0

    def test_score_is_clamped(self):
        assert compliance_score([_issue(Severity.CRITICAL, 40)] * 5, []) == 0
        assert compliance_score([], []) == 100
