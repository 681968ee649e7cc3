"""Tests for IntentClassifier: keyword heuristic, model fusion and the outage fallback."""

import pytest

from adcanvas.agents.router import (
    CATEGORY_QUESTION,
    PLATFORM_QUESTION,
    IntentClassifier,
    RouterModelOutput,
    analyze_keywords,
)
from adcanvas.errors import ExternalServiceError


@pytest.fixture
def classifier(models, workflow_config):
    return IntentClassifier(models, workflow_config.router)


class TestKeywordHeuristic:

    def test_validation_request(self):
        signal = analyze_keywords("Check if this meets Amazon guidelines")
        assert signal.category == "validate"
        assert signal.platform == "amazon"
        assert signal.sub_intent == "compliance_check"
        assert signal.confidence == 1.0

    def test_creative_request(self):
        signal = analyze_keywords("Add a headline and a product image for Flipkart")
        assert signal.category == "creative"
        assert signal.platform == "flipkart"

    def test_creative_plus_validate_is_combined(self):
        signal = analyze_keywords("Generate a Walmart banner and validate it")
        assert signal.category == "combined"
        assert signal.platform == "walmart"
        assert signal.sub_intent == "generate_and_validate"

    def test_optimize_request(self):
        signal = analyze_keywords("Optimize accessibility and improve performance")
        assert signal.category == "optimize"

    def test_no_hits(self):
        signal = analyze_keywords("hello there")
        assert signal.category is None
        assert signal.platform is None
        assert signal.confidence == 0.0

    def test_keywords_match_whole_words(self):
        signal = analyze_keywords("What is the shipping address?")
        assert signal.scores["creative"] == 0

    def test_mixed_signals_have_low_confidence(self):
        signal = analyze_keywords("make it better")
        assert signal.confidence < 0.6


class TestFallback:

    @pytest.mark.asyncio
    async def test_model_outage_falls_back_to_heuristic(self, classifier, fake_model):
        fake_model.error = ExternalServiceError("timeout")
        decision = await classifier.classify("Check if this meets Amazon guidelines", {"dimensions": "1200x628"})

        assert decision.category == "validate"
        assert decision.platform == "amazon"
        assert decision.confidence == 0.5
        assert decision.needs_clarification is True
        assert decision.clarification_question

    @pytest.mark.asyncio
    async def test_fallback_defaults_without_keywords(self, classifier, fake_model):
        fake_model.error = ExternalServiceError("timeout")
        decision = await classifier.classify("hmm", {})

        assert decision.category == "creative"
        assert decision.platform == "amazon"
        assert decision.confidence == 0.5
        assert decision.needs_clarification is True


class TestFusion:

    @pytest.mark.asyncio
    async def test_confident_model_is_trusted(self, classifier, fake_model):
        fake_model.responses[RouterModelOutput] = RouterModelOutput(
            category="combined", sub_intent="generate_and_validate", platform="walmart",
            params={"textContent": "Rollback"}, confidence=0.9,
        )
        decision = await classifier.classify("Generate a Walmart banner and validate it", {})

        assert decision.category == "combined"
        assert decision.platform == "walmart"
        assert decision.params == {"textContent": "Rollback"}
        assert decision.confidence == 0.9
        assert decision.needs_clarification is False
        assert decision.clarification_question is None

    @pytest.mark.asyncio
    async def test_prompt_carries_hints_and_canvas(self, classifier, fake_model):
        fake_model.responses[RouterModelOutput] = RouterModelOutput(category="validate", confidence=0.9)
        await classifier.classify("Check if this meets Amazon guidelines", {"dimensions": "1200x628"})

        prompt = fake_model.calls_for(RouterModelOutput)[0]
        assert "1200x628" in prompt.system
        assert "Suggested category: validate" in prompt.system
        assert prompt.user == "Check if this meets Amazon guidelines"

    @pytest.mark.asyncio
    async def test_both_signals_weak_asks_about_category(self, classifier, fake_model):
        fake_model.responses[RouterModelOutput] = RouterModelOutput(category="optimize", confidence=0.4)
        decision = await classifier.classify("make it better", {})

        assert decision.needs_clarification is True
        assert decision.clarification_question == CATEGORY_QUESTION

    @pytest.mark.asyncio
    async def test_missing_platform_asked_when_weaker(self, classifier, fake_model):
        fake_model.responses[RouterModelOutput] = RouterModelOutput(category="optimize", confidence=0.65)
        decision = await classifier.classify("make it better", {})

        assert decision.needs_clarification is True
        assert decision.clarification_question == PLATFORM_QUESTION

    @pytest.mark.asyncio
    async def test_strong_heuristic_suppresses_clarification(self, classifier, fake_model):
        fake_model.responses[RouterModelOutput] = RouterModelOutput(category="validate", confidence=0.5)
        decision = await classifier.classify("Check if this meets Amazon guidelines", {})
        assert decision.needs_clarification is False

    @pytest.mark.asyncio
    async def test_model_question_is_kept(self, classifier, fake_model):
        fake_model.responses[RouterModelOutput] = RouterModelOutput(
            category="creative", confidence=0.9,
            needs_clarification=True, clarification_question="Which product?",
        )
        decision = await classifier.classify("Add an image", {})
        assert decision.needs_clarification is True
        assert decision.clarification_question == "Which product?"

    @pytest.mark.asyncio
    async def test_unsupported_platform_falls_back(self, classifier, fake_model):
        fake_model.responses[RouterModelOutput] = RouterModelOutput(
            category="creative", platform="etsy", confidence=0.9,
        )
        assert (await classifier.classify("Add a Flipkart headline", {})).platform == "flipkart"
        assert (await classifier.classify("Add a headline", {})).platform == "amazon"

    @pytest.mark.asyncio
    async def test_wire_format_is_camel_case(self, classifier, fake_model):
        fake_model.error = ExternalServiceError("down")
        decision = await classifier.classify("Check compliance", {})
        wire = decision.to_wire()
        assert wire["needsClarification"] is True
        assert "clarificationQuestion" in wire
