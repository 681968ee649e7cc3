"""Intent Classifier — routes a natural-language request to a workflow.

Two independent signals are fused:
1. A keyword heuristic (free, always available)
2. A deterministic structured model call (better at paraphrase, can fail)

``classify()`` never raises: when the model is unavailable the heuristic result
is returned with a fixed fallback confidence and a clarification request.
"""

import json
import re
from typing import Any, Literal, Optional

import structlog
from pydantic import BaseModel, Field

from adcanvas.agents.base import ModelMode, ModelRegistry, PromptSpec, StructuredModel
from adcanvas.config import get_settings
from adcanvas.errors import ExternalServiceError
from adcanvas.models.canvas import CamelModel
from adcanvas.rules.models import SUPPORTED_PLATFORMS
from adcanvas.workflow_config import RouterConfig

logger = structlog.get_logger()

IntentCategory = Literal["creative", "validate", "combined", "optimize"]

# ── Keyword tables ──

CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "creative": [
        "add", "create", "generate", "design", "make", "draw", "insert", "place",
        "image", "headline", "text", "banner", "layout", "background", "logo",
        "color", "colour", "font", "replace", "change",
    ],
    "validate": [
        "check", "validate", "verify", "compliance", "compliant", "comply", "meets",
        "guidelines", "rules", "policy", "approved", "allowed", "violations", "audit",
    ],
    "combined": [
        "and validate", "and check", "then validate", "then check", "and verify",
    ],
    "optimize": [
        "optimize", "optimise", "improve", "better", "enhance", "boost", "polish",
        "refine", "accessibility", "accessible", "performance", "conversion", "ctr",
    ],
}

SUB_INTENT_KEYWORDS: dict[str, list[str]] = {
    "image_generation": ["image", "photo", "picture", "product shot", "illustration"],
    "text_creation": ["headline", "text", "copy", "tagline", "caption", "title"],
    "layout_design": ["layout", "arrange", "position", "align", "grid", "centered"],
    "color_scheme": ["color", "colour", "palette", "scheme"],
    "background_removal": ["remove background", "background removal", "cut out", "transparent"],
    "compliance_check": ["compliance", "compliant", "guidelines", "policy", "rules"],
    "brand_validation": ["brand", "on brand", "brand colors", "logo"],
    "size_validation": ["size", "dimensions", "resolution", "aspect ratio"],
    "content_validation": ["claim", "claims", "wording", "disclaimer", "prohibited"],
    "generate_and_validate": ["and validate", "and check", "then validate", "then check"],
    "performance_optimization": ["performance", "conversion", "ctr", "click"],
    "visual_enhancement": ["enhance", "polish", "better", "prettier", "stunning"],
    "accessibility_improvement": ["accessibility", "accessible", "contrast", "alt text"],
}

PLATFORM_KEYWORDS: dict[str, list[str]] = {
    "amazon": ["amazon", "prime", "alexa"],
    "walmart": ["walmart", "great value", "rollback"],
    "flipkart": ["flipkart", "big billion days", "plus member"],
}

# Platform signal strength when detected / not detected by keywords
PLATFORM_DETECTED_CONFIDENCE = 1.0
PLATFORM_MISSING_CONFIDENCE = 0.4

SYSTEM_PROMPT = """You are the routing agent for a retail media design platform serving Amazon, Walmart and Flipkart.

Canvas:
{canvas}

Pre-analysis:
- Detected keywords: {keywords}
- Platform hints: {platforms}
- Suggested category: {category}
- Sub-intent: {sub_intent}

Classify the request into exactly one category:
1. "creative": generate or modify design elements (images, text, layouts, colors, backgrounds)
2. "validate": check compliance with platform rules and guidelines
3. "combined": both creative generation AND validation
4. "optimize": improve an existing design (performance, accessibility, visual polish)

Also extract:
- platform: amazon | walmart | flipkart
- subIntent: a snake_case sub-category such as image_generation, text_creation, layout_design,
  color_scheme, compliance_check, brand_validation, visual_enhancement
- params: concrete parameters mentioned (targetElement, imagePrompt, textContent, colorScheme, layoutType)
- confidence: 0.0 to 1.0
- needsClarification: true if the request is ambiguous
- clarificationQuestion: the question to ask when clarification is needed

Examples:
- "Add a product image" → creative / image_generation, confidence 0.9
- "Check if this meets Amazon guidelines" → validate / compliance_check, platform amazon, confidence 0.95
- "Generate a Walmart ad and validate it" → combined, platform walmart, confidence 0.85
- "Make this better" → optimize, confidence 0.4, needsClarification true,
  clarificationQuestion "What would you like to improve: visual design, compliance, or performance?\""""

CATEGORY_QUESTION = (
    "Do you want to create or change design elements, check the design against "
    "platform guidelines, or both?"
)
PLATFORM_QUESTION = "Which retail platform is this creative for: Amazon, Walmart, or Flipkart?"


# ── Models ──


class RouterModelOutput(BaseModel):
    """Output contract of the routing model call."""

    category: IntentCategory
    sub_intent: Optional[str] = Field(default=None, alias="subIntent")
    platform: Optional[str] = None
    params: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(ge=0, le=1)
    needs_clarification: bool = Field(default=False, alias="needsClarification")
    clarification_question: Optional[str] = Field(default=None, alias="clarificationQuestion")

    model_config = {"populate_by_name": True}


class RouterDecision(CamelModel):
    """Final routing decision returned to callers."""

    category: IntentCategory
    sub_intent: Optional[str] = None
    platform: str
    params: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(ge=0, le=1)
    needs_clarification: bool = False
    clarification_question: Optional[str] = None


class HeuristicSignal(BaseModel):
    """Result of the keyword pass."""

    category: Optional[IntentCategory] = None
    sub_intent: Optional[str] = None
    platform: Optional[str] = None
    confidence: float = 0.0
    keywords: list[str] = Field(default_factory=list)
    scores: dict[str, int] = Field(default_factory=dict)

    @property
    def platform_confidence(self) -> float:
        return PLATFORM_DETECTED_CONFIDENCE if self.platform else PLATFORM_MISSING_CONFIDENCE


# ── Heuristic pass ──


def _normalize(text: str) -> str:
    return " " + " ".join(re.findall(r"[a-z0-9#+]+", text.lower())) + " "


def _hits(normalized: str, keywords: list[str]) -> list[str]:
    return [kw for kw in keywords if f" {kw} " in normalized]


def analyze_keywords(request: str) -> HeuristicSignal:
    """Score every category by keyword hits and pick sub-intent and platform hints."""
    normalized = _normalize(request)

    matched: dict[str, list[str]] = {
        category: _hits(normalized, keywords) for category, keywords in CATEGORY_KEYWORDS.items()
    }
    scores = {category: len(hits) for category, hits in matched.items()}
    total = sum(scores.values())

    category: Optional[str] = None
    best = 0
    if scores["creative"] and scores["validate"]:
        category = "combined"
        best = scores["creative"] + scores["validate"] + scores["combined"]
    elif total:
        category = max(scores, key=lambda c: scores[c])
        best = scores[category]

    confidence = 0.0
    if total:
        confidence = round(min(1.0, best / total) * min(1.0, 0.5 + 0.25 * best), 3)

    sub_intent = None
    sub_best = 0
    for name, keywords in SUB_INTENT_KEYWORDS.items():
        count = len(_hits(normalized, keywords))
        if count > sub_best:
            sub_intent, sub_best = name, count

    platform = None
    for name, keywords in PLATFORM_KEYWORDS.items():
        if _hits(normalized, keywords):
            platform = name
            break

    return HeuristicSignal(
        category=category,
        sub_intent=sub_intent,
        platform=platform,
        confidence=confidence,
        keywords=sorted({kw for hits in matched.values() for kw in hits}),
        scores=scores,
    )


# ── Classifier ──


class IntentClassifier:
    """Fuses the keyword heuristic with the routing model."""

    name = "intent_classifier"

    def __init__(self, models: ModelRegistry, config: RouterConfig):
        self.models = models
        self.config = config

    @property
    def model(self) -> StructuredModel:
        return self.models.for_mode(ModelMode.DETERMINISTIC, get_settings().ROUTER_MODEL)

    def build_prompt(self, request: str, canvas_summary: dict, heuristic: HeuristicSignal) -> PromptSpec:
        system = SYSTEM_PROMPT.format(
            canvas=json.dumps(canvas_summary, indent=2),
            keywords=", ".join(heuristic.keywords) or "none",
            platforms=heuristic.platform or "none detected",
            category=heuristic.category or "uncertain",
            sub_intent=heuristic.sub_intent or "not detected",
        )
        return PromptSpec(system=system, user=request, name=self.name)

    async def classify(self, request: str, canvas_summary: dict) -> RouterDecision:
        heuristic = analyze_keywords(request)

        try:
            output = await self.model.invoke(
                self.build_prompt(request, canvas_summary, heuristic),
                RouterModelOutput,
            )
        except ExternalServiceError as e:
            decision = self._fallback(heuristic)
            logger.warning(
                "router_model_unavailable",
                error=str(e),
                category=decision.category,
                platform=decision.platform,
            )
            return decision

        decision = self._fuse(output, heuristic)
        logger.info(
            "request_routed",
            category=decision.category,
            sub_intent=decision.sub_intent,
            platform=decision.platform,
            model_confidence=output.confidence,
            heuristic_confidence=heuristic.confidence,
            needs_clarification=decision.needs_clarification,
        )
        return decision

    def _resolve_platform(self, candidate: Optional[str], heuristic: HeuristicSignal) -> str:
        if candidate and candidate.lower() in SUPPORTED_PLATFORMS:
            return candidate.lower()
        return heuristic.platform or self.config.default_platform

    def _fuse(self, output: RouterModelOutput, heuristic: HeuristicSignal) -> RouterDecision:
        weak = (
            output.confidence < self.config.require_clarification_threshold
            and heuristic.confidence < self.config.heuristic_confidence_floor
        )
        needs_clarification = output.needs_clarification or weak
        question = output.clarification_question
        if needs_clarification and not question:
            question = self._clarification_question(heuristic, output.confidence)

        return RouterDecision(
            category=output.category,
            sub_intent=output.sub_intent or heuristic.sub_intent,
            platform=self._resolve_platform(output.platform, heuristic),
            params=output.params,
            confidence=output.confidence,
            needs_clarification=needs_clarification,
            clarification_question=question if needs_clarification else None,
        )

    def _fallback(self, heuristic: HeuristicSignal) -> RouterDecision:
        return RouterDecision(
            category=heuristic.category or self.config.default_category,
            sub_intent=heuristic.sub_intent,
            platform=heuristic.platform or self.config.default_platform,
            confidence=self.config.fallback_confidence,
            needs_clarification=True,
            clarification_question=self._clarification_question(heuristic, heuristic.confidence),
        )

    @staticmethod
    def _clarification_question(heuristic: HeuristicSignal, category_confidence: float) -> str:
        # Ask about whichever signal is weaker
        if heuristic.platform_confidence < category_confidence:
            return PLATFORM_QUESTION
        return CATEGORY_QUESTION
