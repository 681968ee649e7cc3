"""Workflow orchestrator — classify a request, then run the workflows its category calls for.

    creative / optimize → creative workflow
    validate            → validation pipeline
    combined            → creative workflow, then validate the resulting canvas
"""

from typing import Optional

import structlog

from adcanvas.agents.router import IntentClassifier
from adcanvas.graph.creative import CreativeWorkflow
from adcanvas.models.canvas import Design
from adcanvas.models.responses import CreativeResponse, WorkflowResponse
from adcanvas.validators.engine import ValidationPipeline

logger = structlog.get_logger()

CREATIVE_CATEGORIES = {"creative", "optimize", "combined"}
VALIDATION_CATEGORIES = {"validate", "combined"}


class WorkflowOrchestrator:
    """Composes the classifier, the creative workflow and the validation pipeline per request."""

    def __init__(
        self,
        classifier: IntentClassifier,
        creative: CreativeWorkflow,
        validation: ValidationPipeline,
    ):
        self.classifier = classifier
        self.creative = creative
        self.validation = validation

    async def execute(
        self,
        design: Design,
        request: str,
        generation_mode: Optional[str] = None,
        tier: Optional[str] = None,
    ) -> WorkflowResponse:
        routing = await self.classifier.classify(request, design.summary())
        if routing.needs_clarification:
            logger.info("routing_ambiguous", category=routing.category, question=routing.clarification_question)

        response = WorkflowResponse(routing=routing)
        canvas = design

        if routing.category in CREATIVE_CATEGORIES:
            state = await self.creative.run(design, routing.platform, request, generation_mode)
            response.creative = CreativeResponse.from_state(state)
            canvas = state["design"]

        if routing.category in VALIDATION_CATEGORIES:
            response.validation = await self.validation.validate(canvas, routing.platform, tier)

        logger.info(
            "workflow_executed",
            category=routing.category,
            platform=routing.platform,
            creative_phase=response.creative.phase.value if response.creative else None,
            compliant=response.validation.is_compliant if response.validation else None,
        )
        return response
