"""Registry — the shared, populate-once caches and the services built on them.

Created once at application start-up and passed by reference; nothing else
holds process-wide mutable state.
"""

from functools import cached_property
from pathlib import Path
from typing import Optional

import structlog

from adcanvas.agents.base import ModelFactory, ModelRegistry
from adcanvas.agents.compliance_reviewer import ComplianceReviewer
from adcanvas.agents.planner import DesignPlanner
from adcanvas.agents.router import IntentClassifier
from adcanvas.config import Settings, get_settings
from adcanvas.graph.creative import AssetGenerator, CreativeWorkflow
from adcanvas.graph.orchestrator import WorkflowOrchestrator
from adcanvas.rules.loader import PlatformRuleProvider
from adcanvas.validators.autofix import AutoFixEngine
from adcanvas.validators.engine import ValidationPipeline
from adcanvas.workflow_config import WorkflowConfig, get_workflow_config, reload_workflow_config

logger = structlog.get_logger()


class Registry:
    """Holds the profile cache, the model-client cache and the workflow configuration."""

    def __init__(
        self,
        rules: PlatformRuleProvider,
        models: ModelRegistry,
        config: WorkflowConfig,
        asset_generator: Optional[AssetGenerator] = None,
        config_path: Optional[Path] = None,
    ):
        self.rules = rules
        self.models = models
        self.config = config
        self.asset_generator = asset_generator
        self.config_path = config_path

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        model_factory: Optional[ModelFactory] = None,
    ) -> "Registry":
        settings = settings or get_settings()
        registry = cls(
            rules=PlatformRuleProvider(settings.PLATFORM_RULES_DIR),
            models=ModelRegistry(model_factory),
            config=get_workflow_config(settings.WORKFLOW_CONFIG_PATH),
            config_path=settings.WORKFLOW_CONFIG_PATH,
        )
        logger.info(
            "registry_created",
            rules_dir=str(settings.PLATFORM_RULES_DIR),
            workflow_config=str(settings.WORKFLOW_CONFIG_PATH),
        )
        return registry

    # ── Services ──

    @cached_property
    def intent_classifier(self) -> IntentClassifier:
        return IntentClassifier(self.models, self.config.router)

    @cached_property
    def auto_fix_engine(self) -> AutoFixEngine:
        return AutoFixEngine(self.rules, self.config.validation.auto_fix)

    @cached_property
    def validation_pipeline(self) -> ValidationPipeline:
        return ValidationPipeline(
            self.rules,
            ComplianceReviewer(self.models),
            self.auto_fix_engine,
            self.config.validation,
        )

    @cached_property
    def creative_workflow(self) -> CreativeWorkflow:
        return CreativeWorkflow(
            self.rules,
            DesignPlanner(self.models),
            self.config.creative,
            self.asset_generator,
        )

    @cached_property
    def orchestrator(self) -> WorkflowOrchestrator:
        return WorkflowOrchestrator(
            self.intent_classifier,
            self.creative_workflow,
            self.validation_pipeline,
        )

    def reload(self) -> None:
        """Drop cached profiles and model clients, and re-read the workflow configuration.

        Services are rebuilt on next access so they pick up the new thresholds.
        """
        self.rules.reload()
        self.models.clear()
        if self.config_path is not None:
            reload_workflow_config()
            self.config = get_workflow_config(self.config_path)
        for name in _SERVICES:
            self.__dict__.pop(name, None)
        logger.info("registry_reloaded")


_SERVICES = (
    "intent_classifier",
    "auto_fix_engine",
    "validation_pipeline",
    "creative_workflow",
    "orchestrator",
)
