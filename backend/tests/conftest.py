"""Shared fixtures: real platform profiles and workflow config, a scripted stand-in for the model."""

from typing import Optional

import pytest

from adcanvas.agents.base import ModelRegistry, PromptSpec
from adcanvas.config import get_settings
from adcanvas.errors import ExternalServiceError
from adcanvas.models.canvas import Design
from adcanvas.registry import Registry
from adcanvas.rules.loader import PlatformRuleProvider
from adcanvas.workflow_config import WorkflowConfig, load_workflow_config_file


class FakeStructuredModel:
    """Returns canned responses per output schema and records every call."""

    def __init__(self, responses: Optional[dict] = None, error: Optional[Exception] = None):
        self.responses = dict(responses or {})
        self.error = error
        self.calls: list[tuple[PromptSpec, type]] = []

    async def invoke(self, prompt: PromptSpec, schema):
        self.calls.append((prompt, schema))
        if self.error is not None:
            raise self.error
        if schema not in self.responses:
            raise ExternalServiceError(f"No canned response for {schema.__name__}")
        return self.responses[schema]

    def calls_for(self, schema) -> list[PromptSpec]:
        return [prompt for prompt, s in self.calls if s is schema]


def make_design(**overrides) -> Design:
    """An Amazon-compliant canvas: white background, product image, one headline."""
    data = {
        "width": 1200,
        "height": 628,
        "background": {"color": "#FFFFFF"},
        "elements": [
            {
                "id": "product",
                "type": "image",
                "x": 400, "y": 100, "width": 400, "height": 400,
                "src": "https://cdn.example.com/kettle.png",
                "altText": "Stainless steel kettle",
                "metadata": {"isProduct": True, "isCritical": True},
            },
            {
                "id": "headline",
                "type": "text",
                "x": 60, "y": 40, "width": 500, "height": 60,
                "content": "Boil water in 90 seconds",
                "style": {"fontSize": 32, "fontFamily": "Arial", "color": "#111111"},
            },
        ],
        "metadata": {"version": 0, "platform": "amazon"},
    }
    data.update(overrides)
    return Design.model_validate(data)


@pytest.fixture
def design() -> Design:
    return make_design()


@pytest.fixture
def rules() -> PlatformRuleProvider:
    return PlatformRuleProvider()


@pytest.fixture
def workflow_config() -> WorkflowConfig:
    return load_workflow_config_file(get_settings().WORKFLOW_CONFIG_PATH)


@pytest.fixture
def fake_model() -> FakeStructuredModel:
    return FakeStructuredModel()


@pytest.fixture
def models(fake_model) -> ModelRegistry:
    return ModelRegistry(factory=lambda spec: fake_model)


@pytest.fixture
def registry(rules, models, workflow_config) -> Registry:
    return Registry(rules, models, workflow_config)
