"""Design Planner — proposes candidate design edits in creative sampling mode."""

import json

import structlog

from adcanvas.agents.base import ModelMode, ModelRegistry, PromptSpec, StructuredModel
from adcanvas.config import get_settings
from adcanvas.models.canvas import Design
from adcanvas.models.creative import BrandContext, DesignOption, DesignOptions
from adcanvas.rules.models import PlatformProfile

logger = structlog.get_logger()

SYSTEM_PROMPT = """You are a creative design agent for retail media advertisements.

Platform: {platform} ({display_name})
Canvas: {width}x{height}, {element_count} elements
Brand: {brand}
Brand colors in use: {colors}
Fonts in use: {fonts}

Platform rules:
{rules}

Current elements:
{elements}

Generate exactly {options_count} design option(s) for the user's request. Each option must:
1. Specify exact positions (x, y, width, height) and styles for every element it adds or changes
2. Reuse the id of an existing element when modifying it; use a new id when adding one
3. Keep every element flagged isCritical or isProduct unless the request explicitly targets it
4. Respect the platform rules above (fonts, font sizes, background, text limits)
5. Explain the compliance reasoning

For each option return:
- id: "option-1", "option-2", ...
- elements: the added or changed elements (type text | image | shape | background)
  Set metadata.needsGeneration=true on image elements whose asset must still be generated.
- reasoning: why the option satisfies the request and the platform rules
- confidence: 0.0-1.0
- modifications: one short entry per change
- brandConsistencyScore: 0.0-1.0, how well the option keeps the brand's look
- impact: minor | moderate | major
- preservedElementIds: ids of existing elements left untouched"""


class DesignPlanner:
    """Generates ``DesignOption`` candidates with the creative-mode model."""

    name = "design_planner"

    def __init__(self, models: ModelRegistry):
        self.models = models

    @property
    def model(self) -> StructuredModel:
        return self.models.for_mode(ModelMode.CREATIVE, get_settings().CREATIVE_MODEL)

    def build_prompt(
        self,
        request: str,
        design: Design,
        profile: PlatformProfile,
        brand: BrandContext,
        options_count: int,
    ) -> PromptSpec:
        elements = [el.to_wire() for el in design.elements]
        system = SYSTEM_PROMPT.format(
            platform=profile.platform.value,
            display_name=profile.display_name,
            width=design.width,
            height=design.height,
            element_count=len(design.elements),
            brand=brand.name or "unspecified",
            colors=", ".join(brand.colors) or "none",
            fonts=", ".join(brand.fonts) or "none",
            rules="\n".join(f"- {r}" for r in profile.rules_summary()),
            elements=json.dumps(elements, indent=2) if elements else "None (empty canvas)",
            options_count=options_count,
        )
        return PromptSpec(system=system, user=request, name=self.name)

    async def plan(
        self,
        request: str,
        design: Design,
        profile: PlatformProfile,
        brand: BrandContext,
        options_count: int,
    ) -> list[DesignOption]:
        """Ask the model for options. Raises ``ExternalServiceError`` on model failure."""
        prompt = self.build_prompt(request, design, profile, brand, options_count)
        result = await self.model.invoke(prompt, DesignOptions)
        options = result.options[:options_count]

        logger.info(
            "design_options_planned",
            platform=profile.platform.value,
            requested=options_count,
            returned=len(result.options),
            kept=len(options),
        )
        return options
