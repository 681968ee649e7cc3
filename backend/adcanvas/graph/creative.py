"""Creative workflow — turns a request into design options, gated by human review.

Flow::

    analyze → plan → generate → review ──(auto-approve)──→ apply
                                  ↺ (await decision / rejected / no options)

``run()`` drives the machine until it pauses in review or finishes apply.
``resume()`` feeds a human decision into a run paused in review.
"""

from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Protocol

import structlog

from adcanvas.agents.planner import DesignPlanner
from adcanvas.errors import ExternalServiceError, ValidationInputError, WorkflowStateError
from adcanvas.graph.machine import StateMachine
from adcanvas.graph.state import CreativeEvent, CreativePhase, CreativeState, create_initial_state
from adcanvas.models.canvas import Design, Element
from adcanvas.models.creative import BrandContext, DesignOption, HITLDecision
from adcanvas.rules.loader import PlatformRuleProvider
from adcanvas.rules.models import PlatformProfile
from adcanvas.workflow_config import CreativeConfig, GenerationModeConfig

logger = structlog.get_logger()

Phase = CreativePhase
Event = CreativeEvent

TRANSITIONS: dict[tuple[CreativePhase, CreativeEvent], CreativePhase] = {
    (Phase.ANALYZE, Event.ANALYZED): Phase.PLAN,
    (Phase.PLAN, Event.PLANNED): Phase.GENERATE,
    (Phase.GENERATE, Event.GENERATED): Phase.REVIEW,
    (Phase.REVIEW, Event.AUTO_APPROVED): Phase.APPLY,
    (Phase.REVIEW, Event.AWAIT_DECISION): Phase.REVIEW,
    (Phase.REVIEW, Event.NO_OPTIONS): Phase.REVIEW,
    (Phase.REVIEW, Event.APPROVED): Phase.APPLY,
    (Phase.REVIEW, Event.REJECTED): Phase.REVIEW,
    (Phase.APPLY, Event.APPLIED): Phase.APPLY,
}

CREATIVE_MACHINE: StateMachine[CreativePhase, CreativeEvent] = StateMachine(
    TRANSITIONS,
    terminal={Phase.APPLY},
    pauses={Event.AWAIT_DECISION, Event.NO_OPTIONS, Event.REJECTED},
)

NO_OPTIONS_REASON = "No design options were generated"

STYLE_COLOR_KEYS = ("color", "backgroundColor")


class AssetGenerator(Protocol):
    """Materialises assets for image elements flagged ``needsGeneration``."""

    async def materialize(self, element: Element, platform: str) -> Optional[str]:
        """Return a source URL for the element, or None to leave it as is."""
        ...


class NoOpAssetGenerator:
    """Default generator: leaves every element untouched."""

    async def materialize(self, element: Element, platform: str) -> Optional[str]:
        return None


def derive_brand_context(design: Design, profile: PlatformProfile) -> BrandContext:
    """Collect distinct colors and fonts from element styles and score them against the brand palette."""
    colors: list[str] = []
    fonts: list[str] = []
    for el in design.elements:
        for key in STYLE_COLOR_KEYS:
            value = el.style.get(key)
            if isinstance(value, str) and value and value not in colors:
                colors.append(value)
        font = el.font_family
        if isinstance(font, str) and font and font not in fonts:
            fonts.append(font)

    brand_colors = {c.upper() for c in profile.brand.colors}
    if brand_colors:
        used = {c.upper() for c in colors}
        consistency = len(used & brand_colors) / len(brand_colors)
    else:
        consistency = 0.5

    return BrandContext(
        name=design.metadata.brand,
        colors=colors,
        fonts=fonts,
        consistency_score=round(consistency, 3),
    )


def _critical_touches(design: Design, option: DesignOption) -> list[str]:
    return option.flagged_elements({el.id for el in design.elements if el.is_flagged})


def merge_elements(existing: list[Element], incoming: list[Element], preserve_existing: bool) -> list[Element]:
    """Upsert ``incoming`` into ``existing`` by id, or replace wholesale.

    Upserted elements keep their position; fields the incoming element sets
    override the existing ones (shallow merge). Unknown ids are appended.
    """
    if not preserve_existing:
        return [el.model_copy(deep=True) for el in incoming]

    merged = [el.model_copy(deep=True) for el in existing]
    index = {el.id: i for i, el in enumerate(merged)}
    for el in incoming:
        if el.id in index:
            i = index[el.id]
            update = el.model_dump(exclude_unset=True)
            merged[i] = Element.model_validate({**merged[i].model_dump(), **update})
        else:
            index[el.id] = len(merged)
            merged.append(el.model_copy(deep=True))
    return merged


class CreativeWorkflow:
    """Runs the creative phases through ``CREATIVE_MACHINE``.

    Args:
        rules: Platform profile source
        planner: Option generator (creative-mode model)
        config: Generation modes, review triggers and merge policy
        asset_generator: Hook for the generate phase
    """

    def __init__(
        self,
        rules: PlatformRuleProvider,
        planner: DesignPlanner,
        config: CreativeConfig,
        asset_generator: Optional[AssetGenerator] = None,
    ):
        self.rules = rules
        self.planner = planner
        self.config = config
        self.asset_generator = asset_generator or NoOpAssetGenerator()
        self.machine = CREATIVE_MACHINE
        self._handlers: dict[CreativePhase, Callable[[CreativeState], Awaitable[CreativeEvent]]] = {
            Phase.ANALYZE: self._analyze,
            Phase.PLAN: self._plan,
            Phase.GENERATE: self._generate,
            Phase.REVIEW: self._review,
            Phase.APPLY: self._apply,
        }

    # ── Public API ──

    async def run(
        self,
        design: Design,
        platform: str,
        request: str,
        generation_mode: Optional[str] = None,
    ) -> CreativeState:
        """Start a creative run. Returns the state paused in review or finished in apply."""
        mode = generation_mode or "standard"
        self._mode(mode)
        state = create_initial_state(design, platform, request, mode)

        logger.info("creative_workflow_started", platform=platform, generation_mode=mode)
        return await self._drive(state)

    async def resume(self, state: CreativeState, decision: HITLDecision) -> CreativeState:
        """Feed a human decision into a run paused in review.

        Raises:
            WorkflowStateError: the run is not in review, or the selected option does not exist
        """
        event = Event.APPROVED if decision.approved else Event.REJECTED
        if not self.machine.allows(state["phase"], event):
            raise WorkflowStateError(
                f"Cannot resume a creative run in phase '{Phase(state['phase']).value}'; expected 'review'"
            )

        if not decision.approved:
            if decision.feedback:
                state["feedback"].append(decision.feedback)
            self._advance(state, event)
            logger.info("creative_decision_rejected", feedback=bool(decision.feedback))
            return state

        state["selected_option"] = self._select(state["design_options"], decision.selected_option_id)
        self._advance(state, event)
        logger.info("creative_decision_approved", option_id=state["selected_option"].id)
        return await self._drive(state)

    # ── Control Loop ──

    async def _drive(self, state: CreativeState) -> CreativeState:
        while True:
            phase = state["phase"]
            event = await self._handlers[phase](state)
            self._advance(state, event)
            if self.machine.is_terminal(phase) or self.machine.halts_on(event):
                break

        logger.info(
            "creative_workflow_paused" if state["phase"] == Phase.REVIEW else "creative_workflow_completed",
            phase=Phase(state["phase"]).value,
            options=len(state["design_options"]),
            requires_hitl=state["requires_hitl"],
        )
        return state

    def _advance(self, state: CreativeState, event: CreativeEvent) -> None:
        source = state["phase"]
        target = self.machine.transition(source, event)
        state["transitions"].append(f"{Phase(source).value} --{event.value}--> {target.value}")
        state["phase"] = target

    # ── Phases ──

    async def _analyze(self, state: CreativeState) -> CreativeEvent:
        profile = self.rules.get_profile(state["platform"])
        state["profile"] = profile
        state["brand_context"] = derive_brand_context(state["design"], profile)

        logger.info(
            "creative_analyzed",
            platform=profile.platform.value,
            brand_colors=len(state["brand_context"].colors),
            consistency=state["brand_context"].consistency_score,
        )
        return Event.ANALYZED

    async def _plan(self, state: CreativeState) -> CreativeEvent:
        mode = self._mode(state["generation_mode"])
        try:
            options = await self.planner.plan(
                state["request"],
                state["design"],
                state["profile"],
                state["brand_context"],
                mode.options_count,
            )
        except ExternalServiceError as e:
            logger.warning("creative_plan_failed", error=str(e))
            state["errors"].append(f"plan: {e}")
            options = []

        state["design_options"] = options[:mode.options_count]
        return Event.PLANNED

    async def _generate(self, state: CreativeState) -> CreativeEvent:
        pending = [
            el for option in state["design_options"] for el in option.elements
            if el.type == "image" and el.metadata.needs_generation
        ]
        for el in pending:
            try:
                src = await self.asset_generator.materialize(el, state["platform"])
            except ExternalServiceError as e:
                logger.warning("asset_generation_failed", element=el.id, error=str(e))
                state["errors"].append(f"generate {el.id}: {e}")
                continue
            if src:
                el.src = src
                el.metadata.needs_generation = False

        if pending:
            logger.info("assets_requested", count=len(pending))
        return Event.GENERATED

    async def _review(self, state: CreativeState) -> CreativeEvent:
        options = state["design_options"]
        if not options:
            state["requires_hitl"] = False
            state["hitl_reasons"] = [NO_OPTIONS_REASON]
            return Event.NO_OPTIONS

        reasons = self.review_triggers(state["design"], options, state["profile"])
        state["hitl_reasons"] = reasons
        mode = self._mode(state["generation_mode"])

        # Critical and product elements always need a human, even in skip-review modes
        if reasons and (not mode.skip_review or _critical_touches(state["design"], options[0])):
            state["requires_hitl"] = True
            return Event.AWAIT_DECISION

        state["requires_hitl"] = False
        state["selected_option"] = options[0]
        return Event.AUTO_APPROVED

    async def _apply(self, state: CreativeState) -> CreativeEvent:
        option = state["selected_option"]
        if option is None:
            raise WorkflowStateError("Cannot apply: no design option is selected")

        design = state["design"]
        preserve = self.config.contextual_awareness.preserve_existing_elements
        updated = design.model_copy(deep=True)
        updated.elements = merge_elements(design.elements, option.elements, preserve)
        updated.metadata.version = design.metadata.version + 1
        updated.metadata.last_modified = datetime.now(timezone.utc).isoformat()

        state["design"] = updated
        state["requires_hitl"] = False
        state["completed_at"] = updated.metadata.last_modified

        logger.info(
            "design_option_applied",
            option_id=option.id,
            preserve_existing=preserve,
            elements=len(updated.elements),
            version=updated.metadata.version,
        )
        return Event.APPLIED

    # ── Review Triggers ──

    def review_triggers(
        self,
        design: Design,
        options: list[DesignOption],
        profile: Optional[PlatformProfile],
    ) -> list[str]:
        """Reasons a human must look at the options. Empty means safe to auto-apply."""
        triggers = self.config.hitl_triggers
        reasons = []
        first = options[0]

        if triggers.multiple_options and len(options) > 1:
            reasons.append(f"Multiple design options generated ({len(options)})")

        low = [o.id for o in options if o.confidence < triggers.low_confidence]
        if low:
            reasons.append(f"Low confidence options: {', '.join(low)}")

        # Only the first option is inspected for size of change
        if len(first.modifications) > triggers.major_changes_threshold:
            reasons.append(f"Major changes proposed ({len(first.modifications)} modifications)")

        touched = _critical_touches(design, first)
        if touched:
            reasons.append(f"Modifies critical or product elements: {', '.join(touched)}")

        if profile is not None:
            minimum = profile.brand.min_consistency_score
            off_brand = [
                o.id for o in options
                if (o.brand_consistency_score if o.brand_consistency_score is not None else 1.0) < minimum
            ]
            if off_brand:
                reasons.append(f"Brand consistency below {minimum}: {', '.join(off_brand)}")

        return reasons

    # ── Helpers ──

    def _mode(self, name: str) -> GenerationModeConfig:
        mode = self.config.generation_modes.get(name)
        if mode is None:
            valid = ", ".join(self.config.generation_modes)
            raise ValidationInputError(f"Unknown generation mode '{name}'. Use one of: {valid}")
        return mode

    @staticmethod
    def _select(options: list[DesignOption], option_id: Optional[str]) -> DesignOption:
        if not options:
            raise WorkflowStateError("Cannot approve: there are no design options to select from")
        if option_id is None:
            return options[0]
        for option in options:
            if option.id == option_id:
                return option
        raise WorkflowStateError(f"Design option '{option_id}' not found")
