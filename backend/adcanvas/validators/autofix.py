"""Auto-fix engine — deterministic corrective transforms for a subset of issues.

Every transform sets an absolute target value taken from the platform profile,
so applying the same fixes twice yields the same design as applying them once.
"""

from typing import Callable, Optional, Union

import structlog

from adcanvas.models.canvas import Background, Design, Element
from adcanvas.rules.loader import PlatformRuleProvider
from adcanvas.rules.models import Platform, PlatformProfile
from adcanvas.validators.models import AutoFix, ValidationIssue
from adcanvas.workflow_config import AutoFixConfig

logger = structlog.get_logger()

FixTransform = Callable[[Design, ValidationIssue, PlatformProfile], None]


def _fix_background(design: Design, issue: ValidationIssue, profile: PlatformProfile) -> None:
    target = profile.required_bg_color or next(iter(profile.allowed_bg_colors), None)
    if target is None:
        return
    if design.background is None:
        design.background = Background(color=target)
    else:
        design.background.color = target


def _element_fix(mutate: Callable[[Element, PlatformProfile], None]) -> FixTransform:
    def transform(design: Design, issue: ValidationIssue, profile: PlatformProfile) -> None:
        if not issue.element:
            return
        for el in design.elements:
            if el.id == issue.element:
                mutate(el, profile)

    return transform


def _raise_font_size(el: Element, profile: PlatformProfile) -> None:
    minimum = profile.text.min_font_size
    if minimum and el.font_size < minimum:
        el.style["fontSize"] = minimum


def _lower_font_size(el: Element, profile: PlatformProfile) -> None:
    maximum = profile.text.max_font_size
    if maximum and el.font_size > maximum:
        el.style["fontSize"] = maximum


def _substitute_font(el: Element, profile: PlatformProfile) -> None:
    allowed = profile.text.allowed_fonts
    if allowed and el.font_family not in allowed:
        el.style["fontFamily"] = allowed[0]


FIX_TRANSFORMS: dict[str, FixTransform] = {
    "bg_color": _fix_background,
    "font_size": _element_fix(_raise_font_size),
    "font_size_max": _element_fix(_lower_font_size),
    "font_family": _element_fix(_substitute_font),
}


class AutoFixEngine:
    """Offers and applies deterministic fixes.

    Args:
        rules: Provider used to resolve the target values for each platform
        config: Auto-fix switch, allow-list and confidence
    """

    def __init__(self, rules: PlatformRuleProvider, config: AutoFixConfig):
        self.rules = rules
        self.config = config

    def is_fixable(self, issue: ValidationIssue) -> bool:
        return (
            issue.auto_fix_available
            and issue.rule in self.config.fixable_rules
            and issue.rule in FIX_TRANSFORMS
        )

    def generate_fixes(
        self,
        issues: list[ValidationIssue],
        design: Design,
        platform: Union[Platform, str],
    ) -> list[AutoFix]:
        """Offer one fix per fixable issue. Returns [] when auto-fix is disabled."""
        if not self.config.enabled:
            return []

        fixes = []
        for issue in issues:
            if not self.is_fixable(issue):
                continue
            fix = AutoFix(
                rule=issue.rule,
                element=issue.element,
                description=f"Auto-fix: {issue.message}",
                confidence=self.config.fix_confidence,
                can_apply_automatically=self.config.fix_confidence >= self.config.confidence_threshold,
            )
            fixes.append(fix.bind(self._applier(design, issue, platform)))
        return fixes

    def _applier(self, design: Design, issue: ValidationIssue, platform) -> Callable[[], Design]:
        return lambda: self.apply_fixes(design, [issue], platform)

    def apply_fixes(
        self,
        design: Design,
        issues: list[ValidationIssue],
        platform: Optional[Union[Platform, str]] = None,
    ) -> Design:
        """Return a new design with every fixable issue corrected.

        ``platform`` defaults to the design's own metadata, then to Amazon.
        Issues that are not auto-fixable or whose rule has no transform are skipped.
        """
        profile = self.rules.get_profile(platform or design.metadata.platform or Platform.AMAZON)
        fixed = design.model_copy(deep=True)

        applied = []
        for issue in issues:
            if not issue.auto_fix_available:
                continue
            transform = FIX_TRANSFORMS.get(issue.rule)
            if transform is None:
                continue
            transform(fixed, issue, profile)
            applied.append(issue.rule)

        logger.info(
            "auto_fixes_applied",
            platform=profile.platform.value,
            requested=len(issues),
            applied=applied,
        )
        return fixed
