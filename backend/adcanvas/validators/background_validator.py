"""Background Validator — canvas background color against the platform's allowed set."""

from adcanvas.models.canvas import Design
from adcanvas.rules.models import PlatformProfile
from adcanvas.validators.base import BaseValidator
from adcanvas.validators.models import IssueCategory, Severity, ValidationIssue


class BackgroundValidator(BaseValidator):

    @property
    def name(self) -> str:
        return "BackgroundValidator"

    def validate(self, design: Design, profile: PlatformProfile) -> list[ValidationIssue]:
        required = profile.required_bg_color
        if not required:
            return []

        current = design.background_color
        if self._same_color(current, required):
            return []
        if any(self._same_color(current, allowed) for allowed in profile.allowed_bg_colors):
            return []

        allowed = list(profile.allowed_bg_colors) or [required]
        return [self._issue(
            rule="bg_color",
            severity=Severity.CRITICAL,
            message=f"Background color must be one of: {', '.join(allowed)} (current: {current or 'none'})",
            category=IssueCategory.VISUAL,
            auto_fix_available=True,
        )]
