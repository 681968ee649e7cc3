"""Dimension Validator — the instant-tier structural check."""

from adcanvas.models.canvas import Design
from adcanvas.rules.models import PlatformProfile
from adcanvas.validators.base import BaseValidator
from adcanvas.validators.models import IssueCategory, Severity, ValidationIssue


class DimensionValidator(BaseValidator):
    """Compares the canvas size with the platform's required size. O(1)."""

    @property
    def name(self) -> str:
        return "DimensionValidator"

    def validate(self, design: Design, profile: PlatformProfile) -> list[ValidationIssue]:
        required = profile.dimensions
        if design.width == required.width and design.height == required.height:
            return []

        return [self._issue(
            rule="dimensions",
            severity=Severity.CRITICAL,
            message=(
                f"Dimensions must be {required.width}x{required.height} "
                f"(current: {design.width}x{design.height})"
            ),
            category=IssueCategory.VISUAL,
        )]
