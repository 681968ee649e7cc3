"""Product Validator — every creative must feature a flagged product element."""

from adcanvas.models.canvas import Design
from adcanvas.rules.models import PlatformProfile
from adcanvas.validators.base import BaseValidator
from adcanvas.validators.models import IssueCategory, Severity, ValidationIssue


class ProductValidator(BaseValidator):

    @property
    def name(self) -> str:
        return "ProductValidator"

    def validate(self, design: Design, profile: PlatformProfile) -> list[ValidationIssue]:
        if design.product_elements():
            return []

        return [self._issue(
            rule="product_missing",
            severity=Severity.CRITICAL,
            message="No product image found in design",
            category=IssueCategory.PRODUCT,
        )]
