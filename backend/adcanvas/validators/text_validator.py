"""Text Validator — font size, font family, length, line count and contrast of text elements."""

from adcanvas.models.canvas import Design, Element
from adcanvas.rules.models import PlatformProfile
from adcanvas.validators.base import BaseValidator
from adcanvas.validators.colors import contrast_ratio
from adcanvas.validators.models import IssueCategory, Severity, ValidationIssue


class TextValidator(BaseValidator):
    """Per-element typography checks plus the text-element count limit."""

    @property
    def name(self) -> str:
        return "TextValidator"

    def validate(self, design: Design, profile: PlatformProfile) -> list[ValidationIssue]:
        errors = []
        text_elements = design.text_elements()

        for el in text_elements:
            errors.extend(self._check_font_size(el, profile))
            errors.extend(self._check_font_family(el, profile))
            errors.extend(self._check_length(el, profile))
            errors.extend(self._check_contrast(el, design, profile))

        max_lines = profile.text.max_lines
        if max_lines and len(text_elements) > max_lines:
            errors.append(self._issue(
                rule="text_lines",
                severity=Severity.HIGH,
                message=f"Maximum {max_lines} text elements allowed (current: {len(text_elements)})",
                category=IssueCategory.TEXT,
            ))

        return errors

    def _check_font_size(self, el: Element, profile: PlatformProfile) -> list[ValidationIssue]:
        errors = []
        size = el.font_size
        min_size, max_size = profile.text.min_font_size, profile.text.max_font_size

        if min_size and size < min_size:
            errors.append(self._issue(
                rule="font_size",
                severity=Severity.HIGH,
                message=f"Font size must be at least {min_size:g}px (current: {size:g}px)",
                category=IssueCategory.TEXT,
                element=el.id,
                auto_fix_available=True,
            ))

        if max_size and size > max_size:
            errors.append(self._issue(
                rule="font_size_max",
                severity=Severity.MEDIUM,
                message=f"Font size should not exceed {max_size:g}px (current: {size:g}px)",
                category=IssueCategory.TEXT,
                element=el.id,
                auto_fix_available=True,
            ))

        return errors

    def _check_font_family(self, el: Element, profile: PlatformProfile) -> list[ValidationIssue]:
        family = el.font_family
        allowed = profile.text.allowed_fonts
        if not family or not allowed or family in allowed:
            return []

        return [self._issue(
            rule="font_family",
            severity=Severity.MEDIUM,
            message=f'Font "{family}" not allowed. Use: {", ".join(allowed)}',
            category=IssueCategory.TEXT,
            element=el.id,
            auto_fix_available=True,
        )]

    def _check_length(self, el: Element, profile: PlatformProfile) -> list[ValidationIssue]:
        limit = profile.text.max_characters
        length = len(el.content or "")
        if not limit or length <= limit:
            return []

        return [self._issue(
            rule="text_length",
            severity=Severity.MEDIUM,
            message=f"Text too long ({length}/{limit} characters)",
            category=IssueCategory.TEXT,
            element=el.id,
        )]

    def _check_contrast(self, el: Element, design: Design, profile: PlatformProfile) -> list[ValidationIssue]:
        minimum = profile.text.min_contrast_ratio
        if not minimum:
            return []

        # Text boxes with their own fill are measured against that fill
        backdrop = el.style.get("backgroundColor") or design.background_color
        ratio = contrast_ratio(el.style.get("color"), backdrop)
        if ratio is None or ratio >= minimum:
            return []

        return [self._issue(
            rule="contrast",
            severity=Severity.MEDIUM,
            message=f"Text contrast {ratio:.2f}:1 is below the required {minimum:g}:1",
            category=IssueCategory.TEXT,
            element=el.id,
        )]
