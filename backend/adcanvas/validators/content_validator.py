"""Content Validator — prohibited claims and accessibility requirements."""

import re

from adcanvas.models.canvas import Design
from adcanvas.rules.models import PlatformProfile
from adcanvas.validators.base import BaseValidator
from adcanvas.validators.models import IssueCategory, Severity, ValidationIssue


class ContentValidator(BaseValidator):
    """Checks text copy against the platform's prohibited terms and images for alt text."""

    @property
    def name(self) -> str:
        return "ContentValidator"

    def validate(self, design: Design, profile: PlatformProfile) -> list[ValidationIssue]:
        errors = []
        compliance = profile.compliance

        for el in design.text_elements():
            text = (el.content or "").lower()
            for term in compliance.prohibited_content:
                if term and self._contains_term(text, term.lower()):
                    errors.append(self._issue(
                        rule="prohibited_content",
                        severity=Severity.HIGH,
                        message=f'Text contains prohibited claim "{term}"',
                        category=IssueCategory.COMPLIANCE,
                        element=el.id,
                    ))

        if compliance.accessibility.alt_text_required:
            for el in design.elements:
                if el.type == "image" and not (el.alt_text or "").strip():
                    errors.append(self._issue(
                        rule="alt_text",
                        severity=Severity.LOW,
                        message="Image is missing alt text",
                        category=IssueCategory.COMPLIANCE,
                        element=el.id,
                    ))

        return errors

    @staticmethod
    def _contains_term(text: str, term: str) -> bool:
        # Word boundaries only where the term starts/ends with a word character ("#1")
        prefix = r"\b" if term[:1].isalnum() else ""
        suffix = r"\b" if term[-1:].isalnum() else ""
        return re.search(f"{prefix}{re.escape(term)}{suffix}", text) is not None
