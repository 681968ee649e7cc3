"""Base validator — abstract class implementing the Strategy Pattern.

Each validator is a standalone, independently testable unit.
New validators are added without modifying the engine.
"""

from abc import ABC, abstractmethod
from typing import Optional

from adcanvas.models.canvas import Design
from adcanvas.rules.models import PlatformProfile
from adcanvas.validators.models import IssueCategory, Severity, ValidationIssue


class BaseValidator(ABC):
    """Abstract base for all deterministic design validators.

    Contract:
        - validate() is deterministic: same input → same output
        - validate() never mutates the design
        - validate() returns a list of ValidationIssue (empty = no issues)
        - No model calls, no network calls, no randomness

    Severity scores are left at zero here; the engine stamps them from the
    configured severity table.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    @abstractmethod
    def validate(self, design: Design, profile: PlatformProfile) -> list[ValidationIssue]:
        ...

    def _issue(
        self,
        rule: str,
        severity: Severity,
        message: str,
        category: IssueCategory,
        element: Optional[str] = None,
        auto_fix_available: bool = False,
    ) -> ValidationIssue:
        """Convenience method to create a ValidationIssue."""
        return ValidationIssue(
            rule=rule,
            severity=severity,
            message=message,
            category=category,
            element=element,
            auto_fix_available=auto_fix_available,
        )

    @staticmethod
    def _same_color(a: Optional[str], b: Optional[str]) -> bool:
        if a is None or b is None:
            return False
        return a.strip().lower() == b.strip().lower()
