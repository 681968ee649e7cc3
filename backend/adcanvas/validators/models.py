"""Validation models — severities, tiers, issues, fixes, scoring and the result record.

Scoring is deterministic and depends only on issue severities: same issues in,
same score out.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable, Optional

from pydantic import Field, PrivateAttr

from adcanvas.models.canvas import CamelModel, Design


class Severity(str, Enum):
    """Validation finding severity levels."""

    CRITICAL = "critical"  # Blocks publishing
    HIGH = "high"          # Platform will very likely reject the creative
    MEDIUM = "medium"      # Should be addressed but not blocking
    LOW = "low"            # Suggestion for improvement


# critical/high land in violations, medium/low in warnings
VIOLATION_SEVERITIES = {Severity.CRITICAL, Severity.HIGH}


class IssueCategory(str, Enum):
    VISUAL = "visual"
    TEXT = "text"
    PRODUCT = "product"
    BRAND = "brand"
    COMPLIANCE = "compliance"
    PERFORMANCE = "performance"


class ValidationTier(str, Enum):
    """Pipeline tiers, cheapest first. ``COMPREHENSIVE`` is a request-only value."""

    INSTANT = "instant"
    RULE_ENGINE = "rule_engine"
    MODEL = "llm"
    COMPREHENSIVE = "comprehensive"


class ValidationIssue(CamelModel):
    """A single validation finding."""

    rule: str
    severity: Severity
    element: Optional[str] = None
    message: str
    auto_fix_available: bool = False
    severity_score: float = 0.0
    category: IssueCategory = IssueCategory.COMPLIANCE

    @property
    def is_violation(self) -> bool:
        return self.severity in VIOLATION_SEVERITIES


class AutoFix(CamelModel):
    """A deterministic correction offered for one issue."""

    rule: str
    element: Optional[str] = None
    description: str
    confidence: float
    can_apply_automatically: bool = True

    _apply: Optional[Callable[[], Design]] = PrivateAttr(default=None)

    def bind(self, apply: Callable[[], Design]) -> "AutoFix":
        self._apply = apply
        return self

    def apply(self) -> Design:
        """Return the design with this fix applied. The input design is untouched."""
        if self._apply is None:
            raise RuntimeError(f"Auto-fix '{self.rule}' has no bound design")
        return self._apply()


def split_issues(issues: Iterable[ValidationIssue]) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
    """Partition issues into (violations, warnings) by severity."""
    violations, warnings = [], []
    for issue in issues:
        (violations if issue.is_violation else warnings).append(issue)
    return violations, warnings


def compliance_score(violations: Iterable[ValidationIssue], warnings: Iterable[ValidationIssue]) -> float:
    """``max(0, 100 - Σ violation scores - 0.5 · Σ warning scores)``, capped at 100."""
    deductions = sum(v.severity_score for v in violations)
    deductions += 0.5 * sum(w.severity_score for w in warnings)
    return round(min(100.0, max(0.0, 100.0 - deductions)), 2)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ValidationResult(CamelModel):
    """Output of the validation pipeline."""

    violations: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    auto_fixes: list[AutoFix] = Field(default_factory=list)
    is_compliant: bool
    tier: ValidationTier
    overall_score: float = Field(ge=0, le=100)
    timestamp: str = Field(default_factory=_now)
    suggestions: list[str] = Field(default_factory=list)

    @property
    def issues(self) -> list[ValidationIssue]:
        return [*self.violations, *self.warnings]

    @property
    def summary(self) -> dict[str, int]:
        counts = {s.value: 0 for s in Severity}
        for issue in self.issues:
            counts[issue.severity.value] += 1
        return counts

    @classmethod
    def build(
        cls,
        issues: list[ValidationIssue],
        tier: ValidationTier,
        auto_fixes: Optional[list[AutoFix]] = None,
        suggestions: Optional[list[str]] = None,
    ) -> "ValidationResult":
        """Build a complete result from the issues gathered so far."""
        violations, warnings = split_issues(issues)
        return cls(
            violations=violations,
            warnings=warnings,
            auto_fixes=auto_fixes or [],
            is_compliant=not any(v.severity == Severity.CRITICAL for v in violations),
            tier=tier,
            overall_score=compliance_score(violations, warnings),
            suggestions=suggestions or [],
        )
