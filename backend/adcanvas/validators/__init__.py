"""Design Validator — tiered compliance checks for canvas designs.

Usage:
    from adcanvas.validators import ValidationPipeline

    result = await pipeline.validate(design, "amazon", tier="rule_engine")
    if not result.is_compliant:
        fixed = result.auto_fixes[0].apply()
"""

from adcanvas.validators.autofix import AutoFixEngine
from adcanvas.validators.engine import ValidationPipeline
from adcanvas.validators.models import (
    AutoFix,
    Severity,
    ValidationIssue,
    ValidationResult,
    ValidationTier,
)

__all__ = [
    "AutoFixEngine",
    "ValidationPipeline",
    "AutoFix",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "ValidationTier",
]
