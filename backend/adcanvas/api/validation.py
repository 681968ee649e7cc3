"""Validation API — tiered compliance checks and deterministic auto-fixes."""

from fastapi import APIRouter, Depends

from adcanvas.api.deps import get_registry
from adcanvas.models.requests import AutoFixRequest, ValidateRequest
from adcanvas.models.responses import AutoFixResponse
from adcanvas.registry import Registry
from adcanvas.validators.models import ValidationResult

router = APIRouter()


@router.post("/validate", response_model=ValidationResult)
async def validate_design(body: ValidateRequest, registry: Registry = Depends(get_registry)):
    """Validate a canvas up to the requested tier (default ``rule_engine``)."""
    return await registry.validation_pipeline.validate(body.canvas_state, body.platform, body.tier)


@router.post("/validate/auto-fix", response_model=AutoFixResponse)
async def auto_fix_design(body: AutoFixRequest, registry: Registry = Depends(get_registry)):
    """Apply fixes for the given issues. Non-fixable issues are ignored."""
    fixed = registry.auto_fix_engine.apply_fixes(body.canvas_state, body.violations, body.platform)
    return AutoFixResponse(canvas_state=fixed)
