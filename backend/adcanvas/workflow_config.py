"""Workflow configuration — thresholds and modes tuned outside the code.

Loaded once from ``workflow_config.json`` (path overridable through
``WORKFLOW_CONFIG_PATH``) and validated into ``WorkflowConfig``.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

from adcanvas.config import get_settings
from adcanvas.errors import ConfigError

logger = structlog.get_logger()

GenerationMode = Literal["quick", "standard", "comprehensive"]


class RouterConfig(BaseModel):
    # TODO: calibrate both fusion thresholds against logged production traffic
    require_clarification_threshold: float = 0.7
    heuristic_confidence_floor: float = 0.6
    fallback_confidence: float = 0.5
    default_platform: str = "amazon"
    default_category: str = "creative"


class GenerationModeConfig(BaseModel):
    options_count: int = Field(ge=1)
    skip_review: bool = False


class HitlTriggers(BaseModel):
    multiple_options: bool = True
    low_confidence: float = 0.7
    major_changes_threshold: int = 3


class ContextualAwareness(BaseModel):
    preserve_existing_elements: bool = True


class CreativeConfig(BaseModel):
    generation_modes: dict[GenerationMode, GenerationModeConfig]
    hitl_triggers: HitlTriggers = Field(default_factory=HitlTriggers)
    contextual_awareness: ContextualAwareness = Field(default_factory=ContextualAwareness)


class SeverityLevel(BaseModel):
    score: float = Field(ge=0)


class AutoFixConfig(BaseModel):
    enabled: bool = True
    confidence_threshold: float = 0.8
    fix_confidence: float = 0.85
    fixable_rules: list[str] = Field(default_factory=list)


class ValidationConfig(BaseModel):
    default_tier: str = "rule_engine"
    severity_levels: dict[Literal["critical", "high", "medium", "low"], SeverityLevel]
    auto_fix: AutoFixConfig = Field(default_factory=AutoFixConfig)

    def severity_score(self, severity: str) -> float:
        level = self.severity_levels.get(severity)
        return level.score if level else 0.0


class WorkflowConfig(BaseModel):
    router: RouterConfig = Field(default_factory=RouterConfig)
    creative: CreativeConfig
    validation: ValidationConfig


def load_workflow_config_file(path: Path) -> WorkflowConfig:
    """Read and validate a workflow configuration file.

    Raises:
        ConfigError: the file is missing, not JSON, or does not match the schema
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        config = WorkflowConfig.model_validate(data)
    except FileNotFoundError as e:
        raise ConfigError(f"Workflow configuration not found at {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Workflow configuration is not valid JSON: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Workflow configuration is malformed: {e.error_count()} schema error(s)") from e

    logger.info("workflow_config_loaded", source=str(path))
    return config


@lru_cache
def get_workflow_config(path: Optional[Path] = None) -> WorkflowConfig:
    return load_workflow_config_file(path or get_settings().WORKFLOW_CONFIG_PATH)


def reload_workflow_config() -> None:
    """Forget the cached configuration so the next access re-reads the file."""
    get_workflow_config.cache_clear()
