"""Platform profile — the immutable constraint set for one retail platform."""

from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from adcanvas.models.canvas import CamelModel


class Platform(str, Enum):
    """Supported retail platforms."""

    AMAZON = "amazon"
    WALMART = "walmart"
    FLIPKART = "flipkart"


SUPPORTED_PLATFORMS = [p.value for p in Platform]


class FrozenModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Dimensions(FrozenModel):
    width: int
    height: int
    aspect_ratio: Optional[str] = None


class DpiConstraints(FrozenModel):
    min: int
    recommended: int


class FileConstraints(FrozenModel):
    max_mb: float
    min_mb: Optional[float] = None
    formats: tuple[str, ...] = ()
    dpi: Optional[DpiConstraints] = None


class TextConstraints(FrozenModel):
    max_lines: Optional[int] = None
    min_font_size: Optional[float] = None
    max_font_size: Optional[float] = None
    allowed_fonts: tuple[str, ...] = ()
    max_characters: Optional[int] = None
    line_height_ratio: Optional[float] = None
    min_contrast_ratio: Optional[float] = None
    avoid_overlapping_product: bool = False


class ProductConstraints(FrozenModel):
    min_coverage: Optional[float] = None
    max_coverage: Optional[float] = None
    min_visibility: Optional[float] = None
    center_alignment_tolerance: Optional[float] = None
    background_removal_required: bool = False
    show_multiple_angles: bool = False
    min_resolution: Optional[int] = None


class BrandConstraints(FrozenModel):
    colors: tuple[str, ...] = ()
    logo_required: bool = False
    logo_max_size_percent: Optional[float] = None
    logo_positions: tuple[str, ...] = ()
    min_consistency_score: float = 0.7


class AccessibilityConstraints(FrozenModel):
    alt_text_required: bool = False
    color_blind_safe: bool = False


class ComplianceConstraints(FrozenModel):
    prohibited_content: tuple[str, ...] = ()
    required_disclaimers: tuple[str, ...] = ()
    trademark_clearance: bool = False
    accessibility: AccessibilityConstraints = Field(default_factory=AccessibilityConstraints)


class CtaSize(FrozenModel):
    width: int
    height: int


class PerformanceHints(FrozenModel):
    click_through_zones: tuple[str, ...] = ()
    recommended_cta_position: Optional[str] = None
    cta_min_size: Optional[CtaSize] = None


class SeasonalRules(FrozenModel):
    holiday_themes_allowed: bool = False
    seasonal_color_variations: bool = False


class PlatformProfile(FrozenModel):
    """Everything the validators and the creative planner know about a platform."""

    platform: Platform
    display_name: str
    required_bg_color: Optional[str] = None
    allowed_bg_colors: tuple[str, ...] = ()
    dimensions: Dimensions
    file: FileConstraints
    text: TextConstraints = Field(default_factory=TextConstraints)
    product: ProductConstraints = Field(default_factory=ProductConstraints)
    brand: BrandConstraints = Field(default_factory=BrandConstraints)
    compliance: ComplianceConstraints = Field(default_factory=ComplianceConstraints)
    performance: PerformanceHints = Field(default_factory=PerformanceHints)
    seasonal_rules: Optional[SeasonalRules] = None

    def rules_summary(self) -> list[str]:
        """Short human-readable rule list for prompts."""
        text = self.text
        product = self.product
        return [
            f"Background: {self.required_bg_color or 'flexible'}",
            f"Dimensions: {self.dimensions.width}x{self.dimensions.height}",
            f"File size: max {self.file.max_mb}MB",
            f"Product coverage: {product.min_coverage or 60}-{product.max_coverage or 80}%",
            f"Text: max {text.max_lines} lines, min {text.min_font_size}px font",
            f"Fonts: {', '.join(text.allowed_fonts) or 'any'}",
            f"Brand consistency: min {self.brand.min_consistency_score}",
        ]
