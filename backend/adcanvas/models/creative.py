"""Creative workflow records — brand context, design options and human decisions."""

from typing import Literal, Optional

from pydantic import Field

from adcanvas.models.canvas import CamelModel, Element

Impact = Literal["minor", "moderate", "major"]


class BrandContext(CamelModel):
    """Brand signals derived from the current canvas."""

    name: Optional[str] = None
    colors: list[str] = Field(default_factory=list)
    fonts: list[str] = Field(default_factory=list)
    consistency_score: float = Field(default=0.5, ge=0, le=1)


class DesignOption(CamelModel):
    """One candidate edit proposed by the planner."""

    id: str
    elements: list[Element] = Field(default_factory=list)
    reasoning: str = ""
    confidence: float = Field(default=0.0, ge=0, le=1)
    modifications: list[str] = Field(default_factory=list)
    brand_consistency_score: Optional[float] = Field(default=None, ge=0, le=1)
    impact: Optional[Impact] = None
    preserved_element_ids: list[str] = Field(default_factory=list)

    def flagged_elements(self, existing_flagged: set[str]) -> list[str]:
        """Ids of critical/product elements this option touches."""
        return [
            el.id for el in self.elements
            if el.is_flagged or el.id in existing_flagged
        ]


class DesignOptions(CamelModel):
    """Output contract of the planning model call."""

    options: list[DesignOption] = Field(default_factory=list)


class HITLDecision(CamelModel):
    """A human reviewer's verdict on the options surfaced in review."""

    approved: bool
    selected_option_id: Optional[str] = None
    feedback: Optional[str] = None
