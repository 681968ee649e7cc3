"""Canvas data model — the design being edited and validated.

The wire format is camelCase (it is produced by the canvas editor); Python code
uses snake_case attributes. Both forms are accepted on input.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising to camelCase and accepting either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


ElementType = Literal["text", "image", "shape", "background"]


class ElementFlags(CamelModel):
    """Per-element flags set by the editor."""

    is_critical: bool = False
    is_product: bool = False
    is_brand_element: bool = False
    layer: Optional[int] = None
    needs_generation: bool = False


class Element(CamelModel):
    """A single positioned element on the canvas."""

    id: str
    type: ElementType
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0
    style: dict[str, Any] = Field(default_factory=dict)
    content: Optional[str] = None
    src: Optional[str] = None
    alt_text: Optional[str] = None
    metadata: ElementFlags = Field(default_factory=ElementFlags)

    @property
    def font_size(self) -> float:
        value = self.style.get("fontSize") or 0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    @property
    def font_family(self) -> Optional[str]:
        return self.style.get("fontFamily")

    @property
    def is_flagged(self) -> bool:
        """True for elements a human must approve changes to."""
        return self.metadata.is_critical or self.metadata.is_product


class Background(CamelModel):
    color: Optional[str] = None
    image: Optional[str] = None


class DesignMetadata(CamelModel):
    version: int = 0
    last_modified: Optional[str] = None
    brand: Optional[str] = None
    platform: Optional[str] = None


class Design(CamelModel):
    """The full canvas state."""

    width: int
    height: int
    elements: list[Element] = Field(default_factory=list)
    background: Optional[Background] = None
    metadata: DesignMetadata = Field(default_factory=DesignMetadata)

    @property
    def background_color(self) -> Optional[str]:
        return self.background.color if self.background else None

    def text_elements(self) -> list[Element]:
        return [el for el in self.elements if el.type == "text"]

    def product_elements(self) -> list[Element]:
        return [el for el in self.elements if el.metadata.is_product]

    def summary(self) -> dict:
        """Compact description used in prompts and routing."""
        return {
            "dimensions": f"{self.width}x{self.height}",
            "element_count": len(self.elements),
            "element_types": sorted({el.type for el in self.elements}),
            "has_product": bool(self.product_elements()),
            "background": self.background_color,
        }
