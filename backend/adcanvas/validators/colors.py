"""Color helpers — parsing and WCAG 2.1 contrast ratio."""

import re
from typing import Optional

RGB = tuple[int, int, int]

NAMED_COLORS: dict[str, RGB] = {
    "white": (255, 255, 255),
    "black": (0, 0, 0),
    "red": (255, 0, 0),
    "blue": (0, 0, 255),
    "green": (0, 128, 0),
    "yellow": (255, 255, 0),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
}

_RGB_PATTERN = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")


def parse_color(value: Optional[str]) -> Optional[RGB]:
    """Parse ``#rgb``, ``#rrggbb``, ``rgb()/rgba()`` or a basic color name."""
    if not value:
        return None
    text = value.strip().lower()

    if text.startswith("#"):
        hex_part = text[1:]
        if len(hex_part) == 3:
            hex_part = "".join(ch * 2 for ch in hex_part)
        if len(hex_part) == 6:
            try:
                return tuple(int(hex_part[i:i + 2], 16) for i in (0, 2, 4))
            except ValueError:
                return None
        return None

    match = _RGB_PATTERN.match(text)
    if match:
        return tuple(min(255, int(c)) for c in match.groups())

    return NAMED_COLORS.get(text)


def relative_luminance(rgb: RGB) -> float:
    def channel(c: int) -> float:
        s = c / 255
        return s / 12.92 if s <= 0.03928 else ((s + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(foreground: Optional[str], background: Optional[str]) -> Optional[float]:
    """WCAG contrast ratio between two colors, or None if either cannot be parsed."""
    fg, bg = parse_color(foreground), parse_color(background)
    if fg is None or bg is None:
        return None
    lighter, darker = sorted((relative_luminance(fg), relative_luminance(bg)), reverse=True)
    return (lighter + 0.05) / (darker + 0.05)
