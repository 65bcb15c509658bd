from __future__ import annotations

from dataclasses import dataclass

from .models import Color


@dataclass(frozen=True)
class Theme:
    name: str
    primary: Color


DEFAULT_THEME = Theme(name="quest", primary=Color(70.0, 130.0, 180.0, 255.0))

PALETTE: tuple[tuple[str, Color], ...] = (
    ("Maroon", Color(139.0, 0.0, 0.0, 255.0)),
    ("Steel Blue", Color(70.0, 130.0, 180.0, 255.0)),
    ("Rosy Brown", Color(188.0, 143.0, 143.0, 255.0)),
    ("Orchid", Color(218.0, 112.0, 214.0, 255.0)),
    ("Medium Aquamarine", Color(102.0, 205.0, 170.0, 255.0)),
    ("Indian Red", Color(205.0, 92.0, 92.0, 255.0)),
    ("Dark Orange", Color(255.0, 140.0, 0.0, 255.0)),
    ("Medium Slate Blue", Color(123.0, 104.0, 238.0, 255.0)),
    ("Sea Green", Color(46.0, 139.0, 87.0, 255.0)),
    ("Deep Pink", Color(255.0, 20.0, 147.0, 255.0)),
    ("Sienna", Color(160.0, 82.0, 45.0, 255.0)),
    ("Deep Sky Blue", Color(0.0, 191.0, 255.0, 255.0)),
    ("Teal", Color(0.0, 128.0, 128.0, 255.0)),
    ("Coral", Color(255.0, 127.0, 80.0, 255.0)),
    ("Slate Gray", Color(112.0, 128.0, 144.0, 255.0)),
    ("Forest Green", Color(34.0, 139.0, 34.0, 255.0)),
    ("Purple", Color(128.0, 0.0, 128.0, 255.0)),
    ("Goldenrod", Color(218.0, 165.0, 32.0, 255.0)),
    ("Crimson", Color(220.0, 20.0, 60.0, 255.0)),
    ("Cadet Blue", Color(95.0, 158.0, 160.0, 255.0)),
)


def palette_color(index: int) -> Color | None:
    if not 0 <= index < len(PALETTE):
        return None
    return PALETTE[index][1].copy()


def parse_rgba(raw: str) -> Color:
    """Parse "R,G,B" or "R,G,B,A" (0-255 each); raises ValueError."""
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if len(parts) not in (3, 4):
        raise ValueError(f"expected R,G,B or R,G,B,A, got {raw!r}")
    values = [float(p) for p in parts]
    if any(v < 0 or v > 255 for v in values):
        raise ValueError(f"channels must be within 0-255, got {raw!r}")
    return Color(*values)
