"""Theme colors and color utilities for the UI."""

from puzzlepath.core.levels import Family


class HomeColors:
    """Light theme palette shared by all games."""

    BG_TOP = "#ecfdf5"
    BG_BOTTOM = "#f8fafc"

    PRIMARY = "#7c3aed"
    PRIMARY_LIGHT = "#a78bfa"
    PRIMARY_DARK = "#5b21b6"

    STAR = "#f59e0b"
    STAR_EMPTY = "#e2e8f0"
    HEART = "#f43f5e"
    SUCCESS = "#10b981"
    ERROR = "#ef4444"

    CELL_IDLE = "#eef2ff"
    CELL_BORDER = "#334155"

    CARD_BG = "rgba(255, 255, 255, 0.85)"
    CARD_BORDER = "rgba(255, 255, 255, 0.6)"

    TEXT_PRIMARY = "#1e293b"
    TEXT_SECONDARY = "#475569"
    TEXT_MUTED = "#94a3b8"


# Accent per game: beam blue, coloring blue, garden green, smash purple.
FAMILY_COLORS = {
    Family.BALANCE: "#0ea5e9",
    Family.COLORING: "#3b82f6",
    Family.GARDEN: "#22c55e",
    Family.SMASH: "#7c3aed",
}

FAMILY_TITLES = {
    Family.BALANCE: "Balance Beam Lab",
    Family.COLORING: "Color the Fraction",
    Family.GARDEN: "Fraction Garden",
    Family.SMASH: "Fraction Smash",
}


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    try:
        a = a.strip()
        b = b.strip()
        if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
            return a
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
        r = int(ar + (br - ar) * t)
        g = int(ag + (bg - ag) * t)
        bl = int(ab + (bb - ab) * t)
        return f"#{r:02X}{g:02X}{bl:02X}"
    except (TypeError, ValueError):
        return a


def star_text(stars: int, out_of: int = 3) -> str:
    """Filled and empty star glyphs, e.g. ``★★☆`` for 2 of 3."""
    stars = max(0, min(int(stars), out_of))
    return "★" * stars + "☆" * (out_of - stars)
