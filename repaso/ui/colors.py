"""Theme colors and color utilities for the UI."""


class GameColors:
    """Bright sky-and-grass palette used on every screen."""

    BG_TOP = "#bae6fd"
    BG_MIDDLE = "#e0f2fe"
    BG_BOTTOM = "#bbf7d0"

    PRIMARY = "#2563eb"
    PRIMARY_LIGHT = "#60a5fa"
    PRIMARY_DARK = "#1e40af"

    GOLD = "#facc15"
    AMBER = "#f59e0b"
    GREEN = "#22c55e"
    RED = "#ef4444"
    LOCKED = "#9ca3af"

    CARD_BG = "rgba(255, 255, 255, 0.9)"
    CARD_BORDER = "rgba(255, 255, 255, 0.6)"

    TEXT_PRIMARY = "#1f2937"
    TEXT_SECONDARY = "#4b5563"
    TEXT_MUTED = "#9ca3af"

    # Map nodes
    NODE_MATH = "#facc15"
    NODE_HISTORY = "#f59e0b"
    NODE_COMPLETED = "#22c55e"


def subject_color(subject: str) -> str:
    return GameColors.NODE_HISTORY if subject == "history" else GameColors.NODE_MATH


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
    except ValueError:
        return a


def timer_color(seconds_left: int) -> str:
    """Countdown color: fades from muted text to red over the last 3 seconds."""
    if seconds_left > 3:
        return GameColors.TEXT_SECONDARY
    return blend_hex(GameColors.RED, GameColors.TEXT_SECONDARY, max(0, seconds_left) / 4)
