"""Theme colors and color utilities for the UI."""

from puzzlerace.core.catalog import StepPhase
from puzzlerace.core.notifications import Severity


class GameColors:
    """Light corporate palette."""

    BG = "#F8F9FA"
    CARD_BG = "#FFFFFF"
    CARD_BORDER = "#DDDDDD"

    PRIMARY = "#004481"
    PRIMARY_LIGHT = "#1973B8"

    TEXT_PRIMARY = "#333333"
    TEXT_SECONDARY = "#666666"
    TEXT_MUTED = "#999999"

    SUCCESS = "#28A745"
    WARNING = "#F5A623"
    DANGER = "#DC3545"

    # Timer bar runs from PRIMARY (full) to DANGER (empty)
    TIMER_TRACK = "#E6EEF5"


PHASE_COLORS = {
    StepPhase.INITIATION: "#004481",
    StepPhase.EXECUTION: "#28A745",
    StepPhase.SETTLEMENT: "#F28C28",
    StepPhase.OTHER: "#6C757D",
}

SEVERITY_COLORS = {
    Severity.SUCCESS: GameColors.SUCCESS,
    Severity.INFO: GameColors.PRIMARY,
    Severity.WARNING: GameColors.WARNING,
    Severity.ERROR: GameColors.DANGER,
}


def phase_color(phase: StepPhase) -> str:
    return PHASE_COLORS.get(phase, PHASE_COLORS[StepPhase.OTHER])


def severity_color(severity: Severity) -> str:
    return SEVERITY_COLORS.get(severity, GameColors.PRIMARY)


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


def timer_color(fraction: float) -> str:
    """Fill color of the countdown bar for the remaining share of time."""
    return blend_hex(GameColors.DANGER, GameColors.PRIMARY, fraction)
