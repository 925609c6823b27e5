from pathlib import Path

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from .models.analysis import InputMode, RiskScore
from .services.scan_session import ScanPhase, ScanSession

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# (css class, icon glyph) per risk level
RISK_STYLES: dict[RiskScore, tuple[str, str]] = {
    RiskScore.HIGH: ("risk-high", "⛔"),
    RiskScore.MEDIUM: ("risk-medium", "⚠"),
    RiskScore.LOW: ("risk-low", "✔"),
}

MODE_TABS: list[tuple[InputMode, str]] = [
    (InputMode.TEXT, "Paste Text"),
    (InputMode.LINK, "Link Investigator"),
    (InputMode.IMAGE, "Screenshot"),
]

LOADING_REFRESH_SECONDS = 2

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def risk_class(score: RiskScore) -> str:
    return RISK_STYLES[score][0]


def risk_icon(score: RiskScore) -> str:
    return RISK_STYLES[score][1]


templates.env.filters["risk_class"] = risk_class
templates.env.filters["risk_icon"] = risk_icon


def render_page(request: Request, session: ScanSession) -> HTMLResponse:
    phase = session.phase
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "session": session,
            "state": session.state,
            "phase": phase.value,
            "modes": MODE_TABS,
            "active_mode": session.mode.value,
            "refresh_seconds": LOADING_REFRESH_SECONDS if phase is ScanPhase.LOADING else None,
        },
    )
