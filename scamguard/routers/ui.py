import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from ..config import settings
from ..models.analysis import InputMode
from ..services.analysis_client import AnalysisClient, get_analysis_client
from ..services.request_builder import to_data_uri
from ..services.scan_session import ScanSession
from ..services.session_store import store
from ..views import render_page

router = APIRouter(tags=["UI"])
logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────

def _session_for(request: Request) -> ScanSession:
    return store.get_or_create(request.cookies.get(settings.session_cookie_name))


def _with_cookie(response: Response, session: ScanSession) -> Response:
    response.set_cookie(
        settings.session_cookie_name,
        session.session_id,
        httponly=True,
        samesite="lax",
    )
    return response


def _back_to_page(session: ScanSession) -> Response:
    return _with_cookie(RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER), session)


def _trigger_scan(session: ScanSession, background_tasks: BackgroundTasks, client: AnalysisClient) -> None:
    ticket = session.begin_scan()
    if ticket is None:
        return
    logger.info("Session %s: %s scan started.", session.session_id, ticket.mode.value)
    background_tasks.add_task(session.run, ticket, client)


# ─────────────────────────────────────────────
# GET /
# Render the page for the caller's session
# ─────────────────────────────────────────────

@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> Response:
    session = _session_for(request)
    return _with_cookie(render_page(request, session), session)


# ─────────────────────────────────────────────
# Input affordances
# ─────────────────────────────────────────────

@router.post("/mode/{mode}")
async def switch_mode(mode: InputMode, request: Request) -> Response:
    session = _session_for(request)
    session.set_mode(mode)
    return _back_to_page(session)


@router.post("/text")
async def submit_text(
    request: Request,
    background_tasks: BackgroundTasks,
    text: str = Form(""),
    client: AnalysisClient = Depends(get_analysis_client),
) -> Response:
    session = _session_for(request)
    session.text_input = text
    session.set_mode(InputMode.TEXT)
    _trigger_scan(session, background_tasks, client)
    return _back_to_page(session)


@router.post("/link")
async def submit_link(
    request: Request,
    background_tasks: BackgroundTasks,
    url: str = Form(""),
    client: AnalysisClient = Depends(get_analysis_client),
) -> Response:
    session = _session_for(request)
    session.url_input = url
    session.set_mode(InputMode.LINK)
    _trigger_scan(session, background_tasks, client)
    return _back_to_page(session)


@router.post("/image")
async def upload_image(request: Request, file: UploadFile = File(...)) -> Response:
    session = _session_for(request)
    session.set_mode(InputMode.IMAGE)

    content_type = file.content_type or ""
    if content_type and not content_type.startswith("image/"):
        logger.warning("Session %s: ignored upload of type %s.", session.session_id, content_type)
        return _back_to_page(session)

    image_bytes = await file.read()
    if not image_bytes:
        return _back_to_page(session)
    if len(image_bytes) > settings.max_image_bytes:
        logger.warning(
            "Session %s: ignored %d byte upload (limit %d).",
            session.session_id,
            len(image_bytes),
            settings.max_image_bytes,
        )
        return _back_to_page(session)

    session.image_data = to_data_uri(image_bytes, content_type or None)
    return _back_to_page(session)


@router.post("/image/clear")
async def clear_image(request: Request) -> Response:
    session = _session_for(request)
    session.clear_image()
    return _back_to_page(session)


# ─────────────────────────────────────────────
# Scan / reset
# ─────────────────────────────────────────────

@router.post("/scan")
async def scan(
    request: Request,
    background_tasks: BackgroundTasks,
    client: AnalysisClient = Depends(get_analysis_client),
) -> Response:
    session = _session_for(request)
    _trigger_scan(session, background_tasks, client)
    return _back_to_page(session)


@router.post("/reset")
async def reset(request: Request) -> Response:
    session = _session_for(request)
    session.reset()
    return _back_to_page(session)
