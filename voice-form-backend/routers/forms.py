"""
Forms Router - API Endpoints for Uploaded HTML Forms

Provides REST API for:
- Form upload, parsing and transformation into editable regions
- Region events (focus, blur, double-click for voice, right-click for images)
- Direct typing, voice transcripts and image attachments
- HTML / XLSX / print exports

Sessions are memory-only: a restart discards every uploaded form.
"""

import io
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from pydantic import BaseModel, Field

from core.dependencies import get_session_store
from core.schemas import FillInstruction
from services.export import render_html_export, render_print_document, render_xlsx_export
from services.form.document import container_html, parse_form_document
from services.form.regions import RegionEventRouter
from services.form.session import FormSession, SessionStore
from utils.logging import get_logger, log_form_action
from utils.rate_limit import limiter, RATE_LIMITS
from utils.sanitize import export_filename, sanitize_filename

logger = get_logger(__name__)

router = APIRouter(prefix="/forms", tags=["Forms"])

_event_router = RegionEventRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =============================================================================
# Request/Response Models
# =============================================================================

class RegionInfo(BaseModel):
    id: str
    kind: str
    text: str
    frozen: bool = False


class FormSessionResponse(BaseModel):
    """Snapshot of an uploaded form."""
    success: bool = True
    session_id: str
    file_name: str
    html: str
    regions: List[RegionInfo]
    regions_created: int = 0


class TransformResponse(BaseModel):
    success: bool = True
    regions_created: int
    total_regions: int


class RegionTextUpdate(BaseModel):
    text: str = Field(..., description="New content typed into the region")


class RegionEventRequest(BaseModel):
    event: str = Field(..., description="focus, blur, dblclick, contextmenu or click")


class RegionEventResponse(BaseModel):
    success: bool = True
    region: RegionInfo
    focused: Optional[str] = None
    image_target: Optional[str] = None
    voice_state: str


class TranscriptRequest(BaseModel):
    transcript: str = ""
    prompt: Optional[str] = None


class VoiceResultResponse(BaseModel):
    success: bool
    applied: bool = False
    instruction: Optional[FillInstruction] = None
    region: Optional[RegionInfo] = None
    message: str = ""


class RecognitionErrorRequest(BaseModel):
    error: str = "unknown"


class ImageAttachResponse(BaseModel):
    success: bool
    region: RegionInfo


# =============================================================================
# Helpers
# =============================================================================

def _regions(session: FormSession) -> List[Dict[str, Any]]:
    return [region.to_dict() for region in session.regions.values()]


def _snapshot(session: FormSession, created: int = 0) -> FormSessionResponse:
    return FormSessionResponse(
        session_id=session.session_id,
        file_name=session.file_name,
        html=container_html(session.soup),
        regions=_regions(session),
        regions_created=created,
    )


def _attachment(file_name: str) -> Dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{file_name}"'}


# =============================================================================
# Upload & Session
# =============================================================================

@router.post("/upload", response_model=FormSessionResponse)
@limiter.limit(RATE_LIMITS["upload"])
async def upload_form(
    request: Request,
    file: UploadFile = File(..., description="HTML/XHTML form"),
    session_id: Optional[str] = Form(None, description="Replace the document of this session"),
    store: SessionStore = Depends(get_session_store),
):
    """
    Upload a form and convert its blanks into editable regions.

    Passing an existing ``session_id`` replaces that session's document;
    its regions and attached images are discarded.
    """
    content = await file.read()
    soup = parse_form_document(content, file.filename)
    file_name = sanitize_filename(file.filename)

    if session_id:
        session = store.replace(session_id, file_name, soup)
    else:
        session = store.create(file_name, soup)

    created = session.transform()
    log_form_action("upload", file_name, success=True, details=f"{len(created)} regions")
    return _snapshot(session, created=len(created))


@router.get("/{session_id}", response_model=FormSessionResponse)
async def get_form(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Current document and regions of a session."""
    return _snapshot(store.get(session_id))


@router.post("/{session_id}/transform", response_model=TransformResponse)
async def transform_form(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Re-run detection; regions that already exist are left alone."""
    session = store.get(session_id)
    created = session.transform()
    return TransformResponse(regions_created=len(created), total_regions=len(session.regions))


@router.delete("/{session_id}")
async def discard_form(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = store.get(session_id)
    store.discard(session_id)
    logger.info(f"Discarded session {session_id} ({session.file_name})")
    return {"success": True}


# =============================================================================
# Regions
# =============================================================================

@router.put("/{session_id}/regions/{region_id}", response_model=RegionInfo)
async def update_region(
    session_id: str,
    region_id: str,
    payload: RegionTextUpdate,
    store: SessionStore = Depends(get_session_store),
):
    """Direct typing into a text region."""
    region = store.get(session_id).text_region(region_id)
    region.set_text(payload.text)
    return region.to_dict()


@router.post("/{session_id}/regions/{region_id}/events", response_model=RegionEventResponse)
async def region_event(
    session_id: str,
    region_id: str,
    payload: RegionEventRequest,
    store: SessionStore = Depends(get_session_store),
):
    """Route a browser event on a region to its handler."""
    session = store.get(session_id)
    region = session.region(region_id)
    _event_router.dispatch(payload.event, region, session.context)

    context = session.context
    return RegionEventResponse(
        region=region.to_dict(),
        focused=context.focused.region_id if context.focused else None,
        image_target=context.image_target.region_id if context.image_target else None,
        voice_state=session.voice.state.value,
    )


@router.post("/{session_id}/regions/{region_id}/image", response_model=ImageAttachResponse)
async def attach_image(
    session_id: str,
    region_id: str,
    file: UploadFile = File(..., description="Image to embed"),
    store: SessionStore = Depends(get_session_store),
):
    """
    Embed an image into a region or replace an image's source.

    Unreadable files are ignored; the response then reports success=false.
    """
    session = store.get(session_id)
    region = session.region(region_id)
    _event_router.dispatch("contextmenu", region, session.context)

    data = await file.read()
    data_url = session.images.attach(
        session.context,
        file.filename or "image",
        data,
        file.content_type,
    )
    return ImageAttachResponse(success=data_url is not None, region=region.to_dict())


# =============================================================================
# Voice
# =============================================================================

@router.post("/{session_id}/voice/transcript", response_model=VoiceResultResponse)
@limiter.limit(RATE_LIMITS["voice"])
async def voice_transcript(
    request: Request,
    session_id: str,
    payload: TranscriptRequest,
    store: SessionStore = Depends(get_session_store),
):
    """Apply the first finalized transcript to the listening region."""
    session = store.get(session_id)
    result = await session.voice.handle_transcript(payload.transcript, session.context, payload.prompt)

    if result is None:
        return VoiceResultResponse(success=False, message="No region is waiting for voice input")

    return VoiceResultResponse(
        success=True,
        applied=result.applied,
        instruction=result.instruction,
        region=result.region.to_dict(),
    )


@router.post("/{session_id}/voice/error")
async def voice_error(
    session_id: str,
    payload: RecognitionErrorRequest,
    store: SessionStore = Depends(get_session_store),
):
    """Speech engine failure reported by the browser."""
    session = store.get(session_id)
    session.voice.handle_error(payload.error)
    return {"success": True, "voice_state": session.voice.state.value}


# =============================================================================
# Export
# =============================================================================

@router.get("/{session_id}/export/html")
@limiter.limit(RATE_LIMITS["export"])
async def export_html(request: Request, session_id: str, store: SessionStore = Depends(get_session_store)):
    """Download the filled form as standalone HTML."""
    session = store.get(session_id)
    document = render_html_export(session.soup, session.file_name, session.image_map)
    download_name = export_filename(session.file_name, "_filled.html")
    log_form_action("export-html", session.file_name, success=True)
    return Response(content=document, media_type="text/html", headers=_attachment(download_name))


@router.get("/{session_id}/export/xlsx")
@limiter.limit(RATE_LIMITS["export"])
async def export_xlsx(request: Request, session_id: str, store: SessionStore = Depends(get_session_store)):
    """Download the filled form as a spreadsheet."""
    session = store.get(session_id)
    content = render_xlsx_export(session.soup)
    download_name = export_filename(session.file_name, "_filled.xlsx")
    log_form_action("export-xlsx", session.file_name, success=True)
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers=_attachment(download_name),
    )


@router.get("/{session_id}/export/pdf", response_class=HTMLResponse)
async def export_pdf(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Print-formatted page that opens the print dialog (Save as PDF)."""
    session = store.get(session_id)
    log_form_action("export-pdf", session.file_name, success=True)
    return HTMLResponse(render_print_document(session.soup, session.file_name, session.image_map))
