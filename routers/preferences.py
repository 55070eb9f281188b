# Preferences Router - Records landing page signals and serves the preference profile
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Response
from pydantic import BaseModel, ConfigDict, Field

from shared.state import get_landing_preferences

router = APIRouter(prefix="/preferences", tags=["Preferences"])


# === Pydantic Models ===
# Fields are optional on purpose: malformed signals are ignored by the
# engine, not rejected by the API.

class PageViewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page_id: str = Field(default="", alias="pageId")
    page_name: Optional[str] = Field(default=None, alias="pageName")


class TrackRequest(BaseModel):
    path: str = ""


class AddNoteRequest(BaseModel):
    text: str = ""
    context: Dict[str, Any] = Field(default_factory=dict)


# === Recording ===

@router.post("/views")
async def record_page_view(request: PageViewRequest):
    """Record a landing page view and start measuring its dwell time."""
    prefs = get_landing_preferences()
    view = prefs.record_page_view(request.page_id, request.page_name)
    return {"status": "success", "recorded": view is not None}


@router.post("/views/end")
async def end_view_session():
    """Called by the host page on visibility change / unload."""
    prefs = get_landing_preferences()
    duration = prefs.end_view_session()
    return {"status": "success", "durationSeconds": duration}


@router.post("/track")
async def track_location(request: TrackRequest):
    """Auto-instrumentation hook: the host page posts its location path once at load."""
    prefs = get_landing_preferences()
    page_id = prefs.track_location(request.path)
    return {"status": "success", "pageId": page_id}


@router.post("/feedback/{page_id}")
async def record_feedback(page_id: str, payload: Dict[str, Any] = Body(default={})):
    """Rating, comment, like/dislike and style tags for one page."""
    prefs = get_landing_preferences()
    recorded = prefs.record_feedback(page_id, payload)
    return {"status": "success", "recorded": recorded}


@router.post("/notes")
async def add_user_note(request: AddNoteRequest):
    prefs = get_landing_preferences()
    note = prefs.add_user_note(request.text, request.context)
    return {"status": "success", "recorded": note is not None}


# === Reading ===

@router.get("/summary")
async def get_summary():
    """Ranked preference report (most viewed, longest viewed, top styles, notes)."""
    prefs = get_landing_preferences()
    return prefs.get_summary().model_dump(mode="json", by_alias=True)


@router.get("/export")
async def export_state():
    """The persisted preference document, verbatim."""
    prefs = get_landing_preferences()
    return Response(content=prefs.export_state(), media_type="application/json")


@router.delete("")
async def reset_preferences():
    prefs = get_landing_preferences()
    prefs.reset()
    return {"status": "success"}
