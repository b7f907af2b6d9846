"""Lead notes endpoints."""

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from leadconsole.server.activity import log_event
from leadconsole.server.db import get_db
from leadconsole.server.models.lead import Lead
from leadconsole.server.models.note import LeadNote
from leadconsole.schemas.note import NoteCreate, NoteRead

router = APIRouter(prefix="/api/v1/leadnote", tags=["notes"])


@router.post("/", response_model=NoteRead)
async def create_note(
    note_in: NoteCreate,
    db: Session = Depends(get_db),
    x_actor_user_id: int | None = Header(default=None),
):
    lead = db.query(Lead).filter(Lead.id == note_in.lead_id, Lead.is_deleted.is_(False)).first()
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    if not note_in.body.strip():
        raise HTTPException(status_code=422, detail="Note body must not be empty")
    user_id = note_in.user_id if note_in.user_id is not None else x_actor_user_id
    note = LeadNote(lead_id=lead.id, user_id=user_id, body=note_in.body, is_pinned=note_in.is_pinned)
    db.add(note)
    log_event(db, lead.id, type="NOTE_ADDED", actor_user_id=user_id, payload={"body": note_in.body})
    db.commit()
    db.refresh(note)
    return note


@router.get("/lead/{lead_id}", response_model=list[NoteRead])
async def list_lead_notes(lead_id: int, db: Session = Depends(get_db)):
    lead = db.query(Lead).filter(Lead.id == lead_id, Lead.is_deleted.is_(False)).first()
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return (
        db.query(LeadNote)
        .filter(LeadNote.lead_id == lead_id)
        .order_by(LeadNote.created_at.desc(), LeadNote.id.desc())
        .all()
    )
