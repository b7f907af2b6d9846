"""Lead endpoints of the server of record."""

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from leadconsole.core.time import utc_now
from leadconsole.server.activity import event_timestamp, log_event, log_status_change
from leadconsole.server.db import get_db
from leadconsole.server.models.event import LeadEvent
from leadconsole.server.models.lead import Lead
from leadconsole.server.models.lookup import LeadSource, LeadStatus
from leadconsole.server.models.user import User
from leadconsole.schemas.lead import LeadCreate, LeadRead, LeadUpdate

router = APIRouter(prefix="/api/v1/lead", tags=["leads"])

# Foreign keys whose field-change events carry resolved names.
NAMED_FIELDS = {
    "source_id": LeadSource,
    "assigned_to_user_id": User,
}


def _get_live_lead(db: Session, lead_id: int) -> Lead:
    lead = db.query(Lead).filter(Lead.id == lead_id, Lead.is_deleted.is_(False)).first()
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


def _validate_references(db: Session, values: dict) -> None:
    errors = []
    if db.get(LeadStatus, values["status_id"]) is None:
        errors.append({"loc": ["body", "status_id"], "msg": f"Unknown status id {values['status_id']}", "type": "value_error"})
    if values.get("source_id") is not None and db.get(LeadSource, values["source_id"]) is None:
        errors.append({"loc": ["body", "source_id"], "msg": f"Unknown source id {values['source_id']}", "type": "value_error"})
    user_id = values.get("assigned_to_user_id")
    if user_id is not None and db.get(User, user_id) is None:
        errors.append({"loc": ["body", "assigned_to_user_id"], "msg": f"Unknown user id {user_id}", "type": "value_error"})
    if errors:
        raise HTTPException(status_code=422, detail=errors)


def _display_name(db: Session, field: str, value):
    if value is None:
        return None
    row = db.get(NAMED_FIELDS[field], value)
    if row is None:
        return None
    if isinstance(row, User):
        return row.full_name or row.username or row.email
    return row.name


@router.post("/", response_model=LeadRead)
async def create_lead(
    lead_in: LeadCreate,
    db: Session = Depends(get_db),
    x_actor_user_id: int | None = Header(default=None),
):
    values = lead_in.model_dump()
    _validate_references(db, values)
    lead = Lead(**values)
    db.add(lead)
    db.flush()
    payload = {}
    if lead.source_id is not None:
        payload["source"] = _display_name(db, "source_id", lead.source_id)
    log_event(db, lead.id, kind="LEAD_CREATED", actor_user_id=x_actor_user_id, payload=payload)
    db.commit()
    db.refresh(lead)
    return lead


@router.post("/soft-delete")
async def batch_soft_delete(
    ids: list[int] = Body(...),
    db: Session = Depends(get_db),
    x_actor_user_id: int | None = Header(default=None),
):
    leads = db.query(Lead).filter(Lead.id.in_(ids), Lead.is_deleted.is_(False)).all()
    ts = event_timestamp()
    for lead in leads:
        lead.is_deleted = True
        log_event(db, lead.id, ts, kind="event", type="LEAD_ARCHIVED", actor_user_id=x_actor_user_id)
    db.commit()
    return {"updated": len(leads), "ids": [lead.id for lead in leads]}


@router.post("/restore")
async def batch_restore(
    ids: list[int] = Body(...),
    db: Session = Depends(get_db),
    x_actor_user_id: int | None = Header(default=None),
):
    leads = db.query(Lead).filter(Lead.id.in_(ids), Lead.is_deleted.is_(True)).all()
    ts = event_timestamp()
    for lead in leads:
        lead.is_deleted = False
        log_event(db, lead.id, ts, kind="event", type="LEAD_RESTORED", actor_user_id=x_actor_user_id)
    db.commit()
    return {"updated": len(leads), "ids": [lead.id for lead in leads]}


@router.get("/{lead_id}", response_model=LeadRead)
async def get_lead(lead_id: int, db: Session = Depends(get_db)):
    return _get_live_lead(db, lead_id)


@router.put("/{lead_id}", response_model=LeadRead)
async def update_lead(
    lead_id: int,
    lead_in: LeadUpdate,
    db: Session = Depends(get_db),
    x_actor_user_id: int | None = Header(default=None),
):
    lead = _get_live_lead(db, lead_id)
    values = lead_in.model_dump()
    _validate_references(db, values)
    ts = event_timestamp()

    old_status_id = lead.status_id
    if values["status_id"] != old_status_id:
        lead.status_id = values["status_id"]
        lead.status_changed_at = utc_now()
        log_status_change(db, lead.id, old_status_id, lead.status_id, x_actor_user_id, ts)

    for field, value in values.items():
        if field == "status_id":
            continue
        current_value = getattr(lead, field)
        if current_value == value:
            continue
        setattr(lead, field, value)
        payload = {"field": field, "old": current_value, "new": value}
        if field in NAMED_FIELDS:
            payload["old_name"] = _display_name(db, field, current_value)
            payload["new_name"] = _display_name(db, field, value)
        if field == "score":
            log_event(db, lead.id, ts, type="SCORE_UPDATED", actor_user_id=x_actor_user_id,
                      payload={"old_score": current_value, "new_score": value})
        elif field == "assigned_to_user_id" and value is not None:
            log_event(db, lead.id, ts, kind="ASSIGNED", actor_user_id=x_actor_user_id, payload={"user_id": value})
        else:
            log_event(db, lead.id, ts, kind="field", actor_user_id=x_actor_user_id, payload=payload)
    db.commit()
    db.refresh(lead)
    return lead


@router.get("/{lead_id}/timeline")
async def get_timeline(
    lead_id: int,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    _get_live_lead(db, lead_id)
    query = db.query(LeadEvent).filter(LeadEvent.lead_id == lead_id)
    total = query.count()
    # Newest first so the first page holds the latest activity.
    events = query.order_by(LeadEvent.ts.desc(), LeadEvent.id.desc()).offset(offset).limit(limit).all()
    return {"total_count": total, "records": [event.to_record() for event in events]}
