"""Lookup list endpoints: statuses, sources, users."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from leadconsole.server.db import get_db
from leadconsole.server.models.lookup import LeadSource, LeadStatus
from leadconsole.server.models.user import User
from leadconsole.schemas.lead import LookupRef, UserRef

router = APIRouter(prefix="/api/v1", tags=["lookups"])


@router.get("/leadstatus/", response_model=list[LookupRef])
async def list_statuses(db: Session = Depends(get_db)):
    return db.query(LeadStatus).order_by(LeadStatus.id.asc()).all()


@router.get("/leadsource/", response_model=list[LookupRef])
async def list_sources(db: Session = Depends(get_db)):
    return db.query(LeadSource).order_by(LeadSource.id.asc()).all()


@router.get("/user/", response_model=list[UserRef])
async def list_users(db: Session = Depends(get_db)):
    return db.query(User).filter(User.is_active.is_(True)).order_by(User.id.asc()).all()
