from sqlalchemy.orm import Session

from leadconsole.server.models.lookup import LeadSource, LeadStatus
from leadconsole.server.models.user import User

DEFAULT_STATUSES = [
    (1, "New", "new"),
    (2, "Contacted", "contacted"),
    (3, "Qualified", "qualified"),
    (4, "Converted", "converted"),
    (5, "Lost", "lost"),
]
DEFAULT_SOURCES = [
    (1, "Website", "website"),
    (2, "Referral", "referral"),
    (3, "Phone", "phone"),
]
DEFAULT_USERS = [
    {"id": 1, "email": "ann@example.com", "full_name": "Ann Admin"},
    {"id": 2, "email": "bob@example.com", "first_name": "Bob", "last_name": "Baker"},
    {"id": 3, "email": "cy@example.com", "username": "cy"},
]


def seed_reference_data(db: Session) -> None:
    """Install default statuses, sources and users if the tables are empty."""
    if db.query(LeadStatus).first() is None:
        db.add_all(LeadStatus(id=i, name=name, slug=slug) for i, name, slug in DEFAULT_STATUSES)
    if db.query(LeadSource).first() is None:
        db.add_all(LeadSource(id=i, name=name, slug=slug) for i, name, slug in DEFAULT_SOURCES)
    if db.query(User).first() is None:
        db.add_all(User(**fields) for fields in DEFAULT_USERS)
    db.commit()
