from leadconsole.server.db import Base

# Import models to register metadata for Base.metadata.create_all
from leadconsole.server.models.lookup import LeadSource, LeadStatus  # noqa: F401
from leadconsole.server.models.user import User  # noqa: F401
from leadconsole.server.models.lead import Lead  # noqa: F401
from leadconsole.server.models.event import LeadEvent  # noqa: F401
from leadconsole.server.models.note import LeadNote  # noqa: F401
