"""Local server of record for development and integration tests.

Serves the lead REST surface the console consumes, backed by SQLAlchemy.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from leadconsole.core.logging import configure_logging
from leadconsole.core.settings import get_settings
from leadconsole.server.api import leads, lookups, notes
from leadconsole.server.db import make_engine, make_session_factory
from leadconsole.server.models.base import Base
from leadconsole.server.seed import seed_reference_data

logger = logging.getLogger(__name__)


def create_app(database_url: Optional[str] = None, seed: bool = True) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    engine = make_engine(database_url or settings.database_url)
    Base.metadata.create_all(bind=engine)
    session_factory = make_session_factory(engine)
    if seed:
        db = session_factory()
        try:
            seed_reference_data(db)
        finally:
            db.close()

    app = FastAPI(title=f"{settings.app_name} server of record", version=settings.api_version)
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.include_router(leads.router)
    app.include_router(lookups.router)
    app.include_router(notes.router)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    logger.info("Server of record ready on %s", engine.url)
    return app
