# contactbook/application.py

import logging
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from contactbook.config import Settings, get_settings
from contactbook.db.mongo import create_client, ensure_indexes
from contactbook.logging_config import setup_logging
from contactbook.routes import contacts
from contactbook.utils.basic_auth import verify_basic_auth
from contactbook.utils.uploads import AvatarStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, db=None) -> FastAPI:
    """Build the contacts API.

    Pass `db` to run against an existing database handle (tests hand in an
    in-memory one); otherwise a Motor client is created from `settings` and
    closed on shutdown.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Contact Book API")
    app.state.settings = settings

    client = None
    if db is None:
        client = create_client(settings)
        db = client[settings.mongo_db]
    app.state.db = db
    app.state.avatar_store = AvatarStore(settings.upload_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def prepare_store():
        await ensure_indexes(app.state.db)
        logger.info("🚀 Contact Book API started (db=%s)", app.state.db.name)

    @app.on_event("shutdown")
    async def close_store():
        if client is not None:
            client.close()

    @app.get("/")
    def root():
        return {"message": "✅ Contact Book API running"}

    # Uploaded avatars are public, like the site root
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    # Protected routers (require basic auth)
    app.include_router(
        contacts.router,
        prefix="/api/contacts",
        tags=["contacts"],
        dependencies=[Depends(verify_basic_auth)],
    )

    return app
