import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from app.api.routes_entries import router as entries_router
from app.core import store_config
from app.core.logging_config import configure_logging
from app.db.kv_store import KeyValueStore, build_kv_store
from app.services.entry_store import EntryStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "CPAP Tracker"

def create_app(kv: Optional[KeyValueStore] = None, entries_key: Optional[str] = None) -> FastAPI:
    """
    Build the API. The entry store is constructed at startup and closed at
    shutdown; pass `kv` to supply the key-value layer directly.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(store_config.CPAP_LOG_LEVEL)
        backend = kv if kv is not None else build_kv_store(store_config.CPAP_STORE_BACKEND, store_config.CPAP_DB_PATH)
        store = EntryStore(backend, key=entries_key or store_config.CPAP_ENTRIES_KEY)
        app.state.entry_store = store
        logger.info("Entry store ready (key=%r, backend=%s)", store.key, type(backend).__name__)
        try:
            yield
        finally:
            await store.close()
            logger.info("Entry store closed")

    app = FastAPI(title=SERVICE_NAME, version="1.0", lifespan=lifespan)
    app.include_router(entries_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/")
    def root():
        return {"ok": True, "service": SERVICE_NAME}

    return app

app = create_app()
