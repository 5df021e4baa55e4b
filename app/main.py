import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.v1.classes import router as classes_router
from app.application.exceptions import RecordStoreError
from app.core.config import settings
from app.infrastructure.store.seed_data import seed_demo_data
from app.wiring.dependencies import close_record_store, get_record_store

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("user_id", "class_instance_id", "template_id", "generation", "collection", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SEED_DEMO_DATA:
        try:
            await seed_demo_data(get_record_store())
        except RecordStoreError as e:
            logging.getLogger(__name__).error("Demo seed failed", extra={"error": str(e)})
    yield
    await close_record_store()


app = FastAPI(title="Class Catalog & Booking", version="1.0.0", lifespan=lifespan)

app.include_router(classes_router, prefix="/api/v1", tags=["classes"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
