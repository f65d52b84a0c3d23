"""FastAPI application entry point for the QR code URL generator.

Application Lifecycle Diagram
===========================
::
    ┌─────────────┐
    │  uvicorn    │
    │  startup    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ init_db()   │
    │ manager     │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    │ requests    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ close_db()  │
    └─────────────┘

How to Use
===========
**Step 1 — Run with uvicorn**::
    uvicorn qrcode_urls.main:app --host 0.0.0.0 --port 8000

**Step 2 — Preview and insert**::
    curl "http://localhost:8000/api/preview?count=5"
    curl -X POST http://localhost:8000/api/urls \
         -H "Content-Type: application/json" \
         -d '{"count": 100}'

**Step 3 — Scrape metrics**::
    curl http://localhost:8000/metrics
"""

__all__ = ["app"]

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from qrcode_urls.config import get_settings
from qrcode_urls.database import close_db, init_db
from qrcode_urls.dependencies import _service_manager
from qrcode_urls.routes import router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    await init_db()
    _service_manager.initialize()
    yield
    # Shutdown
    _service_manager.cleanup()
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Generate unique codes for QR code URLs",
    lifespan=lifespan,
)

Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    should_respect_env_var=False,
).instrument(app).expose(app)

app.include_router(router)
