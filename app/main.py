import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.database import Base, engine
from app.models.enums import MEDIA_ASSETS
from app.scheduler import start_scheduler, stop_scheduler
from app.api import leads, sponsors, stats, dashboard, pipeline, documents, inbound_email

from app.models import *

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


app = FastAPI(title="Sponsorship Pipeline CRM")

# -------------------------
# CORS
# -------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------
# Error bodies: always {"error": "..."}
# -------------------------
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request, exc):
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request, exc):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse({"error": message}, status_code=400)

@app.exception_handler(Exception)
async def unhandled_error_handler(request, exc):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse({"error": "Internal server error"}, status_code=500)

# -------------------------
# Include Routers
# -------------------------
app.include_router(leads.router)
app.include_router(sponsors.router)
app.include_router(stats.router)
app.include_router(dashboard.router)
app.include_router(pipeline.router)
app.include_router(documents.router)
app.include_router(inbound_email.router)


# -------------------------
# DB INIT
# -------------------------
Base.metadata.create_all(bind=engine)

# -------------------------
# FastAPI lifecycle
# -------------------------

@app.on_event("startup")
def startup():
    start_scheduler()

@app.on_event("shutdown")
def shutdown():
    stop_scheduler()

# -------------------------
# Routes
# -------------------------

@app.get("/")
def root():
    return {"status": "running"}

@app.get("/media-assets")
def list_media_assets():
    return [{"id": m, "label": m} for m in MEDIA_ASSETS]
