"""
PharmaTrace Backend: custody tracking for pharmaceutical batches.

ARCHITECTURE:
- Manufacturers register medicines and batches; each batch gets a QR code
- Manufacturers move batches through transit; pharmacists scan to receive
- Pharmacist inventory is derived from received batches on every request
- SQLAlchemy DB: source of truth, including the status history log

Identity comes from the external provider's bearer token. The role stored
on the profile decides which transitions a caller may make.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pharmatrace import __version__
from pharmatrace.api.routes import batches, medicines, pharmacy, profiles
from pharmatrace.core.config import settings
from pharmatrace.core.exceptions import BusinessError, PharmaTraceError, to_http_exception
from pharmatrace.db.init_db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: ensure database tables exist."""
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="PharmaTrace API",
    description="Batch custody from manufacturer to pharmacy shelf. Scan to receive.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type"],
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


@app.exception_handler(PharmaTraceError)
async def handle_domain_error(request: Request, exc: PharmaTraceError):
    http_exc = to_http_exception(exc)
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": http_exc.detail},
        headers=http_exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    """Schema rejections get the same 400 {"message", "field"} shape as service validation."""
    first = exc.errors()[0] if exc.errors() else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    http_exc = BusinessError.bad_request(
        first.get("msg", "Invalid request"), field=".".join(loc) or "body"
    )
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


app.include_router(profiles.router, tags=["profiles"])
app.include_router(medicines.router, prefix="/medicines", tags=["medicines"])
app.include_router(batches.router, prefix="/batches", tags=["batches"])
app.include_router(pharmacy.router, prefix="/pharmacy", tags=["pharmacy"])


@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}
