# cityfix/main.py
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cityfix import __version__, models  # noqa: F401 - register tables
from cityfix.api import auth, health, reports, upload
from cityfix.bootstrap import run_bootstrap
from cityfix.config import settings
from cityfix.database import Base, SessionLocal, engine
from cityfix.exceptions import CityFixError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("cityfix")

# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.BOOTSTRAP_ON_STARTUP:
        db = SessionLocal()
        try:
            results = run_bootstrap(db)
        finally:
            db.close()
        logger.info("Bootstrap finished: %s", results)
    yield


# Initialize FastAPI app
app = FastAPI(
    title="CityFix API",
    description="Community issue reports with admin triage.",
    version=__version__,
    lifespan=lifespan,
)


# Request timing / access log
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info(
        "%s %s -> %s (%.3fs)",
        request.method,
        request.url.path,
        response.status_code,
        process_time,
    )
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    return response


# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─────────────────────────────────────────
# Error envelope: {"success": false, "error": "..."}
# ─────────────────────────────────────────
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(CityFixError)
async def cityfix_error_handler(request: Request, exc: CityFixError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return _error(400, "Invalid JSON body")

    problems = []
    for err in errors:
        # List positions are dropped; only field names are reported
        field = ".".join(
            str(part) for part in err.get("loc", ())
            if part != "body" and not isinstance(part, int)
        )
        problems.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return _error(400, "Invalid request: " + "; ".join(problems))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


# API routers
app.include_router(auth.router, prefix=settings.API_PREFIX)     # /api/auth/*
app.include_router(reports.router, prefix=settings.API_PREFIX)  # /api/reports/*
app.include_router(upload.router, prefix=settings.API_PREFIX)   # /api/upload, /api/storage/*
app.include_router(health.router, prefix=settings.API_PREFIX)   # /api/health


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
