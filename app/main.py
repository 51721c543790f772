import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.errors import BookingError, StorageError
from app.api.api import api_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# CORS: use CORS_ORIGINS from env in production; default to localhost for dev
_default_origins = [
    "http://127.0.0.1:3000", "http://localhost:3000",
    "http://127.0.0.1:5173", "http://localhost:5173",
]
_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()] if settings.CORS_ORIGINS else _default_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
    message = f"Invalid {field}: {first.get('msg', 'bad request')}"
    if request.url.path.endswith("/bookings/scan-ticket"):
        # scanner clients only read valid/message
        return JSONResponse(status_code=400, content={"valid": False, "message": message})
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@app.exception_handler(SQLAlchemyError)
async def datastore_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("datastore error on %s %s", request.method, request.url.path)
    message = "Database error, please retry"
    if settings.EXPOSE_ERROR_DETAILS:
        message += f": {exc}"
    return JSONResponse(status_code=StorageError.status_code, content={"success": False, "message": message})


app.include_router(api_router)


@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}


# Uploaded payment proofs; directory is created on first upload
app.mount(
    settings.UPLOAD_URL_PREFIX.rstrip("/"),
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="payment_uploads",
)
