import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models so every table is registered with Base before create_all
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.assets.router import router as assets_router
from .domain.complaints.router import router as complaints_router
from .domain.maintenance.router import router as maintenance_router
from .domain.work_orders.router import router as work_orders_router
from .exceptions import MaintenanceError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    try:
        from .redis_client import get_redis_client

        get_redis_client()  # Connection test
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed - maintenance runs cannot take their lock: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="BMS Maintenance API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(MaintenanceError)
async def maintenance_error_handler(request: Request, exc: MaintenanceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.code}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} - {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors to 401 when the caller did not identify
    its organization
    """
    for error in exc.errors():
        if error.get("loc") and "x-organization-id" in str(error.get("loc")).lower():
            logger.warning(f"Missing organization context for {request.url.path}")
            return JSONResponse(
                status_code=401,
                content={"detail": "Missing X-Organization-Id header"},
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(maintenance_router)
app.include_router(complaints_router)
app.include_router(work_orders_router)
app.include_router(assets_router)


@app.get("/")
def root():
    return {"message": "BMS Maintenance API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
