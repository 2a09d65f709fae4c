# main.py
from contextlib import asynccontextmanager
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import IS_PROD, LOG_LEVEL, PORT, DB_HEALTH_TIMEOUT
from app.core.db import AsyncSessionLocal, check_database, dispose_engine, init_models
from app.middleware.request_logger import RequestLoggerMiddleware
from app.routers import router as api_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    try:
        async with AsyncSessionLocal() as session:
            await check_database(session)
        logger.info("Database connection successful")
    except Exception as e:
        logger.error("Database connection error: %s", e)
    yield
    await dispose_engine()


app = FastAPI(
    title="Quotation Backend API",
    description="FastAPI backend for quotations, orders and driver accounts",
    version="0.1.0",
    lifespan=lifespan,
)
# CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)
app.add_middleware(RequestLoggerMiddleware)


# Error bodies always carry an "error" field
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = {"error": exc.detail}
    details = getattr(exc, "details", None)
    if details is not None:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    content = {"error": "Internal Server Error"}
    if not IS_PROD:
        content["details"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


# Health check endpoints
@app.get("/", tags=["Health"])
async def root():
    return {"status": "ok", "message": "Backend is running"}


@app.get("/health", tags=["Health"])
async def health_check():
    try:
        async with AsyncSessionLocal() as session:
            await check_database(session, retries=0)
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "down", "timeout": DB_HEALTH_TIMEOUT},
        )
    return {"status": "ok", "database": "up"}


# Register routers
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=PORT)
