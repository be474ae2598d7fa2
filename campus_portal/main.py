# ========================================
# campus_portal/main.py
# ========================================

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus_portal import database
from campus_portal.routes.job import router as job_router
from campus_portal.utils.errors import format_validation_errors

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger(__name__)


# ===========================
# DATABASE LIFECYCLE
# ===========================

@asynccontextmanager
async def lifespan(app: FastAPI):
    await database.connect_to_mongo()
    await database.init_indexes()
    try:
        yield
    finally:
        await database.close_mongo_connection()


# ===========================
# CREATE FASTAPI APP
# ===========================

app = FastAPI(
    title="Campus Placement Portal API",
    description="Recruiters post jobs, students browse eligible postings and apply",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ===========================
# CORS MIDDLEWARE
# ===========================
raw_origins = os.getenv("ALLOWED_ORIGINS", "")
origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# ERROR ENVELOPE: {"error": "<message>"}
# ===========================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": format_validation_errors(exc.errors())})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": f"Internal Server Error: {exc}"})


# ===========================
# REGISTER ROUTERS
# ===========================

app.include_router(job_router)

# ===========================
# ROOT ENDPOINTS
# ===========================

@app.get("/")
async def root():
    """API root endpoint with feature summary"""
    return {
        "status": "Campus Placement Portal API Running",
        "version": "1.0.0",
        "documentation": "/docs",
        "endpoints": {
            "recruiter": [
                "POST /api/jobs/create",
                "GET /api/jobs/recruiter",
                "PUT /api/jobs/{job_id}",
                "DELETE /api/jobs/{job_id}",
            ],
            "student": [
                "GET /api/jobs/",
                "GET /api/jobs/students/applied-jobs",
                "POST /api/jobs/{job_id}/apply",
            ],
            "shared": ["GET /api/jobs/{job_id}"],
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    connected = await database.ping()
    return {
        "status": "healthy" if connected else "degraded",
        "database": "connected" if connected else "disconnected",
        "version": "1.0.0",
    }
