"""
Udyoga Mitra - Main Application

FastAPI backend with:
- PostgreSQL (SQLAlchemy) for accounts, profiles, jobs and requests
- JWT authentication bound to server-side sessions
- Skill-based job filtering for students

Run: uvicorn udyoga_mitra.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from udyoga_mitra import __version__
from udyoga_mitra.api.routes import api_router
from udyoga_mitra.core.config import get_settings
from udyoga_mitra.core.errors import MarketplaceError
from udyoga_mitra.db.database import ping_database
from udyoga_mitra.db.schema import init_db
from udyoga_mitra.utils.logging import configure_logging, get_logger

settings = get_settings()

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed the skill catalog on startup."""
    try:
        init_db(seed=settings.seed_skill_catalog)
        logger.info("Database initialized")
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise
    yield
    logger.info("Shutting down Udyoga Mitra API")


# Create FastAPI app
app = FastAPI(
    title="Udyoga Mitra",
    description="""
    Part-time job marketplace connecting students with employers.

    ## Features
    - **Authentication**: sign-up, login and sign-out for students and employers
    - **Onboarding**: student and employer profiles, skill selection
    - **Jobs**: employers post, edit, close and delete listings
    - **Matching**: students see jobs that fit their skills
    - **Requests**: applications and offers with accept / reject
    - **Messages**: conversation on each request
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    logger.warning(
        "Request failed",
        method=request.method,
        path=request.url.path,
        error=type(exc).__name__,
        status_code=exc.status_code,
        detail=exc.detail
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Udyoga Mitra", "docs": "/docs"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if ping_database() else "disconnected"
    }
