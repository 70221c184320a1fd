"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.responses import register_error_handlers
from api.routes import books, users
from db import init_db
from settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Create app
app = FastAPI(
    title="eLib API",
    description="API for managing the digital library catalog",
    version="0.1.0",
)

# CORS middleware for the dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_DOMAIN],
    allow_credentials=settings.FRONTEND_DOMAIN != "*",
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Local asset store files are served from the media root
if settings.ASSET_STORE == "local":
    media_path = Path(settings.MEDIA_ROOT)
    media_path.mkdir(parents=True, exist_ok=True)
    app.mount("/media", StaticFiles(directory=str(media_path)), name="media")

# Include routers
app.include_router(books.router, prefix="/api/books", tags=["books"])
app.include_router(users.router, prefix="/api/users", tags=["users"])


@app.on_event("startup")
def startup_event():
    """Initialize database tables on startup."""
    init_db()
    logger.info("eLib API started (asset store: %s)", settings.ASSET_STORE)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "eLib API", "message": "Welcome to elib apis."}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
