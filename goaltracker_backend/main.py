from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from database.database import test_connection, init_db
from api import auth, goals, progress, ai_summary
from api.errors import register_exception_handlers
from middleware import user_context_middleware

# Configure reduced logging to minimize console noise
from logging_config import setup_logging
setup_logging()  # Will use LOG_LEVEL environment variable
logger = logging.getLogger(__name__)

app = FastAPI(
    title="GoalTracker API",
    description="Personal goal tracking API",
    version="1.0.0"
)

# Configure CORS with environment variables
def get_cors_origins():
    """Get CORS allowed origins from environment variables."""
    # Check if we should allow all origins (development mode behind a proxy)
    allow_wildcard = os.getenv("ALLOW_CORS_WILDCARD", "false").lower() == "true"
    if allow_wildcard:
        logger.info("CORS: Allowing all origins (wildcard mode)")
        return ["*"]

    default_origins = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:4321",
        "http://localhost:5173",
        "http://127.0.0.1",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:4321",
        "http://127.0.0.1:5173",
    ]

    # Get additional origins from environment variable
    cors_origins_env = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if cors_origins_env == "*":
        logger.info("CORS: Allowing all origins via CORS_ALLOWED_ORIGINS=*")
        return ["*"]
    elif cors_origins_env:
        additional_origins = [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
        all_origins = list(set(default_origins + additional_origins))
        logger.info(f"CORS allowed origins configured: {all_origins}")
        return all_origins

    logger.info(f"CORS allowed origins (defaults): {default_origins}")
    return default_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    max_age=86400,  # 24 hours
)

# Locale and user id for messages and log records
app.middleware("http")(user_context_middleware)

register_exception_handlers(app)

# Include API routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(goals.router, prefix="/api", tags=["goals"])
app.include_router(progress.router, prefix="/api", tags=["progress"])
app.include_router(ai_summary.router, prefix="/api", tags=["ai-summary"])

@app.on_event("startup")
async def startup_event():
    """Initialize the database on startup."""
    try:
        if not test_connection():
            logger.error("Failed to connect to database")
            raise Exception("Database connection failed")

        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        # Continue anyway, as tables might already exist

@app.get("/")
def read_root():
    return {
        "message": "GoalTracker API v1.0",
        "status": "running",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    return {"status": "healthy"}
