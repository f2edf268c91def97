import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import API_PREFIX, CORS_ORIGINS, ENVIRONMENT, LOG_FORMAT, LOG_LEVEL, validate_config
from .database import create_tables
from .error_handlers import register_error_handlers
from .logging_config import setup_logging
from .middleware import log_requests
from .routers import auth, tasks

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Task Tracker API",
    description="Multi-user task tracking API with token authentication",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _log_requests(request: Request, call_next):
    return await log_requests(request, call_next)


register_error_handlers(app)

# Include routers
app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["auth"])
app.include_router(tasks.router, prefix=API_PREFIX, tags=["tasks"])


# Validate settings and create tables on startup
@app.on_event("startup")
def on_startup():
    setup_logging(LOG_LEVEL, LOG_FORMAT)
    validate_config()
    create_tables()
    logger.info(f"Task Tracker API started (environment={ENVIRONMENT})")


@app.get("/")
def read_root():
    return {"message": "Task Tracker API"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
