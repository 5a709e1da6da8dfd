import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import get_collaborators
from api.routes.auth import router as auth_router
from api.routes.candidate import router as candidate_router
from api.routes.interviewer import router as interviewer_router
from config.settings import settings
from utils.database import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

DESCRIPTION = """
AI interview platform: résumé-driven technical interviews with automatic scoring.

## Authentication

All endpoints (except `/`, `/ping`, `/health`, `/api/auth/signup` and `/api/auth/login`)
require a bearer token via the `Authorization: Bearer <token>` header.
Get one from `POST /api/auth/login`.

## Candidate flow

1. **Start** → `POST /api/candidate/start` with a résumé file; six questions are generated
2. **Answer** → `POST /api/candidate/submit-answer` once per question
3. **Finalize** → `POST /api/candidate/finalize-interview`; answers are scored and results emailed

## Interview status

| Status | Meaning |
|--------|---------|
| `pending` | Questions assigned by an interviewer, not started |
| `in-progress` | Candidate is answering |
| `completed` | Scored and summarized |
| `failed` | Finalization broke; it can be retried |
"""

tags_metadata = [
    {
        "name": "Health",
        "description": "Health check endpoints. No authentication required.",
    },
    {
        "name": "Auth",
        "description": "Sign up and log in.",
    },
    {
        "name": "Candidate",
        "description": "Take an interview. Start → Submit answers → Finalize.",
    },
    {
        "name": "Interviewer",
        "description": "Scoreboard, reports, résumés and question assignment.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail fast on missing secrets or provider keys
    get_collaborators()
    init_db()
    logger.info("Interview API ready (prefix %s)", settings.API_PREFIX)
    yield


app = FastAPI(
    title="AI Interview API",
    description=DESCRIPTION,
    version="1.0.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400) like every other validation failure."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"Invalid request: {field}: {first.get('msg')}" if field else f"Invalid request: {first.get('msg')}"
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=400, content={"detail": detail})


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information and documentation links"""
    return {
        "message": "Welcome to the AI Interview API",
        "version": "1.0.0",
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "authentication": {
            "type": "Bearer",
            "header": "Authorization",
            "note": "Obtain a token from the login endpoint"
        },
        "endpoints": {
            "health": "/health",
            "ping": "/ping",
            "auth": f"{settings.API_PREFIX}/auth",
            "candidate": f"{settings.API_PREFIX}/candidate",
            "interviewer": f"{settings.API_PREFIX}/interviewer"
        }
    }


# Health check endpoints (public - no authentication required)
@app.get("/ping", tags=["Health"])
def ping():
    """Simple ping endpoint to check if API is responding. No authentication required."""
    return {"message": "pong"}


@app.get("/health", tags=["Health"])
def health():
    """Health check endpoint with basic status information. No authentication required."""
    return {
        "status": "healthy",
        "service": "AI Interview API",
        "version": "1.0.0"
    }


# Register routers
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(candidate_router, prefix=settings.API_PREFIX)
app.include_router(interviewer_router, prefix=settings.API_PREFIX)
