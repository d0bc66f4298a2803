"""
Guest Portal - Main FastAPI Application

Single entry point for the guest portal API (check-in, services, cart,
checkout). Deployed as one Vercel serverless function.
"""
import os
import sys
from pathlib import Path
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

# Add project root to path for Vercel imports
_base_path = Path(__file__).parent.parent
if str(_base_path) not in sys.path:
    sys.path.insert(0, str(_base_path))

from portal.errors import ERROR_CHECK_FORM, PortalError
from portal.logging import clip_text, get_logger, redact_path
from portal.routers.guest import router as guest_router

logger = get_logger(__name__)

CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]


# ==================== FASTAPI APP ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    yield
    # Shutdown
    from portal.services.backend import get_backend_client
    await get_backend_client().close()


app = FastAPI(
    title="Guest Portal",
    description="Property guest check-in, services booking and checkout API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Guest-Session"],
)


# ==================== ERROR HANDLERS ====================

@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, redact_path(request.url.path), clip_text(exc.message))
    else:
        logger.info("%s %s rejected (%s): %s", request.method, redact_path(request.url.path), exc.kind, clip_text(exc.message))
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg") if errors else ERROR_CHECK_FORM
    return JSONResponse(
        {"success": False, "kind": "validation", "message": message},
        status_code=422,
    )


app.include_router(guest_router)


# ==================== HEALTH CHECK ====================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "guest-portal"}
