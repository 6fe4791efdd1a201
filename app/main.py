from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from app.database.database import engine, Base

# Import middleware
from app.common.middleware import TenantMiddleware, SecurityHeadersMiddleware

# Import routers
from app.modules.subscriptions.router import router as subscriptions_router

# Import models for table creation
import app.modules.subscriptions.models
import app.modules.tenants.models

from app.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="Voya Subscriptions API",
    description="Subscription entitlements and lifecycle for the Voya multi-tenant platform",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(TenantMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(subscriptions_router)

# Create database tables (only for development - use migrations in production)
if settings.ENVIRONMENT == "development":
    Base.metadata.create_all(bind=engine)

@app.get("/")
async def read_root():
    return {
        "message": "Voya Subscriptions API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}

@app.on_event("startup")
async def startup_event():
    logger.info("Voya Subscriptions API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Voya Subscriptions API shutting down...")
