"""
FastAPI entrypoint for the TripLedger settlement service.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from tripledger import __version__
from tripledger.core.config import settings
from tripledger.core.logging import setup_logging
from tripledger.api.router import api_router

setup_logging(settings.LOG_LEVEL, debug=settings.DEBUG)

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Group expense balances and settlement suggestions for shared trips",
    version=__version__
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": f"{settings.APP_NAME} API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
