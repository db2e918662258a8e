"""FastAPI application setup."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from exitmatch.cache import MatchCache
from exitmatch.config import settings
from exitmatch.matching import MatchScorer
from .routes import router

# Create FastAPI app
app = FastAPI(
    title="ExitMatch Scoring Core",
    description="Score buyer/business matches and value businesses",
    version="0.1.0",
)

# One cache and scorer per process
app.state.cache = MatchCache(default_ttl=settings.cache_default_ttl)
app.state.scorer = MatchScorer(settings)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


# Include API routes
app.include_router(router, prefix="/api")
